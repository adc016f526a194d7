"""
Shared pytest fixtures for the character recovery test suite.

Provides:
    - valid_character: a complete character draft that passes validation
    - kv / snapshot_store / backup_manager: in-memory storage stack
    - fake_clock: deterministic clock advancing 1 ms per call
    - fake_timer_host: TimerHost driven by hand through advance(ms)
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Ensure the packages are importable regardless of where pytest is invoked
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from character_recovery.backup_manager import BackupManager  # noqa: E402
from character_recovery.snapshot_store import MemoryKeyValueStore, SnapshotStore  # noqa: E402


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------

class FakeClock:
    """Returns a fixed start time, advancing by *step* on every call."""

    def __init__(self, start=None, step=timedelta(milliseconds=1)):
        self.current = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self):
        value = self.current
        self.current = self.current + self.step
        return value


class FakeTimerHost:
    """Virtual-time TimerHost; callbacks fire only inside advance()."""

    def __init__(self, available=True):
        self.available = available
        self.now = 0
        self._timers = {}
        self._next_handle = 1
        self.cleared = []

    def is_available(self):
        return self.available

    def set_interval(self, callback, interval_ms):
        handle = self._next_handle
        self._next_handle += 1
        self._timers[handle] = [callback, interval_ms, self.now + interval_ms]
        return handle

    def clear_interval(self, handle):
        self.cleared.append(handle)
        self._timers.pop(handle, None)

    @property
    def active(self):
        return len(self._timers)

    def advance(self, ms):
        """Move virtual time forward, firing every due callback in order."""
        target = self.now + ms
        while True:
            due = [
                (entry[2], handle)
                for handle, entry in self._timers.items()
                if entry[2] <= target
            ]
            if not due:
                break
            fire_at, handle = min(due)
            entry = self._timers[handle]
            self.now = fire_at
            entry[2] = fire_at + entry[1]
            entry[0]()
        self.now = target


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def valid_character():
    """Return a character draft with every required field set."""
    return {
        "name": "Elara Moonwhisper",
        "type": "pc",
        "race": "elf",
        "classes": [
            {"class": "wizard", "level": 3, "hitDie": 6},
        ],
        "abilityScores": {
            "strength": 8,
            "dexterity": 14,
            "constitution": 12,
            "intelligence": 16,
            "wisdom": 13,
            "charisma": 10,
        },
        "hitPoints": {"maximum": 17, "current": 17, "temporary": 0},
        "armorClass": 12,
        "proficiencyBonus": 2,
        "savingThrows": {"intelligence": True, "wisdom": True},
    }


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fake_timer_host():
    return FakeTimerHost()


@pytest.fixture
def kv():
    return MemoryKeyValueStore()


@pytest.fixture
def snapshot_store(kv):
    return SnapshotStore(kv)


@pytest.fixture
def backup_manager(snapshot_store, fake_clock):
    return BackupManager(snapshot_store, clock=fake_clock)
