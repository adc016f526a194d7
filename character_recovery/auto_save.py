"""
character_recovery/auto_save.py -- Periodic auto-save of the live character draft.

The scheduler registers a repeating timer on a ``TimerHost`` and, on every
tick, snapshots the current draft into the backup manager's single
auto-save slot.  Empty drafts are skipped.  Ticks run synchronously on the
host's thread; a failing tick is logged and the schedule keeps running.

Timer hosts are pluggable: the desktop app uses a Qt event-loop host
(``app.services.qt_timer_host``), tests drive a fake host by hand.  With
no host, or a host that reports itself unavailable, ``start`` schedules
nothing and returns a no-op cancel function.

Usage::

    scheduler = AutoSaveScheduler(backup_manager, timer_host)
    cancel = scheduler.start(lambda: form.current_draft(), "char-42",
                             {"autoSaveInterval": 5000})
    ...
    cancel()
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable, Mapping
from typing import Any, Protocol, Union

from character_recovery.backup_manager import BackupManager
from character_recovery.models.records import RecoveryOptions
from character_recovery.utils import has_content

logger = logging.getLogger(__name__)

DraftProvider = Union[Callable[[], Any], Mapping[str, Any]]
CancelFunction = Callable[[], None]


class TimerHost(Protocol):
    """Something that can run a callback every N milliseconds."""

    def is_available(self) -> bool: ...

    def set_interval(self, callback: Callable[[], None], interval_ms: int) -> Any: ...

    def clear_interval(self, handle: Any) -> None: ...


def _noop() -> None:
    return None


class AutoSaveScheduler:
    """Runs repeating auto-save schedules for character drafts.

    Parameters
    ----------
    backup_manager : BackupManager
        Owner of the auto-save slot.
    timer_host : TimerHost, optional
        Timer implementation.  None means no timers are available.
    """

    def __init__(self, backup_manager: BackupManager, timer_host: TimerHost | None = None):
        self.backup_manager = backup_manager
        self.timer_host = timer_host
        self._cancels: dict[int, CancelFunction] = {}
        self._ids = itertools.count(1)

    @property
    def active_count(self) -> int:
        """Number of schedules that have not been cancelled."""
        return len(self._cancels)

    def start(
        self,
        draft_provider: DraftProvider,
        character_id: str | None = None,
        options: RecoveryOptions | Mapping[str, Any] | None = None,
    ) -> CancelFunction:
        """Begin auto-saving the draft returned by *draft_provider*.

        Parameters
        ----------
        draft_provider : callable or mapping
            A zero-argument callable returning the current draft, or the
            live draft mapping itself (read afresh on every tick).
        character_id : str, optional
            Stored alongside the snapshot.
        options : RecoveryOptions or mapping, optional
            ``enableAutoSave`` (default True) and ``autoSaveInterval`` in
            milliseconds (default 30000).

        Returns
        -------
        callable
            Stops the schedule.  Safe to call more than once.
        """
        opts = RecoveryOptions.coerce(options)
        if not opts.enable_auto_save:
            logger.debug("Auto-save disabled by options")
            return _noop

        host = self.timer_host
        if host is None or not host.is_available():
            logger.debug("No timer host available; auto-save not scheduled")
            return _noop

        if callable(draft_provider):
            provider = draft_provider
        else:
            provider = lambda: draft_provider  # noqa: E731

        def tick() -> None:
            self._tick(provider, character_id)

        handle = host.set_interval(tick, opts.auto_save_interval)
        schedule_id = next(self._ids)
        cancelled = False

        def cancel() -> None:
            nonlocal cancelled
            if cancelled:
                return
            cancelled = True
            self._cancels.pop(schedule_id, None)
            host.clear_interval(handle)
            logger.debug("Auto-save schedule %d cancelled", schedule_id)

        self._cancels[schedule_id] = cancel
        logger.debug(
            "Auto-save schedule %d started (every %d ms, character=%s)",
            schedule_id, opts.auto_save_interval, character_id,
        )
        return cancel

    def cancel_all(self) -> None:
        """Stop every active schedule."""
        for cancel in list(self._cancels.values()):
            cancel()

    def _tick(self, provider: Callable[[], Any], character_id: str | None) -> None:
        try:
            draft = provider()
            if not has_content(draft):
                return
            self.backup_manager.auto_save_character_data(draft, character_id)
        except Exception:
            logger.exception("Auto-save tick failed")
