"""
character_recovery/snapshot_store.py -- Best-effort persistence for character snapshots.

Two logical collections live in an opaque key-value store:

    dnd_character_backups   JSON array of Backup records
    dnd_character_autosave  JSON object holding the single auto-save slot

``SnapshotStore`` is the only component that touches the key-value store.
Every one of its methods guarantees that it never raises: missing keys,
corrupt JSON, records that no longer match the schema, quota errors and
any other storage exception are logged as warnings and turned into an
empty / absent result (reads) or a ``False`` return (writes).  Backups are
a convenience; losing one must never break the authoring flow.

Usage::

    from character_recovery.snapshot_store import MemoryKeyValueStore, SnapshotStore

    store = SnapshotStore(MemoryKeyValueStore())
    backups = store.read_backup_list()
    store.write_backup_list(backups)
"""

from __future__ import annotations

import json
import logging
import os
import re
from typing import Protocol

from pydantic import TypeAdapter

from character_recovery.errors import StorageQuotaExceeded
from character_recovery.models.records import AutoSaveSlot, Backup
from character_recovery.utils import atomic_write_text, read_text

logger = logging.getLogger(__name__)

BACKUPS_KEY = "dnd_character_backups"
AUTO_SAVE_KEY = "dnd_character_autosave"

_BACKUP_LIST = TypeAdapter(list[Backup])


# ---------------------------------------------------------------------------
# Key-value stores
# ---------------------------------------------------------------------------

class KeyValueStore(Protocol):
    """Minimal string key-value storage, e.g. a browser-style local storage."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryKeyValueStore:
    """In-process key-value store with an optional capacity limit.

    Parameters
    ----------
    quota_bytes : int, optional
        Maximum total UTF-8 size of all stored values.  A ``set`` that
        would exceed it raises ``StorageQuotaExceeded`` and leaves the
        previous value in place.
    """

    def __init__(self, quota_bytes: int | None = None):
        self.quota_bytes = quota_bytes
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            used = sum(
                len(v.encode("utf-8")) for k, v in self._data.items() if k != key
            )
            needed = used + len(value.encode("utf-8"))
            if needed > self.quota_bytes:
                raise StorageQuotaExceeded(key, needed, self.quota_bytes)
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)

    def clear(self) -> None:
        self._data.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)


_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileKeyValueStore:
    """Key-value store keeping one ``<key>.json`` file per key in *directory*.

    Writes are atomic (temp file then ``os.replace``).  Keys are restricted
    to letters, digits, ``_``, ``.`` and ``-`` so they map to plain file
    names.
    """

    def __init__(self, directory: str):
        self.directory = str(directory)

    def _path(self, key: str) -> str:
        if not _SAFE_KEY.match(key) or key.startswith("."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return os.path.join(self.directory, f"{key}.json")

    def get(self, key: str) -> str | None:
        return read_text(self._path(key))

    def set(self, key: str, value: str) -> None:
        atomic_write_text(self._path(key), value)

    def remove(self, key: str) -> None:
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            pass


# ---------------------------------------------------------------------------
# SnapshotStore
# ---------------------------------------------------------------------------

class SnapshotStore:
    """Serialises backups and the auto-save slot into a ``KeyValueStore``.

    Parameters
    ----------
    kv : KeyValueStore
        The shared, process-wide key-value store.  No locking is done;
        the last write to a key wins.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        backups_key: str = BACKUPS_KEY,
        auto_save_key: str = AUTO_SAVE_KEY,
    ):
        self.kv = kv
        self.backups_key = backups_key
        self.auto_save_key = auto_save_key

    # ------------------------------------------------------------------
    # Backup list
    # ------------------------------------------------------------------

    def read_backup_list(self) -> list[Backup]:
        """Return every stored backup, or ``[]`` if nothing usable is stored.

        Never raises.
        """
        try:
            raw = self.kv.get(self.backups_key)
            if not raw:
                return []
            return _BACKUP_LIST.validate_json(raw)
        except Exception as exc:
            logger.warning("Failed to retrieve backups: %s", exc)
            return []

    def write_backup_list(self, backups: list[Backup]) -> bool:
        """Replace the stored backup list.  Never raises.

        Returns
        -------
        bool
            True if the store accepted the write.  Callers must not treat
            a True result as a durability guarantee either.
        """
        try:
            payload = json.dumps(
                [backup.to_record() for backup in backups], ensure_ascii=False
            )
            self.kv.set(self.backups_key, payload)
        except Exception as exc:
            logger.warning("Failed to save backups to storage: %s", exc)
            return False
        return True

    def clear_backup_list(self) -> bool:
        """Remove the whole backup collection.  Never raises."""
        try:
            self.kv.remove(self.backups_key)
        except Exception as exc:
            logger.warning("Failed to clear backups: %s", exc)
            return False
        return True

    # ------------------------------------------------------------------
    # Auto-save slot
    # ------------------------------------------------------------------

    def read_auto_save(self) -> AutoSaveSlot | None:
        """Return the auto-save slot, or None if absent or unreadable.

        Never raises.
        """
        try:
            raw = self.kv.get(self.auto_save_key)
            if not raw:
                return None
            return AutoSaveSlot.model_validate_json(raw)
        except Exception as exc:
            logger.warning("Failed to retrieve auto-saved data: %s", exc)
            return None

    def write_auto_save(self, slot: AutoSaveSlot) -> bool:
        """Overwrite the auto-save slot.  Never raises."""
        try:
            payload = json.dumps(slot.to_record(), ensure_ascii=False)
            self.kv.set(self.auto_save_key, payload)
        except Exception as exc:
            logger.warning("Failed to auto-save character data: %s", exc)
            return False
        return True

    def clear_auto_save(self) -> bool:
        """Remove the auto-save slot.  Never raises."""
        try:
            self.kv.remove(self.auto_save_key)
        except Exception as exc:
            logger.warning("Failed to clear auto-saved data: %s", exc)
            return False
        return True
