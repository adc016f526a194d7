"""
character_recovery/backup_manager.py -- Backup lifecycle for character drafts.

Creates, lists, filters, restores and deletes draft backups, and keeps the
persisted collection within its retention limit (the newest ``max_backups``
by timestamp).  Also owns the single auto-save slot that the auto-save
scheduler writes to.

Storage is best-effort: ``create_backup`` always returns the new backup,
even if the snapshot store silently failed to persist it.  The only call
that fails loudly is ``restore_from_backup`` on an unknown ID.

Usage::

    from character_recovery.backup_manager import BackupManager
    from character_recovery.snapshot_store import MemoryKeyValueStore, SnapshotStore

    bm = BackupManager(SnapshotStore(MemoryKeyValueStore()))
    backup = bm.create_backup(draft, source="pre-operation", character_id="char1")
    draft = bm.restore_from_backup(backup.id)
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from character_recovery.errors import BackupNotFoundError
from character_recovery.models.records import AutoSaveSlot, Backup, BackupSource
from character_recovery.snapshot_store import SnapshotStore
from character_recovery.utils import clone_data, is_present, now_utc

logger = logging.getLogger(__name__)

DEFAULT_MAX_BACKUPS = 10

# Fields whose presence marks a backup as worth restoring.
_ESSENTIAL_FIELDS = ("name", "race", "classes", "abilityScores")


def _generate_backup_id(timestamp: datetime) -> str:
    """Return an ID of the form ``backup_<epoch-ms>_<12 hex chars>``."""
    millis = int(timestamp.timestamp() * 1000)
    return f"backup_{millis}_{secrets.token_hex(6)}"


def _snapshot(draft: Any) -> dict[str, Any]:
    """Return a storable copy of *draft*.

    Anything that is not a mapping becomes ``{}``; top-level keys are
    stringified so the copy always fits the record schema.
    """
    if not isinstance(draft, Mapping):
        return {}
    return {str(key): value for key, value in clone_data(draft).items()}


def looks_restorable(draft: Any) -> bool:
    """Cheap presence check: does the draft hold any essential field?

    This is deliberately not schema validation; it only tells the UI
    whether a backup is worth offering.
    """
    if not isinstance(draft, Mapping):
        return False
    return any(is_present(draft.get(name)) for name in _ESSENTIAL_FIELDS)


# ---------------------------------------------------------------------------
# BackupManager
# ---------------------------------------------------------------------------

class BackupManager:
    """Manages creation, listing, restoration, deletion and retention of
    character draft backups.

    Parameters
    ----------
    store : SnapshotStore
        Where backups and the auto-save slot are persisted.
    max_backups : int
        Retention limit for the backup collection (default 10).
    clock : callable
        Returns the current aware ``datetime``; injectable for tests.
    """

    def __init__(
        self,
        store: SnapshotStore,
        max_backups: int = DEFAULT_MAX_BACKUPS,
        clock: Callable[[], datetime] = now_utc,
    ):
        if max_backups < 1:
            raise ValueError("max_backups must be at least 1")
        self.store = store
        self.max_backups = max_backups
        self._clock = clock

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_backup(
        self,
        draft_data: Mapping[str, Any],
        source: BackupSource = "manual",
        character_id: str | None = None,
    ) -> Backup:
        """Snapshot *draft_data* and append it to the stored collection.

        Parameters
        ----------
        draft_data : mapping
            Any partial character draft; it may be incomplete or invalid.
            Non-mapping input is stored as an empty draft.
        source : str
            ``"auto-save"``, ``"manual"`` or ``"pre-operation"``.
        character_id : str, optional
            The character the draft belongs to, if it already exists.

        Returns
        -------
        Backup
            The new backup.  Returned even when persistence failed.
        """
        timestamp = self._clock()
        backup = Backup(
            id=_generate_backup_id(timestamp),
            timestamp=timestamp,
            character_id=character_id,
            data=_snapshot(draft_data),
            source=source,
            is_valid=looks_restorable(draft_data),
        )

        backups = self.store.read_backup_list()
        backups.append(backup)
        if self.store.write_backup_list(backups):
            logger.debug("Created %s backup %s", source, backup.id)
        self._apply_retention()

        return backup

    def _apply_retention(self) -> None:
        """Keep only the newest ``max_backups`` entries in the store."""
        backups = self.store.read_backup_list()
        if len(backups) <= self.max_backups:
            return
        # sorted() is stable, so equal timestamps keep their stored order.
        newest = sorted(backups, key=lambda b: b.timestamp, reverse=True)
        kept = newest[: self.max_backups]
        logger.info(
            "Evicting %d old backup(s), keeping %d",
            len(backups) - len(kept), len(kept),
        )
        self.store.write_backup_list(kept)

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def get_all_backups(self) -> list[Backup]:
        """Return every stored backup in stored order."""
        return self.store.read_backup_list()

    def get_character_backups(self, character_id: str) -> list[Backup]:
        """Return the backups of one character, preserving stored order."""
        return [b for b in self.get_all_backups() if b.character_id == character_id]

    def get_latest_backup(self, character_id: str | None = None) -> Backup | None:
        """Return the newest backup, optionally limited to one character."""
        if character_id is None:
            backups = self.get_all_backups()
        else:
            backups = self.get_character_backups(character_id)
        if not backups:
            return None
        return max(backups, key=lambda b: b.timestamp)

    # ------------------------------------------------------------------
    # Restore / delete
    # ------------------------------------------------------------------

    def restore_from_backup(self, backup_id: str) -> dict[str, Any]:
        """Return an independent copy of the draft stored in *backup_id*.

        Raises
        ------
        BackupNotFoundError
            If no stored backup has that ID.
        """
        for backup in self.get_all_backups():
            if backup.id == backup_id:
                return clone_data(backup.data)
        raise BackupNotFoundError(backup_id)

    def delete_backup(self, backup_id: str) -> None:
        """Remove one backup.  Unknown IDs are ignored."""
        backups = [b for b in self.get_all_backups() if b.id != backup_id]
        self.store.write_backup_list(backups)

    def clear_all_backups(self) -> None:
        """Remove the whole backup collection."""
        self.store.clear_backup_list()

    # ------------------------------------------------------------------
    # Auto-save slot
    # ------------------------------------------------------------------

    def auto_save_character_data(
        self,
        draft_data: Mapping[str, Any],
        character_id: str | None = None,
    ) -> bool:
        """Replace the auto-save slot with a copy of *draft_data*.

        Returns True if the store accepted the write.
        """
        slot = AutoSaveSlot(
            data=_snapshot(draft_data),
            timestamp=self._clock(),
            character_id=character_id,
        )
        return self.store.write_auto_save(slot)

    def get_auto_saved_data(self) -> AutoSaveSlot | None:
        """Return the current auto-save slot, if any."""
        return self.store.read_auto_save()

    def clear_auto_saved_data(self) -> None:
        """Drop the auto-save slot, typically after a successful real save."""
        self.store.clear_auto_save()
