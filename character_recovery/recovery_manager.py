"""
character_recovery/recovery_manager.py -- Facade over the recovery subsystem.

``CharacterDataRecovery`` wires the snapshot store, backup manager,
validation-recovery engine, advisor and auto-save scheduler together with
one shared ``RecoveryOptions``.  UI code talks to this object; the parts
remain usable on their own.

Usage::

    from character_recovery.recovery_manager import CharacterDataRecovery
    from character_recovery.snapshot_store import MemoryKeyValueStore

    recovery = CharacterDataRecovery(MemoryKeyValueStore())
    backup = recovery.create_backup(draft, "manual", "char-42")
    result = recovery.validate_with_recovery(draft)
    tips = recovery.generate_recovery_suggestions(draft)
    cancel = recovery.start_auto_save(get_draft, "char-42")
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from character_recovery.advisor import generate_recovery_suggestions
from character_recovery.auto_save import AutoSaveScheduler, CancelFunction, DraftProvider, TimerHost
from character_recovery.backup_manager import BackupManager
from character_recovery.models.character import validate_character_data
from character_recovery.models.records import (
    AutoSaveSlot,
    Backup,
    BackupSource,
    RecoveryOptions,
    RecoveryResult,
)
from character_recovery.snapshot_store import KeyValueStore, MemoryKeyValueStore, SnapshotStore
from character_recovery.utils import now_utc
from character_recovery.validation_recovery import ValidationRecoveryEngine, Validator

logger = logging.getLogger(__name__)


class CharacterDataRecovery:
    """Backups, validation recovery, suggestions and auto-save for drafts.

    Parameters
    ----------
    kv : KeyValueStore, optional
        Backing key-value store.  Defaults to a fresh in-memory store.
    options : RecoveryOptions or mapping, optional
        Shared defaults for retention, auto-save and suggested fixes.
    validator : callable, optional
        Schema validator for ``validate_with_recovery``.
    timer_host : TimerHost, optional
        Timer implementation for auto-save; None disables auto-save.
    clock : callable, optional
        Source of the current time for backup timestamps.
    """

    def __init__(
        self,
        kv: KeyValueStore | None = None,
        options: RecoveryOptions | Mapping[str, Any] | None = None,
        validator: Validator = validate_character_data,
        timer_host: TimerHost | None = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.options = RecoveryOptions.coerce(options)
        self.store = SnapshotStore(kv if kv is not None else MemoryKeyValueStore())
        self.backups = BackupManager(
            self.store, max_backups=self.options.max_backups, clock=clock,
        )
        self.validation = ValidationRecoveryEngine(
            validator, enable_suggested_fixes=self.options.enable_suggested_fixes,
        )
        self.scheduler = AutoSaveScheduler(self.backups, timer_host)

    # ------------------------------------------------------------------
    # Backups
    # ------------------------------------------------------------------

    def create_backup(
        self,
        draft_data: Mapping[str, Any],
        source: BackupSource = "manual",
        character_id: str | None = None,
    ) -> Backup:
        return self.backups.create_backup(draft_data, source, character_id)

    def get_all_backups(self) -> list[Backup]:
        return self.backups.get_all_backups()

    def get_character_backups(self, character_id: str) -> list[Backup]:
        return self.backups.get_character_backups(character_id)

    def get_latest_backup(self, character_id: str | None = None) -> Backup | None:
        return self.backups.get_latest_backup(character_id)

    def restore_from_backup(self, backup_id: str) -> dict[str, Any]:
        return self.backups.restore_from_backup(backup_id)

    def delete_backup(self, backup_id: str) -> None:
        self.backups.delete_backup(backup_id)

    def clear_all_backups(self) -> None:
        self.backups.clear_all_backups()

    # ------------------------------------------------------------------
    # Auto-save
    # ------------------------------------------------------------------

    def auto_save_character_data(
        self,
        draft_data: Mapping[str, Any],
        character_id: str | None = None,
    ) -> bool:
        return self.backups.auto_save_character_data(draft_data, character_id)

    def get_auto_saved_data(self) -> AutoSaveSlot | None:
        return self.backups.get_auto_saved_data()

    def clear_auto_saved_data(self) -> None:
        self.backups.clear_auto_saved_data()

    def start_auto_save(
        self,
        draft_provider: DraftProvider,
        character_id: str | None = None,
        options: RecoveryOptions | Mapping[str, Any] | None = None,
    ) -> CancelFunction:
        """Start periodic auto-save; *options* override the shared defaults."""
        if options is None:
            opts = self.options
        elif isinstance(options, RecoveryOptions):
            opts = options
        else:
            opts = self.options.merged(options)
        return self.scheduler.start(draft_provider, character_id, opts)

    def stop_all_auto_saves(self) -> None:
        self.scheduler.cancel_all()

    # ------------------------------------------------------------------
    # Validation and advice
    # ------------------------------------------------------------------

    def validate_with_recovery(self, draft_data: Any) -> RecoveryResult:
        return self.validation.validate_with_recovery(draft_data)

    def generate_recovery_suggestions(self, draft_data: Mapping[str, Any]) -> list[str]:
        return generate_recovery_suggestions(draft_data)
