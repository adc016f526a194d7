"""
app/services/recovery_service.py -- Process-wide character recovery service.

Singleton that owns the application's ``CharacterDataRecovery``: snapshots
are kept as JSON files in the per-user data directory and auto-save runs
on Qt event-loop timers.  Qt signals let panels react to backups being
created or restored without holding a reference to the engine.

Usage::

    from app.services.recovery_service import RecoveryService

    service = RecoveryService.instance()
    service.backup_created.connect(on_backup)
    cancel = service.start_auto_save(form.current_draft, "char-42")
    ...
    service.shutdown()
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any

from PySide6.QtCore import QObject, Signal

from app.paths import get_storage_dir
from app.services.qt_timer_host import QtTimerHost
from character_recovery.auto_save import CancelFunction, DraftProvider
from character_recovery.models.records import Backup, BackupSource, RecoveryOptions
from character_recovery.recovery_manager import CharacterDataRecovery
from character_recovery.snapshot_store import JsonFileKeyValueStore

logger = logging.getLogger(__name__)


class RecoveryService(QObject):
    """Application-wide access point for character draft recovery.

    Signals
    -------
    backup_created(str)
        Emitted after a backup is created.  Payload is the backup ID.
    backup_restored(str)
        Emitted after a backup is restored.  Payload is the backup ID.
    """

    backup_created = Signal(str)
    backup_restored = Signal(str)

    _instance: RecoveryService | None = None
    _lock = threading.Lock()

    def __init__(
        self,
        storage_dir: str,
        options: RecoveryOptions | Mapping[str, Any] | None = None,
        parent: QObject | None = None,
    ):
        super().__init__(parent)
        self.storage_dir = storage_dir
        self.timer_host = QtTimerHost(self)
        self.recovery = CharacterDataRecovery(
            JsonFileKeyValueStore(storage_dir),
            options=options,
            timer_host=self.timer_host,
        )
        logger.info("Recovery service using storage at %s", storage_dir)

    @classmethod
    def instance(cls, storage_dir: str = "") -> RecoveryService:
        """Return the singleton, creating it on first use.

        *storage_dir* is only used on the first call; by default snapshots
        go to the platform user data directory.
        """
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls(storage_dir or get_storage_dir())
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Shut down and drop the singleton (for testing)."""
        with cls._lock:
            if cls._instance is not None:
                cls._instance.shutdown()
                cls._instance.deleteLater()
            cls._instance = None

    # ------------------------------------------------------------------
    # Backups
    # ------------------------------------------------------------------

    def create_backup(
        self,
        draft_data: Mapping[str, Any],
        source: BackupSource = "manual",
        character_id: str | None = None,
    ) -> Backup:
        backup = self.recovery.create_backup(draft_data, source, character_id)
        self.backup_created.emit(backup.id)
        return backup

    def restore_from_backup(self, backup_id: str) -> dict[str, Any]:
        """Restore a draft; raises ``BackupNotFoundError`` for unknown IDs."""
        data = self.recovery.restore_from_backup(backup_id)
        self.backup_restored.emit(backup_id)
        return data

    # ------------------------------------------------------------------
    # Auto-save
    # ------------------------------------------------------------------

    def start_auto_save(
        self,
        draft_provider: DraftProvider,
        character_id: str | None = None,
        options: RecoveryOptions | Mapping[str, Any] | None = None,
    ) -> CancelFunction:
        return self.recovery.start_auto_save(draft_provider, character_id, options)

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def shutdown(self) -> None:
        """Stop every auto-save schedule and release its timers."""
        self.recovery.stop_all_auto_saves()
        self.timer_host.stop_all()
