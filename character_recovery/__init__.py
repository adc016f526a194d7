"""
character_recovery -- Character draft backup, validation recovery and auto-save.

Submodules:
    snapshot_store       Best-effort key-value persistence for backups and the auto-save slot.
    backup_manager       Backup lifecycle and retention.
    validation_recovery  Schema validation with classified errors and auto-fixes.
    advisor              Heuristic completeness suggestions for drafts.
    auto_save            Periodic auto-save scheduling over a pluggable timer host.
    recovery_manager     ``CharacterDataRecovery`` facade wiring the above together.
"""

from character_recovery.backup_manager import BackupManager
from character_recovery.errors import (
    BackupNotFoundError,
    NotFoundError,
    RecoveryError,
    StorageQuotaExceeded,
)
from character_recovery.models.records import (
    AutoSaveSlot,
    Backup,
    RecoveryOptions,
    RecoveryResult,
    ValidationErrorWithFix,
)
from character_recovery.recovery_manager import CharacterDataRecovery
from character_recovery.snapshot_store import (
    JsonFileKeyValueStore,
    MemoryKeyValueStore,
    SnapshotStore,
)

__all__ = [
    "AutoSaveSlot",
    "Backup",
    "BackupManager",
    "BackupNotFoundError",
    "CharacterDataRecovery",
    "JsonFileKeyValueStore",
    "MemoryKeyValueStore",
    "NotFoundError",
    "RecoveryError",
    "RecoveryOptions",
    "RecoveryResult",
    "SnapshotStore",
    "StorageQuotaExceeded",
    "ValidationErrorWithFix",
]
