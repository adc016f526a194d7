"""
character_recovery/errors.py -- Exception hierarchy for the recovery engine.

Only two kinds of failure ever reach callers: a restore of an unknown
backup, and programmer errors such as an unknown backup source.  Storage
problems are contained inside ``SnapshotStore``.
"""

from __future__ import annotations


class RecoveryError(Exception):
    """Base class for all character-recovery errors."""


class NotFoundError(RecoveryError):
    """A requested record does not exist."""


class BackupNotFoundError(NotFoundError):
    """Raised by ``restore_from_backup`` when no backup has the given ID."""

    def __init__(self, backup_id: str):
        self.backup_id = backup_id
        super().__init__(f'Backup with ID "{backup_id}" not found')


class StorageQuotaExceeded(OSError):
    """Raised by a key-value store when a write would exceed its capacity."""

    def __init__(self, key: str, needed: int, quota: int):
        self.key = key
        self.needed = needed
        self.quota = quota
        super().__init__(
            f"Storage quota exceeded writing '{key}': "
            f"{needed} bytes needed, quota is {quota} bytes"
        )
