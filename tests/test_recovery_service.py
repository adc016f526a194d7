"""
Tests for app/services/recovery_service.py -- RecoveryService singleton and signals.
"""

import os
from unittest.mock import MagicMock

import pytest
from PySide6.QtCore import QCoreApplication

from app.services.recovery_service import RecoveryService
from character_recovery.errors import BackupNotFoundError
from character_recovery.snapshot_store import BACKUPS_KEY


@pytest.fixture(autouse=True)
def _reset_recovery_service():
    """Ensure each test starts with a fresh RecoveryService."""
    RecoveryService.reset()
    yield
    RecoveryService.reset()


@pytest.fixture()
def _ensure_qapp():
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


# ------------------------------------------------------------------
# Singleton tests
# ------------------------------------------------------------------


class TestSingleton:
    def test_instance_returns_same_object(self, tmp_path, _ensure_qapp):
        s1 = RecoveryService.instance(str(tmp_path))
        s2 = RecoveryService.instance()
        assert s1 is s2
        assert s1.storage_dir == str(tmp_path)

    def test_reset_clears_instance(self, tmp_path, _ensure_qapp):
        s1 = RecoveryService.instance(str(tmp_path))
        RecoveryService.reset()
        s2 = RecoveryService.instance(str(tmp_path))
        assert s1 is not s2


# ------------------------------------------------------------------
# Backups and signals
# ------------------------------------------------------------------


class TestBackups:
    def test_backup_written_to_disk(self, tmp_path, _ensure_qapp):
        service = RecoveryService.instance(str(tmp_path))
        service.create_backup({"name": "Aria"}, "manual", "char1")
        assert os.path.exists(tmp_path / f"{BACKUPS_KEY}.json")

    def test_backup_created_signal(self, tmp_path, _ensure_qapp):
        service = RecoveryService.instance(str(tmp_path))
        receiver = MagicMock()
        service.backup_created.connect(receiver)
        backup = service.create_backup({"name": "Aria"})
        receiver.assert_called_once_with(backup.id)

    def test_backup_restored_signal(self, tmp_path, _ensure_qapp):
        service = RecoveryService.instance(str(tmp_path))
        receiver = MagicMock()
        service.backup_restored.connect(receiver)
        backup = service.create_backup({"name": "Aria"})
        assert service.restore_from_backup(backup.id) == {"name": "Aria"}
        receiver.assert_called_once_with(backup.id)

    def test_failed_restore_emits_nothing(self, tmp_path, _ensure_qapp):
        service = RecoveryService.instance(str(tmp_path))
        receiver = MagicMock()
        service.backup_restored.connect(receiver)
        with pytest.raises(BackupNotFoundError):
            service.restore_from_backup("missing")
        receiver.assert_not_called()

    def test_backups_survive_restart(self, tmp_path, _ensure_qapp):
        backup = RecoveryService.instance(str(tmp_path)).create_backup({"name": "Aria"})
        RecoveryService.reset()
        service = RecoveryService.instance(str(tmp_path))
        assert service.recovery.get_latest_backup().id == backup.id


# ------------------------------------------------------------------
# Auto-save
# ------------------------------------------------------------------


class TestAutoSave:
    def test_start_auto_save_creates_qt_timer(self, tmp_path, _ensure_qapp):
        service = RecoveryService.instance(str(tmp_path))
        service.start_auto_save(lambda: {"name": "Aria"}, "char1")
        assert service.timer_host.active_timers == 1

    def test_shutdown_stops_timers(self, tmp_path, _ensure_qapp):
        service = RecoveryService.instance(str(tmp_path))
        service.start_auto_save(lambda: {"name": "Aria"})
        service.start_auto_save(lambda: {"name": "Bryn"})
        service.shutdown()
        assert service.timer_host.active_timers == 0
        assert service.recovery.scheduler.active_count == 0

    def test_disabled_auto_save(self, tmp_path, _ensure_qapp):
        service = RecoveryService.instance(str(tmp_path))
        service.start_auto_save(lambda: {"name": "Aria"}, options={"enableAutoSave": False})
        assert service.timer_host.active_timers == 0
