"""
Tests for app/main.py -- startup, file validation and shutdown.
"""

import json
import logging
import sys

import pytest
from PySide6.QtCore import QCoreApplication

from app import main as app_main
from app.services.recovery_service import RecoveryService


@pytest.fixture(autouse=True)
def _isolate_process_state(monkeypatch):
    """Keep the singleton, excepthook and root logger as they were."""
    RecoveryService.reset()
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    root = logging.getLogger()
    level = root.level
    handlers = list(root.handlers)
    yield
    RecoveryService.reset()
    root.setLevel(level)
    root.handlers[:] = handlers


@pytest.fixture()
def _ensure_qapp():
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


class TestBootstrap:
    def test_services_share_one_recovery_engine(self, tmp_path, _ensure_qapp):
        service, validation = app_main.bootstrap(str(tmp_path))
        assert service is RecoveryService.instance()
        assert validation.recovery is service.recovery


class TestMain:
    def test_valid_file_is_backed_up(self, tmp_path, _ensure_qapp, valid_character):
        path = _write(tmp_path / "elara.json", valid_character)
        storage = tmp_path / "store"
        assert app_main.main(["--storage-dir", str(storage), path]) == 0

        service, _ = app_main.bootstrap(str(storage))
        backup = service.recovery.get_latest_backup("elara")
        assert backup.source == "pre-operation"

    def test_invalid_file_fails(self, tmp_path, _ensure_qapp, caplog):
        path = _write(tmp_path / "broken.json", {"name": ""})
        with caplog.at_level(logging.WARNING):
            code = app_main.main(["--storage-dir", str(tmp_path / "store"), path])
        assert code == 1
        assert "validation error" in caplog.text

    def test_unreadable_file_fails(self, tmp_path, _ensure_qapp):
        bad = tmp_path / "bad.json"
        bad.write_text("{nope", encoding="utf-8")
        code = app_main.main(["--storage-dir", str(tmp_path / "store"), str(bad)])
        assert code == 1

    def test_shutdown_releases_singleton(self, tmp_path, _ensure_qapp):
        app_main.main(["--storage-dir", str(tmp_path)])
        assert RecoveryService._instance is None

    def test_no_files_succeeds(self, tmp_path, _ensure_qapp):
        assert app_main.main(["--storage-dir", str(tmp_path)]) == 0
