"""
Tests for character_recovery/recovery_manager.py -- the CharacterDataRecovery facade.
"""

import pytest

from character_recovery import (
    BackupNotFoundError,
    CharacterDataRecovery,
    MemoryKeyValueStore,
    RecoveryOptions,
)
from character_recovery.advisor import SUGGEST_NAME


@pytest.fixture
def recovery(kv, fake_timer_host, fake_clock):
    return CharacterDataRecovery(kv, timer_host=fake_timer_host, clock=fake_clock)


class TestConstruction:
    def test_defaults(self):
        recovery = CharacterDataRecovery()
        assert recovery.options == RecoveryOptions()
        assert recovery.backups.max_backups == 10
        assert recovery.validation.enable_suggested_fixes is True

    def test_options_from_camel_case_mapping(self, kv):
        recovery = CharacterDataRecovery(kv, {"maxBackups": 3, "enableSuggestedFixes": False})
        assert recovery.backups.max_backups == 3
        assert recovery.validation.enable_suggested_fixes is False
        assert recovery.options.auto_save_interval == 30_000

    def test_options_from_snake_case_mapping(self, kv):
        recovery = CharacterDataRecovery(kv, {"max_backups": 4})
        assert recovery.options.max_backups == 4

    def test_invalid_options_rejected(self, kv):
        with pytest.raises(ValueError):
            CharacterDataRecovery(kv, {"maxBackups": 0})


class TestBackupDelegation:
    def test_backup_lifecycle(self, recovery, valid_character):
        backup = recovery.create_backup(valid_character, "manual", "char1")
        assert recovery.get_all_backups()[0].id == backup.id
        assert recovery.get_character_backups("char1")[0].id == backup.id
        assert recovery.get_latest_backup("char1").id == backup.id
        assert recovery.restore_from_backup(backup.id) == valid_character
        recovery.delete_backup(backup.id)
        with pytest.raises(BackupNotFoundError):
            recovery.restore_from_backup(backup.id)

    def test_clear_all_backups(self, recovery):
        recovery.create_backup({"name": "A"})
        recovery.clear_all_backups()
        assert recovery.get_all_backups() == []

    def test_retention_follows_options(self, kv, fake_clock):
        recovery = CharacterDataRecovery(kv, {"maxBackups": 2}, clock=fake_clock)
        for i in range(5):
            recovery.create_backup({"name": f"c{i}"})
        assert len(recovery.get_all_backups()) == 2

    def test_shared_store_between_instances(self, kv, fake_clock):
        writer = CharacterDataRecovery(kv, clock=fake_clock)
        backup = writer.create_backup({"name": "Shared"})
        reader = CharacterDataRecovery(kv)
        assert reader.restore_from_backup(backup.id) == {"name": "Shared"}


class TestAutoSave:
    def test_manual_auto_save_slot(self, recovery):
        assert recovery.auto_save_character_data({"name": "A"}, "char1") is True
        assert recovery.get_auto_saved_data().character_id == "char1"
        recovery.clear_auto_saved_data()
        assert recovery.get_auto_saved_data() is None

    def test_start_auto_save_uses_override(self, recovery, fake_timer_host):
        recovery.start_auto_save(lambda: {"name": "A"}, "char1", {"autoSaveInterval": 500})
        fake_timer_host.advance(500)
        assert recovery.get_auto_saved_data().data == {"name": "A"}

    def test_shared_options_disable_auto_save(self, kv, fake_timer_host):
        recovery = CharacterDataRecovery(
            kv, {"enableAutoSave": False}, timer_host=fake_timer_host,
        )
        recovery.start_auto_save(lambda: {"name": "A"})
        assert fake_timer_host.active == 0

    def test_override_keeps_shared_interval(self, kv, fake_timer_host):
        recovery = CharacterDataRecovery(
            kv, {"autoSaveInterval": 200}, timer_host=fake_timer_host,
        )
        recovery.start_auto_save(lambda: {"name": "A"}, options={"enableAutoSave": True})
        fake_timer_host.advance(200)
        assert recovery.get_auto_saved_data() is not None

    def test_stop_all_auto_saves(self, recovery, fake_timer_host):
        recovery.start_auto_save(lambda: {"name": "A"})
        recovery.start_auto_save(lambda: {"name": "B"})
        recovery.stop_all_auto_saves()
        assert fake_timer_host.active == 0

    def test_without_timer_host(self):
        recovery = CharacterDataRecovery(MemoryKeyValueStore())
        cancel = recovery.start_auto_save(lambda: {"name": "A"})
        cancel()
        assert recovery.scheduler.active_count == 0


class TestValidationAndAdvice:
    def test_validate_with_recovery(self, recovery, valid_character):
        valid_character["abilityScores"]["wisdom"] = 40
        result = recovery.validate_with_recovery(valid_character)
        assert result.suggested_fixes == {"abilityScores.wisdom": 20}

    def test_suggestions_disabled_by_options(self, kv, valid_character):
        recovery = CharacterDataRecovery(kv, {"enableSuggestedFixes": False})
        valid_character["abilityScores"]["wisdom"] = 40
        result = recovery.validate_with_recovery(valid_character)
        assert result.errors
        assert result.auto_fixable_data is None

    def test_generate_recovery_suggestions(self, recovery):
        assert recovery.generate_recovery_suggestions({})[0] == SUGGEST_NAME
