"""
character_recovery/models/ -- Pydantic v2 models and result types.

Submodules:
    character   D&D 5e character creation schema and the default validator.
    records     Backup / auto-save records, options, and validation results.
"""

from character_recovery.models.character import (
    CharacterCreation,
    SchemaIssue,
    SchemaOutcome,
    validate_character_data,
)
from character_recovery.models.records import (
    AutoSaveSlot,
    Backup,
    RecoveryOptions,
    RecoveryResult,
    ValidationErrorWithFix,
)

__all__ = [
    "AutoSaveSlot",
    "Backup",
    "CharacterCreation",
    "RecoveryOptions",
    "RecoveryResult",
    "SchemaIssue",
    "SchemaOutcome",
    "ValidationErrorWithFix",
    "validate_character_data",
]
