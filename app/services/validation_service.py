"""
app/services/validation_service.py -- Character validation with recovery.

Orchestrates the recovery engine for whole character operations:

    Step 1: Schema validation with classified errors and auto-fix data
    Step 2: Recovery suggestions when validation fails
    Step 3: Backup of the validated document (auto-save for creates,
            pre-operation for updates and imports)

Update validation deep-merges the update into the existing character first
and validates the merged document as a complete character.  Restores are
wrapped in a ``ServiceResult`` so UI code never has to catch exceptions.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Literal

from character_recovery.errors import BackupNotFoundError
from character_recovery.models.records import Backup, ValidationErrorWithFix
from character_recovery.recovery_manager import CharacterDataRecovery
from character_recovery.utils import clone_data

logger = logging.getLogger(__name__)

OperationType = Literal["create", "update", "import", "duplicate"]

PASSED_SUGGESTION = "Character validation passed successfully"
UNEXPECTED_SUGGESTION = "An unexpected error occurred during validation"


@dataclass
class ValidationContext:
    """Who is validating what, and why."""
    user_id: str
    character_id: str | None = None
    operation_type: OperationType = "create"


@dataclass
class ValidationServiceOptions:
    enable_auto_fix: bool = True
    enable_data_recovery: bool = True


@dataclass
class EnhancedValidationResult:
    """Structured outcome of a character-level validation."""
    success: bool
    data: dict[str, Any] | None = None
    errors: list[ValidationErrorWithFix] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    auto_fixable: bool = False
    auto_fix_data: dict[str, Any] | None = None


@dataclass
class ServiceError:
    code: str
    message: str


@dataclass
class ServiceResult:
    success: bool
    data: Any = None
    error: ServiceError | None = None


def _deep_merge(target: Any, source: Any) -> Any:
    """Merge *source* into a copy of *target*.

    Nested dicts are merged recursively; lists and scalars from *source*
    replace the target's value; ``None`` values in *source* are ignored.
    """
    if not isinstance(target, Mapping):
        return clone_data(source)
    if not isinstance(source, Mapping):
        return clone_data(target)

    result = clone_data(target)
    for key, value in source.items():
        if value is None:
            continue
        existing = result.get(key)
        if isinstance(value, Mapping) and isinstance(existing, Mapping):
            result[key] = _deep_merge(existing, value)
        else:
            result[key] = clone_data(value)
    return result


class CharacterValidationService:
    """Validates character operations and keeps recovery backups.

    Parameters
    ----------
    recovery : CharacterDataRecovery
        The recovery engine (backups, validation recovery, suggestions).
    options : ValidationServiceOptions, optional
        Auto-fix and data-recovery switches.
    """

    def __init__(
        self,
        recovery: CharacterDataRecovery,
        options: ValidationServiceOptions | None = None,
    ):
        self.recovery = recovery
        self.options = options or ValidationServiceOptions()

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_character_creation(
        self,
        character_data: Any,
        context: ValidationContext,
    ) -> EnhancedValidationResult:
        """Validate a full character document and back it up on success."""
        try:
            recovery_result = self.recovery.validate_with_recovery(character_data)

            if not recovery_result.is_valid:
                draft = character_data if isinstance(character_data, Mapping) else {}
                result = EnhancedValidationResult(
                    success=False,
                    errors=recovery_result.errors,
                    suggestions=self.recovery.generate_recovery_suggestions(draft),
                )
                if self.options.enable_auto_fix and recovery_result.auto_fixable:
                    result.auto_fixable = True
                    result.auto_fix_data = recovery_result.auto_fixable_data
                return result

            validated = recovery_result.data or {}

            if self.options.enable_data_recovery and context.character_id:
                source = "auto-save" if context.operation_type == "create" else "pre-operation"
                self.recovery.create_backup(validated, source, context.character_id)

            return EnhancedValidationResult(
                success=True,
                data=validated,
                suggestions=[PASSED_SUGGESTION],
            )

        except Exception as exc:
            logger.exception("Character validation failed unexpectedly")
            return EnhancedValidationResult(
                success=False,
                errors=[ValidationErrorWithFix(
                    message=str(exc) or "Unknown validation error",
                    field_path="general",
                    suggested_fix="Please try again or contact support",
                )],
                suggestions=[UNEXPECTED_SUGGESTION],
            )

    def validate_character_update(
        self,
        update_data: Any,
        existing_character: Mapping[str, Any],
        context: ValidationContext,
    ) -> EnhancedValidationResult:
        """Validate *update_data* as applied on top of *existing_character*.

        On success ``data`` holds the update itself, not the merged document.
        """
        if not isinstance(update_data, Mapping):
            return EnhancedValidationResult(
                success=False,
                errors=[ValidationErrorWithFix(
                    message="Update data must be an object",
                    field_path="general",
                    suggested_fix="Please check your update data and try again",
                )],
                suggestions=["Please review the form for any validation errors"],
            )

        merged = _deep_merge(existing_character, update_data)
        full = self.validate_character_creation(
            merged, replace(context, operation_type="update"),
        )
        if not full.success:
            full.data = None
            return full

        return EnhancedValidationResult(
            success=True,
            data=clone_data(update_data),
            suggestions=full.suggestions,
        )

    def validate_character_import(
        self,
        import_data: Any,
        context: ValidationContext,
    ) -> EnhancedValidationResult:
        return self.validate_character_creation(
            import_data, replace(context, operation_type="import"),
        )

    def validate_multiple_characters(
        self,
        characters_data: list[Any],
        context: ValidationContext,
    ) -> list[EnhancedValidationResult]:
        """Validate a batch; each entry is backed up as ``batch_<index>``."""
        return [
            self.validate_character_creation(
                data, replace(context, character_id=f"batch_{index}"),
            )
            for index, data in enumerate(characters_data)
        ]

    # ------------------------------------------------------------------
    # Backups
    # ------------------------------------------------------------------

    def get_character_backups(self, character_id: str) -> list[Backup]:
        return self.recovery.get_character_backups(character_id)

    def create_character_backup(
        self,
        character_data: Mapping[str, Any],
        character_id: str | None = None,
    ) -> Backup:
        return self.recovery.create_backup(character_data, "manual", character_id)

    def restore_character_from_backup(self, backup_id: str) -> ServiceResult:
        try:
            data = self.recovery.restore_from_backup(backup_id)
        except BackupNotFoundError as exc:
            return ServiceResult(
                success=False,
                error=ServiceError(code="BACKUP_NOT_FOUND", message=str(exc)),
            )
        return ServiceResult(success=True, data=data)
