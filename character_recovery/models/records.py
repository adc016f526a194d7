"""
character_recovery/models/records.py -- Persisted records and result types.

Backups and the auto-save slot are frozen pydantic models so that their
JSON shape (camelCase keys, ISO-8601 timestamps) is defined in one place
and timestamps are rehydrated to ``datetime`` on read.  Validation results
are plain dataclasses, like the rest of the engine's in-memory results.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

BackupSource = Literal["auto-save", "manual", "pre-operation"]


class _RecordModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_record(self) -> dict[str, Any]:
        """Return the JSON-ready storage form (camelCase, ISO timestamps).

        ``characterId`` is omitted rather than written as null when unset.
        """
        record = self.model_dump(mode="json", by_alias=True)
        if record.get("characterId") is None:
            record.pop("characterId", None)
        return record


class Backup(_RecordModel):
    """A character draft captured at a point in time.

    ``data`` is a private structural copy of the draft; ``is_valid`` is a
    presence heuristic computed once at creation, not a schema check.
    """

    id: str
    timestamp: datetime
    character_id: Optional[str] = None
    data: dict[str, Any] = Field(default_factory=dict)
    source: BackupSource = "manual"
    is_valid: bool = False


class AutoSaveSlot(_RecordModel):
    """The single most recent auto-saved draft."""

    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime
    character_id: Optional[str] = None


class RecoveryOptions(BaseModel):
    """Tunable behaviour for backups, auto-save and suggested fixes.

    Accepts both snake_case names and the camelCase keys used by the UI
    (``enableAutoSave``, ``autoSaveInterval``...).  Intervals are in
    milliseconds.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    enable_auto_save: bool = True
    auto_save_interval: int = Field(default=30_000, gt=0)
    max_backups: int = Field(default=10, ge=1)
    enable_suggested_fixes: bool = True

    @classmethod
    def coerce(cls, options: RecoveryOptions | Mapping[str, Any] | None) -> RecoveryOptions:
        """Return *options* as a ``RecoveryOptions`` (defaults for None)."""
        if options is None:
            return cls()
        if isinstance(options, RecoveryOptions):
            return options
        return cls().merged(options)

    def merged(self, overrides: Mapping[str, Any]) -> RecoveryOptions:
        """Return a validated copy with a partial set of *overrides* applied."""
        names = {to_camel(name): name for name in type(self).model_fields}
        normalized = {names.get(key, key): value for key, value in overrides.items()}
        return type(self).model_validate({**self.model_dump(), **normalized})


@dataclass
class ValidationErrorWithFix:
    """A field-level validation error plus remediation guidance."""
    message: str
    field_path: str
    code: str = ""
    suggested_fix: str | None = None
    auto_fixable: bool = False
    auto_fix_value: Any = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "message": self.message,
            "fieldPath": self.field_path,
            "code": self.code,
            "autoFixable": self.auto_fixable,
        }
        if self.suggested_fix is not None:
            out["suggestedFix"] = self.suggested_fix
        if self.auto_fixable:
            out["autoFixValue"] = self.auto_fix_value
        return out


@dataclass
class RecoveryResult:
    """Outcome of ``validate_with_recovery``.

    ``data`` holds the parsed document (defaults filled in) when the draft
    is valid; it is not part of the serialised form.
    """
    is_valid: bool
    errors: list[ValidationErrorWithFix] = field(default_factory=list)
    suggested_fixes: dict[str, Any] = field(default_factory=dict)
    auto_fixable_data: dict[str, Any] | None = None
    data: dict[str, Any] | None = None

    @property
    def auto_fixable(self) -> bool:
        return self.auto_fixable_data is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialise for the UI; ``autoFixableData`` is omitted when absent."""
        out: dict[str, Any] = {
            "isValid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "suggestedFixes": dict(self.suggested_fixes),
        }
        if self.auto_fixable_data is not None:
            out["autoFixableData"] = self.auto_fixable_data
        return out
