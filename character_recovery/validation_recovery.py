"""
character_recovery/validation_recovery.py -- Validation with suggested fixes.

Runs a schema validator over a character draft and turns each reported
failure into a ``ValidationErrorWithFix``: a human-readable suggestion and,
for a few well-understood cases, a concrete value that resolves it.  All
auto-fix values are then applied to a copy of the draft so the UI can offer
a one-click "apply fix".

Classification uses a fixed rule table keyed on the error kind and the
dotted field path.  Path matching is substring-based unless a rule says
otherwise, and the first matching rule wins.

Usage::

    from character_recovery.validation_recovery import ValidationRecoveryEngine

    engine = ValidationRecoveryEngine()
    result = engine.validate_with_recovery(draft)
    if result.auto_fixable:
        draft = result.auto_fixable_data
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from character_recovery.models.character import (
    INVALID_ENUM_VALUE,
    INVALID_TYPE,
    TOO_BIG,
    TOO_SMALL,
    SchemaIssue,
    SchemaOutcome,
    validate_character_data,
)
from character_recovery.models.records import RecoveryResult, ValidationErrorWithFix
from character_recovery.utils import clone_data, set_nested_value

logger = logging.getLogger(__name__)

Validator = Callable[[Any], SchemaOutcome]

DEFAULT_SUGGESTION = "Please check the value and try again"

_NO_FIX = object()


# ------------------------------------------------------------------
# Rule table
# ------------------------------------------------------------------

@dataclass(frozen=True)
class FixRule:
    """Maps an (error kind, field path) pattern to remediation guidance.

    ``fragment`` is matched as a substring of the dotted path, or against
    the whole path when ``exact`` is set.
    """
    kind: str
    fragment: str
    suggestion: str
    auto_fix_value: Any = _NO_FIX
    exact: bool = False

    @property
    def auto_fixable(self) -> bool:
        return self.auto_fix_value is not _NO_FIX

    def matches(self, kind: str, field_path: str) -> bool:
        if kind != self.kind:
            return False
        if self.exact:
            return field_path == self.fragment
        return self.fragment in field_path


FIX_RULES: tuple[FixRule, ...] = (
    FixRule(TOO_SMALL, "name",
            "Character name must be at least 1 character long"),
    FixRule(TOO_SMALL, "abilityScores",
            "Ability scores must be at least 1. Consider using 8 as minimum.",
            auto_fix_value=8),
    FixRule(TOO_SMALL, "classes",
            "At least one character class is required", exact=True),
    FixRule(TOO_BIG, "name",
            "Character name must be 100 characters or less"),
    FixRule(TOO_BIG, "abilityScores",
            "Ability scores cannot exceed 30. Consider using 20 as maximum.",
            auto_fix_value=20),
    FixRule(INVALID_TYPE, "level",
            "Level must be a number between 1 and 20",
            auto_fix_value=1),
    FixRule(INVALID_ENUM_VALUE, "race",
            "Please select a valid race from the dropdown list", exact=True),
    FixRule(INVALID_ENUM_VALUE, "class",
            "Please select a valid class from the dropdown list"),
)


def classify_issue(
    issue: SchemaIssue,
    rules: tuple[FixRule, ...] = FIX_RULES,
) -> ValidationErrorWithFix:
    """Build a ``ValidationErrorWithFix`` for one validator issue."""
    error = ValidationErrorWithFix(
        message=issue.message,
        field_path=issue.path,
        code=issue.code,
    )
    for rule in rules:
        if rule.matches(issue.code, issue.path):
            error.suggested_fix = rule.suggestion
            if rule.auto_fixable:
                error.auto_fixable = True
                error.auto_fix_value = rule.auto_fix_value
            return error

    error.suggested_fix = DEFAULT_SUGGESTION
    return error


# ------------------------------------------------------------------
# Engine
# ------------------------------------------------------------------

class ValidationRecoveryEngine:
    """Validates drafts and proposes corrections.

    Parameters
    ----------
    validator : callable
        ``draft -> SchemaOutcome``.  Defaults to the pydantic
        ``CharacterCreation`` schema.
    enable_suggested_fixes : bool
        When False, errors are still classified but no fix map or
        auto-fixable document is produced.
    """

    def __init__(
        self,
        validator: Validator = validate_character_data,
        enable_suggested_fixes: bool = True,
        rules: tuple[FixRule, ...] = FIX_RULES,
    ):
        self._validator = validator
        self.enable_suggested_fixes = enable_suggested_fixes
        self._rules = rules

    def validate_with_recovery(self, draft_data: Any) -> RecoveryResult:
        """Validate *draft_data* and compute suggested fixes.

        Invalid input is a normal return value, never an exception.

        Returns
        -------
        RecoveryResult
            ``is_valid=True`` with no errors or fixes when the draft passes,
            and the parsed document in ``data``.
            Otherwise one error per validator issue, the ``field_path ->
            value`` fix map, and ``auto_fixable_data`` (a corrected copy of
            the draft) when the fix map is non-empty.
        """
        outcome = self._validator(draft_data)
        if outcome.success:
            return RecoveryResult(is_valid=True, data=outcome.data)

        errors: list[ValidationErrorWithFix] = []
        suggested_fixes: dict[str, Any] = {}

        for issue in outcome.issues:
            error = classify_issue(issue, self._rules)
            errors.append(error)
            if error.auto_fixable and self.enable_suggested_fixes:
                suggested_fixes[error.field_path] = error.auto_fix_value

        auto_fixable_data = None
        if suggested_fixes:
            auto_fixable_data = self.apply_auto_fixes(draft_data, suggested_fixes)

        return RecoveryResult(
            is_valid=False,
            errors=errors,
            suggested_fixes=suggested_fixes,
            auto_fixable_data=auto_fixable_data,
        )

    @staticmethod
    def apply_auto_fixes(
        draft_data: Any,
        suggested_fixes: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Return a copy of *draft_data* with every fix assigned by dotted path.

        Paths that cross a non-container value are skipped.
        """
        fixed = clone_data(draft_data) if isinstance(draft_data, Mapping) else {}
        for path, value in suggested_fixes.items():
            if not set_nested_value(fixed, path, value):
                logger.debug("Skipped auto-fix for '%s': path is not assignable", path)
        return fixed
