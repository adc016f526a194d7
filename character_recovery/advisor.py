"""
character_recovery/advisor.py -- Heuristic recovery suggestions for drafts.

Inspects a partial character draft and returns plain-language prompts for
whatever is missing or looks weak.  Independent of schema validation, so it
can run on any draft at any time.  Every applicable rule contributes one
suggestion, in a fixed order.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

SUGGEST_NAME = "Add a character name to identify your character"
SUGGEST_RACE = "Select a character race to define racial traits"
SUGGEST_CLASS = "Choose at least one character class to define abilities"
SUGGEST_ABILITY_SCORES = "Set ability scores using point buy, standard array, or rolled stats"
SUGGEST_LOW_ABILITY = "Ability scores should be at least 1 (consider 8 as practical minimum)"
SUGGEST_HIGH_ABILITY = "Consider having at least one ability score above 10 for character effectiveness"
SUGGEST_HIT_POINTS = "Set maximum hit points based on class hit die and Constitution modifier"
SUGGEST_ARMOR_CLASS = (
    "Set armor class based on armor worn and Dexterity modifier "
    "(minimum 10 + Dex modifier)"
)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_missing(value: Any) -> bool:
    """True for absent or blank scalar values (None, False, 0, NaN, "").

    Containers count as present even when empty; their contents are
    judged by the per-field rules.
    """
    if isinstance(value, (Mapping, list, tuple)):
        return False
    if isinstance(value, float) and value != value:
        return True
    return not value


def generate_recovery_suggestions(draft_data: Mapping[str, Any]) -> list[str]:
    """Return completeness and quality suggestions for *draft_data*.

    Ability-score comparisons only look at numeric values; anything else in
    ``abilityScores`` is left to schema validation.
    """
    suggestions: list[str] = []

    if _is_missing(draft_data.get("name")):
        suggestions.append(SUGGEST_NAME)

    if _is_missing(draft_data.get("race")):
        suggestions.append(SUGGEST_RACE)

    if not draft_data.get("classes"):
        suggestions.append(SUGGEST_CLASS)

    ability_scores = draft_data.get("abilityScores")
    if _is_missing(ability_scores):
        suggestions.append(SUGGEST_ABILITY_SCORES)
    elif isinstance(ability_scores, Mapping):
        scores = [v for v in ability_scores.values() if _is_number(v)]
        if any(score < 1 for score in scores):
            suggestions.append(SUGGEST_LOW_ABILITY)
        if all(score <= 10 for score in scores):
            suggestions.append(SUGGEST_HIGH_ABILITY)

    hit_points = draft_data.get("hitPoints")
    if _is_missing(hit_points):
        suggestions.append(SUGGEST_HIT_POINTS)
    elif isinstance(hit_points, Mapping):
        maximum = hit_points.get("maximum")
        if _is_number(maximum) and maximum < 1:
            suggestions.append(SUGGEST_HIT_POINTS)

    armor_class = draft_data.get("armorClass")
    if _is_missing(armor_class) or (_is_number(armor_class) and armor_class < 10):
        suggestions.append(SUGGEST_ARMOR_CLASS)

    return suggestions
