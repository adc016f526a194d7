"""
character_recovery/models/character.py -- D&D 5e character creation schema.

Pydantic v2 models for a complete character-creation payload, plus
``validate_character_data()``, the default validator consumed by the
validation-recovery engine.  The validator never raises for bad input:
it returns a ``SchemaOutcome`` carrying either the parsed document or one
``SchemaIssue`` per failing field.

Field names are snake_case in Python and camelCase on the wire
(``abilityScores``, ``hitPoints``...), matching the drafts the UI sends.

Usage::

    from character_recovery.models.character import validate_character_data

    outcome = validate_character_data(draft)
    if not outcome.success:
        for issue in outcome.issues:
            print(issue.path, issue.code, issue.message)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Annotated, Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Enumerations
# ------------------------------------------------------------------

CharacterClass = Literal[
    "artificer", "barbarian", "bard", "cleric", "druid", "fighter", "monk",
    "paladin", "ranger", "rogue", "sorcerer", "warlock", "wizard",
]

CharacterRace = Literal[
    "dragonborn", "dwarf", "elf", "gnome", "half-elf", "halfling", "half-orc",
    "human", "tiefling", "aarakocra", "genasi", "goliath", "aasimar",
    "bugbear", "firbolg", "goblin", "hobgoblin", "kenku", "kobold",
    "lizardfolk", "orc", "tabaxi", "triton", "yuan-ti", "custom",
]

CharacterType = Literal["pc", "npc"]

Size = Literal["tiny", "small", "medium", "large", "huge", "gargantuan"]

SpellSchool = Literal[
    "abjuration", "conjuration", "divination", "enchantment", "evocation",
    "illusion", "necromancy", "transmutation",
]


# ------------------------------------------------------------------
# Constrained scalars
# ------------------------------------------------------------------

Name = Annotated[str, Field(min_length=1, max_length=100)]
AbilityScore = Annotated[int, Field(strict=True, ge=1, le=30)]
Level = Annotated[int, Field(strict=True, ge=1, le=20)]
HitPointValue = Annotated[int, Field(strict=True, ge=0)]
ArmorClass = Annotated[int, Field(strict=True, ge=1, le=30)]


class _CamelModel(BaseModel):
    """Base for schema models: camelCase aliases, unknown keys dropped."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ------------------------------------------------------------------
# Sub-models
# ------------------------------------------------------------------

class AbilityScores(_CamelModel):
    strength: AbilityScore
    dexterity: AbilityScore
    constitution: AbilityScore
    intelligence: AbilityScore
    wisdom: AbilityScore
    charisma: AbilityScore


class ClassLevel(_CamelModel):
    """One entry of a (possibly multiclassed) character's class list."""

    class_: CharacterClass = Field(alias="class")
    level: Level
    hit_die: Annotated[int, Field(strict=True, ge=4, le=12)]
    subclass: Optional[Annotated[str, Field(min_length=1, max_length=50)]] = None


class HitPoints(_CamelModel):
    maximum: HitPointValue
    current: HitPointValue
    temporary: HitPointValue = 0


class SavingThrows(_CamelModel):
    strength: bool = False
    dexterity: bool = False
    constitution: bool = False
    intelligence: bool = False
    wisdom: bool = False
    charisma: bool = False


class EquipmentItem(_CamelModel):
    name: Name
    quantity: Annotated[int, Field(strict=True, ge=0)] = 1
    weight: Optional[Annotated[float, Field(ge=0)]] = None
    value: Optional[Annotated[float, Field(ge=0)]] = None
    description: Optional[Annotated[str, Field(max_length=500)]] = None
    equipped: bool = False
    magical: bool = False


class SpellComponents(_CamelModel):
    verbal: bool = False
    somatic: bool = False
    material: bool = False
    material_component: Optional[Annotated[str, Field(max_length=200)]] = None


class Spell(_CamelModel):
    name: Name
    level: Annotated[int, Field(strict=True, ge=0, le=9)]
    school: SpellSchool
    casting_time: Annotated[str, Field(min_length=1, max_length=50)]
    range: Annotated[str, Field(min_length=1, max_length=50)]
    components: SpellComponents
    duration: Annotated[str, Field(min_length=1, max_length=100)]
    description: Annotated[str, Field(min_length=1, max_length=2000)]
    prepared: bool = False


# ------------------------------------------------------------------
# Character creation
# ------------------------------------------------------------------

class CharacterCreation(_CamelModel):
    """A complete, valid character-creation document."""

    name: Name
    type: CharacterType
    race: CharacterRace
    custom_race: Optional[Annotated[str, Field(max_length=50)]] = None
    size: Size = "medium"
    classes: Annotated[list[ClassLevel], Field(min_length=1, max_length=3)]
    ability_scores: AbilityScores
    hit_points: HitPoints
    armor_class: ArmorClass
    speed: Annotated[int, Field(strict=True, ge=0, le=120)] = 30
    proficiency_bonus: Annotated[int, Field(strict=True, ge=2, le=6)]
    saving_throws: SavingThrows
    skills: dict[str, bool] = Field(default_factory=dict)
    equipment: Annotated[list[EquipmentItem], Field(max_length=100)] = Field(default_factory=list)
    spells: Annotated[list[Spell], Field(max_length=200)] = Field(default_factory=list)
    backstory: Optional[Annotated[str, Field(max_length=2000)]] = None
    notes: Optional[Annotated[str, Field(max_length=1000)]] = None
    image_url: Optional[str] = None


# ------------------------------------------------------------------
# Validator adapter
# ------------------------------------------------------------------

@dataclass
class SchemaIssue:
    """One field-level failure reported by a schema validator."""
    path: str
    message: str
    code: str


@dataclass
class SchemaOutcome:
    """Result of running a schema validator over a draft."""
    success: bool
    data: dict[str, Any] | None = None
    issues: list[SchemaIssue] = field(default_factory=list)


# Error kinds understood by the recovery rule table.
TOO_SMALL = "too_small"
TOO_BIG = "too_big"
INVALID_TYPE = "invalid_type"
INVALID_ENUM_VALUE = "invalid_enum_value"
CUSTOM = "custom"

_TOO_SMALL_TYPES = frozenset({
    "too_short", "string_too_short", "greater_than_equal", "greater_than",
})
_TOO_BIG_TYPES = frozenset({
    "too_long", "string_too_long", "less_than_equal", "less_than",
})
_ENUM_TYPES = frozenset({"literal_error", "enum"})


def error_kind(pydantic_type: str) -> str:
    """Map a pydantic error type onto a recovery error kind."""
    if pydantic_type in _TOO_SMALL_TYPES:
        return TOO_SMALL
    if pydantic_type in _TOO_BIG_TYPES:
        return TOO_BIG
    if pydantic_type in _ENUM_TYPES:
        return INVALID_ENUM_VALUE
    if (
        pydantic_type == "missing"
        or pydantic_type == "int_from_float"
        or pydantic_type.endswith("_type")
        or pydantic_type.endswith("_parsing")
    ):
        return INVALID_TYPE
    return CUSTOM


def issues_from_validation_error(exc: ValidationError) -> list[SchemaIssue]:
    """Flatten a pydantic ``ValidationError`` into dotted-path issues."""
    issues: list[SchemaIssue] = []
    for err in exc.errors():
        path = ".".join(str(part) for part in err.get("loc", ()))
        issues.append(SchemaIssue(
            path=path,
            message=err.get("msg", ""),
            code=error_kind(err.get("type", "")),
        ))
    return issues


def validate_character_data(draft: Any) -> SchemaOutcome:
    """Validate *draft* against ``CharacterCreation``.

    Parameters
    ----------
    draft
        Candidate character data, usually a partial dict from the UI.

    Returns
    -------
    SchemaOutcome
        ``success=True`` with the parsed document (camelCase keys, defaults
        filled in), or ``success=False`` with one issue per failing field.
    """
    try:
        model = CharacterCreation.model_validate(draft)
    except ValidationError as exc:
        issues = issues_from_validation_error(exc)
        logger.debug("Character draft failed validation with %d issue(s)", len(issues))
        return SchemaOutcome(success=False, issues=issues)
    return SchemaOutcome(success=True, data=model.model_dump(by_alias=True))
