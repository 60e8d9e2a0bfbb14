"""
Character record models.

The ledger keeps no state of its own: everything it tracks lives on the
Character record defined here, which the host application owns and passes
into every call.
"""

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from charledger.core.constants import (
    ABILITY_NAMES,
    CHOICE_PROFICIENCY_TYPES,
    DEFAULT_ABILITY_SCORE,
    ChoiceSource,
    ProficiencyType,
)
from charledger.core.utils import normalize_for_lookup, unique_by_key


class SlotGroup(BaseModel):
    """
    The choice slots a single source (race, class or background) grants for
    one proficiency type.
    """

    allowed: int = Field(
        default=0,
        ge=0,
        description="How many options the player may pick from this source",
    )
    options: list[str] = Field(
        default_factory=list,
        description="The names the player may pick from",
    )
    selected: list[str] = Field(
        default_factory=list,
        description="The names the player has picked so far",
    )

    @property
    def remaining(self) -> int:
        """Number of picks still available."""
        return max(0, self.allowed - len(self.selected))


class OptionalConfig(BaseModel):
    """
    Choice slots for a proficiency type, broken down per source, together
    with the combined view across all sources.
    """

    model_config = ConfigDict(populate_by_name=True)

    allowed: int = Field(
        default=0,
        description="Sum of the allowed picks of every source",
    )
    options: list[str] = Field(
        default_factory=list,
        description="Union of the options of every source",
    )
    selected: list[str] = Field(
        default_factory=list,
        description="Union of the picks of every source",
    )
    race: SlotGroup = Field(
        default_factory=SlotGroup,
        description="Slots granted by the race",
    )
    class_: SlotGroup = Field(
        default_factory=SlotGroup,
        alias="class",
        description="Slots granted by the class",
    )
    background: SlotGroup = Field(
        default_factory=SlotGroup,
        description="Slots granted by the background",
    )

    def group(self, source: ChoiceSource | str | None) -> SlotGroup | None:
        """
        Returns the slot group of a source.

        Args:
            source (ChoiceSource | str | None):
                The source, matched case-insensitively.

        Returns:
            SlotGroup | None:
                The group, or None for an unknown source.

        """
        choice_source = ChoiceSource.coerce(source)
        if choice_source is None:
            return None
        return {
            ChoiceSource.RACE: self.race,
            ChoiceSource.CLASS: self.class_,
            ChoiceSource.BACKGROUND: self.background,
        }[choice_source]

    def reset_group(self, source: ChoiceSource) -> SlotGroup:
        """Replaces a source's group with an empty one and returns it."""
        empty = SlotGroup()
        if source is ChoiceSource.RACE:
            self.race = empty
        elif source is ChoiceSource.CLASS:
            self.class_ = empty
        else:
            self.background = empty
        return empty

    def groups(self) -> list[tuple[ChoiceSource, SlotGroup]]:
        """Every (source, group) pair, in race, class, background order."""
        return [(source, self.group(source)) for source in ChoiceSource]

    def recalculate(self, normalizer=normalize_for_lookup) -> None:
        """
        Rebuilds the combined view from the three source groups.

        The combined allowed count is the sum of the groups' counts; the
        combined options and picks are the unions of the groups' lists.

        Args:
            normalizer (Callable[[str], str]):
                Names with equal normal forms count once.

        """
        groups = [group for _, group in self.groups()]
        self.allowed = sum(group.allowed for group in groups)
        self.options = unique_by_key(
            (option for group in groups for option in group.options), normalizer
        )
        self.selected = unique_by_key(
            (name for group in groups for name in group.selected), normalizer
        )


class SimpleOptionalConfig(BaseModel):
    """Flat choice record for types without a per-source breakdown."""

    allowed: int = Field(default=0, ge=0, description="Allowed picks")
    selected: list[str] = Field(default_factory=list, description="Current picks")


AnyOptionalConfig = Annotated[
    OptionalConfig | SimpleOptionalConfig, Field(union_mode="left_to_right")
]


class AbilityBonus(BaseModel):
    """A numeric bonus to an ability score, tagged with its source."""

    value: int = Field(description="The amount added to the score")
    source: str = Field(description="Where the bonus comes from")


class AbilityChoice(BaseModel):
    """A racial "+X to an ability of your choice" pick bound to a slot."""

    ability: str = Field(description="The chosen ability")
    value: int = Field(default=1, description="The bonus granted by the slot")
    source: str = Field(default="Race Choice", description="The choice source")
    index: int = Field(ge=0, description="The choice slot this pick fills")


def _default_ability_scores() -> dict[str, int]:
    return {ability: DEFAULT_ABILITY_SCORE for ability in ABILITY_NAMES}


def _default_ability_bonuses() -> dict[str, list[AbilityBonus]]:
    return {ability: [] for ability in ABILITY_NAMES}


class Character(BaseModel):
    """
    The mutable character record the ledger operates on.

    Only the fields the ledger reads or writes are modelled; a host
    application can subclass this model to add its own.
    """

    name: str = Field(default="", description="The character's name")
    level: int = Field(default=1, ge=1, le=20, description="Total character level")
    ability_scores: dict[str, int] = Field(
        default_factory=_default_ability_scores,
        description="Base ability scores, before any bonus",
    )
    ability_bonuses: dict[str, list[AbilityBonus]] = Field(
        default_factory=_default_ability_bonuses,
        description="Every bonus to each ability, tagged by source",
    )
    ability_choices: list[AbilityChoice] = Field(
        default_factory=list,
        description="Racial ability choices, ordered by slot index",
    )
    proficiencies: dict[ProficiencyType, list[str]] = Field(
        default_factory=dict,
        description="Resolved proficiencies per type, in insertion order",
    )
    proficiency_sources: dict[ProficiencyType, dict[str, set[str]]] = Field(
        default_factory=dict,
        description="For every proficiency, the sources that grant it",
    )
    optional_proficiencies: dict[ProficiencyType, AnyOptionalConfig] = Field(
        default_factory=dict,
        description="Choice slots per proficiency type",
    )

    @model_validator(mode="after")
    def _fill_structures(self) -> "Character":
        ensure_proficiency_structures(self)
        return self


def ensure_proficiency_structures(character: Character) -> None:
    """
    Gives a character the full proficiency shape without seeding defaults.

    Every proficiency type gets a list, a source map and an optional config;
    choice-bearing types get an OptionalConfig, the others a
    SimpleOptionalConfig. Existing data is kept and the combined choice view
    is rebuilt from the per-source groups.

    Args:
        character (Character): The record to complete.

    """
    for proficiency_type in ProficiencyType:
        character.proficiencies.setdefault(proficiency_type, [])
        character.proficiency_sources.setdefault(proficiency_type, {})

        current: Any = character.optional_proficiencies.get(proficiency_type)
        if proficiency_type in CHOICE_PROFICIENCY_TYPES:
            if isinstance(current, OptionalConfig):
                current.recalculate()
            else:
                character.optional_proficiencies[proficiency_type] = OptionalConfig()
        elif not isinstance(current, SimpleOptionalConfig):
            character.optional_proficiencies[proficiency_type] = SimpleOptionalConfig(
                allowed=getattr(current, "allowed", 0),
                selected=list(getattr(current, "selected", [])),
            )

    for ability in ABILITY_NAMES:
        character.ability_scores.setdefault(ability, DEFAULT_ABILITY_SCORE)
        character.ability_bonuses.setdefault(ability, [])
