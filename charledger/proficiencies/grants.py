"""
Applying a source's proficiency grants.

Rule-book entries describe what a race, class or background grants as
lists of small objects:

    [{"stealth": true}, {"choose": {"from": ["arcana", "history"], "count": 1}}]
    [{"any": 2}]
    [{"common": true, "anyStandard": 1}]

This module turns such blocks into fixed grants plus choice slots and
applies them to a character. Re-applying a source (the player switches
race, say) withdraws the old grants first and keeps every earlier pick
that the new source still offers.
"""

from typing import Any, Iterable

from pydantic import BaseModel, Field

from charledger.character.models import Character
from charledger.core.constants import (
    CHOICE_PROFICIENCY_TYPES,
    STANDARD_OPTIONS,
    ChoiceSource,
    ProficiencyType,
)
from charledger.core.error_handling import FailureKind
from charledger.core.logging import log_info, log_warning
from charledger.core.utils import find_matching, unique_by_key

from .optional import OptionalChoiceTracker

# Rule-book field names of the proficiency blocks, per type.
PROFICIENCY_BLOCK_KEYS: dict[str, ProficiencyType] = {
    "skillProficiencies": ProficiencyType.SKILLS,
    "languageProficiencies": ProficiencyType.LANGUAGES,
    "toolProficiencies": ProficiencyType.TOOLS,
    "armorProficiencies": ProficiencyType.ARMOR,
    "weaponProficiencies": ProficiencyType.WEAPONS,
    "savingThrowProficiencies": ProficiencyType.SAVING_THROWS,
}

_ANY_KEYS = frozenset({"any", "anystandard"})


class ChoiceSpec(BaseModel):
    """A "pick N of these" grant."""

    allowed: int = Field(default=0, ge=0, description="Number of picks")
    options: list[str] = Field(default_factory=list, description="Names to pick from")


class SourceGrants(BaseModel):
    """Everything a single source grants, by proficiency type."""

    fixed: dict[ProficiencyType, list[str]] = Field(
        default_factory=dict,
        description="Proficiencies granted outright",
    )
    choices: dict[ProficiencyType, ChoiceSpec] = Field(
        default_factory=dict,
        description="Choice slots granted",
    )


def _strip_uid(name: str) -> str:
    # "longsword|phb" -> "longsword"
    return name.split("|", 1)[0].strip()


def parse_proficiency_block(
    proficiency_type: ProficiencyType | str,
    entries: Iterable[Any] | None,
    other_name: str | None = None,
) -> tuple[list[str], ChoiceSpec | None]:
    """
    Parses one rule-book proficiency block.

    Args:
        proficiency_type (ProficiencyType | str):
            The type the block describes.
        entries (Iterable[Any] | None):
            Dicts of {name: true}, {"any"/"anyStandard": n} and
            {"choose": {"from": [...], "count": n}}; bare strings are fixed
            grants.
        other_name (str | None):
            Name granted by an {"other": true} entry, usually the race's own
            language.

    Returns:
        tuple[list[str], ChoiceSpec | None]:
            The fixed grants and the choice slots, None without choices.

    """
    ptype = ProficiencyType.coerce(proficiency_type)
    if ptype is None or not entries:
        return [], None

    fixed: list[str] = []
    allowed = 0
    options: list[str] = []

    for entry in entries:
        if isinstance(entry, str):
            if entry.strip():
                fixed.append(_strip_uid(entry))
            continue
        if not isinstance(entry, dict):
            continue

        for key, value in entry.items():
            lowered = key.lower()
            if lowered in _ANY_KEYS:
                if isinstance(value, int) and not isinstance(value, bool) and value > 0:
                    if ptype not in STANDARD_OPTIONS:
                        log_warning(
                            "No standard options for an 'any' choice",
                            {"type": ptype.value},
                        )
                        continue
                    allowed += value
                    options.extend(STANDARD_OPTIONS[ptype])
            elif lowered == "choose":
                if not isinstance(value, dict):
                    continue
                count = value.get("count", 1)
                names = value.get("from") or []
                if isinstance(count, int) and count > 0 and names:
                    allowed += count
                    options.extend(_strip_uid(name) for name in names if isinstance(name, str))
            elif lowered == "other":
                if value is True and other_name:
                    fixed.append(other_name)
            elif value is True:
                fixed.append(_strip_uid(key))

    choice = ChoiceSpec(allowed=allowed, options=unique_by_key(options)) if allowed else None
    return unique_by_key(fixed), choice


def parse_source_grants(data: dict[str, Any] | None, other_name: str | None = None) -> SourceGrants:
    """
    Parses every proficiency block of a race, class or background entry.

    Args:
        data (dict[str, Any] | None): The rule-book entry.
        other_name (str | None): See parse_proficiency_block.

    Returns:
        SourceGrants: The parsed grants, empty for missing data.

    """
    grants = SourceGrants()
    if not data:
        return grants
    for block_key, ptype in PROFICIENCY_BLOCK_KEYS.items():
        fixed, choice = parse_proficiency_block(ptype, data.get(block_key), other_name)
        if fixed:
            grants.fixed[ptype] = fixed
        if choice is not None:
            grants.choices[ptype] = choice
    return grants


class GrantApplier:
    """
    Applies and withdraws the grants of a whole source.

    Attributes:
        tracker (OptionalChoiceTracker):
            Used for the choice slots; its ledger for the fixed grants.

    """

    def __init__(self, tracker: OptionalChoiceTracker) -> None:
        self.tracker = tracker
        self.ledger = tracker.ledger

    @staticmethod
    def _label(source: str, choice_source: ChoiceSource | None) -> str:
        return choice_source.label if choice_source else source

    def remove_source_grants(
        self,
        character: Character | None,
        source: str,
    ) -> dict[ProficiencyType, list[str]]:
        """
        Withdraws a source's fixed grants, picks and choice slots.

        Args:
            character (Character | None): The character to change.
            source (str): "Race", "Class", "Background" or any fixed-only
                source such as "Subrace".

        Returns:
            dict[ProficiencyType, list[str]]:
                The names that lost the source's fixed label.

        """
        if character is None or not source:
            self.ledger.reporter.report(
                FailureKind.VALIDATION,
                "Invalid parameters for remove_source_grants",
                {"source": source},
            )
            return {}

        choice_source = ChoiceSource.coerce(source)
        if choice_source is not None:
            for ptype in CHOICE_PROFICIENCY_TYPES:
                self.tracker.clear_optional_proficiencies(character, ptype, choice_source)
        return self.ledger.remove_proficiencies_by_source(
            character, self._label(source, choice_source)
        )

    def apply_source_grants(
        self,
        character: Character | None,
        source: str,
        grants: SourceGrants,
    ) -> dict[ProficiencyType, list[str]]:
        """
        Replaces everything a source grants with a new set of grants.

        Earlier picks of the source are re-selected when the new options
        still offer them and no fixed grant already covers them.

        Args:
            character (Character | None): The character to change.
            source (str): The source being (re)applied.
            grants (SourceGrants): What the source now grants.

        Returns:
            dict[ProficiencyType, list[str]]: The picks that were kept.

        """
        if character is None or not source or grants is None:
            self.ledger.reporter.report(
                FailureKind.VALIDATION,
                "Invalid parameters for apply_source_grants",
                {"source": source},
            )
            return {}

        choice_source = ChoiceSource.coerce(source)
        label = self._label(source, choice_source)

        previous: dict[ProficiencyType, list[str]] = {}
        if choice_source is not None:
            for ptype in CHOICE_PROFICIENCY_TYPES:
                group = character.optional_proficiencies[ptype].group(choice_source)
                previous[ptype] = list(group.selected)

        self.remove_source_grants(character, source)

        for ptype, names in grants.fixed.items():
            for name in names:
                self.ledger.add_proficiency(character, ptype, name, label)

        restored: dict[ProficiencyType, list[str]] = {}
        for ptype, choice in grants.choices.items():
            if choice_source is None or not ptype.supports_choices:
                log_warning(
                    "Choice slots ignored for a source without choice groups",
                    {"source": source, "type": ptype.value},
                )
                continue
            self.tracker.set_optional_proficiencies(
                character, ptype, choice_source, choice.allowed, choice.options
            )
            available = self.tracker.get_available_optional_proficiencies(
                character, ptype, choice_source
            )
            kept = []
            for name in previous.get(ptype, []):
                option = find_matching(available, name, self.ledger.normalizer)
                if option and self.tracker.select_optional_proficiency(
                    character, ptype, choice_source, option
                ):
                    kept.append(option)
            if kept:
                restored[ptype] = kept

        log_info(
            "Source grants applied",
            {"source": label, "restored": sum(len(v) for v in restored.values())},
        )
        return restored
