"""
Consistency checks for a character's proficiency bookkeeping.
"""

from typing import Callable

from charledger.character.models import Character, OptionalConfig, SimpleOptionalConfig
from charledger.core.constants import (
    CHOICE_PROFICIENCY_TYPES,
    SIMPLE_OPTIONAL_TYPES,
    ProficiencyType,
)
from charledger.core.utils import find_matching, normalize_for_lookup, offers_any


class ValidationResult:
    def __init__(self, is_valid: bool = True, errors: list[str] | None = None):
        self.is_valid = is_valid
        self.errors = errors or []

    def add_error(self, error: str):
        self.is_valid = False
        self.errors.append(error)

    def merge(self, other: "ValidationResult"):
        if not other.is_valid:
            self.is_valid = False
            self.errors.extend(other.errors)

    def __bool__(self) -> bool:
        return self.is_valid


def _check_presence(
    character: Character,
    ptype: ProficiencyType,
    normalizer: Callable[[str], str],
) -> ValidationResult:
    """A proficiency is listed iff it has at least one source."""
    result = ValidationResult()
    names = character.proficiencies.get(ptype, [])
    sources_by_name = character.proficiency_sources.get(ptype, {})

    keys = [normalizer(name) for name in names]
    if len(set(keys)) != len(keys):
        result.add_error(f"{ptype.value}: duplicate spellings in {names}")
    for name in names:
        if not sources_by_name.get(name):
            result.add_error(f"{ptype.value}: '{name}' is listed without a source")
    for name, sources in sources_by_name.items():
        if not sources:
            result.add_error(f"{ptype.value}: '{name}' has an empty source set")
        elif name not in names:
            result.add_error(f"{ptype.value}: '{name}' has sources but is not listed")
    return result


def _same_names(left: list[str], right: list[str], normalizer) -> bool:
    return {normalizer(n) for n in left} == {normalizer(n) for n in right}


def _check_optional(
    character: Character,
    ptype: ProficiencyType,
    normalizer: Callable[[str], str],
) -> ValidationResult:
    """Combined view, budgets and option membership of the choice slots."""
    result = ValidationResult()
    config = character.optional_proficiencies.get(ptype)
    if not isinstance(config, OptionalConfig):
        result.add_error(f"{ptype.value}: missing per-source choice slots")
        return result

    groups = config.groups()
    total = sum(group.allowed for _, group in groups)
    if config.allowed != total:
        result.add_error(f"{ptype.value}: combined allowed {config.allowed} != {total}")

    all_selected = [name for _, group in groups for name in group.selected]
    if not _same_names(config.selected, all_selected, normalizer):
        result.add_error(f"{ptype.value}: combined selection is stale")
    all_options = [name for _, group in groups for name in group.options]
    if not _same_names(config.options, all_options, normalizer):
        result.add_error(f"{ptype.value}: combined options are stale")

    sources_by_name = character.proficiency_sources.get(ptype, {})
    for source, group in groups:
        if len(group.selected) > group.allowed:
            result.add_error(
                f"{ptype.value}/{source.key}: {len(group.selected)} picks for "
                f"{group.allowed} slots"
            )
        any_allowed = offers_any(group.options)
        for name in group.selected:
            if not any_allowed and find_matching(group.options, name, normalizer) is None:
                result.add_error(f"{ptype.value}/{source.key}: '{name}' is not an option")
            key = find_matching(sources_by_name, name, normalizer)
            if key is None or source.choice_label not in sources_by_name[key]:
                result.add_error(
                    f"{ptype.value}/{source.key}: pick '{name}' is not granted "
                    f"as {source.choice_label}"
                )
    return result


def check_proficiency_invariants(
    character: Character | None,
    normalizer: Callable[[str], str] = normalize_for_lookup,
) -> ValidationResult:
    """
    Checks a character's proficiency records for internal consistency.

    Args:
        character (Character | None): The character to check.
        normalizer (Callable[[str], str]): The name normalisation in use.

    Returns:
        ValidationResult: Every violation found, valid when there is none.

    """
    result = ValidationResult()
    if character is None:
        result.add_error("No character to check")
        return result

    for ptype in ProficiencyType:
        result.merge(_check_presence(character, ptype, normalizer))
    for ptype in CHOICE_PROFICIENCY_TYPES:
        result.merge(_check_optional(character, ptype, normalizer))
    for ptype in SIMPLE_OPTIONAL_TYPES:
        if not isinstance(character.optional_proficiencies.get(ptype), SimpleOptionalConfig):
            result.add_error(f"{ptype.value}: missing flat choice record")
    return result
