"""
Pure proficiency bonus and modifier calculations.
"""

from typing import Any, Iterable

from charledger.core.constants import SKILL_ABILITIES
from charledger.core.utils import normalize_for_lookup


def calculate_proficiency_bonus(level: Any) -> int:
    """
    Calculates the proficiency bonus for a character level.

    Args:
        level (Any): The character level (1-20).

    Returns:
        int: The bonus, from +2 at level 1 to +6 at level 17; +2 for any
        level that is not a positive number.

    """
    if isinstance(level, bool) or not isinstance(level, (int, float)) or level < 1:
        return 2
    if level >= 17:
        return 6
    if level >= 13:
        return 5
    if level >= 9:
        return 4
    if level >= 5:
        return 3
    return 2


def get_skill_ability(skill: str | None) -> str | None:
    """Returns the ability a skill is rolled with, None for unknown skills."""
    if not skill:
        return None
    return SKILL_ABILITIES.get(normalize_for_lookup(skill))


def calculate_skill_modifier(
    ability_modifier: int,
    proficiency_bonus: int,
    is_proficient: bool = False,
    has_expertise: bool = False,
) -> int:
    """
    Calculates a skill modifier.

    Expertise doubles the proficiency bonus and implies proficiency.

    Args:
        ability_modifier (int): The modifier of the skill's ability.
        proficiency_bonus (int): The character's proficiency bonus.
        is_proficient (bool): Whether the character is proficient.
        has_expertise (bool): Whether the character has expertise.

    Returns:
        int: The skill modifier.

    """
    modifier = ability_modifier or 0
    if has_expertise:
        modifier += proficiency_bonus * 2
    elif is_proficient:
        modifier += proficiency_bonus
    return modifier


def calculate_saving_throw_modifier(
    ability_modifier: int,
    proficiency_bonus: int,
    is_proficient: bool = False,
) -> int:
    """Calculates a saving throw modifier."""
    modifier = ability_modifier or 0
    if is_proficient:
        modifier += proficiency_bonus
    return modifier


def calculate_passive_score(
    ability_modifier: int,
    proficiency_bonus: int,
    is_proficient: bool = False,
    has_expertise: bool = False,
) -> int:
    """
    Calculates a passive check score: 10 plus the skill modifier.

    Used for passive Perception, Investigation and Insight.

    """
    return 10 + calculate_skill_modifier(
        ability_modifier, proficiency_bonus, is_proficient, has_expertise
    )


def merge_proficiencies(*proficiency_lists: Iterable[str] | None) -> list[str]:
    """
    Merges proficiency lists into one normalised, sorted, duplicate-free list.

    Entries that are not non-empty strings are skipped.

    """
    merged: set[str] = set()
    for names in proficiency_lists:
        if not names or isinstance(names, str):
            continue
        for name in names:
            if isinstance(name, str) and name.strip():
                merged.add(normalize_for_lookup(name))
    return sorted(merged)


def has_proficiency_in(proficiencies: Iterable[str] | None, proficiency: str) -> bool:
    """Whether a plain list of names contains a proficiency, any spelling."""
    if not proficiencies or not proficiency:
        return False
    key = normalize_for_lookup(proficiency)
    return any(
        isinstance(name, str) and normalize_for_lookup(name) == key
        for name in proficiencies
    )
