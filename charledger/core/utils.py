"""
Utilities module for the proficiency ledger.

Provides the string normalisation used for every proficiency and ability
lookup, plus the small numeric helpers shared by the calculators.
"""

from __future__ import annotations

from typing import Any, Iterable

from .constants import ANY_OPTIONS, CHOICE_MARKER


# ---- Lookup Normalisation ----
def normalize_for_lookup(value: Any) -> str:
    """
    Normalises a name for case- and whitespace-insensitive comparison.

    Leading and trailing whitespace is dropped, inner runs of whitespace
    collapse to a single space and the result is case-folded. Non-string
    input normalises to the empty string.

    Args:
        value (Any): The name to normalise.

    Returns:
        str: The normalised lookup key.

    """
    if not isinstance(value, str):
        return ""
    return " ".join(value.split()).casefold()


def find_matching(
    names: Iterable[str],
    name: str,
    normalizer=normalize_for_lookup,
) -> str | None:
    """
    Returns the first entry of `names` equivalent to `name`, or None.

    Args:
        names (Iterable[str]): The stored names to search.
        name (str): The name to look for.
        normalizer (Callable[[str], str]): The normalisation function.

    Returns:
        str | None: The stored spelling of the match.

    """
    key = normalizer(name)
    for candidate in names:
        if normalizer(candidate) == key:
            return candidate
    return None


def is_choice_source(source: str) -> bool:
    """Whether a source label marks a player pick rather than a fixed grant."""
    return CHOICE_MARKER in source


def offers_any(options: Iterable[str]) -> bool:
    """Whether an option list contains the "choose anything" sentinel."""
    return any(option in ANY_OPTIONS for option in options)


def unique_by_key(
    values: Iterable[str],
    key=normalize_for_lookup,
) -> list[str]:
    """
    De-duplicates names that normalise to the same key.

    The first spelling seen wins and first-seen order is kept.

    Args:
        values (Iterable[str]): The names to de-duplicate.
        key (Callable[[str], str]): The normalisation function.

    Returns:
        list[str]: The de-duplicated names.

    """
    seen: dict[str, str] = {}
    for value in values:
        seen.setdefault(key(value), value)
    return list(seen.values())


# ---- Stat Modifier ----
def get_stat_modifier(score: int) -> int:
    """
    Calculates the D&D ability score modifier.

    Args:
        score (int): The ability score.

    Returns:
        int: The modifier for the given ability score.

    """
    return (score - 10) // 2


def format_modifier(modifier: Any) -> str:
    """
    Formats a modifier with an explicit sign ("+3", "-1", "+0").

    Args:
        modifier (Any): The modifier value.

    Returns:
        str: The signed modifier, "+0" for anything that is not a number.

    """
    if isinstance(modifier, bool) or not isinstance(modifier, (int, float)):
        return "+0"
    if modifier != modifier:  # NaN
        return "+0"
    modifier = int(modifier)
    return f"+{modifier}" if modifier >= 0 else str(modifier)
