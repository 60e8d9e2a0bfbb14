"""
Core module for the proficiency ledger.

Holds the constants, lookup normalisation, logging setup and fail-soft
error reporting shared by every other subpackage.
"""

from .constants import (
    ABILITY_ABBREVIATIONS,
    ABILITY_NAMES,
    ANY_OPTIONS,
    CHOICE_MARKER,
    CHOICE_PROFICIENCY_TYPES,
    DEFAULT_ABILITY_SCORE,
    DEFAULT_LANGUAGE,
    DEFAULT_SOURCE,
    MAX_ABILITY_SCORE,
    MIN_ABILITY_SCORE,
    RACIAL_BONUS_SOURCES,
    SIMPLE_OPTIONAL_TYPES,
    SKILL_ABILITIES,
    STANDARD_LANGUAGE_OPTIONS,
    STANDARD_OPTIONS,
    STANDARD_SKILL_OPTIONS,
    STANDARD_TOOL_OPTIONS,
    ChoiceSource,
    ProficiencyType,
)
from .error_handling import FailureKind, FailureReporter, LedgerFailure
from .logging import (
    get_logger,
    log_debug,
    log_error,
    log_info,
    log_warning,
    setup_logging,
)
from .utils import (
    find_matching,
    format_modifier,
    get_stat_modifier,
    is_choice_source,
    normalize_for_lookup,
    offers_any,
    unique_by_key,
)

__all__ = [
    # Import from constants.py
    "ABILITY_ABBREVIATIONS",
    "ABILITY_NAMES",
    "ANY_OPTIONS",
    "CHOICE_MARKER",
    "CHOICE_PROFICIENCY_TYPES",
    "DEFAULT_ABILITY_SCORE",
    "DEFAULT_LANGUAGE",
    "DEFAULT_SOURCE",
    "MAX_ABILITY_SCORE",
    "MIN_ABILITY_SCORE",
    "RACIAL_BONUS_SOURCES",
    "SIMPLE_OPTIONAL_TYPES",
    "SKILL_ABILITIES",
    "STANDARD_LANGUAGE_OPTIONS",
    "STANDARD_OPTIONS",
    "STANDARD_SKILL_OPTIONS",
    "STANDARD_TOOL_OPTIONS",
    "ChoiceSource",
    "ProficiencyType",
    # Import from error_handling.py
    "FailureKind",
    "FailureReporter",
    "LedgerFailure",
    # Import from logging.py
    "get_logger",
    "log_debug",
    "log_error",
    "log_info",
    "log_warning",
    "setup_logging",
    # Import from utils.py
    "find_matching",
    "format_modifier",
    "get_stat_modifier",
    "is_choice_source",
    "normalize_for_lookup",
    "offers_any",
    "unique_by_key",
]
