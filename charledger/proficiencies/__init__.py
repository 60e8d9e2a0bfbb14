"""
Proficiency module for the proficiency ledger.

Contains the source-tracked ledger, the per-source choice slot tracker, the
refund rule tying the two together, whole-source grant application, the
pure modifier calculations and the service facade over all of them.
"""

from .calculator import (
    calculate_passive_score,
    calculate_proficiency_bonus,
    calculate_saving_throw_modifier,
    calculate_skill_modifier,
    get_skill_ability,
    has_proficiency_in,
    merge_proficiencies,
)
from .grants import (
    PROFICIENCY_BLOCK_KEYS,
    ChoiceSpec,
    GrantApplier,
    SourceGrants,
    parse_proficiency_block,
    parse_source_grants,
)
from .invariants import ValidationResult, check_proficiency_invariants
from .ledger import ProficiencyLedger
from .optional import OptionalChoiceTracker
from .refund import RefundRule
from .service import ProficiencyService

__all__ = [
    # Import from calculator.py
    "calculate_passive_score",
    "calculate_proficiency_bonus",
    "calculate_saving_throw_modifier",
    "calculate_skill_modifier",
    "get_skill_ability",
    "has_proficiency_in",
    "merge_proficiencies",
    # Import from grants.py
    "PROFICIENCY_BLOCK_KEYS",
    "ChoiceSpec",
    "GrantApplier",
    "SourceGrants",
    "parse_proficiency_block",
    "parse_source_grants",
    # Import from invariants.py
    "ValidationResult",
    "check_proficiency_invariants",
    # Import from ledger.py
    "ProficiencyLedger",
    # Import from optional.py
    "OptionalChoiceTracker",
    # Import from refund.py
    "RefundRule",
    # Import from service.py
    "ProficiencyService",
]
