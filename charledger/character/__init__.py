"""
Character record module for the proficiency ledger.

This module defines the character record and the nested records (choice
slot groups, ability bonuses and ability choices) that the ledger mutates.
"""

from .models import (
    AbilityBonus,
    AbilityChoice,
    Character,
    OptionalConfig,
    SimpleOptionalConfig,
    SlotGroup,
    ensure_proficiency_structures,
)

__all__ = [
    # Import from models.py
    "AbilityBonus",
    "AbilityChoice",
    "Character",
    "OptionalConfig",
    "SimpleOptionalConfig",
    "SlotGroup",
    "ensure_proficiency_structures",
]
