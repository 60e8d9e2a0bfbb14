"""
Ability module for the proficiency ledger.

Tracks base ability scores, the source-tagged bonuses applied on top of
them and racial ability choices.
"""

from .bonuses import AbilityScoreTracker, choice_source_label

__all__ = [
    # Import from bonuses.py
    "AbilityScoreTracker",
    "choice_source_label",
]
