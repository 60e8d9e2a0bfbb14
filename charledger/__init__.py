"""
charledger: source-tracked proficiency and ability score bookkeeping for a
tabletop RPG character builder.

Every proficiency a character has remembers which sources (race, class,
background, player choices, ...) grant it, so a source can be withdrawn
without disturbing what other sources grant. Races, classes and backgrounds
can also offer per-source choice slots with their own budgets.
"""

from charledger.abilities import AbilityScoreTracker
from charledger.character import (
    AbilityBonus,
    AbilityChoice,
    Character,
    OptionalConfig,
    SimpleOptionalConfig,
    SlotGroup,
)
from charledger.core import (
    ChoiceSource,
    FailureKind,
    FailureReporter,
    ProficiencyType,
    normalize_for_lookup,
    setup_logging,
)
from charledger.events import EventBus, EventType
from charledger.proficiencies import (
    GrantApplier,
    OptionalChoiceTracker,
    ProficiencyLedger,
    ProficiencyService,
    SourceGrants,
    check_proficiency_invariants,
    parse_source_grants,
)

__version__ = "0.1.0"

__all__ = [
    "AbilityBonus",
    "AbilityChoice",
    "AbilityScoreTracker",
    "Character",
    "ChoiceSource",
    "EventBus",
    "EventType",
    "FailureKind",
    "FailureReporter",
    "GrantApplier",
    "OptionalChoiceTracker",
    "OptionalConfig",
    "ProficiencyLedger",
    "ProficiencyService",
    "ProficiencyType",
    "SimpleOptionalConfig",
    "SlotGroup",
    "SourceGrants",
    "check_proficiency_invariants",
    "normalize_for_lookup",
    "parse_source_grants",
    "setup_logging",
]
