"""
Event module for the proficiency ledger.

Contains the notification types sent by the ledger and a synchronous event
bus that user interfaces can subscribe to.
"""

from .event_bus import EventBus
from .event_system import (
    AbilityScoresChangedEvent,
    Emitter,
    EventType,
    OptionalClearedEvent,
    OptionalConfiguredEvent,
    OptionalDeselectedEvent,
    OptionalSelectedEvent,
    ProficiencyAddedEvent,
    ProficiencyEvent,
    ProficiencyRefundedEvent,
    ProficiencyRemovedBySourceEvent,
)

__all__ = [
    # Import from event_bus.py
    "EventBus",
    # Import from event_system.py
    "AbilityScoresChangedEvent",
    "Emitter",
    "EventType",
    "OptionalClearedEvent",
    "OptionalConfiguredEvent",
    "OptionalDeselectedEvent",
    "OptionalSelectedEvent",
    "ProficiencyAddedEvent",
    "ProficiencyEvent",
    "ProficiencyRefundedEvent",
    "ProficiencyRemovedBySourceEvent",
]
