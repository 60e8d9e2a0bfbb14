"""
Event system module for the proficiency ledger.

Defines the notifications the ledger sends whenever it changes a character,
so that a user interface can re-render from the ledger's read API.
"""

from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel, Field

from charledger.core.constants import ProficiencyType


class EventType(Enum):
    """Enumeration of the notifications sent by the ledger."""

    PROFICIENCY_ADDED = "proficiency:added"
    PROFICIENCY_REMOVED_BY_SOURCE = "proficiency:removedBySource"
    PROFICIENCY_REFUNDED = "proficiency:refunded"
    PROFICIENCY_OPTIONAL_CONFIGURED = "proficiency:optionalConfigured"
    PROFICIENCY_OPTIONAL_CLEARED = "proficiency:optionalCleared"
    PROFICIENCY_OPTIONAL_SELECTED = "proficiency:optionalSelected"
    PROFICIENCY_OPTIONAL_DESELECTED = "proficiency:optionalDeselected"

    ABILITY_SCORES_CHANGED = "abilityScores:changed"


class ProficiencyEvent(BaseModel):
    """Base class for all ledger notifications."""

    event_type: EventType = Field(
        description="The type of the notification.",
    )
    character: Any = Field(description="The character record that changed.")


class ProficiencyAddedEvent(ProficiencyEvent):
    """Sent after a proficiency was granted (or re-granted) by a source."""

    event_type: EventType = Field(
        default=EventType.PROFICIENCY_ADDED,
        description="The type of the notification.",
    )
    proficiency_type: ProficiencyType = Field(description="The proficiency type.")
    proficiency: str = Field(description="The stored name of the proficiency.")
    source: str = Field(description="The source that granted it.")

    def __str__(self) -> str:
        return (
            f"ProficiencyAddedEvent({self.proficiency_type.value}:"
            f"{self.proficiency} from {self.source})"
        )


class ProficiencyRemovedBySourceEvent(ProficiencyEvent):
    """Sent after every grant of a source was withdrawn."""

    event_type: EventType = Field(
        default=EventType.PROFICIENCY_REMOVED_BY_SOURCE,
        description="The type of the notification.",
    )
    source: str = Field(description="The withdrawn source.")
    removed: dict[ProficiencyType, list[str]] = Field(
        default_factory=dict,
        description="Per type, the names that lost the source.",
    )

    def __str__(self) -> str:
        count = sum(len(names) for names in self.removed.values())
        return f"ProficiencyRemovedBySourceEvent({self.source}, {count} entries)"


class ProficiencyRefundedEvent(ProficiencyEvent):
    """Sent when a fixed grant freed a choice slot spent on the same name."""

    event_type: EventType = Field(
        default=EventType.PROFICIENCY_REFUNDED,
        description="The type of the notification.",
    )
    proficiency_type: ProficiencyType = Field(
        default=ProficiencyType.SKILLS,
        description="The proficiency type.",
    )
    proficiency: str = Field(description="The refunded proficiency.")

    def __str__(self) -> str:
        return f"ProficiencyRefundedEvent({self.proficiency})"


class OptionalConfiguredEvent(ProficiencyEvent):
    """Sent after a source's choice slots were (re)configured."""

    event_type: EventType = Field(
        default=EventType.PROFICIENCY_OPTIONAL_CONFIGURED,
        description="The type of the notification.",
    )
    proficiency_type: ProficiencyType = Field(description="The proficiency type.")
    source: str = Field(description="The source key (race, class, background).")
    allowed: int = Field(description="The configured number of picks.")
    options: list[str] = Field(description="The configured options.")


class OptionalClearedEvent(ProficiencyEvent):
    """Sent after a source's choice slots and picks were cleared."""

    event_type: EventType = Field(
        default=EventType.PROFICIENCY_OPTIONAL_CLEARED,
        description="The type of the notification.",
    )
    proficiency_type: ProficiencyType = Field(description="The proficiency type.")
    source: str = Field(description="The source key (race, class, background).")


class OptionalSelectedEvent(ProficiencyEvent):
    """Sent after the player picked an option."""

    event_type: EventType = Field(
        default=EventType.PROFICIENCY_OPTIONAL_SELECTED,
        description="The type of the notification.",
    )
    proficiency_type: ProficiencyType = Field(description="The proficiency type.")
    source: str = Field(description="The source key (race, class, background).")
    proficiency: str = Field(description="The picked proficiency.")


class OptionalDeselectedEvent(ProficiencyEvent):
    """Sent after the player un-picked an option."""

    event_type: EventType = Field(
        default=EventType.PROFICIENCY_OPTIONAL_DESELECTED,
        description="The type of the notification.",
    )
    proficiency_type: ProficiencyType = Field(description="The proficiency type.")
    source: str = Field(description="The source key (race, class, background).")
    proficiency: str = Field(description="The released proficiency.")


class AbilityScoresChangedEvent(ProficiencyEvent):
    """Sent after a base score, bonus or racial ability choice changed."""

    event_type: EventType = Field(
        default=EventType.ABILITY_SCORES_CHANGED,
        description="The type of the notification.",
    )
    ability: str | None = Field(
        default=None,
        description="The ability that changed, None when several did.",
    )


# Fire-and-forget notification sink, e.g. EventBus.emit.
Emitter = Callable[[EventType, ProficiencyEvent], None]
