"""
Refund of redundant skill choices.

When a skill is granted outright by one source after the player already
spent a choice slot of another source on it, that slot is handed back: the
pick is removed from the other source's selections and its "<Source> Choice"
label is withdrawn. The skill itself stays, now granted by the fixed source.
"""

from typing import TYPE_CHECKING

from charledger.character.models import Character, OptionalConfig
from charledger.core.constants import ChoiceSource, ProficiencyType
from charledger.core.logging import log_debug, log_warning
from charledger.core.utils import find_matching
from charledger.events.event_system import ProficiencyRefundedEvent

if TYPE_CHECKING:
    from .ledger import ProficiencyLedger


class RefundRule:
    """Frees skill choice slots that a fixed grant has made redundant."""

    def __init__(self, ledger: "ProficiencyLedger") -> None:
        self.ledger = ledger

    def apply(
        self,
        character: Character,
        proficiency: str,
        source: str,
    ) -> list[ChoiceSource]:
        """
        Refunds other sources' picks of a skill that was just granted.

        The granting source's own slots are never refunded.

        Args:
            character (Character): The character that received the grant.
            proficiency (str): The granted skill.
            source (str): The fixed source label of the grant.

        Returns:
            list[ChoiceSource]: The sources whose slot was refunded.

        """
        config = character.optional_proficiencies.get(ProficiencyType.SKILLS)
        if not isinstance(config, OptionalConfig):
            return []

        granting = ChoiceSource.coerce(source)
        refunded: list[ChoiceSource] = []

        for choice_source, group in config.groups():
            match = find_matching(group.selected, proficiency, self.ledger.normalizer)
            if match is None:
                continue
            if choice_source is granting:
                log_warning(
                    "Fixed skill grant overlaps a pick of the same source, not refunded",
                    {"proficiency": proficiency, "source": source},
                )
                continue

            group.selected.remove(match)
            self.ledger.remove_proficiency_from_source(
                character,
                ProficiencyType.SKILLS,
                match,
                choice_source.choice_label,
            )
            refunded.append(choice_source)

        if refunded:
            config.recalculate(self.ledger.normalizer)
            log_debug(
                "Skill choice refunded",
                {
                    "proficiency": proficiency,
                    "source": source,
                    "refunded": ",".join(s.key for s in refunded),
                },
            )
            self.ledger.emit(
                ProficiencyRefundedEvent(
                    proficiency_type=ProficiencyType.SKILLS,
                    proficiency=proficiency,
                    character=character,
                )
            )
        return refunded
