"""
Optional proficiency choices.

Races, classes and backgrounds can let the player pick N entries of a
proficiency type from a list of options. Each source has its own slot group
per type; the tracker enforces each group's budget and keeps the combined
view of the three groups in step after every change.
"""

from typing import Iterable

from charledger.character.models import Character, OptionalConfig, SlotGroup
from charledger.core.constants import ChoiceSource, ProficiencyType
from charledger.core.error_handling import FailureKind, FailureReporter
from charledger.core.logging import log_debug, log_warning
from charledger.core.utils import find_matching, is_choice_source, unique_by_key
from charledger.events.event_system import (
    OptionalClearedEvent,
    OptionalConfiguredEvent,
    OptionalDeselectedEvent,
    OptionalSelectedEvent,
)

from .ledger import ProficiencyLedger


class OptionalChoiceTracker:
    """
    Configures, fills and empties per-source choice slots.

    Picks are materialised on the ledger under the "<Source> Choice" label
    so they can be told apart from fixed grants.

    Attributes:
        ledger (ProficiencyLedger):
            The ledger picks are granted through. Its emitter, normalizer
            and failure reporter are shared.

    """

    def __init__(self, ledger: ProficiencyLedger) -> None:
        self.ledger = ledger

    @property
    def reporter(self) -> FailureReporter:
        """The failure reporter shared with the ledger."""
        return self.ledger.reporter

    def _resolve(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
        source: ChoiceSource | str,
        operation: str,
    ) -> tuple[ProficiencyType, ChoiceSource, OptionalConfig, SlotGroup] | None:
        """Looks up the config and slot group an operation works on."""
        ptype = ProficiencyType.coerce(proficiency_type)
        if character is None or ptype is None:
            self.reporter.report(
                FailureKind.VALIDATION,
                f"Invalid parameters for {operation}",
                {"type": proficiency_type, "source": source},
            )
            return None

        config = character.optional_proficiencies.get(ptype)
        if not isinstance(config, OptionalConfig):
            self.reporter.report(
                FailureKind.NOT_FOUND,
                f"No per-source choice slots for {ptype.display_name}",
                {"operation": operation},
            )
            return None

        choice_source = ChoiceSource.coerce(source)
        if choice_source is None:
            self.reporter.report(
                FailureKind.NOT_FOUND,
                f"No optional proficiency configuration for source {source}",
                {"operation": operation, "type": ptype.value},
            )
            return None

        return ptype, choice_source, config, config.group(choice_source)

    # ============================================================================
    # CONFIGURATION
    # ============================================================================

    def set_optional_proficiencies(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
        source: ChoiceSource | str,
        allowed: int,
        options: Iterable[str],
    ) -> bool:
        """
        Sets how many picks a source grants for a type and from which options.

        Picks already made for the source are kept, even when the new
        budget is smaller than their number; that case is logged as a
        warning and check_proficiency_invariants flags the group.

        Args:
            character (Character | None): The character to change.
            proficiency_type (ProficiencyType | str): skills, languages or tools.
            source (ChoiceSource | str): race, class or background.
            allowed (int): Number of picks, zero or more.
            options (Iterable[str]): The names the player may pick from.

        Returns:
            bool: False when the request was rejected.

        """
        if isinstance(allowed, bool) or not isinstance(allowed, int) or allowed < 0:
            self.reporter.report(
                FailureKind.VALIDATION,
                "Allowed picks must be a non-negative integer",
                {"type": proficiency_type, "source": source, "allowed": allowed},
            )
            return False
        if options is None or isinstance(options, str):
            self.reporter.report(
                FailureKind.VALIDATION,
                "Options must be a list of names",
                {"type": proficiency_type, "source": source},
            )
            return False

        resolved = self._resolve(
            character, proficiency_type, source, "set_optional_proficiencies"
        )
        if resolved is None:
            return False
        ptype, choice_source, config, group = resolved

        if len(group.selected) > allowed:
            log_warning(
                "Choice budget is smaller than the picks already made",
                {
                    "type": ptype.value,
                    "source": choice_source.key,
                    "allowed": allowed,
                    "selected": len(group.selected),
                },
            )
        group.allowed = allowed
        group.options = unique_by_key(
            (option for option in options if option), self.ledger.normalizer
        )
        config.recalculate(self.ledger.normalizer)

        log_debug(
            "Optional proficiencies configured",
            {"type": ptype.value, "source": choice_source.key, "allowed": allowed},
        )
        self.ledger.emit(
            OptionalConfiguredEvent(
                proficiency_type=ptype,
                source=choice_source.key,
                allowed=allowed,
                options=list(group.options),
                character=character,
            )
        )
        return True

    def clear_optional_proficiencies(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
        source: ChoiceSource | str,
    ) -> bool:
        """
        Withdraws a source's picks and empties its slot group.

        Args:
            character (Character | None): The character to change.
            proficiency_type (ProficiencyType | str): skills, languages or tools.
            source (ChoiceSource | str): race, class or background.

        Returns:
            bool: False when the request was rejected.

        """
        resolved = self._resolve(
            character, proficiency_type, source, "clear_optional_proficiencies"
        )
        if resolved is None:
            return False
        ptype, choice_source, config, group = resolved

        for name in list(group.selected):
            self.ledger.remove_proficiency_from_source(
                character, ptype, name, choice_source.choice_label
            )
        config.reset_group(choice_source)
        config.recalculate(self.ledger.normalizer)

        self.ledger.emit(
            OptionalClearedEvent(
                proficiency_type=ptype,
                source=choice_source.key,
                character=character,
            )
        )
        return True

    # ============================================================================
    # SELECTION
    # ============================================================================

    def select_optional_proficiency(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
        source: ChoiceSource | str,
        proficiency: str,
    ) -> bool:
        """
        Spends one of a source's slots on an option.

        Args:
            character (Character | None): The character to change.
            proficiency_type (ProficiencyType | str): skills, languages or tools.
            source (ChoiceSource | str): race, class or background.
            proficiency (str): The option to pick.

        Returns:
            bool: True when the pick was made.

        """
        resolved = self._resolve(
            character, proficiency_type, source, "select_optional_proficiency"
        )
        if resolved is None:
            return False
        ptype, choice_source, config, group = resolved
        context = {
            "type": ptype.value,
            "source": choice_source.key,
            "proficiency": proficiency,
        }

        if not proficiency:
            self.reporter.report(
                FailureKind.VALIDATION, "No proficiency given to select", context
            )
            return False
        if find_matching(group.selected, proficiency, self.ledger.normalizer):
            self.reporter.report(
                FailureKind.VALIDATION, "Proficiency already selected", context
            )
            return False
        if len(group.selected) >= group.allowed:
            self.reporter.report(
                FailureKind.BUDGET_EXCEEDED,
                f"Maximum optional proficiencies already selected for {choice_source.key}",
                {**context, "allowed": group.allowed},
            )
            return False
        option = find_matching(group.options, proficiency, self.ledger.normalizer)
        if option is None:
            self.reporter.report(
                FailureKind.VALIDATION, "Proficiency not in available options", context
            )
            return False

        group.selected.append(option)
        self.ledger.add_proficiency(character, ptype, option, choice_source.choice_label)
        config.recalculate(self.ledger.normalizer)

        self.ledger.emit(
            OptionalSelectedEvent(
                proficiency_type=ptype,
                source=choice_source.key,
                proficiency=option,
                character=character,
            )
        )
        return True

    def deselect_optional_proficiency(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
        source: ChoiceSource | str,
        proficiency: str,
    ) -> bool:
        """
        Gives back a slot spent on an option.

        Only the source's "<Source> Choice" label is withdrawn, so the
        proficiency stays when another source also grants it.

        Returns:
            bool: True when the pick was undone.

        """
        resolved = self._resolve(
            character, proficiency_type, source, "deselect_optional_proficiency"
        )
        if resolved is None:
            return False
        ptype, choice_source, config, group = resolved

        match = find_matching(group.selected, proficiency, self.ledger.normalizer)
        if match is None:
            self.reporter.report(
                FailureKind.NOT_FOUND,
                "Proficiency is not selected",
                {"type": ptype.value, "source": choice_source.key, "proficiency": proficiency},
            )
            return False

        group.selected.remove(match)
        self.ledger.remove_proficiency_from_source(
            character, ptype, match, choice_source.choice_label
        )
        config.recalculate(self.ledger.normalizer)

        self.ledger.emit(
            OptionalDeselectedEvent(
                proficiency_type=ptype,
                source=choice_source.key,
                proficiency=match,
                character=character,
            )
        )
        return True

    # ============================================================================
    # QUERIES
    # ============================================================================

    def get_available_optional_proficiencies(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
        source: ChoiceSource | str,
    ) -> list[str]:
        """
        Lists the options a source still offers.

        Options already picked for this source, and options the character
        already has from a fixed grant, are left out.

        Returns:
            list[str]: The options, in configured order.

        """
        ptype = ProficiencyType.coerce(proficiency_type)
        if character is None or ptype is None:
            return []
        config = character.optional_proficiencies.get(ptype)
        if not isinstance(config, OptionalConfig):
            return []
        group = config.group(source)
        if group is None:
            return []

        available = []
        for option in group.options:
            if find_matching(group.selected, option, self.ledger.normalizer):
                continue
            sources = self.ledger.find_proficiency_sources(character, ptype, option)
            if any(not is_choice_source(label) for label in sources):
                continue
            available.append(option)
        return available

    def recalculate_optional_proficiencies(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
    ) -> None:
        """Rebuilds a type's combined allowed/options/selected view."""
        ptype = ProficiencyType.coerce(proficiency_type)
        if character is None or ptype is None:
            return
        config = character.optional_proficiencies.get(ptype)
        if isinstance(config, OptionalConfig):
            config.recalculate(self.ledger.normalizer)
