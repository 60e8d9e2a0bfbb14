"""
Proficiency service.

A single entry point for host applications: wires a ledger, a choice
tracker, a grant applier and an ability tracker to the same emitter and
failure reporter, and adds the rule-book catalog and character-level
modifier queries a character sheet needs.
"""

from typing import Any, Callable, Iterable

from charledger.abilities.bonuses import AbilityScoreTracker
from charledger.character.models import Character
from charledger.core.constants import (
    ABILITY_ABBREVIATIONS,
    STANDARD_LANGUAGE_OPTIONS,
    STANDARD_SKILL_OPTIONS,
    STANDARD_TOOL_OPTIONS,
    ChoiceSource,
    ProficiencyType,
)
from charledger.core.error_handling import FailureKind, FailureReporter
from charledger.core.utils import find_matching, normalize_for_lookup
from charledger.events.event_system import Emitter

from . import calculator
from .grants import GrantApplier, SourceGrants
from .ledger import ProficiencyLedger
from .optional import OptionalChoiceTracker


class ProficiencyService:
    """
    Facade over the proficiency and ability engines.

    Attributes:
        reporter (FailureReporter): Shared by every engine.
        ledger (ProficiencyLedger): Source-tracked proficiencies.
        tracker (OptionalChoiceTracker): Per-source choice slots.
        grants (GrantApplier): Whole-source grant application.
        abilities (AbilityScoreTracker): Ability scores and bonuses.

    """

    def __init__(
        self,
        emitter: Emitter | None = None,
        normalizer: Callable[[str], str] = normalize_for_lookup,
        reporter: FailureReporter | None = None,
    ) -> None:
        self.reporter = reporter or FailureReporter()
        self.ledger = ProficiencyLedger(emitter, normalizer, self.reporter)
        self.tracker = OptionalChoiceTracker(self.ledger)
        self.grants = GrantApplier(self.tracker)
        self.abilities = AbilityScoreTracker(emitter, self.reporter)

    # ============================================================================
    # LEDGER
    # ============================================================================

    def initialize_proficiency_structures(self, character: Character | None) -> None:
        self.ledger.initialize_proficiency_structures(character)

    def add_proficiency(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
        proficiency: str,
        source: str,
    ) -> bool:
        return self.ledger.add_proficiency(character, proficiency_type, proficiency, source)

    def remove_proficiencies_by_source(
        self,
        character: Character | None,
        source: str,
    ) -> dict[ProficiencyType, list[str]]:
        return self.ledger.remove_proficiencies_by_source(character, source)

    def has_proficiency(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
        proficiency: str,
    ) -> bool:
        return self.ledger.has_proficiency(character, proficiency_type, proficiency)

    def get_proficiency_sources(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
        proficiency: str,
    ) -> set[str]:
        return self.ledger.get_proficiency_sources(character, proficiency_type, proficiency)

    def get_proficiencies_with_sources(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
    ) -> list[dict[str, Any]]:
        return self.ledger.get_proficiencies_with_sources(character, proficiency_type)

    # ============================================================================
    # OPTIONAL CHOICES
    # ============================================================================

    def set_optional_proficiencies(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
        source: ChoiceSource | str,
        allowed: int,
        options: Iterable[str],
    ) -> bool:
        return self.tracker.set_optional_proficiencies(
            character, proficiency_type, source, allowed, options
        )

    def clear_optional_proficiencies(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
        source: ChoiceSource | str,
    ) -> bool:
        return self.tracker.clear_optional_proficiencies(character, proficiency_type, source)

    def select_optional_proficiency(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
        source: ChoiceSource | str,
        proficiency: str,
    ) -> bool:
        return self.tracker.select_optional_proficiency(
            character, proficiency_type, source, proficiency
        )

    def deselect_optional_proficiency(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
        source: ChoiceSource | str,
        proficiency: str,
    ) -> bool:
        return self.tracker.deselect_optional_proficiency(
            character, proficiency_type, source, proficiency
        )

    def get_available_optional_proficiencies(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
        source: ChoiceSource | str,
    ) -> list[str]:
        return self.tracker.get_available_optional_proficiencies(
            character, proficiency_type, source
        )

    def recalculate_optional_proficiencies(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
    ) -> None:
        self.tracker.recalculate_optional_proficiencies(character, proficiency_type)

    # ============================================================================
    # SOURCE GRANTS
    # ============================================================================

    def apply_source_grants(
        self,
        character: Character | None,
        source: str,
        grants: SourceGrants,
    ) -> dict[ProficiencyType, list[str]]:
        return self.grants.apply_source_grants(character, source, grants)

    def remove_source_grants(
        self,
        character: Character | None,
        source: str,
    ) -> dict[ProficiencyType, list[str]]:
        return self.grants.remove_source_grants(character, source)

    # ============================================================================
    # CATALOG
    # ============================================================================

    @staticmethod
    def get_available_skills() -> list[str]:
        return list(STANDARD_SKILL_OPTIONS)

    @staticmethod
    def get_available_tools() -> list[str]:
        return list(STANDARD_TOOL_OPTIONS)

    @staticmethod
    def get_available_languages() -> list[str]:
        return list(STANDARD_LANGUAGE_OPTIONS)

    @staticmethod
    def validate_skill(skill: str) -> bool:
        """Whether a name is a standard skill, any spelling."""
        return bool(skill) and find_matching(STANDARD_SKILL_OPTIONS, skill) is not None

    @staticmethod
    def validate_tool(tool: str) -> bool:
        return bool(tool) and find_matching(STANDARD_TOOL_OPTIONS, tool) is not None

    @staticmethod
    def validate_language(language: str) -> bool:
        return bool(language) and find_matching(STANDARD_LANGUAGE_OPTIONS, language) is not None

    @staticmethod
    def get_skill_ability(skill: str) -> str | None:
        return calculator.get_skill_ability(skill)

    # ============================================================================
    # MODIFIERS
    # ============================================================================

    def get_proficiency_bonus(self, character: Character | None) -> int:
        if character is None:
            return calculator.calculate_proficiency_bonus(1)
        return calculator.calculate_proficiency_bonus(character.level)

    def calculate_skill_modifier(
        self,
        character: Character | None,
        skill: str,
        has_expertise: bool = False,
    ) -> int:
        """
        Calculates a character's modifier for a skill.

        Args:
            character (Character | None): The character.
            skill (str): The skill, any spelling.
            has_expertise (bool): Whether the bonus is doubled.

        Returns:
            int: The modifier, 0 for an unknown skill or no character.

        """
        ability = calculator.get_skill_ability(skill)
        if character is None or ability is None:
            self.reporter.report(
                FailureKind.VALIDATION,
                "Cannot calculate skill modifier",
                {"skill": skill},
            )
            return 0
        return calculator.calculate_skill_modifier(
            self.abilities.get_modifier(character, ability),
            self.get_proficiency_bonus(character),
            self.ledger.has_proficiency(character, ProficiencyType.SKILLS, skill),
            has_expertise,
        )

    def calculate_saving_throw_modifier(
        self,
        character: Character | None,
        ability: str,
    ) -> int:
        """
        Calculates a character's saving throw modifier for an ability.

        Saving throw proficiencies may be stored by full name or
        abbreviation ("Dexterity" or "dex").

        """
        name = self.abilities.normalize_ability_name(ability)
        if character is None or name is None:
            self.reporter.report(
                FailureKind.VALIDATION,
                "Cannot calculate saving throw modifier",
                {"ability": ability},
            )
            return 0
        spellings = [name] + [abbr for abbr, full in ABILITY_ABBREVIATIONS.items() if full == name]
        proficient = any(
            self.ledger.has_proficiency(character, ProficiencyType.SAVING_THROWS, spelling)
            for spelling in spellings
        )
        return calculator.calculate_saving_throw_modifier(
            self.abilities.get_modifier(character, name),
            self.get_proficiency_bonus(character),
            proficient,
        )

    def calculate_passive_perception(self, character: Character | None) -> int:
        """10 plus the Perception modifier."""
        return 10 + self.calculate_skill_modifier(character, "Perception")
