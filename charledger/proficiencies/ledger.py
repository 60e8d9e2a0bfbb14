"""
Proficiency ledger.

Tracks which proficiencies a character has and which sources (race, class,
background, player choices, ...) grant each of them. A proficiency stays on
the character for as long as at least one source still grants it.
"""

from typing import Any, Callable

from charledger.character.models import Character, ensure_proficiency_structures
from charledger.core.constants import DEFAULT_LANGUAGE, DEFAULT_SOURCE, ProficiencyType
from charledger.core.error_handling import FailureKind, FailureReporter
from charledger.core.logging import log_debug
from charledger.core.utils import find_matching, is_choice_source, normalize_for_lookup
from charledger.events.event_system import (
    Emitter,
    ProficiencyAddedEvent,
    ProficiencyEvent,
    ProficiencyRemovedBySourceEvent,
)

from .refund import RefundRule


class ProficiencyLedger:
    """
    Adds, removes and queries source-tracked proficiencies on a character.

    The ledger holds no character state. Every operation takes the
    character record it works on; the ledger itself only keeps its
    collaborators.

    Attributes:
        emitter (Emitter | None):
            Receives a notification after every change, may be None.
        normalizer (Callable[[str], str]):
            Folds names for case- and whitespace-insensitive matching.
        reporter (FailureReporter):
            Records rejected operations.
        refund_rule (RefundRule):
            Frees choice slots made redundant by fixed skill grants.

    """

    def __init__(
        self,
        emitter: Emitter | None = None,
        normalizer: Callable[[str], str] = normalize_for_lookup,
        reporter: FailureReporter | None = None,
    ) -> None:
        self.emitter = emitter
        self.normalizer = normalizer
        self.reporter = reporter or FailureReporter()
        self.refund_rule = RefundRule(self)

    def emit(self, event: ProficiencyEvent) -> None:
        """Forwards a notification to the emitter, if there is one."""
        if self.emitter is not None:
            self.emitter(event.event_type, event)

    # ============================================================================
    # STRUCTURE
    # ============================================================================

    def initialize_proficiency_structures(self, character: Character | None) -> None:
        """
        Gives a character the full proficiency shape and default grants.

        Missing per-type lists, source maps and optional configs are
        created; a character without any language learns Common.

        Args:
            character (Character | None): The record to initialise.

        """
        if character is None:
            self.reporter.report(
                FailureKind.VALIDATION,
                "Cannot initialize proficiencies without a character",
            )
            return
        ensure_proficiency_structures(character)
        if not character.proficiencies[ProficiencyType.LANGUAGES]:
            self.add_proficiency(
                character, ProficiencyType.LANGUAGES, DEFAULT_LANGUAGE, DEFAULT_SOURCE
            )

    def canonical_name(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
        proficiency: str,
    ) -> str | None:
        """
        Returns the stored spelling of a proficiency the character has.

        Args:
            character (Character | None): The character to search.
            proficiency_type (ProficiencyType | str): The proficiency type.
            proficiency (str): Any spelling of the proficiency.

        Returns:
            str | None: The stored spelling, or None when not present.

        """
        ptype = ProficiencyType.coerce(proficiency_type)
        if character is None or ptype is None or not proficiency:
            return None
        names = character.proficiencies.get(ptype, [])
        match = find_matching(names, proficiency, self.normalizer)
        if match is None:
            match = find_matching(
                character.proficiency_sources.get(ptype, {}), proficiency, self.normalizer
            )
        return match

    # ============================================================================
    # MUTATION
    # ============================================================================

    def add_proficiency(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
        proficiency: str,
        source: str,
    ) -> bool:
        """
        Grants a proficiency to a character on behalf of a source.

        A spelling that normalises to an existing entry reuses that entry,
        so the first spelling stored wins. Granting a skill from a fixed
        (non-choice) source refunds any choice slot other sources spent on
        the same skill.

        Args:
            character (Character | None): The character to change.
            proficiency_type (ProficiencyType | str): The proficiency type.
            proficiency (str): The proficiency name.
            source (str): The granting source label, e.g. "Race".

        Returns:
            bool: True when the character did not have the proficiency yet.

        """
        ptype = ProficiencyType.coerce(proficiency_type)
        if not character or not ptype or not proficiency or not source:
            self.reporter.report(
                FailureKind.VALIDATION,
                "Invalid parameters for add_proficiency",
                {
                    "type": proficiency_type,
                    "proficiency": proficiency,
                    "source": source,
                },
            )
            return False

        names = character.proficiencies.setdefault(ptype, [])
        sources_by_name = character.proficiency_sources.setdefault(ptype, {})

        key = self.canonical_name(character, ptype, proficiency) or proficiency
        was_new = key not in names
        if was_new:
            names.append(key)
        sources_by_name.setdefault(key, set()).add(source)

        log_debug(
            "Proficiency granted",
            {"type": ptype.value, "proficiency": key, "source": source, "new": was_new},
        )

        if ptype is ProficiencyType.SKILLS and not is_choice_source(source):
            self.refund_rule.apply(character, key, source)

        self.emit(
            ProficiencyAddedEvent(
                proficiency_type=ptype,
                proficiency=key,
                source=source,
                character=character,
            )
        )
        return was_new

    def remove_proficiencies_by_source(
        self,
        character: Character | None,
        source: str,
    ) -> dict[ProficiencyType, list[str]]:
        """
        Withdraws every grant of a source across all proficiency types.

        Proficiencies left without any source are removed from the
        character.

        Args:
            character (Character | None): The character to change.
            source (str): The source label to withdraw, e.g. "Class".

        Returns:
            dict[ProficiencyType, list[str]]:
                Per type, the names that lost the source, whether or not
                other sources still grant them.

        """
        if not character or not source:
            self.reporter.report(
                FailureKind.VALIDATION,
                "Invalid parameters for remove_proficiencies_by_source",
                {"source": source},
            )
            return {}

        removed: dict[ProficiencyType, list[str]] = {}
        for ptype, sources_by_name in character.proficiency_sources.items():
            removed[ptype] = []
            for name, sources in list(sources_by_name.items()):
                if source not in sources:
                    continue
                sources.discard(source)
                removed[ptype].append(name)
                if not sources:
                    self._drop(character, ptype, name)

        log_debug(
            "Source withdrawn",
            {"source": source, "count": sum(len(names) for names in removed.values())},
        )
        self.emit(
            ProficiencyRemovedBySourceEvent(
                source=source,
                removed=removed,
                character=character,
            )
        )
        return removed

    def remove_proficiency_from_source(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
        proficiency: str,
        source: str,
    ) -> bool:
        """
        Withdraws one source from one proficiency.

        The proficiency is removed from the character when no other source
        grants it. No notification is sent; callers send their own.

        Args:
            character (Character | None): The character to change.
            proficiency_type (ProficiencyType | str): The proficiency type.
            proficiency (str): Any spelling of the proficiency.
            source (str): The exact source label to withdraw.

        Returns:
            bool: True when the source was granting the proficiency.

        """
        ptype = ProficiencyType.coerce(proficiency_type)
        key = self.canonical_name(character, ptype, proficiency)
        if key is None:
            return False
        sources = character.proficiency_sources[ptype].get(key)
        if not sources or source not in sources:
            return False
        sources.discard(source)
        if not sources:
            self._drop(character, ptype, key)
        return True

    def _drop(self, character: Character, ptype: ProficiencyType, name: str) -> None:
        character.proficiency_sources[ptype].pop(name, None)
        names = character.proficiencies.get(ptype, [])
        if name in names:
            names.remove(name)

    # ============================================================================
    # QUERIES
    # ============================================================================

    def has_proficiency(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
        proficiency: str,
    ) -> bool:
        """Whether the character has a proficiency, under any spelling."""
        ptype = ProficiencyType.coerce(proficiency_type)
        if character is None or ptype is None or not proficiency:
            return False
        names = character.proficiencies.get(ptype, [])
        return find_matching(names, proficiency, self.normalizer) is not None

    def get_proficiency_sources(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
        proficiency: str,
    ) -> set[str]:
        """
        Returns the sources granting a proficiency, looked up by exact name.

        Returns:
            set[str]: A copy of the source set, empty when not granted.

        """
        ptype = ProficiencyType.coerce(proficiency_type)
        if character is None or ptype is None:
            return set()
        return set(character.proficiency_sources.get(ptype, {}).get(proficiency, ()))

    def find_proficiency_sources(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
        proficiency: str,
    ) -> set[str]:
        """Like get_proficiency_sources, but matching any spelling."""
        key = self.canonical_name(character, proficiency_type, proficiency)
        if key is None:
            return set()
        return self.get_proficiency_sources(character, proficiency_type, key)

    def get_proficiencies_with_sources(
        self,
        character: Character | None,
        proficiency_type: ProficiencyType | str,
    ) -> list[dict[str, Any]]:
        """
        Lists a type's proficiencies, in insertion order, with their sources.

        Returns:
            list[dict[str, Any]]: One {"name", "sources"} entry per proficiency.

        """
        ptype = ProficiencyType.coerce(proficiency_type)
        if character is None or ptype is None:
            return []
        return [
            {"name": name, "sources": self.get_proficiency_sources(character, ptype, name)}
            for name in character.proficiencies.get(ptype, [])
        ]
