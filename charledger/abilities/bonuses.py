"""
Ability score bonuses.

Every bonus to an ability is kept as an (value, source) pair on the
character, so a source can later be withdrawn without touching the others.
Racial "+1 to an ability of your choice" picks are bound to a slot index:
picking a different ability for the same slot first withdraws the bonus of
the previous pick.
"""

from typing import Any, Iterable

from charledger.character.models import AbilityBonus, AbilityChoice, Character
from charledger.core.constants import (
    ABILITY_ABBREVIATIONS,
    ABILITY_NAMES,
    CHOICE_MARKER,
    MAX_ABILITY_SCORE,
    MIN_ABILITY_SCORE,
    RACIAL_BONUS_SOURCES,
)
from charledger.core.error_handling import FailureKind, FailureReporter
from charledger.core.logging import log_debug
from charledger.core.utils import format_modifier, get_stat_modifier, normalize_for_lookup
from charledger.events.event_system import AbilityScoresChangedEvent, Emitter


def choice_source_label(source: str | None) -> str:
    """Appends the " Choice" marker to a source label that lacks it."""
    if source and CHOICE_MARKER in source:
        return source
    return f"{source or 'Race'} {CHOICE_MARKER}"


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class AbilityScoreTracker:
    """
    Keeps base scores, source-tagged bonuses and racial ability choices.

    Like the proficiency ledger, the tracker holds no character state.

    Attributes:
        emitter (Emitter | None):
            Receives an abilityScores:changed notification after each change.
        reporter (FailureReporter):
            Records rejected operations.

    """

    def __init__(
        self,
        emitter: Emitter | None = None,
        reporter: FailureReporter | None = None,
    ) -> None:
        self.emitter = emitter
        self.reporter = reporter or FailureReporter()

    def _notify(self, character: Character, ability: str | None = None) -> None:
        if self.emitter is not None:
            event = AbilityScoresChangedEvent(ability=ability, character=character)
            self.emitter(event.event_type, event)

    @staticmethod
    def get_all_abilities() -> list[str]:
        return list(ABILITY_NAMES)

    @staticmethod
    def normalize_ability_name(ability: Any) -> str | None:
        """
        Resolves an ability from its name or abbreviation.

        Args:
            ability (Any): "Strength", "str", " DEX " and the like.

        Returns:
            str | None: The lower-case full name, None when unknown.

        """
        key = normalize_for_lookup(ability)
        key = ABILITY_ABBREVIATIONS.get(key, key)
        return key if key in ABILITY_NAMES else None

    def _resolve(self, ability: Any, operation: str) -> str | None:
        name = self.normalize_ability_name(ability)
        if name is None:
            self.reporter.report(
                FailureKind.VALIDATION,
                f"Unknown ability for {operation}",
                {"ability": ability},
            )
        return name

    # ============================================================================
    # SCORES
    # ============================================================================

    def get_base_score(self, character: Character | None, ability: Any) -> int:
        """The score before bonuses, 0 for an unknown ability."""
        name = self.normalize_ability_name(ability)
        if character is None or name is None:
            return 0
        return character.ability_scores.get(name, 0)

    def get_total_score(self, character: Character | None, ability: Any) -> int:
        """The base score plus every bonus."""
        name = self.normalize_ability_name(ability)
        if character is None or name is None:
            return 0
        bonuses = character.ability_bonuses.get(name, [])
        return self.get_base_score(character, name) + sum(b.value for b in bonuses)

    def get_modifier(self, character: Character | None, ability: Any) -> int:
        return get_stat_modifier(self.get_total_score(character, ability))

    def get_modifier_string(self, character: Character | None, ability: Any) -> str:
        return format_modifier(self.get_modifier(character, ability))

    def update_ability_score(
        self,
        character: Character | None,
        ability: Any,
        score: int,
    ) -> bool:
        """
        Sets a base score.

        Args:
            character (Character | None): The character to change.
            ability (Any): The ability name or abbreviation.
            score (int): The new score, between 3 and 20.

        Returns:
            bool: False when the request was rejected.

        """
        if character is None:
            self.reporter.report(
                FailureKind.VALIDATION, "No character for update_ability_score"
            )
            return False
        name = self._resolve(ability, "update_ability_score")
        if name is None:
            return False
        if not _is_int(score) or not MIN_ABILITY_SCORE <= score <= MAX_ABILITY_SCORE:
            self.reporter.report(
                FailureKind.VALIDATION,
                f"Ability score must be between {MIN_ABILITY_SCORE} and {MAX_ABILITY_SCORE}",
                {"ability": name, "score": score},
            )
            return False

        character.ability_scores[name] = score
        log_debug("Ability score updated", {"ability": name, "score": score})
        self._notify(character, name)
        return True

    # ============================================================================
    # BONUSES
    # ============================================================================

    @staticmethod
    def _put_bonus(character: Character, ability: str, value: int, source: str) -> None:
        bonuses = character.ability_bonuses.setdefault(ability, [])
        for bonus in bonuses:
            if bonus.source == source:
                bonus.value = value
                return
        bonuses.append(AbilityBonus(value=value, source=source))

    @staticmethod
    def _pop_bonus(character: Character, ability: str, source: str) -> bool:
        bonuses = character.ability_bonuses.get(ability, [])
        kept = [bonus for bonus in bonuses if bonus.source != source]
        if len(kept) == len(bonuses):
            return False
        character.ability_bonuses[ability] = kept
        return True

    def add_ability_bonus(
        self,
        character: Character | None,
        ability: Any,
        value: int,
        source: str,
    ) -> bool:
        """
        Adds a bonus to an ability on behalf of a source.

        A source contributes at most one bonus per ability; adding again
        replaces the value.

        Args:
            character (Character | None): The character to change.
            ability (Any): The ability name or abbreviation.
            value (int): The bonus, may be negative.
            source (str): The source label, e.g. "Race".

        Returns:
            bool: False when the request was rejected.

        """
        if character is None or not source or not _is_int(value):
            self.reporter.report(
                FailureKind.VALIDATION,
                "Invalid parameters for add_ability_bonus",
                {"ability": ability, "value": value, "source": source},
            )
            return False
        name = self._resolve(ability, "add_ability_bonus")
        if name is None:
            return False

        self._put_bonus(character, name, value, source)
        log_debug("Ability bonus added", {"ability": name, "value": value, "source": source})
        self._notify(character, name)
        return True

    def remove_ability_bonus(
        self,
        character: Character | None,
        ability: Any,
        source: str,
    ) -> bool:
        """
        Withdraws the bonus a source gives to an ability.

        Returns:
            bool: True when a bonus was removed.

        """
        if character is None or not source:
            self.reporter.report(
                FailureKind.VALIDATION,
                "Invalid parameters for remove_ability_bonus",
                {"ability": ability, "source": source},
            )
            return False
        name = self._resolve(ability, "remove_ability_bonus")
        if name is None:
            return False
        if not self._pop_bonus(character, name, source):
            self.reporter.report(
                FailureKind.NOT_FOUND,
                "No ability bonus from this source",
                {"ability": name, "source": source},
            )
            return False

        self._notify(character, name)
        return True

    def _clear_matching(self, character: Character, matches) -> int:
        removed = 0
        for ability, bonuses in character.ability_bonuses.items():
            kept = [bonus for bonus in bonuses if not matches(bonus.source)]
            removed += len(bonuses) - len(kept)
            character.ability_bonuses[ability] = kept
        character.ability_choices = [
            choice for choice in character.ability_choices if not matches(choice.source)
        ]
        if removed:
            self._notify(character)
        return removed

    def clear_ability_bonuses(self, character: Character | None, source: str) -> int:
        """
        Withdraws every bonus of a source, on all abilities.

        Racial choices bound to the source are forgotten as well.

        Returns:
            int: The number of bonuses removed.

        """
        if character is None or not source:
            return 0
        return self._clear_matching(character, lambda label: label == source)

    def clear_ability_bonuses_by_prefix(
        self,
        character: Character | None,
        prefix: str,
    ) -> int:
        """
        Like clear_ability_bonuses, for every source starting with `prefix`.

        The prefix is matched case-insensitively, so "race" also clears
        "Race Choice".
        """
        if character is None or not prefix:
            return 0
        lowered = prefix.lower()
        return self._clear_matching(character, lambda label: label.lower().startswith(lowered))

    def get_bonus_groups(self, character: Character | None) -> dict[str, dict[str, int]]:
        """
        Groups the bonuses by source for display.

        Returns:
            dict[str, dict[str, int]]: source -> ability -> value.

        """
        groups: dict[str, dict[str, int]] = {}
        if character is None:
            return groups
        for ability in ABILITY_NAMES:
            for bonus in character.ability_bonuses.get(ability, []):
                groups.setdefault(bonus.source, {})[ability] = bonus.value
        return groups

    # ============================================================================
    # RACIAL CHOICES
    # ============================================================================

    def _normalize_choice(self, choice: Any, position: int) -> AbilityChoice | None:
        if isinstance(choice, AbilityChoice):
            data = choice.model_dump()
        elif isinstance(choice, dict):
            data = choice
        else:
            return None

        ability = self.normalize_ability_name(data.get("ability") or data.get("abilityScore"))
        if ability is None:
            return None
        value = data.get("value", data.get("amount"))
        index = data.get("index")
        return AbilityChoice(
            ability=ability,
            value=value if _is_int(value) else 1,
            source=choice_source_label(data.get("source")),
            index=index if _is_int(index) and index >= 0 else position,
        )

    def set_racial_ability_choices(
        self,
        character: Character | None,
        choices: Iterable[Any] | None,
    ) -> list[AbilityChoice]:
        """
        Replaces every racial ability choice, e.g. when loading a character.

        The bonuses of the previous choices are withdrawn and those of the
        new ones applied. Entries without a known ability are skipped.

        Args:
            character (Character | None): The character to change.
            choices (Iterable[Any] | None):
                AbilityChoice records or dicts with ability (or
                abilityScore), value (or amount), source and index.

        Returns:
            list[AbilityChoice]: The stored choices, ordered by index.

        """
        if character is None:
            self.reporter.report(
                FailureKind.VALIDATION, "No character for set_racial_ability_choices"
            )
            return []

        for previous in character.ability_choices:
            self._pop_bonus(character, previous.ability, previous.source)

        stored: dict[int, AbilityChoice] = {}
        for position, choice in enumerate(choices or []):
            normalized = self._normalize_choice(choice, position)
            if normalized is not None:
                stored[normalized.index] = normalized

        character.ability_choices = sorted(stored.values(), key=lambda c: c.index)
        for choice in character.ability_choices:
            self._put_bonus(character, choice.ability, choice.value, choice.source)

        self._notify(character)
        return list(character.ability_choices)

    def handle_ability_choice(
        self,
        character: Character | None,
        index: int,
        ability: Any,
        value: int = 1,
        source: str = "Race",
    ) -> bool:
        """
        Fills, changes or empties a racial ability choice slot.

        The bonus of the ability previously picked for the slot is withdrawn
        first, matched by ability and source. An ability already held by
        another slot of the same source is rejected.

        Args:
            character (Character | None): The character to change.
            index (int): The choice slot.
            ability (Any): The picked ability, None to empty the slot.
            value (int): The bonus the slot grants.
            source (str): The source, " Choice" is appended when missing.

        Returns:
            bool: False when the request was rejected.

        """
        if character is None or not _is_int(index) or index < 0 or not _is_int(value):
            self.reporter.report(
                FailureKind.VALIDATION,
                "Invalid parameters for handle_ability_choice",
                {"index": index, "ability": ability, "value": value},
            )
            return False

        name = None
        if ability is not None:
            name = self._resolve(ability, "handle_ability_choice")
            if name is None:
                return False

        label = choice_source_label(source)
        if name is not None and any(
            choice.index != index and choice.source == label and choice.ability == name
            for choice in character.ability_choices
        ):
            self.reporter.report(
                FailureKind.VALIDATION,
                f"{name} is already picked by another {label} slot",
                {"index": index, "ability": name},
            )
            return False

        for previous in [c for c in character.ability_choices if c.index == index]:
            self._pop_bonus(character, previous.ability, previous.source)
            character.ability_choices.remove(previous)

        if name is not None:
            self._put_bonus(character, name, value, label)
            character.ability_choices.append(
                AbilityChoice(ability=name, value=value, source=label, index=index)
            )
            character.ability_choices.sort(key=lambda c: c.index)

        log_debug(
            "Ability choice updated",
            {"index": index, "ability": name, "source": label},
        )
        self._notify(character, name)
        return True

    def get_available_abilities(
        self,
        character: Character | None,
        index: int,
        allowed: Iterable[str] | None = None,
        source: str = "Race",
    ) -> list[str]:
        """
        Lists the abilities a choice slot may still pick.

        Leaves out abilities picked by the source's other slots and, for a
        racial source, abilities that already get a fixed racial bonus.

        Args:
            character (Character | None): The character to inspect.
            index (int): The slot being filled.
            allowed (Iterable[str] | None):
                Names or abbreviations the slot is limited to, None for all.
            source (str): The slot's source.

        Returns:
            list[str]: The candidate abilities.

        """
        if allowed:
            candidates = [
                name
                for name in (self.normalize_ability_name(a) for a in allowed)
                if name is not None
            ]
        else:
            candidates = list(ABILITY_NAMES)
        if character is None:
            return candidates

        label = choice_source_label(source)
        taken = {
            choice.ability
            for choice in character.ability_choices
            if choice.index != index and choice.source == label
        }
        if label.split()[0] in RACIAL_BONUS_SOURCES:
            for ability in ABILITY_NAMES:
                if any(
                    bonus.source in RACIAL_BONUS_SOURCES
                    for bonus in character.ability_bonuses.get(ability, [])
                ):
                    taken.add(ability)

        return [name for name in dict.fromkeys(candidates) if name not in taken]
