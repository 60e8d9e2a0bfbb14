"""
Tests for the refund of skill choices made redundant by fixed grants.
"""

import pytest
from charledger.character.models import Character
from charledger.core.constants import ChoiceSource, ProficiencyType
from charledger.events.event_system import EventType
from charledger.proficiencies.invariants import check_proficiency_invariants
from charledger.proficiencies.ledger import ProficiencyLedger
from charledger.proficiencies.optional import OptionalChoiceTracker


@pytest.fixture
def events():
    return []


@pytest.fixture
def ledger(events):
    return ProficiencyLedger(emitter=lambda event_type, event: events.append(event))


@pytest.fixture
def tracker(ledger):
    return OptionalChoiceTracker(ledger)


@pytest.fixture
def character(ledger, tracker):
    character = Character(name="Cassia")
    ledger.initialize_proficiency_structures(character)
    tracker.set_optional_proficiencies(
        character, "skills", "background", 2, ["Persuasion", "Deception", "Insight"]
    )
    tracker.select_optional_proficiency(character, "skills", "background", "Persuasion")
    return character


def test_fixed_grant_refunds_other_source(ledger, character):
    """Test that a class grant frees the background slot spent on the same skill."""
    ledger.add_proficiency(character, "skills", "Persuasion", "Class")

    config = character.optional_proficiencies[ProficiencyType.SKILLS]
    assert "Persuasion" in character.proficiencies["skills"]
    assert ledger.get_proficiency_sources(character, "skills", "Persuasion") == {"Class"}
    assert config.background.selected == []
    assert config.selected == []
    assert config.background.remaining == 2
    assert check_proficiency_invariants(character).is_valid


def test_refund_matches_any_spelling(ledger, character):
    """Test that the refund finds the pick regardless of case."""
    ledger.add_proficiency(character, "skills", "PERSUASION", "Race")

    config = character.optional_proficiencies[ProficiencyType.SKILLS]
    assert config.background.selected == []
    assert character.proficiency_sources["skills"]["Persuasion"] == {"Race"}


def test_refund_emits_event(ledger, character, events):
    """Test that a refund sends a refunded notification after the grant."""
    ledger.add_proficiency(character, "skills", "Persuasion", "Class")

    refunded = [e for e in events if e.event_type == EventType.PROFICIENCY_REFUNDED]
    assert len(refunded) == 1
    assert refunded[0].proficiency == "Persuasion"
    assert refunded[0].proficiency_type == ProficiencyType.SKILLS
    assert events[-1].event_type == EventType.PROFICIENCY_ADDED


def test_refund_returns_refunded_sources(ledger, tracker, character):
    """Test that every other source holding the pick is refunded."""
    tracker.set_optional_proficiencies(character, "skills", "race", 1, ["Persuasion"])
    tracker.select_optional_proficiency(character, "skills", "race", "Persuasion")

    refunded = ledger.refund_rule.apply(character, "Persuasion", "Class")

    assert refunded == [ChoiceSource.RACE, ChoiceSource.BACKGROUND]
    assert "Persuasion" not in character.proficiencies["skills"]


def test_same_source_grant_is_not_refunded(ledger, character, mocker):
    """Test that a fixed grant does not refund its own source's pick."""
    mock_warning = mocker.patch("charledger.proficiencies.refund.log_warning")

    ledger.add_proficiency(character, "skills", "Persuasion", "Background")

    config = character.optional_proficiencies[ProficiencyType.SKILLS]
    assert config.background.selected == ["Persuasion"]
    assert ledger.get_proficiency_sources(character, "skills", "Persuasion") == {
        "Background",
        "Background Choice",
    }
    mock_warning.assert_called_once()


def test_choice_grant_does_not_refund(ledger, character):
    """Test that a grant from a choice label never triggers a refund."""
    ledger.add_proficiency(character, "skills", "Persuasion", "Race Choice")

    config = character.optional_proficiencies[ProficiencyType.SKILLS]
    assert config.background.selected == ["Persuasion"]


def test_refund_only_applies_to_skills(ledger, tracker, character):
    """Test that fixed grants of other types keep their picks."""
    tracker.set_optional_proficiencies(character, "languages", "race", 1, ["Elvish"])
    tracker.select_optional_proficiency(character, "languages", "race", "Elvish")

    ledger.add_proficiency(character, "languages", "Elvish", "Class")

    config = character.optional_proficiencies[ProficiencyType.LANGUAGES]
    assert config.race.selected == ["Elvish"]
    assert ledger.get_proficiency_sources(character, "languages", "Elvish") == {
        "Race Choice",
        "Class",
    }


def test_refunded_slot_can_be_reused(ledger, tracker, character):
    """Test that the freed slot accepts a new pick."""
    tracker.select_optional_proficiency(character, "skills", "background", "Deception")
    ledger.add_proficiency(character, "skills", "Persuasion", "Class")

    assert tracker.select_optional_proficiency(character, "skills", "background", "Insight")
    assert tracker.get_available_optional_proficiencies(character, "skills", "background") == []
