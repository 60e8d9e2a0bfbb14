"""
Tests for the proficiency consistency checks.
"""

import pytest
from charledger.character.models import Character
from charledger.core.constants import ProficiencyType
from charledger.proficiencies.invariants import ValidationResult, check_proficiency_invariants
from charledger.proficiencies.ledger import ProficiencyLedger
from charledger.proficiencies.optional import OptionalChoiceTracker


@pytest.fixture
def tracker():
    return OptionalChoiceTracker(ProficiencyLedger())


@pytest.fixture
def character(tracker):
    character = Character()
    tracker.ledger.initialize_proficiency_structures(character)
    tracker.set_optional_proficiencies(character, "skills", "race", 1, ["Perception"])
    tracker.select_optional_proficiency(character, "skills", "race", "Perception")
    return character


def test_validation_result_merge():
    """Test that merging an invalid result carries its errors over."""
    result = ValidationResult()
    other = ValidationResult()
    other.add_error("broken")

    result.merge(other)

    assert not result.is_valid
    assert result.errors == ["broken"]


def test_consistent_character_is_valid(character):
    """Test that records built through the engine pass every check."""
    result = check_proficiency_invariants(character)

    assert result.is_valid, result.errors


def test_listed_without_source(character):
    """Test that a listed name without sources is reported."""
    character.proficiencies[ProficiencyType.TOOLS].append("Cook's Utensils")

    result = check_proficiency_invariants(character)

    assert not result.is_valid
    assert any("without a source" in error for error in result.errors)


def test_stale_combined_view(character):
    """Test that a combined view not matching the groups is reported."""
    character.optional_proficiencies[ProficiencyType.SKILLS].allowed = 5

    assert not check_proficiency_invariants(character)


def test_over_budget_group(character):
    """Test that more picks than slots is reported."""
    config = character.optional_proficiencies[ProficiencyType.SKILLS]
    config.race.allowed = 0
    config.recalculate()

    result = check_proficiency_invariants(character)

    assert any("1 picks for 0 slots" in error for error in result.errors)


def test_pick_outside_options_allowed_with_any(tracker):
    """Test that an "any" group accepts picks outside its option list."""
    character = Character()
    tracker.ledger.initialize_proficiency_structures(character)
    config = character.optional_proficiencies[ProficiencyType.LANGUAGES]
    config.race.allowed = 1
    config.race.options = ["any"]
    config.race.selected = ["Elvish"]
    config.recalculate()
    tracker.ledger.add_proficiency(character, "languages", "Elvish", "Race Choice")

    assert check_proficiency_invariants(character).is_valid


def test_no_character():
    """Test that checking nothing is invalid."""
    assert not check_proficiency_invariants(None).is_valid
