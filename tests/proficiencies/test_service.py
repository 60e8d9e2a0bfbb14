"""
Tests for the proficiency service facade.
"""

import pytest
from charledger.character.models import Character
from charledger.events.event_bus import EventBus
from charledger.events.event_system import EventType
from charledger.proficiencies.grants import parse_source_grants
from charledger.proficiencies.service import ProficiencyService


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def service(bus):
    return ProficiencyService(emitter=bus.emit)


@pytest.fixture
def character(service):
    character = Character(name="Eira", level=5)
    service.initialize_proficiency_structures(character)
    for ability, score in {"dexterity": 16, "wisdom": 14, "strength": 10}.items():
        service.abilities.update_ability_score(character, ability, score)
    return character


def test_engines_share_reporter(service):
    """Test that every engine reports into the same failure history."""
    assert service.ledger.reporter is service.reporter
    assert service.tracker.reporter is service.reporter
    assert service.abilities.reporter is service.reporter


def test_delegates_to_ledger_and_tracker(service, character):
    """Test a full class pick flow through the facade."""
    service.set_optional_proficiencies(character, "skills", "class", 1, ["Stealth", "Acrobatics"])
    assert service.select_optional_proficiency(character, "skills", "class", "Stealth")
    assert service.has_proficiency(character, "skills", "stealth")
    assert service.get_proficiency_sources(character, "skills", "Stealth") == {"Class Choice"}
    assert service.get_available_optional_proficiencies(character, "skills", "class") == [
        "Acrobatics"
    ]
    assert service.deselect_optional_proficiency(character, "skills", "class", "Stealth")
    assert service.clear_optional_proficiencies(character, "skills", "class")
    assert service.get_proficiencies_with_sources(character, "skills") == []


def test_events_reach_bus_listeners(service, bus, character):
    """Test that engine notifications are dispatched through the bus."""
    received = []
    bus.on(EventType.PROFICIENCY_ADDED, lambda event: received.append(event))

    service.add_proficiency(character, "tools", "Thieves' Tools", "Background")

    assert [event.proficiency for event in received] == ["Thieves' Tools"]


def test_apply_and_remove_source_grants(service, character):
    """Test that source grants go through the facade."""
    grants = parse_source_grants({"skillProficiencies": [{"insight": True}]})

    service.apply_source_grants(character, "Background", grants)
    assert service.has_proficiency(character, "skills", "Insight")

    service.remove_source_grants(character, "Background")
    assert not service.has_proficiency(character, "skills", "Insight")


def test_catalog_queries(service):
    """Test the standard option lists and their validation."""
    assert "Stealth" in service.get_available_skills()
    assert "Elvish" in service.get_available_languages()
    assert "Thieves' Tools" in service.get_available_tools()
    assert service.validate_skill("sleight of hand")
    assert not service.validate_skill("Cooking")
    assert service.validate_tool("disguise kit")
    assert service.validate_language("ORC")
    assert not service.validate_language("")
    assert service.get_skill_ability("Stealth") == "dexterity"


def test_skill_modifier(service, character):
    """Test a skill modifier with and without proficiency at level 5."""
    assert service.calculate_skill_modifier(character, "Stealth") == 3

    service.add_proficiency(character, "skills", "Stealth", "Class")

    assert service.calculate_skill_modifier(character, "stealth") == 6
    assert service.calculate_skill_modifier(character, "Stealth", has_expertise=True) == 9


def test_skill_modifier_unknown_skill(service, character):
    """Test that an unknown skill gives 0 and a failure."""
    assert service.calculate_skill_modifier(character, "Cooking") == 0
    assert service.reporter.last_failure.context == {"skill": "Cooking"}


def test_saving_throw_accepts_abbreviations(service, character):
    """Test that a saving throw stored by abbreviation counts as proficient."""
    service.add_proficiency(character, "saving_throws", "dex", "Class")

    assert service.calculate_saving_throw_modifier(character, "Dexterity") == 6
    assert service.calculate_saving_throw_modifier(character, "str") == 0


def test_passive_perception_includes_bonuses(service, character):
    """Test passive perception with a racial wisdom bonus and proficiency."""
    service.abilities.add_ability_bonus(character, "wis", 2, "Race")
    service.add_proficiency(character, "skills", "Perception", "Race")

    assert service.calculate_passive_perception(character) == 10 + 3 + 3
