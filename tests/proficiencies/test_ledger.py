"""
Tests for the source-tracked proficiency ledger.
"""

import pytest
from charledger.character.models import Character
from charledger.core.constants import ProficiencyType
from charledger.core.error_handling import FailureKind, FailureReporter
from charledger.events.event_system import EventType
from charledger.proficiencies.ledger import ProficiencyLedger


@pytest.fixture
def events():
    return []


@pytest.fixture
def ledger(events):
    return ProficiencyLedger(
        emitter=lambda event_type, event: events.append((event_type, event)),
        reporter=FailureReporter(),
    )


@pytest.fixture
def character(ledger):
    character = Character(name="Aria")
    ledger.initialize_proficiency_structures(character)
    return character


def test_initialize_seeds_common_language():
    """Test that initialising an empty character grants Common from Default."""
    character = Character()
    ledger = ProficiencyLedger()

    ledger.initialize_proficiency_structures(character)

    assert character.proficiencies["languages"] == ["Common"]
    assert character.proficiency_sources["languages"]["Common"] == {"Default"}
    for proficiency_type in ProficiencyType:
        assert proficiency_type in character.proficiencies
        assert proficiency_type in character.proficiency_sources


def test_initialize_keeps_existing_languages():
    """Test that a character who already speaks a language is not given Common."""
    ledger = ProficiencyLedger()
    character = Character()
    ledger.add_proficiency(character, "languages", "Elvish", "Race")

    ledger.initialize_proficiency_structures(character)

    assert character.proficiencies["languages"] == ["Elvish"]


def test_initialize_without_character_reports_failure(ledger):
    """Test that initialising None is a validation failure, not an exception."""
    ledger.initialize_proficiency_structures(None)

    assert ledger.reporter.last_failure.kind == FailureKind.VALIDATION


def test_add_proficiency_returns_true_when_new(ledger, character):
    """Test that the first grant of a proficiency reports it as new."""
    assert ledger.add_proficiency(character, "skills", "Stealth", "Race") is True
    assert character.proficiencies["skills"] == ["Stealth"]
    assert character.proficiency_sources["skills"]["Stealth"] == {"Race"}


def test_add_proficiency_is_idempotent(ledger, character):
    """Test that granting the same proficiency twice from one source changes nothing."""
    ledger.add_proficiency(character, "skills", "Stealth", "Race")

    assert ledger.add_proficiency(character, "skills", "Stealth", "Race") is False
    assert character.proficiencies["skills"] == ["Stealth"]
    assert character.proficiency_sources["skills"]["Stealth"] == {"Race"}


def test_add_proficiency_merges_spellings(ledger, character):
    """Test that spellings differing in case share the first stored entry."""
    ledger.add_proficiency(character, "skills", "stealth", "Race")
    was_new = ledger.add_proficiency(character, "skills", "Stealth", "Class")

    assert was_new is False
    assert character.proficiencies["skills"] == ["stealth"]
    assert character.proficiency_sources["skills"]["stealth"] == {"Race", "Class"}
    assert "Stealth" not in character.proficiency_sources["skills"]


def test_add_proficiency_merges_whitespace(ledger, character):
    """Test that extra whitespace does not create a second entry."""
    ledger.add_proficiency(character, "tools", "Thieves' Tools", "Background")
    ledger.add_proficiency(character, "tools", "  thieves'   tools ", "Class")

    assert character.proficiencies["tools"] == ["Thieves' Tools"]


def test_add_proficiency_accepts_loose_type_names(ledger, character):
    """Test that camel-case type names resolve to the saving throws type."""
    assert ledger.add_proficiency(character, "savingThrows", "Dexterity", "Class")
    assert character.proficiencies[ProficiencyType.SAVING_THROWS] == ["Dexterity"]


@pytest.mark.parametrize(
    "proficiency_type, proficiency, source",
    [
        ("skills", "", "Race"),
        ("skills", "Stealth", ""),
        ("", "Stealth", "Race"),
        ("spells", "Stealth", "Race"),
    ],
)
def test_add_proficiency_rejects_missing_arguments(
    ledger, character, proficiency_type, proficiency, source
):
    """Test that a missing argument is reported and leaves the record untouched."""
    assert ledger.add_proficiency(character, proficiency_type, proficiency, source) is False
    assert character.proficiencies["skills"] == []
    assert ledger.reporter.last_failure.kind == FailureKind.VALIDATION


def test_add_proficiency_without_character(ledger):
    """Test that adding to no character fails softly."""
    assert ledger.add_proficiency(None, "skills", "Stealth", "Race") is False
    assert ledger.reporter.count(FailureKind.VALIDATION) == 1


def test_add_proficiency_emits_event(ledger, character, events):
    """Test that every grant notifies the emitter with the stored spelling."""
    ledger.add_proficiency(character, "skills", "arcana", "Class")
    ledger.add_proficiency(character, "skills", "Arcana", "Race")

    added = [event for event_type, event in events if event_type == EventType.PROFICIENCY_ADDED]
    assert [event.proficiency for event in added[-2:]] == ["arcana", "arcana"]
    assert added[-1].source == "Race"
    assert added[-1].character is character


def test_remove_by_source_cascades(ledger, character):
    """Test that a proficiency with a single source disappears with it."""
    ledger.add_proficiency(character, "tools", "Herbalism kit", "Class")
    ledger.add_proficiency(character, "skills", "Athletics", "Class")
    ledger.add_proficiency(character, "skills", "Athletics", "Background")

    removed = ledger.remove_proficiencies_by_source(character, "Class")

    assert "Herbalism kit" not in character.proficiencies["tools"]
    assert "Herbalism kit" not in character.proficiency_sources["tools"]
    assert character.proficiencies["skills"] == ["Athletics"]
    assert character.proficiency_sources["skills"]["Athletics"] == {"Background"}
    assert removed[ProficiencyType.TOOLS] == ["Herbalism kit"]
    assert removed[ProficiencyType.SKILLS] == ["Athletics"]
    assert removed[ProficiencyType.ARMOR] == []


def test_remove_by_source_emits_event(ledger, character, events):
    """Test that withdrawing a source sends one notification with the removed names."""
    ledger.add_proficiency(character, "armor", "Light Armor", "Class")

    ledger.remove_proficiencies_by_source(character, "Class")

    event_type, event = events[-1]
    assert event_type == EventType.PROFICIENCY_REMOVED_BY_SOURCE
    assert event.source == "Class"
    assert event.removed[ProficiencyType.ARMOR] == ["Light Armor"]


def test_remove_by_unknown_source_removes_nothing(ledger, character):
    """Test that withdrawing a source that grants nothing leaves the record as is."""
    removed = ledger.remove_proficiencies_by_source(character, "Feat")

    assert all(names == [] for names in removed.values())
    assert character.proficiencies["languages"] == ["Common"]


def test_remove_proficiency_from_source_is_scoped(ledger, character):
    """Test that withdrawing one source from one proficiency keeps the others."""
    ledger.add_proficiency(character, "skills", "Insight", "Race")
    ledger.add_proficiency(character, "skills", "Perception", "Race")
    ledger.add_proficiency(character, "skills", "Insight", "Background")

    assert ledger.remove_proficiency_from_source(character, "skills", "insight", "Race")

    assert character.proficiencies["skills"] == ["Insight", "Perception"]
    assert character.proficiency_sources["skills"]["Insight"] == {"Background"}
    assert character.proficiency_sources["skills"]["Perception"] == {"Race"}


def test_remove_proficiency_from_source_unknown(ledger, character):
    """Test that withdrawing a source that does not grant the name returns False."""
    ledger.add_proficiency(character, "skills", "Insight", "Race")

    assert not ledger.remove_proficiency_from_source(character, "skills", "Insight", "Class")
    assert not ledger.remove_proficiency_from_source(character, "skills", "Arcana", "Race")


def test_has_proficiency_is_case_insensitive(ledger, character):
    """Test that membership ignores case and whitespace."""
    ledger.add_proficiency(character, "skills", "Sleight of Hand", "Race")

    assert ledger.has_proficiency(character, "skills", "sleight  of hand")
    assert not ledger.has_proficiency(character, "skills", "Stealth")
    assert not ledger.has_proficiency(None, "skills", "Stealth")


def test_get_proficiency_sources_uses_exact_name(ledger, character):
    """Test that source lookup is by stored name, unlike find_proficiency_sources."""
    ledger.add_proficiency(character, "skills", "Stealth", "Race")

    assert ledger.get_proficiency_sources(character, "skills", "Stealth") == {"Race"}
    assert ledger.get_proficiency_sources(character, "skills", "stealth") == set()
    assert ledger.find_proficiency_sources(character, "skills", "stealth") == {"Race"}


def test_get_proficiency_sources_returns_copy(ledger, character):
    """Test that mutating the returned set does not touch the ledger."""
    ledger.add_proficiency(character, "skills", "Stealth", "Race")

    ledger.get_proficiency_sources(character, "skills", "Stealth").add("Class")

    assert character.proficiency_sources["skills"]["Stealth"] == {"Race"}


def test_get_proficiencies_with_sources(ledger, character):
    """Test the display projection keeps insertion order."""
    ledger.add_proficiency(character, "weapons", "Longsword", "Class")
    ledger.add_proficiency(character, "weapons", "Dagger", "Race")
    ledger.add_proficiency(character, "weapons", "Dagger", "Class")

    assert ledger.get_proficiencies_with_sources(character, "weapons") == [
        {"name": "Longsword", "sources": {"Class"}},
        {"name": "Dagger", "sources": {"Race", "Class"}},
    ]
    assert ledger.get_proficiencies_with_sources(character, "unknown") == []
