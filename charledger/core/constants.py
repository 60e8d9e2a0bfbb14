"""
Constants and enumerations for the proficiency ledger.

Defines the proficiency types, the choice-bearing sources, the labels used to
tag where a proficiency came from, and the standard rule-book option lists
used when a source lets the player choose "any" entry of a type.
"""

from enum import Enum


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.name.replace("_", " ").lower().capitalize()


class ProficiencyType(str, NiceEnum):
    """Defines the kinds of capability a character can be proficient in."""

    SKILLS = "skills"
    SAVING_THROWS = "saving_throws"
    LANGUAGES = "languages"
    TOOLS = "tools"
    ARMOR = "armor"
    WEAPONS = "weapons"

    @property
    def supports_choices(self) -> bool:
        """Whether the type keeps a per-source breakdown of choice slots."""
        return self in CHOICE_PROFICIENCY_TYPES

    @classmethod
    def coerce(cls, value: "ProficiencyType | str | None") -> "ProficiencyType | None":
        """
        Resolves a proficiency type from an enum member or a loose spelling.

        Accepts "skills", "SKILLS", "savingThrows", "saving throws" and the
        like.

        Args:
            value (ProficiencyType | str | None):
                The value to resolve.

        Returns:
            ProficiencyType | None:
                The matching member, or None when nothing matches.

        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str) or not value.strip():
            return None
        key = "".join(ch for ch in value.lower() if ch.isalnum())
        for member in cls:
            if member.value.replace("_", "") == key:
                return member
        return None


class ChoiceSource(NiceEnum):
    """Defines the origins that can grant optional proficiency choices."""

    RACE = "race"
    CLASS = "class"
    BACKGROUND = "background"

    @property
    def key(self) -> str:
        """The lower-case key used inside optional proficiency configs."""
        return self.value

    @property
    def label(self) -> str:
        """The source label used for fixed grants (e.g. "Race")."""
        return self.value.capitalize()

    @property
    def choice_label(self) -> str:
        """The source label used for player picks (e.g. "Race Choice")."""
        return f"{self.label} {CHOICE_MARKER}"

    @classmethod
    def coerce(cls, value: "ChoiceSource | str | None") -> "ChoiceSource | None":
        """Case-insensitive lookup of a choice source, None when unknown."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        key = value.strip().lower()
        for member in cls:
            if member.value == key:
                return member
        return None


# Proficiency types that track race/class/background choice slots.
CHOICE_PROFICIENCY_TYPES: tuple[ProficiencyType, ...] = (
    ProficiencyType.SKILLS,
    ProficiencyType.LANGUAGES,
    ProficiencyType.TOOLS,
)

# Proficiency types that only keep a flat {allowed, selected} record.
SIMPLE_OPTIONAL_TYPES: tuple[ProficiencyType, ...] = (
    ProficiencyType.SAVING_THROWS,
    ProficiencyType.ARMOR,
    ProficiencyType.WEAPONS,
)

# Any source label containing this marker is a player pick, not a fixed grant.
CHOICE_MARKER = "Choice"

DEFAULT_SOURCE = "Default"
DEFAULT_LANGUAGE = "Common"

# Option sentinels meaning "choose anything of this type".
ANY_OPTIONS: frozenset[str] = frozenset({"any", "Any"})

# ============================================================================
# ABILITIES
# ============================================================================

ABILITY_NAMES: tuple[str, ...] = (
    "strength",
    "dexterity",
    "constitution",
    "intelligence",
    "wisdom",
    "charisma",
)

ABILITY_ABBREVIATIONS: dict[str, str] = {
    "str": "strength",
    "dex": "dexterity",
    "con": "constitution",
    "int": "intelligence",
    "wis": "wisdom",
    "cha": "charisma",
}

DEFAULT_ABILITY_SCORE = 8
MIN_ABILITY_SCORE = 3
MAX_ABILITY_SCORE = 20

# Sources whose bonuses count as fixed racial bonuses.
RACIAL_BONUS_SOURCES: frozenset[str] = frozenset({"Race", "Subrace"})

# ============================================================================
# SKILLS AND STANDARD OPTIONS
# ============================================================================

SKILL_ABILITIES: dict[str, str] = {
    "acrobatics": "dexterity",
    "animal handling": "wisdom",
    "arcana": "intelligence",
    "athletics": "strength",
    "deception": "charisma",
    "history": "intelligence",
    "insight": "wisdom",
    "intimidation": "charisma",
    "investigation": "intelligence",
    "medicine": "wisdom",
    "nature": "intelligence",
    "perception": "wisdom",
    "performance": "charisma",
    "persuasion": "charisma",
    "religion": "intelligence",
    "sleight of hand": "dexterity",
    "stealth": "dexterity",
    "survival": "wisdom",
}

STANDARD_SKILL_OPTIONS: tuple[str, ...] = (
    "Acrobatics",
    "Animal Handling",
    "Arcana",
    "Athletics",
    "Deception",
    "History",
    "Insight",
    "Intimidation",
    "Investigation",
    "Medicine",
    "Nature",
    "Perception",
    "Performance",
    "Persuasion",
    "Religion",
    "Sleight of Hand",
    "Stealth",
    "Survival",
)

STANDARD_LANGUAGE_OPTIONS: tuple[str, ...] = (
    "Common",
    "Dwarvish",
    "Elvish",
    "Giant",
    "Gnomish",
    "Goblin",
    "Halfling",
    "Orc",
)

STANDARD_TOOL_OPTIONS: tuple[str, ...] = (
    "Alchemist's Supplies",
    "Brewer's Supplies",
    "Calligrapher's Supplies",
    "Carpenter's Tools",
    "Cartographer's Tools",
    "Cobbler's Tools",
    "Cook's Utensils",
    "Glassblower's Tools",
    "Jeweler's Tools",
    "Leatherworker's Tools",
    "Mason's Tools",
    "Painter's Supplies",
    "Potter's Tools",
    "Smith's Tools",
    "Tinker's Tools",
    "Weaver's Tools",
    "Woodcarver's Tools",
    "Disguise Kit",
    "Forgery Kit",
    "Herbalism Kit",
    "Navigator's Tools",
    "Poisoner's Kit",
    "Thieves' Tools",
)

STANDARD_OPTIONS: dict[ProficiencyType, tuple[str, ...]] = {
    ProficiencyType.SKILLS: STANDARD_SKILL_OPTIONS,
    ProficiencyType.LANGUAGES: STANDARD_LANGUAGE_OPTIONS,
    ProficiencyType.TOOLS: STANDARD_TOOL_OPTIONS,
}
