"""Data models for the Princess Maker 2 save editor.

A PM2 Refine save file is a flat 8192-byte image. Every statistic the
editor exposes lives at a fixed offset inside that image; the game also
stores a 32-bit little-endian checksum at a version-specific offset.

Save layout (English Refine):
  0x0000  daughter's name   (16 bytes, ASCII, NUL padded)
  0x0010  father's name     (16 bytes, ASCII, NUL padded)
  0x0020  basic attributes  (10 x u16 LE)
  0x0034  skills            (12 x u16 LE)
  0x004E  reputations       (4 x u16 LE)
  0x00F0  body measurements (5 x u16 LE fixed point, 1/100 units)
  0x1B4C  checksum          (u32 LE)

Only the shape of the table is authoritative; individual entries are
format constants and can be corrected in FIELD_TABLE without touching
the accessor code.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple


# Every PM2 save file is exactly this size
SAVE_FILE_SIZE = 8192

# Width of the stored checksum (u32 LE)
CHECKSUM_SIZE = 4


class FileVersion(Enum):
    """Save file variants. Values match the native checksum routine's version argument."""

    ENGLISH_REFINE = 0
    JAPANESE_REFINE = 1

    @property
    def setting_name(self) -> str:
        return self.name.lower()

    @classmethod
    def from_setting(cls, value: str) -> "FileVersion":
        """Parse a settings value such as "english_refine"."""
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown save file version: {value!r}")


# Checksum location per version. The Japanese Refine layout differs and its
# algorithm is not known yet, so it only gets the partial checksum path.
CHECKSUM_OFFSETS: Dict[FileVersion, int] = {
    FileVersion.ENGLISH_REFINE: 0x1B4C,
    FileVersion.JAPANESE_REFINE: 0x1114,
}

# Versions whose checksum algorithm is fully implemented
FULL_CHECKSUM_VERSIONS = frozenset({FileVersion.ENGLISH_REFINE})

DEFAULT_VERSION = FileVersion.ENGLISH_REFINE


class StatId(Enum):
    """Every statistic the editor knows about."""

    DAUGHTERS_NAME = "daughters_name"
    FATHERS_NAME = "fathers_name"

    STAMINA = "stamina"
    STRENGTH = "strength"
    INTELLIGENCE = "intelligence"
    ELEGANCE = "elegance"
    GLAMOUR = "glamour"
    MORALITY = "morality"
    FAITH = "faith"
    SIN = "sin"
    SENSITIVITY = "sensitivity"
    STRESS = "stress"

    COMBAT_SKILL = "combat_skill"
    ATTACK = "attack"
    DEFENCE = "defence"
    MAGIC_SKILL = "magic_skill"
    MAGIC_ATTACK = "magic_attack"
    MAGIC_DEFENCE = "magic_defence"

    DECORUM = "decorum"
    ART_SKILL = "art_skill"
    SPEECH = "speech"
    COOKING = "cooking"
    CLEANING = "cleaning"
    PERSONALITY = "personality"

    FIGHTING_REP = "fighting_rep"
    MAGIC_REP = "magic_rep"
    SOCIAL_REP = "social_rep"
    HOUSEKEEPING_REP = "housekeeping_rep"

    HEIGHT = "height"
    WEIGHT = "weight"
    BUST = "bust"
    WAIST = "waist"
    HIPS = "hips"


class FieldKind(Enum):
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"


@dataclass(frozen=True)
class FieldDefinition:
    """Static metadata for one stat: where it lives and what it may hold."""

    stat: StatId
    label: str
    kind: FieldKind
    offset: int
    width: int
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    scale: int = 1

    @property
    def end(self) -> int:
        return self.offset + self.width

    def overlaps(self, offset: int, width: int) -> bool:
        return self.offset < offset + width and offset < self.end


# Value limits (inclusive)
ATTRIBUTE_MIN, ATTRIBUTE_MAX = 0, 999
STRESS_MIN, STRESS_MAX = 0, 100
SKILL_MIN, SKILL_MAX = 0, 100
COMBAT_MIN, COMBAT_MAX = 0, 999
REP_MIN, REP_MAX = 0, 999

# Body measurements are stored in hundredths (raw 50000 == 500.00)
MEASUREMENT_SCALE = 100
MEASUREMENT_MIN, MEASUREMENT_MAX = 0.0, 500.0

NAME_WIDTH = 16


def _int(stat: StatId, label: str, offset: int, lo: int, hi: int) -> FieldDefinition:
    return FieldDefinition(stat, label, FieldKind.INTEGER, offset, 2, lo, hi)


def _measurement(stat: StatId, label: str, offset: int) -> FieldDefinition:
    return FieldDefinition(
        stat, label, FieldKind.FLOAT, offset, 2,
        MEASUREMENT_MIN, MEASUREMENT_MAX, MEASUREMENT_SCALE,
    )


FIELD_TABLE: Tuple[FieldDefinition, ...] = (
    FieldDefinition(StatId.DAUGHTERS_NAME, "Daughter's Name", FieldKind.STRING, 0x00, NAME_WIDTH),
    FieldDefinition(StatId.FATHERS_NAME, "Father's Name", FieldKind.STRING, 0x10, NAME_WIDTH),

    _int(StatId.STAMINA, "Stamina", 0x20, ATTRIBUTE_MIN, ATTRIBUTE_MAX),
    _int(StatId.STRENGTH, "Strength", 0x22, ATTRIBUTE_MIN, ATTRIBUTE_MAX),
    _int(StatId.INTELLIGENCE, "Intelligence", 0x24, ATTRIBUTE_MIN, ATTRIBUTE_MAX),
    _int(StatId.ELEGANCE, "Elegance", 0x26, ATTRIBUTE_MIN, ATTRIBUTE_MAX),
    _int(StatId.GLAMOUR, "Glamour", 0x28, ATTRIBUTE_MIN, ATTRIBUTE_MAX),
    _int(StatId.MORALITY, "Morality", 0x2A, ATTRIBUTE_MIN, ATTRIBUTE_MAX),
    _int(StatId.FAITH, "Faith", 0x2C, ATTRIBUTE_MIN, ATTRIBUTE_MAX),
    _int(StatId.SIN, "Sin", 0x2E, ATTRIBUTE_MIN, ATTRIBUTE_MAX),
    _int(StatId.SENSITIVITY, "Sensitivity", 0x30, ATTRIBUTE_MIN, ATTRIBUTE_MAX),
    _int(StatId.STRESS, "Stress", 0x32, STRESS_MIN, STRESS_MAX),

    _int(StatId.COMBAT_SKILL, "Combat Skill", 0x34, SKILL_MIN, SKILL_MAX),
    _int(StatId.ATTACK, "Attack", 0x36, COMBAT_MIN, COMBAT_MAX),
    _int(StatId.DEFENCE, "Defence", 0x38, COMBAT_MIN, COMBAT_MAX),
    _int(StatId.MAGIC_SKILL, "Magic Skill", 0x3A, SKILL_MIN, SKILL_MAX),
    _int(StatId.MAGIC_ATTACK, "Magic Attack", 0x3C, COMBAT_MIN, COMBAT_MAX),
    _int(StatId.MAGIC_DEFENCE, "Magic Defence", 0x3E, COMBAT_MIN, COMBAT_MAX),

    _int(StatId.DECORUM, "Decorum", 0x40, SKILL_MIN, SKILL_MAX),
    _int(StatId.ART_SKILL, "Art Skill", 0x42, SKILL_MIN, SKILL_MAX),
    _int(StatId.SPEECH, "Speech", 0x44, SKILL_MIN, SKILL_MAX),
    _int(StatId.COOKING, "Cooking", 0x46, SKILL_MIN, SKILL_MAX),
    _int(StatId.CLEANING, "Cleaning", 0x48, SKILL_MIN, SKILL_MAX),
    _int(StatId.PERSONALITY, "Personality", 0x4A, SKILL_MIN, SKILL_MAX),

    _int(StatId.FIGHTING_REP, "Fighting Reputation", 0x4E, REP_MIN, REP_MAX),
    _int(StatId.MAGIC_REP, "Magic Reputation", 0x50, REP_MIN, REP_MAX),
    _int(StatId.SOCIAL_REP, "Social Reputation", 0x52, REP_MIN, REP_MAX),
    _int(StatId.HOUSEKEEPING_REP, "Housekeeping Reputation", 0x54, REP_MIN, REP_MAX),

    _measurement(StatId.HEIGHT, "Height", 0xF0),
    _measurement(StatId.WEIGHT, "Weight", 0xF2),
    _measurement(StatId.BUST, "Bust", 0xF4),
    _measurement(StatId.WAIST, "Waist", 0xF6),
    _measurement(StatId.HIPS, "Hips", 0xF8),
)

FIELD_DEFINITIONS: Dict[StatId, FieldDefinition] = {d.stat: d for d in FIELD_TABLE}


class EditorState(Enum):
    EMPTY = "empty"
    LOADED = "loaded"


@dataclass
class LoadResult:
    """Result of opening a save file."""

    success: bool
    path: str = ""
    version: Optional[FileVersion] = None
    error: str = ""
    checksum_valid: bool = False


@dataclass
class SaveResult:
    """Result of writing a save file."""

    success: bool
    path: str = ""
    error: str = ""
    checksum: int = 0
    partial_checksum: bool = False
    warnings: list = field(default_factory=list)
