"""
Schema definitions for the fretboard engine's outputs.

This module defines the Pydantic models that every generator returns.
All models are frozen: a result for a given (key, family, options) is a
pure value and may be cached or shared freely.
"""

from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# VALID OPTIONS
# =============================================================================

VALID_INVERSIONS = ["root", "first", "second", "unknown"]

VALID_BOX_FAMILIES = ["major", "pentatonic", "blues"]

InversionType = Literal["root", "first", "second", "unknown"]
BoxScaleFamily = Literal["major", "pentatonic", "blues"]


# =============================================================================
# TRIADS
# =============================================================================

class TriadVoicing(BaseModel):
    """
    One triad fingering on a 3-string group.

    Attributes:
        position: Neck position 0 (lowest) to 3 (highest)
        strings: String indices, low string first
        frets: Fret per string
        notes: Pitch class per string
        note_names: Display names per string
        inversion: Bass tone of the voicing
        avg_fret: Mean of the three frets

    Example:
        >>> TriadVoicing(
        ...     position=0, strings=[0, 1, 2], frets=[3, 2, 0],
        ...     notes=[7, 11, 2], note_names=["G", "B", "D"],
        ...     inversion="root", avg_fret=5 / 3,
        ... )
    """
    model_config = ConfigDict(frozen=True)

    position: int = Field(..., ge=0, le=3, description="Neck position 0-3")
    strings: List[int] = Field(..., description="String indices, low to high", examples=[[0, 1, 2]])
    frets: List[int] = Field(..., description="Fret on each string", examples=[[3, 2, 0]])
    notes: List[int] = Field(..., description="Pitch class on each string", examples=[[7, 11, 2]])
    note_names: List[str] = Field(..., description="Spelled note names", examples=[["G", "B", "D"]])
    inversion: InversionType = Field(..., description="Which triad tone is in the bass")
    avg_fret: float = Field(..., ge=0, description="Average fret of the voicing")

    @field_validator("strings", "frets", "notes", "note_names")
    @classmethod
    def validate_three_values(cls, v: List) -> List:
        """Ensure the voicing covers exactly three strings"""
        if len(v) != 3:
            raise ValueError(f"A triad voicing needs exactly 3 values. Got: {v} (length: {len(v)})")
        return v

    @field_validator("notes")
    @classmethod
    def validate_pitch_classes(cls, v: List[int]) -> List[int]:
        if any(pc < 0 or pc > 11 for pc in v):
            raise ValueError(f"Pitch classes must be in 0-11. Got: {v}")
        return v


class StringGroupTriads(BaseModel):
    """Voicings for one 3-string group, ordered by position."""
    model_config = ConfigDict(frozen=True)

    strings: List[int] = Field(..., min_length=3, max_length=3)
    string_names: List[str] = Field(..., min_length=3, max_length=3)
    voicings: List[TriadVoicing] = Field(..., min_length=1, max_length=4)


class TriadsData(BaseModel):
    """Major triad voicings for a key across the four string groups."""
    model_config = ConfigDict(frozen=True)

    key: str = Field(..., min_length=1, examples=["G", "Bb"])
    triad_notes: List[str] = Field(..., min_length=3, max_length=3, examples=[["G", "B", "D"]])
    string_groups: List[StringGroupTriads] = Field(..., min_length=4, max_length=4)

    @field_validator("string_groups")
    @classmethod
    def validate_four_positions(cls, v: List[StringGroupTriads]) -> List[StringGroupTriads]:
        """Every group of a major triad table carries positions 0-3 in order"""
        for group in v:
            positions = [voicing.position for voicing in group.voicings]
            if positions != [0, 1, 2, 3]:
                raise ValueError(
                    f"String group {group.strings} must have positions [0, 1, 2, 3]. Got: {positions}"
                )
        return v


class ChordData(BaseModel):
    """
    Triad voicings for an arbitrary supported chord type.

    Unlike TriadsData, a group may hold fewer than four voicings (a major
    shape with an open-string third cannot be turned into minor) and groups
    with no voicing at all are left out.
    """
    model_config = ConfigDict(frozen=True)

    key: str
    chord_type: str
    chord_name: str = Field(..., examples=["Fm", "G"])
    chord_notes: List[str]
    string_groups: List[StringGroupTriads] = Field(..., min_length=1, max_length=4)


# =============================================================================
# BOX SHAPES
# =============================================================================

class BoxShapePattern(BaseModel):
    """
    One scale box: a fret list per string covering a single hand position.

    Attributes:
        family: Scale family the box belongs to
        shape_number: 1-based box number in generation order
        label: Display label, e.g. 'A Dorian (Box 2)'
        key_root: Key the box was generated for
        shape_root_note: Root of this box's own mode
        shape_root_pitch_class: Pitch class of shape_root_note
        mode_name: Mode name for major-family boxes
        string_crossing: String-crossing window symbols for modal boxes
        intervals: Scale intervals used to build the box
        window_start: Lowest fret of the hand window
        window_end: Highest fret of the hand window
        pattern: 6 sorted fret lists, low E string first
        root_positions: (string, fret) pairs sounding the shape root
        blue_note_positions: (string, fret) pairs sounding the blue note
    """
    model_config = ConfigDict(frozen=True)

    family: BoxScaleFamily
    shape_number: int = Field(..., ge=1, le=7)
    label: str
    key_root: str
    shape_root_note: str
    shape_root_pitch_class: int = Field(..., ge=0, le=11)
    mode_name: Optional[str] = None
    string_crossing: Optional[str] = Field(default=None, examples=["XXYYZZ"])
    intervals: List[int]
    window_start: int = Field(..., ge=0)
    window_end: int = Field(..., ge=0)
    pattern: List[List[int]] = Field(..., min_length=6, max_length=6)
    root_positions: List[Tuple[int, int]] = Field(default_factory=list)
    blue_note_positions: List[Tuple[int, int]] = Field(default_factory=list)

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: List[List[int]]) -> List[List[int]]:
        """Each string holds 2 or 3 strictly ascending frets"""
        for string_index, frets in enumerate(v):
            if len(frets) not in (2, 3):
                raise ValueError(
                    f"String {string_index} must have 2 or 3 frets. Got: {frets}"
                )
            if list(frets) != sorted(set(frets)):
                raise ValueError(
                    f"String {string_index} frets must be sorted without repeats. Got: {frets}"
                )
        return v

    @property
    def id(self) -> str:
        return f"{self.family}-{self.shape_number}"

    def all_frets(self) -> List[int]:
        return [fret for frets in self.pattern for fret in frets]


# =============================================================================
# PROGRESSIONS
# =============================================================================

VALID_TONAL_CENTER_MODES = ["major", "minor"]
VALID_HEXATONIC_MODES = ["off", "dorian", "aeolian", "phrygian"]


class TargetTone(BaseModel):
    """
    An extra colour tone a player can aim for over a pentatonic box.

    The pitch class is `interval` semitones above either the major or the
    relative minor tonic, depending on `reference_root`.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    description: str
    interval: int = Field(..., ge=0, le=11)
    reference_root: Literal["major", "minor"]
    prefer_flat_name: bool = False


class ProgressionContext(BaseModel):
    """
    What the player is practising, used to pick backing progressions.

    Example:
        >>> ProgressionContext(
        ...     tonal_center_mode="minor", scale_family="pentatonic",
        ...     major_center_key="G", minor_center_key="E",
        ...     active_target_tones=["flatFive"],
        ... )
    """
    model_config = ConfigDict(frozen=True)

    tonal_center_mode: Literal["major", "minor"] = Field(default="minor")
    scale_family: BoxScaleFamily = Field(default="pentatonic")
    major_center_key: str = Field(..., min_length=1, examples=["G"])
    minor_center_key: str = Field(..., min_length=1, examples=["E"])
    hexatonic_mode: Literal["off", "dorian", "aeolian", "phrygian"] = Field(default="off")
    active_target_tones: List[str] = Field(default_factory=list, examples=[["flatFive"]])


class PracticeProgression(BaseModel):
    """A progression template rendered into chord names for one key."""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    roman_numerals: str = Field(..., examples=["I7 IV7 I7 V7"])
    chord_names: str = Field(..., examples=["E7 A7 E7 B7"])
    why_it_fits: str = ""


class ChordCheatSheetEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    chord_symbol: str
    notes: List[str]


class ChordCheatSheetData(BaseModel):
    """Chord tones for every chord in a set of progressions."""
    model_config = ConfigDict(frozen=True)

    entries: List[ChordCheatSheetEntry] = Field(default_factory=list)
    unique_notes: List[str] = Field(default_factory=list)
