"""
Pitch Model - Note Names, Pitch Classes and Key Spelling

This module is the foundation every other part of the engine builds on.
It can:
    1. Convert note names (sharps, flats, unicode accidentals) to pitch classes
    2. Spell a pitch class for display in a given key
    3. Normalize any major-key spelling to its circle-of-fifths name
    4. Derive relative minor / relative major / parent major keys

Pitch classes are integers 0-11 with C = 0.
"""

from typing import List, Optional

from fretboard_engine.errors import UnknownNoteError


# =============================================================================
# CONSTANTS
# =============================================================================

CHROMATIC_SCALE = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
FLAT_NAMES = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]

# Enharmonic spellings resolved before lookup
FLAT_TO_SHARP = {
    "Db": "C#",
    "Eb": "D#",
    "Fb": "E",
    "Gb": "F#",
    "Ab": "G#",
    "Bb": "A#",
    "Cb": "B",
    "E#": "F",
    "B#": "C",
}

# Keys whose signature is written with flats
FLAT_KEYS = {"F", "Bb", "Eb", "Ab", "Db", "Gb"}

CIRCLE_OF_FIFTHS_MAJOR_KEYS = ["C", "G", "D", "A", "E", "B", "F#", "Db", "Ab", "Eb", "Bb", "F"]

ENHARMONIC_TO_MAJOR_KEY = {
    "C#": "Db",
    "D#": "Eb",
    "G#": "Ab",
    "A#": "Bb",
    "B#": "C",
    "E#": "F",
    "Cb": "B",
    "Fb": "E",
    "Gb": "F#",
}

RELATIVE_MINOR_BY_MAJOR = {
    "C": "A",
    "G": "E",
    "D": "B",
    "A": "F#",
    "E": "C#",
    "B": "G#",
    "F#": "D#",
    "Db": "Bb",
    "Ab": "F",
    "Eb": "C",
    "Bb": "G",
    "F": "D",
}

MAJOR_SCALE_INTERVALS = [0, 2, 4, 5, 7, 9, 11]

MODE_NAMES = ["Ionian", "Dorian", "Phrygian", "Lydian", "Mixolydian", "Aeolian", "Locrian"]


# =============================================================================
# CORE FUNCTIONS
# =============================================================================

def clean_note_name(name: str) -> str:
    """Tidy up user input: unicode accidentals, whitespace and letter case."""
    if not isinstance(name, str):
        raise UnknownNoteError(f"Note name must be a string. Got: {name!r}")

    cleaned = name.strip().replace("♯", "#").replace("♭", "b")
    if not cleaned:
        raise UnknownNoteError("Empty note name")

    return cleaned[0].upper() + cleaned[1:].lower()


def normalize_note(name: str) -> str:
    """Convert a note name to its standard sharp form."""
    note = clean_note_name(name)
    note = FLAT_TO_SHARP.get(note, note)

    if note not in CHROMATIC_SCALE:
        raise UnknownNoteError(f"Unknown note: '{name}'. Valid notes are: {CHROMATIC_SCALE}")

    return note


def to_pitch_class(name: str) -> int:
    """Get the pitch class (0-11) of a note name."""
    return CHROMATIC_SCALE.index(normalize_note(name))


def uses_flat_spelling(key: Optional[str]) -> bool:
    """True when `key` is one of the flat-signature keys."""
    if not key:
        return False
    try:
        return clean_note_name(key) in FLAT_KEYS
    except UnknownNoteError:
        return False


def to_sharp_name(pc: int) -> str:
    return CHROMATIC_SCALE[pc % 12]


def to_flat_name(pc: int) -> str:
    return FLAT_NAMES[pc % 12]


def to_display_name(pc: int, key: Optional[str] = None) -> str:
    """
    Spell a pitch class for display.

    Flat-signature keys (F, Bb, Eb, Ab, Db, Gb) get flat names, everything
    else (including no key at all) gets sharp names.

    Examples:
        to_display_name(10)        → 'A#'
        to_display_name(10, 'F')   → 'Bb'
        to_display_name(10, 'A#')  → 'A#'
    """
    if uses_flat_spelling(key):
        return to_flat_name(pc)
    return to_sharp_name(pc)


def transpose(pc: int, semitones: int) -> int:
    return (pc + semitones) % 12


def normalize_major_key_name(key: str) -> str:
    """
    Map any spelling of a major key to its circle-of-fifths name.

    C# → Db, D# → Eb, A# → Bb, Gb → F#, Cb → B. F# stays F# as the
    boundary key between the sharp and flat sides.
    """
    cleaned = clean_note_name(key)

    if cleaned in CIRCLE_OF_FIFTHS_MAJOR_KEYS:
        return cleaned
    if cleaned in ENHARMONIC_TO_MAJOR_KEY:
        return ENHARMONIC_TO_MAJOR_KEY[cleaned]

    # Anything else must still be a real note; spell it from the circle
    pc = to_pitch_class(cleaned)
    for candidate in CIRCLE_OF_FIFTHS_MAJOR_KEYS:
        if to_pitch_class(candidate) == pc:
            return candidate

    raise UnknownNoteError(f"Unknown key: '{key}'")


def relative_minor(major_key: str) -> str:
    """Get the relative minor tonic (a minor third below) of a major key."""
    return RELATIVE_MINOR_BY_MAJOR[normalize_major_key_name(major_key)]


def relative_major(minor_key: str) -> str:
    """Get the relative major key of a minor tonic (a minor third above)."""
    minor_pc = to_pitch_class(minor_key)
    for major, minor in RELATIVE_MINOR_BY_MAJOR.items():
        if to_pitch_class(minor) == minor_pc:
            return major
    raise UnknownNoteError(f"Unknown minor key: '{minor_key}'")


def get_mode_index(mode: str) -> int:
    """Index of a mode name (case-insensitive) in Ionian..Locrian order."""
    lookup = {name.lower(): idx for idx, name in enumerate(MODE_NAMES)}
    index = lookup.get(mode.strip().lower())
    if index is None:
        raise ValueError(f"Unknown mode: '{mode}'. Valid modes are: {MODE_NAMES}")
    return index


def parent_major(mode: str, tonic: str) -> str:
    """
    Find the major key that contains `mode` starting on `tonic`.

    Examples:
        parent_major('Dorian', 'A')   → 'G'
        parent_major('Aeolian', 'E')  → 'G'
    """
    offset = MAJOR_SCALE_INTERVALS[get_mode_index(mode)]
    parent_pc = transpose(to_pitch_class(tonic), -offset)
    return normalize_major_key_name(to_sharp_name(parent_pc))


def build_scale_pitch_classes(root: str, intervals: List[int]) -> List[int]:
    """Pitch classes of a scale built from `root` with the given intervals."""
    root_pc = to_pitch_class(root)
    return [transpose(root_pc, interval) for interval in intervals]
