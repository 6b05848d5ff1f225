"""
Roman Numeral Renderer

Turns scale-degree progressions into chord names for a key:

    render_roman_progression_to_chords("I7 IV7 V7", "E")  → 'E7 A7 B7'
    render_roman_progression_to_chords("I bVII IV", "Bb") → 'Bb Ab Eb'
    render_roman_progression_to_chords("i bVI | v7", "A") → 'Am F | Em7'

This is a display helper: anything it does not recognise (bar lines,
typos, an unknown key) is passed through unchanged and it never raises.
"""

import re
from typing import Optional

from fretboard_engine.errors import UnknownNoteError
from fretboard_engine.theory.pitch import (
    FLAT_NAMES,
    CHROMATIC_SCALE,
    MAJOR_SCALE_INTERVALS,
    clean_note_name,
    to_pitch_class,
    uses_flat_spelling,
)


ROMAN_TOKEN_REGEX = re.compile(r"^([b#]?)([ivIV]+)(maj7|m7|7)?$")

DEGREE_BY_ROMAN = {"I": 1, "II": 2, "III": 3, "IV": 4, "V": 5, "VI": 6, "VII": 7}

BAR_LINE = "|"


def uses_flats_for_key(key: str) -> bool:
    """Flat spelling for flat-signature keys and any key written with a flat."""
    try:
        cleaned = clean_note_name(key)
    except UnknownNoteError:
        return False
    return "b" in cleaned[1:] or uses_flat_spelling(cleaned)


def format_chord_suffix(numeral: str, raw_suffix: str) -> str:
    """
    Chord suffix for a numeral. Lower-case numerals are minor.

    Examples:
        format_chord_suffix("V", "7")   → '7'
        format_chord_suffix("ii", "7")  → 'm7'
        format_chord_suffix("vi", "")   → 'm'
    """
    is_upper = numeral == numeral.upper()
    if raw_suffix in ("maj7", "m7"):
        return raw_suffix
    if raw_suffix == "7":
        return "7" if is_upper else "m7"
    return "" if is_upper else "m"


def render_roman_token(token: str, key: str) -> str:
    """Render one numeral token, or return it unchanged."""
    match = ROMAN_TOKEN_REGEX.match(token)
    if not match:
        return token

    accidental, numeral, raw_suffix = match.group(1), match.group(2), match.group(3) or ""
    degree = DEGREE_BY_ROMAN.get(numeral.upper())
    if degree is None:
        return token

    tonic_pc = _safe_pitch_class(key)
    if tonic_pc is None:
        return token

    accidental_offset = {"b": -1, "#": 1}.get(accidental, 0)
    pitch_class = (tonic_pc + MAJOR_SCALE_INTERVALS[degree - 1] + accidental_offset) % 12
    use_flats = accidental == "b" or uses_flats_for_key(key)
    root = (FLAT_NAMES if use_flats else CHROMATIC_SCALE)[pitch_class]

    return f"{root}{format_chord_suffix(numeral, raw_suffix)}"


def _safe_pitch_class(key: str) -> Optional[int]:
    try:
        return to_pitch_class(key)
    except UnknownNoteError:
        return None


def render_roman_progression_to_chords(progression: str, key: str) -> str:
    """
    Render a whitespace-separated numeral progression for `key`.

    Bar lines pass through, whitespace collapses to single spaces.
    """
    if not isinstance(progression, str):
        return progression

    return " ".join(
        token if token == BAR_LINE else render_roman_token(token, key)
        for token in progression.split()
    )
