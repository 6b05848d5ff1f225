"""
Chord Types - Building Chords and Transforming Voicings

Chord formulas come from the theory catalog; this module turns them into
pitch classes and names, checks voicings against a chord, and converts major
triad fingerings into other chord types where a simple one-fret move works.
"""

from typing import List, Optional, Sequence

from fretboard_engine.theory.catalog import require_chord_formula
from fretboard_engine.theory.fretboard import Fretboard
from fretboard_engine.theory.pitch import clean_note_name, to_display_name, to_pitch_class, transpose


def build_chord(root: str, chord_type: str = "major") -> List[int]:
    """
    Build the pitch classes of a chord.

    Examples:
        build_chord("F", "major")  → [5, 9, 0]
        build_chord("F", "minor")  → [5, 8, 0]
        build_chord("C", "7b5")    → [0, 4, 6, 10]

    Raises:
        UnknownNoteError: If the root is not a note name
        UnknownFormulaError: If the chord type is not in the catalog
    """
    root_pc = to_pitch_class(root)
    formula = require_chord_formula(chord_type)
    return [transpose(root_pc, interval) for interval in formula.intervals]


def get_chord_notes(root: str, chord_type: str = "major") -> List[str]:
    """Chord tones as note names, spelled for the root's key."""
    return [to_display_name(pc, root) for pc in build_chord(root, chord_type)]


def get_chord_name(root: str, chord_type: str = "major") -> str:
    """Chord symbol such as 'C', 'Am', 'G7' or 'Bbmaj7'."""
    formula = require_chord_formula(chord_type)
    return f"{clean_note_name(root)}{formula.symbol}"


def is_valid_chord_voicing(pitch_classes: Sequence[int], chord_pitch_classes: Sequence[int]) -> bool:
    """True when the voicing holds every chord tone and nothing else."""
    return set(pc % 12 for pc in pitch_classes) == set(pc % 12 for pc in chord_pitch_classes)


def flat_third_if_possible(
    frets: Sequence[int],
    strings: Sequence[int],
    major_third: int,
    minor_third: int,
    fretboard: Fretboard,
) -> Optional[List[int]]:
    """
    Lower every major third in a voicing by one fret.

    Returns:
        The adjusted frets, or None when a third sits on an open string
        (or the fret below does not sound the minor third)
    """
    new_frets = list(frets)

    for i, (string, fret) in enumerate(zip(strings, frets)):
        if fretboard.pitch_class_at(string, fret) != major_third:
            continue

        lowered = fret - 1
        if lowered < 0:
            return None
        if fretboard.pitch_class_at(string, lowered) != minor_third:
            return None
        new_frets[i] = lowered

    return new_frets


def transform_chord_type(
    major_frets: Sequence[int],
    strings: Sequence[int],
    root: str,
    target_chord_type: str,
    fretboard: Fretboard,
) -> Optional[List[int]]:
    """
    Turn a major triad fingering into `target_chord_type`.

    Major is returned unchanged and minor flattens the third. Any other
    chord type is not supported and gives None.
    """
    target = require_chord_formula(target_chord_type)

    if target.id == "major":
        return list(major_frets)

    if target.id == "minor":
        major_chord = build_chord(root, "major")
        minor_chord = build_chord(root, "minor")
        return flat_third_if_possible(major_frets, strings, major_chord[1], minor_chord[1], fretboard)

    return None
