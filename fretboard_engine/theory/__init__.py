"""
Theory Subpackage

    - pitch.py: Note names, pitch classes, keys and modes
    - fretboard.py: Pitch class at every (string, fret) for a tuning
    - catalog.py: Chord and scale formulas from interval tokens
    - chords.py: Chord pitch classes and major → minor voicing moves
"""

from fretboard_engine.theory.pitch import CHROMATIC_SCALE, normalize_note, to_pitch_class
from fretboard_engine.theory.fretboard import Fretboard, STANDARD_TUNING, get_fretboard
from fretboard_engine.theory.catalog import (
    CHORD_FORMULA_CATALOG,
    SCALE_FORMULA_CATALOG,
    get_chord_formula_definition,
    get_scale_formula_definition,
)
from fretboard_engine.theory.chords import build_chord
