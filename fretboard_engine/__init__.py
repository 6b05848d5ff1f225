"""
Fretboard Engine - Guitar Theory on the Neck

Turns music-theory objects into playable fretboard shapes for a 6-string
guitar in a fixed tuning.

Subpackages:
    - fretboard_engine.theory: Pitch model, fretboard grid, chord/scale catalog
    - fretboard_engine.triads: Four chained major-triad positions per string group
    - fretboard_engine.boxes: Modal, pentatonic and blues scale boxes
    - fretboard_engine.progressions: Roman numeral rendering and practice progressions
    - fretboard_engine.data: Output schemas, configuration and export tables
    - fretboard_engine.app: Command line interface

Example usage:
    from fretboard_engine import generate_triads_data, generate_box_shape_patterns

    triads = generate_triads_data("G")
    print(triads.string_groups[0].voicings[0].frets)   # [3, 2, 0]

    boxes = generate_box_shape_patterns("A", "pentatonic")
    print(boxes[0].pattern[0])                         # [5, 8]
"""

__version__ = "0.1.0"

from fretboard_engine.errors import (
    EngineInvariantViolation,
    FretboardError,
    InvalidIntervalError,
    NoteNotOnFretboardError,
    UnknownFormulaError,
    UnknownNoteError,
)
from fretboard_engine.theory.catalog import (
    get_chord_formula_definition,
    get_scale_formula_definition,
    interval_token_to_semitones,
)
from fretboard_engine.theory.chords import build_chord
from fretboard_engine.triads.engine import generate_chord_data, generate_triads_data
from fretboard_engine.boxes.shapes import generate_box_shape_patterns
from fretboard_engine.boxes.display import get_display_ordered_box_patterns
from fretboard_engine.progressions.renderer import render_roman_progression_to_chords
from fretboard_engine.progressions.recommendations import (
    get_chord_cheat_sheet_data,
    get_practice_progressions,
)
