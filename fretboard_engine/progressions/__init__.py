"""
Progressions Subpackage - Roman numerals and practice backing tracks
"""

from fretboard_engine.progressions.renderer import render_roman_progression_to_chords
from fretboard_engine.progressions.recommendations import (
    PROGRESSION_TEMPLATES,
    TARGET_TONES,
    get_chord_cheat_sheet_data,
    get_practice_progressions,
)
