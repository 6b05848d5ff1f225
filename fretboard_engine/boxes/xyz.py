"""
String-Crossing Window (the XYZ system)

Three-notes-per-string major scale fingerings repeat a 7-cell cycle:

    X = whole-whole     Y = half-whole     Z = whole-half

Each mode enters the cycle at a different point, and the six cells from
there (one per string, low E first) describe the box. Ionian reads
X X Y Y Z Z.

plan_xyz_positions turns a window into a per-string starting fret given a
seed (string, fret): toward the high E string the hand moves up one fret
where an X cell meets a Y cell, and once more crossing from G to B because
that pair is tuned a major third apart instead of a fourth.
"""

from dataclasses import dataclass
from typing import List

from fretboard_engine.theory.pitch import MODE_NAMES, get_mode_index


# =============================================================================
# CONSTANTS
# =============================================================================

XYZ_BASE = ("X", "X", "X", "Y", "Y", "Z", "Z")

MODE_TO_START = {
    "Ionian": 1,
    "Dorian": 6,
    "Phrygian": 4,
    "Lydian": 2,
    "Mixolydian": 0,
    "Aeolian": 5,
    "Locrian": 3,
}

WINDOW_LENGTH = 6

# Index of the G string; crossing to index 4 (B) shifts the hand
G_STRING_INDEX = 3


# =============================================================================
# DATA TYPES
# =============================================================================

@dataclass(frozen=True)
class XYZPosition:
    string: int
    fret: int
    symbol: str


# =============================================================================
# CORE FUNCTIONS
# =============================================================================

def _canonical_mode(mode: str) -> str:
    return MODE_NAMES[get_mode_index(mode)]


def xyz_window_for_mode(mode: str) -> List[str]:
    """
    The six cell symbols for a mode, low E string first.

    Examples:
        xyz_window_for_mode("Ionian")      → ['X', 'X', 'Y', 'Y', 'Z', 'Z']
        xyz_window_for_mode("Mixolydian")  → ['X', 'X', 'X', 'Y', 'Y', 'Z']
    """
    start = MODE_TO_START[_canonical_mode(mode)]
    return [XYZ_BASE[(start + i) % len(XYZ_BASE)] for i in range(WINDOW_LENGTH)]


def get_xyz_display_string(mode: str) -> str:
    return "".join(xyz_window_for_mode(mode))


def plan_xyz_positions(mode: str, start_string: int, start_fret: int) -> List[XYZPosition]:
    """
    Starting fret per string for a mode's window, seeded at one string.

    Walking toward the high E string, an X cell followed by a Y cell moves
    the hand up one fret, as does stepping from G to B. Walking toward the
    low E string the same moves go down one fret. The planned frets land
    within two frets of where each string's run really starts.

    Args:
        mode: Mode name (case-insensitive)
        start_string: Seed string index, 0 = low E
        start_fret: Fret at the seed string

    Returns:
        Six XYZPosition entries, low E first
    """
    if not 0 <= start_string < WINDOW_LENGTH:
        raise ValueError(f"start_string must be in 0-{WINDOW_LENGTH - 1}. Got: {start_string}")

    symbols = xyz_window_for_mode(mode)
    frets = [0] * WINDOW_LENGTH
    frets[start_string] = start_fret

    current = start_fret
    for i in range(start_string - 1, -1, -1):
        if symbols[i + 1] == "Y" and symbols[i] == "X":
            current -= 1
        if i == G_STRING_INDEX:
            current -= 1
        frets[i] = current

    current = start_fret
    for i in range(start_string + 1, WINDOW_LENGTH):
        if symbols[i - 1] == "X" and symbols[i] == "Y":
            current += 1
        if i - 1 == G_STRING_INDEX:
            current += 1
        frets[i] = current

    return [XYZPosition(string=i, fret=frets[i], symbol=symbols[i]) for i in range(WINDOW_LENGTH)]
