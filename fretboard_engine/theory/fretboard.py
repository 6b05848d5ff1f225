"""
Fretboard Model - Pitch Classes at Every (String, Fret)

Given an ordered tuning (one open-string pitch class per string, low to high)
this module answers "which pitch class sits at string s, fret f?" for frets
0..max_fret. The grid is a small numpy array built once per
(tuning, max_fret) pair and shared read-only.

String indices run low to high: 0 = low E, 5 = high E in standard tuning.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Sequence, Tuple

import numpy as np

from fretboard_engine.errors import NoteNotOnFretboardError
from fretboard_engine.theory.pitch import to_pitch_class


# =============================================================================
# CONSTANTS
# =============================================================================

STANDARD_TUNING: Tuple[int, ...] = (4, 9, 2, 7, 11, 4)   # E A D G B E
STRING_NAMES: Tuple[str, ...] = ("E", "A", "D", "G", "B", "E")

DEFAULT_MAX_FRET = 20


# =============================================================================
# DATA TYPES
# =============================================================================

@dataclass(frozen=True)
class FretPosition:
    """A single fretted note: string index, fret number and its pitch class."""
    string: int
    fret: int
    pitch_class: int


class Fretboard:
    """
    Pitch-class lookup table for one tuning.

    Attributes:
        tuning: Open-string pitch classes, low string first
        max_fret: Highest fret included in the grid
        grid: numpy array of shape (strings, max_fret + 1)
    """

    def __init__(self, tuning: Sequence[int] = STANDARD_TUNING, max_fret: int = DEFAULT_MAX_FRET):
        if max_fret < 0:
            raise ValueError(f"max_fret must be >= 0. Got: {max_fret}")

        self.tuning = tuple(int(pc) % 12 for pc in tuning)
        self.max_fret = max_fret
        self.grid = (np.array(self.tuning)[:, None] + np.arange(max_fret + 1)) % 12
        self.grid.setflags(write=False)

    @property
    def string_count(self) -> int:
        return len(self.tuning)

    def pitch_class_at(self, string: int, fret: int) -> int:
        """Pitch class at (string, fret). Frets past max_fret still wrap mod 12."""
        return (self.tuning[string] + fret) % 12

    def frets_for_pitch_class(
        self,
        string: int,
        pitch_class: int,
        lowest: int = 0,
        highest: Optional[int] = None,
    ) -> List[int]:
        """All frets on `string` within [lowest, highest] that sound `pitch_class`."""
        top = self.max_fret if highest is None else min(highest, self.max_fret)
        row = self.grid[string, max(lowest, 0):top + 1]
        return [int(fret) + max(lowest, 0) for fret in np.flatnonzero(row == pitch_class % 12)]

    def positions_of(self, pitch_class: int) -> List[FretPosition]:
        """Every position on the neck sounding `pitch_class`, ordered by string then fret."""
        strings, frets = np.nonzero(self.grid == pitch_class % 12)
        return [
            FretPosition(string=int(s), fret=int(f), pitch_class=pitch_class % 12)
            for s, f in zip(strings, frets)
        ]

    def find_fret_on_string(self, string: int, pitch_class: int, lowest: int = 0) -> int:
        """Lowest fret at or above `lowest` on `string` sounding `pitch_class`."""
        frets = self.frets_for_pitch_class(string, pitch_class, lowest=lowest)
        if not frets:
            raise NoteNotOnFretboardError(
                f"Pitch class {pitch_class} not found on string {string} "
                f"between fret {lowest} and {self.max_fret}"
            )
        return frets[0]

    def find_best_position(self, note: str, target_fret: int) -> FretPosition:
        """
        Find the position of `note` closest to `target_fret`.

        Candidates are ranked by distance from the target fret, then by
        string index, then by fret.

        Raises:
            NoteNotOnFretboardError: If the note never appears on the neck
        """
        candidates = self.positions_of(to_pitch_class(note))
        if not candidates:
            raise NoteNotOnFretboardError(f"Note '{note}' not found on fretboard")

        return min(
            candidates,
            key=lambda pos: (abs(pos.fret - target_fret), pos.string, pos.fret),
        )


@lru_cache(maxsize=32)
def get_fretboard(tuning: Tuple[int, ...] = STANDARD_TUNING, max_fret: int = DEFAULT_MAX_FRET) -> Fretboard:
    """Shared Fretboard for a (tuning, max_fret) pair."""
    return Fretboard(tuple(tuning), max_fret)


def build_fretboard(tuning: Sequence[int] = STANDARD_TUNING, max_fret: int = DEFAULT_MAX_FRET) -> Fretboard:
    return get_fretboard(tuple(int(pc) % 12 for pc in tuning), max_fret)
