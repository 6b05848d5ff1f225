"""
Triad Voicings - Exhaustive Search on a 3-String Group

For a triad and one group of three adjacent strings, every fret triple in
0..max_fret is tested at once with numpy. A triple survives when its three
pitch classes are exactly the triad and its fret span (open strings
included) fits within max_stretch.

Survivors are VoicingCandidate records: the raw material that
triads.selection chains and picks positions from.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from fretboard_engine.errors import EngineInvariantViolation
from fretboard_engine.theory.catalog import require_chord_formula
from fretboard_engine.theory.fretboard import STRING_NAMES, Fretboard
from fretboard_engine.theory.pitch import to_display_name, to_pitch_class, transpose


# =============================================================================
# PART 1: CONSTANTS
# =============================================================================

# Adjacent 3-string sets, low string first: E-A-D, A-D-G, D-G-B, G-B-E
STRING_GROUPS: Tuple[Tuple[int, int, int], ...] = ((0, 1, 2), (1, 2, 3), (2, 3, 4), (3, 4, 5))

# Each step moves the bass up one triad tone
INVERSION_CYCLE = ("root", "first", "second")


# =============================================================================
# PART 2: DATA TYPES
# =============================================================================

@dataclass(frozen=True)
class VoicingCandidate:
    """A playable triad fingering before it is assigned a position."""
    strings: Tuple[int, int, int]
    frets: Tuple[int, int, int]
    notes: Tuple[int, int, int]
    note_names: Tuple[str, str, str]
    inversion: str
    avg_fret: float

    @property
    def max_fret(self) -> int:
        return max(self.frets)

    def sort_key(self) -> Tuple[float, Tuple[int, int, int]]:
        return (self.avg_fret, self.frets)


# =============================================================================
# PART 3: CORE FUNCTIONS
# =============================================================================
#
# find_all_triad_voicings is the only exhaustive search in the engine. Every
# fret triple up to max_fret is checked with numpy rather than nested loops.
#

def build_triad(key: str, chord_type: str = "major") -> Tuple[int, int, int]:
    """
    Pitch classes (root, third, fifth) of a 3-note chord.

    Raises:
        ValueError: If the chord type is not a three-note formula
    """
    formula = require_chord_formula(chord_type)
    if len(formula.intervals) != 3:
        raise ValueError(
            f"'{chord_type}' is not a triad ({len(formula.intervals)} notes). "
            f"Use major, minor, dim or aug."
        )
    root_pc = to_pitch_class(key)
    root, third, fifth = (transpose(root_pc, interval) for interval in formula.intervals)
    return root, third, fifth


def build_major_triad(key: str) -> Tuple[int, int, int]:
    """Major triad pitch classes: root, root + 4, root + 7."""
    return build_triad(key, "major")


def identify_inversion(notes: Sequence[int], triad: Sequence[int]) -> str:
    """Name the inversion from the bass (lowest string) pitch class."""
    root, third, fifth = triad
    bass = notes[0]
    if bass == root:
        return "root"
    if bass == third:
        return "first"
    if bass == fifth:
        return "second"
    return "unknown"


def next_inversion(inversion: str, steps: int = 1) -> str:
    index = INVERSION_CYCLE.index(inversion)
    return INVERSION_CYCLE[(index + steps) % len(INVERSION_CYCLE)]


def string_names_for(strings: Sequence[int]) -> List[str]:
    return [STRING_NAMES[s] for s in strings]


def find_all_triad_voicings(
    group: Sequence[int],
    triad: Sequence[int],
    fretboard: Fretboard,
    max_stretch: int = 5,
    max_fret: int = 18,
    key: Optional[str] = None,
) -> List[VoicingCandidate]:
    """
    Enumerate every voicing of `triad` on the strings in `group`.

    Args:
        group: Three string indices, low string first
        triad: Pitch classes (root, third, fifth)
        fretboard: Fretboard covering at least max_fret
        max_stretch: Maximum max-min fret span
        max_fret: Highest fret searched
        key: Key used to spell note names

    Returns:
        Candidates sorted by (average fret, frets)

    Raises:
        EngineInvariantViolation: If a surviving voicing has no inversion
    """
    if fretboard.max_fret < max_fret:
        raise ValueError(
            f"Fretboard only reaches fret {fretboard.max_fret}, search needs {max_fret}"
        )
    if len(set(triad)) != 3:
        raise ValueError(f"Triad must have three distinct pitch classes. Got: {list(triad)}")

    frets = np.arange(max_fret + 1)
    f0, f1, f2 = np.meshgrid(frets, frets, frets, indexing="ij")
    p0 = fretboard.grid[group[0], f0]
    p1 = fretboard.grid[group[1], f1]
    p2 = fretboard.grid[group[2], f2]

    # Three notes holding all three distinct tones is the same as set equality
    mask = np.ones(f0.shape, dtype=bool)
    for tone in set(triad):
        mask &= (p0 == tone) | (p1 == tone) | (p2 == tone)

    span = np.maximum(np.maximum(f0, f1), f2) - np.minimum(np.minimum(f0, f1), f2)
    mask &= span <= max_stretch

    voicings = []
    for a, b, c in np.argwhere(mask):
        fret_triple = (int(a), int(b), int(c))
        notes = tuple(fretboard.pitch_class_at(s, f) for s, f in zip(group, fret_triple))
        inversion = identify_inversion(notes, triad)
        if inversion == "unknown":
            raise EngineInvariantViolation(
                f"Voicing {list(fret_triple)} on strings {list(group)} has bass "
                f"{notes[0]} outside triad {list(triad)}"
            )
        voicings.append(VoicingCandidate(
            strings=tuple(group),
            frets=fret_triple,
            notes=notes,
            note_names=tuple(to_display_name(pc, key) for pc in notes),
            inversion=inversion,
            avg_fret=sum(fret_triple) / 3,
        ))

    return sorted(voicings, key=VoicingCandidate.sort_key)
