"""
Blue Note Placement

A blues box is a pentatonic box plus the flat five (root + 6) on a few
strings. For each string the best blue-note fret is scored against the
string's pentatonic pair and the box window:

    score = (-100 if inside the pair)
          + 10 × distance to the nearest pair edge
          + distance outside the window
          + 2 if below the pair

Lower is better. Frets above the pair win ties so the box does not drift
down the neck.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from fretboard_engine.theory.fretboard import Fretboard


BLUE_NOTE_INTERVAL = 6

# Boxes 2 and 3 (0-based 1 and 2) carry an extra blue note on top
WIDE_BLUES_BOX_INDICES = (1, 2)


@dataclass(frozen=True)
class BlueNoteCandidate:
    string: int
    fret: int
    score: int


def score_blue_fret(fret: int, low: int, high: int, window_start: int, window_end: int) -> int:
    """Placement score of a blue-note fret next to the pair [low, high]."""
    between = low <= fret <= high
    edge_distance = 0 if between else min(abs(fret - low), abs(fret - high))

    if fret < window_start:
        window_distance = window_start - fret
    elif fret > window_end:
        window_distance = fret - window_end
    else:
        window_distance = 0

    below_penalty = 2 if fret < low else 0
    return (-100 if between else 0) + edge_distance * 10 + window_distance + below_penalty


def select_blue_candidates(
    fretboard: Fretboard,
    pattern: Sequence[Sequence[int]],
    window_start: int,
    window_end: int,
    root_pitch_class: int,
) -> List[BlueNoteCandidate]:
    """Best blue-note fret for every string, ranked by (score, string)."""
    blue_pitch_class = (root_pitch_class + BLUE_NOTE_INTERVAL) % 12
    candidates = []

    for string, string_frets in enumerate(pattern):
        frets = sorted(string_frets)
        low, high = frets[0], frets[-1]
        blue_frets = fretboard.frets_for_pitch_class(string, blue_pitch_class)
        if not blue_frets:
            continue

        scored = [
            BlueNoteCandidate(string, fret, score_blue_fret(fret, low, high, window_start, window_end))
            for fret in blue_frets
        ]
        candidates.append(min(scored, key=lambda c: (c.score, c.fret)))

    return sorted(candidates, key=lambda c: (c.score, c.string))


def desired_blue_note_count(box_index: int) -> int:
    """How many strings get a blue note in the box at 0-based `box_index`."""
    return 3 if box_index in WIDE_BLUES_BOX_INDICES else 2


def choose_blue_notes(
    candidates: Sequence[BlueNoteCandidate],
    desired: int,
    forced_string: Optional[int] = None,
) -> List[BlueNoteCandidate]:
    """
    Take the best `desired` candidates, one per string.

    A candidate on `forced_string` is taken first when it exists.
    """
    chosen: List[BlueNoteCandidate] = []

    if forced_string is not None:
        chosen.extend(c for c in candidates if c.string == forced_string)
        chosen = chosen[:1]

    for candidate in candidates:
        if len(chosen) >= desired:
            break
        if any(c.string == candidate.string for c in chosen):
            continue
        chosen.append(candidate)

    return chosen[:desired]
