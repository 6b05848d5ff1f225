"""
Display Ordering for Scale Boxes

Boxes are drawn left to right in neck order. For major boxes that is a
plain sort by window. Pentatonic and blues boxes can do better: when the
highest-numbered boxes sit entirely at fret 12 or above, the same
fingerings exist an octave lower, below box 1. Moving them down and
showing them first gives a sequence like 4 5 1 2 3 that still climbs the
neck. The wrap is only used when the result really is ascending.
"""

from typing import List, Sequence

from fretboard_engine.data.schema import BoxShapePattern


OCTAVE = 12

# Lowest shape number tried as the first box of a wrapped sequence
FIRST_WRAP_SHAPE = 4


def neck_order_key(pattern: BoxShapePattern):
    return (pattern.window_start, pattern.window_end, pattern.shape_number)


def is_neck_ascending(patterns: Sequence[BoxShapePattern]) -> bool:
    """True when every box starts (and ends, on ties) no lower than the previous one."""
    return all(
        (b.window_start, b.window_end) >= (a.window_start, a.window_end)
        for a, b in zip(patterns, patterns[1:])
    )


def transpose_down_octave(pattern: BoxShapePattern) -> BoxShapePattern:
    """Same box one octave lower. Every fret must be at 12 or above."""
    frets = [[fret - OCTAVE for fret in string_frets] for string_frets in pattern.pattern]
    return pattern.model_copy(update={
        "pattern": frets,
        "window_start": pattern.window_start - OCTAVE,
        "window_end": pattern.window_end - OCTAVE,
        "root_positions": [(s, f - OCTAVE) for s, f in pattern.root_positions],
        "blue_note_positions": [(s, f - OCTAVE) for s, f in pattern.blue_note_positions],
    })


def get_display_ordered_box_patterns(
    patterns: Sequence[BoxShapePattern],
    family: str,
) -> List[BoxShapePattern]:
    """
    Reorder boxes for left-to-right display.

    Args:
        patterns: Boxes in any order
        family: 'major', 'pentatonic' or 'blues'

    Returns:
        Boxes in neck order, possibly with the top boxes moved down an octave
    """
    if not patterns:
        return []

    by_number = sorted(patterns, key=lambda p: p.shape_number)

    if family != "major":
        highest = by_number[-1].shape_number
        for first in range(FIRST_WRAP_SHAPE, highest + 1):
            upper = [p for p in by_number if p.shape_number >= first]
            lower = [p for p in by_number if p.shape_number < first]
            if not upper or not lower:
                continue
            if not all(fret >= OCTAVE for p in upper for fret in p.all_frets()):
                continue

            ordered = [transpose_down_octave(p) for p in upper] + lower
            if is_neck_ascending(ordered):
                return ordered

    return sorted(by_number, key=neck_order_key)
