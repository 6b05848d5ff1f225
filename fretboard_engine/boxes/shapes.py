"""
Box Shape Generator - Scale Boxes Across the Neck

Three families:

    major       7 modal boxes (Ionian..Locrian), 3 notes per string except
                one 2-note string per box, each window 2 frets above the last
    pentatonic  5 minor pentatonic boxes, 2 notes per string, each box
                starting where the previous one ended on every string
    blues       the pentatonic boxes plus flat-five blue notes

Main entry point:
    generate_box_shape_patterns("A", "pentatonic")  → 5 BoxShapePattern
"""

import math
from typing import Dict, List, Optional, Sequence

from fretboard_engine.boxes.blues import (
    BLUE_NOTE_INTERVAL,
    WIDE_BLUES_BOX_INDICES,
    choose_blue_notes,
    desired_blue_note_count,
    select_blue_candidates,
)
from fretboard_engine.boxes.xyz import get_xyz_display_string, plan_xyz_positions
from fretboard_engine.data.config import BoxShapeOptions
from fretboard_engine.data.schema import VALID_BOX_FAMILIES, BoxShapePattern
from fretboard_engine.theory.catalog import require_scale_formula
from fretboard_engine.theory.fretboard import Fretboard, get_fretboard
from fretboard_engine.theory.pitch import MODE_NAMES, clean_note_name, to_display_name, to_pitch_class


# =============================================================================
# CONSTANTS
# =============================================================================

MAJOR_BOX_SHIFT = 2
MAJOR_WINDOW_WIDTH = 5
PENTATONIC_WINDOW_WIDTH = 4

# Boxes from 6 up never reach below fret 12
FIRST_LATE_BOX_INDEX = 5
LATE_BOX_MIN_FRET = 12

# Box -> string index that carries only 2 notes (0 = low E ... 5 = high E)
MAJOR_2NPS_STRING_INDEX_BY_BOX = [4, 3, 3, 4, 4, 4, 4]

BLUES_BOX_COUNT = 5

HIGH_E_STRING = 5


# =============================================================================
# SCALE HELPERS
# =============================================================================

def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _interval_set(intervals: Sequence[int]) -> set:
    return {interval % 12 for interval in intervals}


def next_scale_pitch_class(root_pc: int, intervals: Sequence[int], current_pc: int) -> int:
    """The scale tone after `current_pc`; a whole step up if it is not in the scale."""
    steps = sorted(_interval_set(intervals))
    interval = (current_pc - root_pc) % 12
    if interval not in steps:
        return (current_pc + 2) % 12
    return (root_pc + steps[(steps.index(interval) + 1) % len(steps)]) % 12


def collect_scale_frets(
    fretboard: Fretboard,
    string: int,
    root_pc: int,
    intervals: Sequence[int],
    min_fret: int,
    max_fret: int,
) -> List[int]:
    """Frets in [min_fret, max_fret] on `string` that belong to the scale."""
    wanted = _interval_set(intervals)
    top = min(max_fret, fretboard.max_fret)
    return [
        fret for fret in range(max(min_fret, 0), top + 1)
        if (fretboard.pitch_class_at(string, fret) - root_pc) % 12 in wanted
    ]


def find_nearest_scale_frets(
    fretboard: Fretboard,
    string: int,
    root_pc: int,
    intervals: Sequence[int],
    target_fret: int,
    count: int,
) -> List[int]:
    """The `count` scale frets closest to `target_fret`, ascending."""
    frets = collect_scale_frets(fretboard, string, root_pc, intervals, 0, fretboard.max_fret)
    nearest = sorted(frets, key=lambda fret: (abs(fret - target_fret), fret))[:count]
    return sorted(nearest)


def next_scale_fret_on_string(
    fretboard: Fretboard,
    string: int,
    root_pc: int,
    intervals: Sequence[int],
    from_fret: int,
) -> Optional[int]:
    """First scale fret above `from_fret`, or None when the neck ends first."""
    above = collect_scale_frets(fretboard, string, root_pc, intervals, from_fret + 1, fretboard.max_fret)
    return above[0] if above else None


def choose_run_start_fret(
    fretboard: Fretboard,
    string: int,
    target_pc: int,
    planned_fret: int,
) -> Optional[int]:
    """
    Where a string's run should begin: the fret sounding `target_pc`
    nearest the hand position planned for that string, higher on ties.
    None when no such fret is within reach of the plan.
    """
    frets = [
        fret for fret in fretboard.frets_for_pitch_class(string, target_pc)
        if abs(fret - planned_fret) <= MAJOR_WINDOW_WIDTH
    ]
    if not frets:
        return None
    return min(frets, key=lambda fret: (abs(fret - planned_fret), -fret))



def choose_frets_for_display(frets: Sequence[int], max_notes: int) -> List[int]:
    """
    Trim a string's in-window frets down to `max_notes`.

    Two notes: the tightest adjacent pair, nearest the middle of the
    candidates, lower on ties. Three or more: the lowest notes.
    """
    unique = sorted(set(frets))
    if len(unique) <= max_notes:
        return unique

    if max_notes == 1:
        return [unique[len(unique) // 2]]

    if max_notes == 2:
        center = (unique[0] + unique[-1]) / 2
        pairs = [(unique[i], unique[i + 1]) for i in range(len(unique) - 1)]
        best = min(pairs, key=lambda p: (p[1] - p[0], abs((p[0] + p[1]) / 2 - center), p[0]))
        return list(best)

    return unique[:max_notes]


def select_frets_for_string(
    fretboard: Fretboard,
    string: int,
    root_pc: int,
    intervals: Sequence[int],
    window_start: int,
    window_end: int,
    count: int,
) -> List[int]:
    """In-window frets for a string, topped up from the nearest scale frets."""
    in_window = collect_scale_frets(fretboard, string, root_pc, intervals, window_start, window_end)
    selected = choose_frets_for_display(in_window, count)
    if len(selected) >= count:
        return selected

    center = _round_half_up((window_start + window_end) / 2)
    for fret in find_nearest_scale_frets(fretboard, string, root_pc, intervals, center, count * 3):
        if fret not in selected:
            selected.append(fret)
            if len(selected) >= count:
                break
    return sorted(selected)


def build_scale_run(
    fretboard: Fretboard,
    string: int,
    root_pc: int,
    intervals: Sequence[int],
    start_fret: int,
    note_count: int,
) -> Optional[List[int]]:
    """`note_count` ascending scale frets from `start_fret`, or None if the neck runs out."""
    frets = [start_fret]
    while len(frets) < note_count:
        following = next_scale_fret_on_string(fretboard, string, root_pc, intervals, frets[-1])
        if following is None:
            return None
        frets.append(following)
    return frets



# =============================================================================
# PATTERN ASSEMBLY
# =============================================================================

def _root_fret_on_low_string(fretboard: Fretboard, root_pc: int) -> int:
    return (root_pc - fretboard.tuning[0]) % 12


def _positions_with_interval(
    fretboard: Fretboard,
    pattern: Sequence[Sequence[int]],
    reference_pc: int,
    interval: int,
) -> List[tuple]:
    wanted = (reference_pc + interval) % 12
    return [
        (string, fret)
        for string, frets in enumerate(pattern)
        for fret in frets
        if fretboard.pitch_class_at(string, fret) == wanted
    ]


def _make_pattern(
    fretboard: Fretboard,
    family: str,
    shape_number: int,
    key_root: str,
    root_pc: int,
    shape_root_pc: int,
    intervals: Sequence[int],
    pattern: List[List[int]],
    label: str,
    mode_name: Optional[str] = None,
    window: Optional[tuple] = None,
) -> BoxShapePattern:
    """Build the final model; the window defaults to the pattern's fret extent."""
    pattern = [sorted(frets) for frets in pattern]
    all_frets = [fret for frets in pattern for fret in frets]
    window_start, window_end = window if window is not None else (min(all_frets), max(all_frets))

    return BoxShapePattern(
        family=family,
        shape_number=shape_number,
        label=label,
        key_root=key_root,
        shape_root_note=to_display_name(shape_root_pc, key_root),
        shape_root_pitch_class=shape_root_pc,
        mode_name=mode_name,
        string_crossing=get_xyz_display_string(mode_name) if mode_name else None,
        intervals=list(intervals),
        window_start=window_start,
        window_end=window_end,
        pattern=pattern,
        root_positions=_positions_with_interval(fretboard, pattern, shape_root_pc, 0),
        blue_note_positions=(
            _positions_with_interval(fretboard, pattern, root_pc, BLUE_NOTE_INTERVAL)
            if family == "blues" else []
        ),
    )


# =============================================================================
# FAMILY GENERATORS
# =============================================================================

def _major_box_base_fret(fretboard: Fretboard, root_pc: int, intervals: Sequence[int]) -> int:
    """Low E fret of box 1, an octave up when box 6 would otherwise start below fret 12."""
    base = _root_fret_on_low_string(fretboard, root_pc)
    if base + intervals[FIRST_LATE_BOX_INDEX] < LATE_BOX_MIN_FRET:
        base += 12
    return base


def generate_major_boxes(
    key_root: str,
    fretboard: Fretboard,
    verbose: bool = False,
) -> List[BoxShapePattern]:
    """
    Seven modal boxes for a major key.

    Box 1 takes three scale frets on the low E string from the root upward;
    every later box keeps the last two low E frets of the box before and
    adds the next scale fret. Each higher string continues with the scale
    tone after the previous string's last note, played at the fret nearest
    the string-crossing plan for that mode. Boxes that would run off the
    neck are left out, along with every box after them.
    """
    root_pc = to_pitch_class(key_root)
    intervals = require_scale_formula("major").intervals
    base_fret = _major_box_base_fret(fretboard, root_pc, intervals)
    e_strings_match = fretboard.tuning[0] == fretboard.tuning[HIGH_E_STRING]

    boxes = []
    low_frets = collect_scale_frets(fretboard, 0, root_pc, intervals, base_fret, fretboard.max_fret)[:3]

    for index, mode_name in enumerate(MODE_NAMES):
        shape_number = index + 1
        if index > 0:
            following = next_scale_fret_on_string(fretboard, 0, root_pc, intervals, low_frets[-1])
            low_frets = low_frets[1:] + ([following] if following is not None else [])
        if len(low_frets) < 3:
            break

        note_counts = [3] * 6
        note_counts[MAJOR_2NPS_STRING_INDEX_BY_BOX[index]] = 2
        plan = plan_xyz_positions(mode_name, 0, low_frets[0])

        pattern = [list(low_frets)]
        for string in range(1, 6):
            if string == HIGH_E_STRING and e_strings_match:
                pattern.append(list(low_frets))
                continue

            previous_last = pattern[string - 1][-1]
            start_pc = next_scale_pitch_class(
                root_pc, intervals, fretboard.pitch_class_at(string - 1, previous_last)
            )
            start_fret = choose_run_start_fret(fretboard, string, start_pc, plan[string].fret)
            run = None
            if start_fret is not None:
                run = build_scale_run(fretboard, string, root_pc, intervals, start_fret, note_counts[string])
            if run is None:
                break
            pattern.append(run)

        if len(pattern) < 6:
            break

        window_start = base_fret + index * MAJOR_BOX_SHIFT
        window_end = min(fretboard.max_fret, window_start + MAJOR_WINDOW_WIDTH)
        shape_root_pc = (root_pc + intervals[index]) % 12
        shape_root_name = to_display_name(shape_root_pc, key_root)
        box = _make_pattern(
            fretboard, "major", shape_number, key_root, root_pc, shape_root_pc, intervals, pattern,
            label=f"{shape_root_name} {mode_name} (Box {shape_number})",
            mode_name=mode_name,
            window=(window_start, window_end),
        )

        if verbose:
            print(f"  Box {shape_number} {mode_name:<10} window {window_start}-{window_end} "
                  f"{box.string_crossing} plan {[p.fret for p in plan]}")
        boxes.append(box)

    if verbose and len(boxes) < len(MODE_NAMES):
        print(f"  ⚠️  Only {len(boxes)} boxes fit below fret {fretboard.max_fret}")
    return boxes



def generate_pentatonic_boxes(
    key_root: str,
    fretboard: Fretboard,
    verbose: bool = False,
) -> List[BoxShapePattern]:
    """
    Five connected minor pentatonic boxes.

    Box 1 takes a compact pair on every string inside [root, root + 4] on
    the low E string; box n on each string is (box n-1's upper fret, next
    scale fret). The chain stops early when the next box would run off the
    neck.
    """
    root_pc = to_pitch_class(key_root)
    intervals = require_scale_formula("minorPentatonic").intervals
    window_start = _root_fret_on_low_string(fretboard, root_pc)
    window_end = min(fretboard.max_fret, window_start + PENTATONIC_WINDOW_WIDTH)

    pattern = [
        select_frets_for_string(fretboard, string, root_pc, intervals, window_start, window_end, 2)
        for string in range(6)
    ]

    boxes = []
    for shape_number in range(1, len(intervals) + 1):
        if shape_number > 1:
            upper = [next_scale_fret_on_string(fretboard, string, root_pc, intervals, frets[1])
                     for string, frets in enumerate(pattern)]
            if None in upper:
                break
            pattern = [[frets[1], fret] for frets, fret in zip(pattern, upper)]

        box = _make_pattern(
            fretboard, "pentatonic", shape_number, key_root, root_pc, root_pc, intervals, pattern,
            label=f"{key_root} Minor Pentatonic (Box {shape_number})",
        )
        if verbose:
            print(f"  Box {shape_number} frets {box.window_start}-{box.window_end}")
        boxes.append(box)

    return boxes


def _octave_above_if_fits(pattern: List[List[int]], max_fret: int) -> List[List[int]]:
    raised = [[fret + 12 for fret in frets] for frets in pattern]
    if all(fret <= max_fret for frets in raised for fret in frets):
        return raised
    return [list(frets) for frets in pattern]


def generate_blues_boxes(
    key_root: str,
    fretboard: Fretboard,
    include_experimental: bool = False,
    verbose: bool = False,
) -> List[BoxShapePattern]:
    """
    Blues boxes: pentatonic boxes with two or three blue notes each.

    Boxes 2 and 3 get three blue notes, one of them always on the high E
    string. The optional sixth box repeats box 1 an octave higher when that
    still fits on the neck, and is only added once all five regular boxes
    fit.
    """
    root_pc = to_pitch_class(key_root)
    intervals = require_scale_formula("blues").intervals
    pentatonic = generate_pentatonic_boxes(key_root, fretboard)
    sources = [box.pattern for box in pentatonic[:BLUES_BOX_COUNT]]
    if include_experimental and len(sources) == BLUES_BOX_COUNT:
        sources.append(_octave_above_if_fits(sources[0], fretboard.max_fret))

    boxes = []
    for index, source in enumerate(sources):
        pattern = [list(frets) for frets in source]

        all_frets = [fret for frets in pattern for fret in frets]
        candidates = select_blue_candidates(fretboard, pattern, min(all_frets), max(all_frets), root_pc)
        forced = HIGH_E_STRING if index in WIDE_BLUES_BOX_INDICES else None
        chosen = choose_blue_notes(candidates, desired_blue_note_count(index), forced)

        for candidate in chosen:
            if candidate.fret not in pattern[candidate.string]:
                pattern[candidate.string] = sorted(pattern[candidate.string] + [candidate.fret])

        shape_number = index + 1
        box = _make_pattern(
            fretboard, "blues", shape_number, key_root, root_pc, root_pc, intervals, pattern,
            label=f"{key_root} Blues (Box {shape_number})",
        )
        if verbose:
            print(f"  Box {shape_number} blue notes {box.blue_note_positions}")
        boxes.append(box)

    return boxes


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def generate_box_shape_patterns(
    key: str,
    family: str = "major",
    options: Optional[BoxShapeOptions] = None,
    verbose: bool = False,
) -> List[BoxShapePattern]:
    """
    Generate the boxes of one scale family, in shape-number order.

    Args:
        key: Key root in any spelling
        family: 'major', 'pentatonic' or 'blues'
        options: Tuning, fret ceiling and the experimental blues box flag
        verbose: Print box windows while generating

    Raises:
        UnknownNoteError: If the key is not a note name
        ValueError: If the family is unknown
    """
    options = options or BoxShapeOptions()
    family = family.strip().lower()
    if family not in VALID_BOX_FAMILIES:
        raise ValueError(f"Box family must be one of {VALID_BOX_FAMILIES}. Got: '{family}'")

    key_root = clean_note_name(key)
    fretboard = get_fretboard(tuple(options.tuning), options.max_fret)

    if verbose:
        print(f"📦 Generating {key_root} {family} boxes (max fret {options.max_fret})")

    if family == "major":
        return generate_major_boxes(key_root, fretboard, verbose)
    if family == "pentatonic":
        return generate_pentatonic_boxes(key_root, fretboard, verbose)
    return generate_blues_boxes(key_root, fretboard, options.include_experimental_blues_shape, verbose)


def get_box_scale_family_options() -> List[Dict[str, str]]:
    """Family choices for menus and CLI help."""
    return [
        {
            "value": "major",
            "label": "Major (7 modes)",
            "description": "Seven modal boxes: Ionian through Locrian",
        },
        {
            "value": "pentatonic",
            "label": "Minor Pentatonic (5 boxes)",
            "description": "Five connected pentatonic boxes",
        },
        {
            "value": "blues",
            "label": "Blues (5 boxes)",
            "description": "Minor pentatonic with blue-note targets",
        },
    ]
