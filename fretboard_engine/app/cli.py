"""
Command Line Interface for the Fretboard Engine
===============================================

Prints triad positions, scale boxes, chord voicings and rendered
progressions in the terminal.

Usage Examples:
    # Four major triad positions on every string group
    fretboard-gen triads G

    # Blues boxes including the experimental 6th box, in neck order
    fretboard-gen boxes E --family blues --experimental-blues --display-order

    # Minor triads derived from the F major table
    fretboard-gen chord F minor

    # Roman numerals to chord names
    fretboard-gen progression "I7 IV7 V7" E

    # Practice progressions for a minor pentatonic context with a b5 target
    fretboard-gen practice G E --tone flatFive

    # Every chord and scale formula
    fretboard-gen catalog

    # Precompute all keys and write CSV tables
    fretboard-gen export --output-dir tables/

    # JSON output for scripting
    fretboard-gen boxes A --family pentatonic --json
"""

import argparse
import json
import sys
from typing import Dict, List, Optional

from pydantic import ValidationError

from fretboard_engine import __version__
from fretboard_engine.boxes.display import get_display_ordered_box_patterns
from fretboard_engine.boxes.shapes import generate_box_shape_patterns, get_box_scale_family_options
from fretboard_engine.data.config import EngineConfig, load_config
from fretboard_engine.data.schema import (
    VALID_BOX_FAMILIES,
    VALID_HEXATONIC_MODES,
    VALID_TONAL_CENTER_MODES,
    BoxShapePattern,
    ChordData,
    ProgressionContext,
    TriadsData,
)
from fretboard_engine.data.tables import boxes_to_dataframe, export_tables, triads_to_dataframe
from fretboard_engine.errors import FretboardError
from fretboard_engine.progressions.recommendations import (
    TARGET_TONES,
    get_chord_cheat_sheet_data,
    get_practice_progressions,
    get_target_tone_note_name,
)
from fretboard_engine.progressions.renderer import render_roman_progression_to_chords
from fretboard_engine.theory.catalog import CHORD_FORMULA_CATALOG, SCALE_FORMULA_CATALOG
from fretboard_engine.theory.fretboard import STRING_NAMES, build_fretboard
from fretboard_engine.theory.pitch import clean_note_name, to_pitch_class
from fretboard_engine.triads.engine import generate_chord_data, generate_triads_data


WIDTH = 73


# =============================================================================
# PART 1: ARGUMENT PARSER SETUP
# =============================================================================
#
# One subcommand per engine operation. Output flags are shared: --json prints
# JSON, --compact prints a short plain-text summary.
# Without either flag the result is drawn in a box.
#

def _add_output_flags(parser: argparse.ArgumentParser, csv: bool = False):
    parser.add_argument("--json", action="store_true", help="Output result as JSON")
    parser.add_argument("--compact", action="store_true", help="Show minimal output")
    if csv:
        parser.add_argument("--csv", action="store_true", help="Output result as CSV rows")


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command-line argument parser.

    Returns:
        Configured ArgumentParser object
    """
    parser = argparse.ArgumentParser(
        prog="fretboard-gen",
        description="""
🎸 Fretboard Engine - Triad positions, scale boxes and progressions
for 6-string guitar.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show search and generation details",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML file overriding the default options",
    )

    subparsers = parser.add_subparsers(dest="command")

    # ─────────────────────────────────────────────────────────────────────────
    # triads KEY
    # ─────────────────────────────────────────────────────────────────────────
    triads = subparsers.add_parser("triads", help="Four major triad positions per string group")
    triads.add_argument("key", help="Root note, e.g. G, Bb, C#")
    _add_output_flags(triads, csv=True)

    # ─────────────────────────────────────────────────────────────────────────
    # boxes KEY
    # ─────────────────────────────────────────────────────────────────────────
    boxes = subparsers.add_parser("boxes", help="Scale boxes for a key")
    boxes.add_argument("key", help="Key root, e.g. A, E, Eb")
    boxes.add_argument(
        "--family",
        choices=VALID_BOX_FAMILIES,
        default="major",
        help="Scale family (default: major)",
    )
    boxes.add_argument(
        "--experimental-blues",
        action="store_true",
        help="Add the 6th blues box one octave above box 1",
    )
    boxes.add_argument(
        "--display-order",
        action="store_true",
        help="Show boxes in left-to-right neck order",
    )
    _add_output_flags(boxes, csv=True)

    # ─────────────────────────────────────────────────────────────────────────
    # chord ROOT [TYPE]
    # ─────────────────────────────────────────────────────────────────────────
    chord = subparsers.add_parser("chord", help="Triad voicings for a chord type")
    chord.add_argument("root", help="Chord root")
    chord.add_argument("chord_type", nargs="?", default="major", help="major or minor (default: major)")
    _add_output_flags(chord)

    # ─────────────────────────────────────────────────────────────────────────
    # progression NUMERALS KEY
    # ─────────────────────────────────────────────────────────────────────────
    progression = subparsers.add_parser("progression", help="Render roman numerals to chord names")
    progression.add_argument("numerals", help='Progression such as "I7 IV7 | V7 I7"')
    progression.add_argument("key", help="Tonic key")
    _add_output_flags(progression)

    # ─────────────────────────────────────────────────────────────────────────
    # practice MAJOR_KEY MINOR_KEY
    # ─────────────────────────────────────────────────────────────────────────
    practice = subparsers.add_parser("practice", help="Recommended practice progressions")
    practice.add_argument("major_key", help="Major centre, e.g. G")
    practice.add_argument("minor_key", help="Relative minor centre, e.g. E")
    practice.add_argument("--mode", choices=VALID_TONAL_CENTER_MODES, default="minor")
    practice.add_argument("--family", choices=VALID_BOX_FAMILIES, default="pentatonic")
    practice.add_argument("--hexatonic", choices=VALID_HEXATONIC_MODES, default="off")
    practice.add_argument(
        "--tone",
        action="append",
        default=[],
        choices=list(TARGET_TONES),
        help="Active target tone (repeatable)",
    )
    _add_output_flags(practice)

    # ─────────────────────────────────────────────────────────────────────────
    # find NOTE
    # ─────────────────────────────────────────────────────────────────────────
    find = subparsers.add_parser("find", help="Where a note sits on the neck")
    find.add_argument("note", help="Note name")
    find.add_argument("--near", type=int, default=None, help="Also show the position closest to this fret")
    _add_output_flags(find)

    # ─────────────────────────────────────────────────────────────────────────
    # catalog / export
    # ─────────────────────────────────────────────────────────────────────────
    catalog = subparsers.add_parser("catalog", help="List chord and scale formulas")
    _add_output_flags(catalog)

    export = subparsers.add_parser("export", help="Precompute all keys and write CSV tables")
    export.add_argument("--output-dir", default="tables", help="Directory for the CSV files")

    return parser


# =============================================================================
# PART 2: OUTPUT FORMATTING FUNCTIONS
# =============================================================================
#
# Box diagrams are drawn high E on top, the way tab and chord charts read.
# R marks a shape root and b marks a blue note.
#

def _box_top(title: str) -> List[str]:
    return [
        "┌" + "─" * WIDTH + "┐",
        "│" + f" {title} ".center(WIDTH) + "│",
        "├" + "─" * WIDTH + "┤",
    ]


def _box_line(text: str) -> str:
    return "│  " + text.ljust(WIDTH - 2) + "│"


def _box_bottom() -> str:
    return "└" + "─" * WIDTH + "┘"


def _frets(frets) -> str:
    return "-".join(str(f) for f in frets)


def format_triads_pretty(data: TriadsData) -> str:
    lines = []
    title = f"{data.key} MAJOR TRIADS  ({' '.join(data.triad_notes)})"
    lines.extend(_box_top(title))
    for group in data.string_groups:
        lines.append(_box_line(f"Strings {''.join(group.string_names)}"))
        for voicing in group.voicings:
            lines.append(_box_line(
                f"  Pos {voicing.position}: {_frets(voicing.frets):<10}"
                f"{' '.join(voicing.note_names):<10}{voicing.inversion:<8}"
                f"avg {voicing.avg_fret:.2f}"
            ))
    lines.append(_box_bottom())
    return "\n".join(lines)


def format_chord_pretty(data: ChordData) -> str:
    lines = []
    lines.extend(_box_top(f"{data.chord_name}  ({' '.join(data.chord_notes)})"))
    for group in data.string_groups:
        lines.append(_box_line(f"Strings {''.join(group.string_names)}"))
        for voicing in group.voicings:
            lines.append(_box_line(
                f"  Pos {voicing.position}: {_frets(voicing.frets):<10}{voicing.inversion}"
            ))
    lines.append(_box_bottom())
    return "\n".join(lines)


def format_box_diagram(pattern: BoxShapePattern) -> List[str]:
    """
    One box as a fret grid, high E on top:

        e |  5  .  7  8
        B |  5  .  .  8
    """
    all_frets = pattern.all_frets()
    frets = range(min(pattern.window_start, min(all_frets)), max(pattern.window_end, max(all_frets)) + 1)
    roots = set(pattern.root_positions)
    blues = set(pattern.blue_note_positions)

    lines = ["     " + "".join(f"{f:>4}" for f in frets)]
    for string in reversed(range(len(pattern.pattern))):
        name = STRING_NAMES[string].lower() if string == len(pattern.pattern) - 1 else STRING_NAMES[string]
        cells = []
        for fret in frets:
            if (string, fret) in blues:
                cells.append("b")
            elif fret not in pattern.pattern[string]:
                cells.append(".")
            elif (string, fret) in roots:
                cells.append("R")
            else:
                cells.append("o")
        lines.append(f"  {name} |" + "".join(f"{c:>4}" for c in cells))
    return lines


def format_boxes_pretty(patterns: List[BoxShapePattern]) -> str:
    lines = []
    for pattern in patterns:
        title = f"{pattern.label}  frets {pattern.window_start}-{pattern.window_end}"
        lines.extend(_box_top(title))
        if pattern.string_crossing:
            lines.append(_box_line(f"String crossing: {pattern.string_crossing}"))
        for row in format_box_diagram(pattern):
            lines.append(_box_line(row))
        lines.append(_box_bottom())
    lines.append("Legend: R = root, o = scale tone, b = blue note")
    return "\n".join(lines)


def format_boxes_compact(patterns: List[BoxShapePattern]) -> str:
    return "\n".join(
        f"{p.label}: " + " | ".join(_frets(frets) for frets in p.pattern)
        for p in patterns
    )


def format_catalog_pretty() -> str:
    lines = []
    lines.extend(_box_top("CHORD FORMULAS"))
    for formula in CHORD_FORMULA_CATALOG.values():
        lines.append(_box_line(
            f"{formula.id:<8}{formula.name:<22}{' '.join(formula.interval_tokens)}"
        ))
    lines.append(_box_bottom())
    lines.extend(_box_top("SCALE FORMULAS"))
    for formula in SCALE_FORMULA_CATALOG.values():
        lines.append(_box_line(
            f"{formula.id:<16}{formula.name:<18}{' '.join(formula.interval_tokens)}"
        ))
    lines.append(_box_bottom())
    return "\n".join(lines)


def format_json(payload) -> str:
    return json.dumps(payload, indent=2)


# =============================================================================
# PART 3: COMMAND HANDLERS
# =============================================================================
#
# Each run_* function takes the parsed args plus the loaded EngineConfig and
# prints its result. Exceptions are left to main().
#

def run_triads(args, config: EngineConfig):
    data = generate_triads_data(args.key, config.triads, verbose=args.verbose)

    if args.json:
        print(format_json(data.model_dump(mode="json")))
    elif args.csv:
        print(triads_to_dataframe({data.key: data}).to_csv(index=False), end="")
    elif args.compact:
        for group in data.string_groups:
            print(f"{''.join(group.string_names)}: " + "  ".join(_frets(v.frets) for v in group.voicings))
    else:
        print(format_triads_pretty(data))


def run_boxes(args, config: EngineConfig):
    options = config.boxes
    if args.experimental_blues:
        options = options.model_copy(update={"include_experimental_blues_shape": True})

    patterns = generate_box_shape_patterns(args.key, args.family, options, verbose=args.verbose)
    if args.display_order:
        patterns = get_display_ordered_box_patterns(patterns, args.family)

    if args.json:
        print(format_json([p.model_dump(mode="json") for p in patterns]))
    elif args.csv:
        print(boxes_to_dataframe({clean_note_name(args.key): patterns}).to_csv(index=False), end="")
    elif args.compact:
        print(format_boxes_compact(patterns))
    else:
        print(format_boxes_pretty(patterns))


def run_chord(args, config: EngineConfig):
    data = generate_chord_data(args.root, args.chord_type, config.triads)
    if data is None:
        print(f"⚠️  No triad voicings for {args.root} {args.chord_type}")
        sys.exit(1)

    if args.json:
        print(format_json(data.model_dump(mode="json")))
    elif args.compact:
        for group in data.string_groups:
            print(f"{''.join(group.string_names)}: " + "  ".join(_frets(v.frets) for v in group.voicings))
    else:
        print(format_chord_pretty(data))


def run_progression(args, config: EngineConfig):
    rendered = render_roman_progression_to_chords(args.numerals, args.key)

    if args.json:
        print(format_json({"key": args.key, "roman_numerals": args.numerals, "chord_names": rendered}))
    elif args.compact:
        print(rendered)
    else:
        lines = _box_top(f"{args.key}: {args.numerals}")
        lines.append("│" + rendered.center(WIDTH) + "│")
        lines.append(_box_bottom())
        print("\n".join(lines))


def run_practice(args, config: EngineConfig):
    context = ProgressionContext(
        tonal_center_mode=args.mode,
        scale_family=args.family,
        major_center_key=args.major_key,
        minor_center_key=args.minor_key,
        hexatonic_mode=args.hexatonic,
        active_target_tones=args.tone,
    )
    progressions = get_practice_progressions(context)
    cheat_sheet = get_chord_cheat_sheet_data(progressions)

    if args.json:
        print(format_json({
            "progressions": [p.model_dump(mode="json") for p in progressions],
            "cheat_sheet": cheat_sheet.model_dump(mode="json"),
        }))
        return
    if args.compact:
        for progression in progressions:
            print(f"{progression.title}: {progression.chord_names}")
        return

    lines = _box_top("PRACTICE PROGRESSIONS")
    for progression in progressions:
        lines.append(_box_line(f"{progression.title} ({progression.roman_numerals})"))
        lines.append(_box_line(f"  {progression.chord_names}"))
        lines.append(_box_line(f"  {progression.why_it_fits}"))
    lines.append(_box_bottom())

    lines.extend(_box_top("CHORD TONES"))
    for entry in cheat_sheet.entries:
        lines.append(_box_line(f"{entry.chord_symbol:<8}{' '.join(entry.notes)}"))
    lines.append(_box_line(f"All notes: {' '.join(cheat_sheet.unique_notes)}"))
    for tone_id in args.tone:
        note = get_target_tone_note_name(tone_id, args.major_key, args.minor_key)
        lines.append(_box_line(f"{TARGET_TONES[tone_id].label}: {note}"))
    lines.append(_box_bottom())
    print("\n".join(lines))


def run_find(args, config: EngineConfig):
    fretboard = build_fretboard(config.triads.tuning, config.fretboard_max_fret)
    positions = fretboard.positions_of(to_pitch_class(args.note))
    best = fretboard.find_best_position(args.note, args.near) if args.near is not None else None

    if args.json:
        print(format_json({
            "note": clean_note_name(args.note),
            "positions": [[p.string, p.fret] for p in positions],
            "closest": [best.string, best.fret] if best else None,
        }))
        return

    by_string: Dict[int, List[int]] = {}
    for position in positions:
        by_string.setdefault(position.string, []).append(position.fret)

    for string in reversed(range(fretboard.string_count)):
        frets = " ".join(str(f) for f in by_string.get(string, []))
        print(f"{STRING_NAMES[string]} string: {frets}")
    if best:
        print(f"Closest to fret {args.near}: {STRING_NAMES[best.string]} string, fret {best.fret}")


def run_catalog(args, config: EngineConfig):
    if args.json:
        print(format_json({
            "chords": [f.model_dump(mode="json") for f in CHORD_FORMULA_CATALOG.values()],
            "scales": [f.model_dump(mode="json") for f in SCALE_FORMULA_CATALOG.values()],
            "box_families": get_box_scale_family_options(),
        }))
    elif args.compact:
        print("Chords: " + " ".join(CHORD_FORMULA_CATALOG))
        print("Scales: " + " ".join(SCALE_FORMULA_CATALOG))
    else:
        print(format_catalog_pretty())


def run_export(args, config: EngineConfig):
    print(f"📦 Exporting tables to {args.output_dir}")
    export_tables(args.output_dir, config, progress=True, verbose=True)


COMMANDS = {
    "triads": run_triads,
    "boxes": run_boxes,
    "chord": run_chord,
    "progression": run_progression,
    "practice": run_practice,
    "find": run_find,
    "catalog": run_catalog,
    "export": run_export,
}


# =============================================================================
# PART 4: MAIN ENTRY POINT
# =============================================================================
#
# main() takes an argv list so tests can call it directly. Every expected
# failure becomes a ❌ line and exit status 1.
#

def main(argv: Optional[List[str]] = None):
    """
    Main entry point for the CLI.

    Parses arguments, loads the configuration and dispatches to the
    command handler. Lookup and validation errors exit with status 1.
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        print("\n⚠️  Please choose a command")
        sys.exit(1)

    try:
        config = load_config(args.config)
        COMMANDS[args.command](args, config)
    except (FretboardError, ValidationError) as e:
        print(f"\n❌ {e}")
        sys.exit(1)
    except (FileNotFoundError, ValueError) as e:
        print(f"\n❌ {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
