"""
Test Suite - Command Line Interface

Calls main() with an argument list and checks what gets printed.

Run with: pytest tests/test_cli.py -v
"""

import json

import pytest

from fretboard_engine.app.cli import create_argument_parser, format_box_diagram, main
from fretboard_engine.boxes.shapes import generate_box_shape_patterns


def run_cli(capsys, *argv):
    main(list(argv))
    return capsys.readouterr().out


class TestArgumentParser:

    def test_defaults(self):
        args = create_argument_parser().parse_args(["boxes", "A"])
        assert args.family == "major"
        assert args.experimental_blues is False
        assert args.verbose is False
        assert args.config is None

    def test_repeatable_tone(self):
        args = create_argument_parser().parse_args(
            ["practice", "G", "E", "--tone", "flatFive", "--tone", "majorThird"]
        )
        assert args.tone == ["flatFive", "majorThird"]

    def test_bad_family_rejected(self):
        with pytest.raises(SystemExit):
            create_argument_parser().parse_args(["boxes", "A", "--family", "lydian"])


class TestCommands:

    def test_triads_pretty(self, capsys):
        out = run_cli(capsys, "triads", "G")
        assert "G MAJOR TRIADS" in out
        assert "3-2-0" in out

    def test_triads_json(self, capsys):
        data = json.loads(run_cli(capsys, "triads", "C", "--json"))
        assert data["key"] == "C"
        assert len(data["string_groups"]) == 4

    def test_triads_compact(self, capsys):
        out = run_cli(capsys, "triads", "G", "--compact")
        assert out.splitlines()[0] == "EAD: 3-2-0  7-5-5  10-10-9  15-14-12"

    def test_triads_csv(self, capsys):
        out = run_cli(capsys, "triads", "G", "--csv")
        lines = out.splitlines()
        assert lines[0].startswith("key,group,strings")
        assert len(lines) == 1 + 16

    def test_boxes_display_order_json(self, capsys):
        data = json.loads(run_cli(capsys, "boxes", "A", "--family", "pentatonic", "--display-order", "--json"))
        assert [box["shape_number"] for box in data] == [4, 5, 1, 2, 3]

    def test_experimental_blues_flag(self, capsys):
        out = run_cli(capsys, "boxes", "G", "--family", "blues", "--experimental-blues", "--compact")
        assert "G Blues (Box 6)" in out

    def test_boxes_pretty_has_legend(self, capsys):
        out = run_cli(capsys, "boxes", "C")
        assert "C Ionian (Box 1)" in out
        assert "String crossing: XXYYZZ" in out
        assert "Legend:" in out

    def test_chord_minor(self, capsys):
        out = run_cli(capsys, "chord", "F", "minor")
        assert "Fm" in out

    def test_unsupported_chord_type_exits(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["chord", "C", "maj7"])
        assert exc.value.code == 1
        assert "No triad voicings" in capsys.readouterr().out

    def test_progression(self, capsys):
        assert run_cli(capsys, "progression", "I bVII IV", "Bb", "--compact").strip() == "Bb Ab Eb"

    def test_practice_json(self, capsys):
        data = json.loads(run_cli(capsys, "practice", "G", "E", "--tone", "flatFive", "--json"))
        assert data["progressions"][0]["id"] == "blues12"
        assert data["cheat_sheet"]["entries"][0]["chord_symbol"] == "E7"

    def test_practice_pretty_lists_target_tone(self, capsys):
        out = run_cli(capsys, "practice", "G", "E", "--tone", "flatSeven")
        assert "Add b7 targets: F" in out
        assert "CHORD TONES" in out

    def test_find(self, capsys):
        out = run_cli(capsys, "find", "A", "--near", "5")
        assert "Closest to fret 5: E string, fret 5" in out

    def test_find_json(self, capsys):
        data = json.loads(run_cli(capsys, "find", "C", "--json"))
        assert [0, 8] in data["positions"]
        assert data["closest"] is None

    def test_catalog_compact(self, capsys):
        out = run_cli(capsys, "catalog", "--compact")
        assert out.startswith("Chords: major minor")
        assert "minorPentatonic" in out

    def test_export(self, capsys, tmp_path):
        run_cli(capsys, "export", "--output-dir", str(tmp_path / "tables"))
        assert (tmp_path / "tables" / "triads.csv").exists()
        assert (tmp_path / "tables" / "boxes_blues.csv").exists()


class TestErrors:

    def test_unknown_note_exits_with_status_1(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["triads", "H"])
        assert exc.value.code == 1
        assert "❌" in capsys.readouterr().out

    def test_missing_config_exits(self, capsys, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["--config", str(tmp_path / "nope.yaml"), "catalog"])
        assert exc.value.code == 1

    def test_config_is_applied(self, capsys, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("boxes:\n  include_experimental_blues_shape: true\n", encoding="utf-8")
        out = run_cli(capsys, "--config", str(path), "boxes", "A", "--family", "blues", "--compact")
        assert "A Blues (Box 6)" in out

    def test_no_command(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 1


class TestBoxDiagram:

    def test_high_e_on_top_with_markers(self):
        box = generate_box_shape_patterns("E", "blues")[0]
        rows = format_box_diagram(box)
        assert rows[1].strip().startswith("e |")
        assert rows[-1].strip().startswith("E |")
        assert "b" in "".join(rows)
        assert "R" in "".join(rows)
