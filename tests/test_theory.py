"""
Test Suite - Pitch, Fretboard and Formula Catalog

Run with: pytest tests/test_theory.py -v
"""

import numpy as np
import pytest
from pydantic import ValidationError

from fretboard_engine.errors import (
    FretboardError,
    InvalidIntervalError,
    NoteNotOnFretboardError,
    UnknownFormulaError,
    UnknownNoteError,
)
from fretboard_engine.theory.catalog import (
    CHORD_FORMULA_CATALOG,
    get_chord_formula_definition,
    get_scale_formula_definition,
    interval_token_to_semitones,
    list_scale_formula_ids,
    require_chord_formula,
    require_scale_formula,
)
from fretboard_engine.theory.chords import (
    build_chord,
    get_chord_name,
    get_chord_notes,
    is_valid_chord_voicing,
    transform_chord_type,
)
from fretboard_engine.theory.fretboard import STANDARD_TUNING, Fretboard, build_fretboard, get_fretboard
from fretboard_engine.theory.pitch import (
    CHROMATIC_SCALE,
    normalize_major_key_name,
    normalize_note,
    parent_major,
    relative_major,
    relative_minor,
    to_display_name,
    to_pitch_class,
)


# =============================================================================
# PITCH
# =============================================================================

class TestPitch:
    """Note names and pitch classes."""

    def test_chromatic_scale(self):
        assert [to_pitch_class(n) for n in CHROMATIC_SCALE] == list(range(12))

    @pytest.mark.parametrize("name,expected", [
        ("Bb", "A#"),
        ("bb", "A#"),
        ("B♭", "A#"),
        ("C♯", "C#"),
        (" g ", "G"),
        ("Cb", "B"),
        ("E#", "F"),
    ])
    def test_normalize_note(self, name, expected):
        assert normalize_note(name) == expected

    @pytest.mark.parametrize("bad", ["H", "", "C##", "Xb"])
    def test_unknown_notes_raise(self, bad):
        with pytest.raises(UnknownNoteError):
            to_pitch_class(bad)

    def test_unknown_note_is_a_value_error(self):
        with pytest.raises(ValueError):
            normalize_note("Q")
        assert issubclass(UnknownNoteError, FretboardError)

    def test_display_spelling_follows_key(self):
        assert to_display_name(10) == "A#"
        assert to_display_name(10, "F") == "Bb"
        assert to_display_name(10, "A#") == "A#"
        assert to_display_name(1, "Db") == "Db"

    @pytest.mark.parametrize("key,expected", [
        ("C#", "Db"),
        ("D#", "Eb"),
        ("A#", "Bb"),
        ("F#", "F#"),
        ("Gb", "F#"),
        ("Cb", "B"),
        ("G", "G"),
    ])
    def test_normalize_major_key_name(self, key, expected):
        assert normalize_major_key_name(key) == expected

    def test_relative_keys(self):
        assert relative_minor("G") == "E"
        assert relative_minor("C") == "A"
        assert relative_minor("Db") == "Bb"
        assert relative_major("E") == "G"
        assert relative_major("Bb") == "Db"

    def test_parent_major(self):
        assert parent_major("Dorian", "A") == "G"
        assert parent_major("aeolian", "E") == "G"
        assert parent_major("Mixolydian", "D") == "G"

    def test_parent_major_rejects_unknown_mode(self):
        with pytest.raises(ValueError):
            parent_major("Bebop", "C")


# =============================================================================
# FRETBOARD
# =============================================================================

class TestFretboard:
    """The (string, fret) to pitch-class grid."""

    def test_grid_shape_and_values(self):
        board = Fretboard(max_fret=20)
        assert board.grid.shape == (6, 21)
        assert board.string_count == 6
        assert list(board.grid[:, 0]) == list(STANDARD_TUNING)
        assert board.grid[0, 12] == board.grid[0, 0]

    def test_grid_is_read_only(self):
        board = Fretboard()
        with pytest.raises(ValueError):
            board.grid[0, 0] = 3

    def test_pitch_class_at(self):
        board = Fretboard()
        assert board.pitch_class_at(0, 3) == to_pitch_class("G")
        assert board.pitch_class_at(4, 1) == to_pitch_class("C")
        assert board.pitch_class_at(5, 0) == to_pitch_class("E")

    def test_frets_for_pitch_class(self):
        board = Fretboard(max_fret=24)
        assert board.frets_for_pitch_class(0, to_pitch_class("A")) == [5, 17]
        assert board.frets_for_pitch_class(0, to_pitch_class("E")) == [0, 12, 24]
        assert board.frets_for_pitch_class(0, to_pitch_class("A"), lowest=6) == [17]
        assert board.frets_for_pitch_class(0, to_pitch_class("A"), highest=10) == [5]

    def test_positions_of_every_string(self):
        board = Fretboard(max_fret=11)
        positions = board.positions_of(to_pitch_class("C"))
        assert len(positions) == 6
        assert [p.string for p in positions] == [0, 1, 2, 3, 4, 5]
        assert all(board.pitch_class_at(p.string, p.fret) == 0 for p in positions)

    def test_find_fret_on_string(self):
        board = Fretboard(max_fret=20)
        assert board.find_fret_on_string(1, to_pitch_class("C")) == 3
        assert board.find_fret_on_string(1, to_pitch_class("C"), lowest=4) == 15

    def test_find_fret_past_the_neck_raises(self):
        board = Fretboard(max_fret=12)
        with pytest.raises(NoteNotOnFretboardError):
            board.find_fret_on_string(1, to_pitch_class("C"), lowest=4)

    def test_find_best_position(self):
        board = Fretboard(max_fret=20)
        # A sits at fret 5 on both E strings; the lower string wins
        position = board.find_best_position("A", 5)
        assert (position.string, position.fret) == (0, 5)

        position = board.find_best_position("D", 7)
        assert (position.string, position.fret) == (3, 7)

    def test_find_best_position_missing_note(self):
        board = Fretboard(tuning=(4,), max_fret=0)
        with pytest.raises(NoteNotOnFretboardError):
            board.find_best_position("C", 0)

    def test_custom_tuning(self):
        drop_d = build_fretboard((2, 9, 2, 7, 11, 4), 12)
        assert drop_d.pitch_class_at(0, 0) == to_pitch_class("D")
        assert drop_d.tuning == (2, 9, 2, 7, 11, 4)

    def test_shared_instances(self):
        assert get_fretboard(STANDARD_TUNING, 20) is get_fretboard(STANDARD_TUNING, 20)

    def test_negative_max_fret_rejected(self):
        with pytest.raises(ValueError):
            Fretboard(max_fret=-1)

    def test_grid_matches_pitch_class_at(self):
        board = Fretboard(max_fret=15)
        expected = np.array([[board.pitch_class_at(s, f) for f in range(16)] for s in range(6)])
        assert np.array_equal(board.grid, expected)


# =============================================================================
# CATALOG
# =============================================================================

class TestIntervalTokens:

    @pytest.mark.parametrize("token,semitones", [
        ("1P", 0), ("2m", 1), ("3m", 3), ("3M", 4), ("4A", 6), ("5d", 6),
        ("5P", 7), ("5A", 8), ("7d", 9), ("7m", 10), ("9M", 14), ("11P", 17), ("13M", 21),
    ])
    def test_tokens(self, token, semitones):
        assert interval_token_to_semitones(token) == semitones

    @pytest.mark.parametrize("bad", ["3P", "5M", "5m", "0P", "x", "", "3X"])
    def test_invalid_tokens(self, bad):
        with pytest.raises(InvalidIntervalError):
            interval_token_to_semitones(bad)


class TestFormulaCatalog:
    """Chord and scale lookups by id, symbol and alias."""

    def test_every_chord_has_root_first(self):
        for formula in CHORD_FORMULA_CATALOG.values():
            assert formula.intervals[0] == 0
            assert len(formula.intervals) == len(formula.interval_tokens)

    @pytest.mark.parametrize("alias,formula_id", [
        ("dom", "7"),
        ("mM7", "mMaj7"),
        ("half-diminished", "m7b5"),
        ("m7", "min7"),
        ("M7", "maj7"),
        ("min", "minor"),
        ("o7", "dim7"),
    ])
    def test_aliases(self, alias, formula_id):
        assert get_chord_formula_definition(alias).id == formula_id

    def test_case_fold_fallback(self):
        assert get_chord_formula_definition("HALFDIM").id == "m7b5"
        assert get_chord_formula_definition("DOM7B5").id == "7b5"

    def test_unicode_accidentals_in_symbols(self):
        assert get_chord_formula_definition("7♭5").id == "7b5"
        assert get_chord_formula_definition("7♯5").id == "7#5"

    def test_chord_intervals(self):
        assert get_chord_formula_definition("13").intervals == (0, 4, 7, 10, 14, 21)
        assert get_chord_formula_definition("dim7").intervals == (0, 3, 6, 9)
        assert get_chord_formula_definition("11").intervals == (0, 7, 10, 14, 17)

    def test_scales(self):
        assert get_scale_formula_definition("minorPenta").intervals == (0, 3, 5, 7, 10)
        assert get_scale_formula_definition("ionian").id == "major"
        assert get_scale_formula_definition("blues").intervals == (0, 3, 5, 6, 7, 10)
        assert "locrian" in list_scale_formula_ids()

    def test_missing_formulas(self):
        assert get_chord_formula_definition("nonsense") is None
        assert get_scale_formula_definition("nonsense") is None
        with pytest.raises(UnknownFormulaError):
            require_chord_formula("nonsense")
        with pytest.raises(UnknownFormulaError):
            require_scale_formula("nonsense")

    def test_definitions_are_frozen(self):
        formula = get_chord_formula_definition("major")
        with pytest.raises(ValidationError):
            formula.name = "Changed"


# =============================================================================
# CHORDS
# =============================================================================

class TestChords:

    @pytest.mark.parametrize("chord_type,expected", [
        ("7b5", [0, 4, 6, 10]),
        ("7#5", [0, 4, 8, 10]),
        ("mMaj7", [0, 3, 7, 11]),
        ("dim", [0, 3, 6]),
        ("aug", [0, 4, 8]),
    ])
    def test_build_chord_on_c(self, chord_type, expected):
        assert build_chord("C", chord_type) == expected

    def test_chord_notes_and_names(self):
        assert get_chord_notes("Bb", "major") == ["Bb", "D", "F"]
        assert get_chord_notes("E", "7") == ["E", "G#", "B", "D"]
        assert get_chord_name("A", "minor") == "Am"
        assert get_chord_name("bb", "maj7") == "Bbmaj7"

    def test_valid_voicing(self):
        assert is_valid_chord_voicing([7, 11, 14], [7, 11, 2])
        assert not is_valid_chord_voicing([7, 11], [7, 11, 2])
        assert not is_valid_chord_voicing([7, 11, 2, 5], [7, 11, 2])

    def test_transform_to_minor(self):
        board = Fretboard(max_fret=20)
        # C on D string, E on G string, G on B string
        assert transform_chord_type([10, 9, 8], (2, 3, 4), "C", "minor", board) == [10, 8, 8]
        assert transform_chord_type([10, 9, 8], (2, 3, 4), "C", "major", board) == [10, 9, 8]
        assert transform_chord_type([10, 9, 8], (2, 3, 4), "C", "dim", board) is None

    def test_transform_open_third_gives_none(self):
        board = Fretboard(max_fret=20)
        # G# at fret 1 of the G string can drop to the open G
        assert transform_chord_type([2, 2, 1], (1, 2, 3), "E", "minor", board) == [2, 2, 0]
        # B string open is B, the third of G major; it cannot be lowered
        assert transform_chord_type([0, 0, 3], (3, 4, 5), "G", "minor", board) is None
