"""
Test Suite - Box Shape Generator

Covers the seven modal boxes, the five pentatonic boxes, blue-note
placement, the string-crossing window and display ordering.

Run with: pytest tests/test_boxes.py -v
"""

import random

import pytest
from pydantic import ValidationError

from fretboard_engine.boxes.blues import (
    BlueNoteCandidate,
    choose_blue_notes,
    desired_blue_note_count,
    score_blue_fret,
)
from fretboard_engine.boxes.display import (
    get_display_ordered_box_patterns,
    is_neck_ascending,
    transpose_down_octave,
)
from fretboard_engine.boxes.shapes import (
    choose_frets_for_display,
    generate_box_shape_patterns,
    get_box_scale_family_options,
)
from fretboard_engine.boxes.xyz import get_xyz_display_string, plan_xyz_positions, xyz_window_for_mode
from fretboard_engine.data.config import BoxShapeOptions
from fretboard_engine.data.schema import BoxShapePattern
from fretboard_engine.errors import UnknownNoteError
from fretboard_engine.theory.fretboard import STANDARD_TUNING
from fretboard_engine.theory.pitch import CHROMATIC_SCALE, MODE_NAMES, to_pitch_class


def pitch_class_at(string: int, fret: int) -> int:
    return (STANDARD_TUNING[string] + fret) % 12


EXPERIMENTAL = BoxShapeOptions(include_experimental_blues_shape=True)


class TestStringCrossingWindow:
    """The XXXYYZZ pattern behind the modal boxes."""

    def test_windows_for_modes(self):
        assert get_xyz_display_string("Ionian") == "XXYYZZ"
        assert get_xyz_display_string("Mixolydian") == "XXXYYZ"
        assert xyz_window_for_mode("dorian") == ["Z", "X", "X", "X", "Y", "Y"]

    def test_every_mode_has_six_cells(self):
        for mode in MODE_NAMES:
            assert len(xyz_window_for_mode(mode)) == 6

    def test_plan_shifts_at_g_to_b_crossing(self):
        plan = plan_xyz_positions("Mixolydian", 0, 3)
        assert [p.string for p in plan] == [0, 1, 2, 3, 4, 5]
        assert plan[0].fret == 3
        # Stepping from G to B moves the hand up a fret
        assert plan[4].fret == plan[3].fret + 1

    def test_ionian_plan_follows_g_box_1(self):
        plan = plan_xyz_positions("Ionian", 0, 3)
        assert [p.fret for p in plan] == [3, 3, 4, 4, 5, 5]

    def test_plan_from_middle_string(self):
        plan = plan_xyz_positions("Ionian", 3, 4)
        assert [p.fret for p in plan] == [3, 3, 4, 4, 5, 5]

    def test_plan_rejects_bad_string(self):
        with pytest.raises(ValueError):
            plan_xyz_positions("Ionian", 6, 0)

    def test_unknown_mode_raises(self):
        with pytest.raises(ValueError):
            xyz_window_for_mode("Hypolydian")


class TestMajorBoxes:
    """Seven modal boxes for a major key."""

    def test_c_major_has_seven_modes_in_order(self):
        patterns = generate_box_shape_patterns("C", "major")
        assert len(patterns) == 7
        assert [p.mode_name for p in patterns] == MODE_NAMES
        assert [p.shape_number for p in patterns] == list(range(1, 8))
        for pattern in patterns:
            assert len(pattern.pattern) == 6
            assert all(len(frets) in (2, 3) for frets in pattern.pattern)

    def test_two_note_string_per_box(self):
        two_note_string_by_box = [4, 3, 3, 4, 4, 4, 4]
        for pattern, two_note_string in zip(generate_box_shape_patterns("G", "major"), two_note_string_by_box):
            for string, frets in enumerate(pattern.pattern):
                assert len(frets) == (2 if string == two_note_string else 3)

    def test_windows_step_by_two_frets(self):
        starts = [p.window_start for p in generate_box_shape_patterns("G", "major")]
        assert starts == [3, 5, 7, 9, 11, 13, 15]

    @pytest.mark.parametrize("key", ["C", "D", "F#", "Bb"])
    def test_windows_step_by_two_in_any_key(self, key):
        starts = [p.window_start for p in generate_box_shape_patterns(key, "major")]
        assert all(b - a == 2 for a, b in zip(starts, starts[1:]))

    def test_g_ionian_box_1(self):
        box1 = generate_box_shape_patterns("G", "major")[0]
        assert box1.pattern == [[3, 5, 7], [3, 5, 7], [4, 5, 7], [4, 5, 7], [5, 7], [3, 5, 7]]
        assert box1.label == "G Ionian (Box 1)"

    def test_g_on_high_e_but_not_b_in_box_1(self):
        box1 = generate_box_shape_patterns("G", "major")[0]
        g = to_pitch_class("G")
        assert not any(pitch_class_at(4, f) == g for f in box1.pattern[4])
        assert any(pitch_class_at(5, f) == g for f in box1.pattern[5])

    def test_a_dorian_box_2_low_e_notes(self):
        box2 = generate_box_shape_patterns("G", "major")[1]
        assert {pitch_class_at(0, f) for f in box2.pattern[0]} == {9, 11, 0}

    def test_low_e_carries_forward_two_frets(self):
        patterns = generate_box_shape_patterns("G", "major")
        for previous, current in zip(patterns, patterns[1:]):
            assert current.pattern[0][:2] == previous.pattern[0][1:]

    def test_c_lydian_box_4(self):
        box4 = generate_box_shape_patterns("G", "major")[3]
        assert box4.pattern[0] == [8, 10, 12]
        assert [pitch_class_at(2, f) for f in box4.pattern[2]] == [11, 0, 2]
        assert [pitch_class_at(3, f) for f in box4.pattern[3]] == [4, 6, 7]

    def test_high_e_mirrors_low_e(self):
        for box in generate_box_shape_patterns("G", "major"):
            assert box.pattern[5] == box.pattern[0]

    @pytest.mark.parametrize("key", CHROMATIC_SCALE)
    def test_late_boxes_stay_out_of_open_position(self, key):
        late = [box for box in generate_box_shape_patterns(key, "major") if box.shape_number >= 6]
        assert len(late) == 2
        for box in late:
            assert min(box.all_frets()) >= 12

    @pytest.mark.parametrize("key", CHROMATIC_SCALE)
    def test_every_box_fits_one_hand_position(self, key):
        patterns = generate_box_shape_patterns(key, "major")
        assert len(patterns) == 7
        for box in patterns:
            frets = box.all_frets()
            assert max(frets) - min(frets) <= 5
            assert box.window_start - 1 <= min(frets)
            assert max(frets) <= box.window_start + 5

    def test_low_keys_start_an_octave_up(self):
        assert generate_box_shape_patterns("E", "major")[0].pattern[0] == [12, 14, 16]
        assert generate_box_shape_patterns("F#", "major")[0].pattern[0] == [14, 16, 18]
        assert generate_box_shape_patterns("G", "major")[0].pattern[0] == [3, 5, 7]

    def test_e_mixolydian_box_5(self):
        box5 = generate_box_shape_patterns("E", "major")[4]
        assert box5.pattern == [
            [19, 21, 23], [19, 21, 23], [19, 21, 23], [20, 21, 23], [21, 22], [19, 21, 23],
        ]
        assert box5.window_start == 20

    def test_short_neck_drops_boxes_that_do_not_fit(self):
        patterns = generate_box_shape_patterns("G", "major", BoxShapeOptions(max_fret=12))
        assert [p.shape_number for p in patterns] == [1, 2, 3, 4]
        assert patterns[3].pattern[0] == [8, 10, 12]

    def test_every_note_is_in_the_key(self):
        scale = {(to_pitch_class("D") + i) % 12 for i in (0, 2, 4, 5, 7, 9, 11)}
        for box in generate_box_shape_patterns("D", "major"):
            for string, frets in enumerate(box.pattern):
                assert {pitch_class_at(string, f) for f in frets} <= scale

    def test_root_positions_use_shape_root(self):
        for pattern in generate_box_shape_patterns("D", "major"):
            assert pattern.root_positions
            for string, fret in pattern.root_positions:
                assert pitch_class_at(string, fret) == pattern.shape_root_pitch_class

    def test_flat_key_labels(self):
        labels = [p.label for p in generate_box_shape_patterns("Eb", "major")]
        assert labels[0] == "Eb Ionian (Box 1)"
        assert labels[1] == "F Dorian (Box 2)"

    def test_string_crossing_recorded(self):
        patterns = generate_box_shape_patterns("C", "major")
        assert patterns[0].string_crossing == "XXYYZZ"
        assert patterns[4].string_crossing == "XXXYYZ"


class TestPentatonicBoxes:
    """Five connected minor pentatonic boxes."""

    def test_a_pentatonic_two_frets_per_string(self):
        patterns = generate_box_shape_patterns("A", "pentatonic")
        assert len(patterns) == 5
        for pattern in patterns:
            assert all(len(frets) == 2 for frets in pattern.pattern)

    def test_a_pentatonic_box_1(self):
        box1 = generate_box_shape_patterns("A", "pentatonic")[0]
        assert box1.pattern == [[5, 8], [5, 7], [5, 7], [5, 7], [5, 8], [5, 8]]

    def test_e_pentatonic_boxes(self):
        patterns = generate_box_shape_patterns("E", "pentatonic")
        assert patterns[0].pattern == [[0, 3], [0, 2], [0, 2], [0, 2], [0, 3], [0, 3]]
        assert patterns[2].pattern == [[5, 7], [5, 7], [5, 7], [4, 7], [5, 8], [5, 7]]
        assert patterns[4].pattern == [[10, 12], [10, 12], [9, 12], [9, 12], [10, 12], [10, 12]]

    @pytest.mark.parametrize("key", CHROMATIC_SCALE)
    def test_boxes_chain_on_every_string(self, key):
        patterns = generate_box_shape_patterns(key, "pentatonic")
        for previous, current in zip(patterns, patterns[1:]):
            for string in range(6):
                assert current.pattern[string][0] == previous.pattern[string][1]

    def test_notes_are_pentatonic(self):
        root = to_pitch_class("C")
        scale = {(root + i) % 12 for i in (0, 3, 5, 7, 10)}
        for box in generate_box_shape_patterns("C", "pentatonic"):
            assert {pitch_class_at(s, f) for s, frets in enumerate(box.pattern) for f in frets} <= scale

    def test_compact_pair_selection(self):
        assert choose_frets_for_display([5, 7, 8], 2) == [7, 8]
        assert choose_frets_for_display([0, 3], 2) == [0, 3]


class TestBluesBoxes:
    """Pentatonic boxes plus flat-five blue notes."""

    def test_five_boxes_with_blue_notes(self):
        patterns = generate_box_shape_patterns("E", "blues")
        root = to_pitch_class("E")
        assert len(patterns) == 5

        for pattern in patterns:
            assert pattern.blue_note_positions
            for string, fret in pattern.blue_note_positions:
                assert (pitch_class_at(string, fret) - root) % 12 == 6

            for string, frets in enumerate(pattern.pattern):
                blue_frets = [f for s, f in pattern.blue_note_positions if s == string]
                if blue_frets:
                    assert len(frets) == 3
                    assert set(blue_frets) <= set(frets)
                else:
                    assert len(frets) == 2

    def test_blues_contains_pentatonic(self):
        pentatonic = generate_box_shape_patterns("E", "pentatonic")
        blues = generate_box_shape_patterns("E", "blues")
        assert [len(b.blue_note_positions) for b in blues] == [2, 3, 3, 2, 2]
        for base, box in zip(pentatonic, blues):
            for string in range(6):
                assert set(base.pattern[string]) <= set(box.pattern[string])

    def test_high_e_blue_note_in_boxes_2_and_3(self):
        blues = generate_box_shape_patterns("E", "blues")
        assert any(string == 5 for string, _ in blues[1].blue_note_positions)
        assert any(string == 5 for string, _ in blues[2].blue_note_positions)

    def test_e_blues_box_1_open_position(self):
        box1 = generate_box_shape_patterns("E", "blues")[0]
        assert all(frets[0] == 0 for frets in box1.pattern)
        assert sorted(box1.blue_note_positions) == [(1, 1), (3, 3)]

    def test_e_blues_box_4_anchored_on_b(self):
        box4 = generate_box_shape_patterns("E", "blues")[3]
        assert box4.pattern[0][0] == 7
        assert (4, 11) in box4.blue_note_positions
        assert 11 in box4.pattern[4]

    def test_experimental_sixth_box(self):
        patterns = generate_box_shape_patterns("G", "blues", EXPERIMENTAL)
        assert len(patterns) == 6
        assert "Box 6" in patterns[5].label

    def test_experimental_box_is_box_1_an_octave_up(self):
        patterns = generate_box_shape_patterns("A", "blues", EXPERIMENTAL)
        box1, box6 = patterns[0], patterns[5]
        for string in range(6):
            pentatonic_frets = [f for f in box1.pattern[string] if (string, f) not in box1.blue_note_positions]
            for fret in pentatonic_frets:
                assert fret + 12 in box6.pattern[string]

    def test_blue_fret_scoring_prefers_inside_and_above(self):
        inside = score_blue_fret(6, 5, 7, 5, 8)
        above = score_blue_fret(8, 5, 7, 5, 8)
        below = score_blue_fret(4, 5, 7, 5, 8)
        assert inside < above < below

    def test_desired_counts(self):
        assert [desired_blue_note_count(i) for i in range(5)] == [2, 3, 3, 2, 2]

    def test_forced_string_taken_first(self):
        candidates = [
            BlueNoteCandidate(string=1, fret=1, score=-100),
            BlueNoteCandidate(string=3, fret=3, score=-100),
            BlueNoteCandidate(string=5, fret=6, score=10),
        ]
        chosen = choose_blue_notes(candidates, 2, forced_string=5)
        assert [c.string for c in chosen] == [5, 1]


class TestBoxOptions:

    def test_unknown_family_raises(self):
        with pytest.raises(ValueError):
            generate_box_shape_patterns("C", "lydian-dominant")

    def test_unknown_key_raises(self):
        with pytest.raises(UnknownNoteError):
            generate_box_shape_patterns("X", "major")

    def test_family_options(self):
        assert [o["value"] for o in get_box_scale_family_options()] == ["major", "pentatonic", "blues"]

    def test_generation_is_idempotent(self):
        assert generate_box_shape_patterns("A", "blues") == generate_box_shape_patterns("A", "blues")

    def test_boxes_stay_below_max_fret(self):
        ceiling = BoxShapeOptions().max_fret
        for family in ("major", "pentatonic", "blues"):
            for key in CHROMATIC_SCALE:
                for box in generate_box_shape_patterns(key, family):
                    assert max(box.all_frets()) <= ceiling

    @pytest.mark.parametrize("family", ["major", "pentatonic", "blues"])
    @pytest.mark.parametrize("key", CHROMATIC_SCALE)
    def test_shortest_neck_never_repeats_a_fret(self, key, family):
        options = BoxShapeOptions(max_fret=12, include_experimental_blues_shape=True)
        for box in generate_box_shape_patterns(key, family, options):
            assert max(box.all_frets()) <= 12
            for frets in box.pattern:
                assert len(set(frets)) == len(frets)

    def test_pentatonic_chain_stops_at_the_top_of_the_neck(self):
        patterns = generate_box_shape_patterns("D#", "pentatonic", BoxShapeOptions(max_fret=12))
        assert 1 <= len(patterns) < 5
        assert generate_box_shape_patterns("E", "pentatonic", BoxShapeOptions(max_fret=12))[4].pattern[0] == [10, 12]

    def test_repeated_fret_rejected(self):
        box = generate_box_shape_patterns("A", "pentatonic")[0]
        with pytest.raises(ValidationError):
            BoxShapePattern.model_validate({**box.model_dump(), "pattern": [[11, 11]] * 6})


class TestDisplayOrdering:
    """Left-to-right ordering with the octave wrap."""

    @pytest.mark.parametrize("family", ["pentatonic", "blues"])
    def test_a_starts_from_box_4(self, family):
        ordered = get_display_ordered_box_patterns(generate_box_shape_patterns("A", family), family)
        assert [p.shape_number for p in ordered] == [4, 5, 1, 2, 3]
        assert is_neck_ascending(ordered)

    def test_a_experimental_blues_starts_4_5_6(self):
        ordered = get_display_ordered_box_patterns(
            generate_box_shape_patterns("A", "blues", EXPERIMENTAL), "blues"
        )
        assert [p.shape_number for p in ordered] == [4, 5, 6, 1, 2, 3]

    def test_c_starts_from_box_4(self):
        for family in ("pentatonic", "blues"):
            ordered = get_display_ordered_box_patterns(generate_box_shape_patterns("C", family), family)
            assert [p.shape_number for p in ordered[:2]] == [4, 5]

    def test_e_keeps_generation_order(self):
        ordered = get_display_ordered_box_patterns(generate_box_shape_patterns("E", "pentatonic"), "pentatonic")
        assert [p.shape_number for p in ordered] == [1, 2, 3, 4, 5]

    @pytest.mark.parametrize("family", ["major", "pentatonic", "blues"])
    @pytest.mark.parametrize("key", ["E", "G", "A", "C", "F#"])
    def test_shuffled_input_comes_back_ascending(self, key, family):
        patterns = generate_box_shape_patterns(key, family)
        shuffled = list(patterns)
        random.Random(7).shuffle(shuffled)
        ordered = get_display_ordered_box_patterns(shuffled, family)
        assert sorted(p.shape_number for p in ordered) == sorted(p.shape_number for p in patterns)
        assert is_neck_ascending(ordered)

    def test_major_is_sorted_by_window(self):
        patterns = generate_box_shape_patterns("G", "major")
        ordered = get_display_ordered_box_patterns(list(reversed(patterns)), "major")
        assert [p.shape_number for p in ordered] == list(range(1, 8))

    def test_transpose_down_octave_moves_everything(self):
        box = generate_box_shape_patterns("A", "blues")[3]
        lowered = transpose_down_octave(box)
        assert lowered.window_start == box.window_start - 12
        assert lowered.pattern == [[f - 12 for f in frets] for frets in box.pattern]
        assert lowered.blue_note_positions == [(s, f - 12) for s, f in box.blue_note_positions]

    def test_empty_input(self):
        assert get_display_ordered_box_patterns([], "blues") == []
