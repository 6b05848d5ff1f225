"""
Test Suite - Basic Sanity Tests

These tests verify that the package structure is correct
and that the public imports work.

Run with: pytest tests/test_sanity.py -v
"""

import pytest


class TestPackageStructure:
    """Test that all packages can be imported."""

    def test_import_package(self):
        """Test that the main package can be imported."""
        import fretboard_engine
        assert hasattr(fretboard_engine, "__version__")
        assert fretboard_engine.__version__ == "0.1.0"

    def test_import_theory_package(self):
        from fretboard_engine.theory import CHROMATIC_SCALE, Fretboard
        assert len(CHROMATIC_SCALE) == 12
        assert Fretboard().string_count == 6

    def test_import_triads_package(self):
        import fretboard_engine.triads

    def test_import_boxes_package(self):
        import fretboard_engine.boxes

    def test_import_progressions_package(self):
        import fretboard_engine.progressions

    def test_import_data_package(self):
        from fretboard_engine.data import EngineConfig, load_config
        assert load_config() == EngineConfig()

    def test_import_app_package(self):
        """The CLI is importable but not pulled in by the package root."""
        import fretboard_engine.app.cli


class TestPublicApi:
    """Top-level re-exports."""

    def test_top_level_generators(self):
        from fretboard_engine import generate_box_shape_patterns, generate_triads_data

        assert generate_triads_data("G").string_groups[0].voicings[0].frets == [3, 2, 0]
        assert generate_box_shape_patterns("A", "pentatonic")[0].pattern[0] == [5, 8]

    def test_errors_share_a_base_class(self):
        import fretboard_engine as fe

        for error in (
            fe.UnknownNoteError,
            fe.UnknownFormulaError,
            fe.InvalidIntervalError,
            fe.NoteNotOnFretboardError,
            fe.EngineInvariantViolation,
        ):
            assert issubclass(error, fe.FretboardError)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
