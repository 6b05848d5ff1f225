"""
Test Package

Contains unit tests for all modules.
Run with: pytest tests/ -v

Test files should follow the pattern:
    test_<area>.py

Example:
    tests/test_theory.py      - Tests for fretboard_engine/theory/
    tests/test_triads.py      - Tests for fretboard_engine/triads/
    tests/test_boxes.py       - Tests for fretboard_engine/boxes/

Fixtures shared across tests live in tests/fixtures/.
"""
