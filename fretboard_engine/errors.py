"""
Error taxonomy for the fretboard engine.

Lookup and parsing failures are caller mistakes and subclass ValueError,
so code that already guards theory lookups with `except ValueError` keeps
working. EngineInvariantViolation signals a defect inside the engine itself.
"""


class FretboardError(Exception):
    """Base class for every error raised by the engine."""


class UnknownNoteError(FretboardError, ValueError):
    """A note name could not be resolved to one of the 12 pitch classes."""


class UnknownFormulaError(FretboardError, ValueError):
    """A chord or scale id (or alias) is not in the catalog."""


class InvalidIntervalError(FretboardError, ValueError):
    """An interval token such as '9M' could not be parsed."""


class NoteNotOnFretboardError(FretboardError, LookupError):
    """A pitch class has no fret within the configured bound."""


class EngineInvariantViolation(FretboardError, RuntimeError):
    """An internal invariant failed (e.g. a voicing with an unknown inversion)."""
