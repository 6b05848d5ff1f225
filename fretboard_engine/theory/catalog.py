"""
Theory Catalog - Chord and Scale Formulas

Canonical chord/scale formula data used as the single source of truth for
interval logic. Every formula is declared with tonal-style interval tokens
('1P', '3m', '5d', '9M', ...) and converted to semitones once at import time.

Lookups accept the canonical id, the chord symbol, or any alias:
    get_chord_formula_definition("half-diminished").id  → 'm7b5'
    get_chord_formula_definition("dom").intervals       → (0, 4, 7, 10)
    get_scale_formula_definition("minorPenta").intervals → (0, 3, 5, 7, 10)
"""

import re
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from fretboard_engine.errors import InvalidIntervalError, UnknownFormulaError


# =============================================================================
# FORMULA SEEDS
# =============================================================================

CHORD_FORMULA_SEEDS: Dict[str, Dict] = {
    "major": {
        "name": "Major", "symbol": "", "description": "1-3-5",
        "interval_tokens": ["1P", "3M", "5P"],
        "aliases": ["maj", "M"],
    },
    "minor": {
        "name": "Minor", "symbol": "m", "description": "1-b3-5",
        "interval_tokens": ["1P", "3m", "5P"],
        "aliases": ["min", "-"],
    },
    "dim": {
        "name": "Diminished", "symbol": "dim", "description": "1-b3-b5",
        "interval_tokens": ["1P", "3m", "5d"],
        "aliases": ["o"],
    },
    "aug": {
        "name": "Augmented", "symbol": "aug", "description": "1-3-#5",
        "interval_tokens": ["1P", "3M", "5A"],
        "aliases": ["+"],
    },
    "maj7": {
        "name": "Major 7th", "symbol": "maj7", "description": "1-3-5-7",
        "interval_tokens": ["1P", "3M", "5P", "7M"],
        "aliases": ["M7", "Maj7", "ma7", "^7", "delta7"],
    },
    "min7": {
        "name": "Minor 7th", "symbol": "m7", "description": "1-b3-5-b7",
        "interval_tokens": ["1P", "3m", "5P", "7m"],
        "aliases": ["-7", "min7", "mi7"],
    },
    "7": {
        "name": "Dominant 7th", "symbol": "7", "description": "1-3-5-b7",
        "interval_tokens": ["1P", "3M", "5P", "7m"],
        "aliases": ["dom", "dominant7"],
    },
    "dim7": {
        "name": "Diminished 7th", "symbol": "dim7", "description": "1-b3-b5-bb7",
        "interval_tokens": ["1P", "3m", "5d", "7d"],
        "aliases": ["o7"],
    },
    "mMaj7": {
        "name": "Minor/Major 7th", "symbol": "mMaj7", "description": "1-b3-5-7",
        "interval_tokens": ["1P", "3m", "5P", "7M"],
        "aliases": ["mM7", "m/maj7", "-maj7"],
    },
    "7b5": {
        "name": "Dominant 7 flat 5", "symbol": "7b5", "description": "1-3-b5-b7",
        "interval_tokens": ["1P", "3M", "5d", "7m"],
        "aliases": ["dom7b5"],
    },
    "7#5": {
        "name": "Dominant 7 sharp 5", "symbol": "7#5", "description": "1-3-#5-b7",
        "interval_tokens": ["1P", "3M", "5A", "7m"],
        "aliases": ["+7", "7+", "aug7", "7aug"],
    },
    "m7b5": {
        "name": "Half-Diminished", "symbol": "m7b5", "description": "1-b3-b5-b7",
        "interval_tokens": ["1P", "3m", "5d", "7m"],
        "aliases": ["halfdim", "half-diminished", "h7"],
    },
    "6": {
        "name": "Sixth", "symbol": "6", "description": "1-3-5-6",
        "interval_tokens": ["1P", "3M", "5P", "6M"],
        "aliases": ["add6", "add13", "M6"],
    },
    "m6": {
        "name": "Minor 6th", "symbol": "m6", "description": "1-b3-5-6",
        "interval_tokens": ["1P", "3m", "5P", "6M"],
        "aliases": ["-6"],
    },
    "9": {
        "name": "Dominant 9th", "symbol": "9", "description": "1-3-5-b7-9",
        "interval_tokens": ["1P", "3M", "5P", "7m", "9M"],
        "aliases": ["dom9"],
    },
    "11": {
        "name": "Eleventh", "symbol": "11", "description": "1-5-b7-9-11",
        "interval_tokens": ["1P", "5P", "7m", "9M", "11P"],
    },
    "13": {
        "name": "Dominant 13th", "symbol": "13", "description": "1-3-5-b7-9-13",
        "interval_tokens": ["1P", "3M", "5P", "7m", "9M", "13M"],
        "aliases": ["dom13"],
    },
}

SCALE_FORMULA_SEEDS: Dict[str, Dict] = {
    "major": {
        "name": "Major", "symbol": "major", "description": "Ionian mode",
        "interval_tokens": ["1P", "2M", "3M", "4P", "5P", "6M", "7M"],
        "aliases": ["ionian"],
    },
    "dorian": {
        "name": "Dorian", "symbol": "dorian", "description": "Second major mode",
        "interval_tokens": ["1P", "2M", "3m", "4P", "5P", "6M", "7m"],
    },
    "phrygian": {
        "name": "Phrygian", "symbol": "phrygian", "description": "Third major mode",
        "interval_tokens": ["1P", "2m", "3m", "4P", "5P", "6m", "7m"],
    },
    "lydian": {
        "name": "Lydian", "symbol": "lydian", "description": "Fourth major mode",
        "interval_tokens": ["1P", "2M", "3M", "4A", "5P", "6M", "7M"],
    },
    "mixolydian": {
        "name": "Mixolydian", "symbol": "mixolydian", "description": "Fifth major mode",
        "interval_tokens": ["1P", "2M", "3M", "4P", "5P", "6M", "7m"],
    },
    "aeolian": {
        "name": "Aeolian", "symbol": "aeolian", "description": "Natural minor mode",
        "interval_tokens": ["1P", "2M", "3m", "4P", "5P", "6m", "7m"],
        "aliases": ["naturalminor"],
    },
    "locrian": {
        "name": "Locrian", "symbol": "locrian", "description": "Seventh major mode",
        "interval_tokens": ["1P", "2m", "3m", "4P", "5d", "6m", "7m"],
    },
    "minorPentatonic": {
        "name": "Minor Pentatonic", "symbol": "minor-pentatonic", "description": "1-b3-4-5-b7",
        "interval_tokens": ["1P", "3m", "4P", "5P", "7m"],
        "aliases": ["pentatonicMinor", "minorPenta"],
    },
    "blues": {
        "name": "Blues", "symbol": "blues", "description": "Minor pentatonic + b5",
        "interval_tokens": ["1P", "3m", "4P", "5d", "5P", "7m"],
    },
}

# Semitones above the root for each diatonic degree of the major scale
MAJOR_SCALE_SEMITONES_BY_DEGREE = {1: 0, 2: 2, 3: 4, 4: 5, 5: 7, 6: 9, 7: 11}
PERFECT_DEGREES = {1, 4, 5}

INTERVAL_TOKEN_REGEX = re.compile(r"^(\d+)([PMmAd]+)$")


# =============================================================================
# SCHEMA
# =============================================================================

class FormulaDefinition(BaseModel):
    """
    One chord or scale formula.

    Attributes:
        id: Canonical catalog id (e.g. 'min7', 'dorian')
        name: Human readable name
        symbol: Chord symbol suffix or scale slug
        description: Degree formula (e.g. '1-b3-5-b7')
        interval_tokens: Tonal-style interval tokens
        aliases: Alternative lookup names
        intervals: Semitones above the root, in formula order
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    symbol: str
    description: str
    interval_tokens: Tuple[str, ...]
    aliases: Tuple[str, ...] = ()
    intervals: Tuple[int, ...]


# =============================================================================
# INTERVAL PARSING
# =============================================================================

def interval_token_to_semitones(token: str) -> int:
    """
    Convert an interval token to semitones.

    Supports tokens like 1P, 3M, 3m, 5d, 5A, 7d, 9M, 11P, 13M. Compound
    intervals add 12 per octave (9M = 2M + 12).

    Raises:
        InvalidIntervalError: On malformed tokens or a quality that does not
            fit the degree class (e.g. '5M' or '3P')
    """
    if not isinstance(token, str):
        raise InvalidIntervalError(f"Invalid interval token: {token!r}")

    match = INTERVAL_TOKEN_REGEX.match(token.strip())
    if not match:
        raise InvalidIntervalError(f"Invalid interval token: {token}")

    degree_number = int(match.group(1))
    quality = match.group(2)
    if degree_number < 1:
        raise InvalidIntervalError(f"Invalid interval degree: {token}")

    octaves = (degree_number - 1) // 7
    degree = (degree_number - 1) % 7 + 1
    perfect_class = degree in PERFECT_DEGREES
    base = MAJOR_SCALE_SEMITONES_BY_DEGREE[degree] + octaves * 12

    if quality == "P":
        if not perfect_class:
            raise InvalidIntervalError(f"Invalid quality 'P' for major-class interval: {token}")
        return base

    if quality in ("M", "m"):
        if perfect_class:
            raise InvalidIntervalError(f"Invalid quality '{quality}' for perfect-class interval: {token}")
        return base if quality == "M" else base - 1

    if set(quality) == {"A"}:
        return base + len(quality)

    if set(quality) == {"d"}:
        # Major-class intervals pass through minor before diminishing
        if perfect_class:
            return base - len(quality)
        return base - (len(quality) + 1)

    raise InvalidIntervalError(f"Unsupported interval quality '{quality}' for token: {token}")


# =============================================================================
# CATALOG CONSTRUCTION
# =============================================================================

def normalize_lookup_token(value: str) -> str:
    return re.sub(r"\s+", "", value.replace("♯", "#").replace("♭", "b"))


def build_catalog(seeds: Dict[str, Dict]) -> Dict[str, FormulaDefinition]:
    """Turn seed dictionaries into validated FormulaDefinition objects."""
    catalog = {}
    for formula_id, seed in seeds.items():
        tokens = tuple(seed["interval_tokens"])
        catalog[formula_id] = FormulaDefinition(
            id=formula_id,
            name=seed["name"],
            symbol=seed["symbol"],
            description=seed["description"],
            interval_tokens=tokens,
            aliases=tuple(seed.get("aliases", ())),
            intervals=tuple(interval_token_to_semitones(token) for token in tokens),
        )
    return catalog


def build_alias_index(catalog: Dict[str, FormulaDefinition]) -> Tuple[Dict[str, str], Dict[str, str]]:
    """
    Build (exact, case-insensitive) alias indexes.

    The exact index keeps 'M7' (major 7th) apart from 'm7' (minor 7th);
    the folded index is only consulted when the exact lookup misses.
    """
    exact: Dict[str, str] = {}
    folded: Dict[str, str] = {}

    for formula in catalog.values():
        for name in (formula.id, formula.symbol, *formula.aliases):
            if not name or not name.strip():
                continue
            token = normalize_lookup_token(name)
            exact[token] = formula.id
            folded.setdefault(token.lower(), formula.id)

    return exact, folded


CHORD_FORMULA_CATALOG = build_catalog(CHORD_FORMULA_SEEDS)
SCALE_FORMULA_CATALOG = build_catalog(SCALE_FORMULA_SEEDS)

_CHORD_ALIAS_INDEX = build_alias_index(CHORD_FORMULA_CATALOG)
_SCALE_ALIAS_INDEX = build_alias_index(SCALE_FORMULA_CATALOG)


# =============================================================================
# LOOKUPS
# =============================================================================

def _resolve(id_or_alias: str, index: Tuple[Dict[str, str], Dict[str, str]]) -> Optional[str]:
    if not isinstance(id_or_alias, str):
        return None
    exact, folded = index
    token = normalize_lookup_token(id_or_alias)
    if token in exact:
        return exact[token]
    return folded.get(token.lower())


def list_chord_formula_ids() -> List[str]:
    return list(CHORD_FORMULA_CATALOG)


def list_scale_formula_ids() -> List[str]:
    return list(SCALE_FORMULA_CATALOG)


def resolve_chord_formula_id(id_or_alias: str) -> Optional[str]:
    return _resolve(id_or_alias, _CHORD_ALIAS_INDEX)


def resolve_scale_formula_id(id_or_alias: str) -> Optional[str]:
    return _resolve(id_or_alias, _SCALE_ALIAS_INDEX)


def get_chord_formula_definition(id_or_alias: str) -> Optional[FormulaDefinition]:
    """Chord formula for an id, symbol or alias; None when absent."""
    formula_id = resolve_chord_formula_id(id_or_alias)
    return CHORD_FORMULA_CATALOG[formula_id] if formula_id else None


def get_scale_formula_definition(id_or_alias: str) -> Optional[FormulaDefinition]:
    """Scale formula for an id, symbol or alias; None when absent."""
    formula_id = resolve_scale_formula_id(id_or_alias)
    return SCALE_FORMULA_CATALOG[formula_id] if formula_id else None


def require_chord_formula(id_or_alias: str) -> FormulaDefinition:
    """Like get_chord_formula_definition, but raises UnknownFormulaError."""
    formula = get_chord_formula_definition(id_or_alias)
    if formula is None:
        raise UnknownFormulaError(
            f"Unknown chord type: '{id_or_alias}'. Valid ids are: {list_chord_formula_ids()}"
        )
    return formula


def require_scale_formula(id_or_alias: str) -> FormulaDefinition:
    """Like get_scale_formula_definition, but raises UnknownFormulaError."""
    formula = get_scale_formula_definition(id_or_alias)
    if formula is None:
        raise UnknownFormulaError(
            f"Unknown scale: '{id_or_alias}'. Valid ids are: {list_scale_formula_ids()}"
        )
    return formula
