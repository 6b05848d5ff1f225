"""
Configuration for the fretboard engine.

Options are Pydantic models so bad values fail loudly with a
ValidationError. A YAML file can override any subset of the defaults:

    triads:
      max_fret: 15
    boxes:
      include_experimental_blues_shape: true
      tuning: [E, A, D, G, B, E]
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from fretboard_engine.theory.fretboard import DEFAULT_MAX_FRET, STANDARD_TUNING
from fretboard_engine.theory.pitch import to_pitch_class


# =============================================================================
# HELPERS
# =============================================================================

def parse_tuning(value: Any) -> List[int]:
    """
    Accept a tuning as pitch classes, note names, or a space-separated string.

    Examples:
        parse_tuning([4, 9, 2, 7, 11, 4])   → [4, 9, 2, 7, 11, 4]
        parse_tuning("E A D G B E")         → [4, 9, 2, 7, 11, 4]
        parse_tuning(["D", "A", "D", "G", "B", "E"]) → [2, 9, 2, 7, 11, 4]
    """
    if isinstance(value, str):
        value = value.split()

    tuning = []
    for entry in value:
        if isinstance(entry, str):
            tuning.append(to_pitch_class(entry))
        else:
            tuning.append(int(entry))
    return tuning


def _validate_tuning(v: Any) -> List[int]:
    tuning = parse_tuning(v)
    if len(tuning) != 6:
        raise ValueError(f"Tuning must list exactly 6 strings. Got: {tuning} (length: {len(tuning)})")
    if any(pc < 0 or pc > 11 for pc in tuning):
        raise ValueError(f"Tuning pitch classes must be in 0-11. Got: {tuning}")
    return tuning


# =============================================================================
# OPTIONS
# =============================================================================

class TriadOptions(BaseModel):
    """
    Settings for triad voicing search.

    Attributes:
        tuning: Open-string pitch classes, low string first
        max_fret: Highest fret the voicing search may use
        max_stretch: Widest allowed fret span inside one voicing
        high_position_fret: Top positions prefer voicings at or below this fret
    """
    model_config = ConfigDict(frozen=True)

    tuning: List[int] = Field(
        default_factory=lambda: list(STANDARD_TUNING),
        description="Open-string pitch classes, low to high",
        examples=[[4, 9, 2, 7, 11, 4]],
    )
    max_fret: int = Field(default=18, ge=5, le=24, description="Highest fret searched")
    max_stretch: int = Field(default=5, ge=1, le=12, description="Maximum fret span of a voicing")
    high_position_fret: int = Field(
        default=16, ge=0, le=24,
        description="Top position prefers voicings whose highest fret stays at or below this",
    )

    @field_validator("tuning", mode="before")
    @classmethod
    def validate_tuning(cls, v: Any) -> List[int]:
        return _validate_tuning(v)


class BoxShapeOptions(BaseModel):
    """
    Settings for scale box generation.

    Attributes:
        tuning: Open-string pitch classes, low string first
        max_fret: Highest fret a box may reach
        include_experimental_blues_shape: Add a 6th blues box
    """
    model_config = ConfigDict(frozen=True)

    tuning: List[int] = Field(
        default_factory=lambda: list(STANDARD_TUNING),
        description="Open-string pitch classes, low to high",
    )
    max_fret: int = Field(default=28, ge=12, le=30, description="Highest fret a box may reach")
    include_experimental_blues_shape: bool = Field(
        default=False,
        description="Generate a 6th blues box one octave above box 1",
    )

    @field_validator("tuning", mode="before")
    @classmethod
    def validate_tuning(cls, v: Any) -> List[int]:
        return _validate_tuning(v)


class EngineConfig(BaseModel):
    """Top-level configuration, one section per generator."""
    model_config = ConfigDict(frozen=True)

    triads: TriadOptions = Field(default_factory=TriadOptions)
    boxes: BoxShapeOptions = Field(default_factory=BoxShapeOptions)
    fretboard_max_fret: int = Field(default=DEFAULT_MAX_FRET, ge=12, le=30)


# =============================================================================
# LOADING
# =============================================================================

def load_config_dict(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a YAML file into a dictionary. An empty file gives {}."""
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping at the top level: {config_path}")
    return data


def load_config(path: Optional[Union[str, Path]] = None) -> EngineConfig:
    """
    Load an EngineConfig from YAML, or the defaults when no path is given.

    Raises:
        FileNotFoundError: If `path` does not exist
        ValidationError: If any value fails validation
    """
    if path is None:
        return EngineConfig()
    return EngineConfig.model_validate(load_config_dict(path))
