"""
Batch Tables - Precompute Every Key and Export
==============================================

Runs the generators across all twelve keys and flattens the results into
pandas DataFrames, one row per voicing or per box string. Used by the
`export` CLI command:

    export_tables("tables/", EngineConfig(), progress=True)

Files written:
    triads.csv              every major triad voicing
    boxes_<family>.csv      every box, one row per string
    triads.jsonl            the raw TriadsData models, one key per line
"""

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd
from tqdm import tqdm

from fretboard_engine.boxes.shapes import generate_box_shape_patterns
from fretboard_engine.data.config import BoxShapeOptions, EngineConfig, TriadOptions
from fretboard_engine.data.schema import VALID_BOX_FAMILIES, BoxShapePattern, TriadsData
from fretboard_engine.theory.fretboard import STRING_NAMES
from fretboard_engine.theory.pitch import CHROMATIC_SCALE
from fretboard_engine.triads.engine import generate_triads_data


TRIAD_COLUMNS = [
    "key", "group", "strings", "position", "frets", "note_names", "inversion", "avg_fret",
]

BOX_COLUMNS = [
    "key", "family", "shape_number", "label", "mode_name", "window_start", "window_end",
    "string", "string_name", "frets", "blue_frets",
]


# =============================================================================
# PRECOMPUTATION
# =============================================================================

def _iterate(keys: Sequence[str], progress: bool, desc: str) -> Iterable[str]:
    return tqdm(keys, desc=desc, unit="key") if progress else keys


def precompute_triads(
    keys: Optional[Sequence[str]] = None,
    options: Optional[TriadOptions] = None,
    progress: bool = False,
) -> Dict[str, TriadsData]:
    """Major triad tables for each key (all twelve by default)."""
    keys = list(keys or CHROMATIC_SCALE)
    return {
        key: generate_triads_data(key, options)
        for key in _iterate(keys, progress, "Triads")
    }


def precompute_boxes(
    family: str,
    keys: Optional[Sequence[str]] = None,
    options: Optional[BoxShapeOptions] = None,
    progress: bool = False,
) -> Dict[str, List[BoxShapePattern]]:
    """Boxes of one family for each key (all twelve by default)."""
    keys = list(keys or CHROMATIC_SCALE)
    return {
        key: generate_box_shape_patterns(key, family, options)
        for key in _iterate(keys, progress, f"{family.title()} boxes")
    }


# =============================================================================
# DATAFRAMES
# =============================================================================

def _join(values: Iterable) -> str:
    return " ".join(str(v) for v in values)


def triads_to_dataframe(triads_by_key: Dict[str, TriadsData]) -> pd.DataFrame:
    """One row per voicing. List columns are space-joined strings."""
    rows = []
    for key, data in triads_by_key.items():
        for group_index, group in enumerate(data.string_groups):
            for voicing in group.voicings:
                rows.append({
                    "key": key,
                    "group": group_index,
                    "strings": _join(group.string_names),
                    "position": voicing.position,
                    "frets": _join(voicing.frets),
                    "note_names": _join(voicing.note_names),
                    "inversion": voicing.inversion,
                    "avg_fret": round(voicing.avg_fret, 3),
                })
    return pd.DataFrame(rows, columns=TRIAD_COLUMNS)


def boxes_to_dataframe(boxes_by_key: Dict[str, List[BoxShapePattern]]) -> pd.DataFrame:
    """One row per (box, string)."""
    rows = []
    for key, patterns in boxes_by_key.items():
        for pattern in patterns:
            for string_index, frets in enumerate(pattern.pattern):
                blue_frets = [f for s, f in pattern.blue_note_positions if s == string_index]
                rows.append({
                    "key": key,
                    "family": pattern.family,
                    "shape_number": pattern.shape_number,
                    "label": pattern.label,
                    "mode_name": pattern.mode_name or "",
                    "window_start": pattern.window_start,
                    "window_end": pattern.window_end,
                    "string": string_index,
                    "string_name": STRING_NAMES[string_index],
                    "frets": _join(frets),
                    "blue_frets": _join(blue_frets),
                })
    return pd.DataFrame(rows, columns=BOX_COLUMNS)


# =============================================================================
# BUILD & SAVE
# =============================================================================

def build_tables(
    config: Optional[EngineConfig] = None,
    families: Sequence[str] = tuple(VALID_BOX_FAMILIES),
    progress: bool = False,
    triads_by_key: Optional[Dict[str, TriadsData]] = None,
) -> Dict[str, pd.DataFrame]:
    """
    Precompute triads and every box family for all keys.

    Pass `triads_by_key` to reuse triad tables that were already computed.

    Returns:
        {'triads': DataFrame, 'boxes_major': DataFrame, ...}
    """
    config = config or EngineConfig()
    if triads_by_key is None:
        triads_by_key = precompute_triads(options=config.triads, progress=progress)

    tables = {"triads": triads_to_dataframe(triads_by_key)}
    for family in families:
        boxes = precompute_boxes(family, options=config.boxes, progress=progress)
        tables[f"boxes_{family}"] = boxes_to_dataframe(boxes)
    return tables


def save_tables(tables: Dict[str, pd.DataFrame], output_dir: Union[str, Path]) -> List[Path]:
    """Write each table as CSV. Returns the written paths."""
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    written = []
    for name, frame in tables.items():
        path = output_path / f"{name}.csv"
        frame.to_csv(path, index=False)
        written.append(path)
    return written


def save_triads_jsonl(triads_by_key: Dict[str, TriadsData], path: Union[str, Path]) -> Path:
    """One TriadsData JSON document per line."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for data in triads_by_key.values():
            f.write(data.model_dump_json() + "\n")
    return path


def export_tables(
    output_dir: Union[str, Path],
    config: Optional[EngineConfig] = None,
    progress: bool = False,
    verbose: bool = False,
) -> List[Path]:
    """Compute everything for all keys and write CSV plus triads.jsonl."""
    config = config or EngineConfig()
    triads_by_key = precompute_triads(options=config.triads, progress=progress)
    tables = build_tables(config, progress=progress, triads_by_key=triads_by_key)

    written = save_tables(tables, output_dir)
    written.append(save_triads_jsonl(triads_by_key, Path(output_dir) / "triads.jsonl"))

    if verbose:
        for path in written:
            print(f"  ✅ Saved: {path}")
    return written
