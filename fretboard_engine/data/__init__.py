"""
Data Subpackage

    - schema.py: Pydantic models returned by every generator
    - config.py: Options models and YAML loading
    - tables.py: All-keys precomputation and CSV export (import directly)
"""

from fretboard_engine.data.schema import BoxShapePattern, ChordData, TriadsData, TriadVoicing
from fretboard_engine.data.config import BoxShapeOptions, EngineConfig, TriadOptions, load_config
