"""
Triads Subpackage - Major triad positions per 3-string group

Usage:
    from fretboard_engine.triads import generate_triads_data

    data = generate_triads_data("C")
    for group in data.string_groups:
        print(group.string_names, [v.frets for v in group.voicings])
"""

from fretboard_engine.triads.engine import generate_chord_data, generate_triads_data, get_supported_keys
