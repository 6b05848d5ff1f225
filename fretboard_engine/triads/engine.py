"""
Triad Engine - Major Triads and Derived Chord Voicings

Main entry points:
    generate_triads_data("G")          → TriadsData, 4 groups × 4 positions
    generate_chord_data("F", "minor")  → ChordData derived from the F major table
    get_supported_keys("minor")        → keys where every group has a minor voicing

Everything is computed by search; nothing is looked up from a per-key table.
"""

from typing import List, Optional, Sequence

from fretboard_engine.data.config import TriadOptions
from fretboard_engine.data.schema import ChordData, StringGroupTriads, TriadsData, TriadVoicing
from fretboard_engine.theory.catalog import require_chord_formula
from fretboard_engine.theory.chords import (
    build_chord,
    get_chord_name,
    get_chord_notes,
    is_valid_chord_voicing,
    transform_chord_type,
)
from fretboard_engine.theory.fretboard import DEFAULT_MAX_FRET, get_fretboard
from fretboard_engine.theory.pitch import CHROMATIC_SCALE, clean_note_name, to_display_name
from fretboard_engine.triads.selection import select_triad_positions
from fretboard_engine.triads.voicings import (
    STRING_GROUPS,
    VoicingCandidate,
    build_major_triad,
    find_all_triad_voicings,
    identify_inversion,
    string_names_for,
)


# =============================================================================
# PART 1: MAJOR TRIAD TABLE
# =============================================================================
#
# Search every voicing per string group, then let the selector pick four
# positions. Positions are numbered 0..3 in the order they climb the neck.
#

def _to_voicing(candidate: VoicingCandidate, position: int) -> TriadVoicing:
    return TriadVoicing(
        position=position,
        strings=list(candidate.strings),
        frets=list(candidate.frets),
        notes=list(candidate.notes),
        note_names=list(candidate.note_names),
        inversion=candidate.inversion,
        avg_fret=candidate.avg_fret,
    )


def generate_triads_data(
    key: str,
    options: Optional[TriadOptions] = None,
    verbose: bool = False,
) -> TriadsData:
    """
    Generate four major-triad positions on each 3-string group.

    Args:
        key: Root note in any spelling ('G', 'Bb', 'C#', 'E♭')
        options: Search settings; defaults to standard tuning, frets 0-18
        verbose: Print search progress

    Returns:
        TriadsData with groups E-A-D, A-D-G, D-G-B and G-B-E

    Raises:
        UnknownNoteError: If the key is not a note name
    """
    options = options or TriadOptions()
    key = clean_note_name(key)
    triad = build_major_triad(key)
    fretboard = get_fretboard(tuple(options.tuning), max(options.max_fret, DEFAULT_MAX_FRET))

    if verbose:
        print(f"🎸 Searching {key} major triad voicings (frets 0-{options.max_fret}, "
              f"stretch ≤ {options.max_stretch})")

    group_voicings = []
    for group in STRING_GROUPS:
        voicings = find_all_triad_voicings(
            group, triad, fretboard,
            max_stretch=options.max_stretch,
            max_fret=options.max_fret,
            key=key,
        )
        if verbose:
            print(f"  Strings {string_names_for(group)}: {len(voicings)} voicings")
        group_voicings.append(voicings)

    positions = select_triad_positions(group_voicings, options.high_position_fret, verbose)

    string_groups = [
        StringGroupTriads(
            strings=list(group),
            string_names=string_names_for(group),
            voicings=[_to_voicing(candidate, position) for position, candidate in enumerate(selected)],
        )
        for group, selected in zip(STRING_GROUPS, positions)
    ]

    return TriadsData(
        key=key,
        triad_notes=[to_display_name(pc, key) for pc in triad],
        string_groups=string_groups,
    )


# =============================================================================
# PART 2: OTHER CHORD TYPES
# =============================================================================
#
# Minor shapes come from the major table by lowering the third a fret.
# Voicings whose third sits on an open string are dropped, so a group may
# end up with fewer than four.
#

def _transform_group(
    group: StringGroupTriads,
    key: str,
    chord_type: str,
    chord_pcs: Sequence[int],
    fretboard,
) -> List[TriadVoicing]:
    transformed = []
    for voicing in group.voicings:
        frets = transform_chord_type(voicing.frets, group.strings, key, chord_type, fretboard)
        if frets is None:
            continue

        notes = [fretboard.pitch_class_at(s, f) for s, f in zip(group.strings, frets)]
        if not is_valid_chord_voicing(notes, chord_pcs):
            continue

        transformed.append(TriadVoicing(
            position=voicing.position,
            strings=list(group.strings),
            frets=frets,
            notes=notes,
            note_names=[to_display_name(pc, key) for pc in notes],
            inversion=identify_inversion(notes, chord_pcs),
            avg_fret=sum(frets) / 3,
        ))

    # Renumber so surviving voicings read 0, 1, 2... up the neck
    transformed.sort(key=lambda v: (v.avg_fret, v.frets))
    return [v.model_copy(update={"position": index}) for index, v in enumerate(transformed)]


def generate_chord_data(
    key: str,
    chord_type: str = "major",
    options: Optional[TriadOptions] = None,
) -> Optional[ChordData]:
    """
    Voicings for a chord type, derived from the major triad positions.

    Major returns the triad table unchanged. Minor lowers each major third by
    one fret; positions where that is impossible (an open-string third) are
    dropped. Other chord types are not supported and give None.

    Raises:
        UnknownNoteError: If the key is not a note name
        UnknownFormulaError: If the chord type is not in the catalog
    """
    options = options or TriadOptions()
    key = clean_note_name(key)
    formula = require_chord_formula(chord_type)
    chord_pcs = build_chord(key, formula.id)

    if formula.id not in ("major", "minor"):
        return None

    triads = generate_triads_data(key, options)
    fretboard = get_fretboard(tuple(options.tuning), max(options.max_fret, DEFAULT_MAX_FRET))

    if formula.id == "major":
        string_groups = triads.string_groups
    else:
        string_groups = []
        for group in triads.string_groups:
            voicings = _transform_group(group, key, formula.id, chord_pcs, fretboard)
            if voicings:
                string_groups.append(group.model_copy(update={"voicings": voicings}))

    if not string_groups:
        return None

    return ChordData(
        key=key,
        chord_type=formula.id,
        chord_name=get_chord_name(key, formula.id),
        chord_notes=get_chord_notes(key, formula.id),
        string_groups=string_groups,
    )


def get_supported_keys(chord_type: str = "major", options: Optional[TriadOptions] = None) -> List[str]:
    """
    Keys (sharp spelling) with a complete voicing table for `chord_type`.

    Major is supported everywhere. Minor needs at least one voicing on all
    four string groups.
    """
    formula = require_chord_formula(chord_type)

    if formula.id == "major":
        return list(CHROMATIC_SCALE)

    if formula.id == "minor":
        supported = []
        for key in CHROMATIC_SCALE:
            data = generate_chord_data(key, "minor", options)
            if data and len(data.string_groups) == len(STRING_GROUPS):
                supported.append(key)
        return supported

    return []
