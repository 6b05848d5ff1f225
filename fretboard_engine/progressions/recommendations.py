"""
Practice Progression Recommendations
====================================

Picks backing progressions that suit what the player is practising over,
and lists the chord tones those progressions use.

The choice is driven by a "flavour": the scale family, the tonal centre
(major or relative minor) and, for pentatonic boxes, an optional
hexatonic view that adds one more scale degree. Active target tones push
extra templates to the front:

    minor pentatonic in E + b5 target  → 12-bar blues first
    major centre in G + phrygian view  → Mixolydian Drive ('G7 F C G7')
"""

import re
from typing import Dict, Iterable, List, Optional, Tuple

from fretboard_engine.data.schema import (
    ChordCheatSheetData,
    ChordCheatSheetEntry,
    PracticeProgression,
    ProgressionContext,
    TargetTone,
)
from fretboard_engine.errors import FretboardError
from fretboard_engine.progressions.renderer import (
    BAR_LINE,
    render_roman_progression_to_chords,
    uses_flats_for_key,
)
from fretboard_engine.theory.catalog import resolve_chord_formula_id
from fretboard_engine.theory.chords import build_chord
from fretboard_engine.theory.pitch import to_flat_name, to_pitch_class, to_sharp_name


# =============================================================================
# PROGRESSION TEMPLATES
# =============================================================================

PROGRESSION_TEMPLATES: Dict[str, Dict[str, str]] = {
    "blues12": {
        "title": "12-Bar Blues",
        "roman_numerals": "I7 I7 I7 I7 | IV7 IV7 I7 I7 | V7 IV7 I7 V7",
        "why_it_fits": "Classic dominant-blues form for loop-pedal phrasing.",
    },
    "majorCadence": {
        "title": "Major Cadence",
        "roman_numerals": "I IV V I",
        "why_it_fits": "Strong tonal center with clear phrase endings.",
    },
    "ionianPop": {
        "title": "Pop Major Loop",
        "roman_numerals": "I V vi IV",
        "why_it_fits": "Popular modern major progression for melodic practice.",
    },
    "minorRock": {
        "title": "Natural Minor Rock",
        "roman_numerals": "i bVII bVI bVII",
        "why_it_fits": "Common aeolian movement for minor pentatonic language.",
    },
    "minorBluesLoop": {
        "title": "Minor Blues Loop",
        "roman_numerals": "i7 i7 iv7 i7 | i7 i7 v7 iv7 | i7 v7 i7 v7",
        "why_it_fits": "Minor-blues framework with space for call-and-response lines.",
    },
    "dorianVamp": {
        "title": "Dorian Vamp",
        "roman_numerals": "i7 IV7 i7 IV7",
        "why_it_fits": "Highlights the natural 6 color against a minor tonic.",
    },
    "phrygianVamp": {
        "title": "Phrygian Tension Vamp",
        "roman_numerals": "i bII i bII",
        "why_it_fits": "Leans into the b2 pull for tense modal phrasing.",
    },
    "lydianLift": {
        "title": "Lydian Lift",
        "roman_numerals": "Imaj7 II Imaj7 II",
        "why_it_fits": "Uses the raised 4 color through the major II chord.",
    },
    "mixolydianDrive": {
        "title": "Mixolydian Drive",
        "roman_numerals": "I7 bVII IV I7",
        "why_it_fits": "Dominant tonality with the signature b7 neighborhood.",
    },
}

BASE_TEMPLATE_IDS_BY_FLAVOR: Dict[str, List[str]] = {
    "ionian": ["ionianPop", "majorCadence"],
    "majorPentatonic": ["ionianPop", "majorCadence"],
    "minorPentatonic": ["minorRock", "minorBluesLoop"],
    "aeolian": ["minorRock", "minorBluesLoop"],
    "dorian": ["dorianVamp", "minorRock"],
    "phrygian": ["phrygianVamp", "minorRock"],
    "lydian": ["lydianLift", "ionianPop"],
    "mixolydian": ["mixolydianDrive", "blues12"],
}

ADDITIONAL_TEMPLATE_IDS_BY_TONE: Dict[str, List[str]] = {
    "flatFive": ["blues12"],
    "flatSix": ["minorRock"],
    "flatSeven": ["mixolydianDrive"],
    "majorThird": ["blues12"],
    "majorSecond": ["dorianVamp"],
    "majorSixth": ["dorianVamp"],
}

# Hexatonic view → flavour when the tonal centre is major
MAJOR_FLAVOR_BY_HEXATONIC = {
    "dorian": "lydian",
    "aeolian": "ionian",
    "phrygian": "mixolydian",
}

MAX_PRACTICE_PROGRESSIONS = 6


# =============================================================================
# TARGET TONES
# =============================================================================

TARGET_TONES: Dict[str, TargetTone] = {
    tone.id: tone
    for tone in [
        TargetTone(id="flatFive", label="Add b5 targets", description="Classic blue note bite",
                   interval=6, reference_root="minor", prefer_flat_name=True),
        TargetTone(id="flatSix", label="Add b6 targets", description="Dark passing color",
                   interval=8, reference_root="minor", prefer_flat_name=True),
        TargetTone(id="flatSeven", label="Add b7 targets", description="Dominant blues pull",
                   interval=10, reference_root="major", prefer_flat_name=True),
        TargetTone(id="majorThird", label="Add M3 targets", description="Vocal sweet vs sour color",
                   interval=4, reference_root="minor"),
        TargetTone(id="majorSecond", label="Add 2/9 targets", description="Smooth, floating modern blues",
                   interval=2, reference_root="minor"),
        TargetTone(id="majorSixth", label="Add 6 targets", description="Gospel/soul hopeful color",
                   interval=9, reference_root="minor"),
    ]
}


def get_target_tone_pitch_class(tone_id: str, major_center_key: str, minor_center_key: str) -> int:
    """
    Pitch class of a target tone for a major key and its relative minor.

    Examples (G major / E minor):
        flatSeven  → 5  (F)
        flatFive   → 10 (A#/Bb)
        majorThird → 8  (G#)

    Raises:
        KeyError: If the tone id is unknown
        UnknownNoteError: If either key is not a note name
    """
    tone = TARGET_TONES[tone_id]
    reference = major_center_key if tone.reference_root == "major" else minor_center_key
    return (to_pitch_class(reference) + tone.interval) % 12


def get_target_tone_note_name(tone_id: str, major_center_key: str, minor_center_key: str) -> str:
    """Note name of a target tone, flat-spelled for the flat-side tones."""
    pc = get_target_tone_pitch_class(tone_id, major_center_key, minor_center_key)
    return to_flat_name(pc) if TARGET_TONES[tone_id].prefer_flat_name else to_sharp_name(pc)


# =============================================================================
# PRACTICE PROGRESSIONS
# =============================================================================

def get_flavor_id(scale_family: str, tonal_center_mode: str, hexatonic_mode: str) -> str:
    """Flavour used to choose the base progression templates."""
    if scale_family == "major":
        return "ionian" if tonal_center_mode == "major" else "aeolian"

    if hexatonic_mode == "off":
        return "majorPentatonic" if tonal_center_mode == "major" else "minorPentatonic"

    if tonal_center_mode == "minor":
        return hexatonic_mode

    return MAJOR_FLAVOR_BY_HEXATONIC[hexatonic_mode]


def dedupe_template_ids(ids: Iterable[str]) -> List[str]:
    """Known template ids in first-seen order."""
    seen = set()
    output = []
    for template_id in ids:
        if template_id not in PROGRESSION_TEMPLATES or template_id in seen:
            continue
        seen.add(template_id)
        output.append(template_id)
    return output


def render_template(template_id: str, key: str) -> PracticeProgression:
    template = PROGRESSION_TEMPLATES[template_id]
    return PracticeProgression(
        id=template_id,
        title=template["title"],
        roman_numerals=template["roman_numerals"],
        chord_names=render_roman_progression_to_chords(template["roman_numerals"], key),
        why_it_fits=template["why_it_fits"],
    )


def get_practice_progressions(context: ProgressionContext) -> List[PracticeProgression]:
    """
    Recommend up to six progressions for a practice context.

    Target tones are applied in order, each pushing its templates to the
    front, so the last active tone wins the first slot. A hexatonic view
    then puts its own vamp ahead of everything.

    Args:
        context: Scale family, tonal centre, hexatonic view and target tones

    Returns:
        Progressions rendered in the tonal centre's key
    """
    tonal_key = (
        context.major_center_key if context.tonal_center_mode == "major"
        else context.minor_center_key
    )
    flavor_id = get_flavor_id(context.scale_family, context.tonal_center_mode, context.hexatonic_mode)
    template_ids = list(BASE_TEMPLATE_IDS_BY_FLAVOR.get(flavor_id, []))

    for tone_id in context.active_target_tones:
        additions = ADDITIONAL_TEMPLATE_IDS_BY_TONE.get(tone_id)
        if not additions:
            continue
        template_ids = list(additions) + template_ids

    if context.hexatonic_mode != "off":
        vamp = "lydianLift" if context.tonal_center_mode == "major" else "dorianVamp"
        template_ids.insert(0, vamp)

    return [
        render_template(template_id, tonal_key)
        for template_id in dedupe_template_ids(template_ids)[:MAX_PRACTICE_PROGRESSIONS]
    ]


# =============================================================================
# CHORD CHEAT SHEET
# =============================================================================

CHORD_SYMBOL_REGEX = re.compile(r"^([A-G][#b♯♭]?)(.*)$")


def parse_chord_symbol(symbol: str) -> Optional[Tuple[str, str]]:
    """
    Split a chord symbol into root and catalog formula id.

    Examples:
        parse_chord_symbol("E7")     → ('E', '7')
        parse_chord_symbol("Bbmaj7") → ('Bb', 'maj7')
        parse_chord_symbol("Am")     → ('A', 'minor')
        parse_chord_symbol("H7")     → None
    """
    match = CHORD_SYMBOL_REGEX.match(symbol)
    if not match:
        return None

    root, suffix = match.group(1), match.group(2)
    formula_id = resolve_chord_formula_id(suffix) if suffix else "major"
    if formula_id is None:
        return None
    return root, formula_id


def get_chord_symbol_notes(symbol: str) -> Optional[List[str]]:
    """Chord tones of a symbol, flat-spelled for flat roots and flat keys."""
    parsed = parse_chord_symbol(symbol)
    if parsed is None:
        return None

    root, formula_id = parsed
    try:
        pitch_classes = build_chord(root, formula_id)
    except FretboardError:
        return None

    spell = to_flat_name if uses_flats_for_key(root) else to_sharp_name
    return [spell(pc) for pc in pitch_classes]


def get_chord_cheat_sheet_data(progressions: Iterable[PracticeProgression]) -> ChordCheatSheetData:
    """
    Chord tones for every distinct chord in the progressions.

    Chords and notes are listed in order of first appearance. Bar lines and
    symbols that cannot be parsed are skipped.
    """
    entries: List[ChordCheatSheetEntry] = []
    seen_symbols = set()
    unique_notes: List[str] = []

    for progression in progressions:
        for symbol in progression.chord_names.split():
            if symbol == BAR_LINE or symbol in seen_symbols:
                continue
            seen_symbols.add(symbol)

            notes = get_chord_symbol_notes(symbol)
            if notes is None:
                continue

            entries.append(ChordCheatSheetEntry(chord_symbol=symbol, notes=notes))
            for note in notes:
                if note not in unique_notes:
                    unique_notes.append(note)

    return ChordCheatSheetData(entries=entries, unique_notes=unique_notes)
