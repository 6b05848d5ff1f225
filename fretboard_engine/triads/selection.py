"""
Triad Selection - Choosing Four Positions per String Group

Two strategies, tried in order:

1. Coordinated chains. A chain is one voicing per string group where each
   pair of neighbouring groups shares the same frets on their two common
   strings. Four chains are picked so that the whole neck moves through the
   inversion cycle together: the inversion with the widest spread takes
   positions 0 and 3, the other two fill positions 1 and 2.

2. Per-group fallback. Used when fewer than four chains exist or no valid
   pick can be made. Each group walks the inversion cycle on its own,
   starting from its lowest voicing, and if even that fails takes evenly
   spaced voicings with no inversion constraint.
"""

from typing import List, Optional, Sequence, Tuple

from fretboard_engine.errors import EngineInvariantViolation
from fretboard_engine.triads.voicings import INVERSION_CYCLE, VoicingCandidate, next_inversion


POSITIONS_PER_GROUP = 4

Chain = Tuple[VoicingCandidate, ...]


# =============================================================================
# PART 1: CHAIN HELPERS
# =============================================================================
#
# A chain holds one voicing per string group, lowest group first.
#

def percentile_index(count: int, fraction: float) -> int:
    """Index of the `fraction` percentile in a sorted list of `count` items."""
    return int(fraction * (count - 1) + 0.5)


def is_strictly_increasing(voicings: Sequence[VoicingCandidate]) -> bool:
    return all(a.avg_fret < b.avg_fret for a, b in zip(voicings, voicings[1:]))


def are_chain_compatible(lower: VoicingCandidate, upper: VoicingCandidate) -> bool:
    """True when `upper` starts with the same two strings and frets `lower` ends with."""
    return lower.strings[1:] == upper.strings[:2] and lower.frets[1:] == upper.frets[:2]


def chain_average(chain: Chain) -> float:
    return sum(v.avg_fret for v in chain) / len(chain)


def chain_max_fret(chain: Chain) -> int:
    return max(v.max_fret for v in chain)


def chain_sort_key(chain: Chain):
    return (chain_average(chain), tuple(v.frets for v in chain))


# =============================================================================
# PART 2: COORDINATED SELECTION
# =============================================================================
#
# The preferred strategy. All four groups move through the inversion cycle
# together, so a position reads as one hand shape across the neck.
#

def find_voicing_chains(group_voicings: Sequence[Sequence[VoicingCandidate]]) -> List[Chain]:
    """
    Every complete chain across the string groups, sorted by average fret.

    Depth-first: each group-0 voicing is extended with every compatible
    voicing of the next group until all groups are covered.
    """
    if not group_voicings:
        return []

    chains: List[Chain] = []

    def extend(chain: List[VoicingCandidate]) -> None:
        if len(chain) == len(group_voicings):
            chains.append(tuple(chain))
            return
        for candidate in group_voicings[len(chain)]:
            if are_chain_compatible(chain[-1], candidate):
                extend(chain + [candidate])

    for first in group_voicings[0]:
        extend([first])

    return sorted(chains, key=chain_sort_key)


def select_coordinated_chains(
    chains: Sequence[Chain],
    high_position_fret: int = 16,
    verbose: bool = False,
) -> Optional[List[Chain]]:
    """
    Pick four chains that walk the inversion cycle up the neck.

    Returns:
        Four chains (positions 0-3) or None when no valid pick exists
    """
    if len(chains) < POSITIONS_PER_GROUP:
        if verbose:
            print(f"  Only {len(chains)} complete chains, need {POSITIONS_PER_GROUP}")
        return None

    by_category = {
        inversion: [chain for chain in chains if chain[0].inversion == inversion]
        for inversion in INVERSION_CYCLE
    }

    spans = []
    for order, inversion in enumerate(INVERSION_CYCLE):
        members = by_category[inversion]
        if members:
            spans.append((chain_average(members[-1]) - chain_average(members[0]), -order, inversion))
    paired = max(spans)[2]
    paired_chains = by_category[paired]

    if len(paired_chains) < 2:
        if verbose:
            print(f"  Paired inversion '{paired}' has a single chain")
        return None

    low = paired_chains[0]
    upper = paired_chains[1:]
    comfortable = [chain for chain in upper if chain_max_fret(chain) <= high_position_fret]
    high = (comfortable or upper)[-1]

    averages = [chain_average(chain) for chain in chains]
    selected = [low]

    for step, fraction in ((1, 0.25), (2, 0.5)):
        inversion = next_inversion(paired, step)
        target = averages[percentile_index(len(chains), fraction)]
        floor = chain_average(selected[-1])
        ceiling = chain_average(high)

        candidates = [
            chain for chain in by_category[inversion]
            if floor < chain_average(chain) < ceiling
        ]
        if not candidates:
            if verbose:
                print(f"  No '{inversion}' chain between avg {floor:.2f} and {ceiling:.2f}")
            return None

        selected.append(min(
            candidates,
            key=lambda chain: (abs(chain_average(chain) - target), chain_average(chain), chain_sort_key(chain)[1]),
        ))

    selected.append(high)

    if verbose:
        print(f"  Paired inversion: {paired}")
        for position, chain in enumerate(selected):
            print(f"  Position {position}: avg {chain_average(chain):.2f} "
                  f"{[list(v.frets) for v in chain]}")

    return selected


# =============================================================================
# PART 3: PER-GROUP FALLBACK
# =============================================================================
#
# Only reached when the chains cannot supply four ordered positions.
#

def select_quartile_positions(ordered: Sequence[VoicingCandidate]) -> List[VoicingCandidate]:
    """Evenly spaced voicings over a sorted list, no inversion constraint."""
    count = len(ordered)
    wanted = min(POSITIONS_PER_GROUP, count)

    indices: List[int] = []
    for slot in range(POSITIONS_PER_GROUP):
        index = percentile_index(count, slot / (POSITIONS_PER_GROUP - 1))
        if index not in indices:
            indices.append(index)

    # Duplicates collapse on short lists; top up with the lowest unused
    for index in range(count):
        if len(indices) >= wanted:
            break
        if index not in indices:
            indices.append(index)

    return [ordered[index] for index in sorted(indices)]


def select_group_positions(
    voicings: Sequence[VoicingCandidate],
    high_position_fret: int = 16,
    verbose: bool = False,
) -> List[VoicingCandidate]:
    """
    Four positions for a single string group.

    The inversion sequence starts at the lowest voicing's inversion and
    steps through the cycle. Positions 0-2 aim at the 0th, 25th and 50th
    percentile average fret; position 3 takes the highest voicing whose
    frets stay at or below `high_position_fret` when one exists. Each pick
    must sit strictly above the previous one, with backtracking.

    Raises:
        EngineInvariantViolation: If the group has no voicings at all
    """
    ordered = sorted(voicings, key=VoicingCandidate.sort_key)
    if not ordered:
        raise EngineInvariantViolation("String group has no valid triad voicings")

    averages = [v.avg_fret for v in ordered]
    start = ordered[0].inversion
    sequence = [next_inversion(start, step) for step in range(POSITIONS_PER_GROUP)]
    targets = [averages[percentile_index(len(ordered), fraction)] for fraction in (0.0, 0.25, 0.5)]
    by_inversion = {
        inversion: [v for v in ordered if v.inversion == inversion]
        for inversion in INVERSION_CYCLE
    }

    def search(chosen: List[VoicingCandidate]) -> Optional[List[VoicingCandidate]]:
        position = len(chosen)
        if position == POSITIONS_PER_GROUP:
            return chosen

        floor = chosen[-1].avg_fret if chosen else float("-inf")
        pool = [v for v in by_inversion[sequence[position]] if v.avg_fret > floor]

        if position == POSITIONS_PER_GROUP - 1:
            pool.sort(key=lambda v: (v.max_fret > high_position_fret, -v.avg_fret, v.frets))
        else:
            target = targets[position]
            pool.sort(key=lambda v: (abs(v.avg_fret - target), v.avg_fret, v.frets))

        for candidate in pool:
            found = search(chosen + [candidate])
            if found is not None:
                return found
        return None

    selected = search([])
    if selected is not None:
        return selected

    if verbose:
        print(f"  Inversion walk {sequence} failed; using quartile selection")
    return select_quartile_positions(ordered)


# =============================================================================
# PART 4: MAIN ENTRY POINT
# =============================================================================

def select_triad_positions(
    group_voicings: Sequence[Sequence[VoicingCandidate]],
    high_position_fret: int = 16,
    verbose: bool = False,
) -> List[List[VoicingCandidate]]:
    """
    Choose four positions for every string group.

    Returns:
        One list per group, each ordered by position
    """
    for index, voicings in enumerate(group_voicings):
        if not voicings:
            raise EngineInvariantViolation(f"String group {index} has no valid triad voicings")

    chains = find_voicing_chains(group_voicings)
    if verbose:
        print(f"  Found {len(chains)} complete chains")

    selected_chains = select_coordinated_chains(chains, high_position_fret, verbose)
    if selected_chains is not None:
        per_group = [
            [chain[group] for chain in selected_chains]
            for group in range(len(group_voicings))
        ]
        if all(is_strictly_increasing(voicings) for voicings in per_group):
            return per_group
        if verbose:
            print("  Chained positions are not ascending in every group")

    if verbose:
        print("  Falling back to per-group selection")
    return [
        select_group_positions(voicings, high_position_fret, verbose)
        for voicings in group_voicings
    ]
