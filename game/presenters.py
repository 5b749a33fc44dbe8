"""
Choosing who presents the current photo
"""
import random
from typing import Iterable, List, Mapping, Optional

MAX_BLUFFERS = 3


def shuffle(items: List[str], rng: random.Random) -> List[str]:
    """Fisher-Yates shuffle returning a new list"""
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def rank_bluffers(
    volunteers: Iterable[str],
    real_owner_id: Optional[str],
    volunteered_counts: Mapping[str, int],
    rng: random.Random,
) -> List[str]:
    """
    Order claimants for selection: fewest previous presentations first,
    ties in random order. The real owner is never a bluffer.
    """
    candidates = sorted(set(volunteers) - {real_owner_id})
    # Random tie-break: draw a key per candidate, then sort on (count, key)
    keyed = [(volunteered_counts.get(pid, 0), rng.random(), pid) for pid in candidates]
    keyed.sort()
    return [pid for _, _, pid in keyed]


def select_presenters(
    volunteers: Iterable[str],
    real_owner_id: Optional[str],
    volunteered_counts: Mapping[str, int],
    rng: Optional[random.Random] = None,
    max_bluffers: int = MAX_BLUFFERS,
) -> List[str]:
    """
    Pick the presenters for a round.

    The real owner always presents; up to max_bluffers claimants join,
    least-frequent presenters first. The final list is shuffled so the
    presentation order says nothing about who owns the photo.

    Args:
        volunteers: Player ids who claimed the photo
        real_owner_id: Owner of the photo in play
        volunteered_counts: hasVolunteeredCount per player id
        rng: Random source (seed it for reproducible draws)
        max_bluffers: Bluffer slots

    Returns:
        Presenter ids in presentation order
    """
    rng = rng or random.Random()
    presenters: List[str] = []
    if real_owner_id:
        presenters.append(real_owner_id)

    ranked = rank_bluffers(volunteers, real_owner_id, volunteered_counts, rng)
    presenters.extend(ranked[:max_bluffers])
    return shuffle(presenters, rng)
