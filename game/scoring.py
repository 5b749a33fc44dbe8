"""Vote tally and point awards for a round."""

from typing import Dict, List, Mapping, Sequence

from game.models import RoundResults, WinnerEntry


REAL_OWNER_WIN_POINTS = 3
BLUFFER_WIN_POINTS = 4
MAJORITY_VOTER_POINTS = 1
MINORITY_VOTER_POINTS = 2


def tally_votes(votes: Mapping[str, str], presenters: Sequence[str]) -> Dict[str, int]:
    """Votes received per presenter; votes for anyone else are ignored."""
    counts = {presenter_id: 0 for presenter_id in presenters}
    for target in votes.values():
        if target in counts:
            counts[target] += 1
    return counts


def find_winners(
    vote_counts: Mapping[str, int],
    presenters: Sequence[str],
    votes: Mapping[str, str],
    real_owner_id: str,
) -> List[str]:
    """Every presenter tied on the most votes, in presenter order."""
    max_votes = max(list(vote_counts.values()) + [0])
    winner_ids = [pid for pid in presenters if max_votes > 0 and vote_counts.get(pid) == max_votes]

    # A real owner presenting alone with nobody voting still wins.
    if not votes and list(presenters) == [real_owner_id]:
        winner_ids = [real_owner_id]
    return winner_ids


def compute_results(
    votes: Mapping[str, str],
    presenters: Sequence[str],
    real_owner_id: str,
) -> RoundResults:
    """Compute the outcome of a round. Pure: no store access."""

    vote_counts = tally_votes(votes, presenters)
    winner_ids = find_winners(vote_counts, presenters, votes, real_owner_id)

    winners = [
        WinnerEntry(
            presenter_id=pid,
            votes=vote_counts.get(pid, 0),
            is_real_owner=(pid == real_owner_id),
            points_awarded=REAL_OWNER_WIN_POINTS if pid == real_owner_id else BLUFFER_WIN_POINTS,
        )
        for pid in winner_ids
    ]

    correct_voters = sorted(voter for voter, target in votes.items() if target == real_owner_id)
    voter_points = MAJORITY_VOTER_POINTS if real_owner_id in winner_ids else MINORITY_VOTER_POINTS

    return RoundResults(
        real_owner_id=real_owner_id,
        real_owner_votes=vote_counts.get(real_owner_id, 0),
        winners=winners,
        correct_voters=correct_voters,
        voter_points_awarded=voter_points,
    )
