"""
Scoring Tests - vote tally, winners and point awards.

Run with: pytest tests/test_scoring.py -v
"""
from game.models import WinnerEntry
from game.scoring import compute_results, tally_votes


class TestTally:
    """Vote counting."""

    def test_presenters_without_votes_count_zero(self):
        counts = tally_votes({"v1": "A"}, ["A", "B", "C"])
        assert counts == {"A": 1, "B": 0, "C": 0}

    def test_votes_for_non_presenters_are_ignored(self):
        counts = tally_votes({"v1": "A", "v2": "ghost"}, ["A", "B"])
        assert counts == {"A": 1, "B": 0}


class TestComputeResults:
    """Winners, ties and point awards."""

    def test_tie_produces_multiple_winners(self):
        results = compute_results({"v1": "A", "v2": "B"}, ["A", "B", "C"], "A")

        assert results.winners == [
            WinnerEntry(presenter_id="A", votes=1, is_real_owner=True, points_awarded=3),
            WinnerEntry(presenter_id="B", votes=1, is_real_owner=False, points_awarded=4),
        ]
        assert results.correct_voters == ["v1"]
        assert results.voter_points_awarded == 1
        assert results.real_owner_votes == 1

    def test_lone_owner_without_votes_auto_wins(self):
        results = compute_results({}, ["A"], "A")

        assert results.winners == [
            WinnerEntry(presenter_id="A", votes=0, is_real_owner=True, points_awarded=3),
        ]
        assert results.correct_voters == []

    def test_outright_bluff_win_pays_minority_bonus(self):
        results = compute_results({"v1": "B", "v2": "B", "v3": "A"}, ["A", "B"], "A")

        assert results.winner_ids() == ["B"]
        assert results.winners[0].points_awarded == 4
        assert results.winners[0].votes == 2
        assert results.correct_voters == ["v3"]
        assert results.voter_points_awarded == 2
        assert results.real_owner_votes == 1

    def test_truth_wins_outright(self):
        results = compute_results({"v1": "A", "v2": "A", "v3": "B"}, ["A", "B"], "A")

        assert results.winner_ids() == ["A"]
        assert results.winners[0].points_awarded == 3
        assert results.correct_voters == ["v1", "v2"]
        assert results.voter_points_awarded == 1

    def test_no_votes_with_bluffers_has_no_winner(self):
        results = compute_results({}, ["A", "B"], "A")
        assert results.winners == []
        assert results.voter_points_awarded == 2

    def test_lone_bluffer_without_votes_does_not_auto_win(self):
        results = compute_results({}, ["B"], "A")
        assert results.winners == []

    def test_same_inputs_same_results(self):
        first = compute_results({"v1": "B", "v2": "A", "v3": "C"}, ["A", "B", "C"], "A")
        second = compute_results({"v3": "C", "v2": "A", "v1": "B"}, ["A", "B", "C"], "A")
        assert first == second

    def test_score_deltas(self):
        results = compute_results({"v1": "B", "v2": "B", "v3": "A"}, ["A", "B"], "A")
        assert results.score_deltas() == {"B": 4, "v3": 2}
