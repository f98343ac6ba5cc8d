"""
Unit tests for the fairness tracker and split scoring.
"""
from tournaments.fairness import (
    FairnessTracker, ScoringWeights, Split, score_singles_pair, score_split, splits_of,
)


class TestFairnessTracker:
    """Tests for counter bookkeeping."""

    def test_starts_at_zero(self):
        tracker = FairnessTracker(["a", "b", "c", "d"])
        assert tracker.partnership("a", "b") == 0
        assert tracker.opposition("a", "c") == 0
        assert tracker.game_count("d") == 0

    def test_record_updates_all_counters(self):
        """A match bumps both partnerships, 4 oppositions and 4 game counts."""
        tracker = FairnessTracker(["a", "b", "c", "d"])
        tracker.record(("a", "b"), ("c", "d"))

        assert tracker.partnership("a", "b") == 1
        assert tracker.partnership("d", "c") == 1
        assert tracker.partnership("a", "c") == 0
        for p1 in ("a", "b"):
            for p2 in ("c", "d"):
                assert tracker.opposition(p1, p2) == 1
                assert tracker.opposition(p2, p1) == 1
        assert all(tracker.game_count(p) == 1 for p in "abcd")

    def test_summary(self):
        tracker = FairnessTracker(["a", "b", "c", "d"])
        tracker.record(("a", "b"), ("c", "d"))
        summary = tracker.summary()
        # 2 partnerships over 6 possible pairs
        assert summary["average_partnerships_per_pair"] == 2 / 6
        assert summary["games_per_player"] == {"a": 1, "b": 1, "c": 1, "d": 1}

    def test_summary_partnership_distribution(self):
        """Each player is credited with every partnership they were part of."""
        tracker = FairnessTracker(["a", "b", "c", "d", "e"])
        tracker.record(("a", "b"), ("c", "d"))
        tracker.record(("a", "c"), ("b", "d"))
        tracker.record(("a", "b"), ("c", "d"))

        assert tracker.summary()["partnerships_per_player"] == {
            "a": 3, "b": 3, "c": 3, "d": 3, "e": 0,
        }

    def test_from_matches(self):
        class Row:
            def __init__(self, side1, side2):
                self.side1, self.side2 = side1, side2

        tracker = FairnessTracker.from_matches(
            ["a", "b", "c", "d", "e"],
            [Row(["a", "b"], ["c", "d"]), Row(["a"], ["e"])],
        )
        assert tracker.partnership("a", "b") == 1
        assert tracker.opposition("a", "e") == 1
        assert tracker.game_count("a") == 2
        assert tracker.game_count("e") == 1


class TestScoreSplit:
    """Tests for the split desirability score."""

    def test_fresh_split_score(self):
        """With empty history: 2*100 + 4*50 + 4*25."""
        tracker = FairnessTracker()
        assert score_split(Split(("a", "b"), ("c", "d")), tracker) == 500

    def test_repeat_partnership_penalized(self):
        tracker = FairnessTracker()
        tracker.record(("a", "b"), ("c", "d"))
        # partnerships ab/cd repeat (-20), oppositions all repeat (-20), loads (-8)
        assert score_split(Split(("a", "b"), ("c", "d")), tracker) == 452

    def test_prefers_split_without_repeated_partnership(self):
        """Once a and b have partnered, any split separating them scores higher."""
        tracker = FairnessTracker()
        tracker.partnerships[frozenset(("a", "b"))] = 1

        scores = {split: score_split(split, tracker) for split in splits_of(("a", "b", "c", "d"))}
        best = max(scores, key=scores.get)
        assert set(best.team1) != {"a", "b"} and set(best.team2) != {"a", "b"}
        repeated = Split(("a", "b"), ("c", "d"))
        assert all(score > scores[repeated] for split, score in scores.items() if split != repeated)

    def test_scoring_does_not_mutate_tracker(self):
        tracker = FairnessTracker(["a", "b", "c", "d"])
        score_split(Split(("a", "b"), ("c", "d")), tracker)
        assert sum(tracker.partnerships.values()) == 0
        assert sum(tracker.games.values()) == 0

    def test_custom_weights(self):
        weights = ScoringWeights(partnership_base=0, opposition_base=0, load_base=0)
        tracker = FairnessTracker()
        tracker.record(("a", "b"), ("c", "d"))
        # -10*2 partnerships, -5*4 oppositions, -2*4 loads
        assert score_split(Split(("a", "b"), ("c", "d")), tracker, weights) == -48

    def test_splits_of_four_players(self):
        splits = splits_of(("a", "b", "c", "d"))
        assert len(splits) == 3
        teams = {frozenset(s.team1) for s in splits}
        assert teams == {frozenset("ab"), frozenset("ac"), frozenset("ad")}
        for s in splits:
            assert set(s.players) == {"a", "b", "c", "d"}


class TestScoreSinglesPair:

    def test_fresh_pair(self):
        assert score_singles_pair("a", "b", FairnessTracker()) == 150

    def test_rematch_and_load_penalized(self):
        tracker = FairnessTracker()
        tracker.record(("a",), ("b",))
        # -5 per game for each player, -20 for the rematch
        assert score_singles_pair("a", "b", tracker) == 120
        assert score_singles_pair("a", "c", tracker) == 145
