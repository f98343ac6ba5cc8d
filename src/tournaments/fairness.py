from collections import Counter
from dataclasses import dataclass
from itertools import combinations
from typing import FrozenSet, Iterable, NamedTuple, Sequence, Tuple


def pair_key(a: str, b: str) -> FrozenSet[str]:
    return frozenset((a, b))


class Split(NamedTuple):
    """Four players divided into two teams of two."""
    team1: Tuple[str, str]
    team2: Tuple[str, str]

    @property
    def players(self) -> Tuple[str, ...]:
        return self.team1 + self.team2


def splits_of(players: Sequence[str]) -> Tuple[Split, Split, Split]:
    """The 3 ways to divide 4 players into two unordered teams of two."""
    a, b, c, d = players
    return (
        Split((a, b), (c, d)),
        Split((a, c), (b, d)),
        Split((a, d), (b, c)),
    )


@dataclass(frozen=True)
class ScoringWeights:
    partnership_base: int = 100
    partnership_penalty: int = 10
    opposition_base: int = 50
    opposition_penalty: int = 5
    load_base: int = 25
    load_penalty: int = 2


DEFAULT_WEIGHTS = ScoringWeights()


class FairnessTracker:
    """Partnership, opposition and game counts for one generation run."""

    def __init__(self, players: Iterable[str] = ()):
        self.partnerships: Counter = Counter()
        self.oppositions: Counter = Counter()
        self.games: Counter = Counter({p: 0 for p in players})

    @classmethod
    def from_matches(cls, players: Iterable[str], matches: Iterable) -> "FairnessTracker":
        """Rebuild the counters from matches already on the schedule."""
        tracker = cls(players)
        for m in matches:
            tracker.record(m.side1, m.side2)
        return tracker

    def partnership(self, a: str, b: str) -> int:
        return self.partnerships[pair_key(a, b)]

    def opposition(self, a: str, b: str) -> int:
        return self.oppositions[pair_key(a, b)]

    def game_count(self, player: str) -> int:
        return self.games[player]

    def record(self, team1: Sequence[str], team2: Sequence[str]):
        for team in (team1, team2):
            for a, b in combinations(team, 2):
                self.partnerships[pair_key(a, b)] += 1
        for p1 in team1:
            for p2 in team2:
                self.oppositions[pair_key(p1, p2)] += 1
        for pid in (*team1, *team2):
            self.games[pid] += 1

    def summary(self) -> dict:
        players = list(self.games)
        pair_count = len(players) * (len(players) - 1) // 2
        return {
            "average_partnerships_per_pair": (
                sum(self.partnerships.values()) / pair_count if pair_count else 0.0
            ),
            "games_per_player": dict(self.games),
            "partnerships_per_player": self.partnership_distribution(),
        }

    def partnership_distribution(self) -> dict:
        """Total partnerships each player has been part of."""
        dist = {p: 0 for p in self.games}
        for key, count in self.partnerships.items():
            for pid in key:
                dist[pid] = dist.get(pid, 0) + count
        return dist


def score_split(split: Split, tracker: FairnessTracker,
                weights: ScoringWeights = DEFAULT_WEIGHTS) -> int:
    """
    Desirability of a split given the history so far (higher is better).
    Rewards fresh partnerships, fresh oppositions and players with fewer games.
    Only the ordering between candidates matters; the value may go negative.
    """
    w = weights
    score = 0
    for team in (split.team1, split.team2):
        score += w.partnership_base - w.partnership_penalty * tracker.partnership(*team)
    for p1 in split.team1:
        for p2 in split.team2:
            score += w.opposition_base - w.opposition_penalty * tracker.opposition(p1, p2)
    for pid in split.players:
        score += w.load_base - w.load_penalty * tracker.game_count(pid)
    return score


def score_singles_pair(p1: str, p2: str, tracker: FairnessTracker) -> int:
    """Singles counterpart of score_split: balance games, avoid rematches."""
    game_balance = 100 - 5 * tracker.game_count(p1) - 5 * tracker.game_count(p2)
    return game_balance + 50 - 20 * tracker.opposition(p1, p2)
