import logging
import math
import random
from itertools import combinations
from typing import Dict, List, Optional, Tuple

from tournaments.fairness import (
    DEFAULT_WEIGHTS, FairnessTracker, ScoringWeights, Split,
    pair_key, score_singles_pair, score_split, splits_of,
)
from tournaments.models import Format, Match, TournamentType, generate_id
from tournaments.exceptions import ValidationError

logger = logging.getLogger(__name__)

ROUND_ROBIN_MINUTES_PER_MATCH = 9
ELIMINATION_MINUTES_PER_MATCH = 10
QUICK_PLAY_SINGLES_MINUTES_PER_ROUND = 8
QUICK_PLAY_DOUBLES_MINUTES_PER_ROUND = 10


def _shuffled(items, rng: random.Random) -> list:
    items = list(items)
    rng.shuffle(items)
    return items


def _number_matches(pairings: List[Tuple[int, List[str], List[str], Optional[int]]]) -> List[Match]:
    """Turn (round, side1, side2, court) tuples into matches numbered in order."""
    return [
        Match(
            id=generate_id(),
            round=rnd,
            match_number=number,
            side1=list(side1),
            side2=list(side2),
            court=court,
        )
        for number, (rnd, side1, side2, court) in enumerate(pairings, start=1)
    ]


def generate_singles_round_robin(players: List[str], rng: Optional[random.Random] = None) -> List[Match]:
    """Everyone plays everyone once, all in round 1, in random play order."""
    rng = rng or random.Random()
    order = _shuffled(players, rng)
    logger.debug("Generating singles round-robin for %d players", len(order))

    pairings = [(1, [p1], [p2], None) for p1, p2 in combinations(order, 2)]
    rng.shuffle(pairings)
    return _number_matches(pairings)


def generate_doubles_rotation(players: List[str], rng: Optional[random.Random] = None) -> List[Match]:
    """
    Full partner rotation: every pair of players partners once, each
    player ending up with at most n-1 games. Partnerships that cannot be
    matched against a free opposing pair are left out of the schedule.
    """
    rng = rng or random.Random()
    n = len(players)
    game_limit = n - 1
    games_played: Dict[str, int] = {p: 0 for p in players}

    order = _shuffled(players, rng)
    partnerships = _shuffled(combinations(order, 2), rng)
    used: set = set()
    committed: List[Tuple[Tuple[str, str], Tuple[str, str]]] = []

    def available(pair) -> bool:
        return (pair_key(*pair) not in used
                and all(games_played[p] < game_limit for p in pair))

    for partnership in partnerships:
        if not available(partnership):
            continue

        best_opponent = None
        best_score = -1
        for opponent in partnerships:
            if not available(opponent) or set(partnership) & set(opponent):
                continue
            need = sum(game_limit - games_played[p] for p in (*partnership, *opponent))
            if need > best_score:
                best_score = need
                best_opponent = opponent

        if best_opponent is None:
            continue

        committed.append((partnership, best_opponent))
        used.add(pair_key(*partnership))
        used.add(pair_key(*best_opponent))
        for pid in (*partnership, *best_opponent):
            games_played[pid] += 1

    unscheduled = len(partnerships) - 2 * len(committed)
    if unscheduled:
        logger.info("Partner rotation left %d partnerships unscheduled", unscheduled)
    logger.info("Generated %d rotation matches with game distribution: %s",
                len(committed), games_played)

    matches_per_round = max(n // 4, 1)
    pairings = [
        (i // matches_per_round + 1, team1, team2, None)
        for i, (team1, team2) in enumerate(committed)
    ]
    return _number_matches(pairings)


def _best_split(available: List[str], tracker: FairnessTracker, weights: ScoringWeights) -> Split:
    best: Optional[Split] = None
    best_score = 0
    for group in combinations(available, 4):
        for split in splits_of(group):
            score = score_split(split, tracker, weights)
            if best is None or score > best_score:
                best, best_score = split, score
    return best


def _doubles_round(players: List[str], courts: int, tracker: FairnessTracker,
                   weights: ScoringWeights, rng: random.Random) -> List[Tuple[int, Split]]:
    """One greedy doubles round; the tracker is updated once the round is complete."""
    courts_per_round = min(len(players) // 4, courts)
    round_order = _shuffled(players, rng)
    used: set = set()
    round_splits: List[Tuple[int, Split]] = []

    for court in range(1, courts_per_round + 1):
        available = [p for p in round_order if p not in used]
        if len(available) < 4:
            break
        rng.shuffle(available)
        split = _best_split(available, tracker, weights)
        round_splits.append((court, split))
        used.update(split.players)

    for _, split in round_splits:
        tracker.record(split.team1, split.team2)
    return round_splits


def _singles_round(players: List[str], courts: int, tracker: FairnessTracker,
                   rng: random.Random) -> List[Tuple[int, Tuple[str], Tuple[str]]]:
    """One greedy singles round: best scoring free pair per court."""
    matches_per_round = min(len(players) // 2, courts)
    round_order = _shuffled(players, rng)
    used: set = set()
    round_pairs = []

    for court in range(1, matches_per_round + 1):
        available = [p for p in round_order if p not in used]
        if len(available) < 2:
            break
        best = None
        best_score = 0
        for p1, p2 in combinations(available, 2):
            score = score_singles_pair(p1, p2, tracker)
            if best is None or score > best_score:
                best, best_score = (p1, p2), score
        round_pairs.append((court, (best[0],), (best[1],)))
        used.update(best)

    for _, side1, side2 in round_pairs:
        tracker.record(side1, side2)
    return round_pairs


def generate_doubles_bounded(
    players: List[str],
    max_rounds: int,
    courts: int,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    rng: Optional[random.Random] = None,
) -> List[Match]:
    """
    Greedy round-by-round doubles schedule. Each court slot gets the best
    scoring split among all groups of 4 still free this round; the fairness
    counters are updated once the round is complete.
    """
    rng = rng or random.Random()
    tracker = FairnessTracker(players)
    logger.debug("Generating bounded doubles: %d players, %d rounds, %d courts",
                 len(players), max_rounds, courts)

    pairings = []
    for round_num in range(1, max_rounds + 1):
        for court, split in _doubles_round(players, courts, tracker, weights, rng):
            pairings.append((round_num, split.team1, split.team2, court))

    logger.info("Generated %d bounded doubles matches: %s", len(pairings), tracker.summary())
    return _number_matches(pairings)


def generate_quick_play_round(
    format: Format,
    players: List[str],
    round_num: int,
    courts: int,
    tracker: FairnessTracker,
    start_number: int = 1,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    rng: Optional[random.Random] = None,
) -> List[Match]:
    """
    A single quick-play round built against the history in ``tracker``,
    which is updated with the new matches. Match numbers continue from
    ``start_number``.
    """
    rng = rng or random.Random()
    if format == Format.DOUBLES:
        pairings = [
            (round_num, split.team1, split.team2, court)
            for court, split in _doubles_round(players, courts, tracker, weights, rng)
        ]
    else:
        pairings = [
            (round_num, side1, side2, court)
            for court, side1, side2 in _singles_round(players, courts, tracker, rng)
        ]
    matches = _number_matches(pairings)
    for m in matches:
        m.match_number += start_number - 1
    logger.debug("Quick play round %d: %d matches", round_num, len(matches))
    return matches


def generate_elimination_round(players: List[str], format: Format,
                               rng: Optional[random.Random] = None) -> List[Match]:
    """First round only; an odd player or team left over gets no match."""
    rng = rng or random.Random()
    if format == Format.SINGLES:
        entries = [[p] for p in _shuffled(players, rng)]
    else:
        order = _shuffled(players, rng)
        teams = [order[i:i + 2] for i in range(0, len(order) - 1, 2)]
        entries = _shuffled(teams, rng)

    pairings = [
        (1, entries[i], entries[i + 1], None)
        for i in range(0, len(entries) - 1, 2)
    ]
    return _number_matches(pairings)


def estimate_duration(player_count: int, format: Format, type: TournamentType,
                      max_rounds: Optional[int] = None, courts: int = 2) -> int:
    """Advisory total minutes for a tournament."""
    n = player_count
    if type != TournamentType.ROUND_ROBIN:
        matches = n - 1 if format == Format.SINGLES else n // 2 - 1
        return matches * ELIMINATION_MINUTES_PER_MATCH

    if format == Format.SINGLES:
        total = n * (n - 1) // 2
        matches = min(max_rounds, total) if max_rounds else total
    else:
        matches_per_round = min(n // 4, courts)
        if max_rounds:
            matches = max_rounds * matches_per_round
        elif matches_per_round:
            partnerships = n * (n - 1) // 2
            matches = math.ceil(partnerships / matches_per_round) * matches_per_round
        else:
            matches = 0
    return matches * ROUND_ROBIN_MINUTES_PER_MATCH


def estimate_quick_play_duration(player_count: int, format: Format, courts: int, rounds: int) -> int:
    """Quick play rounds run in parallel across courts, so time goes by round."""
    if format == Format.DOUBLES:
        if min(player_count // 4, courts) == 0:
            return 0
        return rounds * QUICK_PLAY_DOUBLES_MINUTES_PER_ROUND
    if min(player_count // 2, courts) == 0:
        return 0
    return rounds * QUICK_PLAY_SINGLES_MINUTES_PER_ROUND


def generate_matches(
    type: TournamentType,
    format: Format,
    players: List[str],
    max_rounds: Optional[int] = None,
    courts: int = 2,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    rng: Optional[random.Random] = None,
) -> List[Match]:
    if type == TournamentType.ROUND_ROBIN:
        if format == Format.SINGLES:
            return generate_singles_round_robin(players, rng)
        if format == Format.DOUBLES:
            if max_rounds:
                return generate_doubles_bounded(players, max_rounds, courts, weights, rng)
            return generate_doubles_rotation(players, rng)
    elif type in (TournamentType.SINGLE_ELIMINATION, TournamentType.DOUBLE_ELIMINATION):
        if format in (Format.SINGLES, Format.DOUBLES):
            return generate_elimination_round(players, format, rng)
    raise ValidationError(f"Unsupported tournament: {type} / {format}")
