import logging
import random
from datetime import datetime, timezone
from typing import Optional, Union

import pydantic

from database import MatchORM, TournamentORM
from tournaments.exceptions import StorageError, TournamentNotFound, ValidationError
from tournaments.fairness import DEFAULT_WEIGHTS, FairnessTracker, ScoringWeights
from tournaments.functions import (
    estimate_duration, estimate_quick_play_duration, generate_matches, generate_quick_play_round,
)
from tournaments.models import (
    Format, Match, MatchStatus, Tournament, TournamentStatus, TournamentType, generate_id,
)
from tournaments.permissions import (
    CREATE_TOURNAMENTS, DELETE_TOURNAMENTS, MODIFY_TOURNAMENTS, PermissionChecker, User,
)
from tournaments.schemas import TournamentCreate
from tournaments.store import TournamentStore

logger = logging.getLogger(__name__)


def _validate(data: Union[TournamentCreate, dict]) -> TournamentCreate:
    if isinstance(data, TournamentCreate):
        return data
    try:
        return TournamentCreate.model_validate(data)
    except pydantic.ValidationError as exc:
        reason = "; ".join(
            err["msg"].removeprefix("Value error, ") for err in exc.errors()
        )
        raise ValidationError(reason) from exc


def _match_orm(tid: str, m: Match) -> MatchORM:
    return MatchORM(
        id=m.id, tournament_id=tid,
        round=m.round, match_number=m.match_number, court=m.court,
        side1=m.side1, side2=m.side2, status=m.status.value, game_id=None,
    )


def _orm_to_tournament(t_row: TournamentORM) -> Tournament:
    """Convert the ORM row (with its matches) into the Tournament dataclass."""
    matches = [
        Match(
            id=m.id, round=m.round, match_number=m.match_number,
            side1=list(m.side1), side2=list(m.side2),
            court=m.court, status=MatchStatus(m.status),
            tournament_id=m.tournament_id, game_id=m.game_id,
        )
        for m in sorted(t_row.matches, key=lambda m: m.match_number)
    ]
    return Tournament(
        id=t_row.id, name=t_row.name, description=t_row.description,
        format=Format(t_row.format), type=TournamentType(t_row.type),
        status=TournamentStatus(t_row.status),
        player_ids=list(t_row.player_ids), created_by=t_row.created_by,
        available_courts=t_row.available_courts, max_rounds=t_row.max_rounds,
        estimated_duration=t_row.estimated_duration, created_at=t_row.created_at,
        club_id=t_row.club_id, is_quick_play=bool(t_row.is_quick_play),
        current_round=t_row.current_round or 0,
        matches=matches,
    )


class TournamentManager:
    """Creates, extends and deletes tournaments together with everything derived from them."""

    def __init__(self, store: TournamentStore, permissions: PermissionChecker,
                 weights: ScoringWeights = DEFAULT_WEIGHTS,
                 rng: Optional[random.Random] = None):
        self.store = store
        self.permissions = permissions
        self.weights = weights
        self.rng = rng

    async def create_tournament(self, data: Union[TournamentCreate, dict], user: User) -> str:
        self.permissions.check(user, CREATE_TOURNAMENTS)
        spec = _validate(data)

        if spec.quick_play:
            estimated = estimate_quick_play_duration(
                len(spec.player_ids), spec.format, spec.available_courts, spec.max_rounds,
            )
            tracker = FairnessTracker(spec.player_ids)
            matches = []
            for round_num in range(1, spec.max_rounds + 1):
                matches += generate_quick_play_round(
                    spec.format, spec.player_ids, round_num, spec.available_courts,
                    tracker, start_number=len(matches) + 1,
                    weights=self.weights, rng=self.rng,
                )
            current_round = spec.max_rounds
        else:
            estimated = estimate_duration(
                len(spec.player_ids), spec.format, spec.type,
                spec.max_rounds, spec.available_courts,
            )
            matches = generate_matches(
                spec.type, spec.format, spec.player_ids,
                max_rounds=spec.max_rounds, courts=spec.available_courts,
                weights=self.weights, rng=self.rng,
            )
            current_round = 0

        tid = generate_id()
        match_orms = [_match_orm(tid, m) for m in matches]
        t_orm = TournamentORM(
            id=tid, name=spec.name, description=spec.description,
            format=spec.format.value, type=spec.type.value,
            status=TournamentStatus.ACTIVE.value,
            player_ids=list(spec.player_ids),
            created_at=datetime.now(timezone.utc), created_by=user.id,
            available_courts=spec.available_courts, max_rounds=spec.max_rounds,
            estimated_duration=estimated, club_id=spec.club_id,
            is_quick_play=spec.quick_play, current_round=current_round,
            matches=match_orms,
        )

        try:
            await self.store.atomic_write(added=[t_orm, *match_orms])
        except StorageError:
            logger.exception("Error creating tournament %r", spec.name)
            raise

        logger.info("Created tournament %s (%s %s) with %d matches, ~%d minutes",
                    tid, spec.format.value, spec.type.value, len(match_orms), estimated)
        return tid

    async def get_tournament(self, tid: str) -> Tournament:
        t_orm = await self.store.get_tournament(tid)
        if not t_orm:
            raise TournamentNotFound(tid)
        return _orm_to_tournament(t_orm)

    async def delete_tournament(self, tid: str, user: User):
        self.permissions.check(user, DELETE_TOURNAMENTS)
        logger.info("Deleting tournament %s", tid)

        t_orm = await self.store.get_tournament(tid)
        if not t_orm:
            raise TournamentNotFound(tid)
        matches = await self.store.query_matches(tid)
        games = await self.store.query_games(tid)

        try:
            await self.store.atomic_write(deleted=[*matches, *games, t_orm])
        except StorageError:
            logger.exception("Error deleting tournament %s", tid)
            raise

        logger.info("Tournament %s deleted: %d matches, %d games",
                    tid, len(matches), len(games))

    async def _quick_play_tournament(self, tid: str, user: User, action: str) -> TournamentORM:
        self.permissions.check(user, MODIFY_TOURNAMENTS)
        t_orm = await self.store.get_tournament(tid)
        if not t_orm:
            raise TournamentNotFound(tid)
        if not t_orm.is_quick_play:
            raise ValidationError(f"{action} is only available for Quick Play tournaments")
        return t_orm

    async def add_round(self, tid: str, user: User) -> int:
        """Schedule one more quick-play round against the existing history."""
        t_orm = await self._quick_play_tournament(tid, user, "Add Round")
        existing = await self.store.query_matches(tid)

        tracker = FairnessTracker.from_matches(t_orm.player_ids, existing)
        next_round = max([t_orm.current_round or 0, *(m.round for m in existing)]) + 1
        start_number = max((m.match_number for m in existing), default=0) + 1
        matches = generate_quick_play_round(
            Format(t_orm.format), list(t_orm.player_ids), next_round,
            t_orm.available_courts, tracker, start_number=start_number,
            weights=self.weights, rng=self.rng,
        )
        if not matches:
            raise ValidationError("Not enough players for another round")

        match_orms = [_match_orm(tid, m) for m in matches]
        t_orm.matches.extend(match_orms)
        t_orm.current_round = next_round
        rounds = len({m.round for m in existing}) + 1
        t_orm.estimated_duration = estimate_quick_play_duration(
            len(t_orm.player_ids), Format(t_orm.format), t_orm.available_courts, rounds,
        )

        try:
            await self.store.atomic_write(added=match_orms)
        except StorageError:
            logger.exception("Error adding round to tournament %s", tid)
            raise

        logger.info("Added round %d to tournament %s with %d matches: %s",
                    next_round, tid, len(match_orms), tracker.summary())
        return next_round

    async def delete_round(self, tid: str, round_number: int, user: User):
        """Drop a quick-play round that has not started yet."""
        t_orm = await self._quick_play_tournament(tid, user, "Delete Round")
        existing = await self.store.query_matches(tid)

        round_matches = [m for m in existing if m.round == round_number]
        if not round_matches:
            raise ValidationError(f"Round {round_number} not found")
        started = (MatchStatus.COMPLETED.value, MatchStatus.IN_PROGRESS.value)
        if any(m.status in started for m in round_matches):
            raise ValidationError("Cannot delete a round with completed or in-progress matches")
        remaining = {m.round for m in existing} - {round_number}
        if not remaining:
            raise ValidationError("Cannot delete the only round")

        for m in round_matches:
            t_orm.matches.remove(m)
        if (t_orm.current_round or 0) >= round_number:
            t_orm.current_round = max(remaining)
        t_orm.estimated_duration = estimate_quick_play_duration(
            len(t_orm.player_ids), Format(t_orm.format), t_orm.available_courts, len(remaining),
        )

        try:
            await self.store.atomic_write(deleted=round_matches)
        except StorageError:
            logger.exception("Error deleting round %d of tournament %s", round_number, tid)
            raise

        logger.info("Deleted round %d of tournament %s (%d matches)",
                    round_number, tid, len(round_matches))
