import logging
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from database import GameORM, MatchORM, TournamentORM
from tournaments.exceptions import StorageError

logger = logging.getLogger(__name__)


class TournamentStore:
    """Thin persistence wrapper; every write is one transaction."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def atomic_write(self, added: Iterable = (), deleted: Iterable = ()):
        try:
            self.session.add_all(list(added))
            for row in deleted:
                await self.session.delete(row)
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise StorageError(str(exc)) from exc

    async def get_tournament(self, tid: str) -> Optional[TournamentORM]:
        return await self.session.get(TournamentORM, tid)

    async def query_matches(self, tid: str) -> List[MatchORM]:
        result = await self.session.execute(
            select(MatchORM)
            .where(MatchORM.tournament_id == tid)
            .order_by(MatchORM.match_number)
        )
        return list(result.scalars().all())

    async def query_games(self, tid: str) -> List[GameORM]:
        result = await self.session.execute(
            select(GameORM).where(GameORM.tournament_id == tid)
        )
        return list(result.scalars().all())
