import os
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from dotenv import load_dotenv
from asyncpg import Connection
from uuid import uuid4
from sqlalchemy import (
    JSON, Boolean, Column, ForeignKey, Integer, String,
    func, DateTime,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, relationship

load_dotenv()

POSTGRES_USER = os.getenv("POSTGRES_USER")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD")
POSTGRES_DB = os.getenv("POSTGRES_DB_URL")

class Base(DeclarativeBase): pass

postgres_file_name = f"{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_DB}"

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+asyncpg://{postgres_file_name}",
)

# list[str] of player ids; JSONB on postgres, plain JSON elsewhere (sqlite in tests)
PlayerList = JSON().with_variant(JSONB(), "postgresql")

class FixedConnection(Connection):
    def _get_unique_id(self, prefix: str) -> str:
        return f'__asyncpg_{prefix}_{uuid4()}__'


def _connect_args(url: str) -> dict:
    if not url.startswith("postgresql+asyncpg"):
        return {}
    return {
        "statement_cache_size": 0,
        "prepared_statement_cache_size": 0,
        "connection_class": FixedConnection,
    }


engine = create_async_engine(
    DATABASE_URL,
    echo=False,
    future=True,
    connect_args=_connect_args(DATABASE_URL),
)

# Session factory
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)


async def get_session():
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def create_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

#ORM

class TournamentORM(Base):
    __tablename__ = "tournaments"

    id                 = Column(String, primary_key=True)
    name               = Column(String, nullable=False)
    description        = Column(String, nullable=False, default="")
    format             = Column(String, nullable=False)   # singles | doubles
    type               = Column(String, nullable=False)   # round-robin | single-elimination | double-elimination
    status             = Column(String, nullable=False, default="active")
    player_ids         = Column(PlayerList, nullable=False)
    created_at         = Column(DateTime(timezone=True), server_default=func.now())
    created_by         = Column(String, nullable=False)
    available_courts   = Column(Integer, nullable=False, default=2)
    max_rounds         = Column(Integer, nullable=True)
    estimated_duration = Column(Integer, nullable=False, default=0)  # minutes
    club_id            = Column(String, nullable=True, index=True)
    is_quick_play      = Column(Boolean, nullable=False, default=False)
    current_round      = Column(Integer, nullable=False, default=0)

    matches = relationship(
        "MatchORM",
        back_populates="tournament",
        cascade="all, delete-orphan",
        order_by="MatchORM.match_number",
        lazy="selectin",
    )


class MatchORM(Base):
    __tablename__ = "matches"

    id            = Column(String, primary_key=True)
    tournament_id = Column(String, ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False, index=True)
    round         = Column(Integer, nullable=False)
    match_number  = Column(Integer, nullable=False)
    court         = Column(Integer, nullable=True)
    side1         = Column(PlayerList, nullable=False)   # list[str] -- player ids
    side2         = Column(PlayerList, nullable=False)
    status        = Column(String, nullable=False, default="pending")
    game_id       = Column(String, nullable=True)

    tournament = relationship("TournamentORM", back_populates="matches")


class GameORM(Base):
    """A recorded result. Written by the scoring feature, removed with its tournament."""
    __tablename__ = "games"

    id            = Column(String, primary_key=True)
    tournament_id = Column(String, nullable=True, index=True)
    game_type     = Column(String, nullable=False)   # Singles | Doubles
    side1         = Column(PlayerList, nullable=False)
    side2         = Column(PlayerList, nullable=False)
    side1_score   = Column(Integer, nullable=False, default=0)
    side2_score   = Column(Integer, nullable=False, default=0)
    played_at     = Column(DateTime(timezone=True), server_default=func.now())
