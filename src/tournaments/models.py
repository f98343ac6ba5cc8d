from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

def generate_id():
    import uuid
    return str(uuid.uuid4())[:8]


class Format(str, Enum):
    SINGLES = "singles"
    DOUBLES = "doubles"


class TournamentType(str, Enum):
    ROUND_ROBIN = "round-robin"
    SINGLE_ELIMINATION = "single-elimination"
    DOUBLE_ELIMINATION = "double-elimination"


class TournamentStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class MatchStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    BYE = "bye"


@dataclass
class Match:
    id: str
    round: int
    match_number: int
    side1: List[str]  # player ids
    side2: List[str]  # player ids
    court: Optional[int] = None
    status: MatchStatus = MatchStatus.PENDING
    tournament_id: Optional[str] = None
    game_id: Optional[str] = None

    @property
    def players(self) -> List[str]:
        return self.side1 + self.side2


@dataclass
class Tournament:
    id: str
    name: str
    format: Format
    type: TournamentType
    player_ids: List[str]
    created_by: str
    description: str = ""
    status: TournamentStatus = TournamentStatus.ACTIVE
    available_courts: int = 2
    max_rounds: Optional[int] = None
    estimated_duration: int = 0  # minutes
    club_id: Optional[str] = None
    is_quick_play: bool = False
    current_round: int = 0
    created_at: Optional[datetime] = None
    matches: List[Match] = field(default_factory=list)

    @property
    def rounds(self) -> List[List[Match]]:
        max_round = max((m.round for m in self.matches), default=0)
        rounds: List[List[Match]] = [[] for _ in range(max_round)]
        for m in self.matches:
            rounds[m.round - 1].append(m)
        return rounds
