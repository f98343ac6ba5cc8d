from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from settings import DEFAULT_COURTS
from tournaments.models import Format, TournamentType


class TournamentCreate(BaseModel):
    name: str = Field(..., min_length=3, max_length=100)
    description: str = Field("", max_length=500)
    format: Format
    type: TournamentType
    player_ids: List[str] = Field(..., min_length=2)
    max_rounds: Optional[int] = Field(None, ge=1, le=50)
    available_courts: int = Field(DEFAULT_COURTS, ge=1, le=4)
    club_id: Optional[str] = Field(None, max_length=64)
    quick_play: bool = False

    @field_validator("name", "description", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("player_ids")
    @classmethod
    def unique_players(cls, v: List[str]) -> List[str]:
        if any(not pid for pid in v):
            raise ValueError("Player ID cannot be empty")
        if len(set(v)) != len(v):
            raise ValueError("Players must be unique")
        return v

    @model_validator(mode="after")
    def doubles_roster(self):
        if self.format == Format.DOUBLES:
            if len(self.player_ids) < 4:
                raise ValueError("Doubles tournaments require at least 4 players")
            if len(self.player_ids) % 2:
                raise ValueError("Doubles tournaments require an even number of players")
        return self

    @model_validator(mode="after")
    def quick_play_settings(self):
        if self.quick_play:
            if self.type != TournamentType.ROUND_ROBIN:
                raise ValueError("Quick Play is only available for round-robin tournaments")
            if not self.max_rounds:
                raise ValueError("Quick Play tournaments require max_rounds")
        return self


class MatchOut(BaseModel):
    id: str
    round: int
    match_number: int
    side1: List[str]
    side2: List[str]
    court: Optional[int] = None
    status: str


class TournamentOut(BaseModel):
    id: str
    name: str
    description: str
    format: Format
    type: TournamentType
    status: str
    player_ids: List[str]
    created_by: str
    available_courts: int
    max_rounds: Optional[int] = None
    estimated_duration: int
    club_id: Optional[str] = None
    is_quick_play: bool = False
    current_round: int = 0
    matches: List[MatchOut] = []
