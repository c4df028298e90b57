"""
Leaderboard Records

Typed views of the backend tables. The gateway converts every peewee row
into one of these before anything else sees it.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class Lane(str, Enum):
    """Positional role within a match."""

    TOP = "TOP"
    JUNGLE = "JUNGLE"
    MID = "MID"
    ADC = "ADC"
    SUP = "SUP"


class PlayerRecord(BaseModel):
    """A row of the players table."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: UUID
    name: str
    avatar: str = ""
    total_rating: float = 0.0
    total_matches: int = Field(default=0, ge=0)
    average_rating: float = 0.0
    total_kills: int = 0
    total_deaths: int = 0
    total_assists: int = 0
    average_kills: float = 0.0
    average_deaths: float = 0.0
    average_assists: float = 0.0
    updated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.total_matches > 0


class ParticipantRecord(BaseModel):
    """A match_participants row joined with its match date and player identity."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    match_id: UUID
    player_id: UUID
    player_name: str = ""
    player_avatar: str = ""
    match_date: datetime
    rating: float
    kills: int
    deaths: int
    assists: int
    lane: Lane
    created_at: Optional[datetime] = None

    @property
    def kda_ratio(self) -> float:
        """(kills + assists) / deaths, with deaths floored at one."""
        return (self.kills + self.assists) / max(self.deaths, 1)


class MatchRecord(BaseModel):
    """A matches row, optionally with its participants."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    match_date: datetime
    participants: list[ParticipantRecord] = Field(default_factory=list)


class PodiumEntry(BaseModel):
    rank: int
    player_id: UUID
    player_name: str
    player_avatar: str = ""
    score: float


class WeeklyTop3Record(BaseModel):
    """A weekly_top3 row."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: UUID
    week_start_date: datetime
    week_end_date: datetime
    top1_player_id: UUID
    top1_player_name: str
    top1_player_avatar: str = ""
    top1_score: float
    top2_player_id: UUID
    top2_player_name: str
    top2_player_avatar: str = ""
    top2_score: float
    top3_player_id: UUID
    top3_player_name: str
    top3_player_avatar: str = ""
    top3_score: float
    created_at: Optional[datetime] = None

    def podium(self) -> list[PodiumEntry]:
        return [
            PodiumEntry(
                rank=rank,
                player_id=getattr(self, f"top{rank}_player_id"),
                player_name=getattr(self, f"top{rank}_player_name"),
                player_avatar=getattr(self, f"top{rank}_player_avatar"),
                score=getattr(self, f"top{rank}_score"),
            )
            for rank in (1, 2, 3)
        ]


class PodiumCounts(BaseModel):
    """How many weekly snapshots placed a player 1st, 2nd and 3rd."""

    top1_count: int = 0
    top2_count: int = 0
    top3_count: int = 0


class RankedPlayer(BaseModel):
    """A leaderboard position. bayesian_rating is None for players with no matches."""

    rank: int
    player: PlayerRecord
    bayesian_rating: Optional[float] = None
    podium: PodiumCounts = Field(default_factory=PodiumCounts)
    trend: Optional[str] = None  # "up" | "down" | None
    mvp_count: int = 0  # matches where this player had the top rating


class LeaderboardResponse(BaseModel):
    status: str
    message: str
    data: list[RankedPlayer]
