"""
Award Schemas

Results of the award derivations. Absence (no leader for a lane, no
matches at all) is expressed by leaving the entry out or returning None,
never by a zero-valued placeholder.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from schemas.leaderboard import Lane


class LaneLeader(BaseModel):
    lane: Lane
    player_id: UUID
    player_name: str
    player_avatar: str = ""
    best_rating: float  # mean rating in this lane
    matches: int


class BottomPerformer(BaseModel):
    """Lowest single-match rating on record."""

    player_id: UUID
    player_name: str
    player_avatar: str = ""
    worst_rating: float
    match_id: UUID
    match_date: datetime


class WorstKda(BaseModel):
    """Lowest single-match (kills + assists) / max(deaths, 1) on record."""

    player_id: UUID
    player_name: str
    player_avatar: str = ""
    kills: int
    deaths: int
    assists: int
    kd_ratio: float
    match_id: UUID
    match_date: datetime


class MatchMvp(BaseModel):
    match_id: UUID
    player_id: UUID
    player_name: str
    player_avatar: str = ""
    rating: float
    lane: Lane


class MvpStanding(BaseModel):
    player_id: UUID
    player_name: str
    player_avatar: str = ""
    mvp_count: int
    total_matches: int
    mvp_percentage: float


class AwardsData(BaseModel):
    lane_leaders: list[LaneLeader]
    bottom_performer: Optional[BottomPerformer] = None
    worst_kda: Optional[WorstKda] = None
    top_mvps: list[MvpStanding]


class AwardsResponse(BaseModel):
    status: str
    message: str
    data: AwardsData
