"""
Player Analytics Schemas
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from schemas.leaderboard import Lane, ParticipantRecord, RankedPlayer


class LaneRanking(BaseModel):
    lane: Lane
    position: int
    total_players: int
    average_rating: float


class Partnership(BaseModel):
    partner_id: UUID
    partner_name: str
    partner_avatar: str = ""
    lane: Lane  # the partner's lane
    matches_played: int
    average_rating: float  # the player's own rating in these matches
    good_performances: int
    bad_performances: int


class FormTip(BaseModel):
    """A remark about a player's last few matches."""

    kind: str  # "positive" | "negative" | "warning"
    rule: str
    player_id: UUID
    player_name: str
    player_avatar: str = ""
    message: str


class PlayerDetail(BaseModel):
    standing: RankedPlayer
    history: list[ParticipantRecord]
    lane_rankings: list[LaneRanking]
    partnerships: list[Partnership]
    tips: list[str]
    form_tips: list[FormTip] = []


class LeaderboardSummary(BaseModel):
    total_matches: int
    average_rating: float
    active_players: int
    champion_name: Optional[str] = None
