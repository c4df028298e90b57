"""
Match Submission Schemas

Request and result models for match ingestion and the weekly reset.
Bounds (rating 1-10, non-negative KDA) are checked by
services.ingestion.validate_submission so every violation can be
reported at once in plain language.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from schemas.leaderboard import Lane, ParticipantRecord, WeeklyTop3Record
from schemas.awards import MatchMvp


MAX_PARTICIPANTS = 5


class ParticipantInput(BaseModel):
    """One player slot of the submission form. Slots without a player are ignored."""

    player_id: Optional[UUID] = None
    rating: float = 5.0
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    lane: Optional[Lane] = None


class MatchSubmission(BaseModel):
    participants: list[ParticipantInput] = Field(default_factory=list)

    def filled(self) -> list[ParticipantInput]:
        """Slots that name a player."""
        return [p for p in self.participants if p.player_id is not None]


class MatchResult(BaseModel):
    match_id: UUID
    match_date: datetime
    participants_recorded: int
    players_updated: int
    refresh_required: bool = True


class MatchResponse(BaseModel):
    status: str
    message: str
    data: MatchResult


class RecentMatch(BaseModel):
    match_id: UUID
    match_date: datetime
    participants: list[ParticipantRecord]
    mvp: Optional[MatchMvp] = None


class ResetResult(BaseModel):
    snapshot: Optional[WeeklyTop3Record] = None
    participants_deleted: int
    matches_deleted: int
    players_reset: int
    refresh_required: bool = True


class ResetResponse(BaseModel):
    status: str
    message: str
    data: ResetResult
