"""
Match Routes

POST /v1/matches         record a match (422 with every violation on bad input)
GET  /v1/matches/recent  latest matches with their MVP
"""

import asyncio

from fastapi import APIRouter, Depends, Query

from api.deps import get_store
from schemas.common import success_response
from schemas.matches import MatchResponse, MatchSubmission
from services.state import LeaderboardStore

router = APIRouter(prefix="/matches", tags=["matches"])


@router.post("", response_model=MatchResponse, status_code=201)
async def submit_match(
    submission: MatchSubmission,
    store: LeaderboardStore = Depends(get_store),
) -> MatchResponse:
    """
    Record a match.

    Slots without a player_id are ignored. The response sets
    refresh_required so clients re-read with force=true.
    """
    result = await asyncio.to_thread(store.apply_match_result, submission)
    return MatchResponse(
        status="success",
        message=f"Match recorded with {result.participants_recorded} players",
        data=result,
    )


@router.get("/recent")
async def get_recent_matches(
    limit: int = Query(20, ge=1, le=100),
    force: bool = Query(False, description="Bypass the read cache"),
    store: LeaderboardStore = Depends(get_store),
) -> dict:
    feed = await asyncio.to_thread(store.get_recent_matches, limit, force)
    return success_response(
        message=f"{len(feed)} recent matches",
        data=[m.model_dump(mode="json") for m in feed],
    )
