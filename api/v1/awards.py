"""
Award Routes

GET /v1/awards  lane leaders, bottom performer, worst KDA and top MVPs.
Missing awards are null or absent, not errors.
"""

import asyncio

from fastapi import APIRouter, Depends, Query

from api.deps import get_store
from schemas.awards import AwardsResponse
from services.state import LeaderboardStore

router = APIRouter(prefix="/awards", tags=["awards"])


@router.get("", response_model=AwardsResponse)
async def get_awards(
    force: bool = Query(False, description="Bypass the read cache"),
    store: LeaderboardStore = Depends(get_store),
) -> AwardsResponse:
    data = await asyncio.to_thread(store.get_awards, force)
    return AwardsResponse(
        status="success",
        message=f"Awards for {len(data.lane_leaders)} lanes",
        data=data,
    )
