"""
Leaderboard Routes

GET /v1/leaderboard          ranked players (Bayesian order)
GET /v1/leaderboard/summary  headline numbers
GET /v1/weekly-top3          podium history, newest week first
"""

import asyncio

from fastapi import APIRouter, Depends, Query

from api.deps import get_store
from schemas.common import success_response
from schemas.leaderboard import LeaderboardResponse
from services.state import LeaderboardStore

router = APIRouter(tags=["leaderboard"])


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    force: bool = Query(False, description="Bypass the read cache"),
    store: LeaderboardStore = Depends(get_store),
) -> LeaderboardResponse:
    ranked = await asyncio.to_thread(store.get_leaderboard, force)
    return LeaderboardResponse(
        status="success",
        message=f"Leaderboard with {len(ranked)} players",
        data=ranked,
    )


@router.get("/leaderboard/summary")
async def get_summary(
    force: bool = Query(False, description="Bypass the read cache"),
    store: LeaderboardStore = Depends(get_store),
) -> dict:
    summary = await asyncio.to_thread(store.get_summary, force)
    return success_response(
        message="Leaderboard summary",
        data=summary.model_dump(mode="json"),
    )


@router.get("/weekly-top3")
async def get_weekly_top3(
    force: bool = Query(False, description="Bypass the read cache"),
    store: LeaderboardStore = Depends(get_store),
) -> dict:
    snapshots = await asyncio.to_thread(store.get_snapshots, force)
    return success_response(
        message=f"{len(snapshots)} weekly snapshots",
        data=[s.model_dump(mode="json") for s in snapshots],
    )
