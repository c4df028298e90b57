"""
Player Routes

GET /v1/players/{player_id}  standing, recent history, lane rankings,
                             partnerships and tips for one player
GET /v1/tips                 recent-form remarks for the whole group
"""

import asyncio
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from api.deps import get_store
from schemas.common import success_response
from services.state import LeaderboardStore

router = APIRouter(tags=["players"])


@router.get("/players/{player_id}")
async def get_player_detail(
    player_id: UUID,
    force: bool = Query(False, description="Bypass the read cache"),
    store: LeaderboardStore = Depends(get_store),
) -> dict:
    detail = await asyncio.to_thread(store.get_player_detail, player_id, force)
    return success_response(
        message=f"Details for {detail.standing.player.name}",
        data=detail.model_dump(mode="json"),
    )


@router.get("/tips")
async def get_form_tips(
    force: bool = Query(False, description="Bypass the read cache"),
    store: LeaderboardStore = Depends(get_store),
) -> dict:
    tips = await asyncio.to_thread(store.get_form_tips, force)
    return success_response(
        message=f"{len(tips)} tips",
        data=[t.model_dump(mode="json") for t in tips],
    )
