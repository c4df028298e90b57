"""
Admin Routes

POST /v1/admin/reset  save this week's top 3, then wipe matches and zero
                      every player. Requires the admin bearer token.
"""

import asyncio

from fastapi import APIRouter, Depends, Security

from api.deps import get_store
from core.admin_auth import verify_admin_token
from core.logging import get_logger
from schemas.matches import ResetResponse
from services.state import LeaderboardStore

router = APIRouter(prefix="/admin", tags=["admin"])
log = get_logger("admin_api")


@router.post("/reset", response_model=ResetResponse)
async def reset_rankings(
    _: str = Security(verify_admin_token),
    store: LeaderboardStore = Depends(get_store),
) -> ResetResponse:
    log.warning("rankings_reset_requested")
    result = await asyncio.to_thread(store.reset)
    saved = "snapshot saved" if result.snapshot else "snapshot skipped"
    return ResetResponse(
        status="success",
        message=f"Rankings reset ({saved})",
        data=result,
    )
