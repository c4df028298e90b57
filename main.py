"""
Summoner Leaderboard API Server

FastAPI server exposing the leaderboard, awards, match ingestion,
player analytics and the weekly reset.

Usage:
    uvicorn main:app --host 0.0.0.0 --port 8001

Environment Variables:
    DATABASE_URL - playhouse db_url (postgresql://... or sqlite:///...)
    ADMIN_TOKEN - Bearer secret for POST /v1/admin/reset
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

import pytz
from fastapi import FastAPI, Request
from pydantic import BaseModel

from api.v1 import ROUTERS
from core.correlation_middleware import CorrelationMiddleware
from core.logging import setup_logging, get_logger
from core.middleware import setup_middleware
from core.settings import Settings, get_settings
from db.base import close_db, db, init_db
from services.gateway import DataGateway
from services.state import LeaderboardStore


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    players: int
    circuit_open: bool


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """Build the application. Tests pass their own Settings."""
    config = config or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(
            log_level=config.log_level,
            json_format=config.log_format == "json",
            service_name=config.service_name,
        )
        log = get_logger()
        log.info("service_starting", service=config.service_name)

        init_db(config.database_url)
        app.state.store = LeaderboardStore(DataGateway(database=db, config=config))

        yield

        close_db()
        log.info("service_stopped")

    app = FastAPI(
        title="Summoner Leaderboard",
        description="Rankings, awards and match history for a group of players",
        version="1.0.0",
        debug=config.development_mode,
        lifespan=lifespan,
    )
    app.state.config = config

    app.add_middleware(CorrelationMiddleware)
    setup_middleware(app)

    for router in ROUTERS:
        app.include_router(router, prefix="/v1")

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request) -> HealthResponse:
        """Connectivity check: counts players through the gateway."""
        store: LeaderboardStore = request.app.state.store
        players = await asyncio.to_thread(store.gateway.count_players, True)
        now = datetime.now(pytz.timezone(config.timezone))
        return HealthResponse(
            status="healthy",
            timestamp=now.isoformat(),
            players=players,
            circuit_open=store.gateway.circuit_open,
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8001)
