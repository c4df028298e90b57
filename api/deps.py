from fastapi import Request

from services.state import LeaderboardStore


def get_store(request: Request) -> LeaderboardStore:
    """The store built for this app in the lifespan handler."""
    return request.app.state.store
