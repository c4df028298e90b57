from api.v1 import admin, awards, leaderboard, matches, players

ROUTERS = [
    leaderboard.router,
    awards.router,
    matches.router,
    players.router,
    admin.router,
]

__all__ = ["ROUTERS"]
