"""
Leaderboard Schema Models

Tables shared with the hosted backend: players carry the running totals,
matches and match_participants are the append-only ledger, and weekly_top3
is the podium history written by the weekly reset.
"""

from db.models.leaderboard.players import Player
from db.models.leaderboard.matches import Match
from db.models.leaderboard.match_participants import MatchParticipant
from db.models.leaderboard.weekly_top3 import WeeklyTop3

# Dependency order for create_tables / drop_tables
ALL_MODELS = [Player, Match, MatchParticipant, WeeklyTop3]

__all__ = [
    "Player",
    "Match",
    "MatchParticipant",
    "WeeklyTop3",
    "ALL_MODELS",
]
