from .leaderboard import Player, Match, MatchParticipant, WeeklyTop3, ALL_MODELS

__all__ = ["Player", "Match", "MatchParticipant", "WeeklyTop3", "ALL_MODELS"]
