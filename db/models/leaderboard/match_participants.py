"""
Match Participant Fact Table

One row per player per match. This is the ledger the player totals are
derived from and the only input to award derivation.
"""

import uuid
from datetime import datetime

from peewee import (
    UUIDField,
    CharField,
    DateTimeField,
    DoubleField,
    IntegerField,
    ForeignKeyField,
    Check,
)

from db.base import BaseModel
from db.models.leaderboard.players import Player
from db.models.leaderboard.matches import Match


LANES = ("TOP", "JUNGLE", "MID", "ADC", "SUP")


class MatchParticipant(BaseModel):
    """
    A player's performance within one match.

    Attributes:
        id: Row UUID
        match: Foreign key to Match
        player: Foreign key to Player
        rating: Performance rating, 1-10 inclusive
        kills, deaths, assists: Non-negative counters
        lane: One of TOP, JUNGLE, MID, ADC, SUP
        created_at: Insert timestamp
    """

    id = UUIDField(primary_key=True, default=uuid.uuid4)
    match = ForeignKeyField(
        Match,
        backref="participants",
        on_delete="CASCADE",
        column_name="match_id",
    )
    player = ForeignKeyField(
        Player,
        backref="participations",
        on_delete="CASCADE",
        column_name="player_id",
    )
    rating = DoubleField(constraints=[Check("rating >= 1 AND rating <= 10")])
    kills = IntegerField(default=0, constraints=[Check("kills >= 0")])
    deaths = IntegerField(default=0, constraints=[Check("deaths >= 0")])
    assists = IntegerField(default=0, constraints=[Check("assists >= 0")])
    lane = CharField(
        max_length=10,
        index=True,
        constraints=[Check("lane IN (" + ", ".join(f"'{lane}'" for lane in LANES) + ")")],
    )
    created_at = DateTimeField(default=datetime.utcnow)

    class Meta:
        table_name = "match_participants"
        indexes = (
            # One row per player per match
            (("match", "player"), True),
            (("player",), False),
        )

    def __repr__(self) -> str:
        return (
            f"<MatchParticipant("
            f"match_id={self.match_id}, "
            f"player_id={self.player_id}, "
            f"rating={self.rating})>"
        )
