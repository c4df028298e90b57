"""
Player Dimension Table

Identity plus the denormalized running totals maintained by match
ingestion. Averages are stored alongside the totals so reads never
divide.
"""

import uuid
from datetime import datetime

from peewee import (
    UUIDField,
    CharField,
    TextField,
    DateTimeField,
    DoubleField,
    IntegerField,
)

from db.base import BaseModel


class Player(BaseModel):
    """
    A summoner tracked by the leaderboard.

    Attributes:
        id: Player UUID (primary key)
        name: Display name
        avatar: Avatar reference (URL or storage key)
        total_rating: Sum of every match rating received
        total_matches: Number of recorded matches
        average_rating: total_rating / total_matches, 0 with no matches
        total_kills, total_deaths, total_assists: KDA sums
        average_kills, average_deaths, average_assists: KDA per match
        created_at: When this record was first created
        updated_at: When the totals last changed
    """

    id = UUIDField(primary_key=True, default=uuid.uuid4)
    name = CharField(max_length=100)
    avatar = TextField(default="")

    total_rating = DoubleField(default=0)
    total_matches = IntegerField(default=0)
    average_rating = DoubleField(default=0)

    total_kills = IntegerField(default=0)
    total_deaths = IntegerField(default=0)
    total_assists = IntegerField(default=0)
    average_kills = DoubleField(default=0)
    average_deaths = DoubleField(default=0)
    average_assists = DoubleField(default=0)

    created_at = DateTimeField(default=datetime.utcnow)
    updated_at = DateTimeField(default=datetime.utcnow)

    class Meta:
        table_name = "players"

    def __repr__(self) -> str:
        return f"<Player(id={self.id}, name='{self.name}')>"

    def save(self, *args, **kwargs):
        """Override save to auto-update updated_at timestamp."""
        self.updated_at = datetime.utcnow()
        return super().save(*args, **kwargs)

    @classmethod
    def zeroed_stats(cls) -> dict:
        """Column -> value mapping that clears every total and average."""
        return {
            cls.total_rating: 0,
            cls.total_matches: 0,
            cls.average_rating: 0,
            cls.total_kills: 0,
            cls.total_deaths: 0,
            cls.total_assists: 0,
            cls.average_kills: 0,
            cls.average_deaths: 0,
            cls.average_assists: 0,
            cls.updated_at: datetime.utcnow(),
        }

    @classmethod
    def increment_stats(
        cls,
        player_id,
        rating: float,
        kills: int,
        deaths: int,
        assists: int,
    ) -> int:
        """
        Add one match to a player's totals in a single UPDATE.

        Every right-hand side reads the pre-update column values, so the
        new averages are computed from the new totals without a prior
        SELECT and concurrent submissions cannot overwrite each other.

        Returns:
            Number of rows updated (0 if the player does not exist)
        """
        new_matches = cls.total_matches + 1
        return (
            cls.update(
                {
                    cls.total_rating: cls.total_rating + rating,
                    cls.total_matches: new_matches,
                    cls.total_kills: cls.total_kills + kills,
                    cls.total_deaths: cls.total_deaths + deaths,
                    cls.total_assists: cls.total_assists + assists,
                    cls.average_rating: (cls.total_rating + rating) / new_matches,
                    cls.average_kills: (cls.total_kills + kills) * 1.0 / new_matches,
                    cls.average_deaths: (cls.total_deaths + deaths) * 1.0 / new_matches,
                    cls.average_assists: (cls.total_assists + assists) * 1.0 / new_matches,
                    cls.updated_at: datetime.utcnow(),
                }
            )
            .where(cls.id == player_id)
            .execute()
        )
