"""
Weekly Top 3 History

Append-only podium log written by the weekly reset. One row per
Sunday-Saturday week; a second reset in the same week overwrites it.
"""

import uuid
from datetime import datetime

from peewee import (
    UUIDField,
    CharField,
    TextField,
    DateTimeField,
    DoubleField,
)

from db.base import BaseModel


class WeeklyTop3(BaseModel):
    id = UUIDField(primary_key=True, default=uuid.uuid4)
    week_start_date = DateTimeField(unique=True)
    week_end_date = DateTimeField()

    top1_player_id = UUIDField()
    top1_player_name = CharField(max_length=100)
    top1_player_avatar = TextField(default="")
    top1_score = DoubleField()

    top2_player_id = UUIDField()
    top2_player_name = CharField(max_length=100)
    top2_player_avatar = TextField(default="")
    top2_score = DoubleField()

    top3_player_id = UUIDField()
    top3_player_name = CharField(max_length=100)
    top3_player_avatar = TextField(default="")
    top3_score = DoubleField()

    created_at = DateTimeField(default=datetime.utcnow)

    class Meta:
        table_name = "weekly_top3"

    def __repr__(self) -> str:
        return f"<WeeklyTop3(week_start={self.week_start_date}, top1={self.top1_player_name})>"
