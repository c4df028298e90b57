import uuid
from datetime import datetime

from peewee import UUIDField, DateTimeField

from db.base import BaseModel


class Match(BaseModel):
    """One recorded game. Immutable once written; only the weekly reset deletes it."""

    id = UUIDField(primary_key=True, default=uuid.uuid4)
    match_date = DateTimeField(index=True)
    created_at = DateTimeField(default=datetime.utcnow)

    class Meta:
        table_name = "matches"

    def __repr__(self) -> str:
        return f"<Match(id={self.id}, date={self.match_date})>"
