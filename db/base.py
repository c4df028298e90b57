from peewee import DatabaseProxy, Model
from playhouse.db_url import connect

from core.logging import get_logger

# Bound at startup by init_db(); tests bind it to a temporary SQLite file
db = DatabaseProxy()

log = get_logger("db")


class BaseModel(Model):
    class Meta:
        database = db


def init_db(database_url: str | None = None, create_tables: bool = True):
    """
    Bind the database proxy and create tables if they don't exist.

    Args:
        database_url: playhouse.db_url style URL. Defaults to settings.database_url.
        create_tables: Whether to run CREATE TABLE IF NOT EXISTS for all models
    """
    if database_url is None:
        from core.settings import settings

        database_url = settings.database_url

    database = connect(database_url)
    db.initialize(database)
    db.connect(reuse_if_open=True)

    if create_tables:
        from .models.leaderboard import ALL_MODELS

        # Order matters for foreign keys: players and matches before participants
        db.create_tables(ALL_MODELS, safe=True)

    log.info("database_initialized", engine=type(database).__name__)
    return database


def close_db():
    """Close database connection."""
    if db.obj is not None and not db.is_closed():
        db.close()
        log.info("database_connection_closed")
