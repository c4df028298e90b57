from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from core.settings import Settings
from db.base import close_db, db, init_db
from db.models.leaderboard import Player
from schemas.leaderboard import Lane, ParticipantRecord, PlayerRecord
from services.gateway import DataGateway
from services.state import LeaderboardStore


@pytest.fixture
def config(tmp_path, monkeypatch) -> Settings:
    monkeypatch.delenv("ADMIN_TOKEN", raising=False)
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'leaderboard.db'}",
        admin_token="let-me-reset",
        retry_max_attempts=3,
        retry_base_delay=0,
        retry_max_delay=0,
        cache_ttl_seconds=30,
        log_format="console",
        log_level="WARNING",
    )


@pytest.fixture
def database(config):
    database = init_db(config.database_url)
    yield database
    close_db()


@pytest.fixture
def gateway(database, config) -> DataGateway:
    return DataGateway(database=db, config=config)


@pytest.fixture
def store(gateway) -> LeaderboardStore:
    return LeaderboardStore(gateway)


@pytest.fixture
def make_player(database):
    def _make(name: str, avatar: str = "", **stats) -> Player:
        return Player.create(name=name, avatar=avatar or f"https://avatars.test/{name}.png", **stats)

    return _make


def player_record(name: str = "p", average_rating: float = 0.0, total_matches: int = 0, **extra) -> PlayerRecord:
    return PlayerRecord(
        id=extra.pop("id", None) or uuid4(),
        name=name,
        average_rating=average_rating,
        total_matches=total_matches,
        total_rating=average_rating * total_matches,
        **extra,
    )


BASE_DATE = datetime(2026, 10, 1, 20, 0, 0)


def participant(
    player_id,
    rating: float,
    lane: Lane = Lane.MID,
    match_id=None,
    kills: int = 0,
    deaths: int = 0,
    assists: int = 0,
    day: int = 0,
    name: str = "",
) -> ParticipantRecord:
    return ParticipantRecord(
        id=uuid4(),
        match_id=match_id or uuid4(),
        player_id=player_id,
        player_name=name or f"player-{str(player_id)[:4]}",
        player_avatar="",
        match_date=BASE_DATE + timedelta(days=day),
        rating=rating,
        kills=kills,
        deaths=deaths,
        assists=assists,
        lane=lane,
    )
