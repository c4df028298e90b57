"""Tests for the data access gateway: caching, retries, breaker and write errors."""

import logging
from datetime import datetime

import pytest
from peewee import IntegrityError, OperationalError

from core.resilience import BackendWriteError, ServiceUnavailableError
from db.models.leaderboard import Player
from schemas.leaderboard import Lane
from services.gateway import DataGateway, ReadCache


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class FlakyLoader:
    """Raises the given error for the first `failures` calls, then returns value."""

    def __init__(self, failures: int, error: Exception = None, value="ok"):
        self.failures = failures
        self.error = error or OperationalError("database is locked")
        self.value = value
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return self.value


# ------------------------------------------------------------------ cache ---


def test_read_cache_expires_after_ttl():
    clock = FakeClock()
    cache = ReadCache(ttl_seconds=30, clock=clock)
    cache.set("players", [1, 2])

    clock.now += 29
    assert cache.get("players") == (True, [1, 2])

    clock.now += 1
    assert cache.get("players") == (False, None)
    assert len(cache) == 0


def test_read_cache_zero_ttl_disables_caching():
    cache = ReadCache(ttl_seconds=0)
    cache.set("players", [1])
    assert cache.get("players") == (False, None)


def test_read_cache_invalidate():
    cache = ReadCache(ttl_seconds=60)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.invalidate()
    assert len(cache) == 0


def test_read_cache_drops_values_loaded_before_invalidation():
    cache = ReadCache(ttl_seconds=60)
    generation = cache.generation

    cache.invalidate()
    cache.set("players", ["stale"], generation=generation)

    assert cache.get("players") == (False, None)
    cache.set("players", ["fresh"], generation=cache.generation)
    assert cache.get("players") == (True, ["fresh"])


def test_read_racing_a_write_is_not_cached(gateway, make_player):
    player = make_player("Ahri")

    def load_then_write():
        rows = [p.total_matches for p in Player.select()]
        gateway.increment_player_stats(player.id, rating=7.0, kills=0, deaths=0, assists=0)
        return rows

    assert gateway._read("players:racy", load_then_write) == [0]

    fresh = FlakyLoader(failures=0, value=[1])
    assert gateway._read("players:racy", fresh) == [1]
    assert fresh.calls == 1


def test_cached_read_until_forced(gateway, make_player):
    make_player("Ahri")
    assert [p.name for p in gateway.list_players()] == ["Ahri"]

    make_player("Brand")  # written behind the gateway's back
    assert [p.name for p in gateway.list_players()] == ["Ahri"]
    assert {p.name for p in gateway.list_players(force=True)} == {"Ahri", "Brand"}


def test_writes_invalidate_cache(gateway, make_player):
    player = make_player("Ahri")
    assert gateway.list_players()[0].total_matches == 0

    gateway.increment_player_stats(player.id, rating=7.0, kills=3, deaths=1, assists=4)

    refreshed = gateway.list_players()[0]
    assert refreshed.total_matches == 1
    assert refreshed.average_rating == pytest.approx(7.0)


# ---------------------------------------------------------------- retries ---


def test_transient_read_failure_is_retried(gateway):
    loader = FlakyLoader(failures=2)

    assert gateway._read("flaky", loader) == "ok"
    assert loader.calls == 3


def test_retry_sleeps_are_logged(gateway, caplog):
    loader = FlakyLoader(failures=1)

    with caplog.at_level(logging.WARNING, logger="leaderboard.gateway"):
        gateway._read("flaky", loader)

    assert any(r.name == "leaderboard.gateway" for r in caplog.records)


def test_read_gives_up_after_max_attempts(gateway):
    loader = FlakyLoader(failures=10)

    with pytest.raises(ServiceUnavailableError):
        gateway._read("down", loader)
    assert loader.calls == gateway.config.retry_max_attempts


def test_non_transient_read_error_is_not_retried(gateway):
    loader = FlakyLoader(failures=10, error=IntegrityError("constraint"))

    with pytest.raises(ServiceUnavailableError):
        gateway._read("broken", loader)
    assert loader.calls == 1


def test_failed_reads_are_not_cached(gateway):
    loader = FlakyLoader(failures=3)

    with pytest.raises(ServiceUnavailableError):
        gateway._read("later", loader)
    assert gateway._read("later", loader) == "ok"


def test_circuit_opens_after_repeated_failures(database, config):
    gateway = DataGateway(
        database=database,
        config=config.model_copy(update={"circuit_breaker_threshold": 1}),
    )
    loader = FlakyLoader(failures=100)

    with pytest.raises(ServiceUnavailableError):
        gateway._read("down", loader)
    assert gateway.circuit_open

    calls_before = loader.calls
    with pytest.raises(ServiceUnavailableError):
        gateway._read("down", loader, force=True)
    assert loader.calls == calls_before


# ----------------------------------------------------------------- writes ---


def test_write_failure_raises_backend_write_error_once(gateway, make_player, monkeypatch):
    player = make_player("Ahri")
    calls = []

    def failing_increment(*args, **kwargs):
        calls.append(args)
        raise OperationalError("disk I/O error")

    monkeypatch.setattr(Player, "increment_stats", failing_increment)

    with pytest.raises(BackendWriteError) as exc:
        gateway.increment_player_stats(player.id, rating=5.0, kills=0, deaths=0, assists=0)

    assert exc.value.operation == "increment_player_stats"
    assert "disk I/O error" in exc.value.reason
    assert len(calls) == 1


def test_increment_is_cumulative(gateway, make_player):
    player = make_player("Ahri")
    gateway.increment_player_stats(player.id, rating=8.0, kills=10, deaths=2, assists=5)
    gateway.increment_player_stats(player.id, rating=5.0, kills=2, deaths=4, assists=1)

    record = gateway.get_player(player.id)
    assert record.total_matches == 2
    assert record.total_rating == pytest.approx(13.0)
    assert record.average_rating == pytest.approx(6.5)
    assert record.total_kills == 12
    assert record.average_deaths == pytest.approx(3.0)


def test_list_participants_filters_and_orders(gateway, make_player):
    ahri, brand = make_player("Ahri"), make_player("Brand")
    older = gateway.insert_match(datetime(2026, 10, 1, 18))
    newer = gateway.insert_match(datetime(2026, 10, 2, 18))
    row = {"rating": 6.0, "kills": 1, "deaths": 1, "assists": 1}
    gateway.insert_participants(older, [{**row, "player_id": ahri.id, "lane": "MID"}])
    gateway.insert_participants(
        newer,
        [
            {**row, "player_id": ahri.id, "lane": "TOP"},
            {**row, "player_id": brand.id, "lane": "SUP"},
        ],
    )

    everything = gateway.list_participants()
    assert [p.match_id for p in everything][:2] == [newer, newer]
    assert everything[-1].match_id == older

    mids = gateway.list_participants(lane=Lane.MID)
    assert [(p.player_name, p.lane) for p in mids] == [("Ahri", Lane.MID)]

    assert len(gateway.list_participants(player_id=ahri.id)) == 2
    assert len(gateway.list_participants(match_id=newer)) == 2
    assert gateway.count_matches() == 2
