"""
Data Access Gateway

Single entry point to the leaderboard tables. Reads are cached for a short
TTL, retried with exponential backoff on transient failures and guarded by
a circuit breaker; writes go straight through and are never retried.
Every row leaves this module as a pydantic record from schemas.leaderboard.
"""

import logging
import threading
import time
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Iterable, Iterator, Optional, TypeVar
from uuid import UUID

from peewee import InterfaceError, OperationalError, PeeweeException

from core.logging import get_logger
from core.resilience import (
    BackendWriteError,
    CircuitBreakerError,
    ServiceUnavailableError,
    TransientBackendError,
    create_circuit_breaker,
    create_retrying,
    is_circuit_open,
)
from core.settings import Settings, settings as default_settings
from db.base import db
from db.models.leaderboard import Match, MatchParticipant, Player, WeeklyTop3
from schemas.leaderboard import (
    Lane,
    MatchRecord,
    ParticipantRecord,
    PlayerRecord,
    WeeklyTop3Record,
)

T = TypeVar("T")

# Failures worth another attempt: dropped connections, locked database, timeouts
TRANSIENT_ERRORS = (OperationalError, InterfaceError)

log = get_logger("gateway")

# tenacity reports backoff sleeps through the stdlib
retry_log = logging.getLogger("leaderboard.gateway")


class ReadCache:
    """
    TTL cache for query results.

    Entries expire ttl_seconds after they were stored. A TTL of zero
    disables caching entirely. Every invalidate() bumps the generation;
    a set() tagged with an older generation is dropped, so a load that
    raced a write cannot store what it read before the write.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()
        self._generation = 0

    def get(self, key: str) -> tuple[bool, Any]:
        """Return (hit, value) for key."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False, None
            stored_at, value = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                self._entries.pop(key, None)
                return False, None
            return True, value

    @property
    def generation(self) -> int:
        return self._generation

    def set(self, key: str, value: Any, generation: Optional[int] = None) -> None:
        if self.ttl_seconds <= 0:
            return
        with self._lock:
            if generation is not None and generation != self._generation:
                return
            self._entries[key] = (self._clock(), value)

    def invalidate(self) -> None:
        with self._lock:
            self._entries.clear()
            self._generation += 1

    def __len__(self) -> int:
        return len(self._entries)


def _player_record(row: Player) -> PlayerRecord:
    return PlayerRecord.model_validate(row)


def _participant_record(row: MatchParticipant) -> ParticipantRecord:
    return ParticipantRecord(
        id=row.id,
        match_id=row.match_id,
        player_id=row.player_id,
        player_name=row.player.name,
        player_avatar=row.player.avatar or "",
        match_date=row.match.match_date,
        rating=row.rating,
        kills=row.kills,
        deaths=row.deaths,
        assists=row.assists,
        lane=row.lane,
        created_at=row.created_at,
    )


def _weekly_record(row: WeeklyTop3) -> WeeklyTop3Record:
    return WeeklyTop3Record.model_validate(row)


class DataGateway:
    """
    Query contract over the players, matches, match_participants and
    weekly_top3 tables.

    Args:
        database: peewee database (or the shared proxy) the models are bound to
        config: Settings providing retry, circuit breaker and cache parameters
        cache: Optional ReadCache; one is built from config when omitted

    Example:
        gateway = DataGateway()
        players = gateway.list_players()
        gateway.invalidate_cache()
    """

    def __init__(
        self,
        database=db,
        config: Optional[Settings] = None,
        cache: Optional[ReadCache] = None,
    ):
        self.config = config or default_settings
        self._database = database
        self._cache = cache if cache is not None else ReadCache(self.config.cache_ttl_seconds)
        self._breaker = create_circuit_breaker(
            name="leaderboard_db",
            failure_threshold=self.config.circuit_breaker_threshold,
            recovery_timeout=self.config.circuit_breaker_timeout,
        )

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    @property
    def circuit_open(self) -> bool:
        return is_circuit_open(self._breaker)

    def invalidate_cache(self) -> None:
        """Drop every cached read so the next one hits the database."""
        self._cache.invalidate()
        log.debug("read_cache_invalidated")

    def _read(self, key: str, loader: Callable[[], T], force: bool = False) -> T:
        if not force:
            hit, value = self._cache.get(key)
            if hit:
                return value

        generation = self._cache.generation

        def attempt() -> T:
            try:
                return loader()
            except TRANSIENT_ERRORS as e:
                log.warning("gateway_read_retry", query=key, error=str(e))
                raise TransientBackendError(str(e)) from e

        retrying = create_retrying(
            max_attempts=self.config.retry_max_attempts,
            base_delay=self.config.retry_base_delay,
            max_delay=self.config.retry_max_delay,
            logger=retry_log,
        )
        protected = self._breaker(lambda: retrying(attempt))

        try:
            value = protected()
        except TransientBackendError as e:
            log.error("gateway_read_failed", query=key, error=str(e))
            raise ServiceUnavailableError(cause=e) from e
        except CircuitBreakerError as e:
            log.error("gateway_circuit_open", query=key)
            raise ServiceUnavailableError("Service unavailable: too many recent failures", cause=e) from e
        except PeeweeException as e:
            log.error("gateway_read_error", query=key, error=str(e))
            raise ServiceUnavailableError(cause=e) from e

        self._cache.set(key, value, generation=generation)
        return value

    def _write(self, operation: str, func: Callable[[], T]) -> T:
        try:
            return func()
        except PeeweeException as e:
            log.error("gateway_write_failed", operation=operation, error=str(e))
            raise BackendWriteError(operation, str(e)) from e
        finally:
            self._cache.invalidate()

    @contextmanager
    def transaction(self, operation: str) -> Iterator[None]:
        """
        Run a group of writes atomically.

        Any exception inside the block rolls everything back. The read cache
        is invalidated whether or not the transaction commits.
        """
        try:
            with self._database.atomic():
                yield
        except PeeweeException as e:
            log.error("gateway_transaction_failed", operation=operation, error=str(e))
            raise BackendWriteError(operation, str(e)) from e
        finally:
            self._cache.invalidate()

    # ------------------------------------------------------------------
    # Players
    # ------------------------------------------------------------------

    def list_players(self, force: bool = False) -> list[PlayerRecord]:
        """All players, best average first."""

        def load() -> list[PlayerRecord]:
            query = Player.select().order_by(Player.average_rating.desc(), Player.name)
            return [_player_record(row) for row in query]

        return self._read("players", load, force=force)

    def get_player(self, player_id: UUID, force: bool = False) -> Optional[PlayerRecord]:
        def load() -> Optional[PlayerRecord]:
            row = Player.get_or_none(Player.id == player_id)
            return _player_record(row) if row else None

        return self._read(f"player:{player_id}", load, force=force)

    def find_players(self, player_ids: Iterable[UUID]) -> dict[UUID, PlayerRecord]:
        """Players with the given ids, keyed by id. Always reads through."""
        ids = list(player_ids)
        if not ids:
            return {}

        def load() -> dict[UUID, PlayerRecord]:
            query = Player.select().where(Player.id.in_(ids))
            return {row.id: _player_record(row) for row in query}

        return self._read("players_by_id", load, force=True)

    def count_players(self, force: bool = False) -> int:
        return self._read("count:players", lambda: Player.select().count(), force=force)

    def increment_player_stats(
        self,
        player_id: UUID,
        rating: float,
        kills: int,
        deaths: int,
        assists: int,
    ) -> int:
        """Add one match to a player's running totals with a single atomic UPDATE."""
        return self._write(
            "increment_player_stats",
            lambda: Player.increment_stats(player_id, rating, kills, deaths, assists),
        )

    def reset_player_stats(self) -> int:
        """Zero every player's totals and averages. Returns rows updated."""
        return self._write(
            "reset_player_stats",
            lambda: Player.update(Player.zeroed_stats()).where(Player.id.is_null(False)).execute(),
        )

    # ------------------------------------------------------------------
    # Matches and participants
    # ------------------------------------------------------------------

    def count_matches(self, force: bool = False) -> int:
        return self._read("count:matches", lambda: Match.select().count(), force=force)

    def insert_match(self, match_date: datetime) -> UUID:
        return self._write("insert_match", lambda: Match.create(match_date=match_date).id)

    def insert_participants(self, match_id: UUID, rows: list[dict]) -> int:
        """
        Insert participant rows for one match.

        Each dict carries player_id, rating, kills, deaths, assists and lane.
        """
        payload = [
            {
                "match": match_id,
                "player": row["player_id"],
                "rating": row["rating"],
                "kills": row["kills"],
                "deaths": row["deaths"],
                "assists": row["assists"],
                "lane": row["lane"],
            }
            for row in rows
        ]

        def insert() -> int:
            MatchParticipant.insert_many(payload).execute()
            return len(payload)

        return self._write("insert_participants", insert)

    def _participant_query(self):
        return (
            MatchParticipant.select(MatchParticipant, Match, Player)
            .join(Match)
            .switch(MatchParticipant)
            .join(Player)
        )

    def list_participants(
        self,
        player_id: Optional[UUID] = None,
        lane: Optional[Lane] = None,
        match_id: Optional[UUID] = None,
        force: bool = False,
    ) -> list[ParticipantRecord]:
        """
        Participant rows, most recent match first, optionally filtered by equality.
        """

        def load() -> list[ParticipantRecord]:
            query = self._participant_query()
            if player_id is not None:
                query = query.where(MatchParticipant.player == player_id)
            if lane is not None:
                query = query.where(MatchParticipant.lane == Lane(lane).value)
            if match_id is not None:
                query = query.where(MatchParticipant.match == match_id)
            query = query.order_by(
                Match.match_date.desc(),
                MatchParticipant.created_at,
                MatchParticipant.id,
            )
            return [_participant_record(row) for row in query]

        lane_key = Lane(lane).value if lane is not None else None
        return self._read(f"participants:{player_id}:{lane_key}:{match_id}", load, force=force)

    def list_player_history(self, player_id: UUID, limit: int = 10, force: bool = False) -> list[ParticipantRecord]:
        """A player's most recent participations."""

        def load() -> list[ParticipantRecord]:
            query = (
                self._participant_query()
                .where(MatchParticipant.player == player_id)
                .order_by(Match.match_date.desc(), MatchParticipant.created_at.desc())
                .limit(limit)
            )
            return [_participant_record(row) for row in query]

        return self._read(f"history:{player_id}:{limit}", load, force=force)

    def list_recent_matches(self, limit: int = 20, force: bool = False) -> list[MatchRecord]:
        """The latest matches with their participants attached."""

        def load() -> list[MatchRecord]:
            matches = list(Match.select().order_by(Match.match_date.desc()).limit(limit))
            if not matches:
                return []
            by_match: dict[UUID, list[ParticipantRecord]] = {m.id: [] for m in matches}
            query = (
                self._participant_query()
                .where(MatchParticipant.match.in_(list(by_match)))
                .order_by(MatchParticipant.created_at, MatchParticipant.id)
            )
            for row in query:
                by_match[row.match_id].append(_participant_record(row))
            return [
                MatchRecord(id=m.id, match_date=m.match_date, participants=by_match[m.id])
                for m in matches
            ]

        return self._read(f"recent_matches:{limit}", load, force=force)

    def delete_all_participants(self) -> int:
        return self._write(
            "delete_all_participants",
            lambda: MatchParticipant.delete().where(MatchParticipant.id.is_null(False)).execute(),
        )

    def delete_all_matches(self) -> int:
        return self._write(
            "delete_all_matches",
            lambda: Match.delete().where(Match.id.is_null(False)).execute(),
        )

    # ------------------------------------------------------------------
    # Weekly top 3
    # ------------------------------------------------------------------

    def list_weekly_top3(self, force: bool = False) -> list[WeeklyTop3Record]:
        """Snapshot log, newest week first."""

        def load() -> list[WeeklyTop3Record]:
            query = WeeklyTop3.select().order_by(WeeklyTop3.week_start_date.desc())
            return [_weekly_record(row) for row in query]

        return self._read("weekly_top3", load, force=force)

    def get_weekly_top3(self, week_start: datetime) -> Optional[WeeklyTop3Record]:
        def load() -> Optional[WeeklyTop3Record]:
            row = WeeklyTop3.get_or_none(WeeklyTop3.week_start_date == week_start)
            return _weekly_record(row) if row else None

        return self._read(f"weekly_top3:{week_start.isoformat()}", load, force=True)

    def insert_weekly_top3(self, values: dict) -> WeeklyTop3Record:
        return self._write(
            "insert_weekly_top3",
            lambda: _weekly_record(WeeklyTop3.create(**values)),
        )

    def update_weekly_top3(self, snapshot_id: UUID, values: dict) -> WeeklyTop3Record:
        def update() -> WeeklyTop3Record:
            WeeklyTop3.update(values).where(WeeklyTop3.id == snapshot_id).execute()
            return _weekly_record(WeeklyTop3.get_by_id(snapshot_id))

        return self._write("update_weekly_top3", update)
