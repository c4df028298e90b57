"""
Weekly Snapshot and Reset

Saves the current podium to the weekly_top3 log, then wipes the match
ledger and zeroes every player's totals. The snapshot is keyed by the
Sunday-Saturday week, so resetting twice in one week rewrites that
week's row instead of adding another.
"""

from datetime import datetime, time, timedelta
from typing import Optional

import pytz

from core.logging import get_logger
from schemas.leaderboard import RankedPlayer, WeeklyTop3Record
from schemas.matches import ResetResult
from services.gateway import DataGateway
from services.ranking import rank_players, top_n

PODIUM_SIZE = 3

log = get_logger("weekly_reset")


def _to_storage(moment: datetime) -> datetime:
    """Aware datetime -> naive UTC, the form every timestamp column holds."""
    return moment.astimezone(pytz.utc).replace(tzinfo=None)


def week_bounds(moment: datetime, timezone: str = "UTC") -> tuple[datetime, datetime]:
    """
    Start (Sunday 00:00) and end (Saturday 23:59:59.999999) of the calendar
    week containing moment, evaluated in timezone and returned as naive UTC.

    Naive inputs are taken to be UTC.
    """
    tz = pytz.timezone(timezone)
    if moment.tzinfo is None:
        moment = pytz.utc.localize(moment)
    local = moment.astimezone(tz)

    days_since_sunday = (local.weekday() + 1) % 7
    first_day = local.date() - timedelta(days=days_since_sunday)
    last_day = first_day + timedelta(days=6)

    start = tz.localize(datetime.combine(first_day, time.min))
    end = tz.localize(datetime.combine(last_day, time.max))
    return _to_storage(start), _to_storage(end)


def podium_values(podium: list[RankedPlayer]) -> dict:
    """Column values for a weekly_top3 row from the first three ranked players."""
    values: dict = {}
    for position, entry in enumerate(podium, start=1):
        values[f"top{position}_player_id"] = entry.player.id
        values[f"top{position}_player_name"] = entry.player.name
        values[f"top{position}_player_avatar"] = entry.player.avatar
        values[f"top{position}_score"] = entry.bayesian_rating
    return values


def capture_weekly_top3(
    gateway: DataGateway,
    ranked: list[RankedPlayer],
    now: Optional[datetime] = None,
) -> Optional[WeeklyTop3Record]:
    """
    Upsert this week's podium.

    Returns None without writing when fewer than three players have
    played a match.
    """
    podium = top_n(ranked, PODIUM_SIZE)
    if len(podium) < PODIUM_SIZE:
        log.info("weekly_snapshot_skipped", active_players=len(podium))
        return None

    week_start, week_end = week_bounds(now or datetime.utcnow(), gateway.config.timezone)
    values = {
        "week_start_date": week_start,
        "week_end_date": week_end,
        **podium_values(podium),
    }

    existing = gateway.get_weekly_top3(week_start)
    if existing:
        snapshot = gateway.update_weekly_top3(existing.id, values)
        log.info("weekly_snapshot_overwritten", week_start=week_start.isoformat())
    else:
        snapshot = gateway.insert_weekly_top3(values)
        log.info("weekly_snapshot_saved", week_start=week_start.isoformat())
    return snapshot


def reset_rankings(gateway: DataGateway, now: Optional[datetime] = None) -> ResetResult:
    """
    Snapshot the podium, delete all participants and matches, zero all players.

    Irreversible apart from the snapshot. Runs as one transaction.
    """
    players = gateway.list_players(force=True)
    ranked = rank_players(players, weight=gateway.config.bayesian_weight)

    with gateway.transaction("reset_rankings"):
        snapshot = capture_weekly_top3(gateway, ranked, now=now)
        participants_deleted = gateway.delete_all_participants()
        matches_deleted = gateway.delete_all_matches()
        players_reset = gateway.reset_player_stats()

    log.info(
        "rankings_reset",
        snapshot_saved=snapshot is not None,
        participants_deleted=participants_deleted,
        matches_deleted=matches_deleted,
        players_reset=players_reset,
    )

    return ResetResult(
        snapshot=snapshot,
        participants_deleted=participants_deleted,
        matches_deleted=matches_deleted,
        players_reset=players_reset,
    )
