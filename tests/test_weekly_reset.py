"""Tests for week bounds, podium snapshots and the full reset."""

from datetime import datetime

import pytest

from db.models.leaderboard import Match, MatchParticipant, Player, WeeklyTop3
from schemas.leaderboard import Lane
from schemas.matches import MatchSubmission, ParticipantInput
from services.ingestion import record_match
from services.weekly_reset import reset_rankings, week_bounds

WEDNESDAY = datetime(2026, 10, 14, 12, 0)
WEEK_START = datetime(2026, 10, 11)
WEEK_END = datetime(2026, 10, 17, 23, 59, 59, 999999)


def play(gateway, *results):
    """Record one match; results are (player, rating) pairs."""
    lanes = list(Lane)
    record_match(
        gateway,
        MatchSubmission(
            participants=[
                ParticipantInput(player_id=p.id, rating=rating, lane=lanes[i])
                for i, (p, rating) in enumerate(results)
            ]
        ),
    )


@pytest.mark.parametrize(
    "moment",
    [
        WEDNESDAY,
        datetime(2026, 10, 11, 0, 0),  # Sunday midnight opens the week
        datetime(2026, 10, 17, 23, 59, 59),  # Saturday night still inside it
    ],
)
def test_week_bounds_sunday_to_saturday(moment):
    assert week_bounds(moment) == (WEEK_START, WEEK_END)


def test_week_bounds_respects_timezone():
    # 02:00 UTC on Sunday is still Saturday evening in New York
    start, end = week_bounds(datetime(2026, 10, 11, 2, 0), "America/New_York")
    assert start == datetime(2026, 10, 4, 4, 0)
    assert end.date() == datetime(2026, 10, 11).date()


def test_reset_snapshots_podium_and_wipes_history(gateway, make_player):
    ahri, brand, cait, draven = (make_player(n) for n in ("Ahri", "Brand", "Cait", "Draven"))
    play(gateway, (ahri, 9.0), (brand, 7.0), (cait, 5.0), (draven, 3.0))
    play(gateway, (ahri, 8.0), (brand, 7.0), (cait, 6.0))

    result = reset_rankings(gateway, now=WEDNESDAY)

    assert result.participants_deleted == 7
    assert result.matches_deleted == 2
    assert result.players_reset == 4
    assert result.refresh_required

    snapshot = result.snapshot
    assert snapshot.week_start_date == WEEK_START
    assert snapshot.week_end_date == WEEK_END
    assert [e.player_name for e in snapshot.podium()] == ["Ahri", "Brand", "Cait"]
    assert snapshot.top1_score > snapshot.top2_score > snapshot.top3_score

    assert Match.select().count() == 0
    assert MatchParticipant.select().count() == 0
    for player in Player.select():
        assert player.total_matches == 0
        assert player.total_rating == 0
        assert player.average_rating == 0
        assert player.total_kills == 0


def test_second_reset_same_week_overwrites_snapshot(gateway, make_player):
    ahri, brand, cait = (make_player(n) for n in ("Ahri", "Brand", "Cait"))
    play(gateway, (ahri, 9.0), (brand, 7.0), (cait, 5.0))
    reset_rankings(gateway, now=WEDNESDAY)

    play(gateway, (ahri, 2.0), (brand, 4.0), (cait, 10.0))
    result = reset_rankings(gateway, now=datetime(2026, 10, 16, 20, 0))

    assert WeeklyTop3.select().count() == 1
    assert result.snapshot.top1_player_name == "Cait"
    assert WeeklyTop3.get().top1_player_name == "Cait"


def test_resets_in_different_weeks_append(gateway, make_player):
    ahri, brand, cait = (make_player(n) for n in ("Ahri", "Brand", "Cait"))
    play(gateway, (ahri, 9.0), (brand, 7.0), (cait, 5.0))
    reset_rankings(gateway, now=WEDNESDAY)

    play(gateway, (ahri, 9.0), (brand, 7.0), (cait, 5.0))
    reset_rankings(gateway, now=datetime(2026, 10, 19, 9, 0))

    weeks = [s.week_start_date for s in gateway.list_weekly_top3(force=True)]
    assert weeks == [datetime(2026, 10, 18), WEEK_START]


def test_snapshot_skipped_with_fewer_than_three_active(gateway, make_player):
    ahri, brand = make_player("Ahri"), make_player("Brand")
    make_player("Cait")  # never played
    play(gateway, (ahri, 9.0), (brand, 7.0))

    result = reset_rankings(gateway, now=WEDNESDAY)

    assert result.snapshot is None
    assert WeeklyTop3.select().count() == 0
    assert result.matches_deleted == 1
    assert Player.get_by_id(ahri.id).total_matches == 0


def test_podium_counts_feed_leaderboard(store, make_player):
    ahri, brand, cait = (make_player(n) for n in ("Ahri", "Brand", "Cait"))
    play(store.gateway, (ahri, 9.0), (brand, 7.0), (cait, 5.0))
    reset_rankings(store.gateway, now=WEDNESDAY)

    podiums = {r.player.name: r.podium for r in store.get_leaderboard()}
    assert podiums["Ahri"].top1_count == 1
    assert podiums["Brand"].top2_count == 1
    assert podiums["Cait"].top3_count == 1
