"""Unit tests for lane leaders, all-time lows and MVP attribution."""

from uuid import UUID, uuid4

import pytest

from schemas.leaderboard import Lane
from services.awards import (
    bottom_performer,
    lane_leaders,
    match_mvp,
    mvp_counts,
    top_mvps,
    worst_kda,
)
from tests.conftest import participant


def test_lane_leader_requires_three_appearances():
    specialist, regular = uuid4(), uuid4()
    rows = [
        participant(specialist, 10.0, Lane.TOP),
        participant(specialist, 10.0, Lane.TOP),
        participant(regular, 6.0, Lane.TOP),
        participant(regular, 6.0, Lane.TOP),
        participant(regular, 6.0, Lane.TOP),
    ]

    leaders = lane_leaders(rows)

    assert leaders[Lane.TOP].player_id == regular
    assert leaders[Lane.TOP].best_rating == pytest.approx(6.0)
    assert leaders[Lane.TOP].matches == 3


def test_lanes_without_eligible_player_are_absent():
    pid = uuid4()
    rows = [participant(pid, 8.0, Lane.ADC) for _ in range(3)]
    rows.append(participant(pid, 9.0, Lane.SUP))

    leaders = lane_leaders(rows)

    assert set(leaders) == {Lane.ADC}
    assert lane_leaders([]) == {}


def test_lane_leader_uses_mean_not_best_single_game():
    steady, streaky = uuid4(), uuid4()
    rows = [participant(steady, r, Lane.JUNGLE) for r in (8.0, 8.0, 8.0)]
    rows += [participant(streaky, r, Lane.JUNGLE) for r in (10.0, 10.0, 2.0)]

    assert lane_leaders(rows)[Lane.JUNGLE].player_id == steady


def test_bottom_performer_picks_lowest_rating_most_recent_on_tie():
    early, late, fine = uuid4(), uuid4(), uuid4()
    rows = [
        participant(early, 1.5, day=1),
        participant(fine, 7.0, day=2),
        participant(late, 1.5, day=5),
    ]

    worst = bottom_performer(rows)

    assert worst.player_id == late
    assert worst.worst_rating == 1.5
    assert worst.match_date.day == 6


def test_bottom_performer_absent_without_history():
    assert bottom_performer([]) is None
    assert worst_kda([]) is None


def test_worst_kda_floors_deaths_at_one():
    feeder, ghost = uuid4(), uuid4()
    rows = [
        participant(feeder, 5.0, kills=1, deaths=10, assists=2),  # 0.3
        participant(ghost, 5.0, kills=0, deaths=0, assists=0),  # 0 / max(0, 1) = 0
    ]

    worst = worst_kda(rows)

    assert worst.player_id == ghost
    assert worst.kd_ratio == 0


def test_worst_kda_keeps_first_row_on_tie():
    first, second = uuid4(), uuid4()
    rows = [
        participant(first, 5.0, kills=1, deaths=4, assists=1),
        participant(second, 5.0, kills=0, deaths=2, assists=1),
    ]

    assert worst_kda(rows).player_id == first
    assert worst_kda(rows).kd_ratio == pytest.approx(0.5)


def test_mvp_tie_goes_to_lowest_player_id_regardless_of_order():
    match_id = uuid4()
    low = UUID("00000000-0000-0000-0000-000000000001")
    high = UUID("ffffffff-0000-0000-0000-000000000000")
    rows = [
        participant(high, 9.0, match_id=match_id),
        participant(low, 9.0, match_id=match_id),
        participant(uuid4(), 7.0, match_id=match_id),
    ]

    assert match_mvp(rows).player_id == low
    assert match_mvp(list(reversed(rows))).player_id == low
    assert match_mvp(rows).player_id == match_mvp(rows).player_id


def test_mvp_counts_per_player():
    star, other = uuid4(), uuid4()
    m1, m2, m3 = uuid4(), uuid4(), uuid4()
    rows = [
        participant(star, 9.0, match_id=m1),
        participant(other, 6.0, match_id=m1),
        participant(star, 8.0, match_id=m2),
        participant(other, 7.5, match_id=m2),
        participant(star, 5.0, match_id=m3),
        participant(other, 6.5, match_id=m3),
    ]

    assert mvp_counts(rows) == {star: 2, other: 1}
    assert match_mvp([]) is None


def test_top_mvps_requires_minimum_matches_and_orders_by_count():
    solo, star, sidekick = uuid4(), uuid4(), uuid4()
    rows = [participant(solo, 10.0)]  # one-match wonder, never eligible
    for i in range(4):
        m = uuid4()
        rows.append(participant(star, 9.0 if i < 3 else 5.0, match_id=m, name="star"))
        rows.append(participant(sidekick, 6.0 if i < 3 else 8.0, match_id=m, name="sidekick"))

    standings = top_mvps(rows)

    assert [s.player_name for s in standings] == ["star", "sidekick"]
    assert standings[0].mvp_count == 3
    assert standings[0].total_matches == 4
    assert standings[0].mvp_percentage == pytest.approx(75.0)
    assert solo not in {s.player_id for s in standings}


def test_top_mvps_limit():
    rows = []
    players = [uuid4() for _ in range(5)]
    for _ in range(3):
        m = uuid4()
        for rank, pid in enumerate(players):
            rows.append(participant(pid, 9.0 - rank, match_id=m))

    assert len(top_mvps(rows)) == 3
    assert len(top_mvps(rows, limit=None)) == 5
