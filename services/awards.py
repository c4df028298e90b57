"""
Award Derivation

Read-only computations over match participant history: best player per
lane, the all-time worst rating and worst KDA, and MVP attribution.
"""

from collections import defaultdict
from typing import Iterable, Optional
from uuid import UUID

from schemas.awards import (
    BottomPerformer,
    LaneLeader,
    MatchMvp,
    MvpStanding,
    WorstKda,
)
from schemas.leaderboard import Lane, ParticipantRecord

LANE_LEADER_MIN_MATCHES = 3
MVP_MIN_MATCHES = 3
TOP_MVP_LIMIT = 3


def lane_averages(
    rows: Iterable[ParticipantRecord],
    lane: Lane,
) -> dict[UUID, tuple[float, int]]:
    """Per-player (mean rating, appearances) within one lane."""
    totals: dict[UUID, list[float]] = defaultdict(lambda: [0.0, 0])
    for row in rows:
        if row.lane != lane:
            continue
        acc = totals[row.player_id]
        acc[0] += row.rating
        acc[1] += 1
    return {pid: (total / count, int(count)) for pid, (total, count) in totals.items()}


def lane_leaders(
    rows: Iterable[ParticipantRecord],
    min_matches: int = LANE_LEADER_MIN_MATCHES,
) -> dict[Lane, LaneLeader]:
    """
    Highest mean rating per lane among players with at least min_matches
    appearances in that lane.

    Lanes where nobody qualifies are left out of the result. Equal means
    go to the player with more appearances, then the lower player id.
    """
    rows = list(rows)
    identities = {row.player_id: row for row in rows}
    leaders: dict[Lane, LaneLeader] = {}

    for lane in Lane:
        eligible = [
            (pid, mean, count)
            for pid, (mean, count) in lane_averages(rows, lane).items()
            if count >= min_matches
        ]
        if not eligible:
            continue
        pid, mean, count = min(eligible, key=lambda e: (-e[1], -e[2], e[0]))
        who = identities[pid]
        leaders[lane] = LaneLeader(
            lane=lane,
            player_id=pid,
            player_name=who.player_name,
            player_avatar=who.player_avatar,
            best_rating=mean,
            matches=count,
        )

    return leaders


def bottom_performer(rows: Iterable[ParticipantRecord]) -> Optional[BottomPerformer]:
    """The single lowest rating ever recorded; ties go to the most recent match."""
    worst: Optional[ParticipantRecord] = None
    for row in rows:
        if worst is None or row.rating < worst.rating:
            worst = row
        elif row.rating == worst.rating and row.match_date > worst.match_date:
            worst = row

    if worst is None:
        return None

    return BottomPerformer(
        player_id=worst.player_id,
        player_name=worst.player_name,
        player_avatar=worst.player_avatar,
        worst_rating=worst.rating,
        match_id=worst.match_id,
        match_date=worst.match_date,
    )


def worst_kda(rows: Iterable[ParticipantRecord]) -> Optional[WorstKda]:
    """
    The single lowest (kills + assists) / max(deaths, 1) ever recorded.

    A deathless row counts as one death, so 0/0/0 scores 0. Ties keep
    the first row encountered.
    """
    worst: Optional[ParticipantRecord] = None
    for row in rows:
        if worst is None or row.kda_ratio < worst.kda_ratio:
            worst = row

    if worst is None:
        return None

    return WorstKda(
        player_id=worst.player_id,
        player_name=worst.player_name,
        player_avatar=worst.player_avatar,
        kills=worst.kills,
        deaths=worst.deaths,
        assists=worst.assists,
        kd_ratio=worst.kda_ratio,
        match_id=worst.match_id,
        match_date=worst.match_date,
    )


def match_mvp(participants: Iterable[ParticipantRecord]) -> Optional[ParticipantRecord]:
    """
    Highest rating within one match.

    Tied ratings go to the lowest player id, so the answer does not depend
    on the order rows come back from the database.
    """
    participants = list(participants)
    if not participants:
        return None
    return min(participants, key=lambda p: (-p.rating, p.player_id))


def to_match_mvp(mvp: ParticipantRecord) -> MatchMvp:
    return MatchMvp(
        match_id=mvp.match_id,
        player_id=mvp.player_id,
        player_name=mvp.player_name,
        player_avatar=mvp.player_avatar,
        rating=mvp.rating,
        lane=mvp.lane,
    )


def group_by_match(rows: Iterable[ParticipantRecord]) -> dict[UUID, list[ParticipantRecord]]:
    groups: dict[UUID, list[ParticipantRecord]] = defaultdict(list)
    for row in rows:
        groups[row.match_id].append(row)
    return dict(groups)


def mvp_counts(rows: Iterable[ParticipantRecord]) -> dict[UUID, int]:
    """Number of matches each player was MVP of. Players with none are absent."""
    counts: dict[UUID, int] = defaultdict(int)
    for participants in group_by_match(rows).values():
        mvp = match_mvp(participants)
        if mvp is not None:
            counts[mvp.player_id] += 1
    return dict(counts)


def top_mvps(
    rows: Iterable[ParticipantRecord],
    min_matches: int = MVP_MIN_MATCHES,
    limit: Optional[int] = TOP_MVP_LIMIT,
) -> list[MvpStanding]:
    """
    MVP standings for players with at least min_matches recorded matches.

    Ordered by MVP count, then MVP percentage, then player id.
    """
    rows = list(rows)
    counts = mvp_counts(rows)

    appearances: dict[UUID, int] = defaultdict(int)
    identities: dict[UUID, ParticipantRecord] = {}
    for row in rows:
        appearances[row.player_id] += 1
        identities[row.player_id] = row

    standings = [
        MvpStanding(
            player_id=pid,
            player_name=identities[pid].player_name,
            player_avatar=identities[pid].player_avatar,
            mvp_count=counts.get(pid, 0),
            total_matches=total,
            mvp_percentage=counts.get(pid, 0) / total * 100,
        )
        for pid, total in appearances.items()
        if total >= min_matches
    ]
    standings.sort(key=lambda s: (-s.mvp_count, -s.mvp_percentage, s.player_id))

    if limit is not None:
        standings = standings[:limit]
    return standings
