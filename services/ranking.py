"""
Ranking Engine

Orders players by a Bayesian average: each player's mean rating is blended
with the group mean as if they had also played BAYESIAN_WEIGHT matches at
the group mean. A single lucky match therefore cannot top the board, and
the blend converges to the raw average as a player's match count grows.
"""

from collections import defaultdict
from typing import Iterable, Optional
from uuid import UUID

from schemas.leaderboard import (
    PlayerRecord,
    PodiumCounts,
    RankedPlayer,
    WeeklyTop3Record,
)

BAYESIAN_WEIGHT = 5  # virtual matches at the global average
DEFAULT_GLOBAL_AVERAGE = 5.0  # prior when nobody has played yet

TREND_UP_THRESHOLD = 7.0
TREND_DOWN_THRESHOLD = 4.0


def global_average(players: Iterable[PlayerRecord]) -> float:
    """Mean of average_rating over players with at least one match."""
    averages = [p.average_rating for p in players if p.is_active]
    if not averages:
        return DEFAULT_GLOBAL_AVERAGE
    return sum(averages) / len(averages)


def bayesian_rating(
    average_rating: float,
    total_matches: int,
    prior: float,
    weight: int = BAYESIAN_WEIGHT,
) -> float:
    """
    (prior * weight + average_rating * total_matches) / (weight + total_matches)

    >>> round(bayesian_rating(10.0, 1, 6.0), 3)
    6.667
    >>> round(bayesian_rating(8.0, 50, 6.0), 3)
    7.818
    """
    return (prior * weight + average_rating * total_matches) / (weight + total_matches)


def performance_trend(average_rating: float) -> Optional[str]:
    if average_rating >= TREND_UP_THRESHOLD:
        return "up"
    if average_rating <= TREND_DOWN_THRESHOLD:
        return "down"
    return None


def podium_counts(snapshots: Iterable[WeeklyTop3Record]) -> dict[UUID, PodiumCounts]:
    """Tally how often each player finished 1st, 2nd and 3rd in the weekly log."""
    tallies: dict[UUID, dict[int, int]] = defaultdict(lambda: {1: 0, 2: 0, 3: 0})
    for snapshot in snapshots:
        for entry in snapshot.podium():
            tallies[entry.player_id][entry.rank] += 1
    return {
        player_id: PodiumCounts(top1_count=t[1], top2_count=t[2], top3_count=t[3])
        for player_id, t in tallies.items()
    }


def rank_players(
    players: Iterable[PlayerRecord],
    snapshots: Iterable[WeeklyTop3Record] = (),
    weight: int = BAYESIAN_WEIGHT,
    mvp_counts: Optional[dict[UUID, int]] = None,
) -> list[RankedPlayer]:
    """
    Produce the leaderboard order.

    Players with matches come first, sorted by Bayesian rating descending
    with more matches winning ties. Players without matches follow in
    their input order and carry no Bayesian rating. Rank is the 1-based
    position in the result. mvp_counts, when given, is attached per player.
    """
    players = list(players)
    active = [p for p in players if p.is_active]
    inactive = [p for p in players if not p.is_active]
    mvps = mvp_counts or {}

    prior = global_average(active)
    scored = [
        (bayesian_rating(p.average_rating, p.total_matches, prior, weight), p)
        for p in active
    ]
    # Stable sort keeps input order for exact ties on both keys
    scored.sort(key=lambda item: (-item[0], -item[1].total_matches))

    podiums = podium_counts(snapshots)
    ranked: list[RankedPlayer] = []

    for score, player in scored:
        ranked.append(
            RankedPlayer(
                rank=len(ranked) + 1,
                player=player,
                bayesian_rating=score,
                podium=podiums.get(player.id, PodiumCounts()),
                trend=performance_trend(player.average_rating),
                mvp_count=mvps.get(player.id, 0),
            )
        )

    for player in inactive:
        ranked.append(
            RankedPlayer(
                rank=len(ranked) + 1,
                player=player,
                podium=podiums.get(player.id, PodiumCounts()),
                mvp_count=mvps.get(player.id, 0),
            )
        )

    return ranked


def top_n(ranked: list[RankedPlayer], n: int) -> list[RankedPlayer]:
    """The first n ranked players that have at least one match."""
    return [r for r in ranked if r.bayesian_rating is not None][:n]
