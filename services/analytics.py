"""
Player Analytics

Per-player breakdowns for the profile page: lane standings, how the
player does alongside each teammate, generated tips, plus the recent
match feed and the headline summary numbers.
"""

from typing import Iterable, Optional
from uuid import UUID

from schemas.analytics import FormTip, LaneRanking, LeaderboardSummary, Partnership
from schemas.leaderboard import Lane, ParticipantRecord, RankedPlayer
from schemas.matches import RecentMatch
from services.awards import group_by_match, lane_averages, match_mvp, to_match_mvp
from services.gateway import DataGateway

LANE_RANKING_MIN_MATCHES = 2
PARTNERSHIP_MIN_MATCHES = 3
GOOD_RATING = 8.0
BAD_RATING = 4.0
TIP_THRESHOLD = 3
TIP_LANE_POSITION = 3

FORM_WINDOW = 10
WEAK_LANE_AVERAGE = 5.0
WEAK_LANE_MIN_MATCHES = 2
HEAVY_DEATHS_TOTAL = 7  # over the last 3 matches
FEEDING_DEATHS = 10  # in one of the last 5 matches
STRONG_RATING = 7.0
CARRY_RATING = 9.0

# Best first; a player gets at most one positive remark
POSITIVE_RULES = ("carrying_team", "hot_streak", "keep_carrying")
KIND_ORDER = {"positive": 0, "warning": 1, "negative": 2}


def lane_rankings(
    rows: Iterable[ParticipantRecord],
    player_id: UUID,
    min_matches: int = LANE_RANKING_MIN_MATCHES,
) -> list[LaneRanking]:
    """
    The player's position in every lane where both they and the others
    ranked have at least min_matches appearances.
    """
    rows = list(rows)
    rankings: list[LaneRanking] = []

    for lane in Lane:
        averages = [
            (pid, mean)
            for pid, (mean, count) in lane_averages(rows, lane).items()
            if count >= min_matches
        ]
        averages.sort(key=lambda a: (-a[1], a[0]))
        for position, (pid, mean) in enumerate(averages, start=1):
            if pid == player_id:
                rankings.append(
                    LaneRanking(
                        lane=lane,
                        position=position,
                        total_players=len(averages),
                        average_rating=mean,
                    )
                )
                break

    return rankings


def partnerships(
    rows: Iterable[ParticipantRecord],
    player_id: UUID,
    min_matches: int = PARTNERSHIP_MIN_MATCHES,
) -> list[Partnership]:
    """
    Group the player's matches by teammate and the teammate's lane.

    Each partnership carries the player's own average rating in those
    matches and how many of them were good (>= 8) or bad (<= 4).
    """
    stats: dict[tuple[UUID, Lane], dict] = {}

    for participants in group_by_match(rows).values():
        own = next((p for p in participants if p.player_id == player_id), None)
        if own is None:
            continue
        for mate in participants:
            if mate.player_id == player_id:
                continue
            key = (mate.player_id, mate.lane)
            entry = stats.setdefault(
                key,
                {"mate": mate, "ratings": [], "good": 0, "bad": 0},
            )
            entry["ratings"].append(own.rating)
            if own.rating >= GOOD_RATING:
                entry["good"] += 1
            if own.rating <= BAD_RATING:
                entry["bad"] += 1

    result = [
        Partnership(
            partner_id=entry["mate"].player_id,
            partner_name=entry["mate"].player_name,
            partner_avatar=entry["mate"].player_avatar,
            lane=lane,
            matches_played=len(entry["ratings"]),
            average_rating=sum(entry["ratings"]) / len(entry["ratings"]),
            good_performances=entry["good"],
            bad_performances=entry["bad"],
        )
        for (_, lane), entry in stats.items()
        if len(entry["ratings"]) >= min_matches
    ]
    result.sort(key=lambda p: (-p.matches_played, p.partner_name, p.lane.value))
    return result


def player_tips(
    player_name: str,
    partners: list[Partnership],
    rankings: list[LaneRanking],
) -> list[str]:
    tips: list[str] = []

    for partner in partners:
        if partner.good_performances >= TIP_THRESHOLD:
            tips.append(
                f"{player_name} plays exceptionally well with {partner.partner_name} "
                f"on {partner.lane.value}: {partner.good_performances} great games together."
            )
    for partner in partners:
        if partner.bad_performances >= TIP_THRESHOLD:
            tips.append(
                f"{player_name} struggles alongside {partner.partner_name} "
                f"on {partner.lane.value}: {partner.bad_performances} weak games together."
            )
    for ranking in rankings:
        if ranking.position <= TIP_LANE_POSITION:
            tips.append(
                f"{player_name} is top {TIP_LANE_POSITION} on {ranking.lane.value}: "
                f"#{ranking.position} of {ranking.total_players}."
            )

    return tips


def recent_form_tips(history: list[ParticipantRecord]) -> list[FormTip]:
    """
    Remarks on one player's recent form.

    history holds the player's participations, newest first; only the
    first FORM_WINDOW are considered. Rules:

    - weak_lane: a lane averaging below 5 over at least 2 of those matches
    - heavy_deaths: more than 7 deaths in total over the last 3 matches
    - keep_carrying: rated 7 or more in each of the last 2 matches
    - hot_streak: averaging 7 or more over the last 3 matches
    - carrying_team: rated above 9 at least twice in the last 5 matches
    - feeding: more than 10 deaths in one of the last 5 matches

    Only the best positive remark is kept. A positive remark drops
    heavy_deaths and feeding when heavy_deaths fired; otherwise feeding
    replaces heavy_deaths.
    """
    history = list(history)[:FORM_WINDOW]
    if not history:
        return []

    who = history[0]
    name = who.player_name
    found: list[tuple[str, str, str]] = []

    for lane in Lane:
        ratings = [p.rating for p in history if p.lane == lane]
        if len(ratings) >= WEAK_LANE_MIN_MATCHES and sum(ratings) / len(ratings) < WEAK_LANE_AVERAGE:
            found.append(("warning", "weak_lane", f"{name}, stay away from {lane.value}: it is not your lane."))

    last2, last3, last5 = history[:2], history[:3], history[:5]

    if len(last3) == 3 and sum(p.deaths for p in last3) > HEAVY_DEATHS_TOTAL:
        found.append(("negative", "heavy_deaths", f"Stop dying, {name}: too many deaths in the last few games."))
    if len(last2) == 2 and all(p.rating >= STRONG_RATING for p in last2):
        found.append(("positive", "keep_carrying", f"{name}, keep it up and keep carrying."))
    if len(last3) == 3 and sum(p.rating for p in last3) / 3 >= STRONG_RATING:
        found.append(("positive", "hot_streak", f"{name} has been playing great lately."))
    if sum(1 for p in last5 if p.rating > CARRY_RATING) >= 2:
        found.append(("positive", "carrying_team", f"{name} has been carrying the team lately."))
    if any(p.deaths > FEEDING_DEATHS for p in last5):
        found.append(("warning", "feeding", f"{name}, stop feeding: the team cannot carry you forever."))

    rules = {rule for _, rule, _ in found}
    best_positive = next((r for r in POSITIVE_RULES if r in rules), None)
    dropped = {r for r in POSITIVE_RULES if r != best_positive}
    if best_positive and "heavy_deaths" in rules:
        dropped |= {"heavy_deaths", "feeding"}
    elif "feeding" in rules:
        dropped.add("heavy_deaths")

    return [
        FormTip(
            kind=kind,
            rule=rule,
            player_id=who.player_id,
            player_name=name,
            player_avatar=who.player_avatar,
            message=message,
        )
        for kind, rule, message in found
        if rule not in dropped
    ]


def form_tips_feed(histories: Iterable[list[ParticipantRecord]]) -> list[FormTip]:
    """Form tips for a group of players: positive first, then warnings, then negatives, by name."""
    tips = [tip for history in histories for tip in recent_form_tips(history)]
    tips.sort(key=lambda t: (KIND_ORDER[t.kind], t.player_name))
    return tips


def player_history(gateway: DataGateway, player_id: UUID, limit: int = 10, force: bool = False) -> list[ParticipantRecord]:
    """The player's most recent participations, newest first."""
    return gateway.list_player_history(player_id, limit=limit, force=force)


def recent_matches(gateway: DataGateway, limit: int = 20, force: bool = False) -> list[RecentMatch]:
    """Latest matches, highest rating first within each, with the MVP resolved."""
    feed = []
    for match in gateway.list_recent_matches(limit=limit, force=force):
        mvp = match_mvp(match.participants)
        feed.append(
            RecentMatch(
                match_id=match.id,
                match_date=match.match_date,
                participants=sorted(match.participants, key=lambda p: -p.rating),
                mvp=to_match_mvp(mvp) if mvp else None,
            )
        )
    return feed


def leaderboard_summary(ranked: list[RankedPlayer], match_count: int) -> LeaderboardSummary:
    active = [r for r in ranked if r.player.is_active]
    average = sum(r.player.average_rating for r in active) / len(active) if active else 0.0
    champion: Optional[str] = active[0].player.name if active else None
    return LeaderboardSummary(
        total_matches=match_count,
        average_rating=average,
        active_players=len(active),
        champion_name=champion,
    )
