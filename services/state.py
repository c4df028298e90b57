"""
Leaderboard State Store

Application state held per app instance rather than in module globals.
Routes receive the store through a FastAPI dependency; tests build their
own around a gateway bound to a scratch database.
"""

from typing import Optional
from uuid import UUID

from core.logging import get_logger
from schemas.analytics import FormTip, LeaderboardSummary, PlayerDetail
from schemas.awards import AwardsData
from schemas.leaderboard import ParticipantRecord, PlayerRecord, RankedPlayer, WeeklyTop3Record
from schemas.matches import MatchResult, MatchSubmission, RecentMatch, ResetResult
from services import analytics, awards, ingestion, ranking, weekly_reset
from services.gateway import DataGateway

log = get_logger("state")


class PlayerNotFoundError(LookupError):
    def __init__(self, player_id: UUID):
        super().__init__(f"Player {player_id} not found")
        self.player_id = player_id


class LeaderboardStore:
    """
    Read and write operations the HTTP layer needs.

    Reads go through the gateway's TTL cache unless force=True; writes
    invalidate it so the next read reflects them.
    """

    def __init__(self, gateway: DataGateway):
        self.gateway = gateway

    @property
    def bayesian_weight(self) -> int:
        return self.gateway.config.bayesian_weight

    # -------------------------------- reads -------------------------------- #

    def get_players(self, force: bool = False) -> list[PlayerRecord]:
        return self.gateway.list_players(force=force)

    def get_participants(self, force: bool = False) -> list[ParticipantRecord]:
        return self.gateway.list_participants(force=force)

    def get_snapshots(self, force: bool = False) -> list[WeeklyTop3Record]:
        return self.gateway.list_weekly_top3(force=force)

    def get_leaderboard(self, force: bool = False) -> list[RankedPlayer]:
        return ranking.rank_players(
            self.get_players(force=force),
            snapshots=self.get_snapshots(force=force),
            weight=self.bayesian_weight,
            mvp_counts=awards.mvp_counts(self.get_participants(force=force)),
        )

    def get_summary(self, force: bool = False) -> LeaderboardSummary:
        return analytics.leaderboard_summary(
            self.get_leaderboard(force=force),
            self.gateway.count_matches(force=force),
        )

    def get_awards(self, force: bool = False) -> AwardsData:
        rows = self.get_participants(force=force)
        return AwardsData(
            lane_leaders=list(awards.lane_leaders(rows).values()),
            bottom_performer=awards.bottom_performer(rows),
            worst_kda=awards.worst_kda(rows),
            top_mvps=awards.top_mvps(rows),
        )

    def get_form_tips(self, force: bool = False) -> list[FormTip]:
        """Recent-form remarks for every player with at least one match."""
        histories = [
            analytics.player_history(self.gateway, player.id, limit=analytics.FORM_WINDOW, force=force)
            for player in self.get_players(force=force)
            if player.is_active
        ]
        return analytics.form_tips_feed(histories)

    def get_recent_matches(self, limit: int = 20, force: bool = False) -> list[RecentMatch]:
        return analytics.recent_matches(self.gateway, limit=limit, force=force)

    def get_player_detail(self, player_id: UUID, force: bool = False) -> PlayerDetail:
        standing: Optional[RankedPlayer] = next(
            (r for r in self.get_leaderboard(force=force) if r.player.id == player_id),
            None,
        )
        if standing is None:
            raise PlayerNotFoundError(player_id)

        rows = self.get_participants(force=force)
        lanes = analytics.lane_rankings(rows, player_id)
        partners = analytics.partnerships(rows, player_id)

        history = analytics.player_history(self.gateway, player_id, limit=analytics.FORM_WINDOW, force=force)

        return PlayerDetail(
            standing=standing,
            history=history,
            lane_rankings=lanes,
            partnerships=partners,
            tips=analytics.player_tips(standing.player.name, partners, lanes),
            form_tips=analytics.recent_form_tips(history),
        )

    # -------------------------------- writes ------------------------------- #

    def apply_match_result(self, submission: MatchSubmission) -> MatchResult:
        result = ingestion.record_match(self.gateway, submission)
        self.invalidate_cache()
        return result

    def reset(self) -> ResetResult:
        result = weekly_reset.reset_rankings(self.gateway)
        self.invalidate_cache()
        return result

    def invalidate_cache(self) -> None:
        self.gateway.invalidate_cache()
