"""
Match Ingestion

Validates a match submission, then records the match, its participant rows
and every participant's new running totals in one transaction. Player
totals are advanced with server-side increments rather than a
read-then-write, so concurrent submissions for the same player both land.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from core.logging import get_logger
from schemas.common import ValidationError
from schemas.leaderboard import PlayerRecord
from schemas.matches import (
    MAX_PARTICIPANTS,
    MatchResult,
    MatchSubmission,
    ParticipantInput,
)
from services.gateway import DataGateway

MIN_RATING = 1.0
MAX_RATING = 10.0
MIN_PARTICIPANTS = 1

log = get_logger("ingestion")


class MatchValidationError(Exception):
    """Raised when a submission breaks one or more rules. Nothing is written."""

    def __init__(self, errors: list[ValidationError]):
        self.errors = errors
        super().__init__("; ".join(e.message for e in errors))

    @property
    def messages(self) -> list[str]:
        return [e.message for e in self.errors]


def _label(slot: int, participant: ParticipantInput, known: dict[UUID, PlayerRecord]) -> str:
    player = known.get(participant.player_id)
    return player.name if player else f"player {slot}"


def validate_submission(
    submission: MatchSubmission,
    known_players: Optional[dict[UUID, PlayerRecord]] = None,
) -> list[ValidationError]:
    """
    Check a submission and return every violation found.

    Rules: 1 to 5 filled slots; each rating within [1, 10]; kills, deaths
    and assists not negative; every slot has a lane; no player twice. When
    known_players is given, slots naming an unknown player are rejected too.
    """
    known = known_players or {}
    errors: list[ValidationError] = []
    participants = submission.filled()

    if len(participants) < MIN_PARTICIPANTS:
        errors.append(
            ValidationError(
                field="participants",
                message="Select at least 1 player",
                value=len(participants),
            )
        )
    if len(participants) > MAX_PARTICIPANTS:
        errors.append(
            ValidationError(
                field="participants",
                message=f"A match has at most {MAX_PARTICIPANTS} players",
                value=len(participants),
            )
        )

    seen: set[UUID] = set()
    for slot, participant in enumerate(participants, start=1):
        label = _label(slot, participant, known)
        prefix = f"participants[{slot - 1}]"

        if known_players is not None and participant.player_id not in known:
            errors.append(
                ValidationError(
                    field=f"{prefix}.player_id",
                    message=f"Unknown player for slot {slot}",
                    value=str(participant.player_id),
                )
            )
        if participant.player_id in seen:
            errors.append(
                ValidationError(
                    field=f"{prefix}.player_id",
                    message=f"{label} appears more than once in this match",
                    value=str(participant.player_id),
                )
            )
        seen.add(participant.player_id)

        if not MIN_RATING <= participant.rating <= MAX_RATING:
            errors.append(
                ValidationError(
                    field=f"{prefix}.rating",
                    message=f"Rating for {label} must be between 1 and 10",
                    value=participant.rating,
                )
            )
        for stat in ("kills", "deaths", "assists"):
            value = getattr(participant, stat)
            if value < 0:
                errors.append(
                    ValidationError(
                        field=f"{prefix}.{stat}",
                        message=f"{stat.capitalize()} for {label} cannot be negative",
                        value=value,
                    )
                )
        if participant.lane is None:
            errors.append(
                ValidationError(
                    field=f"{prefix}.lane",
                    message=f"Lane for {label} is required",
                )
            )

    return errors


def record_match(
    gateway: DataGateway,
    submission: MatchSubmission,
    now: Optional[datetime] = None,
) -> MatchResult:
    """
    Validate and persist a match.

    Raises:
        MatchValidationError: If the submission breaks any rule (nothing written)
        BackendWriteError: If the database rejects a write (everything rolled back)
        ServiceUnavailableError: If the player lookup cannot reach the database
    """
    participants = submission.filled()
    known = gateway.find_players(p.player_id for p in participants)

    errors = validate_submission(submission, known_players=known)
    if errors:
        log.info("match_rejected", errors=[e.message for e in errors])
        raise MatchValidationError(errors)

    match_date = now or datetime.utcnow()
    rows = [
        {
            "player_id": p.player_id,
            "rating": p.rating,
            "kills": p.kills,
            "deaths": p.deaths,
            "assists": p.assists,
            "lane": p.lane.value,
        }
        for p in participants
    ]

    with gateway.transaction("record_match"):
        match_id = gateway.insert_match(match_date)
        recorded = gateway.insert_participants(match_id, rows)
        updated = 0
        for row in rows:
            updated += gateway.increment_player_stats(
                row["player_id"],
                rating=row["rating"],
                kills=row["kills"],
                deaths=row["deaths"],
                assists=row["assists"],
            )

    log.info(
        "match_recorded",
        match_id=str(match_id),
        participants=recorded,
        players_updated=updated,
    )

    return MatchResult(
        match_id=match_id,
        match_date=match_date,
        participants_recorded=recorded,
        players_updated=updated,
    )
