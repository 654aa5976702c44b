"""Persistence helpers for matches and their reconciliation state."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session, aliased

from domain.common import PlayerRatingState, PlayerSide, RatingChanges, ReportedResult
from domain.matches.reconciliation import MatchState, MatchStatus
from models import Match, Sport, Turf, User


@dataclass(frozen=True)
class MatchHistoryEntry:
    match_id: int
    scheduled_at: datetime
    status: MatchStatus
    sport_name: str
    turf_name: str | None
    opponent_id: int
    opponent_name: str
    my_result: ReportedResult | None
    my_rating_change: float | None


def create_match(
    session: Session,
    *,
    player1_id: int,
    player2_id: int,
    sport_id: int,
    scheduled_at: datetime,
    status: MatchStatus = MatchStatus.CONFIRMED,
    turf_id: int | None = None,
) -> Match:
    if player1_id == player2_id:
        raise ValueError(f"A match needs two different players, got player_id={player1_id} twice")
    match = Match(
        player1_id=player1_id,
        player2_id=player2_id,
        sport_id=sport_id,
        turf_id=turf_id,
        scheduled_at=scheduled_at,
        status=status.value,
    )
    session.add(match)
    session.flush()
    return match


def get_match_for_participant(
    session: Session,
    *,
    match_id: int,
    user_id: int,
    for_update: bool = False,
) -> Match | None:
    """Load a match the user plays in; optionally lock the row for the transaction."""
    statement = select(Match).where(
        Match.id == match_id,
        or_(Match.player1_id == user_id, Match.player2_id == user_id),
    )
    if for_update:
        statement = statement.with_for_update()
    return session.execute(statement).scalar_one_or_none()


def side_of(match: Match, user_id: int) -> PlayerSide:
    if match.player1_id == user_id:
        return PlayerSide.PLAYER1
    if match.player2_id == user_id:
        return PlayerSide.PLAYER2
    raise ValueError(f"user_id={user_id} does not play in match_id={match.id}")


def to_match_state(match: Match) -> MatchState:
    return MatchState(
        match_id=match.id,
        status=MatchStatus(match.status),
        player1_result=_optional_result(match.player1_result),
        player2_result=_optional_result(match.player2_result),
    )


def write_match_state(
    session: Session,
    *,
    previous: MatchState,
    current: MatchState,
    rating_changes: RatingChanges | None = None,
    ratings_before: tuple[PlayerRatingState, PlayerRatingState] | None = None,
    match_duration_minutes: int | None = None,
    notes: str | None = None,
) -> bool:
    """Persist a reconciled state only if the row still matches `previous`.

    Returns False when another transaction changed the match in between; the
    caller must then discard its computed rating changes.
    """
    values: dict[str, Any] = {
        "status": current.status.value,
        "player1_result": _result_value(current.player1_result),
        "player2_result": _result_value(current.player2_result),
        "updated_at": datetime.now(UTC).replace(tzinfo=None),
    }
    if match_duration_minutes is not None:
        values["match_duration_minutes"] = match_duration_minutes
    if notes is not None:
        values["notes"] = notes
    if rating_changes is not None:
        if ratings_before is None:
            raise ValueError("ratings_before is required when storing rating changes")
        player1_before, player2_before = ratings_before
        values.update(
            {
                "player1_rating_before": player1_before.rating,
                "player2_rating_before": player2_before.rating,
                "player1_rating_after": rating_changes.player1.new_rating,
                "player2_rating_after": rating_changes.player2.new_rating,
                "rating_change_player1": rating_changes.player1.rating_change,
                "rating_change_player2": rating_changes.player2.rating_change,
                "player1_k_factor": rating_changes.player1.k_factor,
                "player2_k_factor": rating_changes.player2.k_factor,
            }
        )

    statement = (
        update(Match)
        .where(
            Match.id == previous.match_id,
            Match.status == previous.status.value,
            _result_condition(Match.player1_result, previous.player1_result),
            _result_condition(Match.player2_result, previous.player2_result),
        )
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    return session.execute(statement).rowcount == 1


def fetch_user_matches(
    session: Session,
    *,
    user_id: int,
    status: MatchStatus | None = None,
    limit: int = 20,
    offset: int = 0,
) -> list[MatchHistoryEntry]:
    """Matches the user plays in, newest scheduled first, seen from the user's side."""
    if limit <= 0:
        raise ValueError("limit must be greater than 0")
    if offset < 0:
        raise ValueError("offset must be >= 0")

    player1 = aliased(User)
    player2 = aliased(User)
    statement = (
        select(
            Match,
            Sport.display_name.label("sport_name"),
            Turf.name.label("turf_name"),
            player1.first_name.label("player1_first_name"),
            player1.last_name.label("player1_last_name"),
            player2.first_name.label("player2_first_name"),
            player2.last_name.label("player2_last_name"),
        )
        .join(Sport, Sport.id == Match.sport_id)
        .outerjoin(Turf, Turf.id == Match.turf_id)
        .join(player1, player1.id == Match.player1_id)
        .join(player2, player2.id == Match.player2_id)
        .where(or_(Match.player1_id == user_id, Match.player2_id == user_id))
    )
    if status is not None:
        statement = statement.where(Match.status == status.value)
    statement = statement.order_by(Match.scheduled_at.desc(), Match.id.desc()).limit(limit).offset(offset)

    entries: list[MatchHistoryEntry] = []
    for row in session.execute(statement):
        match = row.Match
        if match.player1_id == user_id:
            opponent_id = match.player2_id
            opponent_name = f"{row.player2_first_name} {row.player2_last_name}"
            my_result = match.player1_result
            my_rating_change = match.rating_change_player1
        else:
            opponent_id = match.player1_id
            opponent_name = f"{row.player1_first_name} {row.player1_last_name}"
            my_result = match.player2_result
            my_rating_change = match.rating_change_player2
        entries.append(
            MatchHistoryEntry(
                match_id=match.id,
                scheduled_at=match.scheduled_at,
                status=MatchStatus(match.status),
                sport_name=row.sport_name,
                turf_name=row.turf_name,
                opponent_id=opponent_id,
                opponent_name=opponent_name,
                my_result=_optional_result(my_result),
                my_rating_change=my_rating_change,
            )
        )
    return entries


def _optional_result(value: str | None) -> ReportedResult | None:
    if value is None:
        return None
    return ReportedResult(value)


def _result_value(value: ReportedResult | None) -> str | None:
    return None if value is None else value.value


def _result_condition(column, value: ReportedResult | None):
    if value is None:
        return column.is_(None)
    return column == value.value
