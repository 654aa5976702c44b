"""Persistence helpers for open opponent searches."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from models import MatchRequest

ACTIVE = "active"
MATCHED = "matched"
EXPIRED = "expired"
CANCELLED = "cancelled"


def has_active_request(session: Session, *, user_id: int, sport_id: int) -> bool:
    """Whether the user is currently searching for an opponent in this sport."""
    statement = select(
        select(MatchRequest.id)
        .where(
            MatchRequest.requester_id == user_id,
            MatchRequest.sport_id == sport_id,
            MatchRequest.status == ACTIVE,
        )
        .exists()
    )
    return bool(session.scalar(statement))


def cancel_active_requests(session: Session, *, user_id: int, sport_id: int) -> int:
    """Cancel every active request of the user for one sport."""
    result = session.execute(
        update(MatchRequest)
        .where(
            MatchRequest.requester_id == user_id,
            MatchRequest.sport_id == sport_id,
            MatchRequest.status == ACTIVE,
        )
        .values(status=CANCELLED, updated_at=_now())
        .execution_options(synchronize_session=False)
    )
    return int(result.rowcount or 0)


def create_match_request(
    session: Session,
    *,
    requester_id: int,
    sport_id: int,
    max_distance_km: float,
    expires_at: datetime,
    min_rating: float | None = None,
    max_rating: float | None = None,
    preferred_turf_id: int | None = None,
    preferred_time_start: datetime | None = None,
    preferred_time_end: datetime | None = None,
) -> MatchRequest:
    request = MatchRequest(
        requester_id=requester_id,
        sport_id=sport_id,
        preferred_turf_id=preferred_turf_id,
        preferred_time_start=preferred_time_start,
        preferred_time_end=preferred_time_end,
        max_distance_km=max_distance_km,
        min_rating=min_rating,
        max_rating=max_rating,
        status=ACTIVE,
        expires_at=expires_at,
    )
    session.add(request)
    session.flush()
    return request


def mark_request_matched(
    session: Session,
    *,
    request: MatchRequest,
    matched_user_id: int,
    match_id: int,
) -> None:
    request.status = MATCHED
    request.matched_with_user_id = matched_user_id
    request.match_id = match_id
    request.updated_at = _now()
    session.flush()


def cancel_match_request(session: Session, *, request_id: int, requester_id: int) -> bool:
    """Cancel one active request owned by the requester."""
    result = session.execute(
        update(MatchRequest)
        .where(
            MatchRequest.id == request_id,
            MatchRequest.requester_id == requester_id,
            MatchRequest.status == ACTIVE,
        )
        .values(status=CANCELLED, updated_at=_now())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def expire_match_requests(session: Session, *, now: datetime | None = None) -> int:
    """Move active requests past their expiry to expired."""
    cutoff = now or _now()
    result = session.execute(
        update(MatchRequest)
        .where(
            MatchRequest.status == ACTIVE,
            MatchRequest.expires_at.is_not(None),
            MatchRequest.expires_at <= cutoff,
        )
        .values(status=EXPIRED, updated_at=cutoff)
        .execution_options(synchronize_session=False)
    )
    return int(result.rowcount or 0)


def fetch_match_requests(
    session: Session,
    *,
    requester_id: int,
    status: str = ACTIVE,
) -> list[MatchRequest]:
    statement = (
        select(MatchRequest)
        .where(MatchRequest.requester_id == requester_id, MatchRequest.status == status)
        .order_by(MatchRequest.created_at.desc(), MatchRequest.id.desc())
    )
    return list(session.execute(statement).scalars())


def _now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)
