"""Transactional matchmaking operations over the persistence layer.

Every operation receives the acting user's id explicitly and runs in its own
session; any failure rolls the session back before re-raising.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from domain.common import GeoPoint, PlayerSide, RatingChanges, ReportedResult
from domain.errors import MatchNotFoundError, MatchStateError, MatchmakingError, MissingLocationError
from domain.matches.reconciliation import MatchStatus, cancel_match as cancel_match_state
from domain.matches.reconciliation import reconcile_report
from domain.matchmaking.config import (
    MAX_RATING,
    MAX_SEARCH_RADIUS_KM,
    MIN_RATING,
    MIN_SEARCH_RADIUS_KM,
    MatchmakingParameters,
)
from domain.matchmaking.selector import (
    DEFAULT_SEARCH_RADIUS_KM,
    Candidate,
    CandidateQuery,
    RatingBand,
    find_candidates,
)
from repositories import match_requests as match_request_repository
from repositories import matches as match_repository
from repositories import players as player_repository
from repositories import sports as sport_repository
from repositories import turfs as turf_repository

Echo = Callable[[str], None]

MAX_NOTES_LENGTH = 500
MIN_MATCH_DURATION_MINUTES = 1
MAX_MATCH_DURATION_MINUTES = 300


@dataclass(frozen=True)
class MatchRequestSummary:
    """Outcome of a new match request: either an immediate match or an open request."""

    request_id: int
    expires_at: datetime | None
    match_id: int | None = None
    opponent: Candidate | None = None

    @property
    def matched(self) -> bool:
        return self.match_id is not None


@dataclass(frozen=True)
class ReportSummary:
    match_id: int
    reporter_side: PlayerSide
    status: MatchStatus
    rating_changes: RatingChanges | None
    changed: bool


def find_candidates_for_player(
    *,
    session_factory,
    user_id: int,
    sport_id: int,
    max_distance_km: float | None = None,
    min_rating: float | None = None,
    max_rating: float | None = None,
    max_rating_diff: float | None = None,
) -> list[Candidate]:
    """Rank potential opponents for a user; raises when profile or location is missing."""
    with session_factory() as session:
        parameters = _sport_parameters(session, sport_id)
        return _select_candidates(
            session,
            parameters=parameters,
            user_id=user_id,
            sport_id=sport_id,
            max_distance_km=max_distance_km,
            min_rating=min_rating,
            max_rating=max_rating,
            max_rating_diff=max_rating_diff,
        )


def create_match_request(
    *,
    session_factory,
    user_id: int,
    sport_id: int,
    max_distance_km: float | None = None,
    min_rating: float | None = None,
    max_rating: float | None = None,
    preferred_turf_id: int | None = None,
    preferred_time_start: datetime | None = None,
    preferred_time_end: datetime | None = None,
    echo: Echo | None = None,
) -> MatchRequestSummary:
    """Open a new request and auto-match the best candidate when one is available."""
    if preferred_time_start and preferred_time_end and preferred_time_start > preferred_time_end:
        raise ValueError("preferred_time_start must not be after preferred_time_end")

    with session_factory() as session:
        try:
            parameters = _sport_parameters(session, sport_id)
            distance = _search_radius(max_distance_km, parameters)
            now = datetime.now(UTC).replace(tzinfo=None)

            candidates = _select_candidates(
                session,
                parameters=parameters,
                user_id=user_id,
                sport_id=sport_id,
                max_distance_km=distance,
                min_rating=min_rating,
                max_rating=max_rating,
                max_rating_diff=None,
            )

            cancelled = match_request_repository.cancel_active_requests(
                session,
                user_id=user_id,
                sport_id=sport_id,
            )
            request = match_request_repository.create_match_request(
                session,
                requester_id=user_id,
                sport_id=sport_id,
                max_distance_km=distance,
                min_rating=min_rating,
                max_rating=max_rating,
                preferred_turf_id=preferred_turf_id,
                preferred_time_start=preferred_time_start,
                preferred_time_end=preferred_time_end,
                expires_at=now + timedelta(hours=parameters.request_ttl_hours),
            )

            if not candidates:
                session.commit()
                if echo is not None:
                    echo(
                        f"request_open request_id={request.id} user_id={user_id} "
                        f"sport_id={sport_id} cancelled_previous={cancelled}"
                    )
                return MatchRequestSummary(request_id=request.id, expires_at=request.expires_at)

            best = candidates[0]
            match = match_repository.create_match(
                session,
                player1_id=user_id,
                player2_id=best.player_id,
                sport_id=sport_id,
                turf_id=preferred_turf_id,
                scheduled_at=preferred_time_start
                or now + timedelta(minutes=parameters.default_match_delay_minutes),
                status=MatchStatus.CONFIRMED,
            )
            match_request_repository.mark_request_matched(
                session,
                request=request,
                matched_user_id=best.player_id,
                match_id=match.id,
            )
            session.commit()
        except Exception:
            session.rollback()
            raise

    if echo is not None:
        echo(
            f"auto_matched request_id={request.id} match_id={match.id} "
            f"user_id={user_id} opponent_id={best.player_id} "
            f"win_probability={best.win_probability:.4f} distance_km={best.distance_km}"
        )
    return MatchRequestSummary(
        request_id=request.id,
        expires_at=request.expires_at,
        match_id=match.id,
        opponent=best,
    )


def cancel_match_request(*, session_factory, user_id: int, request_id: int) -> None:
    with session_factory() as session:
        try:
            cancelled = match_request_repository.cancel_match_request(
                session,
                request_id=request_id,
                requester_id=user_id,
            )
            if not cancelled:
                raise MatchmakingError(
                    f"request_id={request_id} not found for user_id={user_id} or already processed"
                )
            session.commit()
        except Exception:
            session.rollback()
            raise


def expire_match_requests(
    *,
    session_factory,
    now: datetime | None = None,
    echo: Echo | None = None,
) -> int:
    with session_factory() as session:
        try:
            expired = match_request_repository.expire_match_requests(session, now=now)
            session.commit()
        except Exception:
            session.rollback()
            raise
    if echo is not None:
        echo(f"expired_requests={expired}")
    return expired


def submit_match_report(
    *,
    session_factory,
    user_id: int,
    match_id: int,
    result: ReportedResult | str,
    match_duration_minutes: int | None = None,
    notes: str | None = None,
    echo: Echo | None = None,
) -> ReportSummary:
    """Record the user's result for a match and settle it when both players have reported.

    Completion, both rating rows and the rating snapshots on the match are
    written in one transaction, and the match update only applies if the row
    is still in the state it was read in.
    """
    _validate_report_details(match_duration_minutes, notes)

    with session_factory() as session:
        try:
            match = match_repository.get_match_for_participant(
                session,
                match_id=match_id,
                user_id=user_id,
                for_update=True,
            )
            if match is None:
                raise MatchNotFoundError(match_id, user_id)

            side = match_repository.side_of(match, user_id)
            previous = match_repository.to_match_state(match)
            player1_rating = player_repository.require_player_rating_state(
                session,
                user_id=match.player1_id,
                sport_id=match.sport_id,
            )
            player2_rating = player_repository.require_player_rating_state(
                session,
                user_id=match.player2_id,
                sport_id=match.sport_id,
            )

            reconciled = reconcile_report(
                previous,
                side,
                result,
                player1_rating=player1_rating,
                player2_rating=player2_rating,
            )
            if not reconciled.changed:
                session.rollback()
                return ReportSummary(
                    match_id=match_id,
                    reporter_side=side,
                    status=reconciled.state.status,
                    rating_changes=None,
                    changed=False,
                )

            written = match_repository.write_match_state(
                session,
                previous=previous,
                current=reconciled.state,
                rating_changes=reconciled.rating_changes,
                ratings_before=(player1_rating, player2_rating),
                match_duration_minutes=match_duration_minutes,
                notes=notes,
            )
            if not written:
                raise MatchStateError(f"match_id={match_id} was updated concurrently; retry the report")

            changes = reconciled.rating_changes
            if changes is not None:
                state = reconciled.state
                player_repository.apply_match_result(
                    session,
                    user_id=match.player1_id,
                    sport_id=match.sport_id,
                    delta=changes.player1,
                    result=state.player1_result,
                )
                player_repository.apply_match_result(
                    session,
                    user_id=match.player2_id,
                    sport_id=match.sport_id,
                    delta=changes.player2,
                    result=state.player2_result,
                )
            session.commit()
        except Exception:
            session.rollback()
            raise

    status = reconciled.state.status
    if echo is not None:
        if reconciled.rating_changes is not None:
            echo(
                f"completed match_id={match_id} outcome={reconciled.outcome.value} "
                f"player1_change={reconciled.rating_changes.player1.rating_change} "
                f"player2_change={reconciled.rating_changes.player2.rating_change}"
            )
        elif status is MatchStatus.DISPUTED:
            echo(f"disputed match_id={match_id}")
        else:
            echo(f"reported match_id={match_id} side={side.value} awaiting_opponent=true")

    return ReportSummary(
        match_id=match_id,
        reporter_side=side,
        status=status,
        rating_changes=reconciled.rating_changes,
        changed=True,
    )


def cancel_match(*, session_factory, user_id: int, match_id: int) -> MatchStatus:
    """Cancel a confirmed match the user plays in."""
    with session_factory() as session:
        try:
            match = match_repository.get_match_for_participant(
                session,
                match_id=match_id,
                user_id=user_id,
                for_update=True,
            )
            if match is None:
                raise MatchNotFoundError(match_id, user_id)

            previous = match_repository.to_match_state(match)
            cancelled = cancel_match_state(previous)
            if not match_repository.write_match_state(session, previous=previous, current=cancelled):
                raise MatchStateError(f"match_id={match_id} was updated concurrently")
            session.commit()
        except Exception:
            session.rollback()
            raise
    return cancelled.status


def fetch_leaderboard(
    *,
    session_factory,
    sport_id: int,
    limit: int = 50,
    offset: int = 0,
) -> list[player_repository.LeaderboardEntry]:
    with session_factory() as session:
        parameters = _sport_parameters(session, sport_id)
        return player_repository.fetch_leaderboard(
            session,
            sport_id=sport_id,
            min_games=parameters.leaderboard_min_games,
            limit=limit,
            offset=offset,
        )


def list_user_matches(
    *,
    session_factory,
    user_id: int,
    status: MatchStatus | str | None = None,
    limit: int = 20,
    offset: int = 0,
) -> list[match_repository.MatchHistoryEntry]:
    """The user's match history, newest scheduled first."""
    with session_factory() as session:
        return match_repository.fetch_user_matches(
            session,
            user_id=user_id,
            status=None if status is None else MatchStatus(status),
            limit=limit,
            offset=offset,
        )


def create_turf(
    *,
    session_factory,
    name: str,
    latitude: float,
    longitude: float,
    address: str,
    city: str,
    state: str,
    sport_ids: list[int],
    country: str = "US",
    hourly_rate: float | None = None,
    amenities: list[str] | None = None,
    surface_types: list[str] | None = None,
    echo: Echo | None = None,
) -> int:
    """Register a venue offering the given active sports; returns its id."""
    location = GeoPoint(latitude=latitude, longitude=longitude)
    with session_factory() as session:
        try:
            for sport_id in sport_ids:
                _sport_parameters(session, sport_id)
            turf = turf_repository.create_turf(
                session,
                name=name,
                location=location,
                address=address,
                city=city,
                state=state,
                country=country,
                sport_ids=sport_ids,
                hourly_rate=hourly_rate,
                amenities=amenities or (),
                surface_types=surface_types or (),
            )
            session.commit()
        except Exception:
            session.rollback()
            raise
    if echo is not None:
        echo(f"turf_created turf_id={turf.id} name={turf.name} sports={len(set(sport_ids))}")
    return turf.id


def find_nearby_turfs(
    *,
    session_factory,
    latitude: float,
    longitude: float,
    max_distance_km: float = DEFAULT_SEARCH_RADIUS_KM,
    sport_id: int | None = None,
    limit: int = 20,
    offset: int = 0,
) -> list[turf_repository.NearbyTurf]:
    """Active venues around a point, nearest first, optionally offering one sport."""
    center = GeoPoint(latitude=latitude, longitude=longitude)
    if not MIN_SEARCH_RADIUS_KM <= max_distance_km <= MAX_SEARCH_RADIUS_KM:
        raise ValueError(
            f"max_distance_km must be between {MIN_SEARCH_RADIUS_KM} and {MAX_SEARCH_RADIUS_KM}"
        )
    with session_factory() as session:
        return turf_repository.fetch_nearby_turfs(
            session,
            center=center,
            max_distance_km=max_distance_km,
            sport_id=sport_id,
            limit=limit,
            offset=offset,
        )


def _sport_parameters(session, sport_id: int) -> MatchmakingParameters:
    sport = sport_repository.get_active_sport(session, sport_id=sport_id)
    if sport is None:
        raise MatchmakingError(f"sport_id={sport_id} not found or inactive")
    return sport_repository.sport_parameters(sport)


def _select_candidates(
    session,
    *,
    parameters: MatchmakingParameters,
    user_id: int,
    sport_id: int,
    max_distance_km: float | None,
    min_rating: float | None,
    max_rating: float | None,
    max_rating_diff: float | None,
) -> list[Candidate]:
    distance = _search_radius(max_distance_km, parameters)
    for label, value in (("min_rating", min_rating), ("max_rating", max_rating)):
        if value is not None and not MIN_RATING <= value <= MAX_RATING:
            raise ValueError(f"{label} must be between {MIN_RATING} and {MAX_RATING}")
    band = RatingBand.from_options(
        min_rating=min_rating,
        max_rating=max_rating,
        max_difference=max_rating_diff,
        default_max_difference=parameters.default_max_rating_diff,
    )

    rating_state = player_repository.require_player_rating_state(
        session,
        user_id=user_id,
        sport_id=sport_id,
    )
    location = player_repository.get_primary_location(session, user_id=user_id)
    if location is None:
        raise MissingLocationError(user_id)

    records = player_repository.fetch_candidate_records(
        session,
        sport_id=sport_id,
        center=location,
        max_distance_km=distance,
        exclude_user_id=user_id,
    )
    query = CandidateQuery(
        requester_id=user_id,
        requester_rating=rating_state.rating,
        requester_location=location,
        max_distance_km=distance,
        rating_band=band,
    )
    return find_candidates(query, records)


def _search_radius(max_distance_km: float | None, parameters: MatchmakingParameters) -> float:
    distance = parameters.default_max_distance_km if max_distance_km is None else float(max_distance_km)
    if not MIN_SEARCH_RADIUS_KM <= distance <= MAX_SEARCH_RADIUS_KM:
        raise ValueError(
            f"max_distance_km must be between {MIN_SEARCH_RADIUS_KM} and {MAX_SEARCH_RADIUS_KM}"
        )
    return distance


def _validate_report_details(match_duration_minutes: int | None, notes: str | None) -> None:
    if match_duration_minutes is not None and not (
        MIN_MATCH_DURATION_MINUTES <= match_duration_minutes <= MAX_MATCH_DURATION_MINUTES
    ):
        raise ValueError(
            f"match_duration_minutes must be between {MIN_MATCH_DURATION_MINUTES} "
            f"and {MAX_MATCH_DURATION_MINUTES}"
        )
    if notes is not None and len(notes) > MAX_NOTES_LENGTH:
        raise ValueError(f"notes must be at most {MAX_NOTES_LENGTH} characters")


__all__ = [
    "MatchRequestSummary",
    "ReportSummary",
    "cancel_match",
    "cancel_match_request",
    "create_match_request",
    "create_turf",
    "expire_match_requests",
    "fetch_leaderboard",
    "find_candidates_for_player",
    "find_nearby_turfs",
    "list_user_matches",
    "submit_match_report",
]
