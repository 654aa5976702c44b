"""Persistence helpers for player profiles, locations and candidate lookups."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from domain.common import DEFAULT_RATING, GeoPoint, PlayerRatingState, RatingDelta, ReportedResult
from domain.errors import MissingProfileError
from domain.matchmaking.geo import bounding_box
from domain.matchmaking.selector import CandidateRecord
from domain.ratings.elo.calculator import get_rating_category
from models import MatchRequest, PlayerProfile, User, UserLocation
from repositories.match_requests import ACTIVE


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    user_id: int
    name: str
    rating: float
    games_played: int
    wins: int
    losses: int
    draws: int
    win_percentage: float | None
    category: str


def create_player_profile(
    session: Session,
    *,
    user_id: int,
    sport_id: int,
    initial_rating: float = DEFAULT_RATING,
) -> PlayerProfile:
    profile = PlayerProfile(
        user_id=user_id,
        sport_id=sport_id,
        rating=initial_rating,
        games_played=0,
        wins=0,
        losses=0,
        draws=0,
        is_active=True,
    )
    session.add(profile)
    session.flush()
    return profile


def get_player_rating_state(
    session: Session,
    *,
    user_id: int,
    sport_id: int,
) -> PlayerRatingState | None:
    """Current rating of an active profile, or None when the user has none."""
    row = session.execute(
        select(PlayerProfile.rating, PlayerProfile.games_played).where(
            PlayerProfile.user_id == user_id,
            PlayerProfile.sport_id == sport_id,
            PlayerProfile.is_active.is_(True),
        )
    ).one_or_none()
    if row is None:
        return None
    return PlayerRatingState(rating=float(row.rating), games_played=int(row.games_played))


def require_player_rating_state(session: Session, *, user_id: int, sport_id: int) -> PlayerRatingState:
    state = get_player_rating_state(session, user_id=user_id, sport_id=sport_id)
    if state is None:
        raise MissingProfileError(user_id, sport_id)
    return state


def apply_match_result(
    session: Session,
    *,
    user_id: int,
    sport_id: int,
    delta: RatingDelta,
    result: ReportedResult,
) -> None:
    """Store the post-match rating and bump games played plus the win/loss/draw record."""
    statement = (
        update(PlayerProfile)
        .where(PlayerProfile.user_id == user_id, PlayerProfile.sport_id == sport_id)
        .values(
            rating=delta.new_rating,
            games_played=PlayerProfile.games_played + 1,
            wins=PlayerProfile.wins + (1 if result is ReportedResult.WIN else 0),
            losses=PlayerProfile.losses + (1 if result is ReportedResult.LOSS else 0),
            draws=PlayerProfile.draws + (1 if result is ReportedResult.DRAW else 0),
            updated_at=datetime.now(UTC).replace(tzinfo=None),
        )
        .execution_options(synchronize_session=False)
    )
    if session.execute(statement).rowcount != 1:
        raise MissingProfileError(user_id, sport_id)


def set_primary_location(session: Session, *, user_id: int, location: GeoPoint) -> UserLocation:
    """Replace the user's primary location."""
    session.execute(
        update(UserLocation)
        .where(UserLocation.user_id == user_id, UserLocation.is_primary.is_(True))
        .values(is_primary=False)
        .execution_options(synchronize_session=False)
    )
    row = UserLocation(
        user_id=user_id,
        latitude=location.latitude,
        longitude=location.longitude,
        is_primary=True,
    )
    session.add(row)
    session.flush()
    return row


def get_primary_location(session: Session, *, user_id: int) -> GeoPoint | None:
    row = session.execute(
        select(UserLocation.latitude, UserLocation.longitude)
        .where(UserLocation.user_id == user_id, UserLocation.is_primary.is_(True))
        .order_by(UserLocation.id.desc())
        .limit(1)
    ).one_or_none()
    if row is None:
        return None
    return GeoPoint(latitude=float(row.latitude), longitude=float(row.longitude))


def fetch_candidate_records(
    session: Session,
    *,
    sport_id: int,
    center: GeoPoint,
    max_distance_km: float,
    exclude_user_id: int | None = None,
) -> list[CandidateRecord]:
    """Fetch verified, active players whose primary location falls inside the search box.

    Only a coarse bounding-box filter runs in SQL; exact distance, rating band
    and ordering are applied by the candidate selector.
    """
    box = bounding_box(center, max_distance_km)
    has_active_request = (
        select(MatchRequest.id)
        .where(
            MatchRequest.requester_id == PlayerProfile.user_id,
            MatchRequest.sport_id == sport_id,
            MatchRequest.status == ACTIVE,
        )
        .correlate(PlayerProfile)
        .exists()
        .label("has_active_request")
    )

    statement = (
        select(
            PlayerProfile.user_id,
            User.first_name,
            User.last_name,
            PlayerProfile.rating,
            PlayerProfile.games_played,
            UserLocation.latitude,
            UserLocation.longitude,
            has_active_request,
        )
        .select_from(PlayerProfile)
        .join(User, User.id == PlayerProfile.user_id)
        .join(
            UserLocation,
            (UserLocation.user_id == User.id) & UserLocation.is_primary.is_(True),
        )
        .where(
            PlayerProfile.sport_id == sport_id,
            PlayerProfile.is_active.is_(True),
            User.is_verified.is_(True),
            UserLocation.latitude.between(box.min_latitude, box.max_latitude),
        )
        .order_by(PlayerProfile.user_id)
    )
    if box.min_longitude is not None and box.max_longitude is not None:
        statement = statement.where(UserLocation.longitude.between(box.min_longitude, box.max_longitude))
    if exclude_user_id is not None:
        statement = statement.where(PlayerProfile.user_id != exclude_user_id)

    return [
        CandidateRecord(
            player_id=int(row.user_id),
            name=f"{row.first_name} {row.last_name}",
            rating=float(row.rating),
            games_played=int(row.games_played),
            location=GeoPoint(latitude=float(row.latitude), longitude=float(row.longitude)),
            has_active_request=bool(row.has_active_request),
        )
        for row in session.execute(statement)
    ]


def fetch_leaderboard(
    session: Session,
    *,
    sport_id: int,
    min_games: int = 5,
    limit: int = 50,
    offset: int = 0,
) -> list[LeaderboardEntry]:
    """Rank verified players with enough games by rating."""
    if limit <= 0:
        raise ValueError("limit must be greater than 0")
    if offset < 0:
        raise ValueError("offset must be >= 0")

    rows = session.execute(
        select(
            PlayerProfile.user_id,
            User.first_name,
            User.last_name,
            PlayerProfile.rating,
            PlayerProfile.games_played,
            PlayerProfile.wins,
            PlayerProfile.losses,
            PlayerProfile.draws,
        )
        .join(User, User.id == PlayerProfile.user_id)
        .where(
            PlayerProfile.sport_id == sport_id,
            PlayerProfile.is_active.is_(True),
            User.is_verified.is_(True),
            PlayerProfile.games_played >= min_games,
        )
        .order_by(PlayerProfile.rating.desc(), PlayerProfile.games_played.desc(), PlayerProfile.user_id)
        .limit(limit)
        .offset(offset)
    ).all()

    entries: list[LeaderboardEntry] = []
    for rank, row in enumerate(rows, start=offset + 1):
        games_played = int(row.games_played)
        win_percentage = round(row.wins / games_played * 100.0, 1) if games_played > 0 else None
        entries.append(
            LeaderboardEntry(
                rank=rank,
                user_id=int(row.user_id),
                name=f"{row.first_name} {row.last_name}",
                rating=float(row.rating),
                games_played=games_played,
                wins=int(row.wins),
                losses=int(row.losses),
                draws=int(row.draws),
                win_percentage=win_percentage,
                category=get_rating_category(float(row.rating)),
            )
        )
    return entries
