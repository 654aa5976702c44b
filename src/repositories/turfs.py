"""Persistence helpers for venues and the sports they offer."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from domain.common import GeoPoint
from domain.matchmaking.geo import bounding_box, haversine_km
from domain.ratings.elo.calculator import round_two_decimals
from models import Sport, Turf, TurfSport

MAX_HOURLY_RATE = 1000.0


@dataclass(frozen=True)
class NearbyTurf:
    turf_id: int
    name: str
    address: str
    city: str
    location: GeoPoint
    distance_km: float
    hourly_rate: float | None
    amenities: tuple[str, ...]
    surface_types: tuple[str, ...]
    sports: tuple[str, ...]


def create_turf(
    session: Session,
    *,
    name: str,
    location: GeoPoint,
    address: str,
    city: str,
    state: str,
    sport_ids: Iterable[int],
    country: str = "US",
    description: str | None = None,
    postal_code: str | None = None,
    phone: str | None = None,
    email: str | None = None,
    website: str | None = None,
    amenities: Iterable[str] = (),
    surface_types: Iterable[str] = (),
    hourly_rate: float | None = None,
) -> Turf:
    """Insert a turf together with the sports it offers."""
    unique_sport_ids = sorted(set(sport_ids))
    if not unique_sport_ids:
        raise ValueError("A turf must offer at least one sport")
    if not 2 <= len(name.strip()) <= 255:
        raise ValueError("Turf name must be between 2 and 255 characters")
    if hourly_rate is not None and not 0.0 <= hourly_rate <= MAX_HOURLY_RATE:
        raise ValueError(f"hourly_rate must be between 0 and {MAX_HOURLY_RATE}")

    turf = Turf(
        name=name.strip(),
        description=description,
        latitude=location.latitude,
        longitude=location.longitude,
        address=address,
        city=city,
        state=state,
        country=country,
        postal_code=postal_code,
        phone=phone,
        email=email,
        website=website,
        amenities=list(amenities),
        surface_types=list(surface_types),
        hourly_rate=hourly_rate,
        is_active=True,
    )
    session.add(turf)
    session.flush()
    session.add_all(TurfSport(turf_id=turf.id, sport_id=sport_id, is_available=True) for sport_id in unique_sport_ids)
    session.flush()
    return turf


def fetch_nearby_turfs(
    session: Session,
    *,
    center: GeoPoint,
    max_distance_km: float,
    sport_id: int | None = None,
    limit: int = 20,
    offset: int = 0,
) -> list[NearbyTurf]:
    """Active turfs within the radius, nearest first.

    The bounding box narrows rows in SQL; the exact great-circle distance
    decides membership and ordering.
    """
    if limit <= 0:
        raise ValueError("limit must be greater than 0")
    if offset < 0:
        raise ValueError("offset must be >= 0")

    box = bounding_box(center, max_distance_km)
    statement = select(Turf).where(
        Turf.is_active.is_(True),
        Turf.latitude.between(box.min_latitude, box.max_latitude),
    )
    if box.min_longitude is not None and box.max_longitude is not None:
        statement = statement.where(Turf.longitude.between(box.min_longitude, box.max_longitude))
    if sport_id is not None:
        statement = statement.where(
            select(TurfSport.id)
            .where(
                TurfSport.turf_id == Turf.id,
                TurfSport.sport_id == sport_id,
                TurfSport.is_available.is_(True),
            )
            .correlate(Turf)
            .exists()
        )

    ranked: list[tuple[float, int, Turf]] = []
    for turf in session.execute(statement).scalars():
        distance_km = haversine_km(center, GeoPoint(latitude=turf.latitude, longitude=turf.longitude))
        if distance_km <= max_distance_km:
            ranked.append((distance_km, turf.id, turf))
    ranked.sort(key=lambda item: item[:2])
    page = ranked[offset : offset + limit]

    sports_by_turf = _available_sports(session, [turf.id for _, _, turf in page])
    return [
        NearbyTurf(
            turf_id=turf.id,
            name=turf.name,
            address=turf.address,
            city=turf.city,
            location=GeoPoint(latitude=turf.latitude, longitude=turf.longitude),
            distance_km=round_two_decimals(distance_km),
            hourly_rate=turf.hourly_rate,
            amenities=tuple(turf.amenities or ()),
            surface_types=tuple(turf.surface_types or ()),
            sports=sports_by_turf.get(turf.id, ()),
        )
        for distance_km, _, turf in page
    ]


def _available_sports(session: Session, turf_ids: list[int]) -> dict[int, tuple[str, ...]]:
    if not turf_ids:
        return {}
    rows = session.execute(
        select(TurfSport.turf_id, Sport.display_name)
        .join(Sport, Sport.id == TurfSport.sport_id)
        .where(TurfSport.turf_id.in_(turf_ids), TurfSport.is_available.is_(True))
        .order_by(TurfSport.turf_id, Sport.display_name)
    )
    grouped: dict[int, list[str]] = {}
    for turf_id, display_name in rows:
        grouped.setdefault(int(turf_id), []).append(str(display_name))
    return {turf_id: tuple(names) for turf_id, names in grouped.items()}
