"""Opponent selection: rating band, search radius and active-request exclusion."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from math import isfinite

from domain.common import GeoPoint
from domain.matchmaking.geo import haversine_km
from domain.ratings.elo.calculator import (
    DEFAULT_MAX_RATING_DIFFERENCE,
    calculate_win_probability,
    get_rating_difference,
    is_within_rating_range,
    round_two_decimals,
)

MAX_CANDIDATES = 10
DEFAULT_SEARCH_RADIUS_KM = 10.0
CLOSE_TIER_MAX_DIFF = 100.0
NEAR_TIER_MAX_DIFF = 200.0


@dataclass(frozen=True)
class RatingBand:
    """Either an explicit [min_rating, max_rating] window or a symmetric max difference."""

    min_rating: float | None = None
    max_rating: float | None = None
    max_difference: float | None = None

    def __post_init__(self) -> None:
        explicit = self.min_rating is not None or self.max_rating is not None
        if explicit and self.max_difference is not None:
            raise ValueError("Rating band takes either min/max bounds or max_difference, not both")
        if explicit and (self.min_rating is None or self.max_rating is None):
            raise ValueError("Explicit rating band requires both min_rating and max_rating")
        if not explicit and self.max_difference is None:
            raise ValueError("Rating band requires min/max bounds or max_difference")
        if explicit and self.min_rating > self.max_rating:  # type: ignore[operator]
            raise ValueError(
                f"min_rating={self.min_rating} is greater than max_rating={self.max_rating}"
            )
        if self.max_difference is not None and self.max_difference < 0.0:
            raise ValueError(f"max_difference must be >= 0, got {self.max_difference}")

    @property
    def is_explicit(self) -> bool:
        return self.max_difference is None

    @classmethod
    def from_options(
        cls,
        *,
        min_rating: float | None = None,
        max_rating: float | None = None,
        max_difference: float | None = None,
        default_max_difference: float = DEFAULT_MAX_RATING_DIFFERENCE,
    ) -> RatingBand:
        """Build a band from optional request parameters."""
        if min_rating is None and max_rating is None:
            return cls(
                max_difference=default_max_difference if max_difference is None else max_difference
            )
        return cls(min_rating=min_rating, max_rating=max_rating, max_difference=max_difference)

    def contains(self, rating: float, *, requester_rating: float) -> bool:
        if self.max_difference is not None:
            return is_within_rating_range(rating, requester_rating, self.max_difference)
        return self.min_rating <= rating <= self.max_rating  # type: ignore[operator]


@dataclass(frozen=True)
class CandidateQuery:
    requester_id: int
    requester_rating: float
    requester_location: GeoPoint | None
    max_distance_km: float = DEFAULT_SEARCH_RADIUS_KM
    rating_band: RatingBand = field(
        default_factory=lambda: RatingBand(max_difference=DEFAULT_MAX_RATING_DIFFERENCE)
    )

    def __post_init__(self) -> None:
        if not isfinite(self.requester_rating):
            raise ValueError(f"requester_rating must be finite, got {self.requester_rating!r}")
        if not isfinite(self.max_distance_km) or self.max_distance_km < 0.0:
            raise ValueError(f"max_distance_km must be a finite value >= 0, got {self.max_distance_km!r}")


@dataclass(frozen=True)
class CandidateRecord:
    """Raw opponent row as supplied by storage."""

    player_id: int
    rating: float
    games_played: int
    location: GeoPoint | None
    has_active_request: bool = False
    name: str | None = None


@dataclass(frozen=True)
class Candidate:
    player_id: int
    name: str | None
    rating: float
    games_played: int
    distance_km: float
    win_probability: float
    tier: int


def closeness_tier(rating: float, requester_rating: float) -> int:
    """1 for |diff| <= 100, 2 for <= 200, otherwise 3."""
    difference = get_rating_difference(rating, requester_rating)
    if difference <= CLOSE_TIER_MAX_DIFF:
        return 1
    if difference <= NEAR_TIER_MAX_DIFF:
        return 2
    return 3


def find_candidates(query: CandidateQuery, records: Iterable[CandidateRecord]) -> list[Candidate]:
    """Return at most MAX_CANDIDATES opponents ordered by closeness tier, then distance."""
    origin = query.requester_location
    if origin is None:
        return []

    ranked: list[tuple[int, float, int, Candidate]] = []
    for record in records:
        if record.player_id == query.requester_id:
            continue
        if record.has_active_request:
            continue
        if record.location is None:
            continue

        distance_km = haversine_km(origin, record.location)
        if distance_km > query.max_distance_km:
            continue
        if not query.rating_band.contains(record.rating, requester_rating=query.requester_rating):
            continue

        tier = closeness_tier(record.rating, query.requester_rating)
        candidate = Candidate(
            player_id=record.player_id,
            name=record.name,
            rating=record.rating,
            games_played=record.games_played,
            distance_km=round_two_decimals(distance_km),
            win_probability=calculate_win_probability(query.requester_rating, record.rating),
            tier=tier,
        )
        ranked.append((tier, distance_km, record.player_id, candidate))

    ranked.sort(key=lambda item: item[:3])
    return [item[3] for item in ranked[:MAX_CANDIDATES]]


__all__ = [
    "Candidate",
    "CandidateQuery",
    "CandidateRecord",
    "MAX_CANDIDATES",
    "RatingBand",
    "closeness_tier",
    "find_candidates",
]
