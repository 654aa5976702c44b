"""Shared types for the rating and matchmaking core."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from math import isfinite

DEFAULT_RATING = 1500.0


class MatchOutcome(str, Enum):
    """Agreed outcome of a two-player match."""

    PLAYER1_WIN = "player1_win"
    PLAYER2_WIN = "player2_win"
    DRAW = "draw"


class ReportedResult(str, Enum):
    """Result one participant reports for themselves."""

    WIN = "win"
    LOSS = "loss"
    DRAW = "draw"


class PlayerSide(str, Enum):
    PLAYER1 = "player1"
    PLAYER2 = "player2"


@dataclass(frozen=True)
class RatingDelta:
    """Post-match rating for one player."""

    new_rating: float
    rating_change: float
    k_factor: int


@dataclass(frozen=True)
class RatingChanges:
    player1: RatingDelta
    player2: RatingDelta


@dataclass(frozen=True)
class PlayerRatingState:
    """Current rating of one player in one sport."""

    rating: float = DEFAULT_RATING
    games_played: int = 0

    def __post_init__(self) -> None:
        if not isfinite(self.rating):
            raise ValueError(f"rating must be finite, got {self.rating!r}")
        if isinstance(self.games_played, bool) or not isinstance(self.games_played, int):
            raise ValueError(f"games_played must be an integer, got {self.games_played!r}")
        if self.games_played < 0:
            raise ValueError(f"games_played must be >= 0, got {self.games_played}")

    def apply(self, delta: RatingDelta) -> PlayerRatingState:
        """Return the state after one completed match."""
        return replace(self, rating=delta.new_rating, games_played=self.games_played + 1)


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not isfinite(self.latitude) or not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude must be between -90 and 90, got {self.latitude!r}")
        if not isfinite(self.longitude) or not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude must be between -180 and 180, got {self.longitude!r}")


__all__ = [
    "DEFAULT_RATING",
    "GeoPoint",
    "MatchOutcome",
    "PlayerRatingState",
    "PlayerSide",
    "RatingChanges",
    "RatingDelta",
    "ReportedResult",
]
