"""Exceptions raised by matchmaking operations."""

from __future__ import annotations


class MatchmakingError(ValueError):
    """Base class for rejected matchmaking operations."""


class MissingProfileError(MatchmakingError):
    def __init__(self, user_id: int, sport_id: int) -> None:
        super().__init__(f"user_id={user_id} has no active profile for sport_id={sport_id}")
        self.user_id = user_id
        self.sport_id = sport_id


class MissingLocationError(MatchmakingError):
    def __init__(self, user_id: int) -> None:
        super().__init__(f"user_id={user_id} has no primary location on file")
        self.user_id = user_id


class MatchNotFoundError(MatchmakingError):
    def __init__(self, match_id: int, user_id: int | None = None) -> None:
        detail = f"match_id={match_id} not found"
        if user_id is not None:
            detail += f" for user_id={user_id}"
        super().__init__(detail)
        self.match_id = match_id
        self.user_id = user_id


class MatchStateError(MatchmakingError):
    """A match lifecycle transition that is not allowed from the current state."""


__all__ = [
    "MatchNotFoundError",
    "MatchStateError",
    "MatchmakingError",
    "MissingLocationError",
    "MissingProfileError",
]
