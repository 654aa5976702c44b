"""ORM models."""

from models.base import Base
from models.match import Match
from models.match_request import MatchRequest
from models.player_profile import PlayerProfile
from models.sport import Sport
from models.turf import Turf, TurfSport
from models.user import User, UserLocation

__all__ = [
    "Base",
    "Match",
    "MatchRequest",
    "PlayerProfile",
    "Sport",
    "Turf",
    "TurfSport",
    "User",
    "UserLocation",
]
