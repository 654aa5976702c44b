"""Rating and matchmaking domain modules."""

from domain.common import (
    GeoPoint,
    MatchOutcome,
    PlayerRatingState,
    PlayerSide,
    RatingChanges,
    RatingDelta,
    ReportedResult,
)
from domain.matches.reconciliation import MatchState, MatchStatus, reconcile_report
from domain.matchmaking.selector import Candidate, CandidateQuery, RatingBand, find_candidates
from domain.ratings.elo.calculator import calculate_rating_changes, calculate_win_probability

__all__ = [
    "Candidate",
    "CandidateQuery",
    "GeoPoint",
    "MatchOutcome",
    "MatchState",
    "MatchStatus",
    "PlayerRatingState",
    "PlayerSide",
    "RatingBand",
    "RatingChanges",
    "RatingDelta",
    "ReportedResult",
    "calculate_rating_changes",
    "calculate_win_probability",
    "find_candidates",
    "reconcile_report",
]
