"""Opponent discovery: geo helpers, candidate selection and sport configs."""

from domain.matchmaking.config import MatchmakingParameters, SportConfig, load_sport_configs
from domain.matchmaking.geo import BoundingBox, bounding_box, haversine_km
from domain.matchmaking.selector import (
    MAX_CANDIDATES,
    Candidate,
    CandidateQuery,
    CandidateRecord,
    RatingBand,
    closeness_tier,
    find_candidates,
)

__all__ = [
    "BoundingBox",
    "Candidate",
    "CandidateQuery",
    "CandidateRecord",
    "MAX_CANDIDATES",
    "MatchmakingParameters",
    "RatingBand",
    "SportConfig",
    "bounding_box",
    "closeness_tier",
    "find_candidates",
    "haversine_km",
    "load_sport_configs",
]
