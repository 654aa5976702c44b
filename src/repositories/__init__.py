"""Database repository helpers."""

from repositories.match_requests import cancel_active_requests, has_active_request
from repositories.matches import fetch_user_matches, get_match_for_participant, write_match_state
from repositories.players import (
    LeaderboardEntry,
    apply_match_result,
    fetch_candidate_records,
    get_player_rating_state,
    get_primary_location,
)
from repositories.sports import upsert_sport
from repositories.turfs import create_turf, fetch_nearby_turfs

__all__ = [
    "LeaderboardEntry",
    "apply_match_result",
    "cancel_active_requests",
    "create_turf",
    "fetch_candidate_records",
    "fetch_nearby_turfs",
    "fetch_user_matches",
    "get_match_for_participant",
    "get_player_rating_state",
    "get_primary_location",
    "has_active_request",
    "upsert_sport",
    "write_match_state",
]
