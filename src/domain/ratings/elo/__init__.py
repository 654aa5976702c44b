"""Elo rating modules."""

from domain.ratings.elo.calculator import (
    DEFAULT_MAX_RATING_DIFFERENCE,
    calculate_expected_score,
    calculate_new_rating,
    calculate_rating_changes,
    calculate_win_probability,
    get_k_factor,
    get_rating_category,
    get_rating_difference,
    is_within_rating_range,
    round_two_decimals,
)

__all__ = [
    "DEFAULT_MAX_RATING_DIFFERENCE",
    "calculate_expected_score",
    "calculate_new_rating",
    "calculate_rating_changes",
    "calculate_win_probability",
    "get_k_factor",
    "get_rating_category",
    "get_rating_difference",
    "is_within_rating_range",
    "round_two_decimals",
]
