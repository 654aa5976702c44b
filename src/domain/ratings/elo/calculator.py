"""Two-player Elo logic with experience-tiered K-factors."""

from __future__ import annotations

from math import floor, isfinite

from domain.common import MatchOutcome, PlayerRatingState, RatingChanges, RatingDelta

ELO_SCALE_FACTOR = 400.0
DEFAULT_MAX_RATING_DIFFERENCE = 200.0

# (games played below, K-factor); anything at or above the last bound uses FINAL_K_FACTOR.
K_FACTOR_TIERS: tuple[tuple[int, int], ...] = ((10, 32), (30, 24))
FINAL_K_FACTOR = 16

RATING_CATEGORIES: tuple[tuple[float, str], ...] = (
    (2000.0, "Expert"),
    (1800.0, "Advanced"),
    (1600.0, "Intermediate+"),
    (1400.0, "Intermediate"),
    (1200.0, "Beginner+"),
)

_ACTUAL_SCORES: dict[MatchOutcome, tuple[float, float]] = {
    MatchOutcome.PLAYER1_WIN: (1.0, 0.0),
    MatchOutcome.PLAYER2_WIN: (0.0, 1.0),
    MatchOutcome.DRAW: (0.5, 0.5),
}


def calculate_expected_score(
    rating: float,
    opponent_rating: float,
    scale_factor: float = ELO_SCALE_FACTOR,
) -> float:
    """Compute the Elo expected score for one side."""
    return 1.0 / (1.0 + 10.0 ** ((opponent_rating - rating) / scale_factor))


def calculate_win_probability(rating: float, opponent_rating: float) -> float:
    """Probability that a player rated `rating` beats `opponent_rating`."""
    return calculate_expected_score(rating, opponent_rating)


def get_k_factor(games_played: int) -> int:
    if games_played < 0:
        raise ValueError(f"games_played must be >= 0, got {games_played}")
    for upper_bound, k_factor in K_FACTOR_TIERS:
        if games_played < upper_bound:
            return k_factor
    return FINAL_K_FACTOR


def round_two_decimals(value: float) -> float:
    """Round half up to two decimals."""
    if not isfinite(value):
        raise ValueError(f"Cannot round non-finite value {value!r}")
    return floor(value * 100.0 + 0.5) / 100.0


def calculate_new_rating(
    current_rating: float,
    actual_score: float,
    expected_score: float,
    k_factor: float,
) -> float:
    return round_two_decimals(current_rating + k_factor * (actual_score - expected_score))


def parse_outcome(outcome: MatchOutcome | str) -> MatchOutcome:
    try:
        return MatchOutcome(outcome)
    except ValueError as exc:
        valid = ", ".join(item.value for item in MatchOutcome)
        raise ValueError(f"Invalid match outcome {outcome!r}; expected one of: {valid}") from exc


def calculate_rating_changes(
    player1: PlayerRatingState,
    player2: PlayerRatingState,
    outcome: MatchOutcome | str,
) -> RatingChanges:
    """Compute both players' new ratings after one match."""
    match_outcome = parse_outcome(outcome)
    player1_actual, player2_actual = _ACTUAL_SCORES[match_outcome]

    player1_expected = calculate_expected_score(player1.rating, player2.rating)
    player2_expected = calculate_expected_score(player2.rating, player1.rating)

    player1_k = get_k_factor(player1.games_played)
    player2_k = get_k_factor(player2.games_played)

    player1_new = calculate_new_rating(player1.rating, player1_actual, player1_expected, player1_k)
    player2_new = calculate_new_rating(player2.rating, player2_actual, player2_expected, player2_k)

    return RatingChanges(
        player1=RatingDelta(
            new_rating=player1_new,
            rating_change=round_two_decimals(player1_new - player1.rating),
            k_factor=player1_k,
        ),
        player2=RatingDelta(
            new_rating=player2_new,
            rating_change=round_two_decimals(player2_new - player2.rating),
            k_factor=player2_k,
        ),
    )


def is_within_rating_range(
    rating1: float,
    rating2: float,
    max_difference: float = DEFAULT_MAX_RATING_DIFFERENCE,
) -> bool:
    return abs(rating1 - rating2) <= max_difference


def get_rating_difference(rating1: float, rating2: float) -> float:
    return abs(rating1 - rating2)


def get_rating_category(rating: float) -> str:
    """Human-readable skill label for a rating."""
    for threshold, label in RATING_CATEGORIES:
        if rating >= threshold:
            return label
    return "Beginner"
