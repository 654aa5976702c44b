"""Unit tests for the two-player Elo engine."""

from __future__ import annotations

import math

import pytest

from domain.common import MatchOutcome, PlayerRatingState, ReportedResult
from domain.ratings.elo.calculator import (
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


def test_expected_score_equal_ratings_is_half() -> None:
    assert calculate_expected_score(1500.0, 1500.0) == pytest.approx(0.5)


@pytest.mark.parametrize(
    ("rating", "opponent_rating"),
    [(1500.0, 1500.0), (1600.0, 1500.0), (1234.56, 1987.65), (800.0, 2600.0), (0.0, 3000.0)],
)
def test_expected_scores_sum_to_one(rating: float, opponent_rating: float) -> None:
    total = calculate_expected_score(rating, opponent_rating) + calculate_expected_score(
        opponent_rating, rating
    )
    assert abs(total - 1.0) <= 1e-9


def test_large_rating_gap_approaches_but_never_reaches_bounds() -> None:
    favourite = calculate_expected_score(2400.0, 1200.0)
    underdog = calculate_expected_score(1200.0, 2400.0)
    assert 0.99 < favourite < 1.0
    assert 0.0 < underdog < 0.01


def test_win_probability_matches_expected_score() -> None:
    assert calculate_win_probability(1650.0, 1500.0) == calculate_expected_score(1650.0, 1500.0)
    assert calculate_win_probability(1650.0, 1500.0) > 0.5


@pytest.mark.parametrize(
    ("games_played", "expected_k"),
    [(0, 32), (9, 32), (10, 24), (29, 24), (30, 16), (250, 16)],
)
def test_k_factor_tier_boundaries(games_played: int, expected_k: int) -> None:
    assert get_k_factor(games_played) == expected_k


def test_k_factor_rejects_negative_games() -> None:
    with pytest.raises(ValueError, match="games_played"):
        get_k_factor(-1)


def test_new_player_win_between_equal_ratings() -> None:
    changes = calculate_rating_changes(
        PlayerRatingState(rating=1500.0, games_played=5),
        PlayerRatingState(rating=1500.0, games_played=5),
        MatchOutcome.PLAYER1_WIN,
    )
    assert changes.player1.new_rating == pytest.approx(1516.0)
    assert changes.player1.rating_change == pytest.approx(16.0)
    assert changes.player1.k_factor == 32
    assert changes.player2.new_rating == pytest.approx(1484.0)
    assert changes.player2.rating_change == pytest.approx(-16.0)
    assert changes.player2.k_factor == 32


def test_draw_between_equal_ratings_changes_nothing() -> None:
    changes = calculate_rating_changes(
        PlayerRatingState(rating=1500.0, games_played=12),
        PlayerRatingState(rating=1500.0, games_played=40),
        MatchOutcome.DRAW,
    )
    assert changes.player1.rating_change == 0.0
    assert changes.player2.rating_change == 0.0
    assert changes.player1.new_rating == pytest.approx(1500.0)
    assert changes.player2.new_rating == pytest.approx(1500.0)


def test_each_player_uses_their_own_k_factor() -> None:
    changes = calculate_rating_changes(
        PlayerRatingState(rating=1500.0, games_played=3),
        PlayerRatingState(rating=1500.0, games_played=45),
        MatchOutcome.PLAYER1_WIN,
    )
    assert changes.player1.k_factor == 32
    assert changes.player2.k_factor == 16
    assert changes.player1.new_rating == pytest.approx(1516.0)
    assert changes.player2.new_rating == pytest.approx(1492.0)


def test_underdog_win_is_rounded_to_two_decimals() -> None:
    changes = calculate_rating_changes(
        PlayerRatingState(rating=1400.0),
        PlayerRatingState(rating=1600.0),
        MatchOutcome.PLAYER1_WIN,
    )
    assert changes.player1.new_rating == pytest.approx(1424.31)
    assert changes.player2.new_rating == pytest.approx(1575.69)
    assert changes.player1.rating_change == pytest.approx(24.31)
    assert changes.player2.rating_change == pytest.approx(-24.31)


def test_player2_win_mirrors_player1_win() -> None:
    player1 = PlayerRatingState(rating=1550.0, games_played=20)
    player2 = PlayerRatingState(rating=1480.0, games_played=20)
    forward = calculate_rating_changes(player1, player2, MatchOutcome.PLAYER1_WIN)
    mirrored = calculate_rating_changes(player2, player1, MatchOutcome.PLAYER2_WIN)
    assert forward.player1 == mirrored.player2
    assert forward.player2 == mirrored.player1


def test_outcome_accepts_string_values() -> None:
    changes = calculate_rating_changes(PlayerRatingState(), PlayerRatingState(), "player2_win")
    assert changes.player2.new_rating == pytest.approx(1516.0)


@pytest.mark.parametrize("outcome", ["player3_win", "win", ReportedResult.WIN, None, ""])
def test_invalid_outcome_raises(outcome: object) -> None:
    with pytest.raises(ValueError, match="Invalid match outcome"):
        calculate_rating_changes(PlayerRatingState(), PlayerRatingState(), outcome)  # type: ignore[arg-type]


def test_non_finite_ratings_are_rejected() -> None:
    with pytest.raises(ValueError, match="finite"):
        PlayerRatingState(rating=math.nan)
    with pytest.raises(ValueError, match="non-finite"):
        calculate_new_rating(math.inf, 1.0, 0.5, 32)


def test_negative_games_played_is_rejected() -> None:
    with pytest.raises(ValueError, match="games_played"):
        PlayerRatingState(games_played=-3)


def test_round_two_decimals_rounds_half_up() -> None:
    assert round_two_decimals(0.125) == pytest.approx(0.13)
    assert round_two_decimals(-0.125) == pytest.approx(-0.12)
    assert round_two_decimals(1516.0) == 1516.0


def test_rating_state_apply_increments_games() -> None:
    changes = calculate_rating_changes(
        PlayerRatingState(rating=1500.0, games_played=9),
        PlayerRatingState(rating=1500.0, games_played=9),
        MatchOutcome.PLAYER1_WIN,
    )
    updated = PlayerRatingState(rating=1500.0, games_played=9).apply(changes.player1)
    assert updated.rating == pytest.approx(1516.0)
    assert updated.games_played == 10
    assert get_k_factor(updated.games_played) == 24


def test_rating_range_is_inclusive() -> None:
    assert is_within_rating_range(1500.0, 1700.0)
    assert not is_within_rating_range(1500.0, 1700.01)
    assert is_within_rating_range(1500.0, 1450.0, max_difference=50.0)
    assert get_rating_difference(1450.0, 1500.0) == pytest.approx(50.0)


@pytest.mark.parametrize(
    ("rating", "category"),
    [
        (2150.0, "Expert"),
        (2000.0, "Expert"),
        (1800.0, "Advanced"),
        (1650.0, "Intermediate+"),
        (1500.0, "Intermediate"),
        (1200.0, "Beginner+"),
        (1199.99, "Beginner"),
    ],
)
def test_rating_category_thresholds(rating: float, category: str) -> None:
    assert get_rating_category(rating) == category
