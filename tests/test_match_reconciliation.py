"""Unit tests for match result reconciliation."""

from __future__ import annotations

import pytest

import domain.matches.reconciliation as reconciliation
from domain.common import MatchOutcome, PlayerRatingState, PlayerSide, ReportedResult
from domain.errors import MatchStateError
from domain.matches.reconciliation import (
    MatchState,
    MatchStatus,
    cancel_match,
    confirm_match,
    derive_outcome,
    reconcile_report,
)

RATINGS = {
    "player1_rating": PlayerRatingState(rating=1500.0, games_played=0),
    "player2_rating": PlayerRatingState(rating=1500.0, games_played=0),
}


def _confirmed(**results: ReportedResult | None) -> MatchState:
    return MatchState(match_id=7, status=MatchStatus.CONFIRMED, **results)


def test_first_report_waits_for_opponent() -> None:
    outcome = reconcile_report(_confirmed(), PlayerSide.PLAYER1, ReportedResult.WIN, **RATINGS)

    assert outcome.changed
    assert outcome.state.status is MatchStatus.CONFIRMED
    assert outcome.state.player1_result is ReportedResult.WIN
    assert outcome.state.player2_result is None
    assert outcome.rating_changes is None
    assert not outcome.newly_completed


def test_consistent_reports_complete_the_match() -> None:
    state = _confirmed(player1_result=ReportedResult.WIN)
    outcome = reconcile_report(state, "player2", "loss", **RATINGS)

    assert outcome.state.status is MatchStatus.COMPLETED
    assert outcome.outcome is MatchOutcome.PLAYER1_WIN
    assert outcome.newly_completed
    assert outcome.rating_changes is not None
    assert outcome.rating_changes.player1.new_rating == pytest.approx(1516.0)
    assert outcome.rating_changes.player2.new_rating == pytest.approx(1484.0)


def test_player2_win_and_draw_are_consistent() -> None:
    win = reconcile_report(
        _confirmed(player2_result=ReportedResult.WIN), PlayerSide.PLAYER1, ReportedResult.LOSS, **RATINGS
    )
    draw = reconcile_report(
        _confirmed(player1_result=ReportedResult.DRAW), PlayerSide.PLAYER2, ReportedResult.DRAW, **RATINGS
    )
    assert win.outcome is MatchOutcome.PLAYER2_WIN
    assert draw.outcome is MatchOutcome.DRAW
    assert draw.rating_changes is not None
    assert draw.rating_changes.player1.rating_change == 0.0


@pytest.mark.parametrize(
    ("player1_result", "player2_result"),
    [
        (ReportedResult.WIN, ReportedResult.WIN),
        (ReportedResult.LOSS, ReportedResult.LOSS),
        (ReportedResult.WIN, ReportedResult.DRAW),
        (ReportedResult.DRAW, ReportedResult.LOSS),
    ],
)
def test_inconsistent_reports_dispute_the_match(
    player1_result: ReportedResult,
    player2_result: ReportedResult,
) -> None:
    outcome = reconcile_report(
        _confirmed(player1_result=player1_result), PlayerSide.PLAYER2, player2_result, **RATINGS
    )
    assert outcome.state.status is MatchStatus.DISPUTED
    assert outcome.rating_changes is None
    assert outcome.outcome is None


def test_repeated_report_is_a_no_op() -> None:
    first = reconcile_report(_confirmed(), PlayerSide.PLAYER1, ReportedResult.WIN, **RATINGS)
    again = reconcile_report(first.state, PlayerSide.PLAYER1, ReportedResult.WIN, **RATINGS)

    assert not again.changed
    assert again.state == first.state
    assert again.rating_changes is None


def test_repeated_report_after_completion_does_not_recompute(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[MatchOutcome] = []
    original = reconciliation.calculate_rating_changes

    def counting(player1, player2, outcome):
        calls.append(outcome)
        return original(player1, player2, outcome)

    monkeypatch.setattr(reconciliation, "calculate_rating_changes", counting)

    state = _confirmed()
    state = reconcile_report(state, PlayerSide.PLAYER1, ReportedResult.WIN, **RATINGS).state
    completed = reconcile_report(state, PlayerSide.PLAYER2, ReportedResult.LOSS, **RATINGS)
    for side, result in ((PlayerSide.PLAYER2, ReportedResult.LOSS), (PlayerSide.PLAYER1, ReportedResult.WIN)):
        retried = reconcile_report(completed.state, side, result, **RATINGS)
        assert not retried.changed
        assert retried.state.status is MatchStatus.COMPLETED

    assert calls == [MatchOutcome.PLAYER1_WIN]


def test_changing_a_recorded_report_is_rejected() -> None:
    state = _confirmed(player1_result=ReportedResult.WIN)
    with pytest.raises(MatchStateError, match="already has result=win"):
        reconcile_report(state, PlayerSide.PLAYER1, ReportedResult.LOSS, **RATINGS)


@pytest.mark.parametrize("status", [MatchStatus.PENDING, MatchStatus.CANCELLED])
def test_reports_require_confirmed_match(status: MatchStatus) -> None:
    with pytest.raises(MatchStateError, match="does not accept reports"):
        reconcile_report(
            MatchState(match_id=3, status=status), PlayerSide.PLAYER1, ReportedResult.WIN, **RATINGS
        )


def test_invalid_reported_result_raises() -> None:
    with pytest.raises(ValueError, match="Invalid reported result"):
        reconcile_report(_confirmed(), PlayerSide.PLAYER1, "victory", **RATINGS)


def test_derive_outcome_needs_both_reports() -> None:
    assert derive_outcome(ReportedResult.WIN, None) is None
    assert derive_outcome(ReportedResult.WIN, ReportedResult.LOSS) is MatchOutcome.PLAYER1_WIN
    assert derive_outcome(ReportedResult.WIN, ReportedResult.WIN) is None


def test_confirm_and_cancel_transitions() -> None:
    pending = MatchState(match_id=1, status=MatchStatus.PENDING)
    confirmed = confirm_match(pending)
    assert confirmed.status is MatchStatus.CONFIRMED
    assert cancel_match(confirmed).status is MatchStatus.CANCELLED

    with pytest.raises(MatchStateError):
        confirm_match(confirmed)
    with pytest.raises(MatchStateError, match="cannot be cancelled"):
        cancel_match(pending)
    with pytest.raises(MatchStateError, match="cannot be cancelled"):
        cancel_match(MatchState(match_id=1, status=MatchStatus.COMPLETED))
    with pytest.raises(MatchStateError, match="cannot be cancelled from status=disputed"):
        cancel_match(MatchState(match_id=1, status=MatchStatus.DISPUTED))
