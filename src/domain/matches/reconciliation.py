"""Match lifecycle and self-reported result reconciliation.

A confirmed match collects one self-reported result per participant. Once
both sides have reported, consistent reports (win/loss or draw/draw) complete
the match and produce rating changes; anything else moves it to disputed.
Repeating an already recorded report is a no-op, so a retried request never
computes ratings twice.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from domain.common import (
    MatchOutcome,
    PlayerRatingState,
    PlayerSide,
    RatingChanges,
    ReportedResult,
)
from domain.errors import MatchStateError
from domain.ratings.elo.calculator import calculate_rating_changes


class MatchStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    DISPUTED = "disputed"
    CANCELLED = "cancelled"


_CONSISTENT_REPORTS: dict[tuple[ReportedResult, ReportedResult], MatchOutcome] = {
    (ReportedResult.WIN, ReportedResult.LOSS): MatchOutcome.PLAYER1_WIN,
    (ReportedResult.LOSS, ReportedResult.WIN): MatchOutcome.PLAYER2_WIN,
    (ReportedResult.DRAW, ReportedResult.DRAW): MatchOutcome.DRAW,
}


@dataclass(frozen=True)
class MatchState:
    match_id: int
    status: MatchStatus
    player1_result: ReportedResult | None = None
    player2_result: ReportedResult | None = None

    def result_for(self, side: PlayerSide) -> ReportedResult | None:
        if side is PlayerSide.PLAYER1:
            return self.player1_result
        return self.player2_result

    def with_result(self, side: PlayerSide, result: ReportedResult) -> MatchState:
        if side is PlayerSide.PLAYER1:
            return replace(self, player1_result=result)
        return replace(self, player2_result=result)


@dataclass(frozen=True)
class ReconcileResult:
    state: MatchState
    rating_changes: RatingChanges | None = None
    outcome: MatchOutcome | None = None
    changed: bool = True

    @property
    def newly_completed(self) -> bool:
        return self.rating_changes is not None


def derive_outcome(
    player1_result: ReportedResult | None,
    player2_result: ReportedResult | None,
) -> MatchOutcome | None:
    """Agreed outcome for two reports, or None when they contradict each other."""
    if player1_result is None or player2_result is None:
        return None
    return _CONSISTENT_REPORTS.get((player1_result, player2_result))


def confirm_match(state: MatchState) -> MatchState:
    if state.status is not MatchStatus.PENDING:
        raise MatchStateError(
            f"match_id={state.match_id} cannot be confirmed from status={state.status.value}"
        )
    return replace(state, status=MatchStatus.CONFIRMED)


def cancel_match(state: MatchState) -> MatchState:
    if state.status is not MatchStatus.CONFIRMED:
        raise MatchStateError(
            f"match_id={state.match_id} cannot be cancelled from status={state.status.value}"
        )
    return replace(state, status=MatchStatus.CANCELLED)


def reconcile_report(
    state: MatchState,
    reporter_side: PlayerSide | str,
    reported_result: ReportedResult | str,
    *,
    player1_rating: PlayerRatingState,
    player2_rating: PlayerRatingState,
) -> ReconcileResult:
    """Record one participant's report and settle the match when both are in."""
    side = PlayerSide(reporter_side)
    result = _parse_reported_result(reported_result)

    existing = state.result_for(side)
    if existing is not None:
        if existing is result:
            return ReconcileResult(state=state, changed=False)
        raise MatchStateError(
            f"match_id={state.match_id} already has result={existing.value} "
            f"reported by {side.value}"
        )

    if state.status is not MatchStatus.CONFIRMED:
        raise MatchStateError(
            f"match_id={state.match_id} does not accept reports in status={state.status.value}"
        )

    updated = state.with_result(side, result)
    if updated.player1_result is None or updated.player2_result is None:
        return ReconcileResult(state=updated)

    outcome = derive_outcome(updated.player1_result, updated.player2_result)
    if outcome is None:
        return ReconcileResult(state=replace(updated, status=MatchStatus.DISPUTED))

    rating_changes = calculate_rating_changes(player1_rating, player2_rating, outcome)
    return ReconcileResult(
        state=replace(updated, status=MatchStatus.COMPLETED),
        rating_changes=rating_changes,
        outcome=outcome,
    )


def _parse_reported_result(value: ReportedResult | str) -> ReportedResult:
    try:
        return ReportedResult(value)
    except ValueError as exc:
        valid = ", ".join(item.value for item in ReportedResult)
        raise ValueError(f"Invalid reported result {value!r}; expected one of: {valid}") from exc


__all__ = [
    "MatchState",
    "MatchStatus",
    "ReconcileResult",
    "cancel_match",
    "confirm_match",
    "derive_outcome",
    "reconcile_report",
]
