"""Match lifecycle modules."""

from domain.matches.reconciliation import (
    MatchState,
    MatchStatus,
    ReconcileResult,
    cancel_match,
    confirm_match,
    derive_outcome,
    reconcile_report,
)

__all__ = [
    "MatchState",
    "MatchStatus",
    "ReconcileResult",
    "cancel_match",
    "confirm_match",
    "derive_outcome",
    "reconcile_report",
]
