"""match_requests table model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class MatchRequest(Base):
    """An open search for an opponent in one sport."""

    __tablename__ = "match_requests"
    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'matched', 'expired', 'cancelled')",
            name="ck_match_requests_status",
        ),
        CheckConstraint(
            "max_distance_km >= 1 AND max_distance_km <= 100",
            name="ck_match_requests_max_distance",
        ),
        Index("idx_match_requests_status", "status", "created_at"),
        Index("idx_match_requests_requester_sport", "requester_id", "sport_id", "status"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    requester_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    sport_id: Mapped[int] = mapped_column(ForeignKey("sports.id", ondelete="CASCADE"), nullable=False)
    preferred_turf_id: Mapped[int | None] = mapped_column(
        ForeignKey("turfs.id", ondelete="SET NULL"),
        nullable=True,
    )
    preferred_time_start: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    preferred_time_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    max_distance_km: Mapped[float] = mapped_column(Float, nullable=False, default=10.0)
    min_rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    matched_with_user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    match_id: Mapped[int | None] = mapped_column(
        ForeignKey("matches.id", ondelete="SET NULL"),
        nullable=True,
    )
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
