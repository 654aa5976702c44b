"""matches table model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class Match(Base):
    """A scheduled two-player match and its rating snapshots once settled."""

    __tablename__ = "matches"
    __table_args__ = (
        CheckConstraint("player1_id <> player2_id", name="ck_matches_distinct_players"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'completed', 'disputed', 'cancelled')",
            name="ck_matches_status",
        ),
        CheckConstraint(
            "player1_result IS NULL OR player1_result IN ('win', 'loss', 'draw')",
            name="ck_matches_player1_result",
        ),
        CheckConstraint(
            "player2_result IS NULL OR player2_result IN ('win', 'loss', 'draw')",
            name="ck_matches_player2_result",
        ),
        Index("idx_matches_scheduled_at", "scheduled_at"),
        Index("idx_matches_player1", "player1_id", "status"),
        Index("idx_matches_player2", "player2_id", "status"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    player1_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    player2_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    sport_id: Mapped[int] = mapped_column(ForeignKey("sports.id", ondelete="CASCADE"), nullable=False)
    turf_id: Mapped[int | None] = mapped_column(
        ForeignKey("turfs.id", ondelete="SET NULL"),
        nullable=True,
    )
    scheduled_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    player1_result: Mapped[str | None] = mapped_column(String(10), nullable=True)
    player2_result: Mapped[str | None] = mapped_column(String(10), nullable=True)
    player1_rating_before: Mapped[float | None] = mapped_column(Float, nullable=True)
    player2_rating_before: Mapped[float | None] = mapped_column(Float, nullable=True)
    player1_rating_after: Mapped[float | None] = mapped_column(Float, nullable=True)
    player2_rating_after: Mapped[float | None] = mapped_column(Float, nullable=True)
    rating_change_player1: Mapped[float | None] = mapped_column(Float, nullable=True)
    rating_change_player2: Mapped[float | None] = mapped_column(Float, nullable=True)
    player1_k_factor: Mapped[int | None] = mapped_column(Integer, nullable=True)
    player2_k_factor: Mapped[int | None] = mapped_column(Integer, nullable=True)
    match_duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
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
