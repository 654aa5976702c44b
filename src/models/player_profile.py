"""player_profiles table model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from domain.common import DEFAULT_RATING
from models.base import Base


class PlayerProfile(Base):
    """Rating state and record of one user in one sport."""

    __tablename__ = "player_profiles"
    __table_args__ = (
        UniqueConstraint("user_id", "sport_id", name="uq_player_profiles_user_sport"),
        CheckConstraint("games_played >= 0", name="ck_player_profiles_games_played"),
        CheckConstraint(
            "wins >= 0 AND losses >= 0 AND draws >= 0",
            name="ck_player_profiles_record",
        ),
        Index("idx_player_profiles_rating", "sport_id", "rating"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    sport_id: Mapped[int] = mapped_column(ForeignKey("sports.id", ondelete="CASCADE"), nullable=False)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=DEFAULT_RATING)
    games_played: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    wins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    losses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    draws: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
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
