"""Persistence helpers for sport definitions."""

from __future__ import annotations

from dataclasses import fields

from sqlalchemy import select
from sqlalchemy.orm import Session

from domain.matchmaking.config import MatchmakingParameters, SportConfig
from models import Sport

_PARAMETER_FIELDS = frozenset(field.name for field in fields(MatchmakingParameters))


def upsert_sport(session: Session, config: SportConfig) -> Sport:
    """Create or update one sport from its config file."""
    sport = session.execute(select(Sport).where(Sport.name == config.name)).scalar_one_or_none()
    if sport is None:
        sport = Sport(
            name=config.name,
            display_name=config.display_name,
            description=config.description,
            config_json=config.as_config_json(),
            is_active=True,
        )
        session.add(sport)
    else:
        sport.display_name = config.display_name
        sport.description = config.description
        sport.config_json = config.as_config_json()
        sport.is_active = True
    session.flush()
    return sport


def get_active_sport(session: Session, *, sport_id: int) -> Sport | None:
    return session.execute(
        select(Sport).where(Sport.id == sport_id, Sport.is_active.is_(True))
    ).scalar_one_or_none()


def sport_parameters(sport: Sport) -> MatchmakingParameters:
    """Matchmaking defaults stored with the sport; unknown keys are ignored."""
    stored = sport.config_json or {}
    return MatchmakingParameters(**{key: value for key, value in stored.items() if key in _PARAMETER_FIELDS})
