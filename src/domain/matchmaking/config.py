"""Load per-sport matchmaking definitions from TOML files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from domain.common import DEFAULT_RATING
from domain.config_base import BaseConfig, load_configs, optional_str
from domain.ratings.elo.calculator import DEFAULT_MAX_RATING_DIFFERENCE

MIN_SEARCH_RADIUS_KM = 1.0
MAX_SEARCH_RADIUS_KM = 100.0
MIN_RATING = 0.0
MAX_RATING = 3000.0


@dataclass(frozen=True)
class MatchmakingParameters:
    initial_rating: float = DEFAULT_RATING
    default_max_distance_km: float = 10.0
    default_max_rating_diff: float = DEFAULT_MAX_RATING_DIFFERENCE
    request_ttl_hours: int = 24
    default_match_delay_minutes: int = 60
    leaderboard_min_games: int = 5


@dataclass(frozen=True)
class SportConfig(BaseConfig):
    """One sport and the matchmaking defaults it runs with."""

    display_name: str
    parameters: MatchmakingParameters

    def as_config_json(self) -> dict[str, Any]:
        return {
            "initial_rating": self.parameters.initial_rating,
            "default_max_distance_km": self.parameters.default_max_distance_km,
            "default_max_rating_diff": self.parameters.default_max_rating_diff,
            "request_ttl_hours": self.parameters.request_ttl_hours,
            "default_match_delay_minutes": self.parameters.default_match_delay_minutes,
            "leaderboard_min_games": self.parameters.leaderboard_min_games,
        }


def load_sport_configs(config_dir: Path) -> list[SportConfig]:
    """Load and validate all sport TOML config files in a directory."""
    return load_configs(config_dir, parse_sport_config, duplicate_name_label="sport")


def parse_sport_config(raw: dict[str, Any], file_path: Path) -> SportConfig:
    sport_raw = raw.get("sport", {})
    matchmaking_raw = raw.get("matchmaking", {})

    name = str(sport_raw.get("name", "")).strip()
    if not name:
        raise ValueError(f"{file_path}: [sport].name is required")

    display_name = str(sport_raw.get("display_name", "")).strip() or name.replace("_", " ").title()

    parameters = MatchmakingParameters(
        initial_rating=float(matchmaking_raw.get("initial_rating", DEFAULT_RATING)),
        default_max_distance_km=float(matchmaking_raw.get("default_max_distance_km", 10.0)),
        default_max_rating_diff=float(
            matchmaking_raw.get("default_max_rating_diff", DEFAULT_MAX_RATING_DIFFERENCE)
        ),
        request_ttl_hours=int(matchmaking_raw.get("request_ttl_hours", 24)),
        default_match_delay_minutes=int(matchmaking_raw.get("default_match_delay_minutes", 60)),
        leaderboard_min_games=int(matchmaking_raw.get("leaderboard_min_games", 5)),
    )
    _validate_parameters(file_path=file_path, parameters=parameters)

    return SportConfig(
        name=name,
        description=optional_str(sport_raw.get("description")),
        file_path=file_path,
        display_name=display_name,
        parameters=parameters,
    )


def _validate_parameters(*, file_path: Path, parameters: MatchmakingParameters) -> None:
    if not MIN_RATING <= parameters.initial_rating <= MAX_RATING:
        raise ValueError(
            f"{file_path}: [matchmaking].initial_rating must be between {MIN_RATING} and {MAX_RATING}"
        )
    if not MIN_SEARCH_RADIUS_KM <= parameters.default_max_distance_km <= MAX_SEARCH_RADIUS_KM:
        raise ValueError(
            f"{file_path}: [matchmaking].default_max_distance_km must be between "
            f"{MIN_SEARCH_RADIUS_KM} and {MAX_SEARCH_RADIUS_KM}"
        )
    if parameters.default_max_rating_diff < 0.0:
        raise ValueError(f"{file_path}: [matchmaking].default_max_rating_diff must be >= 0")
    if parameters.request_ttl_hours <= 0:
        raise ValueError(f"{file_path}: [matchmaking].request_ttl_hours must be > 0")
    if parameters.default_match_delay_minutes < 0:
        raise ValueError(f"{file_path}: [matchmaking].default_match_delay_minutes must be >= 0")
    if parameters.leaderboard_min_games < 0:
        raise ValueError(f"{file_path}: [matchmaking].leaderboard_min_games must be >= 0")
