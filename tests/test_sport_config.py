from __future__ import annotations

from pathlib import Path

import pytest

from domain.matchmaking.config import load_sport_configs

REPO_ROOT = Path(__file__).resolve().parents[1]


def _write(path: Path, content: str) -> None:
    path.write_text(content.strip() + "\n", encoding="utf-8")


def test_shipped_sport_configs_load() -> None:
    configs = load_sport_configs(REPO_ROOT / "configs" / "sports")
    names = {config.name for config in configs}

    assert {"badminton", "pickleball", "table_tennis"} <= names
    for config in configs:
        assert config.parameters.initial_rating == pytest.approx(1500.0)
        assert config.parameters.default_max_distance_km == pytest.approx(10.0)
        assert config.parameters.default_max_rating_diff == pytest.approx(200.0)


def test_defaults_fill_missing_matchmaking_section(tmp_path: Path) -> None:
    _write(
        tmp_path / "squash.toml",
        """
[sport]
name = "squash_doubles"
""",
    )

    config = load_sport_configs(tmp_path)[0]
    assert config.display_name == "Squash Doubles"
    assert config.description is None
    assert config.parameters.request_ttl_hours == 24
    assert config.parameters.leaderboard_min_games == 5
    assert config.as_config_json()["default_match_delay_minutes"] == 60


def test_overrides_are_parsed(tmp_path: Path) -> None:
    _write(
        tmp_path / "tennis.toml",
        """
[sport]
name = "tennis"
display_name = "Tennis"
description = "Singles only"

[matchmaking]
initial_rating = 1200
default_max_distance_km = 25
default_max_rating_diff = 150
request_ttl_hours = 12
""",
    )

    config = load_sport_configs(tmp_path)[0]
    assert config.description == "Singles only"
    assert config.parameters.initial_rating == pytest.approx(1200.0)
    assert config.parameters.default_max_distance_km == pytest.approx(25.0)
    assert config.parameters.default_max_rating_diff == pytest.approx(150.0)
    assert config.parameters.request_ttl_hours == 12


def test_missing_sport_name_is_rejected(tmp_path: Path) -> None:
    _write(tmp_path / "broken.toml", "[matchmaking]\nrequest_ttl_hours = 1")
    with pytest.raises(ValueError, match=r"\[sport\]\.name is required"):
        load_sport_configs(tmp_path)


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("initial_rating", "3500"),
        ("default_max_distance_km", "0.5"),
        ("default_max_distance_km", "150"),
        ("default_max_rating_diff", "-1"),
        ("request_ttl_hours", "0"),
        ("leaderboard_min_games", "-2"),
    ],
)
def test_out_of_range_parameters_are_rejected(tmp_path: Path, field: str, value: str) -> None:
    _write(tmp_path / "bad.toml", f'[sport]\nname = "bad"\n\n[matchmaking]\n{field} = {value}')
    with pytest.raises(ValueError, match=rf"\[matchmaking\]\.{field}"):
        load_sport_configs(tmp_path)


def test_duplicate_sport_names_are_rejected(tmp_path: Path) -> None:
    _write(tmp_path / "a.toml", '[sport]\nname = "padel"')
    _write(tmp_path / "b.toml", '[sport]\nname = "padel"')
    with pytest.raises(ValueError, match="Duplicate sport names"):
        load_sport_configs(tmp_path)


def test_missing_or_empty_directory_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_sport_configs(tmp_path / "missing")
    with pytest.raises(ValueError, match="No .toml config files"):
        load_sport_configs(tmp_path)
