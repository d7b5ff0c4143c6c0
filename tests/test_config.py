import json

import pytest

from coverage_map import config


def test_missing_config_file_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("GEOCODE_URL", raising=False)
    monkeypatch.delenv("GEOCODE_USER_AGENT", raising=False)
    settings = config.load_coverage_config(str(tmp_path / "missing.json"))
    assert settings == config.CoverageSettings()
    assert settings.excluded_regions == frozenset({"HI", "AK"})
    assert settings.radius_mode == config.RADIUS_MODE_FIXED


def test_config_file_and_env_overrides(tmp_path, monkeypatch):
    path = tmp_path / "coverage_config.json"
    path.write_text(
        json.dumps(
            {
                "fixed_radius_miles": 75,
                "max_outside_miles": 300,
                "outside_result_limit": 3,
                "excluded_regions": ["pr", " ak "],
                "radius_mode": "per_record",
                "geocode": {"url": "https://file.example/api", "user_agent": "file-agent"},
            }
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("GEOCODE_URL", "https://env.example/api")
    monkeypatch.delenv("GEOCODE_USER_AGENT", raising=False)
    settings = config.load_coverage_config(str(path))
    assert settings.fixed_radius_miles == 75.0
    assert settings.max_outside_miles == 300.0
    assert settings.outside_result_limit == 3
    assert settings.excluded_regions == frozenset({"PR", "AK"})
    assert settings.radius_mode == config.RADIUS_MODE_PER_RECORD
    assert settings.geocode_url == "https://env.example/api"
    assert settings.geocode_user_agent == "file-agent"


@pytest.mark.parametrize(
    "payload",
    [
        {"radius_mode": "sometimes"},
        {"fixed_radius_miles": -5},
        {"outside_result_limit": 0},
        {"excluded_regions": "HI"},
        {"geocode": "https://geo.example/api"},
    ],
)
def test_invalid_config_values_rejected(tmp_path, payload):
    path = tmp_path / "coverage_config.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    with pytest.raises(ValueError):
        config.load_coverage_config(str(path))


def test_parse_radius_miles():
    assert config.parse_radius_miles(None) == config.FIXED_RADIUS_MILES
    assert config.parse_radius_miles("  ", default=50) == 50
    assert config.parse_radius_miles("nan", default=50) == 50
    assert config.parse_radius_miles("-3") == 1.0
    assert config.parse_radius_miles(" 42.5 ") == 42.5
