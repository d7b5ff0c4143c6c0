"""Project configuration.

Loads per-deployment coverage parameters from coverage_config.json when
available, falling back to sensible defaults. Keep geocoder request shapes
centralized here.
"""
from __future__ import annotations

import json
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, FrozenSet, Optional

_REPO_ROOT = Path(__file__).resolve().parent.parent

# --- Geocoder endpoint ---

GEOCODE_URL = "https://photon.komoot.io/api/"
GEOCODE_RESULT_LIMIT = 1
GEOCODE_USER_AGENT = "coverage-map/0.1"

# --- Geometry ---

EARTH_RADIUS_MILES = 3958.7613
METERS_PER_MILE = 1609.344

# --- Coverage ---

FIXED_RADIUS_MILES = 100.0
MAX_OUTSIDE_MILES = 250.0
OUTSIDE_RESULT_LIMIT = 5
MIN_RADIUS_MILES = 1.0

RADIUS_MODE_FIXED = "fixed"
RADIUS_MODE_PER_RECORD = "per_record"
RADIUS_MODES = (RADIUS_MODE_FIXED, RADIUS_MODE_PER_RECORD)

# --- Viewport ---

VIEWPORT_PADDING = 0.25
EXCLUDED_FIT_REGIONS: FrozenSet[str] = frozenset({"HI", "AK"})
JOB_ZOOM = 9

# --- HTTP ---

HTTP_TIMEOUT_SECONDS = 10
HTTP_RETRY_MAX = 3
HTTP_BACKOFF_BASE = 0.5
HTTP_BACKOFF_MAX = 8.0

# --- Data ---

DATA_CSV_PATH = "data.csv"
CONFIG_FILENAME = "coverage_config.json"


@dataclass(frozen=True)
class CoverageSettings:
    fixed_radius_miles: float = FIXED_RADIUS_MILES
    max_outside_miles: float = MAX_OUTSIDE_MILES
    outside_result_limit: int = OUTSIDE_RESULT_LIMIT
    viewport_padding: float = VIEWPORT_PADDING
    excluded_regions: FrozenSet[str] = field(default_factory=lambda: EXCLUDED_FIT_REGIONS)
    radius_mode: str = RADIUS_MODE_FIXED
    geocode_url: str = GEOCODE_URL
    geocode_user_agent: str = GEOCODE_USER_AGENT


def parse_radius_miles(raw: Any, default: float = FIXED_RADIUS_MILES) -> float:
    """Coerce a user-entered radius; blank or unparseable input means the default."""
    if raw is None:
        return default
    text = str(raw).strip()
    if not text:
        return default
    try:
        value = float(text)
    except ValueError:
        return default
    if not math.isfinite(value):
        return default
    return max(MIN_RADIUS_MILES, value)


def _positive_float(value: Any, name: str) -> float:
    out = float(value)
    if not math.isfinite(out) or out <= 0:
        raise ValueError(f"{name} must be a positive number, got {value!r}")
    return out


def load_coverage_config(path: Optional[str] = None) -> CoverageSettings:
    """Load coverage settings from a JSON file.

    Returns defaults when the file does not exist. GEOCODE_URL and
    GEOCODE_USER_AGENT from the environment take precedence over the file.
    """
    if path is None:
        path = str(_REPO_ROOT / CONFIG_FILENAME)

    data: dict = {}
    config_path = Path(path)
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{config_path} must contain a JSON object")

    kwargs: dict = {}
    if data.get("fixed_radius_miles") is not None:
        kwargs["fixed_radius_miles"] = _positive_float(data["fixed_radius_miles"], "fixed_radius_miles")
    if data.get("max_outside_miles") is not None:
        kwargs["max_outside_miles"] = _positive_float(data["max_outside_miles"], "max_outside_miles")
    if data.get("outside_result_limit") is not None:
        limit = int(data["outside_result_limit"])
        if limit < 1:
            raise ValueError("outside_result_limit must be >= 1")
        kwargs["outside_result_limit"] = limit
    if data.get("viewport_padding") is not None:
        padding = float(data["viewport_padding"])
        if padding < 0:
            raise ValueError("viewport_padding must be >= 0")
        kwargs["viewport_padding"] = padding
    excluded = data.get("excluded_regions")
    if excluded is not None:
        if not isinstance(excluded, list):
            raise ValueError("excluded_regions must be a list of region codes")
        kwargs["excluded_regions"] = frozenset(
            str(r).strip().upper() for r in excluded if str(r).strip()
        )

    radius_mode = data.get("radius_mode")
    if radius_mode is not None:
        if radius_mode not in RADIUS_MODES:
            raise ValueError(f"radius_mode must be one of: {', '.join(RADIUS_MODES)}")
        kwargs["radius_mode"] = radius_mode

    geocode = data.get("geocode") or {}
    if not isinstance(geocode, dict):
        raise ValueError("geocode must be a JSON object")
    if geocode.get("url"):
        kwargs["geocode_url"] = str(geocode["url"])
    if geocode.get("user_agent"):
        kwargs["geocode_user_agent"] = str(geocode["user_agent"])

    env_url = (os.environ.get("GEOCODE_URL") or "").strip()
    if env_url:
        kwargs["geocode_url"] = env_url
    env_ua = (os.environ.get("GEOCODE_USER_AGENT") or "").strip()
    if env_ua:
        kwargs["geocode_user_agent"] = env_ua

    return CoverageSettings(**kwargs)
