"""Provider record normalization and loading.

Raw rows are mappings of column name to string value, as produced by a
header-labelled CSV reader. All loose-data parsing (booleans as strings,
numeric coercion, trimming, case) happens here so downstream code only sees
typed ``ProviderRecord`` values.
"""
from __future__ import annotations

import csv
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .filters import ALL
from .geo import is_valid_lat_lon

logger = logging.getLogger(__name__)

RECOGNIZED_COLUMNS = frozenset(
    {
        "partner",
        "name",
        "role",
        "lat",
        "lon",
        "price",
        "notes",
        "active",
        "state",
        "service_radius_miles",
    }
)

TRUTHY_ACTIVE_VALUES = frozenset({"", "TRUE", "1", "YES"})

ROLE_LABELS = {
    "Electrician": "E",
    "Technician": "T",
}


@dataclass(frozen=True)
class ProviderRecord:
    partner: str
    name: str
    role: str
    lat: float
    lon: float
    price: str = ""
    notes: str = ""
    region: str = ""
    active: bool = True
    service_radius_miles: Optional[float] = None

    @property
    def display_name(self) -> str:
        return self.name or "Unnamed"

    @property
    def role_label(self) -> str:
        return ROLE_LABELS.get(self.role, "?")

    @property
    def has_valid_location(self) -> bool:
        return is_valid_lat_lon(self.lat, self.lon)


def safe_trim(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parse_active(value: Any) -> bool:
    """Missing or blank means active; otherwise TRUE/1/YES in any case."""
    return safe_trim(value).upper() in TRUTHY_ACTIVE_VALUES


def parse_coordinate(value: Any) -> float:
    """Coerce to float; anything unparseable becomes NaN instead of raising."""
    text = safe_trim(value)
    if not text:
        return math.nan
    try:
        return float(text)
    except ValueError:
        return math.nan


def parse_optional_radius(value: Any) -> Optional[float]:
    text = safe_trim(value)
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return math.nan


def normalize_row(row: Mapping[str, Any]) -> ProviderRecord:
    return ProviderRecord(
        partner=safe_trim(row.get("partner")),
        name=safe_trim(row.get("name")),
        role=safe_trim(row.get("role")),
        lat=parse_coordinate(row.get("lat")),
        lon=parse_coordinate(row.get("lon")),
        price=safe_trim(row.get("price")),
        notes=safe_trim(row.get("notes")),
        region=safe_trim(row.get("state")).upper(),
        active=parse_active(row.get("active")),
        service_radius_miles=parse_optional_radius(row.get("service_radius_miles")),
    )


def load_records(rows: Iterable[Mapping[str, Any]]) -> Tuple[ProviderRecord, ...]:
    """Normalize every row, then drop records without a partner."""
    records: List[ProviderRecord] = []
    unknown_columns = set()
    dropped = 0
    for row in rows:
        unknown_columns.update(k for k in row.keys() if k is not None and k not in RECOGNIZED_COLUMNS)
        record = normalize_row(row)
        if not record.partner:
            dropped += 1
            continue
        records.append(record)
    if unknown_columns:
        logger.debug("Ignoring unrecognized columns: %s", ", ".join(sorted(unknown_columns)))
    if dropped:
        logger.info("Dropped %s row(s) without a partner", dropped)
    return tuple(records)


def read_csv_rows(path: str) -> List[Dict[str, str]]:
    """Read a header-labelled CSV, skipping lines with no values."""
    csv_path = Path(path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Data file not found: {csv_path}")
    rows: List[Dict[str, str]] = []
    with csv_path.open("r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            if not any(safe_trim(v) for v in row.values() if isinstance(v, str)):
                continue
            rows.append({(k or "").strip(): v for k, v in row.items() if k is not None})
    return rows


def load_records_csv(path: str) -> Tuple[ProviderRecord, ...]:
    records = load_records(read_csv_rows(path))
    logger.info("Loaded %s provider record(s) from %s", len(records), path)
    return records


def _options(values: Iterable[str]) -> List[str]:
    return [ALL] + sorted({v for v in values if v})


def partner_options(records: Iterable[ProviderRecord]) -> List[str]:
    return _options(r.partner for r in records)


def role_options(records: Iterable[ProviderRecord]) -> List[str]:
    return _options(r.role for r in records)


def region_options(records: Iterable[ProviderRecord]) -> List[str]:
    return _options(r.region for r in records)


def data_quality_summary(records: Iterable[ProviderRecord]) -> Dict[str, int]:
    summary = {"total": 0, "active": 0, "inactive": 0, "invalid_coordinates": 0}
    for record in records:
        summary["total"] += 1
        if record.active:
            summary["active"] += 1
        else:
            summary["inactive"] += 1
        if not record.has_valid_location:
            summary["invalid_coordinates"] += 1
    return summary
