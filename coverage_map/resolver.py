"""Coverage resolution for a single job point.

Classifies the filtered provider records against a coverage radius and
falls back to the nearest providers just outside it. Pure and synchronous:
malformed records are filtered out, never raised on.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from . import config
from .geo import JobPoint, distance_miles
from .records import ProviderRecord

logger = logging.getLogger(__name__)


class CoverageKind(str, Enum):
    NO_CANDIDATES = "no_candidates"
    ELIGIBLE = "eligible"
    NEAREST_OUTSIDE = "nearest_outside"
    NONE_WITHIN_RANGE = "none_within_range"


@dataclass(frozen=True)
class ScoredRecord:
    record: ProviderRecord
    distance_miles: float
    eligible: bool
    radius_miles: float


@dataclass(frozen=True)
class CoverageResult:
    kind: CoverageKind
    records: Tuple[ScoredRecord, ...]
    fixed_radius_miles: float
    max_outside_miles: float
    candidate_count: int = 0

    @property
    def best_match(self) -> Optional[ScoredRecord]:
        if self.kind is CoverageKind.ELIGIBLE and self.records:
            return self.records[0]
        return None

    @property
    def message(self) -> str:
        return describe_result(self)


def effective_radius(record: ProviderRecord, fixed_radius_miles: float, radius_mode: str) -> float:
    if radius_mode == config.RADIUS_MODE_PER_RECORD:
        override = record.service_radius_miles
        if override is not None and math.isfinite(override) and override > 0:
            return override
    return fixed_radius_miles


def score_records(
    job: JobPoint,
    records: Iterable[ProviderRecord],
    fixed_radius_miles: float,
    radius_mode: str = config.RADIUS_MODE_FIXED,
) -> List[ScoredRecord]:
    scored: List[ScoredRecord] = []
    for record in records:
        distance = distance_miles(job, record)
        radius = effective_radius(record, fixed_radius_miles, radius_mode)
        scored.append(
            ScoredRecord(record=record, distance_miles=distance, eligible=distance <= radius, radius_miles=radius)
        )
    return scored


def _by_distance(scored: ScoredRecord) -> float:
    return scored.distance_miles


def resolve_coverage(
    job: JobPoint,
    filtered: Iterable[ProviderRecord],
    fixed_radius_miles: float = config.FIXED_RADIUS_MILES,
    max_outside_miles: float = config.MAX_OUTSIDE_MILES,
    outside_limit: int = config.OUTSIDE_RESULT_LIMIT,
    radius_mode: str = config.RADIUS_MODE_FIXED,
) -> CoverageResult:
    if radius_mode not in config.RADIUS_MODES:
        raise ValueError(f"radius_mode must be one of: {', '.join(config.RADIUS_MODES)}")

    filtered = list(filtered)
    candidates = [r for r in filtered if r.has_valid_location]
    skipped = len(filtered) - len(candidates)
    if skipped:
        logger.debug("Excluded %s record(s) with invalid coordinates", skipped)

    def result(kind: CoverageKind, records: Iterable[ScoredRecord] = ()) -> CoverageResult:
        return CoverageResult(
            kind=kind,
            records=tuple(records),
            fixed_radius_miles=fixed_radius_miles,
            max_outside_miles=max_outside_miles,
            candidate_count=len(candidates),
        )

    if not candidates:
        return result(CoverageKind.NO_CANDIDATES)

    scored = score_records(job, candidates, fixed_radius_miles, radius_mode)

    # sorted() is stable, so equal distances keep the collection order.
    eligible = sorted((s for s in scored if s.eligible), key=_by_distance)
    if eligible:
        return result(CoverageKind.ELIGIBLE, eligible)

    outside = sorted(
        (s for s in scored if s.distance_miles <= max_outside_miles),
        key=_by_distance,
    )[: max(0, outside_limit)]
    if outside:
        return result(CoverageKind.NEAREST_OUTSIDE, outside)

    return result(CoverageKind.NONE_WITHIN_RANGE)


def _fmt_miles(value: float) -> str:
    return f"{value:g}"


def describe_result(result: CoverageResult) -> str:
    radius = _fmt_miles(result.fixed_radius_miles)
    if result.kind is CoverageKind.NO_CANDIDATES:
        return "No matching resources under the current filters."
    if result.kind is CoverageKind.ELIGIBLE:
        best = result.records[0]
        return (
            f"{len(result.records)} resource(s) within range. "
            f"Best match: {best.record.display_name} ({best.distance_miles:.1f} mi)."
        )
    if result.kind is CoverageKind.NEAREST_OUTSIDE:
        return (
            f"No resources within {radius} mi. Showing the {len(result.records)} nearest "
            f"within {_fmt_miles(result.max_outside_miles)} mi."
        )
    return (
        f"No resources within {radius} mi or {_fmt_miles(result.max_outside_miles)} mi. "
        "Try navigating the map manually."
    )
