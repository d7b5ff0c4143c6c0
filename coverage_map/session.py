"""Session state and orchestration.

``CoverageSession`` owns the loaded records, the current filter selection,
the current job point and the radius. Every view is recomputed in full from
that state; nothing is updated incrementally.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from . import config
from .filters import FilterCriteria, apply_filters
from .geo import BoundingBox, JobPoint
from .geocoder import Geocoder
from .http import GatewayError
from .records import ProviderRecord, partner_options, region_options, role_options
from .resolver import CoverageResult, resolve_coverage
from .viewport import fit_to_results, select_bounds, zoom_to_region

logger = logging.getLogger(__name__)

SEARCH_FOUND = "found"
SEARCH_NO_MATCH = "no_match"
SEARCH_FAILED = "failed"
SEARCH_BLANK = "blank"
SEARCH_STALE = "stale"


@dataclass(frozen=True)
class SearchOutcome:
    status: str
    message: str
    job: Optional[JobPoint] = None
    status_code: Optional[int] = None


@dataclass(frozen=True)
class SessionView:
    shown_count: int
    counts_text: str
    coverage: Optional[CoverageResult]
    bounds: Optional[BoundingBox]
    recenter: Optional[Tuple[float, float]]
    zoom: Optional[int]
    message: str


class CoverageSession:
    def __init__(
        self,
        records: Sequence[ProviderRecord],
        settings: Optional[config.CoverageSettings] = None,
        geocoder: Optional[Geocoder] = None,
    ) -> None:
        self.records: Tuple[ProviderRecord, ...] = tuple(records)
        self.settings = settings or config.CoverageSettings()
        self.geocoder = geocoder
        self.criteria = FilterCriteria()
        self.job: Optional[JobPoint] = None
        self.radius_miles = self.settings.fixed_radius_miles
        self._search_seq = 0
        self._last_message = ""

    # --- dropdown feeds ---

    def partner_options(self) -> List[str]:
        return partner_options(self.records)

    def role_options(self) -> List[str]:
        return role_options(self.records)

    def region_options(self) -> List[str]:
        return region_options(self.records)

    # --- state changes ---

    def set_partner(self, partner: Optional[str]) -> None:
        self.criteria = self.criteria.with_partner(partner)

    def set_role(self, role: Optional[str]) -> None:
        self.criteria = self.criteria.with_role(role)

    def set_region(self, region: Optional[str]) -> None:
        self.criteria = self.criteria.with_region(region)

    def set_radius(self, raw: Any) -> float:
        self.radius_miles = config.parse_radius_miles(raw, self.settings.fixed_radius_miles)
        return self.radius_miles

    def set_job(self, job: JobPoint) -> None:
        # A manual job supersedes any in-flight search.
        self._search_seq += 1
        self.job = job

    def clear_job(self) -> None:
        self._search_seq += 1
        self.job = None
        self._last_message = ""

    # --- geocode search ---

    def begin_search(self) -> int:
        """Stamp a new search; any earlier in-flight search becomes stale."""
        self._search_seq += 1
        return self._search_seq

    def is_current(self, ticket: int) -> bool:
        return ticket == self._search_seq

    def complete_search(self, ticket: int, address: str, point: Optional[JobPoint]) -> SearchOutcome:
        if not self.is_current(ticket):
            logger.info("Discarding stale geocode response for %r", address)
            return SearchOutcome(SEARCH_STALE, "", job=self.job)
        if point is None:
            outcome = SearchOutcome(SEARCH_NO_MATCH, f'No match found for "{address}".', job=self.job)
        else:
            self.job = point
            outcome = SearchOutcome(SEARCH_FOUND, f"Job: {point.label}", job=point)
        self._last_message = outcome.message
        return outcome

    def fail_search(self, ticket: int, address: str, error: GatewayError) -> SearchOutcome:
        if not self.is_current(ticket):
            logger.info("Discarding stale geocode failure for %r", address)
            return SearchOutcome(SEARCH_STALE, "", job=self.job)
        detail = f"HTTP {error.status_code}" if error.status_code is not None else str(error)
        logger.warning("Geocoding %r failed: %s", address, detail)
        outcome = SearchOutcome(
            SEARCH_FAILED,
            f"Geocoding failed ({detail}). Try again or refine the address.",
            job=self.job,
            status_code=error.status_code,
        )
        self._last_message = outcome.message
        return outcome

    def search(self, address: str) -> SearchOutcome:
        query = (address or "").strip()
        if not query:
            return SearchOutcome(SEARCH_BLANK, "Enter an address to search.", job=self.job)
        if self.geocoder is None:
            raise RuntimeError("No geocoder configured for this session")
        ticket = self.begin_search()
        try:
            point = self.geocoder.geocode(query)
        except GatewayError as exc:
            return self.fail_search(ticket, query, exc)
        return self.complete_search(ticket, query, point)

    # --- derived views ---

    def filtered_records(self) -> List[ProviderRecord]:
        return apply_filters(self.records, self.criteria)

    def resolve(self) -> Optional[CoverageResult]:
        if self.job is None:
            return None
        return resolve_coverage(
            self.job,
            self.filtered_records(),
            fixed_radius_miles=self.radius_miles,
            max_outside_miles=self.settings.max_outside_miles,
            outside_limit=self.settings.outside_result_limit,
            radius_mode=self.settings.radius_mode,
        )

    def fit_bounds(self) -> Optional[BoundingBox]:
        return fit_to_results(self.filtered_records(), self.settings.viewport_padding)

    def region_bounds(self) -> Optional[BoundingBox]:
        return zoom_to_region(self.criteria.region, self.filtered_records(), self.settings.viewport_padding)

    def view(self) -> SessionView:
        rows = self.filtered_records()
        coverage = self.resolve()
        bounds = select_bounds(
            rows,
            job=self.job,
            excluded_regions=self.settings.excluded_regions,
            padding=self.settings.viewport_padding,
        )
        if self.job is not None:
            recenter: Optional[Tuple[float, float]] = (self.job.lat, self.job.lon)
            zoom: Optional[int] = config.JOB_ZOOM
        else:
            recenter = None
            zoom = None
        message = coverage.message if coverage is not None else self._last_message
        return SessionView(
            shown_count=len(rows),
            counts_text=f"{len(rows)} location(s) shown",
            coverage=coverage,
            bounds=bounds,
            recenter=recenter,
            zoom=zoom,
            message=message,
        )

