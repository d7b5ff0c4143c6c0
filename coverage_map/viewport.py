"""Viewport fitting for the current record subset."""
from __future__ import annotations

import logging
from typing import AbstractSet, Iterable, List, Optional

from . import config
from .filters import ALL
from .geo import REGION_BOUNDS, BoundingBox, JobPoint
from .records import ProviderRecord

logger = logging.getLogger(__name__)


def _valid(records: Iterable[ProviderRecord]) -> List[ProviderRecord]:
    return [r for r in records if r.has_valid_location]


def fit_to_results(
    records: Iterable[ProviderRecord],
    padding: float = config.VIEWPORT_PADDING,
) -> Optional[BoundingBox]:
    """Bound every record with valid coordinates; None means leave the view alone."""
    box = BoundingBox.around(_valid(records))
    if box is None:
        return None
    return box.pad(padding)


def select_bounds(
    records: Iterable[ProviderRecord],
    job: Optional[JobPoint] = None,
    excluded_regions: AbstractSet[str] = config.EXCLUDED_FIT_REGIONS,
    padding: float = config.VIEWPORT_PADDING,
) -> Optional[BoundingBox]:
    """Auto-fit bounds for the current records.

    Auto-fit is suppressed while a job point is active; the caller recenters
    on the job instead. Records in ``excluded_regions`` are left out of the
    fit unless nothing else remains.
    """
    if job is not None:
        return None
    valid = _valid(records)
    if not valid:
        return None
    kept = [r for r in valid if r.region not in excluded_regions]
    if not kept:
        logger.debug("Only excluded regions present; fitting all %s record(s)", len(valid))
        kept = valid
    return fit_to_results(kept, padding)


def zoom_to_region(
    region: Optional[str],
    records: Iterable[ProviderRecord],
    padding: float = config.VIEWPORT_PADDING,
) -> Optional[BoundingBox]:
    if not region or region == ALL:
        return fit_to_results(records, padding)
    return REGION_BOUNDS.get(region.upper())
