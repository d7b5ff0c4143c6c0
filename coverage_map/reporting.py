"""Output reporting helpers."""
from __future__ import annotations

import csv
import json
import os
import tempfile
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, TextIO

from .geo import JobPoint
from .resolver import CoverageResult, ScoredRecord

COVERAGE_CSV_FIELDS = [
    "rank",
    "partner",
    "name",
    "role",
    "region",
    "lat",
    "lon",
    "distance_miles",
    "radius_miles",
    "eligible",
    "price",
    "notes",
]


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


@contextmanager
def atomic_writer(
    path: str,
    mode: str = "w",
    encoding: str = "utf-8",
    newline: Optional[str] = None,
) -> Iterator[TextIO]:
    dir_path = os.path.dirname(path) or "."
    base = os.path.basename(path)
    fd, tmp_path = tempfile.mkstemp(prefix=f".{base}.", suffix=".tmp", dir=dir_path)
    try:
        with os.fdopen(fd, mode, encoding=encoding, newline=newline) as f:
            yield f
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def scored_row(rank: int, scored: ScoredRecord) -> Dict[str, Any]:
    record = scored.record
    return {
        "rank": rank,
        "partner": record.partner,
        "name": record.display_name,
        "role": record.role,
        "region": record.region,
        "lat": record.lat,
        "lon": record.lon,
        "distance_miles": round(scored.distance_miles, 2),
        "radius_miles": scored.radius_miles,
        "eligible": scored.eligible,
        "price": record.price,
        "notes": record.notes,
    }


def coverage_rows(result: CoverageResult) -> List[Dict[str, Any]]:
    return [scored_row(i, s) for i, s in enumerate(result.records, start=1)]


def coverage_payload(result: CoverageResult, job: Optional[JobPoint] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "generated_at": utc_now_iso(),
        "kind": result.kind.value,
        "message": result.message,
        "fixed_radius_miles": result.fixed_radius_miles,
        "max_outside_miles": result.max_outside_miles,
        "candidate_count": result.candidate_count,
        "results": coverage_rows(result),
    }
    if job is not None:
        payload["job"] = {"lat": job.lat, "lon": job.lon, "label": job.label}
    return payload


def write_coverage_json(path: str, result: CoverageResult, job: Optional[JobPoint] = None) -> None:
    with atomic_writer(path, mode="w", encoding="utf-8") as f:
        json.dump(coverage_payload(result, job), f, ensure_ascii=False, indent=2)


def write_coverage_csv(path: str, result: CoverageResult) -> None:
    with atomic_writer(path, mode="w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=COVERAGE_CSV_FIELDS)
        writer.writeheader()
        for row in coverage_rows(result):
            writer.writerow(row)
