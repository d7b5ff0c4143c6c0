"""CLI entrypoint."""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv as _load_dotenv

from coverage_map import config
from coverage_map.geo import JobPoint, is_valid_lat_lon
from coverage_map.geocoder import Geocoder
from coverage_map.http import HttpClient
from coverage_map.records import data_quality_summary, load_records_csv
from coverage_map.reporting import ensure_dir, write_coverage_csv, write_coverage_json
from coverage_map.session import SEARCH_FAILED, SEARCH_FOUND, CoverageSession


def _repo_root() -> Path:
    return Path(__file__).resolve().parent


def load_env(path: str = ".env", root_dir: Optional[Path] = None) -> None:
    """Optionally load a repo-root .env file without overriding real env vars."""
    root = Path(root_dir) if root_dir else _repo_root()
    env_path = (root / path).resolve()
    if not env_path.exists():
        return
    _load_dotenv(dotenv_path=env_path, override=False)


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resolve provider coverage for a job location")
    parser.add_argument("--data", type=str, default=config.DATA_CSV_PATH, help="Provider CSV")
    parser.add_argument("--config", type=str, default=None, help="Coverage config JSON")
    parser.add_argument("--check-data", action="store_true", help="Report data quality and exit")
    parser.add_argument("--partner", type=str, default=None)
    parser.add_argument("--role", type=str, default=None)
    parser.add_argument("--region", type=str, default=None)
    parser.add_argument("--address", type=str, default=None, help="Job address to geocode")
    parser.add_argument("--job-lat", type=float, default=None)
    parser.add_argument("--job-lon", type=float, default=None)
    parser.add_argument("--job-label", type=str, default="Job")
    parser.add_argument("--radius", type=str, default=None, help="Coverage radius in miles")
    parser.add_argument("--max-outside", type=float, default=None, help="Fallback search cap in miles")
    parser.add_argument(
        "--radius-mode",
        choices=list(config.RADIUS_MODES),
        default=None,
        help="fixed: one radius for all; per_record: use service_radius_miles when present",
    )
    parser.add_argument("--out", type=str, default=None, help="Write coverage.json/coverage.csv here")
    return parser.parse_args(argv)


def run_data_check(data_path: str) -> int:
    records = load_records_csv(data_path)
    summary = data_quality_summary(records)
    print(f"Records: {summary['total']}")
    print(f"- active: {summary['active']}")
    print(f"- inactive: {summary['inactive']}")
    print(f"- invalid coordinates: {summary['invalid_coordinates']}")
    return 0


def build_session(args: argparse.Namespace) -> CoverageSession:
    settings = config.load_coverage_config(args.config)
    if args.radius_mode:
        settings = replace(settings, radius_mode=args.radius_mode)
    if args.max_outside is not None:
        if args.max_outside <= 0:
            raise ValueError("--max-outside must be positive")
        settings = replace(settings, max_outside_miles=args.max_outside)
    http_client = HttpClient(
        user_agent=settings.geocode_user_agent,
        timeout=config.HTTP_TIMEOUT_SECONDS,
        retry_max=config.HTTP_RETRY_MAX,
        backoff_base=config.HTTP_BACKOFF_BASE,
        backoff_max=config.HTTP_BACKOFF_MAX,
    )
    session = CoverageSession(
        load_records_csv(args.data),
        settings=settings,
        geocoder=Geocoder(http_client, url=settings.geocode_url),
    )
    session.set_partner(args.partner)
    session.set_role(args.role)
    session.set_region(args.region)
    if args.radius is not None:
        session.set_radius(args.radius)
    return session


def main(argv: Optional[list] = None) -> int:
    load_env()
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        if args.check_data:
            return run_data_check(args.data)
        session = build_session(args)
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.address is not None:
        outcome = session.search(args.address)
        print(outcome.message)
        if outcome.status == SEARCH_FAILED:
            return 1
        if outcome.status != SEARCH_FOUND:
            return 0
    elif args.job_lat is not None or args.job_lon is not None:
        if not is_valid_lat_lon(args.job_lat, args.job_lon):
            print("Error: --job-lat/--job-lon must both be valid coordinates", file=sys.stderr)
            return 1
        session.set_job(JobPoint(lat=args.job_lat, lon=args.job_lon, label=args.job_label))

    view = session.view()
    print(view.counts_text)
    if view.coverage is None:
        if view.bounds is not None:
            b = view.bounds
            print(f"Fit bounds: ({b.south:.4f}, {b.west:.4f}) - ({b.north:.4f}, {b.east:.4f})")
            lat, lon = b.center
            print(f"Center: {lat:.4f}, {lon:.4f}")
        return 0

    print(view.message)
    for rank, scored in enumerate(view.coverage.records, start=1):
        r = scored.record
        marker = "*" if scored.eligible else "-"
        print(f"{marker} {rank}. {r.display_name} [{r.partner}/{r.role or '-'}] {scored.distance_miles:.1f} mi")

    if args.out:
        ensure_dir(args.out)
        write_coverage_json(f"{args.out}/coverage.json", view.coverage, session.job)
        write_coverage_csv(f"{args.out}/coverage.csv", view.coverage)
        print(f"Results written to {args.out}/coverage.json and {args.out}/coverage.csv")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
