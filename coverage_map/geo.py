"""Geospatial helpers."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Protocol, Tuple

from . import config


class HasLatLon(Protocol):
    lat: float
    lon: float


@dataclass(frozen=True)
class JobPoint:
    lat: float
    lon: float
    label: str = ""


def is_valid_lat_lon(lat: Optional[float], lon: Optional[float]) -> bool:
    if lat is None or lon is None:
        return False
    return (
        math.isfinite(lat)
        and math.isfinite(lon)
        and -90 <= lat <= 90
        and -180 <= lon <= 180
    )


def has_valid_location(point: HasLatLon) -> bool:
    return is_valid_lat_lon(point.lat, point.lon)


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    r = config.EARTH_RADIUS_MILES
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    # Float rounding can push `a` just past 1 for antipodal points.
    a = min(1.0, a)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return r * c


def distance_miles(a: HasLatLon, b: HasLatLon) -> float:
    """Great-circle distance; both points must already be valid."""
    return haversine_miles(a.lat, a.lon, b.lat, b.lon)


def miles_to_meters(miles: float) -> float:
    return miles * config.METERS_PER_MILE


@dataclass(frozen=True)
class BoundingBox:
    south: float
    west: float
    north: float
    east: float

    @classmethod
    def around(cls, points: Iterable[HasLatLon]) -> Optional["BoundingBox"]:
        lats = []
        lons = []
        for p in points:
            lats.append(p.lat)
            lons.append(p.lon)
        if not lats:
            return None
        return cls(south=min(lats), west=min(lons), north=max(lats), east=max(lons))

    def pad(self, ratio: float) -> "BoundingBox":
        """Grow every side by ``ratio`` times the box's span on that axis."""
        height_buffer = abs(self.north - self.south) * ratio
        width_buffer = abs(self.east - self.west) * ratio
        return BoundingBox(
            south=self.south - height_buffer,
            west=self.west - width_buffer,
            north=self.north + height_buffer,
            east=self.east + width_buffer,
        )

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.south + self.north) / 2, (self.west + self.east) / 2)


# Approximate region boxes for zooming. Add more as needed.
REGION_BOUNDS: Dict[str, BoundingBox] = {
    "TX": BoundingBox(25.8, -106.7, 36.6, -93.5),
    "CA": BoundingBox(32.5, -124.5, 42.1, -114.1),
    "NV": BoundingBox(35.0, -120.0, 42.0, -114.0),
    "FL": BoundingBox(24.4, -87.7, 31.2, -80.0),
    "IN": BoundingBox(37.8, -88.1, 41.8, -84.8),
    "KS": BoundingBox(37.0, -102.1, 40.1, -94.6),
    "WA": BoundingBox(45.5, -124.9, 49.1, -116.9),
}
