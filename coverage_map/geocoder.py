"""Address geocoding client and response parsing."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from . import config
from .geo import JobPoint, is_valid_lat_lon
from .http import GatewayError, HttpClient

logger = logging.getLogger(__name__)

LABEL_FIELDS = ("name", "city", "state", "country")


class Geocoder:
    def __init__(
        self,
        http_client: HttpClient,
        url: str = config.GEOCODE_URL,
        limit: int = config.GEOCODE_RESULT_LIMIT,
    ) -> None:
        self.http = http_client
        self.url = url
        self.limit = limit

    def geocode(self, address: str) -> Optional[JobPoint]:
        """Resolve an address to its best match, or None when nothing matched.

        Raises GatewayError on transport failures and on non-success or
        malformed responses.
        """
        query = (address or "").strip()
        if not query:
            raise ValueError("Address must not be blank")
        payload = self.http.get_json(self.url, build_geocode_params(query, self.limit))
        try:
            point = parse_geocode_response(payload, query)
        except ValueError as exc:
            logger.error("Malformed geocode response for %r: %s", query, exc)
            raise GatewayError(f"Malformed response: {exc}") from exc
        if point is None:
            logger.info("No geocode match for %r", query)
        return point


def build_geocode_params(address: str, limit: int = config.GEOCODE_RESULT_LIMIT) -> Dict[str, Any]:
    return {"q": address, "limit": limit}


def build_label(properties: Dict[str, Any], fallback: str) -> str:
    parts: List[str] = []
    for key in LABEL_FIELDS:
        value = properties.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text and text not in parts:
            parts.append(text)
    return ", ".join(parts) if parts else fallback


# Adapter/mapper for GeoJSON feature collections

def parse_geocode_response(payload: Any, address: str) -> Optional[JobPoint]:
    """First feature as a JobPoint; None when nothing matched.

    Raises ValueError when the body is not a feature collection.
    """
    if not isinstance(payload, dict):
        raise ValueError("Geocode response is not a JSON object")
    features = payload.get("features") or []
    if not isinstance(features, list):
        raise ValueError("Geocode response 'features' is not a list")
    if not features:
        return None
    feature = features[0] or {}
    if not isinstance(feature, dict):
        raise ValueError("Geocode feature is not an object")
    geometry = feature.get("geometry") or {}
    if not isinstance(geometry, dict):
        raise ValueError("Geocode feature geometry is not an object")
    coordinates = geometry.get("coordinates") or []
    if not isinstance(coordinates, (list, tuple)) or len(coordinates) < 2:
        return None
    try:
        lon = float(coordinates[0])
        lat = float(coordinates[1])
    except (TypeError, ValueError):
        return None
    if not is_valid_lat_lon(lat, lon):
        logger.warning("Geocoder returned out-of-range coordinates %s,%s", lat, lon)
        return None
    properties = feature.get("properties")
    if not isinstance(properties, dict):
        properties = {}
    return JobPoint(lat=lat, lon=lon, label=build_label(properties, address))
