"""Predefined locations and location-string parsing."""

from __future__ import annotations

import logging

from meteogram.common.types import LatLon

logger = logging.getLogger(__name__)

LOCATIONS: dict[str, LatLon] = {
    "KFRG": (40.73443, -73.41639),
    "KNYC": (40.78333, -73.96667),
    "KCDW": (40.872665, -74.283767),
    "SOUTH PRACTICE AREA": (40.62212, -73.13705),
    "NORTH PRACTICE AREA": (40.95599, -73.28619),
}


def format_coordinate(coord: float) -> float:
    """Round a coordinate to 6 decimal places."""
    return round(coord, 6)


def parse_location(location: str) -> LatLon | None:
    """Resolve a location key to (lat, lon) without network access.

    Accepts either a predefined key (case-insensitive) or a custom
    ``"Name@lat,lon"`` string. Returns None when neither matches.
    """
    if "@" in location:
        _, _, coords = location.partition("@")
        lat_str, _, lon_str = coords.partition(",")
        try:
            lat, lon = float(lat_str), float(lon_str)
        except ValueError:
            logger.debug("Unparseable coordinates in location %r", location)
            return None
        if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
            logger.debug("Coordinates out of range in location %r", location)
            return None
        return format_coordinate(lat), format_coordinate(lon)

    return LOCATIONS.get(location.strip().upper())
