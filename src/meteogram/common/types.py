"""Shared type aliases and unit conversions."""

from __future__ import annotations

from typing import TypeAlias

# Latitude/longitude pair
LatLon: TypeAlias = tuple[float, float]

# JSON-like dict
JsonDict: TypeAlias = dict[str, object]

FEET_PER_METER = 3.28084
KNOTS_PER_KMH = 0.539957
INHG_PER_HPA = 0.02953

# Mean Earth radius used for geopotential -> geometric height
EARTH_RADIUS_METERS = 6371000.0


def meters_to_feet(m: float) -> float:
    """Convert meters to feet."""
    return m * FEET_PER_METER


def kmh_to_knots(kmh: float) -> float:
    """Convert km/h to knots."""
    return kmh * KNOTS_PER_KMH


def hpa_to_inhg(hpa: float) -> float:
    """Convert hectopascals to inches of mercury."""
    return hpa * INHG_PER_HPA


def geopotential_to_msl(geopotential_meters: float) -> float:
    """Geometric height above mean sea level (m) from geopotential height (m)."""
    return (EARTH_RADIUS_METERS * geopotential_meters) / (
        EARTH_RADIUS_METERS - geopotential_meters
    )
