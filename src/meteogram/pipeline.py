"""Top-level pipeline orchestrator.

Wires together: location lookup → forecast fetch → profile transform →
isoline extraction. The forecast, dew point and elevation requests run
concurrently; everything after the fetch is synchronous.
"""

from __future__ import annotations

import asyncio
import logging

import httpx
from rich.console import Console

from meteogram.analysis.freezing import freezing_levels_by_time
from meteogram.analysis.isolines import find_all_isolines
from meteogram.common.types import LatLon
from meteogram.config import get_settings
from meteogram.weather.geocoding import Geocoder
from meteogram.weather.locations import parse_location
from meteogram.weather.model_configs import get_model_config
from meteogram.weather.models import Meteogram
from meteogram.weather.openmeteo import (
    OpenMeteoResponse,
    fetch_dew_points,
    fetch_elevation,
    fetch_forecast,
)
from meteogram.weather.transform import transform_weather_data

logger = logging.getLogger(__name__)
console = Console(stderr=True)


async def resolve_location(location: str, geocoder: Geocoder | None = None) -> LatLon:
    """Predefined key, ``Name@lat,lon``, or a free-text place name."""
    coords = parse_location(location)
    if coords is not None:
        return coords

    geocoder = geocoder or Geocoder()
    coords = await geocoder.geocode(location)
    if coords is None:
        raise ValueError(f"Could not resolve location: {location!r}")
    return coords


async def _fetch_dew_points_or_none(lat: float, lon: float, model: str) -> OpenMeteoResponse | None:
    try:
        return await fetch_dew_points(lat, lon, model)
    except httpx.HTTPStatusError as exc:
        logger.warning("Dew point fetch HTTP %d for %s (%.2f, %.2f)", exc.response.status_code, model, lat, lon)
    except httpx.HTTPError as exc:
        logger.warning("Dew point fetch failed for %s (%.2f, %.2f): %s", model, lat, lon, exc)
    except ValueError as exc:
        logger.warning("Dew point response unusable for %s: %s", model, exc)
    return None


async def build_meteogram(
    model: str | None = None,
    location: str | None = None,
    geocoder: Geocoder | None = None,
) -> Meteogram:
    """Fetch and transform a forecast, then derive every isoline family.

    Raises:
        ValueError: unknown model or unresolvable location
        httpx.HTTPError: the main forecast request failed after retries
    """
    settings = get_settings()
    model = model or settings.default_model
    location = location or settings.default_location
    config = get_model_config(model)

    lat, lon = await resolve_location(location, geocoder)
    console.print(f"[bold]Fetching {model} forecast for {location} ({lat:.2f}, {lon:.2f})...[/bold]")

    response, dew_response, elevation_ft = await asyncio.gather(
        fetch_forecast(lat, lon, model),
        _fetch_dew_points_or_none(lat, lon, model),
        fetch_elevation(lat, lon),
    )

    series = transform_weather_data(response, config, dew_point_response=dew_response)
    empty_steps = sum(1 for profile in series if not profile.samples)
    if empty_steps:
        logger.info("%d of %d time step(s) have no valid samples", empty_steps, len(series))
    console.print(f"  {len(series)} time step(s), {len(config.hpa_levels)} pressure level(s)")

    isolines = find_all_isolines(
        series,
        temp_step=settings.isotherm_step,
        speed_step=settings.isotach_step,
        depression_thresholds=settings.dew_point_depression_thresholds,
        resolution=settings.grid_resolution,
        padding=settings.altitude_padding,
    )
    counts = ", ".join(f"{name}={len(lines)}" for name, lines in isolines.families().items())
    console.print(f"  Isolines: {counts}")

    return Meteogram(
        model=model,
        location=location,
        lat=lat,
        lon=lon,
        series=series,
        isolines=isolines,
        elevation_ft=elevation_ft,
        freezing_levels=freezing_levels_by_time(series),
    )
