"""Location name to lat/lon geocoding using geopy Nominatim."""

from __future__ import annotations

import logging
import re
from collections import OrderedDict

from geopy.adapters import AioHTTPAdapter
from geopy.exc import GeocoderTimedOut, GeocoderServiceError, GeocoderUnavailable
from geopy.geocoders import Nominatim

from meteogram.common.types import LatLon
from meteogram.config import get_settings
from meteogram.weather.locations import format_coordinate

logger = logging.getLogger(__name__)

# US ICAO airport identifiers (e.g. KCDW) geocode better as "<code> airport"
_ICAO_RE = re.compile(r"^K[A-Z]{3}$")


class Geocoder:
    """Nominatim geocoder with a bounded LRU cache.

    The cache lives on the instance; callers own its lifetime.
    """

    def __init__(self, max_cache_size: int | None = None, user_agent: str | None = None) -> None:
        settings = get_settings()
        self._max_cache_size = max_cache_size or settings.geocode_cache_size
        self._user_agent = user_agent or settings.nominatim_user_agent
        self._cache: OrderedDict[str, LatLon | None] = OrderedDict()

    def __len__(self) -> int:
        return len(self._cache)

    def cached(self, location: str) -> bool:
        return location.strip().lower() in self._cache

    def _cache_put(self, key: str, value: LatLon | None) -> None:
        """Insert into bounded cache, evicting oldest if full."""
        self._cache[key] = value
        self._cache.move_to_end(key)
        if len(self._cache) > self._max_cache_size:
            self._cache.popitem(last=False)

    async def geocode(self, location: str) -> LatLon | None:
        """Convert a location name to (lat, lon).

        Returns None if the location cannot be resolved. Failures are
        cached as None as well.
        """
        normalized = location.strip().lower()

        if normalized in self._cache:
            self._cache.move_to_end(normalized)
            return self._cache[normalized]

        query = location.strip()
        if _ICAO_RE.match(query):
            query = f"{query} airport"

        try:
            async with Nominatim(
                user_agent=self._user_agent,
                adapter_factory=AioHTTPAdapter,
            ) as geolocator:
                result = await geolocator.geocode(query)
                if result is None:
                    logger.debug("Geocoding returned no results for %r", location)
                    self._cache_put(normalized, None)
                    return None
                latlon: LatLon = (
                    format_coordinate(result.latitude),
                    format_coordinate(result.longitude),
                )
                self._cache_put(normalized, latlon)
                return latlon
        except (GeocoderTimedOut, GeocoderServiceError, GeocoderUnavailable) as exc:
            logger.warning("Geocoding service error for %r: %s", location, exc)
            self._cache_put(normalized, None)
            return None
        except (ValueError, TypeError) as exc:
            logger.warning("Geocoding parse error for %r: %s", location, exc)
            self._cache_put(normalized, None)
            return None
