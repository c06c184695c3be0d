"""Weather data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import NamedTuple


@dataclass
class LevelSample:
    """One pressure-level sample at one forecast time step.

    Attributes:
        hpa: pressure level in hPa
        geopotential_ft: raw geopotential height converted to feet
        msl_ft: geometric height above mean sea level in feet
        cloud_coverage: cloud cover in percent
        temperature: air temperature in Celsius
        wind_speed: wind speed in km/h
        wind_direction: wind direction in degrees
        dew_point: dew point in Celsius (None when not fetched or invalid)
        msl_ft_bottom: lower edge of the vertical span this sample represents
        msl_ft_top: upper edge of the vertical span this sample represents
    """

    hpa: float
    geopotential_ft: float
    msl_ft: float
    cloud_coverage: float
    temperature: float | None
    wind_speed: float
    wind_direction: float
    dew_point: float | None = None
    msl_ft_bottom: float = 0.0
    msl_ft_top: float = 0.0

    @property
    def dew_point_depression(self) -> float | None:
        """Temperature minus dew point, clamped at 0 (supersaturation = saturated)."""
        if self.temperature is None or self.dew_point is None:
            return None
        return max(0.0, self.temperature - self.dew_point)


@dataclass
class Profile:
    """Vertical sounding for one forecast time step.

    Samples are sorted ascending by MSL height.
    """

    date: datetime
    samples: list[LevelSample] = field(default_factory=list)
    ground_temp: float | None = None

    @property
    def timestamp_ms(self) -> int:
        return int(self.date.timestamp() * 1000)

    def valid_altitude_range(self) -> tuple[float, float] | None:
        """(min, max) MSL height of samples with a temperature, or None."""
        heights = [s.msl_ft for s in self.samples if s.temperature is not None]
        if not heights:
            return None
        return min(heights), max(heights)


class DomainPoint(NamedTuple):
    """A contour point in (time step, altitude) coordinates."""

    time_index: int
    altitude_ft: float


@dataclass
class Isoline:
    """One clipped polyline of equal value."""

    threshold_value: float
    points: list[DomainPoint] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "thresholdValue": self.threshold_value,
            "points": [
                {"timeIndex": p.time_index, "altitudeFt": p.altitude_ft}
                for p in self.points
            ],
        }


@dataclass
class IsolineSet:
    """All derived overlay lines for one forecast series."""

    freezing_level: list[Isoline] = field(default_factory=list)
    isotherms: list[Isoline] = field(default_factory=list)
    isotachs: list[Isoline] = field(default_factory=list)
    dew_point_depression: list[Isoline] = field(default_factory=list)

    def families(self) -> dict[str, list[Isoline]]:
        return {
            "freezing_level": self.freezing_level,
            "isotherms": self.isotherms,
            "isotachs": self.isotachs,
            "dew_point_depression": self.dew_point_depression,
        }


@dataclass
class Meteogram:
    """Transformed forecast plus derived isolines for a location.

    Attributes:
        model: Open-Meteo model name
        location: location key as requested
        lat: latitude of forecast point
        lon: longitude of forecast point
        elevation_ft: ground elevation in feet (None if lookup failed)
        series: one Profile per forecast time step
        isolines: derived overlay lines
        freezing_levels: per time step, heights (ft) where temperature crosses 0C
    """

    model: str
    location: str
    lat: float
    lon: float
    series: list[Profile]
    isolines: IsolineSet
    elevation_ft: float | None = None
    freezing_levels: list[list[float]] = field(default_factory=list)

    @property
    def n_times(self) -> int:
        return len(self.series)
