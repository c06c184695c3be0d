"""Raw pressure-level forecast -> per-time-step vertical profiles."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Protocol

from meteogram.common.types import geopotential_to_msl, meters_to_feet
from meteogram.weather.models import LevelSample, Profile

logger = logging.getLogger(__name__)

# Vertical half-span given to the lowest and highest samples
EDGE_HALF_SPAN_FT = 500.0


class _Variable(Protocol):
    def values(self, time_index: int) -> float: ...


class _ForecastBlock(Protocol):
    def time(self) -> int: ...
    def time_end(self) -> int: ...
    def interval(self) -> int: ...
    def variables(self, index: int) -> _Variable: ...


class VariableLayout(Protocol):
    """Anything naming the pressure levels and forecast block to read."""

    @property
    def hpa_levels(self) -> Sequence[float]: ...

    @property
    def forecast_data_key(self) -> str: ...


def _finite(value: float | None) -> float | None:
    if value is None:
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def _forecast_block(response: object, key: str) -> _ForecastBlock:
    # A missing accessor is an upstream contract violation; let it raise.
    return getattr(response, key)()


def _read_dew_points(
    response: object,
    key: str,
    levels: Sequence[float],
    grid: tuple[int, int, int],
) -> list[dict[float, float]]:
    """Dew point per time step, keyed by pressure level.

    ``grid`` is the forecast's ``(start, end, interval)``. A dew point block
    on any other time grid is ignored with a warning.
    """
    start, end, interval = grid
    n_times = len(range(start, end, interval))
    by_time: list[dict[float, float]] = [{} for _ in range(n_times)]

    block = _forecast_block(response, key)
    dew_grid = (int(block.time()), int(block.time_end()), int(block.interval()))
    if dew_grid != grid:
        logger.warning(
            "Dew point time grid %s differs from forecast %s; ignoring dew points",
            dew_grid, grid,
        )
        return by_time

    for level_index, hpa in enumerate(levels):
        variable = block.variables(level_index)
        for t in range(n_times):
            value = _finite(variable.values(t))
            if value is not None:
                by_time[t][hpa] = value
    return by_time


def assign_bounds(samples: list[LevelSample]) -> list[LevelSample]:
    """Sort samples by MSL height and set their bottom/top bounds in place.

    Each bound is the midpoint to the neighbouring sample, or 500 ft from the
    sample's own height where there is no neighbour on that side.
    """
    samples.sort(key=lambda s: s.msl_ft)
    for i, sample in enumerate(samples):
        prev = samples[i - 1] if i > 0 else None
        nxt = samples[i + 1] if i < len(samples) - 1 else None
        sample.msl_ft_bottom = (
            (prev.msl_ft + sample.msl_ft) / 2 if prev else sample.msl_ft - EDGE_HALF_SPAN_FT
        )
        sample.msl_ft_top = (
            (sample.msl_ft + nxt.msl_ft) / 2 if nxt else sample.msl_ft + EDGE_HALF_SPAN_FT
        )
    return samples


def transform_weather_data(
    response: object,
    layout: VariableLayout,
    dew_point_response: object | None = None,
    dew_point_levels: Sequence[float] | None = None,
) -> list[Profile]:
    """Convert a raw forecast response into one Profile per time step.

    Args:
        response: object exposing ``utc_offset_seconds()`` and a forecast
            block accessor named by ``layout.forecast_data_key``
        layout: pressure levels and forecast block key of the model
        dew_point_response: optional second response carrying dew point,
            one variable per entry of ``dew_point_levels``
        dew_point_levels: levels of the dew point response (defaults to
            ``layout.hpa_levels``)

    Returns:
        Profiles in time order. Time steps without any valid sample keep an
        empty sample list.
    """
    key = layout.forecast_data_key
    levels = list(layout.hpa_levels)
    n_levels = len(levels)

    utc_offset = int(response.utc_offset_seconds())
    block = _forecast_block(response, key)
    start, end, interval = int(block.time()), int(block.time_end()), int(block.interval())
    if interval <= 0:
        raise ValueError(f"Forecast interval must be positive, got {interval}")

    times = list(range(start, end, interval))
    n_times = len(times)

    cloud = [block.variables(i) for i in range(n_levels)]
    geopotential = [block.variables(n_levels + i) for i in range(n_levels)]
    temperature = [block.variables(2 * n_levels + i) for i in range(n_levels)]
    wind_speed = [block.variables(3 * n_levels + i) for i in range(n_levels)]
    wind_direction = [block.variables(4 * n_levels + i) for i in range(n_levels)]
    ground = block.variables(5 * n_levels)

    dew_points: list[dict[float, float]] = [{} for _ in range(n_times)]
    if dew_point_response is not None:
        dew_points = _read_dew_points(
            dew_point_response,
            key,
            list(dew_point_levels) if dew_point_levels is not None else levels,
            (start, end, interval),
        )

    series: list[Profile] = []
    dropped = 0
    for t, epoch in enumerate(times):
        samples: list[LevelSample] = []
        for i, hpa in enumerate(levels):
            values = (
                _finite(cloud[i].values(t)),
                _finite(geopotential[i].values(t)),
                _finite(temperature[i].values(t)),
                _finite(wind_speed[i].values(t)),
                _finite(wind_direction[i].values(t)),
            )
            if any(v is None for v in values):
                dropped += 1
                continue
            cloud_cover, geopotential_m, temp, speed, direction = values

            samples.append(LevelSample(
                hpa=hpa,
                geopotential_ft=meters_to_feet(geopotential_m),
                msl_ft=meters_to_feet(geopotential_to_msl(geopotential_m)),
                cloud_coverage=cloud_cover,
                temperature=temp,
                wind_speed=speed,
                wind_direction=direction,
                dew_point=dew_points[t].get(hpa),
            ))

        series.append(Profile(
            date=datetime.fromtimestamp(epoch + utc_offset, tz=timezone.utc),
            samples=assign_bounds(samples),
            ground_temp=_finite(ground.values(t)),
        ))

    if dropped:
        logger.debug("Dropped %d invalid level sample(s) across %d time step(s)", dropped, n_times)
    return series
