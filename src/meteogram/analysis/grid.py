"""Dense altitude x time fields from irregularly-leveled profiles."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from meteogram.weather.models import LevelSample, Profile

logger = logging.getLogger(__name__)

DEFAULT_RESOLUTION = 100
DEFAULT_PADDING = 0.1

# Padding used when every sample sits at the same height
_FLAT_RANGE_PADDING_FT = 500.0

SampleValue = Callable[[LevelSample], float | None]
ProfileValue = Callable[[Profile], float | None]


@dataclass
class DenseField:
    """Scalar field indexed ``values[altitude_row, time_index]``.

    Row ``i`` sits at ``min_alt + i / (resolution - 1) * (max_alt - min_alt)``;
    ``min_alt`` and ``max_alt`` already include padding.
    """

    values: NDArray[np.float64]
    min_alt: float
    max_alt: float
    resolution: int

    @property
    def is_empty(self) -> bool:
        return self.values.size == 0

    def map_values(self, fn: Callable[[NDArray[np.float64]], NDArray[np.float64]]) -> DenseField:
        """New field with ``fn`` applied to the values (e.g. a unit conversion)."""
        return DenseField(fn(self.values), self.min_alt, self.max_alt, self.resolution)


def empty_field(resolution: int = DEFAULT_RESOLUTION) -> DenseField:
    return DenseField(np.empty((0, 0)), 0.0, 0.0, resolution)


# --- Value accessors ---


def temperature_of(sample: LevelSample) -> float | None:
    return sample.temperature


def wind_speed_of(sample: LevelSample) -> float | None:
    return sample.wind_speed


def dew_point_depression_of(sample: LevelSample) -> float | None:
    return sample.dew_point_depression


def ground_temperature_of(profile: Profile) -> float | None:
    return profile.ground_temp


def _defined(value: float | None) -> bool:
    return value is not None and math.isfinite(value)


def altitude_range(series: list[Profile]) -> tuple[float, float] | None:
    """Min and max MSL height over every sample in the series."""
    heights = [s.msl_ft for profile in series for s in profile.samples]
    if not heights:
        return None
    return min(heights), max(heights)


def padded_altitude_range(
    series: list[Profile],
    padding: float = DEFAULT_PADDING,
) -> tuple[float, float] | None:
    """Observed altitude range widened by ``padding`` of its span on each side."""
    observed = altitude_range(series)
    if observed is None:
        return None
    lo, hi = observed
    pad = (hi - lo) * padding
    if pad <= 0:
        pad = _FLAT_RANGE_PADDING_FT
    return lo - pad, hi + pad


def _interpolate_column(
    profile: Profile,
    altitudes: NDArray[np.float64],
    value_of: SampleValue,
    ground_value_of: ProfileValue | None,
) -> NDArray[np.float64]:
    heights: list[float] = []
    values: list[float] = []
    for sample in profile.samples:
        value = value_of(sample)
        if _defined(value):
            heights.append(sample.msl_ft)
            values.append(float(value))

    if len(heights) < 2:
        return np.full(altitudes.shape, np.nan)

    xs = np.asarray(heights, dtype=np.float64)
    ys = np.asarray(values, dtype=np.float64)
    order = np.argsort(xs, kind="stable")
    xs, ys = xs[order], ys[order]

    # np.interp holds the end values constant outside [xs[0], xs[-1]]
    column = np.interp(altitudes, xs, ys)

    if ground_value_of is not None and xs[0] > 0:
        ground = ground_value_of(profile)
        if _defined(ground):
            below = altitudes < xs[0]
            ratio = np.clip(altitudes[below] / xs[0], 0.0, 1.0)
            column[below] = ground + (ys[0] - ground) * ratio

    return column


def fill_gaps(values: NDArray[np.float64]) -> NDArray[np.float64]:
    """Fill NaN cells from the nearest defined rows in the same column.

    Linear between a defined row below and above; copies the single side
    when only one exists. All-NaN columns are left untouched.
    """
    filled = values.copy()
    rows = np.arange(values.shape[0])
    for col in range(values.shape[1]):
        column = filled[:, col]
        defined = np.isfinite(column)
        if defined.all() or not defined.any():
            continue
        column[~defined] = np.interp(rows[~defined], rows[defined], column[defined])
    return filled


def build_field(
    series: list[Profile],
    resolution: int = DEFAULT_RESOLUTION,
    value_of: SampleValue = temperature_of,
    ground_value_of: ProfileValue | None = None,
    padding: float = DEFAULT_PADDING,
) -> DenseField:
    """Interpolate a per-sample scalar onto a regular altitude x time grid.

    Args:
        series: profiles with samples sorted ascending by MSL height
        resolution: number of altitude rows
        value_of: scalar to grid; None marks the sample as unusable
        ground_value_of: optional surface value placed at altitude 0 and
            blended up to the lowest sample
        padding: fraction of the observed altitude span added on each side

    Returns:
        DenseField of shape (resolution, len(series)); empty when the
        series is empty or its first profile has no samples.
    """
    if resolution < 2:
        raise ValueError(f"resolution must be >= 2, got {resolution}")
    if not series or not series[0].samples:
        return empty_field(resolution)

    bounds = padded_altitude_range(series, padding)
    if bounds is None:
        return empty_field(resolution)
    min_alt, max_alt = bounds

    altitudes = np.linspace(min_alt, max_alt, resolution)
    values = np.empty((resolution, len(series)), dtype=np.float64)
    for t, profile in enumerate(series):
        values[:, t] = _interpolate_column(profile, altitudes, value_of, ground_value_of)

    invalid_columns = int(np.isnan(values).all(axis=0).sum())
    if invalid_columns:
        logger.debug("%d of %d column(s) have fewer than 2 usable samples", invalid_columns, len(series))

    return DenseField(fill_gaps(values), min_alt, max_alt, resolution)
