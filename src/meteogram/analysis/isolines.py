"""Isoline families: freezing level, isotherms, isotachs, dew-point depression.

Each family builds a dense field from the forecast series, contours it at
family-specific thresholds and clips the result to the profiles' valid
altitude ranges. A failure inside one family is logged and yields an empty
list; it never affects the other families.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence

import numpy as np

from meteogram.analysis.contours import extract_contours
from meteogram.analysis.coords import map_contours
from meteogram.analysis.grid import (
    DEFAULT_PADDING,
    DEFAULT_RESOLUTION,
    build_field,
    dew_point_depression_of,
    ground_temperature_of,
    temperature_of,
    wind_speed_of,
)
from meteogram.common.types import KNOTS_PER_KMH
from meteogram.weather.models import Isoline, IsolineSet, Profile

logger = logging.getLogger(__name__)

DEFAULT_TEMP_STEP = 5.0
DEFAULT_SPEED_STEP_KT = 10.0
DEFAULT_DEPRESSION_THRESHOLDS: tuple[float, ...] = (3.0, 5.0, 10.0)

FREEZING_TEMP_C = 0.0

# Exceptions a malformed field can raise inside grid/contour code
_EXTRACTION_ERRORS = (ValueError, IndexError, TypeError, FloatingPointError)


def _guarded(family: str, compute: Callable[[], list[Isoline]]) -> list[Isoline]:
    try:
        return compute()
    except _EXTRACTION_ERRORS as exc:
        logger.warning("%s extraction failed, returning no lines: %s", family, exc)
        return []


def step_thresholds(lo: float, hi: float, step: float) -> list[float]:
    """Every multiple of ``step`` from floor(lo/step)*step to ceil(hi/step)*step."""
    if step <= 0:
        raise ValueError(f"step must be > 0, got {step}")
    first = math.floor(lo / step)
    last = math.ceil(hi / step)
    return [k * step for k in range(first, last + 1)]


def _sample_range(series: Sequence[Profile], value_of: Callable) -> tuple[float, float] | None:
    values = [
        v for profile in series for s in profile.samples
        if (v := value_of(s)) is not None and math.isfinite(v)
    ]
    if not values:
        return None
    return min(values), max(values)


def find_freezing_level_points(
    series: Sequence[Profile] | None,
    resolution: int = DEFAULT_RESOLUTION,
    padding: float = DEFAULT_PADDING,
) -> list[Isoline]:
    """0C lines, reaching down to mean sea level via the ground temperature."""
    if not series:
        return []

    def _compute() -> list[Isoline]:
        field = build_field(
            list(series), resolution, temperature_of, ground_temperature_of, padding,
        )
        if field.is_empty:
            return []
        thresholds = [FREEZING_TEMP_C]
        contours = extract_contours(field.values, thresholds)
        return map_contours(
            contours, thresholds, field, series,
            clip_to_profile_min=False, ground_altitude=0.0,
        )

    return _guarded("Freezing level", _compute)


def find_isotherm_points(
    series: Sequence[Profile] | None,
    temp_step: float = DEFAULT_TEMP_STEP,
    resolution: int = DEFAULT_RESOLUTION,
    padding: float = DEFAULT_PADDING,
) -> list[Isoline]:
    """Lines of equal temperature every ``temp_step`` degrees C."""
    if not series:
        return []

    def _compute() -> list[Isoline]:
        observed = _sample_range(series, temperature_of)
        if observed is None:
            return []
        field = build_field(list(series), resolution, temperature_of, None, padding)
        if field.is_empty:
            return []
        thresholds = step_thresholds(observed[0], observed[1], temp_step)
        contours = extract_contours(field.values, thresholds)
        return map_contours(contours, thresholds, field, series, clip_to_profile_min=True)

    return _guarded("Isotherm", _compute)


def find_isotach_points(
    series: Sequence[Profile] | None,
    speed_step: float = DEFAULT_SPEED_STEP_KT,
    resolution: int = DEFAULT_RESOLUTION,
    padding: float = DEFAULT_PADDING,
) -> list[Isoline]:
    """Lines of equal wind speed every ``speed_step`` knots (0 excluded)."""
    if not series:
        return []

    def _compute() -> list[Isoline]:
        observed = _sample_range(series, wind_speed_of)
        if observed is None:
            return []
        field = build_field(list(series), resolution, wind_speed_of, None, padding)
        if field.is_empty:
            return []
        field = field.map_values(lambda v: v * KNOTS_PER_KMH)
        lo_kt, hi_kt = observed[0] * KNOTS_PER_KMH, observed[1] * KNOTS_PER_KMH
        thresholds = [t for t in step_thresholds(lo_kt, hi_kt, speed_step) if t > 0]
        if not thresholds:
            return []
        contours = extract_contours(field.values, thresholds)
        return map_contours(contours, thresholds, field, series, clip_to_profile_min=True)

    return _guarded("Isotach", _compute)


def find_dew_point_depression_points(
    series: Sequence[Profile] | None,
    thresholds: Sequence[float] = DEFAULT_DEPRESSION_THRESHOLDS,
    resolution: int = DEFAULT_RESOLUTION,
    padding: float = DEFAULT_PADDING,
) -> list[Isoline]:
    """Lines of equal temperature/dew-point spread (clamped at 0)."""
    if not series:
        return []

    def _compute() -> list[Isoline]:
        levels = [float(t) for t in thresholds]
        if not levels:
            return []
        field = build_field(list(series), resolution, dew_point_depression_of, None, padding)
        if field.is_empty or not np.isfinite(field.values).any():
            return []
        contours = extract_contours(field.values, levels)
        return map_contours(contours, levels, field, series, clip_to_profile_min=True)

    return _guarded("Dew point depression", _compute)


def find_all_isolines(
    series: Sequence[Profile] | None,
    temp_step: float = DEFAULT_TEMP_STEP,
    speed_step: float = DEFAULT_SPEED_STEP_KT,
    depression_thresholds: Sequence[float] = DEFAULT_DEPRESSION_THRESHOLDS,
    resolution: int = DEFAULT_RESOLUTION,
    padding: float = DEFAULT_PADDING,
) -> IsolineSet:
    """All four families for one series."""
    return IsolineSet(
        freezing_level=find_freezing_level_points(series, resolution, padding),
        isotherms=find_isotherm_points(series, temp_step, resolution, padding),
        isotachs=find_isotach_points(series, speed_step, resolution, padding),
        dew_point_depression=find_dew_point_depression_points(
            series, depression_thresholds, resolution, padding,
        ),
    )
