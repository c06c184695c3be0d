"""Grid-space contour points -> (time step, altitude), clipped per profile."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from meteogram.analysis.contours import GridPoint, GridPolyline
from meteogram.analysis.grid import DenseField
from meteogram.weather.models import DomainPoint, Isoline, Profile

logger = logging.getLogger(__name__)

# Raw contours with fewer points than this are treated as noise
MIN_RAW_POINTS = 3

# Clipped segments shorter than this are dropped
MIN_SEGMENT_POINTS = 2


def to_domain(
    point: GridPoint,
    series: Sequence[Profile],
    min_alt: float,
    max_alt: float,
    resolution: int,
) -> DomainPoint:
    """Map a ``(col, row)`` grid point to a time index and altitude in feet."""
    col, row = point
    last = max(len(series) - 1, 0)
    # Half-steps round up, so 0.5 maps to 1 and 2.5 to 3
    time_index = int(math.floor(min(max(col, 0.0), float(last)) + 0.5))
    altitude_ft = min_alt + (row / (resolution - 1)) * (max_alt - min_alt)
    return DomainPoint(time_index, altitude_ft)


def clip(
    points: Sequence[DomainPoint],
    series: Sequence[Profile],
    clip_to_profile_min: bool,
    ground_altitude: float | None = None,
) -> list[list[DomainPoint]]:
    """Split a polyline into segments lying inside each profile's valid range.

    A segment is broken where a profile has no valid samples, where the
    time index leaves the series, or where consecutive points jump more
    than one time step. Altitudes are clamped to the profile's valid range;
    with ``clip_to_profile_min`` False the lower clamp is ``ground_altitude``
    instead of the lowest valid sample.
    """
    segments: list[list[DomainPoint]] = []
    current: list[DomainPoint] = []
    ranges: dict[int, tuple[float, float] | None] = {}

    def _flush() -> None:
        nonlocal current
        if len(current) >= MIN_SEGMENT_POINTS:
            segments.append(current)
        current = []

    for point in points:
        t = point.time_index
        if not 0 <= t < len(series):
            _flush()
            continue

        if t not in ranges:
            ranges[t] = series[t].valid_altitude_range()
        valid = ranges[t]
        if valid is None:
            _flush()
            continue

        valid_min, valid_max = valid
        if clip_to_profile_min or ground_altitude is None:
            lower = valid_min
        else:
            lower = ground_altitude
        altitude = min(max(point.altitude_ft, lower), valid_max)

        if current and abs(t - current[-1].time_index) > 1:
            _flush()
        current.append(DomainPoint(t, altitude))

    _flush()
    return segments


def map_contours(
    contours: Sequence[Sequence[GridPolyline]],
    thresholds: Sequence[float],
    field: DenseField,
    series: Sequence[Profile],
    clip_to_profile_min: bool,
    ground_altitude: float | None = None,
) -> list[Isoline]:
    """Convert per-threshold grid polylines into clipped domain isolines."""
    isolines: list[Isoline] = []
    for threshold, polylines in zip(thresholds, contours):
        for polyline in polylines:
            if len(polyline) < MIN_RAW_POINTS:
                continue
            domain = [
                to_domain(p, series, field.min_alt, field.max_alt, field.resolution)
                for p in polyline
            ]
            for segment in clip(domain, series, clip_to_profile_min, ground_altitude):
                isolines.append(Isoline(threshold_value=threshold, points=segment))
    return isolines
