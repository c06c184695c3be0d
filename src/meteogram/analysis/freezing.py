"""Per-profile freezing-level heights."""

from __future__ import annotations

from meteogram.common.types import FEET_PER_METER
from meteogram.weather.models import Profile

# Ground temperature is reported at 2 m above ground
GROUND_TEMP_HEIGHT_FT = 2 * FEET_PER_METER


def _crossing(h1: float, t1: float, h2: float, t2: float) -> float:
    return h1 + ((0.0 - t1) * (h2 - h1)) / (t2 - t1)


def find_freezing_levels(profile: Profile) -> list[float]:
    """Heights (ft MSL) where temperature falls through 0C going upward.

    A frozen surface contributes a level at 0. Otherwise, if the lowest
    sample is already at or below freezing, the crossing between the 2 m
    ground temperature and that sample is included. Sorted ascending.
    """
    samples = [s for s in profile.samples if s.temperature is not None]
    if not samples:
        return []
    samples.sort(key=lambda s: s.msl_ft)

    levels: list[float] = []
    ground = profile.ground_temp
    if ground is not None and ground <= 0:
        levels.append(0.0)
    elif ground is not None and samples[0].temperature <= 0:
        levels.append(_crossing(GROUND_TEMP_HEIGHT_FT, ground, samples[0].msl_ft, samples[0].temperature))

    for lower, upper in zip(samples, samples[1:]):
        if lower.temperature > 0 and upper.temperature <= 0:
            levels.append(_crossing(lower.msl_ft, lower.temperature, upper.msl_ft, upper.temperature))

    return sorted(levels)


def freezing_levels_by_time(series: list[Profile]) -> list[list[float]]:
    return [find_freezing_levels(profile) for profile in series]
