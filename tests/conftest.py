"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from meteogram.analysis.isolines import find_all_isolines
from meteogram.analysis.freezing import freezing_levels_by_time
from meteogram.weather.models import LevelSample, Meteogram, Profile


# --- Fake Open-Meteo response (transform input interface) ---


class FakeVariable:
    def __init__(self, series: list[float]) -> None:
        self.series = series

    def values(self, time_index: int) -> float:
        return self.series[time_index]


class FakeForecast:
    def __init__(self, start: int, steps: int, interval: int, series: list[list[float]]) -> None:
        self.start = start
        self.steps = steps
        self.step_interval = interval
        self.series = series

    def time(self) -> int:
        return self.start

    def time_end(self) -> int:
        return self.start + self.steps * self.step_interval

    def interval(self) -> int:
        return self.step_interval

    def variables(self, index: int) -> FakeVariable:
        return FakeVariable(self.series[index])


class FakeResponse:
    def __init__(self, forecast_key: str, forecast: FakeForecast, utc_offset: int = 0) -> None:
        self.forecast = forecast
        self._utc_offset = utc_offset
        setattr(self, forecast_key, lambda: forecast)

    def utc_offset_seconds(self) -> int:
        return self._utc_offset


def build_fake_response(
    forecast_key: str,
    hpa_levels: list[float],
    steps: int = 1,
    start: int = 0,
    interval: int = 1,
    utc_offset: int = 0,
) -> FakeResponse:
    """Main response in model variable order; values vary with level and time.

    geopotential = 100 + level*100 + t, temperature = 10 - level*2 - t,
    ground temperature = 15 - t.
    """
    n = len(hpa_levels)
    series: list[list[float]] = []
    series += [[40.0 + i * 10 + t for t in range(steps)] for i in range(n)]
    series += [[100.0 + i * 100 + t for t in range(steps)] for i in range(n)]
    series += [[10.0 - i * 2 - t for t in range(steps)] for i in range(n)]
    series += [[20.0 + i * 5 + t for t in range(steps)] for i in range(n)]
    series += [[45.0 + i * 45 for _ in range(steps)] for i in range(n)]
    series.append([15.0 - t for t in range(steps)])
    return FakeResponse(forecast_key, FakeForecast(start, steps, interval, series), utc_offset)


def build_fake_dew_point_response(
    forecast_key: str,
    hpa_levels: list[float],
    steps: int = 1,
    start: int = 0,
    interval: int = 1,
) -> FakeResponse:
    """Dew point = temperature - (3 + level), matching build_fake_response."""
    series = [
        [10.0 - i * 2 - t - (3 + i) for t in range(steps)]
        for i in range(len(hpa_levels))
    ]
    return FakeResponse(forecast_key, FakeForecast(start, steps, interval, series))


@pytest.fixture
def fake_response():
    return build_fake_response


@pytest.fixture
def fake_dew_point_response():
    return build_fake_dew_point_response


# --- Synthetic profiles ---


def make_profile(
    date: datetime,
    cells: list[tuple[float, float | None, float | None]],
    ground_temp: float | None = 15.0,
    wind_speeds: list[float] | None = None,
) -> Profile:
    """Profile from (msl_ft, temperature, dew_point) tuples."""
    samples = [
        LevelSample(
            hpa=850,
            geopotential_ft=msl,
            msl_ft=msl,
            cloud_coverage=50.0,
            temperature=temp,
            dew_point=dew,
            wind_speed=wind_speeds[i] if wind_speeds else 20.0,
            wind_direction=270.0,
            msl_ft_bottom=msl - 500,
            msl_ft_top=msl + 500,
        )
        for i, (msl, temp, dew) in enumerate(cells)
    ]
    return Profile(date=date, samples=samples, ground_temp=ground_temp)


def make_series(
    cells: list[tuple[float, float | None, float | None]],
    steps: int = 10,
    ground_temp: float | None = 15.0,
    wind_speeds: list[float] | None = None,
) -> list[Profile]:
    """``steps`` hourly profiles with identical soundings."""
    start = datetime(2025, 1, 15, 12, tzinfo=timezone.utc)
    return [
        make_profile(start + timedelta(hours=t), list(cells), ground_temp, wind_speeds)
        for t in range(steps)
    ]


@pytest.fixture
def series_factory():
    return make_series


@pytest.fixture
def winter_series():
    """Temperature falling through 0C near 4000 ft, dew-point spread widening aloft."""
    return make_series(
        [
            (2000.0, 5.0, 4.0),
            (6000.0, -5.0, -8.0),
            (10000.0, -15.0, -22.0),
            (14000.0, -25.0, -36.0),
        ],
        steps=12,
        ground_temp=10.0,
        wind_speeds=[20.0, 45.0, 70.0, 100.0],
    )


@pytest.fixture
def sample_meteogram(winter_series):
    return Meteogram(
        model="gfs_seamless",
        location="KCDW",
        lat=40.872665,
        lon=-74.283767,
        series=winter_series,
        isolines=find_all_isolines(winter_series),
        elevation_ft=177.0,
        freezing_levels=freezing_levels_by_time(winter_series),
    )
