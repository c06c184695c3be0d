"""Open-Meteo model table and pressure-level variable layout."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ForecastDataKey = Literal["hourly", "minutely15"]

GEM_HPA_LEVELS: list[int] = [
    1015, 1000, 985, 970, 950, 925, 900, 875, 850, 800, 750, 700, 650, 600, 550,
    500, 450, 400, 350, 300, 275, 250,
]

# 1000 hPa down to 275 hPa in 25 hPa steps
DEFAULT_HPA_LEVELS: list[int] = list(range(1000, 250, -25))


@dataclass(frozen=True)
class ModelConfig:
    """Request shape and display strides for one forecast model.

    Attributes:
        vars_key: query parameter carrying the variable list
        step_key: query parameter carrying the forecast length
        step_size: value for ``step_key``
        forecast_data_key: response block holding the time series
        wind_barb_step: time steps between wind barbs
        wind_barb_pressure_level_step: pressure levels between wind barbs
        max_isotherm_step_distance: time steps an isotherm may skip
        hpa_levels: pressure levels requested for every level variable
    """

    vars_key: str
    step_key: str
    step_size: int
    forecast_data_key: ForecastDataKey
    wind_barb_step: int
    wind_barb_pressure_level_step: int
    max_isotherm_step_distance: int
    hpa_levels: tuple[int, ...]

    @property
    def interval_seconds(self) -> int:
        return 900 if self.forecast_data_key == "minutely15" else 3600

    def level_vars(self, name: str) -> list[str]:
        return [f"{name}_{hpa}hPa" for hpa in self.hpa_levels]

    def all_variables(self) -> list[str]:
        """Variables for the main request.

        The order fixes the response indices read by the transform:
        [0, L) cloud cover, [L, 2L) geopotential height, [2L, 3L) temperature,
        [3L, 4L) wind speed, [4L, 5L) wind direction, 5L ground temperature.
        """
        return [
            *self.level_vars("cloud_cover"),
            *self.level_vars("geopotential_height"),
            *self.level_vars("temperature"),
            *self.level_vars("wind_speed"),
            *self.level_vars("wind_direction"),
            "temperature_2m",
        ]

    def dew_point_variables(self) -> list[str]:
        return self.level_vars("dew_point")


def _hourly(levels: list[int], step_size: int = 24 * 7, barb_levels: int = 4,
            step_key: str = "forecast_hourly") -> ModelConfig:
    return ModelConfig(
        vars_key="hourly",
        step_key=step_key,
        step_size=step_size,
        forecast_data_key="hourly",
        wind_barb_step=3,
        wind_barb_pressure_level_step=barb_levels,
        max_isotherm_step_distance=6,
        hpa_levels=tuple(levels),
    )


def _minutely15(hours: int) -> ModelConfig:
    return ModelConfig(
        vars_key="minutely_15",
        step_key="forecast_minutely_15",
        step_size=4 * hours,
        forecast_data_key="minutely15",
        wind_barb_step=4,
        wind_barb_pressure_level_step=4,
        max_isotherm_step_distance=8,
        hpa_levels=tuple(DEFAULT_HPA_LEVELS),
    )


MODEL_CONFIGS: dict[str, ModelConfig] = {
    "best_match": _minutely15(80),
    "gfs_hrrr": _minutely15(40),
    "gfs_seamless": _hourly(DEFAULT_HPA_LEVELS),
    "ecmwf_ifs": _hourly(DEFAULT_HPA_LEVELS, barb_levels=1),
    "ecmwf_aifs025_single": _hourly(DEFAULT_HPA_LEVELS, barb_levels=1),
    "gem_seamless": _hourly(GEM_HPA_LEVELS),
    "gem_hrdps_continental": _hourly(GEM_HPA_LEVELS, step_size=2, step_key="forecast_days"),
}


def get_model_config(model: str) -> ModelConfig:
    """Look up a model config, raising ValueError for unknown models."""
    config = MODEL_CONFIGS.get(model)
    if config is None:
        raise ValueError(
            f"Unknown model: {model!r} (expected one of {', '.join(MODEL_CONFIGS)})"
        )
    return config
