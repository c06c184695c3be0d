"""Open-Meteo pressure-level forecast client and response adapter.

The transform reads responses through a small accessor interface
(``utc_offset_seconds()``, ``hourly()``/``minutely15()``, ``variables(i)``,
``values(t)``). ``OpenMeteoResponse`` implements it over the JSON API,
merging chunked requests so variable indices stay global.
"""

from __future__ import annotations

import asyncio
import logging
import math

import httpx

from meteogram.common.http import HttpClient
from meteogram.common.types import JsonDict, meters_to_feet
from meteogram.config import get_settings
from meteogram.weather.model_configs import ModelConfig, get_model_config

logger = logging.getLogger(__name__)

# Response block name for each forecast data key
_JSON_BLOCK = {
    "hourly": "hourly",
    "minutely15": "minutely_15",
}


class VariableSeries:
    """One variable's values over the forecast time axis."""

    def __init__(self, values: list[float]) -> None:
        self._values = values

    def values(self, time_index: int) -> float:
        return self._values[time_index]


class ForecastBlock:
    """Time axis plus variables for one forecast block."""

    def __init__(self, times: list[int], variables: list[VariableSeries], default_interval: int) -> None:
        self._times = times
        self._variables = variables
        if len(times) > 1:
            self._interval = int(times[1] - times[0])
        else:
            self._interval = default_interval

    def time(self) -> int:
        return int(self._times[0]) if self._times else 0

    def time_end(self) -> int:
        """Exclusive end of the time axis."""
        if not self._times:
            return 0
        return int(self._times[-1]) + self._interval

    def interval(self) -> int:
        return self._interval

    def variables(self, index: int) -> VariableSeries:
        return self._variables[index]


def _to_floats(values: list | None, n_times: int) -> list[float]:
    if values is None:
        return [math.nan] * n_times
    return [math.nan if v is None else float(v) for v in values]


class OpenMeteoResponse:
    """Adapter over one or more Open-Meteo JSON payloads sharing a time grid."""

    def __init__(
        self,
        forecast_data_key: str,
        block: ForecastBlock,
        utc_offset_seconds: int = 0,
    ) -> None:
        self._forecast_data_key = forecast_data_key
        self._block = block
        self._utc_offset_seconds = utc_offset_seconds

    @classmethod
    def from_json(
        cls,
        payloads: list[JsonDict],
        variable_names: list[str],
        forecast_data_key: str,
        default_interval: int = 3600,
    ) -> OpenMeteoResponse:
        """Build from chunked payloads.

        ``variable_names`` gives the global variable order; each name is
        looked up in whichever payload carries it. The first payload
        supplies the time grid and UTC offset.
        """
        if not payloads:
            raise ValueError("No Open-Meteo payloads to adapt")

        block_name = _JSON_BLOCK.get(forecast_data_key)
        if block_name is None:
            raise ValueError(f"Unknown forecast data key: {forecast_data_key!r}")

        blocks = []
        for payload in payloads:
            block = payload.get(block_name)
            if block is None:
                raise ValueError(f"Open-Meteo response missing {block_name!r} key")
            blocks.append(block)

        times = list(blocks[0].get("time") or [])
        merged: dict[str, list] = {}
        for block in blocks:
            for key, values in block.items():
                if key != "time":
                    merged[key] = values

        missing = [name for name in variable_names if name not in merged]
        if missing:
            logger.debug("Open-Meteo response lacks %d variable(s), e.g. %s", len(missing), missing[0])

        variables = [VariableSeries(_to_floats(merged.get(name), len(times))) for name in variable_names]
        first = payloads[0]
        return cls(
            forecast_data_key=forecast_data_key,
            block=ForecastBlock(times, variables, default_interval),
            utc_offset_seconds=int(first.get("utc_offset_seconds", 0) or 0),
        )

    def utc_offset_seconds(self) -> int:
        return self._utc_offset_seconds

    def _block_for(self, key: str) -> ForecastBlock:
        if key != self._forecast_data_key:
            raise AttributeError(f"Response has no {key!r} block (carries {self._forecast_data_key!r})")
        return self._block

    def hourly(self) -> ForecastBlock:
        return self._block_for("hourly")

    def minutely15(self) -> ForecastBlock:
        return self._block_for("minutely15")


def _chunks(names: list[str], size: int) -> list[list[str]]:
    return [names[i:i + size] for i in range(0, len(names), size)]


async def _fetch_variables(
    lat: float,
    lon: float,
    model: str,
    config: ModelConfig,
    variable_names: list[str],
) -> OpenMeteoResponse:
    settings = get_settings()
    base_params = {
        "latitude": lat,
        "longitude": lon,
        "models": model,
        "cell_selection": "nearest",
        "timeformat": "unixtime",
        "timezone": "auto",
        config.step_key: config.step_size,
    }

    async with HttpClient(base_url=settings.openmeteo_api_url) as client:
        async def _get(chunk: list[str]) -> JsonDict:
            params = {**base_params, config.vars_key: ",".join(chunk)}
            resp = await client.get("/forecast", params=params)
            return resp.json()

        chunks = _chunks(variable_names, settings.max_variables_per_request)
        logger.debug("Fetching %d variable(s) for %s in %d request(s)", len(variable_names), model, len(chunks))
        payloads = await asyncio.gather(*(_get(chunk) for chunk in chunks))

    return OpenMeteoResponse.from_json(
        list(payloads),
        variable_names,
        config.forecast_data_key,
        default_interval=config.interval_seconds,
    )


async def fetch_forecast(lat: float, lon: float, model: str) -> OpenMeteoResponse:
    """Fetch the main pressure-level forecast for a model.

    Variables follow ``ModelConfig.all_variables()`` order.
    """
    config = get_model_config(model)
    return await _fetch_variables(lat, lon, model, config, config.all_variables())


async def fetch_dew_points(lat: float, lon: float, model: str) -> OpenMeteoResponse:
    """Fetch dew point on the model's pressure levels as a separate response."""
    config = get_model_config(model)
    return await _fetch_variables(lat, lon, model, config, config.dew_point_variables())


async def fetch_elevation(lat: float, lon: float) -> float | None:
    """Ground elevation in feet, or None if the lookup fails."""
    settings = get_settings()
    try:
        async with HttpClient(base_url=settings.openmeteo_elevation_url) as client:
            resp = await client.get("/elevation", params={"latitude": lat, "longitude": lon})
            data = resp.json()
    except (httpx.HTTPStatusError, httpx.TimeoutException, httpx.TransportError) as exc:
        logger.warning("Elevation lookup failed for (%.2f, %.2f): %s", lat, lon, exc)
        return None

    elevations = data.get("elevation") or []
    if not elevations or elevations[0] is None:
        logger.warning("Elevation response empty for (%.2f, %.2f)", lat, lon)
        return None
    return meters_to_feet(float(elevations[0]))
