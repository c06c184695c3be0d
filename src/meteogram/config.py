"""Application configuration via pydantic-settings."""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Open-Meteo forecast endpoint
    openmeteo_api_url: str = "https://api.open-meteo.com/v1"

    # Open-Meteo elevation endpoint (same host, separate path)
    openmeteo_elevation_url: str = "https://api.open-meteo.com/v1"

    # HTTP request timeout seconds
    http_timeout: float = 30.0

    # Attempts per request on timeouts and 429/5xx
    http_max_attempts: int = 3

    # Open-Meteo rejects requests with too many variables; split above this
    max_variables_per_request: int = 80

    # Vertical rows of the dense altitude x time field
    grid_resolution: int = 100

    # Fraction of the observed altitude span added above and below the field
    altitude_padding: float = 0.1

    # Isoline spacing
    isotherm_step: float = 5.0
    isotach_step: float = 10.0
    dew_point_depression_thresholds: list[float] = [3.0, 5.0, 10.0]

    default_model: str = "gfs_seamless"
    default_location: str = "KCDW"

    # Nominatim requires an identifying user agent
    nominatim_user_agent: str = "meteogram"

    # Max entries kept by the geocoder's LRU cache
    geocode_cache_size: int = 256

    @field_validator("grid_resolution")
    @classmethod
    def _grid_resolution_min(cls, v: int) -> int:
        if v < 2:
            raise ValueError(f"grid_resolution must be >= 2, got {v}")
        return v

    @field_validator("altitude_padding")
    @classmethod
    def _altitude_padding_in_range(cls, v: float) -> float:
        if not 0.0 <= v < 1.0:
            raise ValueError(f"altitude_padding must be in [0, 1), got {v}")
        return v

    @field_validator("isotherm_step", "isotach_step")
    @classmethod
    def _step_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"isoline step must be > 0, got {v}")
        return v

    @field_validator("http_max_attempts")
    @classmethod
    def _attempts_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"http_max_attempts must be >= 1, got {v}")
        return v

    @field_validator("max_variables_per_request")
    @classmethod
    def _chunk_size_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_variables_per_request must be >= 1, got {v}")
        return v


def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
