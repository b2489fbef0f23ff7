"""Typed settings loader for the migraine weather core."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError


class Settings(BaseSettings):
    """Application settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Not validated: an empty key is sent as-is and rejected by the provider.
    openweather_api_key: str = Field(default="", alias="OPENWEATHER_API_KEY", repr=False)
    openweather_base_url: str = Field(
        default="https://api.openweathermap.org/data/2.5",
        alias="OPENWEATHER_BASE_URL",
    )
    weather_timeout_seconds: float = Field(default=10.0, alias="WEATHER_TIMEOUT_SECONDS")
    weather_default_lat: float | None = Field(default=None, alias="WEATHER_DEFAULT_LAT")
    weather_default_lon: float | None = Field(default=None, alias="WEATHER_DEFAULT_LON")

    pressure_drop_medium_hpa: float = Field(default=5.0, alias="PRESSURE_DROP_MEDIUM_HPA")
    pressure_drop_high_hpa: float = Field(default=10.0, alias="PRESSURE_DROP_HIGH_HPA")
    low_pressure_threshold_hpa: float = Field(default=1010.0, alias="LOW_PRESSURE_THRESHOLD_HPA")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )

    @field_validator("weather_default_lat", "weather_default_lon", mode="before")
    @classmethod
    def empty_string_to_none(cls, value: Any) -> Any:
        """Treat empty env-string values as unset optional coordinates."""
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def validate_ranges(self) -> Settings:
        """Validate numeric ranges and paired coordinate defaults."""
        self.openweather_base_url = self.openweather_base_url.rstrip("/")
        if not self.openweather_base_url.startswith(("http://", "https://")):
            raise ValueError("OPENWEATHER_BASE_URL must be an http(s) URL.")
        if self.weather_timeout_seconds <= 0:
            raise ValueError("WEATHER_TIMEOUT_SECONDS must be > 0.")

        has_default_lat = self.weather_default_lat is not None
        has_default_lon = self.weather_default_lon is not None
        if has_default_lat != has_default_lon:
            raise ValueError("WEATHER_DEFAULT_LAT and WEATHER_DEFAULT_LON must be set together.")
        if has_default_lat and not (-90 <= self.weather_default_lat <= 90):
            raise ValueError("WEATHER_DEFAULT_LAT must be between -90 and 90.")
        if has_default_lon and not (-180 <= self.weather_default_lon <= 180):
            raise ValueError("WEATHER_DEFAULT_LON must be between -180 and 180.")

        if self.pressure_drop_medium_hpa <= 0:
            raise ValueError("PRESSURE_DROP_MEDIUM_HPA must be > 0.")
        if self.pressure_drop_high_hpa < self.pressure_drop_medium_hpa:
            raise ValueError("PRESSURE_DROP_HIGH_HPA cannot be below PRESSURE_DROP_MEDIUM_HPA.")
        if self.low_pressure_threshold_hpa <= 0:
            raise ValueError("LOW_PRESSURE_THRESHOLD_HPA must be > 0.")
        return self

    def safe_summary(self) -> dict[str, Any]:
        """Return config summary safe for logging (no credentials)."""
        return {
            "base_url": self.openweather_base_url,
            "api_key_configured": bool(self.openweather_api_key),
            "weather_timeout_seconds": self.weather_timeout_seconds,
            "default_coords_configured": self.weather_default_lat is not None,
            "pressure_drop_medium_hpa": self.pressure_drop_medium_hpa,
            "pressure_drop_high_hpa": self.pressure_drop_high_hpa,
            "low_pressure_threshold_hpa": self.low_pressure_threshold_hpa,
            "log_level": self.log_level,
        }


def load_settings() -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc
