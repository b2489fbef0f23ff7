"""Typed models for normalized weather observations and forecasts."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

# UV index is not fetched yet; 0.0 marks "not fetched", not a real reading.
UV_INDEX_NOT_FETCHED = 0.0


def _as_utc(value: datetime) -> datetime:
    return value.astimezone(UTC) if value.tzinfo else value.replace(tzinfo=UTC)


class WeatherSnapshot(BaseModel):
    """Current observed conditions at a location."""

    model_config = ConfigDict(allow_inf_nan=False)

    temperature: float
    feels_like: float
    pressure: float = Field(gt=0)
    humidity: int = Field(ge=0, le=100)
    condition: str
    description: str
    wind_speed: float = Field(ge=0)
    cloudiness: int = Field(ge=0, le=100)
    visibility: float = Field(ge=0)
    uv_index: float = UV_INDEX_NOT_FETCHED
    city: str
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def timestamp_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


class ForecastPoint(BaseModel):
    """Single forecast entry reduced to the fields used for risk analysis.

    ``pressure`` is None when the provider gave no usable reading.
    """

    model_config = ConfigDict(allow_inf_nan=False)

    timestamp: datetime
    temperature: float | None = None
    pressure: float | None = Field(default=None, gt=0)
    humidity: int | None = None
    condition: str | None = None
    description: str | None = None

    @field_validator("timestamp")
    @classmethod
    def timestamp_utc(cls, value: datetime) -> datetime:
        """Naive timestamps are taken as UTC so mixed inputs stay sortable."""
        return _as_utc(value)
