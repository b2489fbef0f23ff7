"""Typed models for migraine-risk results."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ..weather.models import ForecastPoint, WeatherSnapshot

Severity = Literal["medium", "high"]


class PressureDropWarning(BaseModel):
    """Pressure fall between two adjacent forecast points."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    pressure_drop: int = Field(ge=0)
    severity: Severity
    message: str


class ForecastRiskReport(BaseModel):
    """Outcome of one fetch-normalize-detect run for a location."""

    latitude: float
    longitude: float
    generated_at: datetime
    current: WeatherSnapshot | None = None
    low_pressure: bool | None = None
    forecast: list[ForecastPoint] = Field(default_factory=list)
    warnings: list[PressureDropWarning] = Field(default_factory=list)
