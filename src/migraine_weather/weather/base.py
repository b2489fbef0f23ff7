"""Provider-agnostic weather interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .models import ForecastPoint, WeatherSnapshot


class WeatherProvider(ABC):
    """Base contract for weather providers feeding the pressure-risk pipeline."""

    @abstractmethod
    def fetch_current(self, latitude: float, longitude: float) -> WeatherSnapshot:
        """Fetch and normalize current conditions."""

    @abstractmethod
    def fetch_forecast(self, latitude: float, longitude: float) -> list[ForecastPoint]:
        """Fetch and normalize the forecast in provider order."""

    @abstractmethod
    def close(self) -> None:
        """Release provider resources."""
