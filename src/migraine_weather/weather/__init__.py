"""Weather provider integration and forecast normalization."""

from .base import WeatherProvider
from .models import UV_INDEX_NOT_FETCHED, ForecastPoint, WeatherSnapshot
from .normalizer import ForecastNormalizer
from .openweather import FORECAST_ENTRY_COUNT, OpenWeatherClient

__all__ = [
    "FORECAST_ENTRY_COUNT",
    "ForecastNormalizer",
    "ForecastPoint",
    "OpenWeatherClient",
    "UV_INDEX_NOT_FETCHED",
    "WeatherProvider",
    "WeatherSnapshot",
]
