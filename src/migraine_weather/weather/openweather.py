"""OpenWeatherMap current-conditions and 5-day forecast client."""

from __future__ import annotations

import logging
import math
from datetime import UTC, datetime
from typing import Any

import httpx
from pydantic import ValidationError

from ..config import Settings
from ..exceptions import FetchFailure, FetchKind, ProviderRequestError
from ..redaction import sanitize_text
from .base import WeatherProvider
from .models import UV_INDEX_NOT_FETCHED, ForecastPoint, WeatherSnapshot

# 5 days at 3-hour resolution.
FORECAST_ENTRY_COUNT = 40


class OpenWeatherClient(WeatherProvider):
    """Fetches and normalizes OpenWeatherMap data for pressure-risk analysis.

    Each fetch makes exactly one request. Every failure (network, HTTP status,
    unexpected payload) is logged with its cause and surfaced to the caller as
    a ``FetchFailure`` naming only the operation that failed.
    """

    provider_name = "openweather"

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger or logging.getLogger("migraine_weather.weather.openweather")
        self._api_key = settings.openweather_api_key
        self._client = httpx.Client(
            base_url=settings.openweather_base_url,
            timeout=settings.weather_timeout_seconds,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    def __enter__(self) -> OpenWeatherClient:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def fetch_current(self, latitude: float, longitude: float) -> WeatherSnapshot:
        """Fetch current conditions in metric units."""
        kind: FetchKind = "current-weather"
        try:
            self._validate_coordinates(latitude, longitude)
            payload = self._request_json(
                "/weather",
                params=self._base_params(latitude, longitude),
                context="current weather fetch",
            )
            return self._normalize_current(payload)
        except ProviderRequestError as exc:
            self._log_failure(kind, exc)
            raise FetchFailure(kind) from exc

    def fetch_forecast(self, latitude: float, longitude: float) -> list[ForecastPoint]:
        """Fetch the 3-hourly forecast, preserving provider order."""
        kind: FetchKind = "forecast"
        try:
            self._validate_coordinates(latitude, longitude)
            params = self._base_params(latitude, longitude)
            params["cnt"] = FORECAST_ENTRY_COUNT
            payload = self._request_json("/forecast", params=params, context="forecast fetch")
            return self._normalize_forecast(payload)
        except ProviderRequestError as exc:
            self._log_failure(kind, exc)
            raise FetchFailure(kind) from exc

    def _base_params(self, latitude: float, longitude: float) -> dict[str, Any]:
        return {
            "lat": latitude,
            "lon": longitude,
            "appid": self._api_key,
            "units": "metric",
        }

    @staticmethod
    def _validate_coordinates(latitude: float, longitude: float) -> None:
        if not (-90 <= latitude <= 90):
            raise ProviderRequestError(
                f"Invalid latitude {latitude}; expected between -90 and 90.",
                category="invalid_coordinates",
            )
        if not (-180 <= longitude <= 180):
            raise ProviderRequestError(
                f"Invalid longitude {longitude}; expected between -180 and 180.",
                category="invalid_coordinates",
            )

    def _log_failure(self, kind: FetchKind, exc: ProviderRequestError) -> None:
        extra = {
            "fetch_kind": kind,
            "cause_category": exc.category,
            "status_code": exc.status_code,
        }
        if exc.status_code is not None:
            self.logger.warning(
                "OpenWeather %s failed (%s, HTTP %d): %s",
                kind, exc.category, exc.status_code, sanitize_text(str(exc)),
                extra=extra,
            )
        else:
            self.logger.warning(
                "OpenWeather %s failed (%s): %s",
                kind, exc.category, sanitize_text(str(exc)),
                extra=extra,
            )

    def _request_json(self, path: str, params: dict[str, Any], context: str) -> dict[str, Any]:
        try:
            response = self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise ProviderRequestError(
                f"OpenWeather {context} failed with status {status}: "
                f"{sanitize_text(exc.response.text[:300])}",
                category="http_status",
                status_code=status,
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderRequestError(
                f"OpenWeather {context} request failed ({type(exc).__name__}): "
                f"{sanitize_text(str(exc))}",
                category="network",
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderRequestError(
                f"OpenWeather {context} returned non-JSON response.",
                category="malformed",
            ) from exc

        if not isinstance(payload, dict):
            raise ProviderRequestError(
                f"OpenWeather {context} returned unexpected payload type "
                f"{type(payload).__name__}.",
                category="malformed",
            )
        return payload

    def _normalize_current(self, payload: dict[str, Any]) -> WeatherSnapshot:
        main = self._require_dict(payload, "main")
        wind = self._require_dict(payload, "wind")
        clouds = self._require_dict(payload, "clouds")
        weather = self._first_weather(payload)
        if weather is None:
            raise ProviderRequestError(
                "OpenWeather current payload missing 'weather' entries.",
                category="malformed",
            )
        timestamp = self._parse_unix(payload.get("dt"))
        if timestamp is None:
            raise ProviderRequestError(
                "OpenWeather current payload missing or invalid 'dt'.",
                category="malformed",
            )

        try:
            return WeatherSnapshot(
                temperature=main.get("temp"),
                feels_like=main.get("feels_like"),
                pressure=main.get("pressure"),
                humidity=main.get("humidity"),
                condition=weather.get("main"),
                description=weather.get("description"),
                wind_speed=wind.get("speed"),
                cloudiness=clouds.get("all"),
                visibility=payload.get("visibility"),
                uv_index=UV_INDEX_NOT_FETCHED,
                # Open-ocean coordinates come back with an empty name.
                city=payload.get("name") or "",
                timestamp=timestamp,
            )
        except ValidationError as exc:
            raise ProviderRequestError(
                f"OpenWeather current payload failed validation: {exc.error_count()} error(s).",
                category="malformed",
            ) from exc

    def _normalize_forecast(self, payload: dict[str, Any]) -> list[ForecastPoint]:
        raw_items = payload.get("list")
        if not isinstance(raw_items, list):
            raise ProviderRequestError(
                "OpenWeather forecast payload missing 'list' array.",
                category="malformed",
            )
        return [self._normalize_forecast_item(index, item) for index, item in enumerate(raw_items)]

    def _normalize_forecast_item(self, index: int, item: Any) -> ForecastPoint:
        if not isinstance(item, dict):
            raise ProviderRequestError(
                f"OpenWeather forecast entry {index} is not an object.",
                category="malformed",
            )
        timestamp = self._parse_unix(item.get("dt"))
        if timestamp is None:
            raise ProviderRequestError(
                f"OpenWeather forecast entry {index} missing or invalid 'dt'.",
                category="malformed",
            )
        main = item.get("main")
        if not isinstance(main, dict):
            main = {}
        weather = self._first_weather(item) or {}

        # Unusable pressure is kept as None; detection skips those pairs.
        pressure = self._as_float(main.get("pressure"))
        if pressure is not None and pressure <= 0:
            pressure = None
        try:
            return ForecastPoint(
                timestamp=timestamp,
                temperature=self._as_float(main.get("temp")),
                pressure=pressure,
                humidity=self._as_int(main.get("humidity")),
                condition=self._as_str(weather.get("main")),
                description=self._as_str(weather.get("description")),
            )
        except ValidationError as exc:
            raise ProviderRequestError(
                f"OpenWeather forecast entry {index} failed validation: "
                f"{exc.error_count()} error(s).",
                category="malformed",
            ) from exc

    @staticmethod
    def _require_dict(payload: dict[str, Any], key: str) -> dict[str, Any]:
        value = payload.get(key)
        if not isinstance(value, dict):
            raise ProviderRequestError(
                f"OpenWeather payload missing '{key}' object.",
                category="malformed",
            )
        return value

    @staticmethod
    def _first_weather(payload: dict[str, Any]) -> dict[str, Any] | None:
        entries = payload.get("weather")
        if isinstance(entries, list) and entries and isinstance(entries[0], dict):
            return entries[0]
        return None

    @staticmethod
    def _as_str(value: Any) -> str | None:
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    @staticmethod
    def _as_int(value: Any) -> int | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float) and math.isfinite(value):
            return int(value)
        return None

    @staticmethod
    def _as_float(value: Any) -> float | None:
        # The JSON decoder accepts NaN/Infinity literals; treat them as absent.
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)) and math.isfinite(value):
            return float(value)
        return None

    @staticmethod
    def _parse_unix(value: Any) -> datetime | None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        try:
            return datetime.fromtimestamp(int(value), tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
