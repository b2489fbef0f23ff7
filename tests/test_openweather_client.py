"""Tests for the OpenWeatherMap client and its failure contract."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from types import SimpleNamespace
from typing import Any

import httpx
import pytest

from migraine_weather.exceptions import FetchFailure, ProviderRequestError
from migraine_weather.weather.models import UV_INDEX_NOT_FETCHED
from migraine_weather.weather.openweather import FORECAST_ENTRY_COUNT, OpenWeatherClient

BASE_URL = "https://api.openweathermap.test/data/2.5"

CURRENT_PAYLOAD: dict[str, Any] = {
    "weather": [{"id": 500, "main": "Rain", "description": "light rain", "icon": "10d"}],
    "main": {
        "temp": 11.4,
        "feels_like": 10.2,
        "temp_min": 10.0,
        "temp_max": 12.8,
        "pressure": 1004,
        "humidity": 87,
    },
    "visibility": 9000,
    "wind": {"speed": 4.6, "deg": 230},
    "clouds": {"all": 90},
    "dt": 1772366400,
    "name": "Dublin",
}

FORECAST_PAYLOAD: dict[str, Any] = {
    "cod": "200",
    "cnt": 3,
    "list": [
        {
            "dt": 1772366400,
            "main": {"temp": 11.0, "pressure": 1012, "humidity": 80},
            "weather": [{"main": "Clouds", "description": "overcast clouds"}],
        },
        {
            "dt": 1772377200,
            "main": {"temp": 10.5, "pressure": 1005, "humidity": 88},
            "weather": [{"main": "Rain", "description": "moderate rain"}],
        },
        {
            "dt": 1772388000,
            "main": {"temp": 9.8, "humidity": 90},
            "weather": [],
        },
    ],
    "city": {"name": "Dublin"},
}


def _make_settings(**overrides: Any) -> Any:
    defaults = {
        "openweather_api_key": "test-key",
        "openweather_base_url": BASE_URL,
        "weather_timeout_seconds": 5.0,
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


def _make_client(
    handler: Any = None, logger: logging.Logger | None = None, **overrides: Any
) -> OpenWeatherClient:
    transport = httpx.MockTransport(handler) if handler is not None else None
    return OpenWeatherClient(
        settings=_make_settings(**overrides),
        logger=logger or logging.getLogger("test_openweather_client"),
        transport=transport,
    )


def test_fetch_current_normalizes_payload() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=CURRENT_PAYLOAD)

    with _make_client(handler) as client:
        snapshot = client.fetch_current(53.35, -6.26)

    assert len(requests) == 1
    request = requests[0]
    assert request.method == "GET"
    assert request.url.path == "/data/2.5/weather"
    assert request.url.params["lat"] == "53.35"
    assert request.url.params["lon"] == "-6.26"
    assert request.url.params["appid"] == "test-key"
    assert request.url.params["units"] == "metric"

    assert snapshot.temperature == 11.4
    assert snapshot.feels_like == 10.2
    assert snapshot.pressure == 1004
    assert snapshot.humidity == 87
    assert snapshot.condition == "Rain"
    assert snapshot.description == "light rain"
    assert snapshot.wind_speed == 4.6
    assert snapshot.cloudiness == 90
    assert snapshot.visibility == 9000
    assert snapshot.uv_index == UV_INDEX_NOT_FETCHED == 0.0
    assert snapshot.city == "Dublin"
    assert snapshot.timestamp == datetime.fromtimestamp(1772366400, tz=UTC)


def test_fetch_forecast_requests_fixed_count_and_keeps_order() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=FORECAST_PAYLOAD)

    with _make_client(handler) as client:
        points = client.fetch_forecast(53.35, -6.26)

    assert len(requests) == 1
    assert requests[0].url.path == "/data/2.5/forecast"
    assert requests[0].url.params["cnt"] == str(FORECAST_ENTRY_COUNT) == "40"
    assert requests[0].url.params["units"] == "metric"

    assert [p.pressure for p in points] == [1012.0, 1005.0, None]
    assert points[0].condition == "Clouds"
    assert points[1].description == "moderate rain"
    assert points[2].condition is None
    assert points[0].timestamp < points[1].timestamp < points[2].timestamp


def test_empty_forecast_list_is_not_a_failure() -> None:
    client = _make_client()
    client._request_json = lambda path, params, context: {"list": []}  # type: ignore[assignment]
    assert client.fetch_forecast(0.0, 0.0) == []


def test_empty_city_name_is_accepted() -> None:
    client = _make_client()
    payload = dict(CURRENT_PAYLOAD, name="")
    client._request_json = lambda path, params, context: payload  # type: ignore[assignment]
    assert client.fetch_current(0.0, -30.0).city == ""


@pytest.mark.parametrize("status", [401, 404, 429, 500, 503])
def test_non_2xx_status_collapses_to_fetch_failure(status: int) -> None:
    client = _make_client(lambda request: httpx.Response(status, json={"cod": status}))

    with pytest.raises(FetchFailure) as current_info:
        client.fetch_current(10.0, 10.0)
    assert current_info.value.kind == "current-weather"
    assert isinstance(current_info.value.__cause__, ProviderRequestError)
    assert current_info.value.__cause__.category == "http_status"
    assert current_info.value.__cause__.status_code == status

    with pytest.raises(FetchFailure) as forecast_info:
        client.fetch_forecast(10.0, 10.0)
    assert forecast_info.value.kind == "forecast"


def test_network_error_collapses_to_fetch_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _make_client(handler)
    with pytest.raises(FetchFailure) as info:
        client.fetch_forecast(10.0, 10.0)
    assert info.value.kind == "forecast"
    assert info.value.__cause__.category == "network"  # type: ignore[union-attr]


def test_each_fetch_makes_exactly_one_attempt() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(503)

    client = _make_client(handler)
    with pytest.raises(FetchFailure):
        client.fetch_current(10.0, 10.0)
    assert calls == ["/data/2.5/weather"]


def test_non_json_body_is_malformed() -> None:
    client = _make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(FetchFailure) as info:
        client.fetch_current(10.0, 10.0)
    assert info.value.__cause__.category == "malformed"  # type: ignore[union-attr]


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {},
        {**CURRENT_PAYLOAD, "main": {"temp": 11.0}},
        {**CURRENT_PAYLOAD, "weather": []},
        {**CURRENT_PAYLOAD, "dt": "yesterday"},
        {**CURRENT_PAYLOAD, "clouds": None},
        {**CURRENT_PAYLOAD, "main": {**CURRENT_PAYLOAD["main"], "humidity": 140}},
    ],
)
def test_malformed_current_payload_raises_fetch_failure(payload: Any) -> None:
    client = _make_client(lambda request: httpx.Response(200, json=payload))
    with pytest.raises(FetchFailure) as info:
        client.fetch_current(10.0, 10.0)
    assert info.value.kind == "current-weather"


@pytest.mark.parametrize(
    "payload",
    [
        {"list": "not-a-list"},
        {"cod": "200"},
        {"list": [None]},
        {"list": [{"main": {"pressure": 1000}}]},
    ],
)
def test_malformed_forecast_payload_raises_fetch_failure(payload: Any) -> None:
    client = _make_client()
    client._request_json = lambda path, params, context: payload  # type: ignore[assignment]
    with pytest.raises(FetchFailure) as info:
        client.fetch_forecast(10.0, 10.0)
    assert info.value.kind == "forecast"


@pytest.mark.parametrize(("lat", "lon"), [(91.0, 0.0), (-90.5, 0.0), (0.0, 180.5), (0.0, -181.0)])
def test_out_of_range_coordinates_fail_without_request(lat: float, lon: float) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=CURRENT_PAYLOAD)

    client = _make_client(handler)
    with pytest.raises(FetchFailure) as info:
        client.fetch_current(lat, lon)
    assert info.value.__cause__.category == "invalid_coordinates"  # type: ignore[union-attr]
    assert calls == []


def test_failure_message_is_opaque_and_cause_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("test_openweather_client.logging")
    client = _make_client(
        lambda request: httpx.Response(401, json={"cod": 401, "message": "Invalid API key"}),
        logger=logger,
        openweather_api_key="",
    )

    with caplog.at_level(logging.WARNING, logger=logger.name):
        with pytest.raises(FetchFailure) as info:
            client.fetch_current(10.0, 10.0)

    assert str(info.value) == "Failed to fetch current weather data."
    assert "401" not in str(info.value)
    assert any("http_status" in record.getMessage() for record in caplog.records)


def test_non_finite_forecast_values_are_treated_as_missing() -> None:
    body = (
        b'{"list": ['
        b'{"dt": 1772366400, "main": {"temp": NaN, "pressure": 1010, "humidity": NaN}},'
        b'{"dt": 1772377200, "main": {"temp": 9.0, "pressure": Infinity, "humidity": Infinity}},'
        b'{"dt": 1772388000, "main": {"temp": 8.5, "pressure": -5, "humidity": 91}}'
        b"]}"
    )
    client = _make_client(
        lambda request: httpx.Response(
            200, content=body, headers={"Content-Type": "application/json"}
        )
    )

    points = client.fetch_forecast(10.0, 10.0)

    assert [p.pressure for p in points] == [1010.0, None, None]
    assert [p.humidity for p in points] == [None, None, 91]
    assert points[0].temperature is None


def test_nan_in_current_payload_is_malformed() -> None:
    body = (
        b'{"weather": [{"main": "Rain", "description": "light rain"}],'
        b'"main": {"temp": NaN, "feels_like": 10.0, "pressure": 1004, "humidity": 87},'
        b'"visibility": 9000, "wind": {"speed": 4.6}, "clouds": {"all": 90},'
        b'"dt": 1772366400, "name": "Dublin"}'
    )
    client = _make_client(lambda request: httpx.Response(200, content=body))

    with pytest.raises(FetchFailure) as info:
        client.fetch_current(10.0, 10.0)
    assert info.value.__cause__.category == "malformed"  # type: ignore[union-attr]


def test_failure_log_record_carries_structured_cause(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("test_openweather_client.extra")
    client = _make_client(lambda request: httpx.Response(503), logger=logger)

    with caplog.at_level(logging.WARNING, logger=logger.name):
        with pytest.raises(FetchFailure):
            client.fetch_forecast(10.0, 10.0)

    record = caplog.records[-1]
    assert record.fetch_kind == "forecast"  # type: ignore[attr-defined]
    assert record.cause_category == "http_status"  # type: ignore[attr-defined]
    assert record.status_code == 503  # type: ignore[attr-defined]
