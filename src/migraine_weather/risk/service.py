"""End-to-end forecast risk evaluation for a single location."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from ..config import Settings
from ..weather.base import WeatherProvider
from ..weather.normalizer import ForecastNormalizer
from .detector import LOW_PRESSURE_THRESHOLD_HPA, PressureDropDetector, is_low_pressure
from .models import ForecastRiskReport


class ForecastRiskService:
    """Run fetch, normalize and detect for one coordinate request.

    Fetch failures are not caught here; they reach the caller as raised by
    the provider.
    """

    def __init__(
        self,
        provider: WeatherProvider,
        *,
        settings: Settings | None = None,
        normalizer: ForecastNormalizer | None = None,
        detector: PressureDropDetector | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.provider = provider
        self.logger = logger or logging.getLogger("migraine_weather.risk.service")
        self.normalizer = normalizer or ForecastNormalizer(logger=self.logger)
        self.detector = detector or PressureDropDetector(settings=settings, logger=self.logger)
        self.low_pressure_threshold = (
            settings.low_pressure_threshold_hpa
            if settings is not None
            else LOW_PRESSURE_THRESHOLD_HPA
        )

    def evaluate(
        self,
        latitude: float,
        longitude: float,
        *,
        include_current: bool = True,
    ) -> ForecastRiskReport:
        current = None
        low_pressure = None
        if include_current:
            current = self.provider.fetch_current(latitude, longitude)
            low_pressure = is_low_pressure(current.pressure, self.low_pressure_threshold)

        forecast = self.normalizer.normalize(self.provider.fetch_forecast(latitude, longitude))
        warnings = self.detector.detect(forecast)
        self.logger.info(
            "Evaluated %d forecast points: %d pressure-drop warning(s), high=%d",
            len(forecast),
            len(warnings),
            sum(1 for warning in warnings if warning.severity == "high"),
        )
        return ForecastRiskReport(
            latitude=latitude,
            longitude=longitude,
            generated_at=datetime.now(UTC),
            current=current,
            low_pressure=low_pressure,
            forecast=forecast,
            warnings=warnings,
        )
