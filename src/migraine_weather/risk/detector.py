"""Pressure-drop detection over time-ordered forecasts."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from ..config import Settings
from ..weather.models import ForecastPoint
from .models import PressureDropWarning, Severity

# Falls within one 3-hour forecast step, in hPa.
MEDIUM_DROP_THRESHOLD_HPA = 5.0
HIGH_DROP_THRESHOLD_HPA = 10.0
LOW_PRESSURE_THRESHOLD_HPA = 1010.0

WARNING_MESSAGE_TEMPLATE = "Pressure dropping {drop} hPa - migraine risk!"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def is_low_pressure(
    pressure: float | None, threshold: float = LOW_PRESSURE_THRESHOLD_HPA
) -> bool:
    """Return True when pressure is strictly below the low-pressure trigger level."""
    if pressure is None:
        return False
    return pressure < threshold


class PressureDropDetector:
    """Flag adjacent forecast points where pressure falls past a threshold.

    The forecast must already be ordered (see ``ForecastNormalizer``); the
    detector trusts the order it is given. A pair where either point lacks a
    pressure reading is skipped and never bridged with an older value.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.logger = logger or logging.getLogger("migraine_weather.risk.detector")
        self.medium_threshold = (
            settings.pressure_drop_medium_hpa if settings is not None else MEDIUM_DROP_THRESHOLD_HPA
        )
        self.high_threshold = (
            settings.pressure_drop_high_hpa if settings is not None else HIGH_DROP_THRESHOLD_HPA
        )
        if self.high_threshold < self.medium_threshold:
            raise ValueError("High drop threshold cannot be below the medium threshold.")

    def detect(self, forecast: Sequence[ForecastPoint]) -> list[PressureDropWarning]:
        warnings: list[PressureDropWarning] = []
        skipped_pairs = 0
        for previous, current in zip(forecast, forecast[1:]):
            if not (_usable(previous.pressure) and _usable(current.pressure)):
                skipped_pairs += 1
                continue
            drop = previous.pressure - current.pressure
            severity = self.classify(drop)
            if severity is None:
                continue
            warnings.append(self._build_warning(current, drop, severity))

        if skipped_pairs:
            self.logger.debug(
                "Skipped %d forecast pair(s) without pressure readings.", skipped_pairs
            )
        return warnings

    def classify(self, drop: float) -> Severity | None:
        """Map a pressure drop (hPa) to a severity, or None below the threshold."""
        if drop >= self.high_threshold:
            return "high"
        if drop >= self.medium_threshold:
            return "medium"
        return None

    @staticmethod
    def _build_warning(
        point: ForecastPoint, drop: float, severity: Severity
    ) -> PressureDropWarning:
        rounded = round_half_up(drop)
        return PressureDropWarning(
            timestamp=point.timestamp,
            pressure_drop=rounded,
            severity=severity,
            message=WARNING_MESSAGE_TEMPLATE.format(drop=rounded),
        )


def _usable(pressure: float | None) -> bool:
    # Points built with model_construct() skip validation and may carry NaN/inf.
    return pressure is not None and math.isfinite(pressure) and pressure > 0


def detect_pressure_drops(forecast: Sequence[ForecastPoint]) -> list[PressureDropWarning]:
    """Detect pressure drops using the default thresholds."""
    return PressureDropDetector().detect(forecast)
