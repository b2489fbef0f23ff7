"""Ordering gate applied to forecasts before pressure-drop detection."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .models import ForecastPoint


class ForecastNormalizer:
    """Return forecasts as a stably time-sorted list.

    Points without a pressure reading are kept; detection decides what to do
    with them.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("migraine_weather.weather.normalizer")

    def normalize(self, points: Iterable[ForecastPoint]) -> list[ForecastPoint]:
        items = list(points)
        ordered = sorted(items, key=lambda point: point.timestamp)
        if any(a is not b for a, b in zip(ordered, items)):
            self.logger.debug("Forecast of %d points was out of order; sorted.", len(items))
        missing = sum(1 for point in ordered if point.pressure is None)
        if missing:
            self.logger.debug("Forecast has %d point(s) without pressure.", missing)
        return ordered
