"""Migraine-risk derivation from barometric pressure."""

from .detector import (
    HIGH_DROP_THRESHOLD_HPA,
    LOW_PRESSURE_THRESHOLD_HPA,
    MEDIUM_DROP_THRESHOLD_HPA,
    PressureDropDetector,
    detect_pressure_drops,
    is_low_pressure,
)
from .models import ForecastRiskReport, PressureDropWarning, Severity
from .service import ForecastRiskService

__all__ = [
    "ForecastRiskReport",
    "ForecastRiskService",
    "HIGH_DROP_THRESHOLD_HPA",
    "LOW_PRESSURE_THRESHOLD_HPA",
    "MEDIUM_DROP_THRESHOLD_HPA",
    "PressureDropDetector",
    "PressureDropWarning",
    "Severity",
    "detect_pressure_drops",
    "is_low_pressure",
]
