"""Diagnostic CLI: fetch weather for a location and print pressure-drop warnings."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from datetime import UTC

from rich.console import Console
from rich.table import Table

from .config import Settings, load_settings
from .exceptions import ConfigError, FetchFailure
from .log_setup import setup_logger
from .risk.models import ForecastRiskReport
from .risk.service import ForecastRiskService
from .weather.openweather import OpenWeatherClient


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Fetch OpenWeatherMap data and report migraine-risk pressure drops."
    )
    parser.add_argument("--lat", type=float, default=None, help="Latitude of the location.")
    parser.add_argument("--lon", type=float, default=None, help="Longitude of the location.")
    parser.add_argument(
        "--no-current",
        action="store_true",
        help="Skip the current-conditions fetch and only analyze the forecast.",
    )
    parser.add_argument(
        "--max-print",
        type=int,
        default=None,
        help="Number of warnings to print (default: all).",
    )
    return parser.parse_args(argv)


def _validate_cli_input(args: argparse.Namespace, settings: Settings) -> tuple[float, float]:
    if args.max_print is not None and args.max_print <= 0:
        raise ValueError("--max-print must be > 0 when provided.")

    lat = args.lat if args.lat is not None else settings.weather_default_lat
    lon = args.lon if args.lon is not None else settings.weather_default_lon
    if lat is None or lon is None:
        raise ValueError(
            "Missing location input: pass --lat and --lon or set WEATHER_DEFAULT_LAT/LON."
        )
    if not (-90 <= lat <= 90):
        raise ValueError(f"Invalid latitude {lat}; expected between -90 and 90.")
    if not (-180 <= lon <= 180):
        raise ValueError(f"Invalid longitude {lon}; expected between -180 and 180.")
    return lat, lon


def _print_report(console: Console, report: ForecastRiskReport, max_print: int | None) -> None:
    current = report.current
    if current is not None:
        city = current.city or "unknown"
        console.print(
            f"{city} ({report.latitude:.4f}, {report.longitude:.4f}): "
            f"{current.temperature:g} °C, {current.pressure:g} hPa, "
            f"{current.humidity}% humidity, {current.description}"
        )
        if report.low_pressure:
            console.print("[yellow]Current pressure is low - migraine trigger.[/yellow]")

    console.print(
        f"Forecast points={len(report.forecast)} warnings={len(report.warnings)}"
    )
    if not report.warnings:
        console.print("No significant pressure drops forecast.")
        return

    table = Table(title="Pressure Drop Warnings")
    table.add_column("Time (UTC)")
    table.add_column("Drop (hPa)", justify="right")
    table.add_column("Severity")
    table.add_column("Message", overflow="fold")

    shown = report.warnings if max_print is None else report.warnings[:max_print]
    for warning in shown:
        severity = "[red]high[/red]" if warning.severity == "high" else "medium"
        table.add_row(
            warning.timestamp.astimezone(UTC).isoformat(),
            str(warning.pressure_drop),
            severity,
            warning.message,
        )
    console.print(table)


def main(argv: Sequence[str] | None = None) -> int:
    """Run one fetch-normalize-detect pass and print the result."""
    args = parse_args(argv)
    logger = setup_logger()
    console = Console()

    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2
    logger = setup_logger(settings=settings)
    logger.debug("Loaded settings: %s", settings.safe_summary())

    try:
        lat, lon = _validate_cli_input(args, settings)
    except ValueError as exc:
        logger.error("Invalid input: %s", exc)
        return 1

    try:
        with OpenWeatherClient(settings=settings, logger=logger) as client:
            service = ForecastRiskService(client, settings=settings, logger=logger)
            report = service.evaluate(lat, lon, include_current=not args.no_current)
    except FetchFailure as exc:
        logger.error("Weather fetch failure (%s): %s", exc.kind, exc)
        return 1

    _print_report(console, report, args.max_print)
    return 0


if __name__ == "__main__":
    sys.exit(main())
