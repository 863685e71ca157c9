"""Command-line interface for the calendar weather bot."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from calendar_weather import __version__
from calendar_weather.auth.credentials import CredentialError
from calendar_weather.config import Settings, get_settings
from calendar_weather.providers.base import ProviderError
from calendar_weather.providers.weatherapi import WeatherAPIProvider

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str) -> None:
    """Configure root logging for console output."""
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="calendar-weather",
        description="Calendar Weather Bot - annotate event titles with weather forecasts",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Serve command
    subparsers.add_parser(
        "serve", help="Run the health server and scheduled syncs"
    )

    # Sync command
    sync_parser = subparsers.add_parser("sync", help="Run a single sync cycle")
    sync_parser.add_argument(
        "--full",
        action="store_true",
        help="Ignore any stored sync token and resync the whole window",
    )

    # Forecast command
    forecast_parser = subparsers.add_parser(
        "forecast", help="Print the hourly forecast for a location"
    )
    forecast_parser.add_argument(
        "location",
        nargs="?",
        default=None,
        help="Location query (default: WEATHER_LOCATION)",
    )
    forecast_parser.add_argument(
        "--days",
        type=int,
        default=3,
        help="Number of forecast days",
    )

    return parser


def serve(settings: Settings) -> int:
    import uvicorn

    from calendar_weather.api.app import create_app
    from calendar_weather.auth.credentials import CredentialProvider

    # Fail before binding the port if credentials are unusable
    CredentialProvider.from_settings(settings).get_credentials()

    uvicorn.run(create_app(), host=settings.host, port=settings.port, log_config=None)
    return 0


async def run_sync(settings: Settings, full: bool) -> int:
    from calendar_weather.service import build_service

    service = await build_service(settings)
    try:
        await service.engine.restore()
        report = await service.engine.sync(force_full=full)
    finally:
        await service.stop()

    print(report.summary())
    if report.fetch_error:
        print(f"Fetch failed: {report.fetch_error}", file=sys.stderr)
    for error in report.errors:
        print(error, file=sys.stderr)
    return 0 if report.success else 1


async def show_forecast(settings: Settings, location: str | None, days: int) -> int:
    location = location or settings.weather_location
    print(f"API Key: {'Present' if settings.weatherapi_key else 'Missing'}")

    async with WeatherAPIProvider(api_key=settings.weatherapi_key) as provider:
        try:
            forecast = await provider.get_forecast(location, days=days)
        except ProviderError as e:
            print(f"Error: {e}", file=sys.stderr)
            if e.status_code:
                print(f"Status: {e.status_code}", file=sys.stderr)
            return 1

    print(f"Location: {location} ({forecast.timezone or 'unknown timezone'})")
    print(f"Forecast days available: {len(forecast.days)}")
    for forecast_day in forecast.days:
        print(f"\n=== {forecast_day.day.isoformat()} ===")
        if not forecast_day.hourly:
            print("No hourly data available")
        for slot in forecast_day.hourly:
            print(f"{slot.time:%H:%M}: {slot.condition_text}, {slot.temperature_c}°C")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        if args.command == "serve":
            return serve(settings)
        if args.command == "sync":
            return asyncio.run(run_sync(settings, full=args.full))
        if args.command == "forecast":
            return asyncio.run(show_forecast(settings, args.location, args.days))
    except CredentialError as e:
        logger.error(f"Cannot start: {e}")
        return 1

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
