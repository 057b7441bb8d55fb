"""CLI: fetch one NDBC station and print its normalized observation."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from rich.console import Console
from rich.table import Table

from .config import load_settings
from .exceptions import ConfigError, FormatError, StationValidationError, UpstreamError
from .log_setup import setup_logger
from .marine.models import FetchResult
from .marine.service import MarineObservationService

_FIELD_ROWS = (
    ("Sea temperature", "sea_temperature", "°C"),
    ("Wave height", "wave_height", "m"),
    ("Swell height", "swell_height", "m"),
    ("Swell period", "swell_period", "s"),
    ("Swell direction", "swell_direction", "°"),
)


def parse_args() -> argparse.Namespace:
    """Parse marine CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Fetch and normalize a real-time NDBC buoy observation."
    )
    parser.add_argument("station", help="NDBC station identifier, e.g. 46042.")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the normalized observation as JSON instead of a table.",
    )
    parser.add_argument(
        "--include-raw",
        action="store_true",
        help="Keep the raw NDBC payload in JSON output.",
    )
    return parser.parse_args()


def _print_observation(console: Console, result: FetchResult) -> None:
    observation = result.observation
    console.print(
        f"Station={observation.station} source={observation.source} "
        f"timestamp={observation.timestamp or '-'} cached={result.cached}"
    )
    table = Table(title=f"NDBC Station {observation.station}")
    table.add_column("Measurement")
    table.add_column("Value")
    for label, attr, unit in _FIELD_ROWS:
        value = getattr(observation, attr)
        table.add_row(label, f"{value:g} {unit}" if value is not None else "-")
    console.print(table)


async def _fetch(service: MarineObservationService, station: str) -> FetchResult:
    try:
        return await service.fetch_observation(station)
    finally:
        await service.aclose()


def main() -> int:
    """Run a single marine observation lookup."""
    args = parse_args()
    console = Console()

    try:
        settings = load_settings()
    except ConfigError as exc:
        setup_logger().error("Configuration failure: %s", exc)
        return 2

    logger = setup_logger(level=settings.log_level)
    service = MarineObservationService.from_settings(settings, logger)

    try:
        result = asyncio.run(_fetch(service, args.station))
    except StationValidationError as exc:
        logger.error("Invalid station %r: %s", args.station, exc)
        return 3
    except (UpstreamError, FormatError) as exc:
        logger.error("%s: %s", exc.error, exc)
        return 4
    except Exception as exc:  # pragma: no cover - defensive catch for CLI runtime
        logger.exception("Unexpected marine CLI failure: %s", exc)
        return 99

    if args.json:
        payload = result.observation.to_wire()
        if not args.include_raw:
            payload.pop("raw", None)
        console.print_json(json.dumps(payload))
    else:
        _print_observation(console, result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
