#!/usr/bin/env python3
"""Operator simulation script.

Injects a simulated earthquake or weather reading and runs it through the
same rule evaluation and alert lifecycle as the scheduled cycles. Alerts
it opens are real rows in the configured database.

Usage:
    # Simulated M6.8 quake; every active location within the radius is evaluated
    python scripts/simulate_hazard.py earthquake --lat 23.81 --lon 90.41 --magnitude 6.8

    # Simulated weather for one location
    python scripts/simulate_hazard.py weather --location-id 1 --rain-sum 30

    # Run one scheduled cycle right now
    python scripts/simulate_hazard.py cycle weather

Environment:
    CONFIG_PATH: Path to config file (default: config/config.yaml)
    DATABASE_URL: Database URL when no config file is used
"""

import argparse
import logging
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hazardwatch.exceptions import HazardWatchError
from hazardwatch.main import _get_config, build_engine

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def simulate_earthquake(engine, args) -> int:
    result = engine.simulate_point_event(args.lat, args.lon, args.magnitude)

    logger.info(result.message)
    for location, distance in result.affected:
        logger.info("  - %s (%.0f km)", location.name, distance)
    for alert in result.alerts_opened:
        logger.info("  Opened: [%s] %s", alert.severity, alert.title)
    for error in result.errors:
        logger.error("  %s", error)

    return 0 if not result.errors else 1


def simulate_weather(engine, args) -> int:
    values = {
        "temperature": args.temperature,
        "humidity": args.humidity,
        "rain_sum": args.rain_sum,
        "wind_speed": args.wind_speed,
        "aqi": args.aqi,
    }
    result = engine.simulate_continuous_signal(args.location_id, values)

    logger.info("Weather simulation evaluated for %s", result.location.name)
    for alert in result.opened:
        logger.info("  Opened: [%s] %s", alert.severity, alert.title)
    for disaster_id in result.cleared:
        logger.info("  Cleared disaster %d", disaster_id)

    return 0


def run_cycle(engine, args) -> int:
    if args.kind == "weather":
        result = engine.run_continuous_signal_cycle()
    else:
        result = engine.run_point_event_cycle()

    logger.info(result.summary)
    for error in result.errors:
        logger.error("  %s", error)

    return 0 if result.success else 1


def main():
    parser = argparse.ArgumentParser(
        description="Simulate hazards or run a monitoring cycle on demand",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    quake = commands.add_parser("earthquake", help="Simulate a seismic event")
    quake.add_argument("--lat", type=float, required=True, help="Epicenter latitude")
    quake.add_argument("--lon", type=float, required=True, help="Epicenter longitude")
    quake.add_argument("--magnitude", type=float, required=True, help="Magnitude")
    quake.set_defaults(handler=simulate_earthquake)

    weather = commands.add_parser("weather", help="Simulate a weather/AQI reading")
    weather.add_argument("--location-id", type=int, required=True, help="Location ID")
    weather.add_argument("--temperature", type=float)
    weather.add_argument("--humidity", type=float)
    weather.add_argument("--rain-sum", type=float)
    weather.add_argument("--wind-speed", type=float)
    weather.add_argument("--aqi", type=float)
    weather.set_defaults(handler=simulate_weather)

    cycle = commands.add_parser("cycle", help="Run one scheduled cycle now")
    cycle.add_argument("kind", choices=["weather", "earthquake"])
    cycle.set_defaults(handler=run_cycle)

    args = parser.parse_args()

    try:
        engine = build_engine(_get_config())
        return args.handler(engine, args)
    except HazardWatchError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
