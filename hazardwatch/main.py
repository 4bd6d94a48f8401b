"""Entry Points.

HTTP functions for on-demand cycles (Cloud Functions / functions-framework)
and the long-running scheduler process. Thin wrappers that load
configuration and invoke the engine.
"""

import logging
import os
from typing import Any

import functions_framework
from flask import Request

from hazardwatch.core.config import Config, validate_config
from hazardwatch.engine import CycleResult, HazardEngine
from hazardwatch.feed_cache import PointEventFeedCache
from hazardwatch.scheduler import AdaptiveScheduler
from hazardwatch.shell.config_loader import load_config, load_config_from_env
from hazardwatch.shell.database import create_db_engine, create_session_factory
from hazardwatch.shell.store import HazardStore


# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Shared by every engine built in this process; empty after a restart.
FEED_CACHE = PointEventFeedCache()


def _get_config() -> Config:
    """Load configuration from file or environment."""
    config_path = os.environ.get("CONFIG_PATH")

    if config_path:
        config = load_config(config_path)
    elif os.environ.get("DATABASE_URL"):
        config = load_config_from_env()
    else:
        config = load_config()

    result = validate_config(config)
    for warning in result.warnings:
        logger.warning("Config %s: %s", warning.field, warning.message)
    if not result.valid:
        problems = "; ".join(f"{e.field}: {e.message}" for e in result.critical_errors)
        raise ValueError(f"Invalid configuration: {problems}")

    return config


def build_engine(config: Config) -> HazardEngine:
    """Wire the store, clients and shared feed cache into an engine."""
    store = HazardStore(create_session_factory(create_db_engine(config.database_url)))
    return HazardEngine(config, store, feed_cache=FEED_CACHE)


def _cycle_response(result: CycleResult) -> tuple[dict[str, Any], int]:
    response: dict[str, Any] = {
        "status": "success" if result.success else "partial_failure",
        "summary": result.summary,
        "locations_checked": result.locations_checked,
        "readings_logged": result.readings_logged,
        "alerts_opened": len(result.alerts_opened),
        "alerts_cleared": result.alerts_cleared,
    }
    if result.errors:
        response["errors"] = result.errors

    status_code = 200 if result.success else 207  # 207 = Multi-Status
    return response, status_code


@functions_framework.http
def weather_check(request: Request) -> tuple[dict[str, Any], int]:
    """Run one weather/AQI cycle on demand.

    Args:
        request: Flask request object (not used, but required by framework)

    Returns:
        Tuple of (response dict, HTTP status code)
    """
    logger.info("Starting on-demand weather cycle")
    try:
        engine = build_engine(_get_config())
        return _cycle_response(engine.run_continuous_signal_cycle())
    except Exception as e:
        logger.exception("Unexpected error in weather cycle")
        return {"status": "error", "message": str(e)}, 500


@functions_framework.http
def earthquake_check(request: Request) -> tuple[dict[str, Any], int]:
    """Run one seismic cycle on demand.

    Args:
        request: Flask request object (not used, but required by framework)

    Returns:
        Tuple of (response dict, HTTP status code)
    """
    logger.info("Starting on-demand earthquake cycle")
    try:
        engine = build_engine(_get_config())
        return _cycle_response(engine.run_point_event_cycle())
    except Exception as e:
        logger.exception("Unexpected error in earthquake cycle")
        return {"status": "error", "message": str(e)}, 500


def run_scheduler() -> None:
    """Start both adaptive loops and block until interrupted."""
    config = _get_config()
    engine = build_engine(config)
    scheduler = AdaptiveScheduler(config, engine, engine.store)

    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Shutdown requested")


if __name__ == "__main__":
    run_scheduler()
