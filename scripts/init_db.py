#!/usr/bin/env python3
"""Create the hazard tables in the configured database.

Local development helper. Production schemas are provisioned by the
bootstrap tooling that owns them.

Usage:
    python scripts/init_db.py
    python scripts/init_db.py --interval weather_fetch_interval=120

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

from sqlalchemy.orm import Session

from hazardwatch.main import _get_config
from hazardwatch.shell.database import SettingRow, create_db_engine, create_tables

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Create hazard tables")
    parser.add_argument(
        "--interval",
        action="append",
        default=[],
        metavar="KEY=SECONDS",
        help="Store a poll interval override (repeatable)",
    )
    args = parser.parse_args()

    config = _get_config()
    engine = create_db_engine(config.database_url)
    create_tables(engine)
    logger.info("Tables created")

    if args.interval:
        with Session(engine) as session, session.begin():
            for item in args.interval:
                key, _, value = item.partition("=")
                session.merge(SettingRow(setting_key=key.strip(), setting_value=value.strip()))
                logger.info("Setting %s = %s", key.strip(), value.strip())

    return 0


if __name__ == "__main__":
    sys.exit(main())
