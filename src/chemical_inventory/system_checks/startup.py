"""Command line entrypoint for startup checks."""

from __future__ import annotations

import argparse
import asyncio

from chemical_inventory.config import get_settings
from chemical_inventory.db import init_db
from chemical_inventory.logging import configure_logging, logger
from chemical_inventory.system_checks import run_checks


async def main(create_tables: bool) -> int:
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_serialize)
    if create_tables:
        init_db()
        logger.info("Tables created", database=settings.database.url)

    results = await run_checks()
    if all(result.ok for result in results):
        logger.info("Startup checks passed")
        return 0
    logger.error("Startup checks failed")
    return 1


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run system startup checks")
    parser.add_argument("--init-db", action="store_true", help="Create missing tables before checking")
    return parser.parse_args()


def entrypoint() -> None:
    args = parse_args()
    raise SystemExit(asyncio.run(main(args.init_db)))


if __name__ == "__main__":  # pragma: no cover
    entrypoint()
