"""
Script to run the registry reloader, once or on its own schedule
"""

import argparse
import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import Settings
from core.database import create_engine_from_settings, create_session_maker
from core.exceptions import ETLException
from core.logging import setup_logging
from ingestion.runner import IngestionRunner
from ingestion.scheduler import IngestionScheduler

logger = logging.getLogger(__name__)


async def run(once: bool) -> int:
    """Run one cycle or keep cycling until interrupted"""
    settings = Settings()
    setup_logging(settings)

    engine = create_engine_from_settings(settings)
    runner = IngestionRunner(settings, create_session_maker(engine))

    try:
        if once:
            result = await runner.run_cycle()
            logger.info(f"Cycle finished: {result['status']} (version {result['version']})")
            return 0

        scheduler = IngestionScheduler(runner, settings)
        scheduler.start()
        try:
            await asyncio.Event().wait()
        finally:
            scheduler.stop()

    except ETLException as e:
        logger.error(f"Reload cycle aborted: {e}")
        return 1
    finally:
        await engine.dispose()

    return 0


def main():
    parser = argparse.ArgumentParser(description="Reload the FIAS address registry")
    parser.add_argument("--once", action="store_true", help="run a single cycle and exit")
    args = parser.parse_args()

    try:
        sys.exit(asyncio.run(run(args.once)))
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()
