import asyncio
import logging
import sys
import os

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import Settings
from core.database import create_engine_from_settings
from core.logging import setup_logging
from models.base import Base
# Import all models to ensure they are registered
from models.config_entry import ConfigEntry  # noqa: F401
from models.registry_tables import REGISTRY_TABLES

logger = logging.getLogger(__name__)


async def init_database():
    settings = Settings()
    setup_logging(settings)
    logger.info("Connecting to database...")
    engine = create_engine_from_settings(settings)

    try:
        async with engine.begin() as conn:
            logger.info(f"Creating config table and {len(REGISTRY_TABLES)} registry tables...")
            # Existing tables are left as they are
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Tables created successfully.")
    finally:
        await engine.dispose()


def main():
    asyncio.run(init_database())


if __name__ == "__main__":
    main()
