"""
Database engine and session factories with SQLAlchemy async
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool
from core.config import Settings
import logging

logger = logging.getLogger(__name__)


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """
    Create the async engine used by every phase of a cycle.

    NullPool means each session opens its own connection and closes it
    on exit, so no connection outlives the phase that opened it.
    """
    logger.debug(f"Creating engine for application '{settings.DB_APPLICATION_NAME}'")
    return create_async_engine(
        settings.DATABASE_URL,
        echo=False,
        poolclass=NullPool,
        connect_args={
            "server_settings": {"application_name": settings.DB_APPLICATION_NAME}
        },
    )


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker:
    """Create session factory bound to the engine"""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )
