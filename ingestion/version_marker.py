"""
Persisted marker of the last dataset version applied
"""

from typing import Optional
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from models.config_entry import ConfigEntry, VERSION_MARKER_KEY
from core.exceptions import VersionMarkerError
import logging

logger = logging.getLogger(__name__)


class VersionMarker:
    """Read and write the version marker row of the config table"""

    def __init__(self, db_session: AsyncSession, key: str = VERSION_MARKER_KEY):
        self.db = db_session
        self.key = key

    async def get(self) -> Optional[str]:
        """Return the stored version, or None if no version was ever applied"""
        try:
            result = await self.db.execute(
                select(ConfigEntry.value).where(ConfigEntry.id == self.key)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise VersionMarkerError(
                "Failed to read version marker",
                context={"operation": "read", "marker_key": self.key},
                original_exception=e
            )

    async def set(self, value: str):
        """Store the version (INSERT ON CONFLICT UPDATE)"""
        stmt = insert(ConfigEntry).values(id=self.key, value=value)
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={"value": stmt.excluded.value}
        )

        try:
            await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise VersionMarkerError(
                "Failed to write version marker",
                context={"operation": "write", "marker_key": self.key, "value": value},
                original_exception=e
            )

        logger.info(f"Version marker {self.key} set to {value}")
