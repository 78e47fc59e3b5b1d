"""
Load extracted rows into PostgreSQL in fixed-size batches, with shadow-table
replacement for large tables
"""

from typing import Any, Dict, Iterable, List, Tuple
from sqlalchemy import Table, insert, text
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from models.registry_tables import shadow_of
from core.exceptions import DatabaseError, ShadowTableError
import logging

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5000
DEFAULT_SHADOW_THRESHOLD_BYTES = 20388921
SHADOW_PREFIX = "temp_"

_preparer = postgresql.dialect().identifier_preparer


def quote(name: str) -> str:
    return _preparer.quote(name)


class PostgresLoader:
    """
    Replace the contents of one table with a stream of rows.

    Two commit strategies, chosen by the size of the source file:
    - small files: TRUNCATE the target in place, then insert. A failure
      leaves the target truncated.
    - large files: build a shadow table (LIKE target INCLUDING ALL), insert
      into it, then drop the target and rename the shadow in one
      transaction. Readers see either the old or the new full table.

    Every batch is committed as soon as it is inserted.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        batch_size: int = DEFAULT_BATCH_SIZE,
        shadow_threshold: int = DEFAULT_SHADOW_THRESHOLD_BYTES
    ):
        if batch_size < 1:
            raise ValueError(f"Batch size must be positive, got {batch_size}")
        self.db = db_session
        self.batch_size = batch_size
        self.shadow_threshold = shadow_threshold

    def uses_shadow(self, source_size: int) -> bool:
        """Large files are loaded through a shadow table"""
        return source_size > self.shadow_threshold

    async def load(
        self,
        rows: Iterable[Dict[str, Any]],
        table: Table,
        source_size: int
    ) -> Dict[str, Any]:
        """
        Load rows into `table`, choosing the strategy from `source_size`.

        Args:
            rows: Lazy row sequence; errors it raises abort the load
            table: Target table
            source_size: Byte size of the source file

        Returns:
            Dictionary with load statistics:
            - table: target table name
            - mode: "shadow" or "truncate"
            - rows_loaded: rows inserted
            - inserts: bulk insert statements issued

        Raises:
            DatabaseError: If a TRUNCATE or INSERT fails
            ShadowTableError: If the shadow cannot be created or swapped in
            DecodeError: Propagated from the row sequence
        """
        if self.uses_shadow(source_size):
            logger.info(
                f"Source is {source_size} bytes (> {self.shadow_threshold}), "
                f"loading {table.name} through a shadow table"
            )
            return await self._load_via_shadow(rows, table)

        return await self._load_in_place(rows, table)

    async def _load_in_place(self, rows: Iterable[Dict[str, Any]], table: Table) -> Dict[str, Any]:
        await self._truncate(table)
        rows_loaded, inserts = await self._insert_batches(rows, table)

        logger.info(f"Loaded {rows_loaded} rows into {table.name} ({inserts} inserts)")
        return {
            "table": table.name,
            "mode": "truncate",
            "rows_loaded": rows_loaded,
            "inserts": inserts
        }

    async def _load_via_shadow(self, rows: Iterable[Dict[str, Any]], table: Table) -> Dict[str, Any]:
        shadow = await self._create_shadow(table)

        try:
            rows_loaded, inserts = await self._insert_batches(rows, shadow)
            await self._swap(shadow, table)
        except Exception:
            await self._drop_shadow(shadow)
            raise

        logger.info(
            f"Replaced {table.name} with {rows_loaded} rows from {shadow.name} ({inserts} inserts)"
        )
        return {
            "table": table.name,
            "mode": "shadow",
            "rows_loaded": rows_loaded,
            "inserts": inserts
        }

    async def _insert_batches(
        self,
        rows: Iterable[Dict[str, Any]],
        target: Table
    ) -> Tuple[int, int]:
        batch: List[Dict[str, Any]] = []
        rows_loaded = 0
        inserts = 0

        for row in rows:
            batch.append(row)
            if len(batch) == self.batch_size:
                rows_loaded += await self._flush(target, batch, rows_loaded)
                inserts += 1
                batch = []

        # Trailing flush; empty batches issue nothing
        if batch:
            rows_loaded += await self._flush(target, batch, rows_loaded)
            inserts += 1

        return rows_loaded, inserts

    async def _flush(self, target: Table, batch: List[Dict[str, Any]], rows_loaded: int) -> int:
        """Insert one batch with a single executemany and commit it"""
        if not batch:
            return 0

        try:
            await self.db.execute(insert(target), batch)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise DatabaseError(
                f"Bulk insert into {target.name} failed",
                context={
                    "operation": "INSERT",
                    "table_name": target.name,
                    "batch_size": len(batch),
                    "rows_loaded": rows_loaded
                },
                original_exception=e
            )

        logger.debug(f"Inserted batch of {len(batch)} rows into {target.name}")
        return len(batch)

    async def _truncate(self, table: Table):
        try:
            await self.db.execute(text(f"TRUNCATE {quote(table.name)}"))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise DatabaseError(
                f"Failed to truncate {table.name}",
                context={"operation": "TRUNCATE", "table_name": table.name},
                original_exception=e
            )

        logger.info(f"Truncated {table.name}")

    async def _create_shadow(self, table: Table) -> Table:
        shadow = shadow_of(table, SHADOW_PREFIX + table.name)

        try:
            # A crashed earlier run may have left its shadow behind
            await self.db.execute(text(f"DROP TABLE IF EXISTS {quote(shadow.name)}"))
            await self.db.execute(
                text(f"CREATE TABLE {quote(shadow.name)} (LIKE {quote(table.name)} INCLUDING ALL)")
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise ShadowTableError(
                f"Failed to create shadow table for {table.name}",
                context={
                    "operation": "CREATE",
                    "table_name": table.name,
                    "shadow_table": shadow.name
                },
                original_exception=e
            )

        logger.info(f"Created shadow table {shadow.name}")
        return shadow

    async def _swap(self, shadow: Table, table: Table):
        """Drop the target and rename the shadow into its place in one transaction"""
        try:
            await self.db.execute(text(f"DROP TABLE {quote(table.name)}"))
            await self.db.execute(
                text(f"ALTER TABLE {quote(shadow.name)} RENAME TO {quote(table.name)}")
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise ShadowTableError(
                f"Failed to swap {shadow.name} into {table.name}",
                context={
                    "operation": "SWAP",
                    "table_name": table.name,
                    "shadow_table": shadow.name
                },
                original_exception=e
            )

        logger.info(f"Swapped {shadow.name} into {table.name}")

    async def _drop_shadow(self, shadow: Table):
        """Best-effort cleanup; the caller re-raises the load failure"""
        try:
            await self.db.rollback()
            await self.db.execute(text(f"DROP TABLE IF EXISTS {quote(shadow.name)}"))
            await self.db.commit()
            logger.info(f"Dropped shadow table {shadow.name}")
        except SQLAlchemyError as e:
            logger.warning(f"Could not drop shadow table {shadow.name}: {e}")
