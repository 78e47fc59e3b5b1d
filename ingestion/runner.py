# ============================================================================
# File: ingestion/runner.py
# Description: Reload cycle orchestrator with per-file failure isolation
# ============================================================================
"""
Ingestion Runner - Orchestrates one full registry reload cycle.

This module drives:
- Remote version check against the persisted version marker
- Archive retrieval and unpacking
- Per-file classification, streaming extraction and batch loading
- Version marker advancement

Failures before the first table is touched (version check, download,
unpack, marker read) abort the cycle and propagate. Failures while loading
one file are logged and counted; the loop moves on to the next file.
"""

from typing import Any, Callable, Dict, Mapping, Optional
from sqlalchemy import Table
from sqlalchemy.ext.asyncio import async_sessionmaker
import logging

from core.config import Settings
from core.exceptions import ETLException
from ingestion.classifier import FileClassifier
from ingestion.extractors.archive import ArchiveFetcher, FileDescriptor
from ingestion.extractors.fias_service import DownloadServiceClient
from ingestion.extractors.xml_extractor import XMLExtractor
from ingestion.loaders.postgres_loader import PostgresLoader
from ingestion.version_marker import VersionMarker
from models.registry_tables import REGISTRY_TABLES
from schemas.registry import get_schema

logger = logging.getLogger(__name__)


class IngestionRunner:
    """
    Reload cycle orchestrator

    Responsibilities:
    - Decide whether a new dataset version must be applied
    - Retrieve and unpack the archive
    - Load every classified file sequentially, isolating failures per file
    - Sole writer of the version marker
    - Tell the caller how long to wait before the next cycle
    """

    def __init__(
        self,
        settings: Settings,
        session_maker: async_sessionmaker,
        service_client: Optional[DownloadServiceClient] = None,
        fetcher: Optional[ArchiveFetcher] = None,
        classifier: Optional[FileClassifier] = None,
        tables: Optional[Mapping[str, Table]] = None,
        marker_factory: Callable[..., VersionMarker] = VersionMarker
    ):
        self.settings = settings
        self.session_maker = session_maker
        self.service_client = service_client or DownloadServiceClient(
            service_url=settings.FIAS_SERVICE_URL,
            timeout=settings.HTTP_TIMEOUT
        )
        self.fetcher = fetcher or ArchiveFetcher(
            archive_path=settings.archive_path,
            extract_dir=settings.extract_dir,
            timeout=settings.HTTP_TIMEOUT,
            show_progress=settings.SHOW_PROGRESS
        )
        self.classifier = classifier or FileClassifier.from_registry()
        self.tables = tables if tables is not None else REGISTRY_TABLES
        self.marker_factory = marker_factory

    @property
    def no_update_delay(self) -> float:
        return self.settings.NO_UPDATE_SLEEP_HOURS * 3600

    @property
    def cycle_delay(self) -> float:
        return self.settings.CYCLE_SLEEP_HOURS * 3600

    async def run_cycle(self) -> Dict[str, Any]:
        """
        Run one reload cycle.

        Returns:
            Dictionary with cycle statistics:
            - status: "up_to_date", "success" or "partial_success"
            - version: dataset version applied or already present
            - files_loaded / files_failed / files_skipped: per-file outcome counts
            - rows_loaded: total rows inserted
            - next_run_in: seconds to wait before the next cycle

        Raises:
            TransportError: If the version check or the download fails
            ArchiveError: If the archive cannot be unpacked
            VersionMarkerError: If the marker cannot be read or written
        """
        # --------------------------------------------------
        # PHASE 1: VERSION CHECK
        # --------------------------------------------------
        info = await self.service_client.get_last_download_info()
        remote_version = info.version_marker

        async with self.session_maker() as session:
            applied_version = await self.marker_factory(session).get()

        if applied_version == remote_version:
            logger.info(f"Dataset version {remote_version} already applied, nothing to do")
            return {
                "status": "up_to_date",
                "version": remote_version,
                "next_run_in": self.no_update_delay
            }

        logger.info(f"New dataset version {remote_version} (applied: {applied_version})")

        # --------------------------------------------------
        # PHASE 2: RETRIEVE AND UNPACK
        # --------------------------------------------------
        await self.fetcher.download(info.complete_xml_url)
        self.fetcher.unpack()
        descriptors = self.fetcher.enumerate(self.classifier)

        # --------------------------------------------------
        # PHASE 3: LOAD FILES ONE BY ONE
        # --------------------------------------------------
        files_loaded = 0
        files_failed = 0
        files_skipped = 0
        rows_loaded = 0
        error_details = []

        for descriptor in descriptors:
            if descriptor.key is None:
                files_skipped += 1
                logger.info(f"{descriptor.name} doesn't match any record kind, skipping")
                continue

            try:
                result = await self.load_file(descriptor)
                files_loaded += 1
                rows_loaded += result["rows_loaded"]

            except ETLException as e:
                files_failed += 1
                error_details.append({"file": descriptor.name, **e.to_dict()})
                logger.error(
                    f"Load of {descriptor.name} failed: {e.message}",
                    extra={"error_context": e.to_dict()}
                )

            except Exception as e:
                files_failed += 1
                error_details.append({
                    "file": descriptor.name,
                    "error_type": type(e).__name__,
                    "message": str(e)
                })
                logger.exception(f"Unexpected error loading {descriptor.name}")

        # --------------------------------------------------
        # PHASE 4: ADVANCE VERSION MARKER
        # --------------------------------------------------
        async with self.session_maker() as session:
            await self.marker_factory(session).set(remote_version)

        result = {
            "status": "success" if files_failed == 0 else "partial_success",
            "version": remote_version,
            "files_loaded": files_loaded,
            "files_failed": files_failed,
            "files_skipped": files_skipped,
            "rows_loaded": rows_loaded,
            "next_run_in": self.cycle_delay
        }

        if error_details:
            result["error_details"] = error_details

        logger.info(
            f"Cycle for version {remote_version} completed: {result['status']} - "
            f"Loaded: {files_loaded}, Failed: {files_failed}, Skipped: {files_skipped}, "
            f"Rows: {rows_loaded}"
        )

        return result

    async def load_file(self, descriptor: FileDescriptor) -> Dict[str, Any]:
        """
        Extract and load one classified file in its own session.

        Raises:
            DecodeError: If the XML is malformed
            DatabaseError / ShadowTableError: If the store rejects the load
        """
        schema = get_schema(descriptor.key)
        table = self.tables[descriptor.key]

        logger.info(f"Loading {descriptor.name} as {schema.key} into {table.name}")

        extractor = XMLExtractor(schema, show_progress=self.settings.SHOW_PROGRESS)
        rows = extractor.extract_file(descriptor.path, descriptor.size)

        try:
            async with self.session_maker() as session:
                loader = PostgresLoader(
                    session,
                    shadow_threshold=self.settings.SHADOW_TABLE_THRESHOLD_BYTES
                )
                return await loader.load(rows, table, descriptor.size)
        finally:
            rows.close()
