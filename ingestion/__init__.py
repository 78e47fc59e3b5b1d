"""
Reload pipeline components for the address registry.

This package contains everything between the remote dataset and the tables:

Modules:
    classifier: Ordered filename patterns -> record kind
    runner: Cycle orchestrator (version check, retrieval, per-file load)
    scheduler: APScheduler integration re-arming the next cycle
    version_marker: Persisted last-applied dataset version

Subpackages:
    extractors: Download service client, archive fetcher, streaming XML extractor
    loaders: PostgreSQL batch loader with shadow-table replacement

Architecture:
    A cycle flows strictly downstream:

    1. Check - compare the remote version with the version marker
    2. Retrieve - download and unpack the complete XML bundle
    3. Load - for every classified file, stream rows into its table

    Files are processed one at a time; a failing file never stops the cycle.

Usage:
    from ingestion.runner import IngestionRunner
    from ingestion.scheduler import IngestionScheduler

Example:
    runner = IngestionRunner(settings, session_maker)
    result = await runner.run_cycle()

    print(f"Loaded {result.get('rows_loaded', 0)} rows")

Error Handling:
    All components raise exceptions from core.exceptions; the runner decides
    which of them abort the cycle.
"""

__all__ = [
    "FileClassifier",
    "IngestionRunner",
    "IngestionScheduler",
    "VersionMarker",
    "DownloadServiceClient",
    "ArchiveFetcher",
    "XMLExtractor",
    "PostgresLoader",
]
