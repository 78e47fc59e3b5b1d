"""
Core utilities and configuration for the address registry reloader.

This package provides foundational components used throughout the pipeline:

Modules:
    config: Application configuration and environment variable management
    database: Engine and session factory construction
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities

Usage:
    from core.config import Settings
    from core.database import create_engine_from_settings, create_session_maker
    from core.exceptions import DecodeError, TransportError
    from core.logging import setup_logging

Example:
    settings = Settings()
    setup_logging(settings)

    engine = create_engine_from_settings(settings)
    session_maker = create_session_maker(engine)
    async with session_maker() as session:
        # Perform database operations
        pass
"""

__all__ = [
    "Settings",
    "create_engine_from_settings",
    "create_session_maker",
    "setup_logging",
    # Exceptions
    "ETLException",
    "ExtractionError",
    "TransportError",
    "ArchiveError",
    "DecodeError",
    "LoadError",
    "DatabaseError",
    "ShadowTableError",
    "VersionMarkerError",
]
