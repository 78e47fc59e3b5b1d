"""
Custom exceptions for the registry reloader with structured error context.

Each exception carries context information for debugging and log
correlation. Library code raises these; only the ingestion runner decides
whether a failure aborts the whole cycle or just the current file.

Exception Hierarchy:
    ETLException (base)
    ├── ExtractionError
    │   ├── TransportError      (version check / download, fatal to the cycle)
    │   ├── ArchiveError        (unpack, fatal to the cycle)
    │   └── DecodeError         (malformed XML, fatal to one file)
    ├── LoadError
    │   ├── DatabaseError       (DDL / DML / connection, fatal to one file)
    │   └── ShadowTableError    (shadow create / swap, fatal to one file)
    └── VersionMarkerError      (marker read / write, fatal to the cycle)
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class ETLException(Exception):
    """
    Base exception for all reloader errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (file, table, url, ...)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        # Add timestamp to context
        self.context["error_timestamp"] = self.timestamp.isoformat()

        # Chain original exception if provided
        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Extraction Errors
# ============================================================================

class ExtractionError(ETLException):
    """Base exception for retrieval and decoding failures."""
    pass


class TransportError(ExtractionError):
    """
    Exception raised when the version check or the archive download fails.

    Context should include:
        - url: The endpoint or download URL
        - status_code: HTTP status code (if applicable)
    """
    pass


class ArchiveError(ExtractionError):
    """
    Exception raised when the downloaded archive cannot be unpacked.

    Context should include:
        - archive_path: Path to the archive
        - extract_dir: Destination directory
    """
    pass


class DecodeError(ExtractionError):
    """
    Exception raised when an XML extract is malformed.

    Context should include:
        - file_path: Path to the extract (if known)
        - element_name: Element being extracted
        - position: (line, column) reported by the parser
        - rows_decoded: Rows yielded before the failure
    """
    pass


# ============================================================================
# Load Errors
# ============================================================================

class LoadError(ETLException):
    """Base exception for data loading failures."""
    pass


class DatabaseError(LoadError):
    """
    Exception raised when database operations fail.

    Context should include:
        - operation: Type of database operation (TRUNCATE, INSERT, ...)
        - table_name: Name of the table written to
        - rows_loaded: Rows committed before the failure
    """
    pass


class ShadowTableError(LoadError):
    """
    Exception raised when a shadow table cannot be created or swapped in.

    Context should include:
        - table_name: Target table
        - shadow_table: Shadow table name
        - operation: CREATE or SWAP
    """
    pass


# ============================================================================
# Version Marker Errors
# ============================================================================

class VersionMarkerError(ETLException):
    """
    Exception raised when the persisted version marker cannot be read or written.

    Context should include:
        - operation: read or write
        - marker_key: Key of the config row
    """
    pass
