"""
Pydantic schemas describing record kinds and remote payloads.

Schemas:
    record: ColumnSpec / RecordSchema and best-effort value coercion
    registry: Static catalogue of FIAS record kinds
    version: Download service version payload

Usage:
    from schemas.registry import REGISTRY, get_schema
    from schemas.version import DownloadFileInfo

Example:
    schema = get_schema("HOUSE")
    row = schema.to_row({"HOUSEGUID": "abc", "COUNTER": "3"})
    assert row["counter"] == 3
    assert row["housenum"] == ""
"""

__all__ = [
    "ColumnType",
    "ColumnSpec",
    "RecordSchema",
    "REGISTRY",
    "CLASSIFICATION_ORDER",
    "get_schema",
    "DownloadFileInfo",
]
