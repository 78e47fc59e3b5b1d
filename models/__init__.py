"""
SQLAlchemy models for the tables the reloader reads and writes.

Models:
    base: Base declarative class
    config_entry: Key/value config table holding the version marker
    registry_tables: One Core Table per record schema in the catalogue

Database Schema:
    Registry tables are pre-existing in production; `scripts/init_db.py`
    creates them from the same metadata for fresh environments. Shadow
    tables are never declared here, the loader derives them at load time.

Usage:
    from models.config_entry import ConfigEntry, VERSION_MARKER_KEY
    from models.registry_tables import REGISTRY_TABLES, shadow_of

Example:
    table = REGISTRY_TABLES["HOUSE"]
    shadow = shadow_of(table, "temp_house")
    assert [c.name for c in shadow.columns] == [c.name for c in table.columns]
"""

__all__ = [
    "Base",
    "ConfigEntry",
    "VERSION_MARKER_KEY",
    "REGISTRY_TABLES",
    "build_table",
    "shadow_of",
]
