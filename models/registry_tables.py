"""
SQLAlchemy tables built from the record schema catalogue
"""

from typing import Dict
from sqlalchemy import Column, Integer, MetaData, SmallInteger, Table, Text
from models.base import Base
from schemas.record import ColumnType, RecordSchema
from schemas.registry import SCHEMAS

COLUMN_TYPES = {
    ColumnType.TEXT: Text,
    ColumnType.INTEGER: Integer,
    ColumnType.BYTE: SmallInteger,
}


def build_table(schema: RecordSchema, metadata: MetaData) -> Table:
    """Declare the target table of a record schema on the given metadata"""
    return Table(
        schema.table,
        metadata,
        *(Column(c.name, COLUMN_TYPES[c.type]) for c in schema.columns),
    )


def shadow_of(table: Table, shadow_name: str) -> Table:
    """Structural copy of a table under another name, on private metadata"""
    return table.to_metadata(MetaData(), name=shadow_name)


# Several kinds share a table layout but every kind owns its own table.
REGISTRY_TABLES: Dict[str, Table] = {
    schema.key: build_table(schema, Base.metadata) for schema in SCHEMAS
}
