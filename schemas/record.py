"""
Record schemas: ordered column declarations bound to an XML element and a table
"""

from pydantic import BaseModel, validator
from typing import Any, Callable, Dict, Mapping, Optional, Tuple
import enum


class ColumnType(str, enum.Enum):
    """Semantic column types"""
    TEXT = "text"
    INTEGER = "integer"
    BYTE = "byte"


def coerce_text(value: Optional[str]) -> str:
    if value is None:
        return ""
    return value


# Integer columns are int4
INT_MIN = -2147483648
INT_MAX = 2147483647


def coerce_integer(value: Optional[str]) -> int:
    if value is None:
        return 0
    try:
        number = int(value.strip())
    except (TypeError, ValueError):
        return 0
    if INT_MIN <= number <= INT_MAX:
        return number
    return 0


def coerce_byte(value: Optional[str]) -> int:
    number = coerce_integer(value)
    if 0 <= number <= 255:
        return number
    return 0


COERCERS: Dict[ColumnType, Callable[[Optional[str]], Any]] = {
    ColumnType.TEXT: coerce_text,
    ColumnType.INTEGER: coerce_integer,
    ColumnType.BYTE: coerce_byte,
}

ZERO_VALUES: Dict[ColumnType, Any] = {
    ColumnType.TEXT: "",
    ColumnType.INTEGER: 0,
    ColumnType.BYTE: 0,
}


class ColumnSpec(BaseModel):
    """
    One column of a record schema.

    `name` is the destination column (case-folded field name) and
    `attribute` is the XML attribute the value is read from.
    """

    name: str
    attribute: str
    type: ColumnType = ColumnType.TEXT

    @validator("name")
    def name_is_case_folded(cls, v):
        if v != v.lower():
            raise ValueError(f"Column name must be lower case: {v}")
        return v

    def extract(self, attributes: Mapping[str, str]) -> Any:
        """Read this column from decoded element attributes"""
        return COERCERS[self.type](attributes.get(self.attribute))

    class Config:
        frozen = True


class RecordSchema(BaseModel):
    """
    Static description of one record kind.

    Binds an ordered column list to exactly one XML element name and one
    target table. Rows produced through `to_row` always cover every column.
    """

    key: str
    tag: str
    table: str
    element: str
    columns: Tuple[ColumnSpec, ...]

    @validator("columns")
    def columns_are_unique(cls, v):
        if not v:
            raise ValueError("Record schema needs at least one column")
        names = [c.name for c in v]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate column names: {names}")
        return v

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(c.name for c in self.columns)

    def to_row(self, attributes: Mapping[str, str]) -> Dict[str, Any]:
        """Produce an ingest row from the attributes of one decoded element"""
        return {column.name: column.extract(attributes) for column in self.columns}

    class Config:
        frozen = True


def column(attribute: str, type: ColumnType = ColumnType.TEXT, name: Optional[str] = None) -> ColumnSpec:
    """Shorthand for registry declarations; the column name defaults to the lowered attribute."""
    return ColumnSpec(name=name or attribute.lower(), attribute=attribute, type=type)
