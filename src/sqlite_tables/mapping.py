"""Conversion between entity field values and SQLite column values."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Any, Mapping

from sqlite_tables.exceptions import SchemaError
from sqlite_tables.types import ColumnDescriptor, EntityMetadata, SemanticType


def instantiate(entity_type: type) -> Any:
    """Create an empty entity instance for hydration.

    Raises:
        SchemaError: If the class cannot be built without arguments.
    """
    try:
        return entity_type()
    except TypeError as e:
        raise SchemaError(
            f"Entity class {entity_type.__name__} must be constructible without arguments: {e}"
        ) from e


def epoch_millis(value: datetime) -> int:
    return round(value.timestamp() * 1000)


def to_db(column: ColumnDescriptor, value: Any) -> Any:
    """Convert a field value into the value stored in its column."""
    if value is None:
        return None
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, datetime):
        return epoch_millis(value)
    if isinstance(value, bytearray):
        return bytes(value)
    return value


def from_db(column: ColumnDescriptor, raw: Any) -> Any:
    """Convert a stored column value into the field's Python value.

    SQL NULL maps to None whatever the column type.
    """
    if raw is None:
        return None

    semantic_type = column.semantic_type
    if semantic_type is SemanticType.TEXT:
        return str(raw)
    if semantic_type is SemanticType.BOOLEAN:
        return int(raw) == 1
    if semantic_type in (SemanticType.INTEGER, SemanticType.BIGINT, SemanticType.ENTITY):
        return int(raw)
    if semantic_type is SemanticType.REAL:
        return float(raw)
    if semantic_type is SemanticType.BLOB:
        return bytes(raw)
    if semantic_type is SemanticType.TIMESTAMP:
        return datetime.fromtimestamp(int(raw) / 1000)
    return raw


def hydrate(metadata: EntityMetadata, row: sqlite3.Row | Mapping[str, Any]) -> Any:
    """Build an entity from a result row, column by column.

    Join fields are left for the join resolver.
    """
    entity = instantiate(metadata.entity_type)
    keys = set(row.keys())
    for column in metadata.columns.values():
        if column.column_name in keys:
            setattr(entity, column.field_name, from_db(column, row[column.column_name]))
    return entity


def column_values(metadata: EntityMetadata, entity: Any) -> dict[str, Any]:
    """Return the stored value of every plain column, keyed by column name."""
    return {
        column.column_name: to_db(column, getattr(entity, column.field_name, None))
        for column in metadata.columns.values()
    }


def parse_default(column: ColumnDescriptor, value: str) -> Any:
    """Parse a declared default literal into the column's Python value.

    Raises:
        SchemaError: If the literal does not fit the column type.
    """
    semantic_type = column.semantic_type
    try:
        if semantic_type is SemanticType.BOOLEAN:
            return value.strip().lower() in ("true", "1")
        if semantic_type is SemanticType.REAL:
            return float(value)
        if semantic_type.is_integral:
            return int(value)
    except ValueError:
        raise SchemaError(
            f"Invalid default value for column {column.column_name}: {value}"
        ) from None
    return value
