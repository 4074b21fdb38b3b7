"""Descriptor types for mapped entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from sqlite_tables.exceptions import SchemaError


class SemanticType(Enum):
    """Column value kinds supported by the mapper."""

    TEXT = "text"
    INTEGER = "integer"
    BIGINT = "bigint"
    REAL = "real"
    BLOB = "blob"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    ENTITY = "entity"

    @property
    def sql_type(self) -> str:
        """Return the SQLite column type used in DDL."""
        types = {
            SemanticType.TEXT: "TEXT",
            SemanticType.INTEGER: "INTEGER",
            SemanticType.BOOLEAN: "INTEGER",  # stored as 0/1
            SemanticType.BIGINT: "BIGINT",
            SemanticType.TIMESTAMP: "BIGINT",  # epoch milliseconds
            SemanticType.REAL: "REAL",
            SemanticType.BLOB: "BLOB",
            SemanticType.ENTITY: "INTEGER",
        }
        return types[self]

    @property
    def is_integral(self) -> bool:
        return self in (
            SemanticType.INTEGER,
            SemanticType.BIGINT,
            SemanticType.TIMESTAMP,
            SemanticType.ENTITY,
        )


def field_key(name: str) -> str:
    """Normalize a field name or camelCase fragment for lookups.

    ``DateCreation``, ``dateCreation`` and ``date_creation`` all map to the
    same key.
    """
    return name.replace("_", "").lower()


@dataclass(frozen=True)
class ColumnDescriptor:
    """Static metadata about one mapped column field."""

    field_name: str
    column_name: str
    semantic_type: SemanticType
    nullable: bool = True
    unique: bool = False
    primary_key: bool = False
    auto_increment: bool = False
    default_value: str | None = None

    def __post_init__(self) -> None:
        if self.auto_increment and not self.primary_key:
            raise SchemaError(
                f"Column '{self.column_name}' is AUTOINCREMENT but not a primary key"
            )
        if self.nullable and self.primary_key:
            raise SchemaError(
                f"Column '{self.column_name}' cannot be both nullable and a primary key"
            )

    @property
    def has_default(self) -> bool:
        return self.default_value is not None and self.default_value != ""


@dataclass(frozen=True)
class JoinDescriptor:
    """Static metadata about a foreign-key relationship field."""

    field_name: str
    target_column_name: str
    related_entity_type: type
    source_field_name: str
    nullable: bool = False
    unique: bool = False
    default_value: str | None = None

    @property
    def has_default(self) -> bool:
        return self.default_value is not None and self.default_value != ""


@dataclass(frozen=True)
class EntityMetadata:
    """Table, column and join metadata for one entity type.

    Mappings are keyed by Python field name and keep declaration order.
    """

    entity_type: type
    table_name: str
    columns: Mapping[str, ColumnDescriptor] = field(default_factory=dict)
    joins: Mapping[str, JoinDescriptor] = field(default_factory=dict)
    primary_key: ColumnDescriptor | None = None

    def __post_init__(self) -> None:
        if not self.table_name:
            raise SchemaError(
                f"Entity class {self.entity_type.__name__} has no table name defined"
            )
        if not self.columns and not self.joins:
            raise SchemaError(
                f"Entity class {self.entity_type.__name__} has no columns defined"
            )
        # Freeze the mappings so shared metadata cannot be mutated.
        object.__setattr__(self, "columns", MappingProxyType(dict(self.columns)))
        object.__setattr__(self, "joins", MappingProxyType(dict(self.joins)))

    @property
    def field_to_column(self) -> dict[str, str]:
        """Map normalized field keys to physical column names.

        Join fields map to their foreign-key column.
        """
        result = {field_key(name): c.column_name for name, c in self.columns.items()}
        for name, j in self.joins.items():
            result.setdefault(field_key(name), j.target_column_name)
        return result

    def get_column(self, field_name: str) -> ColumnDescriptor | None:
        """Get a column descriptor by field name or camelCase fragment."""
        key = field_key(field_name)
        for name, c in self.columns.items():
            if field_key(name) == key:
                return c
        return None

    def get_join(self, field_name: str) -> JoinDescriptor | None:
        """Get a join descriptor by field name or camelCase fragment."""
        key = field_key(field_name)
        for name, j in self.joins.items():
            if field_key(name) == key:
                return j
        return None

    def column_by_name(self, column_name: str) -> ColumnDescriptor | None:
        """Get the plain column descriptor stored under a physical column name."""
        for c in self.columns.values():
            if c.column_name == column_name:
                return c
        return None

    def resolve_column_name(self, name: str) -> str | None:
        """Resolve a physical column name or a field name to a column name."""
        if self.column_by_name(name) is not None:
            return name
        for j in self.joins.values():
            if j.target_column_name == name:
                return name
        return self.field_to_column.get(field_key(name))

