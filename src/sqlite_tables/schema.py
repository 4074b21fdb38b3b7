"""DDL synthesis from entity metadata."""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

from sqlite_tables.exceptions import SchemaError
from sqlite_tables.registry import MetadataRegistry, default_registry
from sqlite_tables.types import (
    ColumnDescriptor,
    EntityMetadata,
    JoinDescriptor,
    SemanticType,
)

if TYPE_CHECKING:
    from sqlite_tables.storage import SQLiteManagement

logger = logging.getLogger(__name__)


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


class SchemaBuilder:
    """Builds ``CREATE TABLE IF NOT EXISTS`` statements for entities."""

    def __init__(self, registry: MetadataRegistry | None = None) -> None:
        self.registry = registry or default_registry

    def build_create_table(self, metadata: EntityMetadata) -> str:
        """Build the DDL for an entity's table.

        Columns come out in field declaration order. A join whose foreign-key
        column is also declared as a plain column contributes only its
        uniqueness to that column's definition.

        Raises:
            SchemaError: On an unsupported type or an unparsable default.
        """
        definitions = [
            self._definition(column, join)
            for column, join in self._group_by_column(metadata)
        ]
        definitions.extend(self._foreign_keys(metadata))

        body = ",\n    ".join(definitions)
        name = quote_identifier(metadata.table_name)
        return f"CREATE TABLE IF NOT EXISTS {name} (\n    {body}\n);"

    def create_table(self, metadata: EntityMetadata, management: SQLiteManagement) -> str:
        """Create the entity's table if it does not exist yet and return the DDL."""
        ddl = self.build_create_table(metadata)
        with management.writable() as conn:
            conn.execute(ddl)
        logger.debug("Ensured table '%s'", metadata.table_name)
        return ddl

    def _group_by_column(
        self, metadata: EntityMetadata
    ) -> list[tuple[ColumnDescriptor | None, JoinDescriptor | None]]:
        """Pair plain and join descriptors that share a physical column name."""
        groups: dict[str, list[ColumnDescriptor | JoinDescriptor | None]] = {}
        for f in dataclasses.fields(metadata.entity_type):
            if f.name in metadata.columns:
                column = metadata.columns[f.name]
                groups.setdefault(column.column_name, [None, None])[0] = column
            elif f.name in metadata.joins:
                join = metadata.joins[f.name]
                slot = groups.setdefault(join.target_column_name, [None, None])
                if slot[1] is None:
                    slot[1] = join
        return [(g[0], g[1]) for g in groups.values()]  # type: ignore[misc]

    def _definition(self, column: ColumnDescriptor | None, join: JoinDescriptor | None) -> str:
        if column is not None:
            unique = column.unique or (join is not None and join.unique)
            return self._render(
                name=column.column_name,
                semantic_type=column.semantic_type,
                nullable=column.nullable,
                primary_key=column.primary_key,
                auto_increment=column.auto_increment,
                unique=unique,
                default_value=column.default_value,
            )

        assert join is not None
        return self._render(
            name=join.target_column_name,
            semantic_type=self._join_column_type(join),
            nullable=join.nullable,
            primary_key=False,
            auto_increment=False,
            unique=join.unique,
            default_value=join.default_value,
        )

    def _join_column_type(self, join: JoinDescriptor) -> SemanticType:
        """Type of a join-only column: the related source field's type."""
        try:
            source = self.registry.source_column(join)
        except SchemaError:
            return SemanticType.ENTITY
        return source.semantic_type

    def _render(
        self,
        name: str,
        semantic_type: SemanticType,
        nullable: bool,
        primary_key: bool,
        auto_increment: bool,
        unique: bool,
        default_value: str | None,
    ) -> str:
        parts = [quote_identifier(name), semantic_type.sql_type]
        if not nullable:
            parts.append("NOT NULL")
        if primary_key:
            parts.append("PRIMARY KEY")
        if auto_increment:
            if semantic_type.sql_type != "INTEGER":
                raise SchemaError(
                    f"AUTOINCREMENT column '{name}' must be an INTEGER column, "
                    f"not {semantic_type.sql_type}"
                )
            parts.append("AUTOINCREMENT")
        if unique and not primary_key:
            parts.append("UNIQUE")
        if default_value is not None and default_value != "":
            parts.append("DEFAULT " + default_literal(name, semantic_type, default_value))
        return " ".join(parts)

    def _foreign_keys(self, metadata: EntityMetadata) -> list[str]:
        clauses = []
        for join in metadata.joins.values():
            try:
                related = self.registry.related(join)
            except SchemaError:
                # Related type carries no table metadata: no constraint.
                continue
            source = self.registry.source_column(join)
            clauses.append(
                f"FOREIGN KEY ({quote_identifier(join.target_column_name)}) "
                f"REFERENCES {quote_identifier(related.table_name)} "
                f"({quote_identifier(source.column_name)})"
            )
        return clauses


def default_literal(column_name: str, semantic_type: SemanticType, value: str) -> str:
    """Render a default value as a SQL literal for the given column type.

    Raises:
        SchemaError: If the value does not parse as the column's type.
    """
    if semantic_type is SemanticType.TEXT:
        return "'" + value.replace("'", "''") + "'"

    if semantic_type is SemanticType.BOOLEAN:
        normalized = value.strip().lower()
        if normalized in ("true", "1"):
            return "1"
        if normalized in ("false", "0"):
            return "0"
        raise SchemaError(f"Invalid default value for column {column_name}: {value}")

    if semantic_type.is_integral:
        try:
            return str(int(value.strip()))
        except ValueError:
            raise SchemaError(
                f"Invalid default value for column {column_name}: {value}"
            ) from None

    if semantic_type is SemanticType.REAL:
        try:
            return repr(float(value.strip()))
        except ValueError:
            raise SchemaError(
                f"Invalid default value for column {column_name}: {value}"
            ) from None

    raise SchemaError(
        f"Unsupported type for default value: {semantic_type.value} for column {column_name}"
    )
