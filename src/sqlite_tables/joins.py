"""Hydration of relationship fields."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlite_tables.mapping import hydrate, instantiate, parse_default, to_db
from sqlite_tables.registry import MetadataRegistry, default_registry
from sqlite_tables.schema import quote_identifier
from sqlite_tables.storage import Connection
from sqlite_tables.types import EntityMetadata, JoinDescriptor

logger = logging.getLogger(__name__)

PLACEHOLDER_ATTR = "_sqlite_tables_placeholder"


def is_placeholder(entity: Any) -> bool:
    """Check if a related entity is a default-value stub rather than a fetched row.

    A placeholder only carries its key field; every other field keeps the
    class default.
    """
    return bool(getattr(entity, PLACEHOLDER_ATTR, False))


class JoinResolver:
    """Populates join fields from the related table."""

    def __init__(self, registry: MetadataRegistry | None = None) -> None:
        self.registry = registry or default_registry

    def resolve_all(
        self,
        conn: Connection,
        metadata: EntityMetadata,
        entity: Any,
        row: Mapping[str, Any] | None = None,
    ) -> Any:
        """Resolve every join field of a freshly hydrated entity."""
        for join in metadata.joins.values():
            self.resolve(conn, metadata, entity, join, row)
        return entity

    def resolve(
        self,
        conn: Connection,
        metadata: EntityMetadata,
        entity: Any,
        join: JoinDescriptor,
        row: Mapping[str, Any] | None = None,
    ) -> Any:
        """Resolve one join field and return the related instance (or None).

        Args:
            conn: Open connection used for the lookup.
            metadata: Metadata of the owning entity.
            entity: Owning entity instance; the join field is set on it.
            join: The join to resolve.
            row: Result row the entity came from, used when the foreign-key
                column has no field of its own.
        """
        value = self.foreign_key_value(metadata, entity, join, row)
        if value is None:
            if join.nullable:
                return None
            if join.has_default:
                stub = self.placeholder(join)
                setattr(entity, join.field_name, stub)
                return stub
            return None

        related = self.registry.related(join)
        source = self.registry.source_column(join)
        rows = conn.query(
            f"SELECT * FROM {quote_identifier(related.table_name)} "
            f"WHERE {quote_identifier(source.column_name)} = ?",
            [value],
        )
        if not rows:
            logger.debug(
                "No %s row with %s = %r for join field '%s'",
                related.table_name,
                source.column_name,
                value,
                join.field_name,
            )
            return None
        if len(rows) > 1:
            logger.warning(
                "Join field '%s' matched %d rows in %s on %s = %r; using the first",
                join.field_name,
                len(rows),
                related.table_name,
                source.column_name,
                value,
            )

        instance = hydrate(related, rows[0])
        setattr(entity, join.field_name, instance)
        return instance

    def foreign_key_value(
        self,
        metadata: EntityMetadata,
        entity: Any,
        join: JoinDescriptor,
        row: Mapping[str, Any] | None = None,
    ) -> Any:
        """Read a join's foreign-key value from the entity, else from the row."""
        column = metadata.column_by_name(join.target_column_name)
        if column is not None:
            return to_db(column, getattr(entity, column.field_name, None))
        if row is not None and join.target_column_name in row.keys():
            return row[join.target_column_name]
        return None

    def placeholder(self, join: JoinDescriptor) -> Any:
        """Build the related stub used for an absent join with a default value."""
        related = self.registry.related(join)
        key = related.primary_key or self.registry.source_column(join)
        stub = instantiate(related.entity_type)
        setattr(stub, key.field_name, parse_default(key, join.default_value or ""))
        setattr(stub, PLACEHOLDER_ATTR, True)
        return stub
