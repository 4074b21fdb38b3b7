"""Save: validate, resolve joins, insert, write back the generated key."""

from __future__ import annotations

import logging
from typing import Any

from sqlite_tables import config
from sqlite_tables.exceptions import QuerySyntaxError
from sqlite_tables.joins import is_placeholder
from sqlite_tables.mapping import to_db
from sqlite_tables.query.base import QueryHandler
from sqlite_tables.query.validator import Validator
from sqlite_tables.storage import Connection
from sqlite_tables.types import EntityMetadata

logger = logging.getLogger(__name__)


def _key_unset(metadata: EntityMetadata, entity: Any) -> bool:
    pk = metadata.primary_key
    if pk is None or not pk.auto_increment:
        return False
    value = getattr(entity, pk.field_name, None)
    return value is None or value == 0


class SaveHandler(QueryHandler):
    """Inserts entities. Saving never updates an existing row."""

    def __init__(
        self,
        *args: Any,
        validator: Validator | None = None,
        validate_on_save: bool | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.validator = validator or Validator(
            self.metadata.entity_type, self.management, self.registry, self.parser
        )
        self.validate_on_save = (
            config.VALIDATE_ON_SAVE if validate_on_save is None else validate_on_save
        )

    def save(self, entity: Any) -> Any:
        """Insert an entity and return it with its generated key set.

        Related entities whose auto-increment key is unset are inserted
        first; the related source value is then copied into this entity's
        foreign-key column. With validation on, those related entities are
        validated before anything is written.

        Raises:
            QuerySyntaxError: If the entity is None or of the wrong type.
            ValidationError: If validation is enabled and fails.
            StorageError: If SQLite rejects the insert.
        """
        if entity is None:
            raise QuerySyntaxError("Cannot save None")
        if not isinstance(entity, self.metadata.entity_type):
            raise QuerySyntaxError(
                f"Expected a {self.metadata.entity_type.__name__} entity, "
                f"got {type(entity).__name__}"
            )

        if self.validate_on_save:
            self._validate_related(self.metadata, entity)
            self.validator.validate(entity)

        with self.management.writable() as conn:
            self._insert(conn, self.metadata, entity)
        return entity

    def _validate_related(self, metadata: EntityMetadata, entity: Any) -> None:
        """Validate the unsaved related entities that the insert will cascade to."""
        for join in metadata.joins.values():
            related = getattr(entity, join.field_name, None)
            if related is None or is_placeholder(related):
                continue
            related_metadata = self.registry.related(join)
            if not _key_unset(related_metadata, related):
                continue
            self._validate_related(related_metadata, related)
            Validator(
                related_metadata.entity_type, self.management, self.registry, self.parser
            ).validate(related)

    def _insert(self, conn: Connection, metadata: EntityMetadata, entity: Any) -> int:
        fk_values = self._resolve_joins(conn, metadata, entity)

        values: dict[str, Any] = {}
        for column in metadata.columns.values():
            value = getattr(entity, column.field_name, None)
            if value is None or (column.auto_increment and value == 0):
                continue
            values[column.column_name] = to_db(column, value)
        for column_name, value in fk_values.items():
            if value is not None:
                values.setdefault(column_name, value)

        row_id = conn.insert(metadata.table_name, values)
        pk = metadata.primary_key
        if pk is not None and pk.auto_increment:
            setattr(entity, pk.field_name, row_id)
        logger.debug("Inserted %s row %d", metadata.table_name, row_id)
        return row_id

    def _resolve_joins(self, conn: Connection, metadata: EntityMetadata, entity: Any) -> dict[str, Any]:
        """Make every join's key value available before the insert.

        Returns:
            Foreign-key values for columns that have no field of their own.
        """
        fk_values: dict[str, Any] = {}
        for join in metadata.joins.values():
            related = getattr(entity, join.field_name, None)
            if related is None:
                if not join.has_default:
                    continue
                related = self.joins.placeholder(join)
                setattr(entity, join.field_name, related)

            related_metadata = self.registry.related(join)
            if not is_placeholder(related) and _key_unset(related_metadata, related):
                self._insert(conn, related_metadata, related)

            source = self.registry.source_column(join)
            value = to_db(source, getattr(related, source.field_name, None))
            column = metadata.column_by_name(join.target_column_name)
            if column is not None:
                if value is not None:
                    setattr(entity, column.field_name, value)
            else:
                fk_values[join.target_column_name] = value
        return fk_values
