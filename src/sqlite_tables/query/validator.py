"""Null and uniqueness checks run before an entity is written."""

from __future__ import annotations

import logging
from typing import Any

from sqlite_tables.exceptions import QuerySyntaxError, ValidationError
from sqlite_tables.mapping import to_db
from sqlite_tables.query.base import QueryHandler
from sqlite_tables.schema import quote_identifier
from sqlite_tables.storage import Connection

logger = logging.getLogger(__name__)


class Validator(QueryHandler):
    """Checks an entity against its column and join constraints.

    Every violation is collected; nothing is written.
    """

    def validate(self, entity: Any) -> bool:
        """Validate an entity.

        Returns:
            True if the entity satisfies every constraint.

        Raises:
            ValidationError: Carrying every violation message.
            QuerySyntaxError: If the entity is None.
        """
        errors = self.errors(entity)
        if errors:
            logger.info("Validation of %s failed: %s", type(entity).__name__, errors)
            raise ValidationError(errors)
        return True

    def is_valid(self, entity: Any) -> bool:
        """Like :meth:`validate`, but returns False instead of raising."""
        return not self.errors(entity)

    def errors(self, entity: Any) -> list[str]:
        """Return the violation messages for an entity, in field order."""
        if entity is None:
            raise QuerySyntaxError("Cannot validate None")
        errors: list[str] = []
        with self.management.readable() as conn:
            self._check_columns(conn, entity, errors)
            self._check_joins(conn, entity, errors)
        return errors

    def _check_columns(self, conn: Connection, entity: Any, errors: list[str]) -> None:
        for column in self.metadata.columns.values():
            if column.auto_increment:
                continue
            value = getattr(entity, column.field_name, None)

            if value is None:
                if not column.nullable and not column.has_default and not self._filled_by_join(
                    entity, column.column_name
                ):
                    errors.append(f"Field '{column.field_name}' cannot be null")
                continue

            if column.unique and self._exists(conn, column.column_name, to_db(column, value)):
                errors.append(
                    f"Field '{column.field_name}' must be unique. Value '{value}' already exists"
                )

    def _check_joins(self, conn: Connection, entity: Any, errors: list[str]) -> None:
        for join in self.metadata.joins.values():
            related = getattr(entity, join.field_name, None)

            if related is None:
                if not join.nullable and not join.has_default:
                    errors.append(f"Join field '{join.field_name}' cannot be null")
                continue

            if join.unique:
                source = self.registry.source_column(join)
                value = to_db(source, getattr(related, source.field_name, None))
                if value is not None and self._exists(conn, join.target_column_name, value):
                    errors.append(
                        f"Join field '{join.field_name}' must be unique. "
                        f"Value '{value}' already exists"
                    )

    def _filled_by_join(self, entity: Any, column_name: str) -> bool:
        """Check if a populated join will supply this column's value on save."""
        for join in self.metadata.joins.values():
            if join.target_column_name != column_name:
                continue
            if getattr(entity, join.field_name, None) is not None or join.has_default:
                return True
        return False

    def _exists(self, conn: Connection, column_name: str, value: Any) -> bool:
        rows = conn.query(
            f"SELECT COUNT(*) FROM {quote_identifier(self.table_name)} "
            f"WHERE {quote_identifier(column_name)} = ?",
            [value],
        )
        return rows[0][0] > 0
