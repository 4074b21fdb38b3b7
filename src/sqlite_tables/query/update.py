"""Update queries: ``updateBy...`` and ``update<Fields>By...``."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Sequence

from sqlite_tables.compiler import bind_argument, bind_arguments
from sqlite_tables.exceptions import FieldNotFoundError, QuerySyntaxError
from sqlite_tables.mapping import epoch_millis
from sqlite_tables.parsing import ParsedQuery, Verb
from sqlite_tables.query.base import QueryHandler

logger = logging.getLogger(__name__)


def bind_value(value: Any) -> Any:
    """Bind a value written by an UPDATE; unlike predicate arguments it may be NULL."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return epoch_millis(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return bind_argument(value)


class UpdateHandler(QueryHandler):
    """Runs UPDATE statements built from a method name."""

    def update(self, query: str | ParsedQuery, args: Sequence[Any]) -> int:
        """Run an update query and return the number of rows changed.

        Two call shapes are accepted::

            updateByName({"active": False}, "P1")
            updateActiveByName(False, "P1")

        In the first, the leading mapping is keyed by column or field name.
        In the second, one new value per named field comes before the
        predicate arguments.

        Raises:
            QuerySyntaxError: On a missing or empty mapping, or a wrong
                argument count.
            FieldNotFoundError: If a key or field is not mapped.
        """
        parsed = self.parsed(query, Verb.UPDATE)
        compiled = self.compile(parsed)

        if parsed.set_fields:
            count = len(parsed.set_fields)
            self.check_arity(parsed, count + compiled.param_count, args)
            values = {
                self.compiler.resolve(name, self.metadata.field_to_column): bind_value(value)
                for name, value in zip(parsed.set_fields, args[:count])
            }
            predicate_args = args[count:]
        else:
            if not args or not isinstance(args[0], Mapping):
                raise QuerySyntaxError(
                    f"Method '{parsed.method_name}' takes a mapping of new column values "
                    "as its first argument"
                )
            if not args[0]:
                raise QuerySyntaxError(
                    f"Method '{parsed.method_name}' was given no column values to update"
                )
            self.check_arity(parsed, compiled.param_count + 1, args)
            values = {self._column_for(key): bind_value(value) for key, value in args[0].items()}
            predicate_args = args[1:]

        params = bind_arguments(predicate_args)
        with self.management.writable() as conn:
            count = conn.update(self.table_name, values, compiled.where, params)
        logger.debug("%s updated %d row(s)", parsed.method_name, count)
        return count

    def _column_for(self, key: str) -> str:
        column_name = self.metadata.resolve_column_name(key)
        if column_name is None:
            raise FieldNotFoundError(key)
        return column_name
