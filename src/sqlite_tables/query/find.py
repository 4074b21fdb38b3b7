"""Find queries: ``findAll``, ``findBy...``, ``findAllBy...``."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from sqlite_tables.compiler import bind_arguments
from sqlite_tables.mapping import hydrate
from sqlite_tables.parsing import ParsedQuery, Verb
from sqlite_tables.query.base import QueryHandler
from sqlite_tables.schema import quote_identifier
from sqlite_tables.storage import Connection

logger = logging.getLogger(__name__)


class FindHandler(QueryHandler):
    """Runs SELECT queries and maps the rows back into entities."""

    def find_all(self) -> list[Any]:
        """Return every row of the table."""
        return self.find("findAll")

    def find(
        self,
        query: str | ParsedQuery,
        args: Sequence[Any] = (),
        many: bool | None = None,
    ) -> Any:
        """Run a find query.

        Args:
            query: Method name such as ``findAllByLineOrderByNameDesc``, or
                its parsed form.
            args: One value per predicate term, in name order.
            many: Return a list when True, the first entity (or None) when
                False. Defaults to a list for ``findAll...`` names only.

        Returns:
            A list of entities, or a single entity or None.

        Raises:
            QuerySyntaxError: If the name or the argument count is wrong.
            FieldNotFoundError: If the name mentions an unmapped field.
            UnsupportedArgumentTypeError: If an argument cannot be bound.
        """
        parsed = self.parsed(query, Verb.FIND, Verb.FIND_ALL)
        compiled = self.compile(parsed)
        self.check_arity(parsed, compiled.param_count, args)
        if many is None:
            many = parsed.verb is Verb.FIND_ALL

        sql = f"SELECT * FROM {quote_identifier(self.table_name)}{compiled.sql_suffix()}"
        params = bind_arguments(args)
        with self.management.readable() as conn:
            rows = conn.query(sql, params)
            if not many:
                rows = rows[:1]
            entities = self.map_rows(conn, rows)

        logger.debug("%s returned %d row(s)", parsed.method_name, len(entities))
        if many:
            return entities
        return entities[0] if entities else None

    def map_rows(self, conn: Connection, rows: Sequence[Any]) -> list[Any]:
        """Hydrate rows into entities and resolve their join fields."""
        entities = []
        for row in rows:
            entity = hydrate(self.metadata, row)
            self.joins.resolve_all(conn, self.metadata, entity, row)
            entities.append(entity)
        return entities
