"""Exists queries: ``existsBy...``."""

from __future__ import annotations

from typing import Any, Sequence

from sqlite_tables.compiler import bind_arguments
from sqlite_tables.parsing import ParsedQuery, Verb
from sqlite_tables.query.base import QueryHandler
from sqlite_tables.schema import quote_identifier


class ExistsHandler(QueryHandler):
    def exists(self, query: str | ParsedQuery, args: Sequence[Any]) -> bool:
        """Check if at least one row matches the predicate."""
        parsed = self.parsed(query, Verb.EXISTS)
        compiled = self.compile(parsed)
        self.check_arity(parsed, compiled.param_count, args)

        sql = f"SELECT COUNT(*) FROM {quote_identifier(self.table_name)}{compiled.sql_suffix()}"
        with self.management.readable() as conn:
            rows = conn.query(sql, bind_arguments(args))
        return rows[0][0] > 0
