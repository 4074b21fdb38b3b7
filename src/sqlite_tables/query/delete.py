"""Delete queries: ``deleteBy...``."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from sqlite_tables.compiler import bind_arguments
from sqlite_tables.parsing import ParsedQuery, Verb
from sqlite_tables.query.base import QueryHandler

logger = logging.getLogger(__name__)


class DeleteHandler(QueryHandler):
    """Runs DELETE statements built from a method name."""

    def delete(self, query: str | ParsedQuery, args: Sequence[Any]) -> int:
        """Delete the matching rows and return how many were removed."""
        parsed = self.parsed(query, Verb.DELETE)
        compiled = self.compile(parsed)
        self.check_arity(parsed, compiled.param_count, args)

        with self.management.writable() as conn:
            count = conn.delete(self.table_name, compiled.where, bind_arguments(args))
        logger.debug("%s deleted %d row(s)", parsed.method_name, count)
        return count
