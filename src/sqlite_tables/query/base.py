"""Shared plumbing for the query handlers."""

from __future__ import annotations

from typing import Any, Sequence

from sqlite_tables.compiler import CompiledQuery, PredicateCompiler
from sqlite_tables.exceptions import QuerySyntaxError
from sqlite_tables.joins import JoinResolver
from sqlite_tables.parsing import MethodNameParser, ParsedQuery, Verb
from sqlite_tables.registry import MetadataRegistry, default_registry
from sqlite_tables.storage import SQLiteManagement


class QueryHandler:
    """Base for the per-verb handlers of one entity type.

    Args:
        entity_type: The entity class the handler queries.
        management: Connection source.
        registry: Metadata registry. Defaults to the shared registry.
        parser: Method-name parser. Handlers created together may share
            one; parsing is serialized.
    """

    def __init__(
        self,
        entity_type: type,
        management: SQLiteManagement,
        registry: MetadataRegistry | None = None,
        parser: MethodNameParser | None = None,
    ) -> None:
        self.registry = registry or default_registry
        self.metadata = self.registry.describe(entity_type)
        self.management = management
        self.parser = parser or MethodNameParser()
        self.compiler = PredicateCompiler()
        self.joins = JoinResolver(self.registry)

    @property
    def table_name(self) -> str:
        return self.metadata.table_name

    def parsed(self, query: str | ParsedQuery, *verbs: Verb) -> ParsedQuery:
        """Parse a method name (if needed) and check that its verb fits this handler."""
        parsed = self.parser.parse(query) if isinstance(query, str) else query
        if parsed.verb not in verbs:
            raise QuerySyntaxError(
                f"Method '{parsed.method_name}' is not a "
                f"{' or '.join(v.value for v in verbs)} query"
            )
        return parsed

    def compile(self, parsed: ParsedQuery) -> CompiledQuery:
        return self.compiler.compile(parsed, self.metadata.field_to_column)

    def check_arity(self, parsed: ParsedQuery, expected: int, args: Sequence[Any]) -> None:
        """Reject a call whose argument count does not match the method name."""
        if len(args) != expected:
            raise QuerySyntaxError(
                f"Method '{parsed.method_name}' expects {expected} argument(s), got {len(args)}"
            )
