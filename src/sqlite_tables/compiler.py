"""Compile parsed method names into SQL fragments and bind arguments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from sqlite_tables.exceptions import FieldNotFoundError, QuerySyntaxError, UnsupportedArgumentTypeError
from sqlite_tables.parsing import ParsedQuery
from sqlite_tables.schema import quote_identifier
from sqlite_tables.types import field_key

# Parameter kinds accepted by the driver as-is.
SqlParameter = str | int | float


@dataclass(frozen=True)
class CompiledQuery:
    """WHERE and ORDER BY fragments for one parsed method name."""

    where: str
    order_by: str
    param_count: int

    def sql_suffix(self) -> str:
        """Return `` WHERE ...`` / `` ORDER BY ...`` ready to append to a statement."""
        suffix = ""
        if self.where:
            suffix += f" WHERE {self.where}"
        if self.order_by:
            suffix += f" ORDER BY {self.order_by}"
        return suffix


class PredicateCompiler:
    """Turns predicate terms into ``<column> = ?`` comparisons."""

    def compile(self, parsed: ParsedQuery, field_to_column: Mapping[str, str]) -> CompiledQuery:
        """Compile a parsed method name against an entity's column mapping.

        Terms are joined by their connectors strictly left to right; no
        parentheses are added.

        Args:
            parsed: Output of the method-name parser.
            field_to_column: Normalized field key to physical column name.

        Returns:
            The compiled WHERE/ORDER BY fragments and the number of predicate
            placeholders.

        Raises:
            FieldNotFoundError: If a term or the order field is not mapped.
            QuerySyntaxError: If the sort direction is invalid.
        """
        parts: list[str] = []
        for i, term in enumerate(parsed.predicate_terms):
            if i > 0:
                parts.append(parsed.connectors[i - 1].upper())
            column_name = self.resolve(term, field_to_column)
            parts.append(f"{quote_identifier(column_name)} = ?")

        order_by = ""
        if parsed.order_field is not None:
            order_by = self.compile_order(
                self.resolve(parsed.order_field, field_to_column), parsed.direction
            )

        return CompiledQuery(
            where=" ".join(parts),
            order_by=order_by,
            param_count=len(parsed.predicate_terms),
        )

    def compile_order(self, column_name: str, direction: str) -> str:
        """Render an ``ORDER BY`` term.

        Raises:
            QuerySyntaxError: If ``direction`` is not ASC or DESC.
        """
        normalized = direction.upper()
        if normalized not in ("ASC", "DESC"):
            raise QuerySyntaxError(f"Invalid sort direction: {direction}")
        return f"{quote_identifier(column_name)} {normalized}"

    def resolve(self, field_name: str, field_to_column: Mapping[str, str]) -> str:
        """Resolve a field fragment to its physical column name."""
        column_name = field_to_column.get(field_key(field_name))
        if column_name is None:
            raise FieldNotFoundError(field_name)
        return column_name


def bind_argument(value: Any) -> SqlParameter:
    """Convert one call argument into a typed SQLite parameter.

    ``bool`` is checked before ``int`` since it is a subclass.

    Raises:
        UnsupportedArgumentTypeError: For any other type, including None.
    """
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, (str, int, float)):
        return value
    raise UnsupportedArgumentTypeError(value)


def bind_arguments(values: Sequence[Any]) -> list[SqlParameter]:
    """Bind every argument of a call, in order."""
    return [bind_argument(v) for v in values]
