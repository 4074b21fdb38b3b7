"""Declarative schema annotations for entity classes.

An entity is a dataclass decorated with :func:`table` whose mapped fields
are declared with :func:`column` or :func:`join`::

    @table("products")
    class Product:
        id: int = column("id", primary_key=True, auto_increment=True)
        name: str = column("name", unique=True)
        line: Line | None = join("line", Line, source="id")
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from sqlite_tables.types import SemanticType

T = TypeVar("T")

TABLE_NAME_ATTR = "__table_name__"
COLUMN_METADATA_KEY = "sqlite_tables.column"
JOIN_METADATA_KEY = "sqlite_tables.join"


@dataclass(frozen=True)
class ColumnSpec:
    """Column options as written on the field."""

    name: str = ""
    nullable: bool | None = None  # None = not null for primary keys, nullable otherwise
    primary_key: bool = False
    auto_increment: bool = False
    unique: bool = False
    default_value: str | None = None
    sql_type: SemanticType | None = None


@dataclass(frozen=True)
class JoinSpec:
    """Join options as written on the field."""

    target_name: str
    relationship: type | str
    source: str
    default_value: str | None = None
    unique: bool = False
    nullable: bool = False


def table(name: str) -> Callable[[type[T]], type[T]]:
    """Mark a class as an entity stored in table ``name``.

    The class is turned into a dataclass if it is not one already.
    """

    def decorate(cls: type[T]) -> type[T]:
        if not dataclasses.is_dataclass(cls):
            cls = dataclass(cls)
        setattr(cls, TABLE_NAME_ATTR, name)
        return cls

    return decorate


def column(
    name: str = "",
    *,
    nullable: bool | None = None,
    primary_key: bool = False,
    auto_increment: bool = False,
    unique: bool = False,
    default_value: str | None = None,
    sql_type: SemanticType | None = None,
    default: Any = None,
) -> Any:
    """Declare a mapped column field.

    Args:
        name: Physical column name. Defaults to the field name.
        nullable: Whether the column accepts NULL. Defaults to False for
            primary keys and True otherwise.
        primary_key: Whether the column is the primary key.
        auto_increment: Whether the store assigns the value (primary keys only).
        unique: Whether values must be unique.
        default_value: SQL default literal, written as a string.
        sql_type: Override the type inferred from the field annotation.
        default: Python-side default for new instances.
    """
    spec = ColumnSpec(
        name=name,
        nullable=nullable,
        primary_key=primary_key,
        auto_increment=auto_increment,
        unique=unique,
        default_value=default_value,
        sql_type=sql_type,
    )
    return dataclasses.field(default=default, metadata={COLUMN_METADATA_KEY: spec})


def join(
    target_name: str,
    relationship: type | str,
    source: str,
    *,
    default_value: str | None = None,
    unique: bool = False,
    nullable: bool = False,
) -> Any:
    """Declare a relationship field backed by a foreign-key column.

    Args:
        target_name: Foreign-key column stored on the owning table.
        relationship: Related entity class, or its name in the owning
            class's module for forward and self references.
        source: Field on the related entity that supplies the key value.
        default_value: Key value used when the relation is absent.
        unique: Whether the foreign-key value must be unique.
        nullable: Whether the relation may be absent.
    """
    spec = JoinSpec(
        target_name=target_name,
        relationship=relationship,
        source=source,
        default_value=default_value,
        unique=unique,
        nullable=nullable,
    )
    return dataclasses.field(default=None, metadata={JOIN_METADATA_KEY: spec})


def is_entity(cls: Any) -> bool:
    """Check if a class carries table metadata."""
    return isinstance(cls, type) and bool(getattr(cls, TABLE_NAME_ATTR, None))
