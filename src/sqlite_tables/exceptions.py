"""Exception family raised by sqlite_tables."""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Category of a failure inside the mapping layer."""

    SCHEMA = "schema"
    QUERY_SYNTAX = "query_syntax"
    FIELD_NOT_FOUND = "field_not_found"
    UNSUPPORTED_ARGUMENT = "unsupported_argument"
    VALIDATION = "validation"
    STORAGE = "storage"


class SQLiteException(Exception):
    """Base class for every error raised by the mapping layer.

    Errors are told apart by ``kind``; the subclasses below only fix the
    kind so callers can also catch them by name.
    """

    kind: ErrorKind = ErrorKind.STORAGE

    def __init__(self, message: str, kind: ErrorKind | None = None) -> None:
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind


class SchemaError(SQLiteException):
    """Missing or invalid table/column metadata, unsupported type, bad default."""

    kind = ErrorKind.SCHEMA


class QuerySyntaxError(SQLiteException):
    """Method name or call shape does not fit the query grammar."""

    kind = ErrorKind.QUERY_SYNTAX


class FieldNotFoundError(SQLiteException):
    """A predicate, order or update key names a field the entity lacks."""

    kind = ErrorKind.FIELD_NOT_FOUND

    def __init__(self, field_name: str, message: str | None = None) -> None:
        super().__init__(message or f"Field not found: {field_name}")
        self.field_name = field_name


class UnsupportedArgumentTypeError(SQLiteException):
    """A call argument cannot be bound as a SQL parameter."""

    kind = ErrorKind.UNSUPPORTED_ARGUMENT

    def __init__(self, value: object) -> None:
        super().__init__(f"Unsupported type for parameter: {type(value).__name__}")
        self.value = value


class ValidationError(SQLiteException):
    """One or more null/uniqueness violations, reported together."""

    kind = ErrorKind.VALIDATION

    def __init__(self, errors: list[str]) -> None:
        super().__init__("Entity validation failed: " + ", ".join(errors))
        self.errors = list(errors)


class StorageError(SQLiteException):
    """The SQLite engine rejected a statement."""

    kind = ErrorKind.STORAGE
