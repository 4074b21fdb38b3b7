"""SQLite Tables - a reflective object-relational mapper for SQLite."""

from sqlite_tables.entity import column, is_entity, join, table
from sqlite_tables.exceptions import (
    ErrorKind,
    FieldNotFoundError,
    QuerySyntaxError,
    SchemaError,
    SQLiteException,
    StorageError,
    UnsupportedArgumentTypeError,
    ValidationError,
)
from sqlite_tables.joins import JoinResolver, is_placeholder
from sqlite_tables.parsing import MethodNameParser, ParsedQuery, Verb
from sqlite_tables.compiler import CompiledQuery, PredicateCompiler
from sqlite_tables.query import DynamicQuery, QueryFactory, QueryInvocationHandler, sql_query
from sqlite_tables.registry import MetadataRegistry, describe
from sqlite_tables.schema import SchemaBuilder
from sqlite_tables.storage import Connection, SQLiteManagement
from sqlite_tables.sqlite_table import SQLiteTable
from sqlite_tables.types import (
    ColumnDescriptor,
    EntityMetadata,
    JoinDescriptor,
    SemanticType,
)

__all__ = [
    # Entity declaration
    "table",
    "column",
    "join",
    "is_entity",
    # Main API
    "SQLiteTable",
    "SQLiteManagement",
    "Connection",
    "DynamicQuery",
    "QueryFactory",
    "QueryInvocationHandler",
    "sql_query",
    "is_placeholder",
    # Metadata
    "MetadataRegistry",
    "describe",
    "EntityMetadata",
    "ColumnDescriptor",
    "JoinDescriptor",
    "SemanticType",
    # Query compilation
    "MethodNameParser",
    "ParsedQuery",
    "Verb",
    "PredicateCompiler",
    "CompiledQuery",
    "SchemaBuilder",
    "JoinResolver",
    # Errors
    "SQLiteException",
    "ErrorKind",
    "SchemaError",
    "QuerySyntaxError",
    "FieldNotFoundError",
    "UnsupportedArgumentTypeError",
    "ValidationError",
    "StorageError",
]

__version__ = "0.1.0"
