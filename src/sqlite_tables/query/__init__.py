"""Query handlers and query interfaces."""

from sqlite_tables.query.delete import DeleteHandler
from sqlite_tables.query.exists import ExistsHandler
from sqlite_tables.query.find import FindHandler
from sqlite_tables.query.invocation import (
    DynamicQuery,
    QueryFactory,
    QueryInvocationHandler,
    SqlQuery,
    sql_query,
)
from sqlite_tables.query.save import SaveHandler
from sqlite_tables.query.update import UpdateHandler
from sqlite_tables.query.validator import Validator

__all__ = [
    "DeleteHandler",
    "DynamicQuery",
    "ExistsHandler",
    "FindHandler",
    "QueryFactory",
    "QueryInvocationHandler",
    "SaveHandler",
    "SqlQuery",
    "UpdateHandler",
    "Validator",
    "sql_query",
]
