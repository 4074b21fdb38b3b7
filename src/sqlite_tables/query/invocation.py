"""Method-name dispatch and query interfaces.

A query interface subclasses :class:`DynamicQuery` and declares stub
methods whose names follow the method-name grammar::

    class ProductQuery(DynamicQuery[Product]):
        def findByName(self, name: str) -> Product | None: ...
        def findAllByLineOrderByNameDesc(self, line: int) -> list[Product]: ...

        @sql_query("SELECT * FROM products WHERE name LIKE ?")
        def search(self, pattern: str) -> list[Product]: ...

Declared stubs are replaced by dispatching implementations. The return
annotation decides between a list and a single result. Grammar names that
are not declared still work; they are synthesized on attribute access.
"""

from __future__ import annotations

import functools
import logging
import threading
import typing
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Generic, TypeVar

from sqlite_tables.compiler import bind_arguments
from sqlite_tables.exceptions import QuerySyntaxError, SchemaError, SQLiteException
from sqlite_tables.parsing import MethodNameParser, Verb
from sqlite_tables.query.delete import DeleteHandler
from sqlite_tables.query.exists import ExistsHandler
from sqlite_tables.query.find import FindHandler
from sqlite_tables.query.save import SaveHandler
from sqlite_tables.query.update import UpdateHandler
from sqlite_tables.query.validator import Validator
from sqlite_tables.registry import MetadataRegistry, unwrap_optional
from sqlite_tables.storage import SQLiteManagement

logger = logging.getLogger(__name__)

T = TypeVar("T")
Q = TypeVar("Q", bound="DynamicQuery[Any]")

SQL_QUERY_ATTR = "__sqlite_tables_query__"


@dataclass(frozen=True)
class SqlQuery:
    """Literal SQL attached to a query-interface method."""

    sql: str
    capture_result: bool = True


def sql_query(sql: str, capture_result: bool = True) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Attach literal SQL to a query-interface method.

    Arguments of the method are bound to the ``?`` placeholders in order.

    Args:
        sql: The statement to run.
        capture_result: Map the result rows to entities. When False the
            statement runs on a write connection and the call returns True.
    """

    def decorate(func: Callable[..., Any]) -> Callable[..., Any]:
        setattr(func, SQL_QUERY_ATTR, SqlQuery(sql, capture_result))
        return func

    return decorate


class QueryInvocationHandler:
    """Routes method names to the find/save/update/delete/exists handlers."""

    def __init__(
        self,
        entity_type: type,
        management: SQLiteManagement,
        registry: MetadataRegistry | None = None,
    ) -> None:
        self.entity_type = entity_type
        self.management = management
        self.parser = MethodNameParser()
        shared = (entity_type, management, registry, self.parser)
        self.validator = Validator(*shared)
        self.find_handler = FindHandler(*shared)
        self.save_handler = SaveHandler(*shared, validator=self.validator)
        self.update_handler = UpdateHandler(*shared)
        self.delete_handler = DeleteHandler(*shared)
        self.exists_handler = ExistsHandler(*shared)

    def invoke(self, method_name: str, args: Sequence[Any] = (), many: bool | None = None) -> Any:
        """Run the query named by ``method_name``.

        Args:
            method_name: A name following the method-name grammar, or one of
                ``validate`` / ``is_valid``.
            args: Call arguments.
            many: For find queries, force list (True) or single (False)
                results. None picks by verb.

        Raises:
            QuerySyntaxError: If the name does not fit the grammar.
        """
        logger.debug("Invoking %s.%s", self.entity_type.__name__, method_name)

        if method_name in ("validate", "is_valid"):
            entity = self._single_argument(method_name, args)
            if method_name == "validate":
                return self.validator.validate(entity)
            return self.validator.is_valid(entity)

        parsed = self.parser.parse(method_name)
        if parsed.verb is Verb.SAVE:
            return self.save_handler.save(self._single_argument(method_name, args))
        if parsed.verb in (Verb.FIND, Verb.FIND_ALL):
            return self.find_handler.find(parsed, args, many)
        if parsed.verb is Verb.UPDATE:
            return self.update_handler.update(parsed, args)
        if parsed.verb is Verb.DELETE:
            return self.delete_handler.delete(parsed, args)
        return self.exists_handler.exists(parsed, args)

    def run_sql(self, query: SqlQuery, args: Sequence[Any], many: bool = True) -> Any:
        """Run literal SQL with positionally bound arguments."""
        params = bind_arguments(args)
        if not query.capture_result:
            with self.management.writable() as conn:
                conn.execute(query.sql, params)
            return True

        with self.management.readable() as conn:
            rows = conn.query(query.sql, params)
            if not many:
                rows = rows[:1]
            entities = self.find_handler.map_rows(conn, rows)
        if many:
            return entities
        return entities[0] if entities else None

    @staticmethod
    def _single_argument(method_name: str, args: Sequence[Any]) -> Any:
        if len(args) != 1:
            raise QuerySyntaxError(f"Method '{method_name}' expects 1 argument, got {len(args)}")
        return args[0]


_grammar_parser: MethodNameParser | None = None
_grammar_lock = threading.Lock()


def follows_grammar(name: str) -> bool:
    """Check if a method name parses under the method-name grammar."""
    global _grammar_parser
    with _grammar_lock:
        if _grammar_parser is None:
            _grammar_parser = MethodNameParser()
        try:
            _grammar_parser.parse(name)
        except SQLiteException:
            return False
    return True


def returns_list(func: Callable[..., Any]) -> bool | None:
    """Tell from a return annotation whether a method returns a list.

    ``Optional[list[X]]`` counts as a list. Returns None when the method is
    not annotated or its annotation cannot be resolved.
    """
    if "return" not in getattr(func, "__annotations__", {}):
        return None
    try:
        annotation = typing.get_type_hints(func)["return"]
    except (NameError, TypeError) as e:
        logger.debug("Cannot resolve return annotation of %s: %s", func.__name__, e)
        return None
    base = unwrap_optional(annotation)
    origin = typing.get_origin(base) or base
    if not isinstance(origin, type) or issubclass(origin, (str, bytes, Mapping)):
        return False
    return issubclass(origin, (list, Sequence, Iterable))


def _dispatching(func: Callable[..., Any]) -> Callable[..., Any]:
    name = func.__name__
    many = returns_list(func)

    @functools.wraps(func)
    def method(self: DynamicQuery[Any], *args: Any) -> Any:
        return self._handler.invoke(name, args, many=many)

    return method


def _raw(func: Callable[..., Any], query: SqlQuery) -> Callable[..., Any]:
    many = bool(returns_list(func))

    @functools.wraps(func)
    def method(self: DynamicQuery[Any], *args: Any) -> Any:
        return self._handler.run_sql(query, args, many=many)

    return method


def generic_argument(cls: type, generic_base: type) -> type | None:
    """Return the class argument ``X`` of a ``generic_base[X]`` base of ``cls``."""
    for klass in cls.__mro__:
        for base in getattr(klass, "__orig_bases__", ()):
            origin = typing.get_origin(base)
            if isinstance(origin, type) and issubclass(origin, generic_base):
                args = typing.get_args(base)
                if args and isinstance(args[0], type):
                    return args[0]
    return None


class DynamicQuery(Generic[T]):
    """Base class of query interfaces for entity type ``T``."""

    entity_type: ClassVar[type | None] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        entity_type = generic_argument(cls, DynamicQuery)
        if entity_type is not None:
            cls.entity_type = entity_type

        for name, attr in list(vars(cls).items()):
            if name.startswith("_") or not callable(attr):
                continue
            query = getattr(attr, SQL_QUERY_ATTR, None)
            if query is not None:
                setattr(cls, name, _raw(attr, query))
            elif follows_grammar(name):
                setattr(cls, name, _dispatching(attr))

    def __init__(
        self,
        management: SQLiteManagement,
        entity_type: type | None = None,
        registry: MetadataRegistry | None = None,
    ) -> None:
        entity_type = entity_type or type(self).entity_type
        if entity_type is None:
            raise SchemaError(
                f"Query interface {type(self).__name__} does not name an entity type"
            )
        self.entity_type = entity_type
        self.management = management
        self._handler = QueryInvocationHandler(entity_type, management, registry)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_") or not follows_grammar(name):
            raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")

        def method(*args: Any) -> Any:
            return self._handler.invoke(name, args)

        method.__name__ = name
        return method

    def save(self, entity: T) -> T:
        return self._handler.invoke("save", (entity,))

    def findAll(self) -> list[T]:
        return self._handler.invoke("findAll", ())

    def validate(self, entity: T) -> bool:
        """Validate an entity; raises ValidationError listing every violation."""
        return self._handler.invoke("validate", (entity,))

    def is_valid(self, entity: T) -> bool:
        return self._handler.invoke("is_valid", (entity,))


class QueryFactory:
    """Builds query-interface instances."""

    @staticmethod
    def create(
        interface: type[Q],
        entity_type: type | None,
        management: SQLiteManagement,
        registry: MetadataRegistry | None = None,
    ) -> Q:
        """Create a query interface bound to an entity type and a database.

        Raises:
            SchemaError: If ``interface`` is not a DynamicQuery subclass, or
                the entity type is not a valid entity.
        """
        if not (isinstance(interface, type) and issubclass(interface, DynamicQuery)):
            raise SchemaError(f"{interface!r} is not a DynamicQuery subclass")
        return interface(management, entity_type, registry)
