"""Table façade: one entity type bound to one database."""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Generic, TypeVar

from sqlite_tables.exceptions import SchemaError
from sqlite_tables.query.invocation import DynamicQuery, QueryFactory, generic_argument
from sqlite_tables.registry import MetadataRegistry, default_registry
from sqlite_tables.schema import SchemaBuilder
from sqlite_tables.storage import SQLiteManagement

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SQLiteTable(Generic[T]):
    """Creates the table of entity type ``T`` and hands out query interfaces.

    Subclass with the entity type as parameter::

        class ProductsTable(SQLiteTable[Product]):
            query_interface = ProductQuery

        products = ProductsTable(management).query()
    """

    entity_type: ClassVar[type | None] = None
    query_interface: ClassVar[type[DynamicQuery[Any]]] = DynamicQuery

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        entity_type = generic_argument(cls, SQLiteTable)
        if entity_type is not None:
            cls.entity_type = entity_type

    def __init__(
        self,
        management: SQLiteManagement,
        entity_type: type | None = None,
        registry: MetadataRegistry | None = None,
    ) -> None:
        entity_type = entity_type or type(self).entity_type
        if entity_type is None:
            raise SchemaError(
                f"Not able to determine the entity type of {type(self).__name__}; "
                "parameterize it as SQLiteTable[Entity]"
            )
        self.entity_type = entity_type
        self.management = management
        self.registry = registry or default_registry
        self.metadata = self.registry.describe(entity_type)
        self.ddl = SchemaBuilder(self.registry).create_table(self.metadata, management)

    @property
    def table_name(self) -> str:
        return self.metadata.table_name

    def query(self) -> Any:
        """Return a query interface for this table."""
        return QueryFactory.create(
            self.query_interface, self.entity_type, self.management, self.registry
        )
