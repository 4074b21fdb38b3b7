"""Entity classes and query interfaces shared by the tests."""

from __future__ import annotations

from datetime import datetime

from sqlite_tables import (
    DynamicQuery,
    SemanticType,
    SQLiteTable,
    column,
    join,
    sql_query,
    table,
)


@table("lines")
class Line:
    id: int = column("id", primary_key=True, auto_increment=True)
    name: str | None = column("name")


@table("products")
class Product:
    id: int = column("id", primary_key=True, auto_increment=True)
    name: str = column("name", nullable=False, unique=True)
    active: bool | None = column("active", default_value="true")
    line: Line | None = join("line", Line, source="id")


@table("items")
class Item:
    """Keeps the foreign key in a field of its own."""

    id: int = column(primary_key=True, auto_increment=True)
    line_id: int | None = column("line_id")
    line: Line | None = join("line_id", Line, source="id", nullable=True)


@table("orders")
class Order:
    id: int = column(primary_key=True, auto_increment=True)
    line: Line | None = join("line", Line, source="id", default_value="1")


@table("metadata")
class Metadata:
    """Related entity without a primary key."""

    code: str = column("code", nullable=False, unique=True)
    description: str | None = column("description")


@table("products_with_metadata")
class ProductWithMetadata:
    id: int = column(primary_key=True, auto_increment=True)
    name: str = column("name", nullable=False)
    metadata: Metadata | None = join("metadata_code", Metadata, source="code")


@table("tags")
class Tag:
    label: str | None = column()
    color: str | None = column()


@table("notes")
class Note:
    id: int = column(primary_key=True, auto_increment=True)
    text: str | None = column()
    tag: Tag | None = join("tag_label", Tag, source="label", nullable=True)


@table("categories")
class Category:
    id: int = column(primary_key=True, auto_increment=True)
    name: str | None = column()
    parent: Category | None = join("parent_id", "Category", source="id", nullable=True)


@table("samples")
class Sample:
    id: int = column(primary_key=True, auto_increment=True)
    label: str | None = column()
    amount: int | None = column()
    big: int | None = column(sql_type=SemanticType.BIGINT)
    ratio: float | None = column()
    flag: bool | None = column()
    payload: bytes | None = column()
    created: datetime | None = column()
    date_creation: str | None = column("date_creation")


class LineQuery(DynamicQuery[Line]):
    def findByName(self, name: str) -> Line | None: ...


class ProductQuery(DynamicQuery[Product]):
    def findById(self, id: int) -> Product | None: ...

    def findByName(self, name: str) -> Product | None: ...

    def findAllByLine(self, line: int) -> list[Product]: ...

    def findAllOrderByNameAsc(self) -> list[Product]: ...

    def findAllOrderByNameDesc(self) -> list[Product]: ...

    def findAllByActiveOrderByIdDesc(self, active: bool) -> list[Product]: ...

    def findByActive(self, active: bool) -> list[Product]: ...

    def existsByName(self, name: str) -> bool: ...

    def existsByNameAndActive(self, name: str, active: bool) -> bool: ...

    def updateByName(self, values: dict, name: str) -> int: ...

    def updateActiveByName(self, active: bool, name: str) -> int: ...

    def deleteByName(self, name: str) -> int: ...

    @sql_query("SELECT * FROM products WHERE name LIKE ? ORDER BY name")
    def search(self, pattern: str) -> list[Product]: ...

    @sql_query("SELECT * FROM products WHERE name = ?")
    def lookup(self, name: str) -> Product | None: ...

    @sql_query("UPDATE products SET active = 0", capture_result=False)
    def deactivateAll(self) -> bool: ...

    def describe(self) -> str:
        return "products"


class LinesTable(SQLiteTable[Line]):
    query_interface = LineQuery


class ProductsTable(SQLiteTable[Product]):
    query_interface = ProductQuery
