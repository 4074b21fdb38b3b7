"""Example usage of the sqlite_tables library."""

from __future__ import annotations

from pathlib import Path

from sqlite_tables import DynamicQuery, SQLiteManagement, SQLiteTable, column, join, table


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


class ProductQuery(DynamicQuery[Product]):
    def findByName(self, name: str) -> Product | None: ...

    def findAllByLineOrderByNameDesc(self, line: int) -> list[Product]: ...

    def updateActiveByName(self, active: bool, name: str) -> int: ...


class LinesTable(SQLiteTable[Line]):
    pass


class ProductsTable(SQLiteTable[Product]):
    query_interface = ProductQuery


# Create a database file and the two tables
management = SQLiteManagement(Path("./example_data") / "catalog.db")
lines = LinesTable(management).query()
products = ProductsTable(management).query()

print("Saving lines and products...")
fruit = lines.save(Line(name="Fruit"))
for name in ("Apple", "Banana", "Cherry"):
    product = products.save(Product(name=name, line=fruit))
    print(f"  Saved: {product}")

print("\nProducts of line 'Fruit', newest name first:")
for product in products.findAllByLineOrderByNameDesc(fruit.id):
    print(f"  [{product.id}] {product.name} (line: {product.line.name}, active: {product.active})")

products.updateActiveByName(False, "Banana")
print(f"\nBanana active after update: {products.findByName('Banana').active}")
print(f"Any product named 'Durian'? {products.existsByName('Durian')}")

print(f"\nDeleted {products.deleteByName('Cherry')} row(s)")
print(f"Remaining: {[p.name for p in products.findAll()]}")
