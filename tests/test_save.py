"""Tests for saving entities, including the line/product scenario."""

from __future__ import annotations

import pytest

from models import Item, Line, Order, Product, ProductsTable
from sqlite_tables import (
    ErrorKind,
    QuerySyntaxError,
    SQLiteManagement,
    SQLiteTable,
    StorageError,
    ValidationError,
    column,
    is_placeholder,
    join,
    table,
)
from sqlite_tables.query import SaveHandler


@table("reviews")
class Review:
    id: int = column(primary_key=True, auto_increment=True)
    product: Product | None = join("product_id", Product, source="id")


@table("order")
class Purchase:
    id: int = column(primary_key=True, auto_increment=True)
    group: str | None = column("group", unique=True)


@table("select")
class Receipt:
    id: int = column(primary_key=True, auto_increment=True)
    purchase: Purchase | None = join("where", Purchase, source="id")


class TestLineProductScenario:
    def test_scenario(self, lines, products, management):
        line = lines.save(Line(name="L1"))
        assert line.id == 1

        product = products.save(Product(name="P1", line=line))
        assert product.id == 1
        with management.readable() as conn:
            rows = conn.query("SELECT line FROM products WHERE id = ?", [product.id])
        assert rows[0]["line"] == 1

        found = products.findAllByLine(1)
        assert [p.name for p in found] == ["P1"]
        assert found[0].line.name == "L1"
        assert found[0].active is True

        with pytest.raises(ValidationError, match="must be unique"):
            products.save(Product(name="P1", line=line))


class TestSave:
    def test_returns_the_same_instance_with_key(self, lines):
        line = Line(name="L1")
        assert lines.save(line) is line
        assert line.id == 1
        assert lines.save(Line(name="L2")).id == 2

    def test_explicit_key_is_kept(self, lines):
        line = lines.save(Line(id=10, name="L10"))
        assert line.id == 10
        assert lines.findById(10).name == "L10"

    def test_zero_key_counts_as_unset(self, lines):
        line = lines.save(Line(id=0, name="L"))
        assert line.id == 1

    def test_none_values_use_database_defaults(self, lines, products):
        line = lines.save(Line(name="L1"))
        product = products.save(Product(name="P1", line=line))
        assert product.active is None
        assert products.findByName("P1").active is True

    def test_cascade_inserts_unsaved_related_entity(self, lines, products):
        product = products.save(Product(name="P1", line=Line(name="New line")))
        assert product.line.id is not None
        assert lines.findByName("New line").id == product.line.id
        assert products.findByName("P1").line.name == "New line"

    def test_foreign_key_copied_into_column_field(self, management, lines):
        items = SQLiteTable(management, entity_type=Item).query()
        line = lines.save(Line(name="L1"))
        item = items.save(Item(line=line))
        assert item.line_id == line.id

        found = items.findById(item.id)
        assert found.line_id == line.id
        assert found.line.name == "L1"

    def test_nullable_join_may_be_absent(self, management, lines):
        items = SQLiteTable(management, entity_type=Item).query()
        item = items.save(Item())
        found = items.findById(item.id)
        assert found.line is None
        assert found.line_id is None

    def test_absent_join_with_default_gets_placeholder(self, management, lines):
        orders = SQLiteTable(management, entity_type=Order).query()
        lines.save(Line(name="Default line"))
        order = orders.save(Order())
        assert is_placeholder(order.line)
        assert order.line.id == 1

        found = orders.findById(order.id)
        assert not is_placeholder(found.line)
        assert found.line.name == "Default line"

    def test_cascade_validates_related_entity(self, management, lines, products):
        reviews = SQLiteTable(management, entity_type=Review).query()
        line = lines.save(Line(name="L1"))
        products.save(Product(name="P1", line=line))

        with pytest.raises(ValidationError) as exc_info:
            reviews.save(Review(product=Product(line=line)))
        assert exc_info.value.errors == ["Field 'name' cannot be null"]

        with pytest.raises(ValidationError, match="must be unique"):
            reviews.save(Review(product=Product(name="P1", line=line)))

        with management.readable() as conn:
            assert conn.query("SELECT COUNT(*) FROM reviews")[0][0] == 0
            assert conn.query("SELECT COUNT(*) FROM products")[0][0] == 1


class TestSaveErrors:
    def test_none_entity(self, products):
        with pytest.raises(QuerySyntaxError, match="Cannot save None"):
            products.save(None)

    def test_wrong_entity_type(self, products):
        with pytest.raises(QuerySyntaxError, match="Expected a Product entity"):
            products.save(Line(name="L1"))

    def test_validation_runs_before_any_write(self, products, management):
        with pytest.raises(ValidationError) as exc_info:
            products.save(Product())
        assert exc_info.value.kind is ErrorKind.VALIDATION
        with management.readable() as conn:
            assert conn.query("SELECT COUNT(*) FROM products")[0][0] == 0

    def test_storage_rejection_without_validation(self, management, lines):
        ProductsTable(management)
        handler = SaveHandler(Product, management, validate_on_save=False)
        line = lines.save(Line(name="L1"))
        handler.save(Product(name="P1", line=line))

        with pytest.raises(StorageError, match="UNIQUE constraint failed") as exc_info:
            handler.save(Product(name="P1", line=line))
        assert exc_info.value.kind is ErrorKind.STORAGE
        assert exc_info.value.__cause__ is not None

    def test_missing_table(self, tmp_path):
        management = SQLiteManagement(tmp_path / "empty.db")
        handler = SaveHandler(Line, management, validate_on_save=False)
        with pytest.raises(StorageError, match="no such table"):
            handler.save(Line(name="L1"))


class TestReservedWordIdentifiers:
    """Table and column names that are SQL keywords."""

    @pytest.fixture
    def purchases(self, management):
        return SQLiteTable(management, entity_type=Purchase).query()

    @pytest.fixture
    def receipts(self, management, purchases):
        return SQLiteTable(management, entity_type=Receipt).query()

    def test_save_and_find(self, purchases):
        purchase = purchases.save(Purchase(group="a"))
        purchases.save(Purchase(group="b"))

        assert purchases.findByGroup("a").id == purchase.id
        assert purchases.existsByGroup("b")
        assert [p.group for p in purchases.findAllOrderByGroupDesc()] == ["b", "a"]

    def test_unique_check(self, purchases):
        purchases.save(Purchase(group="a"))
        with pytest.raises(ValidationError, match="Value 'a' already exists"):
            purchases.save(Purchase(group="a"))

    def test_update_and_delete(self, purchases):
        purchases.save(Purchase(group="a"))
        assert purchases.updateGroupByGroup("c", "a") == 1
        assert purchases.updateByGroup({"group": "d"}, "c") == 1
        assert purchases.deleteByGroup("d") == 1
        assert purchases.findAll() == []

    def test_join_through_keyword_column(self, purchases, receipts):
        purchase = purchases.save(Purchase(group="a"))
        receipt = receipts.save(Receipt(purchase=purchase))
        assert receipts.findById(receipt.id).purchase.group == "a"
