"""Tests for entity validation."""

from __future__ import annotations

import pytest

from models import Line, Metadata, Order, Product
from sqlite_tables import QuerySyntaxError, SQLiteTable, ValidationError, column, join, table
from sqlite_tables.query import Validator


@table("unique_refs")
class UniqueRef:
    id: int = column(primary_key=True, auto_increment=True)
    metadata: Metadata | None = join("metadata_code", Metadata, source="code", unique=True)


@table("strict_items")
class StrictItem:
    id: int = column(primary_key=True, auto_increment=True)
    line_id: int | None = column("line_id", nullable=False)
    line: Line | None = join("line_id", Line, source="id")


class TestValidate:
    def test_valid_entity(self, products, lines):
        line = lines.save(Line(name="L1"))
        assert products.validate(Product(name="P1", line=line)) is True
        assert products.is_valid(Product(name="P1", line=line))

    def test_all_violations_are_collected(self, products):
        with pytest.raises(ValidationError) as exc_info:
            products.validate(Product())
        errors = exc_info.value.errors
        assert errors == [
            "Field 'name' cannot be null",
            "Join field 'line' cannot be null",
        ]
        assert "Field 'name' cannot be null" in str(exc_info.value)

    def test_duplicate_unique_value(self, products, lines):
        line = lines.save(Line(name="L1"))
        products.save(Product(name="P1", line=line))
        with pytest.raises(ValidationError) as exc_info:
            products.validate(Product(name="P1", line=line))
        assert exc_info.value.errors == ["Field 'name' must be unique. Value 'P1' already exists"]
        assert not products.is_valid(Product(name="P1", line=line))

    def test_none_entity(self, products):
        with pytest.raises(QuerySyntaxError, match="Cannot validate None"):
            products.validate(None)
        with pytest.raises(QuerySyntaxError, match="Cannot validate None"):
            products.is_valid(None)

    def test_auto_increment_key_is_not_checked(self, lines):
        assert lines.validate(Line())

    def test_column_with_default_may_be_null(self, management):
        @table("defaults")
        class WithDefault:
            id: int = column(primary_key=True, auto_increment=True)
            status: str | None = column(nullable=False, default_value="new")

        rows = SQLiteTable(management, entity_type=WithDefault).query()
        assert rows.validate(WithDefault())
        saved = rows.save(WithDefault())
        assert rows.findById(saved.id).status == "new"

    def test_join_with_default_may_be_absent(self, management, lines):
        orders = SQLiteTable(management, entity_type=Order).query()
        assert orders.validate(Order())

    def test_column_filled_by_join_is_not_null(self, management):
        """A populated join supplies its foreign-key column on save."""
        validator = Validator(StrictItem, management)
        assert validator.errors(StrictItem(line=Line(id=1, name="L1"))) == []
        assert validator.errors(StrictItem()) == [
            "Field 'line_id' cannot be null",
            "Join field 'line' cannot be null",
        ]

    def test_unique_join(self, management):
        metadata_rows = SQLiteTable(management, entity_type=Metadata).query()
        refs = SQLiteTable(management, entity_type=UniqueRef).query()
        code = metadata_rows.save(Metadata(code="M1"))
        refs.save(UniqueRef(metadata=code))

        with pytest.raises(ValidationError, match="Join field 'metadata' must be unique"):
            refs.save(UniqueRef(metadata=Metadata(code="M1")))

    def test_no_write_on_failure(self, products, management):
        with pytest.raises(ValidationError):
            products.save(Product(name=None))
        with management.readable() as conn:
            assert conn.query("SELECT COUNT(*) FROM products")[0][0] == 0
