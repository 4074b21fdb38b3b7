"""Tests for predicate compilation and argument binding."""

from __future__ import annotations

from datetime import datetime

import pytest

from sqlite_tables import (
    FieldNotFoundError,
    MethodNameParser,
    PredicateCompiler,
    QuerySyntaxError,
    UnsupportedArgumentTypeError,
)
from sqlite_tables.compiler import bind_argument, bind_arguments

FIELDS = {
    "id": "id",
    "name": "name",
    "active": "active",
    "line": "line",
    "datecreation": "date_creation",
}


@pytest.fixture
def parser():
    return MethodNameParser()


@pytest.fixture
def compiler():
    return PredicateCompiler()


class TestCompile:
    def test_single_term(self, parser, compiler):
        compiled = compiler.compile(parser.parse("findByName"), FIELDS)
        assert compiled.where == '"name" = ?'
        assert compiled.order_by == ""
        assert compiled.param_count == 1

    def test_left_to_right_without_grouping(self, parser, compiler):
        """``A And B Or C`` compiles literally, with no parentheses."""
        compiled = compiler.compile(parser.parse("findByNameAndActiveOrLine"), FIELDS)
        assert compiled.where == '"name" = ? AND "active" = ? OR "line" = ?'
        assert compiled.param_count == 3

    def test_multi_word_field_maps_to_column(self, parser, compiler):
        compiled = compiler.compile(parser.parse("deleteByDateCreation"), FIELDS)
        assert compiled.where == '"date_creation" = ?'

    def test_order_by(self, parser, compiler):
        compiled = compiler.compile(parser.parse("findAllByLineOrderByIdDesc"), FIELDS)
        assert compiled.sql_suffix() == ' WHERE "line" = ? ORDER BY "id" DESC'

    def test_find_all_has_no_suffix(self, parser, compiler):
        compiled = compiler.compile(parser.parse("findAll"), FIELDS)
        assert compiled.sql_suffix() == ""
        assert compiled.param_count == 0

    def test_unknown_field(self, parser, compiler):
        with pytest.raises(FieldNotFoundError) as exc_info:
            compiler.compile(parser.parse("findByColor"), FIELDS)
        assert exc_info.value.field_name == "color"
        assert "color" in str(exc_info.value)

    def test_unknown_order_field(self, parser, compiler):
        with pytest.raises(FieldNotFoundError):
            compiler.compile(parser.parse("findAllOrderByPrice"), FIELDS)


class TestCompileOrder:
    @pytest.mark.parametrize("direction", ["asc", "ASC", "Asc"])
    def test_ascending(self, compiler, direction):
        assert compiler.compile_order("name", direction) == '"name" ASC'

    def test_descending(self, compiler):
        assert compiler.compile_order("name", "desc") == '"name" DESC'

    def test_invalid_direction(self, compiler):
        with pytest.raises(QuerySyntaxError, match="Invalid sort direction"):
            compiler.compile_order("name", "up")


class TestBindArgument:
    def test_scalars_pass_through(self):
        assert bind_argument("P1") == "P1"
        assert bind_argument(3) == 3
        assert bind_argument(2.5) == 2.5

    def test_booleans_become_integers(self):
        assert bind_argument(True) == 1
        assert bind_argument(False) == 0
        assert type(bind_argument(True)) is int

    @pytest.mark.parametrize("value", [None, [1], {"a": 1}, b"raw", datetime(2024, 1, 1), object()])
    def test_other_types_are_rejected(self, value):
        with pytest.raises(UnsupportedArgumentTypeError, match="Unsupported type for parameter"):
            bind_argument(value)

    def test_bind_arguments_keeps_order(self):
        assert bind_arguments(["a", True, 7]) == ["a", 1, 7]
