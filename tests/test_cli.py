"""Tests for the command line tool."""

from __future__ import annotations

import sqlite3

import pytest

from sqlite_tables.cli import load_entity, main


class TestDdl:
    def test_prints_create_table(self, capsys):
        assert main(["ddl", "models:Line", "models:Product"]) == 0
        out = capsys.readouterr().out
        assert 'CREATE TABLE IF NOT EXISTS "lines" (' in out
        assert 'FOREIGN KEY ("line") REFERENCES "lines" ("id")' in out

    def test_bad_entity_spec(self, capsys):
        assert main(["ddl", "models"]) == 1
        assert "Expected module:Class" in capsys.readouterr().err

    def test_missing_class(self, capsys):
        assert main(["ddl", "models:Nope"]) == 1
        assert "has no class 'Nope'" in capsys.readouterr().err

    def test_not_an_entity(self, capsys):
        assert main(["ddl", "models:LineQuery"]) == 1
        assert "not annotated with @table" in capsys.readouterr().err


class TestInit:
    def test_creates_tables(self, tmp_path, capsys):
        db = tmp_path / "app.db"
        assert main(["init", str(db), "models:Line", "models:Product"]) == 0
        assert "Created table 'products'" in capsys.readouterr().out

        conn = sqlite3.connect(db)
        try:
            names = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
        finally:
            conn.close()
        assert {"lines", "products"} <= names


class TestExplain:
    @pytest.mark.parametrize(
        "method,expected",
        [
            ("findAll", 'SELECT * FROM "products"'),
            (
                "findAllByLineOrderByNameDesc",
                'SELECT * FROM "products" WHERE "line" = ? ORDER BY "name" DESC',
            ),
            (
                "existsByNameAndActive",
                'SELECT COUNT(*) FROM "products" WHERE "name" = ? AND "active" = ?',
            ),
            ("deleteById", 'DELETE FROM "products" WHERE "id" = ?'),
            ("updateActiveByName", 'UPDATE "products" SET "active" = ? WHERE "name" = ?'),
            (
                "save",
                'INSERT INTO "products" ("name", "active", "line") VALUES (?, ?, ?)',
            ),
        ],
    )
    def test_explain(self, capsys, method, expected):
        assert main(["explain", "models:Product", method]) == 0
        assert capsys.readouterr().out.strip() == expected

    def test_syntax_error(self, capsys):
        assert main(["explain", "models:Product", "findBy"]) == 1
        assert "requires at least one predicate field" in capsys.readouterr().err


def test_load_entity():
    from models import Product

    assert load_entity("models:Product") is Product
