"""Shared fixtures."""

from __future__ import annotations

import pytest

from models import LinesTable, ProductsTable
from sqlite_tables import SQLiteManagement


@pytest.fixture
def management(tmp_path):
    """A database file in a temporary directory."""
    management = SQLiteManagement(tmp_path / "test.db")
    yield management
    management.close()


@pytest.fixture
def lines(management):
    return LinesTable(management).query()


@pytest.fixture
def products(management, lines):
    return ProductsTable(management).query()
