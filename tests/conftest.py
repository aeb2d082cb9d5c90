"""Shared pytest fixtures and test helpers for arborql tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy import Column, ForeignKey, Integer, MetaData, Table, Text, insert
from sqlalchemy.engine import Engine

from arborql.domain.hierarchy import Hierarchy
from arborql.infrastructure.database.engine import init_database
from arborql.infrastructure.database.schema import nodes
from arborql.infrastructure.repositories.tree import TreeRepository

# 1
# ├── 2
# │   └── 4
# └── 3
SAMPLE_ROWS: list[dict[str, Any]] = [
    {"id": 1, "parent_id": None, "name": "root", "slug": "r"},
    {"id": 2, "parent_id": 1, "name": "left", "slug": "l"},
    {"id": 3, "parent_id": 1, "name": "right", "slug": "rt"},
    {"id": 4, "parent_id": 2, "name": "leaf", "slug": "lf"},
]

# Two trees:
# 1 ── 2 ── 4 ── 8
#  └── 3
# 5 ── 6 ── 7
FOREST_ROWS: list[dict[str, Any]] = [
    {"id": 1, "parent_id": None, "name": "a", "slug": "a"},
    {"id": 2, "parent_id": 1, "name": "b", "slug": "b"},
    {"id": 3, "parent_id": 1, "name": "c", "slug": "c"},
    {"id": 4, "parent_id": 2, "name": "d", "slug": "d"},
    {"id": 5, "parent_id": None, "name": "e", "slug": "e"},
    {"id": 6, "parent_id": 5, "name": "f", "slug": "f"},
    {"id": 7, "parent_id": 6, "name": "g", "slug": "g"},
    {"id": 8, "parent_id": 4, "name": "h", "slug": "h"},
]


# Rows of a second table hanging off SAMPLE_ROWS nodes.
item_metadata = MetaData()
items = Table(
    "items",
    item_metadata,
    Column("id", Integer, primary_key=True),
    Column("node_id", Integer, ForeignKey(nodes.c.id)),
    Column("label", Text),
)
ITEM_ROWS: list[dict[str, Any]] = [
    {"id": 10, "node_id": 1, "label": "on-root"},
    {"id": 11, "node_id": 2, "label": "on-left"},
    {"id": 12, "node_id": 4, "label": "on-leaf"},
    {"id": 13, "node_id": 3, "label": "on-right"},
    {"id": 14, "node_id": 4, "label": "on-leaf-too"},
]


def seed_rows(engine: Engine, rows: list[dict[str, Any]]) -> None:
    """Insert *rows* into the default ``nodes`` table, parents first."""
    with engine.begin() as conn:
        for row in rows:
            conn.execute(insert(nodes).values(**row))


def db_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'arborql.db'}"


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Iterator[Engine]:
    """SQLite engine holding the four-row sample tree."""
    engine = init_database(db_url(tmp_path))
    seed_rows(engine, SAMPLE_ROWS)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def forest_engine(tmp_path: Path) -> Iterator[Engine]:
    """SQLite engine holding the two-tree forest."""
    engine = init_database(db_url(tmp_path))
    seed_rows(engine, FOREST_ROWS)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def hierarchy() -> Hierarchy:
    return Hierarchy.bind(nodes)


@pytest.fixture
def repo(db_engine: Engine, hierarchy: Hierarchy) -> TreeRepository:
    return TreeRepository(db_engine, hierarchy)


@pytest.fixture
def forest_repo(forest_engine: Engine, hierarchy: Hierarchy) -> TreeRepository:
    return TreeRepository(forest_engine, hierarchy)


def ids(rows: list[dict[str, Any]]) -> list[int]:
    return [row["id"] for row in rows]


@pytest.fixture
def items_engine(db_engine: Engine) -> Engine:
    """The sample tree plus an ``items`` table referencing its nodes."""
    item_metadata.create_all(db_engine)
    with db_engine.begin() as conn:
        conn.execute(insert(items), ITEM_ROWS)
    return db_engine
