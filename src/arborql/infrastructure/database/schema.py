"""SQLAlchemy Core table definitions for adjacency-list hierarchies.

:func:`adjacency_table` builds the canonical shape (integer key, nullable
self-referencing parent key, a display name); :data:`nodes` is the default
instance used by the CLI and tests. Any other table works with arborql as
long as it has a local key and a parent key column.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import Column, ForeignKey, Index, Integer, MetaData, Table, Text

metadata = MetaData()


def adjacency_table(
    name: str,
    meta: MetaData,
    *extra: Column[Any],
    key_type: Any = Integer,
    parent_key: str = "parent_id",
) -> Table:
    """Define ``name(id, <parent_key>, name, *extra)`` with a parent-key index."""
    table = Table(
        name,
        meta,
        Column("id", key_type, primary_key=True),
        Column(parent_key, key_type, ForeignKey(f"{name}.id")),
        Column("name", Text, nullable=False),
        *extra,
    )
    Index(f"ix_{name}_{parent_key}", table.c[parent_key])
    return table


nodes = adjacency_table("nodes", metadata, Column("slug", Text))
