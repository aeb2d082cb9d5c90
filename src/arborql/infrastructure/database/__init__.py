"""Database engine and adjacency-list schema via SQLAlchemy Core."""

from arborql.infrastructure.database.engine import create_db_engine, init_database
from arborql.infrastructure.database.schema import adjacency_table, metadata, nodes

__all__ = [
    "adjacency_table",
    "create_db_engine",
    "init_database",
    "metadata",
    "nodes",
]
