"""Database engine setup.

SQLAlchemy Core (not ORM) is used throughout: traversals are read-only
statement builds, so sessions and identity maps add nothing. SQLite URLs
get foreign keys enforced on every connection.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from arborql.infrastructure.database.schema import metadata


def create_db_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine for *url*; SQLite connections enable foreign keys."""
    engine = create_engine(url, echo=echo)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def init_database(url: str, *, echo: bool = False) -> Engine:
    """Create the engine and every table in :data:`schema.metadata`.

    Idempotent — safe to call on an existing database.
    """
    engine = create_db_engine(url, echo=echo)
    metadata.create_all(engine)
    return engine
