"""Dialect adapters: path and depth SQL fragments per database engine.

Adapters are pure translators. They turn a column into the expression that
seeds a path and the expression that extends it by one segment, and they
fail at build time (never emitting SQL) when an encoding is not
representable on the active dialect.

Supported:

- SQLite: ``CAST(x AS TEXT)`` / ``path || :sep || CAST(x AS TEXT)``
- PostgreSQL: same text form, plus native ``ARRAY[x]`` / ``array_append``
- MySQL / MariaDB: ``CAST(x AS CHAR(65535))`` / ``concat(path, :sep, ...)``.
  The seed width fixes the column width for every recursive step, so the
  cast is wide enough for deep trees.
- anything else: ANSI ``||`` concatenation over ``TEXT``, text paths only.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from sqlalchemy import String, Text, any_, bindparam, cast, func, not_
from sqlalchemy.dialects import postgresql

from arborql.domain.errors import UnsupportedDialectFeature
from arborql.domain.types import PathEncoding

if TYPE_CHECKING:
    from sqlalchemy.engine import Dialect
    from sqlalchemy.sql.elements import BindParameter, ColumnElement, Label
    from sqlalchemy.types import TypeEngine


class DialectAdapter:
    """ANSI fallback adapter; engine-specific subclasses override pieces."""

    encodings: ClassVar[frozenset[PathEncoding]] = frozenset({PathEncoding.TEXT})
    supports_cycle_guard: ClassVar[bool] = False

    def __init__(self, dialect: Dialect) -> None:
        self._dialect = dialect

    @property
    def name(self) -> str:
        return str(self._dialect.name)

    def text_type(self) -> TypeEngine[Any]:
        """Type that path segments are cast to."""
        return Text()

    def quote(self, identifier: str) -> str:
        """Quote *identifier* the way the dialect's compiler would."""
        return str(self._dialect.identifier_preparer.quote(identifier))

    def check_encoding(self, encoding: PathEncoding) -> None:
        """Raise if *encoding* cannot be rendered on this dialect."""
        if encoding not in self.encodings:
            raise UnsupportedDialectFeature(self.name, f"{encoding.value} path encoding")

    # ------------------------------------------------------------------
    # Path fragments
    # ------------------------------------------------------------------

    def initial_path(
        self,
        column: ColumnElement[Any],
        name: str,
        encoding: PathEncoding = PathEncoding.TEXT,
    ) -> Label[Any]:
        """Seed a path holding the single segment *column*."""
        self.check_encoding(encoding)
        if encoding is PathEncoding.ARRAY:
            return self._initial_array(column).label(name)
        return cast(column, self.text_type()).label(name)

    def recursive_path(
        self,
        previous: ColumnElement[Any],
        column: ColumnElement[Any],
        name: str,
        separator: str,
        encoding: PathEncoding = PathEncoding.TEXT,
    ) -> Label[Any]:
        """Extend the *previous* path with the newly joined *column*."""
        self.check_encoding(encoding)
        if encoding is PathEncoding.ARRAY:
            return self._append_array(previous, column).label(name)
        segment = cast(column, self.text_type())
        return self._concat(previous, self.separator_binding(name, separator), segment).label(
            name
        )

    def separator_binding(self, name: str, separator: str) -> BindParameter[str]:
        """Bound parameter carrying the separator of path *name*."""
        return bindparam(f"{name}_separator", separator, type_=String())

    def path_contains(
        self,
        path: ColumnElement[Any],
        column: ColumnElement[Any],
        name: str,
        separator: str,
        encoding: PathEncoding = PathEncoding.TEXT,
    ) -> ColumnElement[bool]:
        """Predicate: the key in *column* already appears in *path*."""
        self.check_encoding(encoding)
        if not self.supports_cycle_guard:
            raise UnsupportedDialectFeature(self.name, "cycle guard")
        if encoding is PathEncoding.ARRAY:
            return column == any_(path)
        sep = bindparam(f"{name}_guard_separator", separator, type_=String())
        haystack = self._concat(sep, path, sep)
        needle = self._concat(sep, cast(column, self.text_type()), sep)
        return self._position(haystack, needle) > 0

    def excludes_cycle(
        self,
        path: ColumnElement[Any],
        column: ColumnElement[Any],
        name: str,
        separator: str,
        encoding: PathEncoding = PathEncoding.TEXT,
    ) -> ColumnElement[bool]:
        return not_(self.path_contains(path, column, name, separator, encoding))

    # ------------------------------------------------------------------
    # Engine-specific primitives
    # ------------------------------------------------------------------

    def _concat(self, *parts: ColumnElement[Any]) -> ColumnElement[Any]:
        expr = parts[0]
        for part in parts[1:]:
            expr = expr.op("||", return_type=self.text_type())(part)
        return expr

    def _position(
        self, haystack: ColumnElement[Any], needle: ColumnElement[Any]
    ) -> ColumnElement[int]:
        return func.instr(haystack, needle)

    def _initial_array(self, column: ColumnElement[Any]) -> ColumnElement[Any]:
        raise UnsupportedDialectFeature(self.name, "array path encoding")

    def _append_array(
        self, previous: ColumnElement[Any], column: ColumnElement[Any]
    ) -> ColumnElement[Any]:
        raise UnsupportedDialectFeature(self.name, "array path encoding")


class SQLiteAdapter(DialectAdapter):
    supports_cycle_guard = True


class PostgreSQLAdapter(DialectAdapter):
    encodings = frozenset({PathEncoding.TEXT, PathEncoding.ARRAY})
    supports_cycle_guard = True

    def _position(
        self, haystack: ColumnElement[Any], needle: ColumnElement[Any]
    ) -> ColumnElement[int]:
        return func.strpos(haystack, needle)

    def _initial_array(self, column: ColumnElement[Any]) -> ColumnElement[Any]:
        return postgresql.array([column])

    def _append_array(
        self, previous: ColumnElement[Any], column: ColumnElement[Any]
    ) -> ColumnElement[Any]:
        return func.array_append(previous, column, type_=postgresql.ARRAY(column.type))


class MySQLAdapter(DialectAdapter):
    supports_cycle_guard = True

    def text_type(self) -> TypeEngine[Any]:
        return String(65535)

    def _concat(self, *parts: ColumnElement[Any]) -> ColumnElement[Any]:
        return func.concat(*parts, type_=self.text_type())


_ADAPTERS: dict[str, type[DialectAdapter]] = {
    "sqlite": SQLiteAdapter,
    "postgresql": PostgreSQLAdapter,
    "mysql": MySQLAdapter,
    "mariadb": MySQLAdapter,
}


def adapter_for(dialect: Dialect) -> DialectAdapter:
    """Return the adapter for *dialect*, falling back to ANSI SQL."""
    return _ADAPTERS.get(dialect.name, DialectAdapter)(dialect)
