"""HierarchyQuery — immutable query context for hierarchy traversals.

A HierarchyQuery carries the active source relation (the base table, or the
recursive expression once one is registered) next to the SQLAlchemy
``Select`` being built. Every method returns a new instance, so a query can
be branched freely and nothing on the table or hierarchy is ever mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from arborql.domain.errors import HierarchyError
from arborql.infrastructure.sql.dialects import DialectAdapter, adapter_for

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy import FromClause, Select
    from sqlalchemy.engine import Dialect
    from sqlalchemy.sql.elements import ColumnElement

    from arborql.domain.hierarchy import HierarchicalRecord

    type Constraint = Callable[[FromClause], ColumnElement[bool] | None]


@dataclass(frozen=True)
class HierarchyQuery:
    """Outer query plus the relation it currently selects from."""

    hierarchy: HierarchicalRecord
    adapter: DialectAdapter
    source: FromClause
    statement: Select[Any]
    recursive: bool = False

    @classmethod
    def for_hierarchy(cls, hierarchy: HierarchicalRecord, dialect: Dialect) -> HierarchyQuery:
        """Start a plain ``SELECT * FROM <table>`` query for *hierarchy*."""
        return cls(
            hierarchy=hierarchy,
            adapter=adapter_for(dialect),
            source=hierarchy.table,
            statement=select(hierarchy.table),
        )

    # ------------------------------------------------------------------
    # Columns
    # ------------------------------------------------------------------

    @property
    def c(self) -> Any:
        """Columns of the active source relation."""
        return self.source.c

    @property
    def local_key(self) -> ColumnElement[Any]:
        return self.source.c[self.hierarchy.local_key]

    @property
    def parent_key(self) -> ColumnElement[Any]:
        return self.source.c[self.hierarchy.parent_key]

    @property
    def depth(self) -> ColumnElement[int]:
        """The depth column; only present once a recursive expression exists."""
        return self._traversal_column(self.hierarchy.depth_name)

    @property
    def path(self) -> ColumnElement[Any]:
        """The path column; only present once a recursive expression exists."""
        return self._traversal_column(self.hierarchy.path_name)

    def _traversal_column(self, name: str) -> ColumnElement[Any]:
        if not self.recursive:
            msg = (
                f"Column {self.adapter.quote(name)} only exists on a recursive "
                "expression; call tree(), tree_of() or a relation first"
            )
            raise HierarchyError(msg)
        return self.source.c[name]

    # ------------------------------------------------------------------
    # Passthrough builders
    # ------------------------------------------------------------------

    def where(self, *criteria: Any) -> HierarchyQuery:
        return replace(self, statement=self.statement.where(*criteria))

    def order_by(self, *clauses: Any) -> HierarchyQuery:
        return replace(self, statement=self.statement.order_by(*clauses))

    def limit(self, limit: int) -> HierarchyQuery:
        return replace(self, statement=self.statement.limit(limit))

    def redirect(self, source: FromClause) -> HierarchyQuery:
        """Point the outer query at *source*, the registered recursive expression.

        The expression must be registered before any predicate is added,
        since those predicates were written against the previous source.
        """
        if self.recursive:
            msg = f"Query already selects from {self.adapter.quote(self.source.name)}"
            raise HierarchyError(msg)
        if self.statement.whereclause is not None:
            msg = "Register the recursive expression before adding predicates"
            raise HierarchyError(msg)
        return replace(self, source=source, statement=select(source), recursive=True)

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------

    def scope(self, name: str, *args: Any, **kwargs: Any) -> HierarchyQuery:
        """Apply the scope registered under *name*."""
        from arborql.infrastructure.sql.scopes import SCOPES

        return SCOPES.get(name)(self, *args, **kwargs)

    def tree(self, max_depth: int | None = None) -> HierarchyQuery:
        return self.scope("tree", max_depth)

    def tree_of(self, constraint: Constraint, max_depth: int | None = None) -> HierarchyQuery:
        return self.scope("tree_of", constraint, max_depth)

    def has_children(self) -> HierarchyQuery:
        return self.scope("has_children")

    def has_parent(self) -> HierarchyQuery:
        return self.scope("has_parent")

    def is_leaf(self) -> HierarchyQuery:
        return self.scope("is_leaf")

    def is_root(self) -> HierarchyQuery:
        return self.scope("is_root")

    def where_depth(self, operator: Any, value: Any = None, /) -> HierarchyQuery:
        if value is None:
            return self.scope("where_depth", operator)
        return self.scope("where_depth", operator, value)

    def breadth_first(self) -> HierarchyQuery:
        return self.scope("breadth_first")

    def depth_first(self) -> HierarchyQuery:
        return self.scope("depth_first")

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def compile(self, dialect: Dialect | None = None, *, literal_binds: bool = False) -> str:
        """Render the statement as SQL text for *dialect* (debugging aid)."""
        compiled = self.statement.compile(
            dialect=dialect,
            compile_kwargs={"literal_binds": literal_binds},
        )
        return str(compiled)
