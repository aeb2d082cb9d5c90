"""Named query scopes: tree expressions, structural filters, ordering.

Scopes are plain functions ``(query, *args) -> query`` registered by name in
:data:`SCOPES`. :meth:`HierarchyQuery.scope` looks them up explicitly;
applications can register their own with :func:`register_scope`.
"""

from __future__ import annotations

import operator
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from arborql.domain.errors import InvalidOperatorError, UnknownScopeError
from arborql.domain.types import Direction
from arborql.infrastructure.sql.expression import with_relationship_expression

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy import FromClause
    from sqlalchemy.sql.elements import ColumnElement

    from arborql.infrastructure.sql.query import Constraint, HierarchyQuery

    type Scope = Callable[..., HierarchyQuery]

_DEPTH_OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    "=": operator.eq,
    "==": operator.eq,
    "!=": operator.ne,
    "<>": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


class ScopeRegistry:
    """Name -> scope function lookup."""

    def __init__(self) -> None:
        self._scopes: dict[str, Scope] = {}

    def register(self, name: str) -> Callable[[Scope], Scope]:
        """Decorator registering a scope under *name* (replacing any previous one)."""

        def decorator(func: Scope) -> Scope:
            self._scopes[name] = func
            return func

        return decorator

    def get(self, name: str) -> Scope:
        try:
            return self._scopes[name]
        except KeyError:
            msg = f"No scope registered as {name!r}; known: {sorted(self._scopes)}"
            raise UnknownScopeError(msg) from None

    def names(self) -> list[str]:
        return sorted(self._scopes)

    def __contains__(self, name: object) -> bool:
        return name in self._scopes


SCOPES = ScopeRegistry()
register_scope = SCOPES.register


def is_root_constraint(parent_key: str) -> Constraint:
    """Seed constraint selecting rows without a parent."""

    def constraint(source: FromClause) -> ColumnElement[bool]:
        return source.c[parent_key].is_(None)

    return constraint


# ---------------------------------------------------------------------------
# Recursive expressions
# ---------------------------------------------------------------------------


@register_scope("tree")
def tree(query: HierarchyQuery, max_depth: int | None = None) -> HierarchyQuery:
    """The whole forest, seeded from every root at depth 0."""
    return tree_of(query, is_root_constraint(query.hierarchy.parent_key), max_depth)


@register_scope("tree_of")
def tree_of(
    query: HierarchyQuery,
    constraint: Constraint,
    max_depth: int | None = None,
) -> HierarchyQuery:
    """A custom forest, seeded from the rows matching *constraint* at depth 0."""
    return with_relationship_expression(
        query, Direction.DESCENDING, constraint, 0, max_depth=max_depth
    )


# ---------------------------------------------------------------------------
# Structural filters
# ---------------------------------------------------------------------------


@register_scope("has_parent")
def has_parent(query: HierarchyQuery) -> HierarchyQuery:
    return query.where(query.parent_key.is_not(None))


@register_scope("is_root")
def is_root(query: HierarchyQuery) -> HierarchyQuery:
    return query.where(query.parent_key.is_(None))


def _children_exist(query: HierarchyQuery) -> ColumnElement[bool]:
    # Correlated against the base table, so a recursive source is not re-run.
    hierarchy = query.hierarchy
    child = hierarchy.table.alias(f"{hierarchy.name}_child")
    return (
        select(child.c[hierarchy.parent_key])
        .where(child.c[hierarchy.parent_key] == query.local_key)
        .exists()
    )


@register_scope("has_children")
def has_children(query: HierarchyQuery) -> HierarchyQuery:
    return query.where(_children_exist(query))


@register_scope("is_leaf")
def is_leaf(query: HierarchyQuery) -> HierarchyQuery:
    return query.where(~_children_exist(query))


@register_scope("where_depth")
def where_depth(query: HierarchyQuery, op: Any, value: Any = None) -> HierarchyQuery:
    """Compare the depth column; ``where_depth(2)`` means ``depth = 2``."""
    if value is None:
        op, value = "=", op
    try:
        compare = _DEPTH_OPERATORS[op]
    except (KeyError, TypeError):
        msg = f"Unsupported depth operator {op!r}; expected one of {sorted(_DEPTH_OPERATORS)}"
        raise InvalidOperatorError(msg) from None
    return query.where(compare(query.depth, value))


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


@register_scope("breadth_first")
def breadth_first(query: HierarchyQuery) -> HierarchyQuery:
    return query.order_by(query.depth)


@register_scope("depth_first")
def depth_first(query: HierarchyQuery) -> HierarchyQuery:
    return query.order_by(query.path)
