"""Relationship resolvers bound to one subject node.

Each resolver builds a :class:`HierarchyQuery` for its traversal. ``query()``
hands that query back for further predicates; ``all()`` / ``first()`` run it
on the engine and return plain dict rows. Nothing is cached: every call
builds and executes a fresh query.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from arborql.domain.errors import ConfigurationError
from arborql.domain.types import Direction
from arborql.infrastructure.sql.expression import with_relationship_expression
from arborql.infrastructure.sql.query import HierarchyQuery

if TYPE_CHECKING:
    from sqlalchemy import FromClause, Table
    from sqlalchemy.engine import Engine
    from sqlalchemy.sql.elements import ColumnElement

    from arborql.domain.hierarchy import HierarchicalRecord

logger = logging.getLogger(__name__)


def fetch_rows(engine: Engine, query: HierarchyQuery) -> list[dict[str, Any]]:
    """Execute *query* and buffer every row as a dict."""
    with engine.connect() as conn:
        rows = conn.execute(query.statement).mappings().all()
    logger.debug("Fetched %d row(s) from %s", len(rows), query.source.name)
    return [dict(row) for row in rows]


def _key_equals(column: str, value: Any) -> Any:
    def constraint(source: FromClause) -> ColumnElement[bool]:
        return source.c[column] == value

    return constraint


class Relation:
    """Base resolver: a traversal anchored at *subject*."""

    def __init__(
        self,
        engine: Engine,
        hierarchy: HierarchicalRecord,
        subject: Mapping[str, Any],
        *,
        and_self: bool = False,
    ) -> None:
        self._engine = engine
        self._hierarchy = hierarchy
        self._subject = subject
        self.and_self = and_self

    def _base(self) -> HierarchyQuery:
        return HierarchyQuery.for_hierarchy(self._hierarchy, self._engine.dialect)

    def query(self) -> HierarchyQuery:
        raise NotImplementedError

    def all(self) -> list[dict[str, Any]]:
        return fetch_rows(self._engine, self.query())

    def first(self) -> dict[str, Any] | None:
        rows = fetch_rows(self._engine, self.query().limit(1))
        return rows[0] if rows else None


class Ancestors(Relation):
    """Parent, grandparent, ... up to the root; depth -1, -2, ..."""

    def query(self) -> HierarchyQuery:
        h = self._hierarchy
        if self.and_self:
            key, initial_depth = h.key_of(self._subject), 0
        else:
            key, initial_depth = h.parent_of(self._subject), -1
        return with_relationship_expression(
            self._base(), Direction.ASCENDING, _key_equals(h.local_key, key), initial_depth
        )


class Descendants(Relation):
    """Children, grandchildren, ...; depth 1, 2, ...

    The subject itself seeds the expression at depth 0 so every path starts
    with its key; without ``and_self`` that seed row is filtered out.
    """

    def __init__(
        self,
        engine: Engine,
        hierarchy: HierarchicalRecord,
        subject: Mapping[str, Any],
        *,
        and_self: bool = False,
        max_depth: int | None = None,
    ) -> None:
        super().__init__(engine, hierarchy, subject, and_self=and_self)
        self.max_depth = max_depth

    def query(self) -> HierarchyQuery:
        h = self._hierarchy
        query = with_relationship_expression(
            self._base(),
            Direction.DESCENDING,
            _key_equals(h.local_key, h.key_of(self._subject)),
            0,
            max_depth=self.max_depth,
        )
        if not self.and_self:
            query = query.where_depth(">", 0)
        return query


class Siblings(Relation):
    """Other nodes sharing the subject's parent (other roots, for a root)."""

    def query(self) -> HierarchyQuery:
        h = self._hierarchy
        parent = h.parent_of(self._subject)
        if parent is None:
            # Roots share no parent row: seed every root directly at depth 1.
            constraint = _key_equals(h.parent_key, None)
            initial_depth = 1
        else:
            constraint = _key_equals(h.local_key, parent)
            initial_depth = 0

        query = with_relationship_expression(
            self._base(), Direction.DESCENDING, constraint, initial_depth, max_depth=2
        ).where_depth(1)
        if not self.and_self:
            query = query.where(query.local_key != h.key_of(self._subject))
        return query


class RootAncestor(Relation):
    """The minimum-depth member of ancestors-and-self."""

    def query(self) -> HierarchyQuery:
        query = Ancestors(self._engine, self._hierarchy, self._subject, and_self=True).query()
        return query.breadth_first().limit(1)

    def get(self) -> dict[str, Any] | None:
        rows = fetch_rows(self._engine, self.query())
        return rows[0] if rows else None


class Children(Relation):
    """Direct children only; a plain non-recursive lookup."""

    def query(self) -> HierarchyQuery:
        base = self._base()
        return base.where(base.parent_key == self._hierarchy.key_of(self._subject))


class Parent(Relation):
    """The direct parent; a plain non-recursive lookup."""

    def query(self) -> HierarchyQuery:
        base = self._base()
        return base.where(base.local_key == self._hierarchy.parent_of(self._subject))


class HasManyOfDescendants(Relation):
    """Rows of *related* whose foreign key points at any descendant.

    With ``and_self`` rows pointing at the subject itself are included. The
    foreign key defaults to the single column of *related* that references
    the hierarchy table.
    """

    def __init__(
        self,
        engine: Engine,
        hierarchy: HierarchicalRecord,
        subject: Mapping[str, Any],
        related: Table,
        foreign_key: str | None = None,
        *,
        and_self: bool = False,
    ) -> None:
        super().__init__(engine, hierarchy, subject, and_self=and_self)
        self.related = related
        self.foreign_key = foreign_key or _referencing_column(related, hierarchy)
        if self.foreign_key not in related.c:
            msg = f"Table {related.name!r} has no column {self.foreign_key!r}"
            raise ConfigurationError(msg)

    def query(self) -> HierarchyQuery:
        """Descendant keys as an ``IN`` subquery; the statement selects *related*."""
        descendants = Descendants(
            self._engine, self._hierarchy, self._subject, and_self=self.and_self
        ).query()
        keys = descendants.statement.with_only_columns(descendants.local_key)
        statement = select(self.related).where(self.related.c[self.foreign_key].in_(keys))
        return replace(descendants, statement=statement)


def _referencing_column(related: Table, hierarchy: HierarchicalRecord) -> str:
    target = f"{hierarchy.name}.{hierarchy.local_key}"
    candidates = [
        column.key
        for column in related.c
        if any(fk.target_fullname == target for fk in column.foreign_keys)
    ]
    if len(candidates) != 1:
        msg = (
            f"Cannot infer which column of {related.name!r} references "
            f"{hierarchy.name!r} (candidates: {candidates}); pass foreign_key"
        )
        raise ConfigurationError(msg)
    return candidates[0]


class NodeRelations:
    """Per-node accessors returning ready-to-run resolvers."""

    def __init__(
        self, engine: Engine, hierarchy: HierarchicalRecord, node: Mapping[str, Any]
    ) -> None:
        self._engine = engine
        self._hierarchy = hierarchy
        self.node = node

    def _make(self, cls: type[Relation], **kwargs: Any) -> Any:
        return cls(self._engine, self._hierarchy, self.node, **kwargs)

    def ancestors(self) -> Ancestors:
        return self._make(Ancestors)

    def ancestors_and_self(self) -> Ancestors:
        return self._make(Ancestors, and_self=True)

    def descendants(self, max_depth: int | None = None) -> Descendants:
        return self._make(Descendants, max_depth=max_depth)

    def descendants_and_self(self, max_depth: int | None = None) -> Descendants:
        return self._make(Descendants, and_self=True, max_depth=max_depth)

    def children(self) -> Children:
        return self._make(Children)

    def children_and_self(self) -> Descendants:
        """Self at depth 0 plus children at depth 1."""
        return self._make(Descendants, and_self=True, max_depth=2)

    def parent(self) -> Parent:
        return self._make(Parent)

    def parent_and_self(self) -> _ParentAndSelf:
        """Self at depth 0 plus the parent at depth -1."""
        return self._make(_ParentAndSelf, and_self=True)

    def siblings(self) -> Siblings:
        return self._make(Siblings)

    def siblings_and_self(self) -> Siblings:
        return self._make(Siblings, and_self=True)

    def root_ancestor(self) -> RootAncestor:
        return self._make(RootAncestor)

    def has_many_of_descendants(
        self, related: Table, foreign_key: str | None = None
    ) -> HasManyOfDescendants:
        return self._make(HasManyOfDescendants, related=related, foreign_key=foreign_key)

    def has_many_of_descendants_and_self(
        self, related: Table, foreign_key: str | None = None
    ) -> HasManyOfDescendants:
        return self._make(
            HasManyOfDescendants, related=related, foreign_key=foreign_key, and_self=True
        )


class _ParentAndSelf(Ancestors):
    def query(self) -> HierarchyQuery:
        return super().query().where_depth(">=", -1)
