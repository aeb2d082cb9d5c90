"""Read-oriented repository for hierarchy traversals."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from arborql.domain.tree import to_tree
from arborql.infrastructure.relations import NodeRelations, fetch_rows
from arborql.infrastructure.sql.query import HierarchyQuery

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy.engine import Dialect, Engine

    from arborql.domain.hierarchy import HierarchicalRecord
    from arborql.infrastructure.sql.query import Constraint

logger = logging.getLogger(__name__)


class TreeRepository:
    """Encapsulates SQL for one hierarchy table."""

    def __init__(self, engine: Engine, hierarchy: HierarchicalRecord) -> None:
        self._engine = engine
        self.hierarchy = hierarchy

    @property
    def dialect(self) -> Dialect:
        return self._engine.dialect

    def query(self) -> HierarchyQuery:
        """A fresh ``SELECT * FROM <table>`` context to apply scopes to."""
        return HierarchyQuery.for_hierarchy(self.hierarchy, self._engine.dialect)

    def all(self, query: HierarchyQuery) -> list[dict[str, Any]]:
        """Execute *query* and return every row as a dict."""
        return fetch_rows(self._engine, query)

    def get(self, key: Any) -> dict[str, Any] | None:
        """Fetch one node row by local key."""
        query = self.query()
        rows = self.all(query.where(query.local_key == key))
        return rows[0] if rows else None

    def node(self, row: Mapping[str, Any]) -> NodeRelations:
        """Relationship accessors anchored at *row*."""
        return NodeRelations(self._engine, self.hierarchy, row)

    def roots(self) -> list[dict[str, Any]]:
        return self.all(self.query().is_root())

    def leaves(self) -> list[dict[str, Any]]:
        return self.all(self.query().is_leaf())

    def fetch_tree(
        self, max_depth: int | None = None, *, relation: str | None = None
    ) -> list[dict[str, Any]]:
        """Fetch the whole forest and nest it under *relation*."""
        rows = self.all(self.query().tree(max_depth).depth_first())
        logger.debug("Materializing %d row(s) of %s", len(rows), self.hierarchy.name)
        return to_tree(rows, self.hierarchy, relation)

    def fetch_tree_of(
        self,
        constraint: Constraint,
        max_depth: int | None = None,
        *,
        relation: str | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch the forest seeded by *constraint* and nest it."""
        rows = self.all(self.query().tree_of(constraint, max_depth).depth_first())
        return to_tree(rows, self.hierarchy, relation)
