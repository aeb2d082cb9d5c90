"""HierarchyService — traversals wrapped in the ServiceResult contract.

Every operation resolves the subject by key first (``NOT_FOUND`` if absent),
runs one traversal, and returns the buffered rows. Row order is fixed per
operation: ancestors nearest-first, everything else breadth-first.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import MetaData, Table
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError

from arborql.domain.errors import ConfigurationError, HierarchyError
from arborql.domain.hierarchy import Hierarchy
from arborql.domain.tree import flatten_tree
from arborql.infrastructure.database.engine import create_db_engine
from arborql.infrastructure.repositories.tree import TreeRepository
from arborql.services.base import BaseService
from arborql.services.result import ServiceResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from arborql.config.settings import ArborSettings
    from arborql.infrastructure.relations import NodeRelations
    from arborql.infrastructure.sql.query import HierarchyQuery

logger = logging.getLogger(__name__)

# Traversal names accepted by ``sql`` and the CLI, mapped to NodeRelations accessors.
TRAVERSALS: dict[str, str] = {
    "ancestors": "ancestors",
    "ancestors-and-self": "ancestors_and_self",
    "descendants": "descendants",
    "descendants-and-self": "descendants_and_self",
    "children": "children",
    "children-and-self": "children_and_self",
    "parent": "parent",
    "parent-and-self": "parent_and_self",
    "siblings": "siblings",
    "siblings-and-self": "siblings_and_self",
    "root": "root_ancestor",
}

# Traversals whose accessor takes a max_depth bound.
DEPTH_BOUNDED = frozenset({"descendants", "descendants-and-self"})


def open_repository(settings: ArborSettings) -> TreeRepository:
    """Connect to the configured database and bind the configured table.

    Raises:
        ConfigurationError: If the table does not exist or does not match
            the ``[hierarchy]`` settings.
    """
    engine = create_db_engine(settings.database.url, echo=settings.database.echo)
    try:
        table = Table(settings.hierarchy.table, MetaData(), autoload_with=engine)
        hierarchy = Hierarchy.bind(table, settings.hierarchy.to_config())
    except NoSuchTableError as exc:
        engine.dispose()
        msg = f"Table {settings.hierarchy.table!r} not found in {engine.url!r}"
        raise ConfigurationError(msg) from exc
    except Exception:
        engine.dispose()
        raise
    return TreeRepository(engine, hierarchy)


class HierarchyService(BaseService):
    """Handles hierarchy traversals for one table."""

    def _coerce_key(self, key: Any) -> Any:
        """Convert a CLI string key to the local key column's Python type."""
        column = self._repo.hierarchy.table.c[self._repo.hierarchy.local_key]
        try:
            python_type = column.type.python_type
        except NotImplementedError:
            return key
        if isinstance(key, str) and python_type is not str:
            try:
                return python_type(key)
            except (TypeError, ValueError):
                return key
        return key

    def _display_meta(self) -> dict[str, Any]:
        """Column names the formatter needs to label rows of this hierarchy."""
        h = self._repo.hierarchy
        return {
            "local_key": h.local_key,
            "depth_name": h.depth_name,
            "path_name": h.path_name,
            "relation": h.config.children_relation,
        }

    def _traverse(
        self,
        op: str,
        key: Any,
        build: Callable[[NodeRelations], HierarchyQuery],
    ) -> ServiceResult:
        key = self._coerce_key(key)
        try:
            subject = self._repo.get(key)
            if subject is None:
                return self._not_found(op, key)
            items = self._repo.all(build(self._repo.node(subject)))
        except (HierarchyError, SQLAlchemyError) as exc:
            return self._from_exception(op, exc)

        return ServiceResult(
            ok=True,
            op=op,
            data={"id": key, "count": len(items), "items": items},
            meta=self._display_meta(),
        )

    # ------------------------------------------------------------------
    # Forest
    # ------------------------------------------------------------------

    def tree(self, *, max_depth: int | None = None) -> ServiceResult:
        """Fetch the whole forest as nested ``children`` lists."""
        relation = self._repo.hierarchy.config.children_relation
        try:
            roots = self._repo.fetch_tree(max_depth)
        except (HierarchyError, SQLAlchemyError) as exc:
            return self._from_exception("tree", exc)

        count = sum(1 for _ in flatten_tree(roots, relation))
        return ServiceResult(
            ok=True,
            op="tree",
            data={"count": count, "roots": roots},
            meta={**self._display_meta(), "max_depth": max_depth},
        )

    def roots(self) -> ServiceResult:
        return self._listing("roots", self._repo.roots)

    def leaves(self) -> ServiceResult:
        return self._listing("leaves", self._repo.leaves)

    def _listing(self, op: str, fetch: Callable[[], list[dict[str, Any]]]) -> ServiceResult:
        try:
            items = fetch()
        except (HierarchyError, SQLAlchemyError) as exc:
            return self._from_exception(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={"count": len(items), "items": items},
            meta=self._display_meta(),
        )

    # ------------------------------------------------------------------
    # Node traversals
    # ------------------------------------------------------------------

    def ancestors(self, key: Any, *, and_self: bool = False) -> ServiceResult:
        def build(node: NodeRelations) -> HierarchyQuery:
            query = (node.ancestors_and_self() if and_self else node.ancestors()).query()
            return query.order_by(query.depth.desc())

        return self._traverse("ancestors", key, build)

    def descendants(
        self,
        key: Any,
        *,
        and_self: bool = False,
        max_depth: int | None = None,
    ) -> ServiceResult:
        def build(node: NodeRelations) -> HierarchyQuery:
            relation = (
                node.descendants_and_self(max_depth)
                if and_self
                else node.descendants(max_depth)
            )
            return relation.query().breadth_first().depth_first()

        return self._traverse("descendants", key, build)

    def siblings(self, key: Any, *, and_self: bool = False) -> ServiceResult:
        def build(node: NodeRelations) -> HierarchyQuery:
            relation = node.siblings_and_self() if and_self else node.siblings()
            return relation.query().depth_first()

        return self._traverse("siblings", key, build)

    def root(self, key: Any) -> ServiceResult:
        """Fetch the root ancestor of *key* (the node itself for a root)."""
        result = self._traverse("root", key, lambda node: node.root_ancestor().query())
        if not result.ok:
            return result
        items = result.data["items"]
        return result.model_copy(update={"data": {"id": result.data["id"], "root": items[0]}})

    # ------------------------------------------------------------------
    # SQL preview
    # ------------------------------------------------------------------

    def sql(
        self,
        traversal: str,
        key: Any = None,
        *,
        max_depth: int | None = None,
    ) -> ServiceResult:
        """Render the SQL a traversal would run, without executing it.

        *max_depth* bounds ``tree`` and the descendants traversals; any other
        traversal given a bound fails with ``UNSUPPORTED_OPTION``.
        """
        op = "sql"
        try:
            if traversal == "tree":
                query = self._repo.query().tree(max_depth)
            elif traversal in TRAVERSALS:
                if key is None:
                    return self._failure(op, "MISSING_ID", f"{traversal!r} needs a node id")
                key = self._coerce_key(key)
                subject = self._repo.get(key)
                if subject is None:
                    return self._not_found(op, key)
                accessor = getattr(self._repo.node(subject), TRAVERSALS[traversal])
                if traversal in DEPTH_BOUNDED:
                    query = accessor(max_depth).query()
                elif max_depth is not None:
                    msg = f"max_depth does not apply to {traversal!r}"
                    return self._failure(op, "UNSUPPORTED_OPTION", msg)
                else:
                    query = accessor().query()
            else:
                known = ", ".join(["tree", *TRAVERSALS])
                return self._failure(
                    op, "UNKNOWN_TRAVERSAL", f"Unknown traversal {traversal!r}; use one of {known}"
                )
            rendered = query.compile(self._repo.dialect, literal_binds=True)
        except (HierarchyError, SQLAlchemyError) as exc:
            return self._from_exception(op, exc)

        return ServiceResult(
            ok=True,
            op=op,
            data={"traversal": traversal, "dialect": self._repo.dialect.name, "sql": rendered},
        )
