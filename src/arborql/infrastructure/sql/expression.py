"""Expression builder — the two-armed recursive CTE behind every traversal.

The expression is ``seed UNION ALL recursive``:

- the seed selects every source column, a literal initial depth and the
  initial path(s), filtered by the caller's constraint;
- the recursive arm joins the source against the expression itself, moving
  one level per step (depth -1 toward roots, +1 toward leaves) and appending
  the joined row's key to the path.

UNION ALL keeps duplicates, so a parent-pointer cycle recurses until the
database's own recursion limit stops it, unless the hierarchy enables
``cycle_guard``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import Integer, literal_column, select

from arborql.domain.errors import ConfigurationError
from arborql.domain.types import Direction

if TYPE_CHECKING:
    from sqlalchemy import CTE, FromClause, Select

    from arborql.infrastructure.sql.query import Constraint, HierarchyQuery

logger = logging.getLogger(__name__)


def with_relationship_expression(
    query: HierarchyQuery,
    direction: Direction | str,
    constraint: Constraint,
    initial_depth: int,
    source: FromClause | None = None,
    max_depth: int | None = None,
) -> HierarchyQuery:
    """Register a recursive expression on *query* and select from it.

    Args:
        query: Query context to extend; must not already be recursive.
        direction: ``"asc"`` walks toward roots, ``"desc"`` toward leaves.
        constraint: Callable receiving the source relation and returning the
            seed predicate (``None`` seeds from every row).
        initial_depth: Depth assigned to seed rows.
        source: Relation to read rows from instead of the hierarchy's table.
        max_depth: When set, the recursive arm stops producing rows whose
            absolute depth would reach this bound. Seed rows are kept.

    Raises:
        ConfigurationError: If *max_depth* is below 1.
        UnsupportedDialectFeature: If the configured path encoding or the
            cycle guard cannot be rendered on the query's dialect.
    """
    direction = Direction(direction)
    if max_depth is not None and max_depth < 1:
        msg = f"max_depth must be at least 1, got {max_depth}"
        raise ConfigurationError(msg)

    hierarchy = query.hierarchy
    source = source if source is not None else hierarchy.table

    seed = _seed_query(query, source, constraint, initial_depth)
    cte = seed.cte(hierarchy.expression_name, recursive=True)
    cte = cte.union_all(_recursive_query(query, cte, source, direction, max_depth))

    logger.debug(
        "Built recursive expression %s on %s (direction=%s, initial_depth=%d, max_depth=%s)",
        hierarchy.expression_name,
        hierarchy.name,
        direction.value,
        initial_depth,
        max_depth,
    )
    return query.redirect(cte)


def _seed_query(
    query: HierarchyQuery,
    source: FromClause,
    constraint: Constraint,
    initial_depth: int,
) -> Select[Any]:
    hierarchy = query.hierarchy
    adapter = query.adapter
    encoding = hierarchy.config.path_encoding

    paths = [adapter.initial_path(source.c[hierarchy.local_key], hierarchy.path_name, encoding)]
    paths += [
        adapter.initial_path(source.c[custom.column], custom.name, encoding)
        for custom in hierarchy.custom_paths
    ]
    depth = literal_column(str(int(initial_depth)), Integer).label(hierarchy.depth_name)

    stmt = select(source, depth, *paths)
    criterion = constraint(source)
    if criterion is not None:
        stmt = stmt.where(criterion)
    return stmt


def _recursive_query(
    query: HierarchyQuery,
    cte: CTE,
    source: FromClause,
    direction: Direction,
    max_depth: int | None,
) -> Select[Any]:
    hierarchy = query.hierarchy
    adapter = query.adapter
    encoding = hierarchy.config.path_encoding
    previous_depth = cte.c[hierarchy.depth_name]

    if direction is Direction.ASCENDING:
        depth = previous_depth - 1
        on = cte.c[hierarchy.parent_key] == source.c[hierarchy.local_key]
    else:
        depth = previous_depth + 1
        on = cte.c[hierarchy.local_key] == source.c[hierarchy.parent_key]

    paths = [
        adapter.recursive_path(
            cte.c[hierarchy.path_name],
            source.c[hierarchy.local_key],
            hierarchy.path_name,
            hierarchy.path_separator,
            encoding,
        )
    ]
    paths += [
        adapter.recursive_path(
            cte.c[custom.name],
            source.c[custom.column],
            custom.name,
            custom.separator,
            encoding,
        )
        for custom in hierarchy.custom_paths
    ]

    stmt = select(source, depth.label(hierarchy.depth_name), *paths).select_from(
        source.join(cte, on)
    )

    if max_depth is not None:
        if direction is Direction.ASCENDING:
            stmt = stmt.where(depth > -max_depth)
        else:
            stmt = stmt.where(depth < max_depth)

    if hierarchy.config.cycle_guard:
        stmt = stmt.where(
            adapter.excludes_cycle(
                cte.c[hierarchy.path_name],
                source.c[hierarchy.local_key],
                hierarchy.path_name,
                hierarchy.path_separator,
                encoding,
            )
        )

    return stmt
