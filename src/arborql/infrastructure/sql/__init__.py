"""Recursive query generation: dialect adapters, expression builder, scopes."""

from arborql.infrastructure.sql.dialects import DialectAdapter, adapter_for
from arborql.infrastructure.sql.expression import with_relationship_expression
from arborql.infrastructure.sql.query import HierarchyQuery
from arborql.infrastructure.sql.scopes import SCOPES, register_scope

__all__ = [
    "SCOPES",
    "DialectAdapter",
    "HierarchyQuery",
    "adapter_for",
    "register_scope",
    "with_relationship_expression",
]
