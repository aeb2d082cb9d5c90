"""arborql — recursive-CTE traversals over adjacency-list tables.

Typical use::

    hierarchy = Hierarchy.bind(nodes)
    repo = TreeRepository(engine, hierarchy)
    forest = repo.fetch_tree(max_depth=3)
    chain = repo.node(repo.get(4)).ancestors().all()
"""

from arborql.config.models import CustomPath, HierarchyConfig
from arborql.domain.errors import (
    ConfigurationError,
    HierarchyError,
    InvalidOperatorError,
    MissingAttributeError,
    UnknownScopeError,
    UnsupportedDialectFeature,
)
from arborql.domain.hierarchy import HierarchicalRecord, Hierarchy
from arborql.domain.tree import first_path_segment, flatten_tree, has_nested_path, to_tree
from arborql.domain.types import Direction, PathEncoding
from arborql.infrastructure.repositories.tree import TreeRepository
from arborql.infrastructure.sql import HierarchyQuery, register_scope

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "CustomPath",
    "Direction",
    "HierarchicalRecord",
    "Hierarchy",
    "HierarchyConfig",
    "HierarchyError",
    "HierarchyQuery",
    "InvalidOperatorError",
    "MissingAttributeError",
    "PathEncoding",
    "TreeRepository",
    "UnknownScopeError",
    "UnsupportedDialectFeature",
    "__version__",
    "first_path_segment",
    "flatten_tree",
    "has_nested_path",
    "register_scope",
    "to_tree",
]
