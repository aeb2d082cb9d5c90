"""Tree materialization: regroup flat traversal rows into nested children.

Rows come from a traversal, so every node carries its depth and parent key.
The forest's top level is whatever depth is shallowest in the input, which
lets sub-forests (e.g. from ``tree_of``) materialize the same way as a full
tree rooted at depth 0.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterator, MutableMapping, Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from arborql.domain.hierarchy import HierarchicalRecord

type Node = MutableMapping[str, Any]


def to_tree(
    nodes: Sequence[Node],
    hierarchy: HierarchicalRecord,
    relation: str | None = None,
) -> list[Node]:
    """Attach children to every node in *nodes* and return the top level.

    Each node gets ``node[relation]`` set to the nodes whose parent key equals
    its local key, in input order, or an empty list for leaves. Nodes are
    updated in place; only the minimum-depth nodes are returned, every other
    node is reachable solely through a ``relation`` chain.

    Raises:
        MissingAttributeError: If a node lacks the depth, parent or local key.
    """
    if not nodes:
        return []

    relation = relation or hierarchy.config.children_relation
    min_depth = min(hierarchy.depth_of(node) for node in nodes)

    groups: defaultdict[Any, list[Node]] = defaultdict(list)
    for node in nodes:
        groups[hierarchy.parent_of(node)].append(node)

    for node in nodes:
        node[relation] = groups.get(hierarchy.key_of(node), [])

    return [node for node in nodes if hierarchy.depth_of(node) == min_depth]


def flatten_tree(tree: Sequence[Node], relation: str = "children") -> Iterator[Node]:
    """Yield every node of *tree* depth-first, parents before children."""
    for node in tree:
        yield node
        yield from flatten_tree(node.get(relation, []), relation)


def first_path_segment(node: Node, hierarchy: HierarchicalRecord) -> str:
    """Return the first key of the node's path (the traversal anchor)."""
    path = hierarchy.path_of(node)
    if isinstance(path, (list, tuple)):
        return str(path[0])
    return str(path).split(hierarchy.path_separator)[0]


def has_nested_path(node: Node, hierarchy: HierarchicalRecord) -> bool:
    """Whether the node's path holds more than one key."""
    path = hierarchy.path_of(node)
    if isinstance(path, (list, tuple)):
        return len(path) > 1
    return hierarchy.path_separator in str(path)
