"""Rich/JSON output helpers.

The CLI renders a ServiceResult for humans (Rich trees and row listings) or
machines (``--json``, the serialized ServiceResult).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.markup import escape
from rich.tree import Tree

from arborql.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from arborql.services.result import ServiceResult

# Column names used when a result carries no display meta.
_DEFAULT_NAMES = {"local_key": "id", "depth_name": "depth", "path_name": "path"}


def _names(meta: dict[str, Any] | None) -> dict[str, str]:
    meta = meta or {}
    return {field: meta.get(field, default) for field, default in _DEFAULT_NAMES.items()}


def _label(row: dict[str, Any], names: dict[str, str] | None = None) -> str:
    names = names or _DEFAULT_NAMES
    key, depth, path = names["local_key"], names["depth_name"], names["path_name"]
    parts = [f"[arbor.key]{escape(str(row.get(key, '?')))}[/]"]
    if row.get("name") is not None:
        parts.append(f"[arbor.name]{escape(str(row['name']))}[/]")
    if row.get(depth) is not None:
        parts.append(f"[arbor.depth]{escape(depth)}={row[depth]}[/]")
    if row.get(path) is not None:
        parts.append(f"[arbor.path]{escape(str(row[path]))}[/]")
    return "  ".join(parts)


def _add_branch(tree: Tree, node: dict[str, Any], relation: str, names: dict[str, str]) -> None:
    branch = tree.add(_label(node, names))
    for child in node.get(relation, []):
        _add_branch(branch, child, relation, names)


def render_tree(
    console: Console,
    roots: list[dict[str, Any]],
    *,
    relation: str = "children",
    names: dict[str, str] | None = None,
) -> None:
    """Print a forest as nested Rich trees, one per root.

    *names* maps ``local_key``, ``depth_name`` and ``path_name`` to the
    row keys holding them; the defaults are ``id``, ``depth`` and ``path``.
    """
    top = Tree("[arbor.op]forest[/]", hide_root=True)
    for root in roots:
        _add_branch(top, root, relation, names or _DEFAULT_NAMES)
    console.print(top)


def render_rows(
    console: Console, rows: list[dict[str, Any]], *, names: dict[str, str] | None = None
) -> None:
    for row in rows:
        console.print(_label(row, names))


def format_result(result: ServiceResult, *, json_output: bool = False) -> str:
    """Format a ServiceResult for display.

    Args:
        result: The service result to format.
        json_output: If True, return JSON; otherwise return human-readable text.
    """
    if json_output:
        return result.model_dump_json(indent=2)
    if not result.ok:
        message = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} - {message}"

    console = create_console()
    console.print(f"[arbor.ok]OK[/]: [arbor.op]{result.op}[/]")
    data = result.data
    meta = result.meta or {}
    names = _names(meta)
    relation = meta.get("relation", "children")
    if "roots" in data:
        render_tree(console, data["roots"], relation=relation, names=names)
    elif "items" in data:
        render_rows(console, data["items"], names=names)
    elif "root" in data:
        render_rows(console, [data["root"]], names=names)
    elif "sql" in data:
        console.print(data["sql"], markup=False)
    for key, value in data.items():
        if key in {"roots", "items", "root", "sql", relation}:
            continue
        console.print(f"  {key}: {value}", markup=False)
    return get_output(console).rstrip("\n")
