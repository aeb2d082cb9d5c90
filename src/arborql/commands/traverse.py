"""Commands: forest and per-node traversals."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from arborql.commands._base import ArborCommand
from arborql.services.hierarchy import TRAVERSALS

if TYPE_CHECKING:
    from arborql.commands._context import AppContext

_MAX_DEPTH = click.option(
    "--max-depth", type=click.IntRange(min=1), default=None, help="Stop below this depth."
)
_AND_SELF = click.option("--self", "and_self", is_flag=True, help="Include the node itself.")


@click.command(
    cls=ArborCommand,
    examples="""\
  arborql tree
  arborql tree --max-depth 2
  arborql --json tree""",
)
@_MAX_DEPTH
@click.pass_obj
def tree(app: AppContext, max_depth: int | None) -> None:
    """Print the whole forest."""
    app.emit(app.service.tree(max_depth=max_depth))


@click.command(
    cls=ArborCommand,
    examples="""\
  arborql ancestors 4
  arborql ancestors 4 --self""",
)
@click.argument("node_id")
@_AND_SELF
@click.pass_obj
def ancestors(app: AppContext, node_id: str, and_self: bool) -> None:
    """List a node's ancestors, nearest first."""
    app.emit(app.service.ancestors(node_id, and_self=and_self))


@click.command(
    cls=ArborCommand,
    examples="""\
  arborql descendants 1
  arborql descendants 1 --self --max-depth 2""",
)
@click.argument("node_id")
@_AND_SELF
@_MAX_DEPTH
@click.pass_obj
def descendants(app: AppContext, node_id: str, and_self: bool, max_depth: int | None) -> None:
    """List a node's descendants, breadth-first."""
    app.emit(app.service.descendants(node_id, and_self=and_self, max_depth=max_depth))


@click.command(cls=ArborCommand, examples="  arborql siblings 3\n  arborql siblings 3 --self")
@click.argument("node_id")
@_AND_SELF
@click.pass_obj
def siblings(app: AppContext, node_id: str, and_self: bool) -> None:
    """List nodes sharing a node's parent."""
    app.emit(app.service.siblings(node_id, and_self=and_self))


@click.command(cls=ArborCommand, examples="  arborql root 4")
@click.argument("node_id")
@click.pass_obj
def root(app: AppContext, node_id: str) -> None:
    """Show a node's root ancestor."""
    app.emit(app.service.root(node_id))


@click.command()
@click.pass_obj
def roots(app: AppContext) -> None:
    """List nodes without a parent."""
    app.emit(app.service.roots())


@click.command()
@click.pass_obj
def leaves(app: AppContext) -> None:
    """List nodes without children."""
    app.emit(app.service.leaves())


@click.command(
    cls=ArborCommand,
    examples="""\
  arborql sql tree --max-depth 3
  arborql sql descendants 1""",
)
@click.argument("traversal", type=click.Choice(["tree", *TRAVERSALS]), metavar="TRAVERSAL")
@click.argument("node_id", required=False)
@_MAX_DEPTH
@click.pass_obj
def sql(app: AppContext, traversal: str, node_id: str | None, max_depth: int | None) -> None:
    """Print the SQL a traversal would run.

    TRAVERSAL is "tree" or a node traversal such as "descendants-and-self".
    """
    app.emit(app.service.sql(traversal, node_id, max_depth=max_depth))
