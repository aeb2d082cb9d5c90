"""Subcommand modules for arborql.

register_commands() defers imports so ``arborql --help`` stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register every command on the root CLI group."""
    from arborql.commands.init_cmd import init_cmd
    from arborql.commands.traverse import (
        ancestors,
        descendants,
        leaves,
        root,
        roots,
        siblings,
        sql,
        tree,
    )

    for command in (init_cmd, tree, ancestors, descendants, siblings, root, roots, leaves, sql):
        cli.add_command(command)
