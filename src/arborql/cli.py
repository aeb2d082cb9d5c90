"""Root CLI group for arborql with global flags and command registration."""

from __future__ import annotations

import click

from arborql import __version__
from arborql.commands import register_commands
from arborql.commands._context import AppContext
from arborql.config.settings import ArborSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="arborql")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging (built SQL, row counts).")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option("--db", "database_url", default=None, help="Database URL override.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    database_url: str | None,
) -> None:
    """arborql — query adjacency-list hierarchies with recursive CTEs."""
    settings = ArborSettings.from_cli(
        config_path=config_path,
        database_url=database_url,
        json_output=json_output,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
