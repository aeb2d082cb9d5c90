"""Command: create the default adjacency-list schema."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from arborql.infrastructure.database.engine import init_database
from arborql.services.result import ServiceResult

if TYPE_CHECKING:
    from arborql.commands._context import AppContext


@click.command("init")
@click.pass_obj
def init_cmd(app: AppContext) -> None:
    """Create the default ``nodes`` table in the configured database."""
    engine = init_database(app.settings.database.url)
    engine.dispose()
    app.emit(ServiceResult(ok=True, op="init", data={"url": app.settings.database.url}))
