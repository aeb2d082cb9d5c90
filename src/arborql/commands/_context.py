"""AppContext — shared Click context for all commands.

Created once by the root CLI group. The repository (engine + reflected
table) is opened lazily so ``--help`` and ``--version`` never touch the
database.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from arborql.output.formatters import format_result

if TYPE_CHECKING:
    from arborql.config.settings import ArborSettings
    from arborql.infrastructure.repositories.tree import TreeRepository
    from arborql.services.hierarchy import HierarchyService
    from arborql.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: ArborSettings) -> None:
        self.settings = settings
        self._repository: TreeRepository | None = None

        from arborql.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def repository(self) -> TreeRepository:
        """The tree repository (opened on first access)."""
        if self._repository is None:
            from arborql.domain.errors import ConfigurationError
            from arborql.services.hierarchy import open_repository

            try:
                self._repository = open_repository(self.settings)
            except ConfigurationError as exc:
                raise click.ClickException(str(exc)) from exc
        return self._repository

    @property
    def service(self) -> HierarchyService:
        from arborql.services.hierarchy import HierarchyService

        return HierarchyService(self.repository)

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout, warnings to stderr.
        * Failure: writes to stderr, exits with code 1.
        """
        output = format_result(result, json_output=self.settings.json_output)
        if result.ok:
            click.echo(output)
            if not self.settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
