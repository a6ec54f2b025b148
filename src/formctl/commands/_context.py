"""AppContext: shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. The workspace is created lazily, and result
emission (stdout/stderr routing and exit codes) is centralized here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from formctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from formctl.config.settings import FormctlSettings
    from formctl.services.result import ServiceResult
    from formctl.services.workspace import Workspace


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The workspace is built on first use so ``--help`` and ``--version``
    never read the state file or load plugins.
    """

    def __init__(self, settings: FormctlSettings) -> None:
        self.settings = settings
        self._workspace: Workspace | None = None

        from formctl.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def workspace(self) -> Workspace:
        if self._workspace is None:
            from formctl.services.workspace import Workspace

            self._workspace = Workspace(self.settings)
            self._workspace.init_plugins()
        return self._workspace

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: stdout, return normally. Warnings go to stderr so
          they never pollute piped output.
        * Failure: stderr, exit code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
