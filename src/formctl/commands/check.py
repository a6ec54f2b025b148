"""Command: form consistency checking."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from formctl.commands._base import FormCommand

if TYPE_CHECKING:
    from formctl.commands._context import AppContext


@click.command(
    cls=FormCommand,
    examples="""\
  formctl check
  formctl check --errors-only
  formctl --json check""",
)
@click.option(
    "--min-severity",
    type=click.Choice(["warning", "error"]),
    default="warning",
    help="Hide issues below this severity.",
)
@click.option("--errors-only", is_flag=True, help="Shortcut for --min-severity error.")
@click.pass_obj
def check(app: AppContext, min_severity: str, errors_only: bool) -> None:
    """Check the current form for structural problems."""
    from formctl.services.check import FormCheckService

    if errors_only:
        min_severity = "error"
    app.emit(FormCheckService(app.workspace).check(min_severity=min_severity))
