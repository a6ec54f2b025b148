"""Command: evaluate conditions and formulas against sample values."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from formctl.commands._base import FormCommand, parse_assignments

if TYPE_CHECKING:
    from formctl.commands._context import AppContext


@click.command(
    cls=FormCommand,
    examples="""\
  formctl preview --value country=TR
  formctl preview --value price=120 --value quantity=3""",
)
@click.option("--value", "pairs", multiple=True, help="Sample value NAME=VALUE (repeatable).")
@click.pass_obj
def preview(app: AppContext, pairs: tuple[str, ...]) -> None:
    """Show which fields are visible and disabled for the given values."""
    from formctl.services.forms import FormService

    app.emit(FormService(app.workspace).preview(parse_assignments(pairs)))
