"""Commands: undo and redo the last edits of the current form."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from formctl.commands._base import FormCommand

if TYPE_CHECKING:
    from collections.abc import Callable

    from formctl.commands._context import AppContext
    from formctl.services.result import ServiceResult

_STEPS = click.option(
    "--steps", type=click.IntRange(min=1), default=1, help="Number of edits to step over."
)


def _repeat(step: Callable[[], ServiceResult], steps: int) -> ServiceResult:
    """Run *step* up to *steps* times; stops early once history runs out."""
    result = step()
    for _ in range(steps - 1):
        more = step()
        if not more.ok:
            break
        result = more
    return result


@click.command(
    cls=FormCommand,
    examples="""\
  formctl field remove email
  formctl undo
  formctl undo --steps 3""",
)
@_STEPS
@click.pass_obj
def undo(app: AppContext, steps: int) -> None:
    """Revert the last edit. History lasts until the next form new/load/template."""
    from formctl.services.forms import FormService

    app.emit(_repeat(FormService(app.workspace).undo, steps))


@click.command(cls=FormCommand)
@_STEPS
@click.pass_obj
def redo(app: AppContext, steps: int) -> None:
    """Re-apply an undone edit."""
    from formctl.services.forms import FormService

    app.emit(_repeat(FormService(app.workspace).redo, steps))
