"""Command group: export the current form as JSON or schema source."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from formctl.commands._base import FormGroup
from formctl.domain.types import ExportFormat

if TYPE_CHECKING:
    from formctl.commands._context import AppContext


_EXPORT_EXAMPLES = """\
  formctl export json
  formctl export json --full -o form.json
  formctl export schema > contact-form.ts"""

_OUTPUT = click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write to a file instead of stdout.",
)


@click.group(cls=FormGroup, examples=_EXPORT_EXAMPLES)
def export() -> None:
    """Export the current form."""


@export.command()
@click.option("--full", is_flag=True, help="Export the complete definition, ids included.")
@_OUTPUT
@click.pass_obj
def json(app: AppContext, full: bool, output: Path | None) -> None:
    """Export field definitions as JSON."""
    from formctl.services.export import ExportService

    app.emit(ExportService(app.workspace).export(ExportFormat.JSON, full=full, output=output))


@export.command()
@_OUTPUT
@click.pass_obj
def schema(app: AppContext, output: Path | None) -> None:
    """Export a TypeScript validation schema."""
    from formctl.services.export import ExportService

    app.emit(ExportService(app.workspace).export(ExportFormat.TYPESCRIPT, output=output))
