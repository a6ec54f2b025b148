"""Command: editor preferences (theme and UI language)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from formctl.commands._base import FormCommand
from formctl.domain.types import Language, Theme

if TYPE_CHECKING:
    from formctl.commands._context import AppContext


@click.command(
    cls=FormCommand,
    examples="""\
  formctl prefs
  formctl prefs --language en
  formctl prefs --theme light""",
)
@click.option("--theme", type=click.Choice([t.value for t in Theme]), default=None)
@click.option("--language", type=click.Choice([lang.value for lang in Language]), default=None)
@click.pass_obj
def prefs(app: AppContext, theme: str | None, language: str | None) -> None:
    """Show or change the stored theme and language."""
    from formctl.services.forms import FormService

    app.emit(FormService(app.workspace).set_preferences(theme=theme, language=language))
