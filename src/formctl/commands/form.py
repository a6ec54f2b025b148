"""Command group: form lifecycle (new, show, save, load, list, import, template, settings)."""

from __future__ import annotations

from typing import TYPE_CHECKING, TextIO

import click

from formctl.commands._base import FormGroup, parse_assignments
from formctl.domain.catalog import FORM_TEMPLATES

if TYPE_CHECKING:
    from formctl.commands._context import AppContext


_FORM_EXAMPLES = """\
  formctl form new "Contact Us"
  formctl form show
  formctl form save
  formctl form list
  formctl form load 3f9c0a7d12e4b6a8
  formctl form import fields.json
  formctl form template registration
  formctl form settings layout=horizontal"""


@click.group(cls=FormGroup, examples=_FORM_EXAMPLES)
def form() -> None:
    """Create, inspect, save, and load forms."""


@form.command(
    examples="""\
  formctl form new
  formctl form new "Job Application" --description "Careers page form\""""
)
@click.argument("name", required=False)
@click.option("--description", default=None, help="Form description.")
@click.pass_obj
def new(app: AppContext, name: str | None, description: str | None) -> None:
    """Start a new, empty form (unsaved edits to the current form are dropped)."""
    from formctl.services.forms import FormService

    app.emit(FormService(app.workspace).new_form(name, description))


@form.command()
@click.pass_obj
def show(app: AppContext) -> None:
    """Show the current form."""
    from formctl.services.forms import FormService

    app.emit(FormService(app.workspace).show())


@form.command()
@click.argument("name")
@click.option("--description", default=None, help="Form description.")
@click.pass_obj
def rename(app: AppContext, name: str, description: str | None) -> None:
    """Rename the current form."""
    from formctl.services.forms import FormService

    app.emit(FormService(app.workspace).rename(name, description))


@form.command()
@click.pass_obj
def save(app: AppContext) -> None:
    """Save the current form."""
    from formctl.services.forms import FormService

    app.emit(FormService(app.workspace).save())


@form.command()
@click.argument("form_id")
@click.pass_obj
def load(app: AppContext, form_id: str) -> None:
    """Make a saved form the current form."""
    from formctl.services.forms import FormService

    app.emit(FormService(app.workspace).load(form_id))


@form.command(name="list")
@click.pass_obj
def list_forms(app: AppContext) -> None:
    """List saved forms (* marks the current one)."""
    from formctl.services.forms import FormService

    app.emit(FormService(app.workspace).list_forms())


@form.command()
@click.argument("form_id")
@click.pass_obj
def delete(app: AppContext, form_id: str) -> None:
    """Delete a saved form."""
    from formctl.services.forms import FormService

    app.emit(FormService(app.workspace).delete(form_id))


@form.command(
    name="import",
    examples="""\
  formctl form import form.json
  cat fields.json | formctl form import -""",
)
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.pass_obj
def import_cmd(app: AppContext, source: TextIO) -> None:
    """Import a field array or a full form definition from a JSON file (- for stdin)."""
    from formctl.services.forms import FormService

    app.emit(FormService(app.workspace).import_json(source.read()))


@form.command()
@click.argument("template_id", type=click.Choice([t.id for t in FORM_TEMPLATES]))
@click.pass_obj
def template(app: AppContext, template_id: str) -> None:
    """Start a new form from a built-in template."""
    from formctl.services.forms import FormService

    app.emit(FormService(app.workspace).apply_template(template_id))


@form.command(
    examples="""\
  formctl form settings layout=horizontal labelPosition=left
  formctl form settings showReset=false validateOnChange=true
  formctl form settings 'submitButtonText={"tr": "Kaydet", "en": "Save"}'"""
)
@click.argument("pairs", nargs=-1, required=True, metavar="KEY=VALUE...")
@click.pass_obj
def settings(app: AppContext, pairs: tuple[str, ...]) -> None:
    """Change form-wide settings (layout, labels, sizes, validation timing)."""
    from formctl.services.forms import FormService

    app.emit(FormService(app.workspace).update_settings(parse_assignments(pairs)))


@form.command()
@click.option("--yes", is_flag=True, help="Skip confirmation.")
@click.pass_obj
def clear(app: AppContext, yes: bool) -> None:
    """Remove every field, group, and validator (undo restores them)."""
    from formctl.services.forms import FormService

    if not yes and not click.confirm("Remove every field, group, and validator?"):
        click.echo("Cancelled.")
        return
    app.emit(FormService(app.workspace).clear_fields())
