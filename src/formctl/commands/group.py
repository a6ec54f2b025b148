"""Command group: field groups."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from formctl.commands._base import FormGroup

if TYPE_CHECKING:
    from formctl.commands._context import AppContext


@click.group(
    cls=FormGroup,
    examples="""\
  formctl group add contact --label "İletişim / Contact"
  formctl group set contact --collapsible
  formctl field move email --group contact
  formctl group remove contact""",
)
def group() -> None:
    """Manage field groups of the current form."""


@group.command()
@click.argument("name")
@click.option("--label", default="", help="Display label (defaults to NAME).")
@click.option("--description", default=None, help="Group description.")
@click.pass_obj
def add(app: AppContext, name: str, label: str, description: str | None) -> None:
    """Add a group."""
    from formctl.services.forms import FormService

    app.emit(FormService(app.workspace).add_group(name, label, description))


@group.command()
@click.argument("ref")
@click.pass_obj
def remove(app: AppContext, ref: str) -> None:
    """Remove a group. Its fields stay on the form, ungrouped."""
    from formctl.services.forms import FormService

    app.emit(FormService(app.workspace).remove_group(ref))


@group.command(
    name="set",
    examples="""\
  formctl group set contact --label "İletişim / Contact"
  formctl group set contact --collapsible --collapsed""",
)
@click.argument("ref")
@click.option("--name", default=None, help="Rename the group.")
@click.option("--label", default=None, help="Change the label.")
@click.option("--description", default=None, help="Change the description.")
@click.option("--collapsible/--fixed", default=None, help="Whether the group can collapse.")
@click.option("--collapsed/--expanded", default=None, help="Initial collapsed state.")
@click.pass_obj
def set_cmd(
    app: AppContext,
    ref: str,
    name: str | None,
    label: str | None,
    description: str | None,
    collapsible: bool | None,
    collapsed: bool | None,
) -> None:
    """Edit a group's name, label, description, or collapse behaviour."""
    from formctl.services.forms import FormService

    patch = {
        key: value
        for key, value in (
            ("name", name),
            ("label", label),
            ("description", description),
            ("collapsible", collapsible),
            ("collapsed", collapsed),
        )
        if value is not None
    }
    if not patch:
        raise click.UsageError("Nothing to change.")
    app.emit(FormService(app.workspace).update_group(ref, patch))
