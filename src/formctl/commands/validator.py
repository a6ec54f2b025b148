"""Command group: cross-field validators."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from formctl.commands._base import FormGroup
from formctl.domain.types import CrossValidatorType

if TYPE_CHECKING:
    from formctl.commands._context import AppContext


_VALIDATOR_EXAMPLES = """\
  formctl validator add passwordsMatch fieldsMatch -f password -f passwordConfirm
  formctl validator add contact atLeastOne -f email -f phone --message "E-posta gerekli"
  formctl validator add budget custom -f min -f max --expression "values.min <= values.max"
  formctl validator set passwordsMatch --message "Şifreler eşleşmiyor"
  formctl validator remove passwordsMatch"""


@click.group(cls=FormGroup, examples=_VALIDATOR_EXAMPLES)
def validator() -> None:
    """Manage cross-field validators of the current form."""


@validator.command()
@click.argument("name")
@click.argument(
    "validator_type", metavar="TYPE", type=click.Choice([t.value for t in CrossValidatorType])
)
@click.option(
    "-f", "--field", "fields", multiple=True, required=True, help="Field name (repeatable)."
)
@click.option("--message", default="", help="Error message shown when validation fails.")
@click.option("--expression", default=None, help="Expression body for custom validators.")
@click.pass_obj
def add(
    app: AppContext,
    name: str,
    validator_type: str,
    fields: tuple[str, ...],
    message: str,
    expression: str | None,
) -> None:
    """Add a cross-field validator."""
    from formctl.services.forms import FormService

    svc = FormService(app.workspace)
    app.emit(
        svc.add_validator(
            name, validator_type, list(fields), message=message, expression=expression
        )
    )


@validator.command()
@click.argument("ref")
@click.pass_obj
def remove(app: AppContext, ref: str) -> None:
    """Remove a validator (by id or name)."""
    from formctl.services.forms import FormService

    app.emit(FormService(app.workspace).remove_validator(ref))


@validator.command(
    name="set",
    examples="""\
  formctl validator set passwordsMatch --message "Şifreler eşleşmiyor"
  formctl validator set contact -f email -f phone -f fax""",
)
@click.argument("ref")
@click.option("--name", default=None, help="Rename the validator.")
@click.option(
    "-f", "--field", "fields", multiple=True, help="Replace the field list (repeatable)."
)
@click.option("--message", default=None, help="Error message shown when validation fails.")
@click.option("--expression", default=None, help="Expression body for custom validators.")
@click.pass_obj
def set_cmd(
    app: AppContext,
    ref: str,
    name: str | None,
    fields: tuple[str, ...],
    message: str | None,
    expression: str | None,
) -> None:
    """Edit a validator (by id or name)."""
    from formctl.services.forms import FormService

    patch: dict[str, object] = {}
    if name is not None:
        patch["name"] = name
    if fields:
        patch["fields"] = list(fields)
    if message is not None:
        patch["message"] = message
    if expression is not None:
        patch["customExpression"] = expression
    if not patch:
        raise click.UsageError("Nothing to change.")
    app.emit(FormService(app.workspace).update_validator(ref, patch))
