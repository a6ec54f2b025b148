"""Command group: field editing (add, remove, set, move, list, clipboard)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from formctl.commands._base import FormGroup, parse_assignments, parse_value
from formctl.domain.catalog import FIELD_TYPES
from formctl.domain.types import MoveDirection, Operator, RuleKind

if TYPE_CHECKING:
    from formctl.commands._context import AppContext


_FIELD_EXAMPLES = """\
  formctl field add email email --label "E-posta / Email" --required
  formctl field add select country --config 'options=[{"value":"TR","label":"Türkiye"}]'
  formctl field set taxNumber --show-when country equals TR
  formctl field set email --config maxLength=120 --config placeholder=null
  formctl field move email --up
  formctl field list"""


def _rule_option(kind: RuleKind) -> Any:
    flag = "--" + kind.value.replace("When", "-when")
    return click.option(
        flag,
        kind.value,
        nargs=3,
        default=None,
        metavar="FIELD OPERATOR VALUE",
        help=f"Set the {kind.value} rule (use '' as VALUE for isEmpty/isNotEmpty).",
    )


def _build_rule(spec: tuple[str, str, str] | None) -> dict[str, Any] | None:
    if spec is None:
        return None
    target, operator, raw = spec
    if operator not in {op.value for op in Operator}:
        msg = f"Unknown operator {operator!r}"
        raise click.BadParameter(msg)
    rule: dict[str, Any] = {"field": target, "operator": operator}
    if raw != "":
        rule["value"] = parse_value(raw)
    return rule


@click.group(cls=FormGroup, examples=_FIELD_EXAMPLES)
def field() -> None:
    """Add, edit, reorder, and remove fields of the current form."""


@field.command(
    examples="""\
  formctl field add string fullName --label "Ad Soyad / Full Name" --required
  formctl field add textarea notes --group details --config rows=6
  formctl field add calculated total --config 'formula={price} * {quantity}'"""
)
@click.argument("field_type", metavar="TYPE")
@click.argument("name")
@click.option("--label", default="", help="Display label.")
@click.option("--group", default=None, help="Group id or name.")
@click.option("--required", is_flag=True, help="Mark the field as required.")
@click.option("--config", "config_pairs", multiple=True, help="Config KEY=VALUE (repeatable).")
@click.pass_obj
def add(
    app: AppContext,
    field_type: str,
    name: str,
    label: str,
    group: str | None,
    required: bool,
    config_pairs: tuple[str, ...],
) -> None:
    """Add a field. TYPE is one of the catalog types (see `formctl field types`)."""
    from formctl.services.forms import FormService

    config = parse_assignments(config_pairs)
    if required:
        config["required"] = True
    svc = FormService(app.workspace)
    app.emit(svc.add_field(field_type, name, label=label, group=group, config=config))


@field.command()
@click.argument("ref")
@click.option("--force", is_flag=True, help="Remove even if other rules reference it.")
@click.pass_obj
def remove(app: AppContext, ref: str, force: bool) -> None:
    """Remove a field (by id or name)."""
    from formctl.services.forms import FormService

    app.emit(FormService(app.workspace).remove_field(ref, force=force))


@field.command(
    name="set",
    examples="""\
  formctl field set email --label "Work email"
  formctl field set email --config required=true --config hint=null
  formctl field set vatId --show-when companyType equals corporate
  formctl field set vatId --clear-rule showWhen""",
)
@click.argument("ref")
@click.option("--name", default=None, help="Rename the field.")
@click.option("--label", default=None, help="Change the label.")
@click.option("--config", "config_pairs", multiple=True, help="Config KEY=VALUE; null removes.")
@_rule_option(RuleKind.SHOW_WHEN)
@_rule_option(RuleKind.HIDE_WHEN)
@_rule_option(RuleKind.DISABLE_WHEN)
@click.option(
    "--clear-rule",
    "clear_rules",
    multiple=True,
    type=click.Choice([k.value for k in RuleKind]),
    help="Remove a conditional rule (repeatable).",
)
@click.pass_obj
def set_cmd(
    app: AppContext,
    ref: str,
    name: str | None,
    label: str | None,
    config_pairs: tuple[str, ...],
    clear_rules: tuple[str, ...],
    **rules: tuple[str, str, str] | None,
) -> None:
    """Edit a field's name, label, config, or conditional rules."""
    from formctl.services.forms import FormService

    svc = FormService(app.workspace)
    config = parse_assignments(config_pairs)

    result = None
    if name is not None or label is not None or config:
        result = svc.update_field(ref, name=name, label=label, config=config)
        if not result.ok:
            app.emit(result)
        if name is not None:
            ref = name

    for kind in RuleKind:
        rule = _build_rule(rules.get(kind.value))
        if rule is not None:
            result = svc.set_rule(ref, kind, rule)
        elif kind.value in clear_rules:
            result = svc.set_rule(ref, kind, None)
        else:
            continue
        if not result.ok:
            app.emit(result)

    if result is None:
        raise click.UsageError("Nothing to change.")
    app.emit(result)


@field.command(
    examples="""\
  formctl field move email --up
  formctl field move email --to 0
  formctl field move email --group contact
  formctl field move email --ungroup"""
)
@click.argument("ref")
@click.option("--up", "direction", flag_value=MoveDirection.UP.value, help="Move one step up.")
@click.option(
    "--down", "direction", flag_value=MoveDirection.DOWN.value, help="Move one step down."
)
@click.option("--to", "to_index", type=int, default=None, help="Move to a zero-based position.")
@click.option("--group", default=None, help="Move into a group (id or name).")
@click.option("--ungroup", is_flag=True, help="Remove the field from its group.")
@click.pass_obj
def move(
    app: AppContext,
    ref: str,
    direction: str | None,
    to_index: int | None,
    group: str | None,
    ungroup: bool,
) -> None:
    """Reorder a field or move it between groups."""
    from formctl.services.forms import FormService

    svc = FormService(app.workspace)
    app.emit(
        svc.move_field(
            ref,
            direction=MoveDirection(direction) if direction else None,
            to_index=to_index,
            group=group,
            ungroup=ungroup,
        )
    )


@field.command(name="list")
@click.pass_obj
def list_fields(app: AppContext) -> None:
    """List fields, grouped."""
    from formctl.services.forms import FormService

    app.emit(FormService(app.workspace).list_fields())


@field.command()
def types() -> None:
    """List the field types in the catalog."""
    for spec in FIELD_TYPES:
        click.echo(f"{spec.type:<12} {spec.category.value:<10} {spec.label_en}")


@field.command()
@click.argument("ref")
@click.pass_obj
def duplicate(app: AppContext, ref: str) -> None:
    """Add a copy of a field (named NAME_copy) to the same group."""
    from formctl.services.forms import FormService

    app.emit(FormService(app.workspace).duplicate_field(ref))


@field.command(name="copy")
@click.argument("ref")
@click.pass_obj
def copy_cmd(app: AppContext, ref: str) -> None:
    """Copy a field to the clipboard."""
    from formctl.services.forms import FormService

    app.emit(FormService(app.workspace).copy_field(ref))


@field.command()
@click.argument("ref")
@click.pass_obj
def cut(app: AppContext, ref: str) -> None:
    """Copy a field to the clipboard and remove it."""
    from formctl.services.forms import FormService

    app.emit(FormService(app.workspace).copy_field(ref, cut=True))


@field.command(
    examples="""\
  formctl field copy email
  formctl field paste
  formctl field paste --group contact"""
)
@click.option("--group", default=None, help="Paste into this group (id or name).")
@click.pass_obj
def paste(app: AppContext, group: str | None) -> None:
    """Add the clipboard field as a new field (NAME_paste)."""
    from formctl.services.forms import FormService

    app.emit(FormService(app.workspace).paste_field(group))
