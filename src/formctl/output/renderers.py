"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from formctl.output.console import create_console, get_output

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from formctl.services.result import ServiceResult

type Renderer = Callable[[ServiceResult, Console], None]


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to text (plain when not attached to a terminal)."""
    console = create_console()
    if result.ok:
        _OP_RENDERERS.get(result.op, _render_generic)(result, console)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output: ids for listings, the content for exports, else a status line."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"
    if "content" in result.data:
        return str(result.data["content"])
    items = result.data.get("items")
    if isinstance(items, list):
        return "\n".join(str(item.get("id", "")) for item in items if isinstance(item, dict))
    return f"OK: {result.op}"


# --- Helpers ---


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="form.ok"), Text(f"  {result.op}", style="form.op"))


def _field(console: Console, key: str, value: Any) -> None:
    k = Text(f"  {key}: ", style="form.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="form.id")
    elif key == "name":
        v = Text(str(value), style="form.name")
    elif isinstance(value, dict | list):
        v = Text(json.dumps(value, separators=(",", ":"), ensure_ascii=False))
    else:
        v = Text(str(value))
    console.print(k, v, sep="")


def _field_table(fields: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Name", style="form.name")
    table.add_column("Type", style="form.type")
    table.add_column("Label")
    table.add_column("Required")
    table.add_column("ID", style="form.id", no_wrap=True)
    for f in fields:
        config = f.get("config") or {}
        table.add_row(
            str(f.get("order", "")),
            str(f.get("name", "")),
            str(f.get("type", "")),
            str(f.get("label", "")),
            "yes" if config.get("required") else "",
            str(f.get("id", "")),
        )
    return table


# --- Renderers ---


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    code = f" [{err.code}]" if err else ""
    console.print(
        Text("ERROR", style="form.error"), Text(f"  {result.op}{code}", style="form.op"), f": {msg}"
    )
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


def _render_generic(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


def _render_form(result: ServiceResult, console: Console) -> None:
    d = result.data
    console.print(
        Text(str(d.get("name", "")), style="form.name"),
        Text(f"  {d.get('id')}", style="form.id"),
    )
    if d.get("saved") is False:
        console.print(Text("  unsaved changes", style="form.warning"))
    if d.get("description"):
        console.print(f"  {d['description']}")
    fields = d.get("fields", [])
    if fields:
        console.print(_field_table(fields))
    groups = d.get("groups", [])
    if groups:
        console.print("\n[form.group]Groups[/form.group]")
        for g in groups:
            console.print(f"  {g['name']} ({g['label']})  [form.id]{g['id']}[/form.id]")
    validators = d.get("cross_validators", [])
    if validators:
        console.print("\n[form.group]Cross validators[/form.group]")
        for v in validators:
            console.print(f"  {v['name']}: {v['type']} {', '.join(v['fields'])}")
    console.print(f"\n{len(fields)} fields, {len(groups)} groups, {len(validators)} validators")


def _render_field_list(result: ServiceResult, console: Console) -> None:
    for bucket in result.data.get("buckets", []):
        group = bucket.get("group")
        title = group["label"] or group["name"] if group else "(ungrouped)"
        console.print(Text(title, style="form.group"))
        if bucket["fields"]:
            console.print(_field_table(bucket["fields"]))
        else:
            console.print("  (empty)")
    console.print(f"\n{result.data.get('count', 0)} fields")


def _render_form_list(result: ServiceResult, console: Console) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="form.id", no_wrap=True)
    table.add_column("Name", style="form.name")
    table.add_column("Fields", justify="right")
    table.add_column("Saved")
    table.add_column("")
    for item in items:
        table.add_row(
            item["id"],
            item["name"],
            str(item["fields"]),
            item["saved_at"],
            "*" if item.get("current") else "",
        )
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} saved forms")


def _render_check(result: ServiceResult, console: Console) -> None:
    """Issues grouped by category."""
    issues = result.data.get("issues", [])
    if not issues:
        console.print("[form.ok]OK[/form.ok]  No issues found.")
        return

    severity_styles = {"error": "form.error", "warning": "form.warning"}
    by_category: dict[str, list[dict[str, Any]]] = {}
    for issue in issues:
        by_category.setdefault(str(issue.get("category", "unknown")), []).append(issue)

    for category, category_issues in by_category.items():
        console.print(f"\n[bold]{category}[/bold]")
        for issue in category_issues:
            sev = str(issue.get("severity", "warning"))
            style = severity_styles.get(sev, "")
            prefix = f"[{style}]{sev}[/{style}]" if style else sev
            console.print(f"  {prefix}: ", Text(str(issue.get("message", ""))), sep="")

    errors = sum(1 for i in issues if i.get("severity") == "error")
    console.print(f"\n{errors} errors, {len(issues) - errors} warnings")


def _render_export(result: ServiceResult, console: Console) -> None:
    if "content" in result.data:
        console.print(Text(str(result.data["content"])), end="", soft_wrap=True)
        return
    _status_line(console, result)
    _field(console, "path", result.data.get("path", ""))


def _render_preview(result: ServiceResult, console: Console) -> None:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Field", style="form.name")
    table.add_column("Visible")
    table.add_column("Disabled")
    table.add_column("Value")
    table.add_column("Error", style="form.error")
    values = result.data.get("values", {})
    errors = result.data.get("errors", {})
    for name, state in result.data.get("fields", {}).items():
        value = values.get(name)
        table.add_row(
            Text(name, style="" if state["visible"] else "form.hidden"),
            "yes" if state["visible"] else "no",
            "yes" if state["disabled"] else "no",
            "" if value is None else json.dumps(value, ensure_ascii=False),
            Text(errors.get(name, "")),
        )
    console.print(table)
    for validator, message in result.data.get("cross_errors", {}).items():
        console.print(Text(f"  {validator}: ", style="form.key"), Text(message), sep="")
    if result.data.get("valid") is False:
        count = len(errors) + len(result.data.get("cross_errors", {}))
        console.print(f"\n[form.error]{count} validation errors[/form.error]")


_OP_RENDERERS: dict[str, Renderer] = {
    "show_form": _render_form,
    "list_fields": _render_field_list,
    "list_forms": _render_form_list,
    "check": _render_check,
    "export_json": _render_export,
    "export_typescript": _render_export,
    "preview": _render_preview,
}
