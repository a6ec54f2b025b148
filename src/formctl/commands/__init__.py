"""Subcommand modules for formctl.

``register_commands()`` imports command modules lazily so
``formctl --help`` stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root group."""
    # --- Groups ---
    from formctl.commands.export import export
    from formctl.commands.field import field
    from formctl.commands.form import form
    from formctl.commands.group import group
    from formctl.commands.validator import validator

    cli.add_command(form)
    cli.add_command(field)
    cli.add_command(group)
    cli.add_command(validator)
    cli.add_command(export)

    # --- Standalone commands ---
    from formctl.commands.check import check
    from formctl.commands.history import redo, undo
    from formctl.commands.prefs import prefs
    from formctl.commands.preview import preview

    cli.add_command(check)
    cli.add_command(preview)
    cli.add_command(undo)
    cli.add_command(redo)
    cli.add_command(prefs)
