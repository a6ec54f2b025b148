"""The ``formctl`` entry point.

Every invocation loads the workspace state, applies one edit or query to
the current form, and writes the state back, so a sequence of commands
behaves like one long editing session.
"""

from __future__ import annotations

from pathlib import Path

import click

from formctl import __version__
from formctl.commands import register_commands
from formctl.commands._base import FormGroup
from formctl.commands._context import AppContext
from formctl.config.settings import FormctlSettings

_ROOT_EXAMPLES = """\
  formctl form template contact
  formctl field add email email --required
  formctl field set taxNumber --show-when country equals TR
  formctl check
  formctl export schema -o contact-form.ts
  formctl -C ~/forms/invoice --json form show"""


@click.group(cls=FormGroup, invoke_without_command=True, examples=_ROOT_EXAMPLES)
@click.version_option(__version__, prog_name="formctl")
@click.option(
    "-C",
    "--workspace",
    "workspace_root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Workspace directory (default: nearest with formctl.toml or .formctl/, else cwd).",
)
@click.option("-c", "--config", "config_path", default=None, help="Use this formctl.toml.")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print ids and content only.")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logs and error details.")
@click.option("--log-json", is_flag=True, help="Emit logs on stderr as JSON lines.")
@click.pass_context
def cli(
    ctx: click.Context,
    workspace_root: Path | None,
    config_path: str | None,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
) -> None:
    """formctl: build form definitions and export them as JSON or schema code."""
    ctx.obj = AppContext(
        FormctlSettings.from_cli(
            config_path=config_path,
            workspace_root=workspace_root,
            json_output=json_output,
            quiet=quiet,
            verbose=verbose,
            log_json=log_json,
        )
    )
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
