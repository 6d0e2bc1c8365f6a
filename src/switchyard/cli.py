"""``switchyard`` command: inspect what a project's configuration assembles."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click

from switchyard import __version__
from switchyard.commands import register_commands
from switchyard.commands._context import AppContext
from switchyard.config.settings import SwitchyardSettings


def _flag_overrides(
    *, json_output: bool, verbose: bool, log_json: bool, no_plugins: bool
) -> dict[str, Any]:
    """Settings overrides for the flags actually given.

    Unset flags are left out so ``SWITCHYARD_*`` env vars and the config
    file still apply.
    """
    overrides: dict[str, Any] = {}
    if json_output:
        overrides["json_output"] = True
    if verbose:
        overrides["verbose"] = True
    if log_json:
        overrides["log_json"] = True
    if no_plugins:
        overrides["plugins"] = {"enabled": False}
    return overrides


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="switchyard")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging (registrations, cache hits).")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Use this config file.")
@click.option(
    "--root",
    "project_root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project directory (default: where the config file is, else CWD).",
)
@click.option("--no-plugins", is_flag=True, help="Skip entry-point and local plugin discovery.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    project_root: Path | None,
    no_plugins: bool,
) -> None:
    """switchyard: show the routes, pipelines, and plugins a project assembles."""
    settings = SwitchyardSettings.load(
        config_path=config_path,
        project_root=project_root,
        **_flag_overrides(
            json_output=json_output,
            verbose=verbose,
            log_json=log_json,
            no_plugins=no_plugins,
        ),
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
