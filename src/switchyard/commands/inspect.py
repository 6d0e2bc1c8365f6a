"""Commands: inspect the routes and plugins a configuration produces."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from switchyard.commands._context import AppContext


@click.command()
@click.option(
    "--kind",
    type=click.Choice(["request", "stream", "notification"]),
    default=None,
    help="Only show routes of this kind.",
)
@click.pass_obj
def routes(app: AppContext, kind: str | None) -> None:
    """Show every registered route and the behaviors wrapping it."""
    from switchyard.output.renderers import render_routes

    rows = app.mediator.registry.describe()
    if kind is not None:
        rows = [row for row in rows if row.kind == kind]
    app.emit(render_routes(rows, json_output=app.settings.json_output))


@click.command()
@click.pass_obj
def plugins(app: AppContext) -> None:
    """List the plugins discovered for this project."""
    from switchyard.output.renderers import render_plugins

    names = app.plugin_names()
    app.emit(render_plugins(names, json_output=app.settings.json_output))
