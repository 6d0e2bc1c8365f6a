"""Subcommand modules for the switchyard inspection CLI.

Provides register_commands() which uses deferred imports to keep
``switchyard --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands on the root CLI group."""
    from switchyard.commands.inspect import plugins, routes

    cli.add_command(routes)
    cli.add_command(plugins)
