"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. The mediator is assembled lazily so ``--help`` and
``--version`` never load plugins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from switchyard.config.settings import SwitchyardSettings
    from switchyard.core.mediator import Mediator
    from switchyard.plugins.manager import PluginManager


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: SwitchyardSettings) -> None:
        self.settings = settings
        self._plugin_manager: PluginManager | None = None
        self._mediator: Mediator | None = None

        from switchyard.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def plugin_manager(self) -> PluginManager:
        if self._plugin_manager is None:
            from switchyard.plugins.manager import PluginManager

            self._plugin_manager = PluginManager()
        return self._plugin_manager

    @property
    def mediator(self) -> Mediator:
        """The assembled mediator (built on first access)."""
        if self._mediator is None:
            from switchyard.bootstrap import build_mediator

            try:
                self._mediator = build_mediator(
                    self.settings, plugin_manager=self.plugin_manager
                )
            except ValueError as exc:
                raise click.ClickException(str(exc)) from exc
        return self._mediator

    def plugin_names(self) -> list[str]:
        """Names of all plugins in effect once the mediator is assembled."""
        _ = self.mediator
        return self.plugin_manager.list_plugin_names()

    def emit(self, output: str) -> None:
        click.echo(output)
