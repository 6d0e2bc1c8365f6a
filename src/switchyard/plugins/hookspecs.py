"""Pluggy hook specifications for populating the handler registry.

Hooks run once, at startup, in :func:`switchyard.bootstrap.build_mediator`:
handlers and validators first, then behaviors after the configured
built-ins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from switchyard.core.registry import HandlerRegistry

PROJECT_NAME = "switchyard"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class SwitchyardHookSpec:
    """Hook specifications for the switchyard plugin system."""

    @hookspec
    def register_handlers(self, registry: HandlerRegistry) -> None:
        """Bind request, stream, and notification handlers."""

    @hookspec
    def register_validators(self, registry: HandlerRegistry) -> None:
        """Bind validators to request types."""

    @hookspec
    def register_behaviors(self, registry: HandlerRegistry) -> None:
        """Append pipeline behaviors after the configured built-ins."""
