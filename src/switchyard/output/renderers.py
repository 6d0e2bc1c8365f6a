"""Human and JSON renderings of the routing table and plugin list."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from rich.table import Table
from rich.text import Text

from switchyard.output.console import kind_style, render

if TYPE_CHECKING:
    from switchyard.core.registry import RouteInfo


def _routes_table(routes: list[RouteInfo]) -> Table:
    table = Table(title="Routes")
    table.add_column("Kind")
    table.add_column("Message", style="sy.message")
    table.add_column("Response")
    table.add_column("Handlers", style="sy.handler")
    table.add_column("Pipeline", style="sy.behavior")
    table.add_column("Validators", justify="right")
    for route in routes:
        table.add_row(
            Text(route.kind, style=kind_style(route.kind)),
            route.message,
            route.response or "-",
            ", ".join(route.handlers),
            # Outermost behavior first, matching execution order.
            " > ".join(route.behaviors) or "-",
            str(route.validators) if route.kind == "request" else "-",
        )
    return table


def render_routes(routes: list[RouteInfo], *, json_output: bool = False) -> str:
    """Render the routing table, or a JSON array of route rows."""
    if json_output:
        return json.dumps([route.model_dump(mode="json") for route in routes], indent=2)
    if not routes:
        return render(Text("No routes registered.", style="sy.dim"))
    return render(_routes_table(routes))


def render_plugins(names: list[str], *, json_output: bool = False) -> str:
    if json_output:
        return json.dumps({"plugins": names, "count": len(names)}, indent=2)
    if not names:
        return "No plugins loaded."
    return "\n".join(names)
