"""Rich theme and off-screen rendering for the inspection commands.

Renderers never print: they build Rich renderables and turn them into a
string here, so commands decide where the text goes. Output written to a
non-TTY (tests, pipes) carries no color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console, RenderableType
from rich.theme import Theme

DEFAULT_WIDTH = 120

SWITCHYARD_THEME = Theme(
    {
        "sy.kind.request": "green",
        "sy.kind.stream": "cyan",
        "sy.kind.notification": "yellow",
        "sy.message": "bold",
        "sy.handler": "bold blue",
        "sy.behavior": "magenta",
        "sy.dim": "dim",
    }
)


def kind_style(kind: str) -> str:
    """Theme style for a route kind (``request``, ``stream``, ``notification``)."""
    return f"sy.kind.{kind}"


def render(*renderables: RenderableType, width: int | None = None) -> str:
    """Render *renderables* with the switchyard theme and return the text."""
    buffer = StringIO()
    console = Console(
        file=buffer,
        theme=SWITCHYARD_THEME,
        highlight=False,
        width=width or DEFAULT_WIDTH,
    )
    for renderable in renderables:
        console.print(renderable)
    return buffer.getvalue().rstrip("\n")
