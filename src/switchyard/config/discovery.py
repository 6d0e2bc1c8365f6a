"""Locate and read the project's switchyard configuration.

Two places are recognized, checked directory by directory from the start
path up to the filesystem root:

* ``switchyard.toml`` (the whole file is switchyard's)
* ``pyproject.toml`` with a ``[tool.switchyard]`` table

A dedicated file wins over ``pyproject.toml`` in the same directory. The
``SWITCHYARD_CONFIG`` env var and the ``--config`` flag bypass the search.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

import click

CONFIG_FILENAME = "switchyard.toml"
PYPROJECT_FILENAME = "pyproject.toml"
CONFIG_ENV_VAR = "SWITCHYARD_CONFIG"


def _parse(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc


def _tool_table(data: dict[str, Any]) -> dict[str, Any] | None:
    table = data.get("tool", {}).get("switchyard")
    return table if isinstance(table, dict) else None


def _pyproject_declares_table(path: Path) -> bool:
    # A broken pyproject.toml belongs to some other tool; skip it while searching.
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        return False
    return _tool_table(data) is not None


def find_config(start: Path | None = None) -> Path | None:
    """Return the configuration file in effect for *start* (default: cwd).

    ``SWITCHYARD_CONFIG`` takes precedence; if it names a missing file the
    result is None rather than a fallback search.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path)
        return path if path.is_file() else None

    directory = (start or Path.cwd()).resolve()
    for candidate_dir in (directory, *directory.parents):
        dedicated = candidate_dir / CONFIG_FILENAME
        if dedicated.is_file():
            return dedicated
        pyproject = candidate_dir / PYPROJECT_FILENAME
        if pyproject.is_file() and _pyproject_declares_table(pyproject):
            return pyproject
    return None


def read_config(path: Path) -> dict[str, Any]:
    """Load the settings table from *path*.

    For ``pyproject.toml`` only ``[tool.switchyard]`` is returned (empty if
    the table is absent). Invalid TOML raises :class:`click.ClickException`.
    """
    data = _parse(path)
    if path.name == PYPROJECT_FILENAME:
        return _tool_table(data) or {}
    return data
