"""The zero-information result of a command.

Commands route through the same result-typed pipeline as queries; their
terminal step returns :data:`UNIT` once the handler completes.
"""

from __future__ import annotations

from typing import Any


class Unit:
    """Singleton marker standing in for "no meaningful result"."""

    __slots__ = ()

    _instance: Unit | None = None

    def __new__(cls) -> Unit:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Unit)

    def __hash__(self) -> int:
        return 0

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "()"

    def __reduce__(self) -> tuple[Any, ...]:
        return (Unit, ())


UNIT = Unit()
