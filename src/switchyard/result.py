"""Result — success-or-failure value for handlers that report expected errors.

Handlers may return a :class:`Result` instead of raising when a failure is
part of normal control flow ("not found", "already exists"). The dispatch
engine treats it like any other response value.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, model_validator

from switchyard.domain.unit import UNIT, Unit

T = TypeVar("T")


class ResultError(RuntimeError):
    """Accessed the wrong side of a :class:`Result`."""


class Result(BaseModel, Generic[T]):
    """Frozen success/failure container.

    Attributes:
        ok: Whether the operation succeeded.
        value: Payload on success, ``None`` on failure.
        error: Failure message, ``None`` on success.
    """

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    ok: bool
    value: T | None = None
    error: str | None = None

    @model_validator(mode="after")
    def _check_sides(self) -> Result[T]:
        if self.ok and self.error is not None:
            msg = "A successful result cannot carry an error"
            raise ValueError(msg)
        if not self.ok and not self.error:
            msg = "A failed result needs an error message"
            raise ValueError(msg)
        return self

    @classmethod
    def success(cls, value: Any = None) -> Result[Any]:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str) -> Result[Any]:
        return cls(ok=False, error=error)

    @classmethod
    def from_unit(cls, _unit: Unit = UNIT) -> Result[Unit]:
        """A successful result for a completed command."""
        return cls(ok=True, value=UNIT)

    def unwrap(self) -> T:
        """Return the value, or raise :class:`ResultError` on failure."""
        if not self.ok:
            msg = f"Cannot access the value of a failed result. Error: {self.error}"
            raise ResultError(msg)
        return self.value  # type: ignore[return-value]

    def unwrap_error(self) -> str:
        if self.ok:
            msg = "Cannot access the error of a successful result."
            raise ResultError(msg)
        return self.error or ""
