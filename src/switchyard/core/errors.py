"""Dispatch error taxonomy.

Handler and behavior exceptions are never wrapped: ``send`` and ``stream``
re-raise the original exception object so callers can match on the cause.
Only engine-level conditions get their own types.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

    from switchyard.domain.types import FieldError


def _type_name(value: Any) -> str:
    return getattr(value, "__name__", repr(value))


class MediatorError(Exception):
    """Base class for errors raised by the dispatch engine itself."""


class HandlerNotFound(MediatorError, LookupError):
    """No handler is registered for a request/response pair."""

    def __init__(self, request_type: type, response_type: Any = None) -> None:
        self.request_type = request_type
        self.response_type = response_type
        if response_type is None:
            msg = f"No handler registered for {_type_name(request_type)}"
        else:
            msg = (
                f"No handler registered for {_type_name(request_type)} "
                f"-> {_type_name(response_type)}"
            )
        super().__init__(msg)


class ValidationFailed(MediatorError):
    """One or more validators reported field errors for a request."""

    def __init__(self, request_type: type, errors: Sequence[FieldError]) -> None:
        self.request_type = request_type
        self.errors: list[FieldError] = list(errors)
        summary = "; ".join(str(error) for error in self.errors)
        super().__init__(
            f"Validation failed for {_type_name(request_type)} "
            f"({len(self.errors)} error(s)): {summary}"
        )


class FanOutFailure(MediatorError):
    """At least one notification handler failed during ``publish``.

    Raised only after every handler has settled. ``first`` is the first
    failure to complete; ``failures`` lists all of them in completion order.
    """

    def __init__(self, notification_type: type, failures: Sequence[BaseException]) -> None:
        if not failures:
            msg = "FanOutFailure requires at least one failure"
            raise ValueError(msg)
        self.notification_type = notification_type
        self.failures: list[BaseException] = list(failures)
        self.first = self.failures[0]
        super().__init__(
            f"{len(self.failures)} handler(s) failed for {_type_name(notification_type)}: "
            f"{self.first!r}"
        )


class OperationCancelled(MediatorError):
    """A dispatch was started or continued on a cancelled token."""
