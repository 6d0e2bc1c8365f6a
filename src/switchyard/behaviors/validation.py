"""Validation — run every validator bound to the request type first.

Validators are read-only, so they run concurrently in a task group. Their
field errors are combined; any error at all stops the pipeline with
:class:`ValidationFailed` before the handler is reached. A validator that
raises instead takes the others down with it, and its own exception leaves
the behavior.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import structlog

from switchyard.core.errors import ValidationFailed
from switchyard.core.pipeline import Next, PipelineBehavior
from switchyard.domain.types import FieldError

if TYPE_CHECKING:
    from switchyard.core.cancellation import CancellationToken
    from switchyard.core.registry import HandlerRegistry

log = structlog.get_logger(__name__)


@runtime_checkable
class Validator(Protocol):
    """External validation capability for one request type.

    Implementations may also declare a ``cancellation`` keyword parameter
    to receive the dispatch's :class:`CancellationToken`.
    """

    async def validate(self, request: Any) -> Sequence[FieldError]: ...


def _accepts_cancellation(func: Any) -> bool:
    try:
        params = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return False
    return any(
        p.name == "cancellation" or p.kind is inspect.Parameter.VAR_KEYWORD for p in params
    )


async def _run_validator(
    validator: Any, request: Any, cancellation: CancellationToken
) -> list[FieldError]:
    method = getattr(validator, "validate", None)
    func = method if callable(method) else validator
    if _accepts_cancellation(func):
        outcome = func(request, cancellation=cancellation)
    else:
        outcome = func(request)
    if inspect.isawaitable(outcome):
        outcome = await outcome
    return [
        error if isinstance(error, FieldError) else FieldError.model_validate(error)
        for error in outcome or ()
    ]


class ValidationBehavior(PipelineBehavior):
    """Pass through valid requests; fail fast on invalid ones.

    Request types found to have no validators are remembered so later
    dispatches skip the lookup. The memo assumes registration finished
    before the first dispatch.
    """

    def __init__(self, registry: HandlerRegistry) -> None:
        self._registry = registry
        self._unvalidated: set[type] = set()

    async def handle(self, request: Any, next_: Next, cancellation: CancellationToken) -> Any:
        request_type = type(request)
        if request_type in self._unvalidated:
            return await next_()

        validators = self._registry.resolve_validators(request_type)
        if not validators:
            self._unvalidated.add(request_type)
            return await next_()

        try:
            async with asyncio.TaskGroup() as group:
                tasks = [
                    group.create_task(_run_validator(v, request, cancellation))
                    for v in validators
                ]
        except ExceptionGroup as failed:
            raise failed.exceptions[0] from None
        errors = [error for task in tasks for error in task.result()]
        if not errors:
            return await next_()

        log.warning(
            "validation.failed",
            request_type=request_type.__name__,
            error_count=len(errors),
        )
        for error in errors:
            log.debug("validation.error", field=error.field, message=error.message)
        raise ValidationFailed(request_type, errors)
