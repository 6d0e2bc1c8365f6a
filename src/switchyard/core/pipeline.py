"""Pipeline behaviors — nested middleware around the terminal handler call.

Each behavior receives the request, a zero-argument continuation standing
for the rest of the pipeline, and the dispatch's cancellation token. It
may call the continuation once (pass-through), never (short-circuit), or
inspect and transform what comes back.

:func:`build_pipeline` folds the behaviors right-to-left so that the
first-registered behavior is the outermost call: "before" code runs in
registration order and "after" code in reverse.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from switchyard.core.cancellation import CancellationToken

# The rest of the pipeline, ending at the real handler.
Next = Callable[[], Awaitable[Any]]


class PipelineBehavior(ABC):
    """Cross-cutting wrapper around handler execution."""

    @abstractmethod
    async def handle(self, request: Any, next_: Next, cancellation: CancellationToken) -> Any:
        """Process *request*; await ``next_()`` to continue the pipeline.

        Not awaiting ``next_`` short-circuits everything inside this
        behavior, including the handler.
        """

    def applies_to(self, request_type: type, response_type: Any) -> bool:
        """Whether this behavior takes part in pipelines for the given pair."""
        return True

    @property
    def name(self) -> str:
        return self.__class__.__name__


BehaviorFunction = Callable[[Any, Next, "CancellationToken"], Awaitable[Any]]


class FunctionBehavior(PipelineBehavior):
    """Adapt a plain async function into a behavior."""

    def __init__(self, func: BehaviorFunction, name: str | None = None) -> None:
        self._func = func
        self._name = name or getattr(func, "__name__", "FunctionBehavior")

    async def handle(self, request: Any, next_: Next, cancellation: CancellationToken) -> Any:
        return await self._func(request, next_, cancellation)

    @property
    def name(self) -> str:
        return self._name


def _wrap(
    behavior: PipelineBehavior,
    request: Any,
    inner: Next,
    cancellation: CancellationToken,
) -> Next:
    """Bind one behavior around *inner*.

    A standalone function so each closure captures its own behavior and
    continuation rather than the loop variables.
    """

    async def _next() -> Any:
        return await behavior.handle(request, inner, cancellation)

    return _next


def build_pipeline(
    request: Any,
    behaviors: Sequence[PipelineBehavior],
    terminal: Next,
    cancellation: CancellationToken,
) -> Next:
    """Compose *behaviors* around *terminal* into a single continuation."""
    pipeline = terminal
    for behavior in reversed(behaviors):
        pipeline = _wrap(behavior, request, pipeline, cancellation)
    return pipeline
