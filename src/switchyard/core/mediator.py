"""Mediator — the dispatch engine behind ``send``, ``publish``, and ``stream``.

``send`` builds a fresh behavior chain per call around a terminal step
that resolves the handler lazily. A behavior that never continues (a
cache hit, for example) therefore succeeds even when no handler is
registered; any behavior that does continue hits :class:`HandlerNotFound`
at that point.

``publish`` starts every notification handler concurrently, waits for all
of them to settle, and only then reports the first failure.

``stream`` bypasses the behavior chain and hands back the handler's own
sequence, checking the cancellation token at every element boundary.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any

import structlog

from switchyard.core.cancellation import CancellationToken
from switchyard.core.errors import FanOutFailure
from switchyard.core.pipeline import build_pipeline
from switchyard.domain.messages import Notification, Request, StreamRequest, response_type_of
from switchyard.domain.unit import UNIT, Unit

if TYPE_CHECKING:
    from switchyard.core.registry import HandlerRegistry, Route

logger = logging.getLogger(__name__)


class Mediator:
    """Routes requests to one handler and notifications to all of theirs.

    Parameters:
        registry: A populated :class:`HandlerRegistry`. The mediator only
            reads from it; handler and behavior instances are borrowed
            for the duration of each call.
    """

    def __init__(self, registry: HandlerRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def send(
        self,
        request: Request[Any],
        *,
        response_type: Any = None,
        cancellation: CancellationToken | None = None,
    ) -> Any:
        """Run *request* through its behavior chain and handler.

        *response_type* defaults to the type the request class declares.
        Commands (requests declaring ``Unit``) return ``UNIT`` once the
        handler completes, whatever the handler itself returned.
        """
        if not isinstance(request, Request):
            msg = f"send() expects a Request, got {type(request).__name__}"
            raise TypeError(msg)
        token = cancellation or CancellationToken.none()
        token.raise_if_cancelled()

        request_type = type(request)
        if response_type is None:
            response_type = response_type_of(request_type)
        behaviors = self._registry.resolve_behaviors(request_type, response_type)

        registry = self._registry
        returns_unit = response_type is Unit

        async def terminal() -> Any:
            route = registry.resolve_one(request_type, response_type)
            token.raise_if_cancelled()
            result = await route.invoke(request, token)
            return UNIT if returns_unit else result

        pipeline = build_pipeline(request, behaviors, terminal, token)
        with structlog.contextvars.bound_contextvars(message_type=request_type.__name__):
            return await pipeline()

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    async def publish(
        self,
        notification: Notification,
        *,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Deliver *notification* to every registered handler concurrently.

        Returns once all handlers have finished. If any failed, raises
        :class:`FanOutFailure` whose ``first`` is the earliest failure to
        complete; no handler is cancelled because a sibling failed.
        """
        if not isinstance(notification, Notification):
            msg = f"publish() expects a Notification, got {type(notification).__name__}"
            raise TypeError(msg)
        token = cancellation or CancellationToken.none()
        token.raise_if_cancelled()

        notification_type = type(notification)
        routes = self._registry.resolve_many(notification_type)
        if not routes:
            logger.debug("No notification handlers for %s", notification_type.__name__)
            return

        # Tasks copy the current context, so each handler sees the binding.
        with structlog.contextvars.bound_contextvars(message_type=notification_type.__name__):
            tasks = [
                asyncio.create_task(
                    route.invoke(notification, token),
                    name=f"publish:{notification_type.__name__}:{route.handler_name}",
                )
                for route in routes
            ]
        failures: list[BaseException] = []
        try:
            for finished in asyncio.as_completed(tasks):
                try:
                    await finished
                except asyncio.CancelledError as exc:
                    if _caller_cancelling():
                        raise
                    # A handler cancelled itself; that is its failure, not ours.
                    failures.append(exc)
                except Exception as exc:
                    failures.append(exc)
        except BaseException:
            # The publishing task itself was cancelled: take the children down with it.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        if failures:
            logger.debug(
                "%d of %d handlers failed for %s",
                len(failures),
                len(routes),
                notification_type.__name__,
            )
            raise FanOutFailure(notification_type, failures) from failures[0]

    # ------------------------------------------------------------------
    # Streams
    # ------------------------------------------------------------------

    def stream(
        self,
        request: StreamRequest[Any],
        *,
        element_type: Any = None,
        cancellation: CancellationToken | None = None,
    ) -> AsyncIterator[Any]:
        """Return the lazy element sequence produced by the stream handler.

        The handler is resolved immediately, so a missing registration
        raises :class:`HandlerNotFound` here rather than on first
        iteration. Cancelling the token ends the sequence quietly before
        the next element is produced.
        """
        if not isinstance(request, StreamRequest):
            msg = f"stream() expects a StreamRequest, got {type(request).__name__}"
            raise TypeError(msg)
        token = cancellation or CancellationToken.none()
        token.raise_if_cancelled()

        request_type = type(request)
        if element_type is None:
            element_type = response_type_of(request_type)
        route = self._registry.resolve_stream(request_type, element_type)
        return _drain(route, request, token)


def _caller_cancelling() -> bool:
    """Whether cancellation of the running task itself is pending."""
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0


async def _drain(route: Route, request: Any, token: CancellationToken) -> AsyncIterator[Any]:
    """Relay elements from the handler, stopping at the first cancelled boundary."""
    if token.cancelled:
        return
    source = await route.invoke(request, token)
    try:
        while not token.cancelled:
            try:
                item = await source.__anext__()
            except StopAsyncIteration:
                return
            if token.cancelled:
                return
            yield item
    finally:
        aclose = getattr(source, "aclose", None)
        if aclose is not None:
            await aclose()
