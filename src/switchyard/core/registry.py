"""Handler registry — the lookup the dispatch engine reads from.

Registration captures the request type, the response type, and a
type-erased async invoker while the concrete types are still known, so
dispatch is a dictionary lookup keyed by ``(request_type, response_type)``
with no per-call introspection.

The registry is populated during startup (directly, or by plugins via
:func:`switchyard.bootstrap.build_mediator`) and only read afterwards.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, Field

from switchyard.core.errors import HandlerNotFound
from switchyard.domain.messages import response_type_of

if TYPE_CHECKING:
    from switchyard.core.cancellation import CancellationToken
    from switchyard.core.pipeline import PipelineBehavior

logger = logging.getLogger(__name__)

Invoker = Callable[[Any, "CancellationToken"], Awaitable[Any]]
StreamInvoker = Callable[[Any, "CancellationToken"], Awaitable[AsyncIterator[Any]]]

RouteKind = Literal["request", "stream", "notification"]


def _handler_callable(handler: Any) -> Callable[..., Any]:
    """Return the callable behind *handler* (its ``handle`` method, or itself)."""
    method = getattr(handler, "handle", None)
    if callable(method):
        return method
    if callable(handler):
        return handler
    msg = f"Handler {handler!r} has no handle() method and is not callable"
    raise TypeError(msg)


def _describe(handler: Any) -> str:
    if inspect.isfunction(handler) or inspect.ismethod(handler):
        return handler.__qualname__
    return handler.__class__.__name__


def _type_label(value: Any) -> str:
    return getattr(value, "__name__", None) or repr(value)


def make_invoker(handler: Any) -> Invoker:
    """Erase *handler* into ``async (request, cancellation) -> result``.

    Plain functions returning a value are accepted as well as coroutines.
    """
    func = _handler_callable(handler)

    async def invoke(request: Any, cancellation: CancellationToken) -> Any:
        result = func(request, cancellation)
        if inspect.isawaitable(result):
            result = await result
        return result

    return invoke


def make_stream_invoker(handler: Any) -> StreamInvoker:
    """Erase a stream handler into ``async (request, cancellation) -> AsyncIterator``."""
    func = _handler_callable(handler)

    async def invoke(request: Any, cancellation: CancellationToken) -> AsyncIterator[Any]:
        produced = func(request, cancellation)
        if inspect.isawaitable(produced) and not hasattr(produced, "__aiter__"):
            produced = await produced
        if not hasattr(produced, "__aiter__"):
            msg = f"Stream handler {_describe(handler)} did not return an async iterable"
            raise TypeError(msg)
        return produced.__aiter__()

    return invoke


@dataclass(frozen=True)
class Route:
    """A registered handler plus its erased invoker."""

    kind: RouteKind
    message_type: type
    response_type: Any
    handler: Any
    invoke: Callable[..., Any]

    @property
    def handler_name(self) -> str:
        return _describe(self.handler)


@dataclass(frozen=True)
class _BehaviorBinding:
    behavior: PipelineBehavior
    request_type: type | None
    response_type: Any

    def matches(self, request_type: type, response_type: Any) -> bool:
        if self.request_type is not None and self.request_type is not request_type:
            return False
        if self.response_type is not None and self.response_type != response_type:
            return False
        return self.behavior.applies_to(request_type, response_type)


class RouteInfo(BaseModel):
    """One row of :meth:`HandlerRegistry.describe`."""

    model_config = {"frozen": True}

    kind: RouteKind
    message: str
    response: str | None = None
    handlers: list[str] = Field(default_factory=list)
    behaviors: list[str] = Field(default_factory=list)
    validators: int = 0


class HandlerRegistry:
    """Lookup from message types to handlers, behaviors, and validators."""

    def __init__(self) -> None:
        self._requests: dict[tuple[type, Any], Route] = {}
        self._streams: dict[tuple[type, Any], Route] = {}
        self._notifications: dict[type, list[Route]] = {}
        self._behaviors: list[_BehaviorBinding] = []
        self._validators: dict[type, list[Any]] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_request_handler(
        self,
        request_type: type,
        handler: Any,
        *,
        response_type: Any = None,
    ) -> HandlerRegistry:
        """Bind *handler* to ``(request_type, response_type)``.

        *response_type* defaults to the type the request class declares.
        A later registration for the same pair replaces the earlier one.
        """
        if response_type is None:
            response_type = response_type_of(request_type)
        key = (request_type, response_type)
        previous = self._requests.get(key)
        route = Route("request", request_type, response_type, handler, make_invoker(handler))
        self._requests[key] = route
        if previous is not None:
            logger.debug(
                "Replaced handler for %s: %s -> %s",
                request_type.__name__,
                previous.handler_name,
                route.handler_name,
            )
        else:
            logger.debug("Registered handler %s for %s", route.handler_name, request_type.__name__)
        return self

    def add_stream_handler(
        self,
        request_type: type,
        handler: Any,
        *,
        element_type: Any = None,
    ) -> HandlerRegistry:
        """Bind a stream *handler* to ``(request_type, element_type)``."""
        if element_type is None:
            element_type = response_type_of(request_type)
        route = Route(
            "stream", request_type, element_type, handler, make_stream_invoker(handler)
        )
        self._streams[(request_type, element_type)] = route
        logger.debug("Registered stream handler %s for %s", route.handler_name, request_type.__name__)
        return self

    def add_notification_handler(self, notification_type: type, handler: Any) -> HandlerRegistry:
        """Add *handler* to the fan-out list for *notification_type*.

        Registering the same handler object twice is a no-op.
        """
        routes = self._notifications.setdefault(notification_type, [])
        if any(existing.handler is handler for existing in routes):
            return self
        routes.append(
            Route("notification", notification_type, None, handler, make_invoker(handler))
        )
        logger.debug(
            "Registered notification handler %s for %s",
            _describe(handler),
            notification_type.__name__,
        )
        return self

    def add_behavior(
        self,
        behavior: PipelineBehavior,
        *,
        request_type: type | None = None,
        response_type: Any = None,
    ) -> HandlerRegistry:
        """Append *behavior* to the pipeline.

        Without *request_type* the behavior wraps every request pipeline
        (subject to its own :meth:`~PipelineBehavior.applies_to`).
        Registration order is execution order.
        """
        self._behaviors.append(_BehaviorBinding(behavior, request_type, response_type))
        logger.debug("Registered behavior %s", behavior.name)
        return self

    def add_validator(self, request_type: type, validator: Any) -> HandlerRegistry:
        """Bind a validator (``validate(request) -> list[FieldError]``) to *request_type*."""
        self._validators.setdefault(request_type, []).append(validator)
        return self

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def resolve_one(self, request_type: type, response_type: Any) -> Route:
        """Return the single route for the pair, or raise :class:`HandlerNotFound`."""
        route = self._requests.get((request_type, response_type))
        if route is None:
            raise HandlerNotFound(request_type, response_type)
        return route

    def resolve_stream(self, request_type: type, element_type: Any) -> Route:
        route = self._streams.get((request_type, element_type))
        if route is None:
            raise HandlerNotFound(request_type, element_type)
        return route

    def resolve_many(self, notification_type: type) -> list[Route]:
        """Notification routes in registration order; empty when none exist."""
        return list(self._notifications.get(notification_type, ()))

    def resolve_behaviors(self, request_type: type, response_type: Any) -> list[PipelineBehavior]:
        return [
            binding.behavior
            for binding in self._behaviors
            if binding.matches(request_type, response_type)
        ]

    def resolve_validators(self, request_type: type) -> list[Any]:
        return list(self._validators.get(request_type, ()))

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def describe(self) -> list[RouteInfo]:
        """Summarize every registered route, sorted by kind then message name."""
        rows: list[RouteInfo] = []
        for route in self._requests.values():
            rows.append(
                RouteInfo(
                    kind="request",
                    message=route.message_type.__name__,
                    response=_type_label(route.response_type),
                    handlers=[route.handler_name],
                    behaviors=[
                        b.name
                        for b in self.resolve_behaviors(route.message_type, route.response_type)
                    ],
                    validators=len(self._validators.get(route.message_type, ())),
                )
            )
        for route in self._streams.values():
            rows.append(
                RouteInfo(
                    kind="stream",
                    message=route.message_type.__name__,
                    response=_type_label(route.response_type),
                    handlers=[route.handler_name],
                )
            )
        for notification_type, routes in self._notifications.items():
            rows.append(
                RouteInfo(
                    kind="notification",
                    message=notification_type.__name__,
                    handlers=[r.handler_name for r in routes],
                )
            )
        order = {"request": 0, "stream": 1, "notification": 2}
        rows.sort(key=lambda row: (order[row.kind], row.message))
        return rows

    @property
    def behavior_count(self) -> int:
        return len(self._behaviors)
