"""Message base classes — requests, commands, streams, and notifications.

Messages are frozen pydantic models. A request declares its response type
through its generic parameter::

    class GetUser(Request[User]):
        user_id: int

    class ArchiveNote(Command):
        note_id: str

Routing uses the runtime class plus the declared response type. The
declared type is read once per class by :func:`response_type_of` and
memoized, since it never changes after the class is created.
"""

from __future__ import annotations

import functools
from abc import abstractmethod
from datetime import timedelta
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from switchyard.domain.types import CachePriority
from switchyard.domain.unit import Unit

R = TypeVar("R")


class Message(BaseModel):
    """Immutable data routed by its runtime type."""

    model_config = {"frozen": True}


class Request(Message, Generic[R]):
    """A message routed to exactly one handler, producing an ``R``."""


class Command(Request[Unit]):
    """A request with no meaningful result; dispatch returns ``UNIT``."""


class StreamRequest(Message, Generic[R]):
    """A message routed to exactly one stream handler yielding ``R`` elements."""


class Notification(Message):
    """A message broadcast to every registered notification handler."""


class CacheableRequest(Request[R], Generic[R]):
    """A query whose response may be served from a cache.

    Subclasses expose ``cache_key`` and ``cache_expiration``, usually as
    properties derived from their fields. ``cache_priority`` is an
    eviction hint for the store.
    """

    @property
    @abstractmethod
    def cache_key(self) -> str:
        """Key identifying this request's response within its type."""

    @property
    @abstractmethod
    def cache_expiration(self) -> timedelta:
        """How long a stored response stays valid."""

    @property
    def cache_priority(self) -> CachePriority:
        return CachePriority.NORMAL


@functools.cache
def response_type_of(message_type: type) -> Any:
    """Return the type argument a request or stream request class declares.

    Walks the MRO for the parametrized base created by pydantic (for
    example ``Request[str]``). Classes that never bind the parameter
    resolve to ``typing.Any``.
    """
    for klass in message_type.__mro__:
        metadata = getattr(klass, "__pydantic_generic_metadata__", None)
        if not metadata:
            continue
        origin = metadata.get("origin")
        args = metadata.get("args") or ()
        if origin is None or not args:
            continue
        if not issubclass(origin, (Request, StreamRequest)):
            continue
        declared = args[0]
        if isinstance(declared, TypeVar):
            continue
        return declared
    return Any


def is_command(request_type: type) -> bool:
    """Whether *request_type* declares ``Unit`` as its response."""
    return response_type_of(request_type) is Unit
