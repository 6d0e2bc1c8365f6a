"""Caching — serve repeat queries from a key/value store.

Only requests deriving from :class:`CacheableRequest` take part. The store
key combines a namespace, the request's type name, and its declared cache
key, so two request types never collide on the same declared key.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import structlog

from switchyard.core.pipeline import Next, PipelineBehavior
from switchyard.domain.messages import CacheableRequest
from switchyard.domain.types import CachePriority

if TYPE_CHECKING:
    from switchyard.core.cancellation import CancellationToken

DEFAULT_NAMESPACE = "Switchyard:Cache"

log = structlog.get_logger(__name__)


@runtime_checkable
class CacheStore(Protocol):
    """External key/value store with per-entry expiry."""

    def try_get(self, key: str) -> tuple[Any, bool]: ...

    def set(
        self,
        key: str,
        value: Any,
        expiration: timedelta,
        priority: CachePriority = CachePriority.NORMAL,
    ) -> None: ...


def cache_key_for(request: CacheableRequest[Any], namespace: str = DEFAULT_NAMESPACE) -> str:
    """Derive the store key for *request*."""
    return f"{namespace}:{type(request).__name__}:{request.cache_key}"


class CachingBehavior(PipelineBehavior):
    """Short-circuit on a cache hit; populate the store after a successful miss.

    A failing continuation propagates and nothing is stored.
    """

    def __init__(self, store: CacheStore, *, namespace: str = DEFAULT_NAMESPACE) -> None:
        self._store = store
        self._namespace = namespace

    def applies_to(self, request_type: type, response_type: Any) -> bool:
        return isinstance(request_type, type) and issubclass(request_type, CacheableRequest)

    async def handle(self, request: Any, next_: Next, cancellation: CancellationToken) -> Any:
        if not isinstance(request, CacheableRequest):
            return await next_()

        request_type = type(request).__name__
        key = cache_key_for(request, self._namespace)
        cached, found = self._store.try_get(key)
        if found:
            log.debug("cache.hit", request_type=request_type, cache_key=request.cache_key)
            return cached

        log.debug("cache.miss", request_type=request_type, cache_key=request.cache_key)
        response = await next_()

        expiration = request.cache_expiration
        self._store.set(key, response, expiration, request.cache_priority)
        log.debug(
            "cache.stored",
            request_type=request_type,
            cache_key=request.cache_key,
            expiration_s=expiration.total_seconds(),
        )
        return response
