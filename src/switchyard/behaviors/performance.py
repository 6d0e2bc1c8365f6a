"""Performance logging — time every request and flag the slow ones."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

import structlog

from switchyard.core.pipeline import Next, PipelineBehavior

if TYPE_CHECKING:
    from switchyard.core.cancellation import CancellationToken

DEFAULT_SLOW_THRESHOLD_MS = 500.0

log = structlog.get_logger(__name__)


class PerformanceLoggingBehavior(PipelineBehavior):
    """Pass-through behavior that logs elapsed wall-clock time.

    Emits ``request.handled`` at info level below the threshold and
    ``request.slow`` at warning level at or above it. Failures are logged
    as ``request.failed`` and re-raised unchanged.
    """

    def __init__(
        self,
        slow_threshold_ms: float = DEFAULT_SLOW_THRESHOLD_MS,
        *,
        clock: Any = time.perf_counter,
    ) -> None:
        self._threshold_ms = slow_threshold_ms
        self._clock = clock

    @property
    def slow_threshold_ms(self) -> float:
        return self._threshold_ms

    async def handle(self, request: Any, next_: Next, cancellation: CancellationToken) -> Any:
        request_type = type(request).__name__
        started = self._clock()
        try:
            response = await next_()
        except Exception:
            elapsed_ms = (self._clock() - started) * 1000
            log.error(
                "request.failed",
                request_type=request_type,
                elapsed_ms=round(elapsed_ms, 2),
                exc_info=True,
            )
            raise

        elapsed_ms = (self._clock() - started) * 1000
        if elapsed_ms >= self._threshold_ms:
            log.warning(
                "request.slow",
                request_type=request_type,
                elapsed_ms=round(elapsed_ms, 2),
                threshold_ms=self._threshold_ms,
            )
        else:
            log.info(
                "request.handled",
                request_type=request_type,
                elapsed_ms=round(elapsed_ms, 2),
            )
        return response
