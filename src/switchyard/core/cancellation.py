"""Cooperative cancellation signal threaded through every dispatch.

Asyncio task cancellation still applies at every ``await``; the token adds
an explicit, shareable signal that handlers, behaviors, and stream
producers can poll or wait on without owning the task.
"""

from __future__ import annotations

import asyncio

from switchyard.core.errors import OperationCancelled


class CancellationToken:
    """A one-way flag: once cancelled it stays cancelled."""

    __slots__ = ("_event", "_reason")

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None

    @classmethod
    def none(cls) -> CancellationToken:
        """A fresh token nobody else holds, so it never fires."""
        return cls()

    def cancel(self, reason: str | None = None) -> None:
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def raise_if_cancelled(self) -> None:
        """Raise :class:`OperationCancelled` if the token has fired."""
        if self._event.is_set():
            raise OperationCancelled(self._reason or "Operation was cancelled")

    async def wait(self) -> None:
        """Suspend until the token is cancelled."""
        await self._event.wait()

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "active"
        return f"CancellationToken({state})"
