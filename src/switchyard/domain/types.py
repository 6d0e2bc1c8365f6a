"""Value types shared across the pipeline: field errors and cache hints."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class CachePriority(StrEnum):
    """Eviction hint attached to a cached response."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    NEVER_REMOVE = "never_remove"

    @property
    def rank(self) -> int:
        """Eviction order: lower ranks are evicted first."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK: dict[CachePriority, int] = {
    CachePriority.LOW: 0,
    CachePriority.NORMAL: 1,
    CachePriority.HIGH: 2,
    CachePriority.NEVER_REMOVE: 3,
}


class FieldError(BaseModel):
    """One field-level finding reported by a validator."""

    model_config = {"frozen": True}

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"
