"""switchyard — in-process request routing with composable pipeline behaviors."""

from __future__ import annotations

from switchyard.core.cancellation import CancellationToken
from switchyard.core.errors import (
    FanOutFailure,
    HandlerNotFound,
    MediatorError,
    OperationCancelled,
    ValidationFailed,
)
from switchyard.core.mediator import Mediator
from switchyard.core.pipeline import FunctionBehavior, PipelineBehavior
from switchyard.core.registry import HandlerRegistry
from switchyard.domain.messages import (
    CacheableRequest,
    Command,
    Notification,
    Request,
    StreamRequest,
)
from switchyard.domain.types import CachePriority, FieldError
from switchyard.domain.unit import UNIT, Unit

__version__ = "0.4.0"

__all__ = [
    "UNIT",
    "CachePriority",
    "CacheableRequest",
    "CancellationToken",
    "Command",
    "FanOutFailure",
    "FieldError",
    "FunctionBehavior",
    "HandlerNotFound",
    "HandlerRegistry",
    "Mediator",
    "MediatorError",
    "Notification",
    "OperationCancelled",
    "PipelineBehavior",
    "Request",
    "StreamRequest",
    "Unit",
    "ValidationFailed",
    "__version__",
]
