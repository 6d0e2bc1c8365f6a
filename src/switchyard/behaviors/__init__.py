"""Reference pipeline behaviors: performance logging, validation and caching.

Each behavior is independent; the order they run in is the order they
were added to the registry.
"""

from switchyard.behaviors.caching import CacheStore, CachingBehavior
from switchyard.behaviors.performance import PerformanceLoggingBehavior
from switchyard.behaviors.validation import ValidationBehavior, Validator

__all__ = [
    "CacheStore",
    "CachingBehavior",
    "PerformanceLoggingBehavior",
    "ValidationBehavior",
    "Validator",
]
