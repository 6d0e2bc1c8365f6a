"""Composition root — settings + plugins -> registry -> :class:`Mediator`.

Registration order decides pipeline order, so it is fixed here:

1. Plugin handlers and validators.
2. Built-in behaviors, in the order ``pipeline.behaviors`` lists them.
3. Plugin behaviors.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from switchyard.behaviors.caching import CachingBehavior
from switchyard.behaviors.performance import PerformanceLoggingBehavior
from switchyard.behaviors.validation import ValidationBehavior
from switchyard.config.models import BUILTIN_BEHAVIORS
from switchyard.config.settings import SwitchyardSettings
from switchyard.core.mediator import Mediator
from switchyard.core.registry import HandlerRegistry
from switchyard.infrastructure.memory_cache import MemoryCacheStore
from switchyard.plugins.manager import PluginManager

if TYPE_CHECKING:
    from switchyard.behaviors.caching import CacheStore
    from switchyard.core.pipeline import PipelineBehavior

logger = logging.getLogger(__name__)

BehaviorFactory = Callable[[SwitchyardSettings, HandlerRegistry, "CacheStore"], "PipelineBehavior"]


def _performance(
    settings: SwitchyardSettings, registry: HandlerRegistry, store: CacheStore
) -> PipelineBehavior:
    return PerformanceLoggingBehavior(settings.performance.slow_request_threshold_ms)


def _validation(
    settings: SwitchyardSettings, registry: HandlerRegistry, store: CacheStore
) -> PipelineBehavior:
    return ValidationBehavior(registry)


def _caching(
    settings: SwitchyardSettings, registry: HandlerRegistry, store: CacheStore
) -> PipelineBehavior:
    return CachingBehavior(store, namespace=settings.cache.namespace)


BEHAVIOR_FACTORIES: dict[str, BehaviorFactory] = {
    "performance": _performance,
    "validation": _validation,
    "caching": _caching,
}


def add_builtin_behaviors(
    registry: HandlerRegistry,
    names: list[str] | tuple[str, ...],
    *,
    settings: SwitchyardSettings,
    cache_store: CacheStore,
) -> None:
    """Register the named built-in behaviors in the given order."""
    unknown = [name for name in names if name not in BEHAVIOR_FACTORIES]
    if unknown:
        msg = (
            f"Unknown pipeline behavior(s): {', '.join(unknown)}. "
            f"Available: {', '.join(BUILTIN_BEHAVIORS)}"
        )
        raise ValueError(msg)
    for name in names:
        registry.add_behavior(BEHAVIOR_FACTORIES[name](settings, registry, cache_store))


def build_mediator(
    settings: SwitchyardSettings | None = None,
    *,
    plugin_manager: PluginManager | None = None,
    cache_store: CacheStore | None = None,
    registry: HandlerRegistry | None = None,
    discover: bool = True,
) -> Mediator:
    """Assemble a ready-to-use mediator.

    Args:
        settings: Settings to build from; loaded from the environment when
            omitted.
        plugin_manager: Pre-populated manager (plugins registered directly
            are kept alongside discovered ones).
        cache_store: Store for the caching behavior; defaults to a
            :class:`MemoryCacheStore` sized by ``cache.max_entries``.
        registry: Registry to extend; a fresh one by default.
        discover: Run entry-point and local-directory discovery. Ignored
            when ``plugins.enabled`` is false.
    """
    settings = settings or SwitchyardSettings.load()
    registry = registry or HandlerRegistry()
    pm = plugin_manager or PluginManager()
    store = cache_store or MemoryCacheStore(max_entries=settings.cache.max_entries)

    if discover and settings.plugins.enabled:
        names = pm.discover_and_load(local_dir=settings.plugin_dir)
        logger.debug("Loaded plugins: %s", ", ".join(names) or "(none)")

    pm.populate_handlers(registry)
    add_builtin_behaviors(
        registry, settings.pipeline.behaviors, settings=settings, cache_store=store
    )
    pm.populate_behaviors(registry)
    return Mediator(registry)
