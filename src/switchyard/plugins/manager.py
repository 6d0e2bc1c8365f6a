"""Plugin discovery and the registry-population hooks.

Plugins come from two places: the ``switchyard.plugins`` entry-point group
and single-file modules in the project's local plugin directory. Either
way, a plugin is an object whose methods are marked with
:data:`~switchyard.plugins.hookspecs.hookimpl`.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from typing import TYPE_CHECKING

import pluggy

from switchyard.plugins.hookspecs import PROJECT_NAME, SwitchyardHookSpec

if TYPE_CHECKING:
    from pathlib import Path
    from types import ModuleType

    from switchyard.core.registry import HandlerRegistry

ENTRY_POINT_GROUP = "switchyard.plugins"
LOCAL_MODULE_PREFIX = "switchyard_local_plugin_"

_IMPL_ATTR = f"{PROJECT_NAME}_impl"

logger = logging.getLogger(__name__)


def has_hook_impls(cls: type) -> bool:
    """Whether any public attribute of *cls* is marked with ``@hookimpl``."""
    for name in dir(cls):
        if name.startswith("_"):
            continue
        member = getattr(cls, name, None)
        if callable(member) and getattr(member, _IMPL_ATTR, None):
            return True
    return False


def _load_module(path: Path) -> ModuleType | None:
    """Import *path* under a private module name; None if it fails."""
    module_name = f"{LOCAL_MODULE_PREFIX}{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        logger.warning("Could not create module spec for %s", path)
        return None
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        logger.warning("Failed to load local plugin %s", path, exc_info=True)
        sys.modules.pop(module_name, None)
        return None
    return module


def _plugin_classes(module: ModuleType) -> list[type]:
    """Classes defined in *module* itself that implement at least one hook."""
    return [
        obj
        for _, obj in inspect.getmembers(module, inspect.isclass)
        if obj.__module__ == module.__name__ and has_hook_impls(obj)
    ]


class PluginManager:
    """Discovers plugins and lets them populate a :class:`HandlerRegistry`."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(SwitchyardHookSpec)
        self._loaded = False

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Load entry-point plugins, then local ones; return all plugin names."""
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._instantiate_class_plugins()
        if local_dir is not None and local_dir.is_dir():
            self._load_local(local_dir)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> str:
        """Register an instantiated plugin; return the name it is known by."""
        resolved = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved)
        logger.debug("Registered plugin: %s", resolved)
        return resolved

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether :meth:`discover_and_load` has run."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def get_plugins(self) -> list[object]:
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    # ------------------------------------------------------------------
    # Registration hooks
    # ------------------------------------------------------------------

    def populate_handlers(self, registry: HandlerRegistry) -> None:
        """Let every plugin bind its handlers, then its validators."""
        self._pm.hook.register_handlers(registry=registry)
        self._pm.hook.register_validators(registry=registry)

    def populate_behaviors(self, registry: HandlerRegistry) -> None:
        """Let every plugin append its behaviors."""
        self._pm.hook.register_behaviors(registry=registry)

    # ------------------------------------------------------------------
    # Discovery internals
    # ------------------------------------------------------------------

    def _load_local(self, local_dir: Path) -> None:
        """Register every hook-implementing class found in ``local_dir/*.py``.

        Files starting with ``_`` are skipped. Each class is registered as
        ``local:<file stem>.<class name>``. A file that fails to import, or
        a class that fails to instantiate, is logged and skipped.
        """
        for path in sorted(local_dir.glob("*.py")):
            if path.name.startswith("_"):
                continue
            module = _load_module(path)
            if module is None:
                continue
            for cls in _plugin_classes(module):
                name = f"local:{path.stem}.{cls.__name__}"
                try:
                    self.register_plugin(cls(), name=name)
                except Exception:
                    logger.warning("Failed to register plugin %s", name, exc_info=True)

    def _instantiate_class_plugins(self) -> None:
        """Swap plugin classes registered by entry points for instances.

        An entry point may name a class rather than an object; calling hooks
        on the class itself would leave ``self`` unbound.
        """
        for plugin in self._pm.get_plugins():
            if not inspect.isclass(plugin) or not has_hook_impls(plugin):
                continue
            name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning("Failed to instantiate entry-point plugin %s", name, exc_info=True)
                continue
            self._pm.register(instance, name=name)
            logger.debug("Instantiated entry-point plugin: %s", name)
