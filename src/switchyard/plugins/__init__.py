"""Registration plugins via pluggy.

Discovery: entry points (``switchyard.plugins`` group) plus single-file
plugins from a local directory. Plugins populate the handler registry;
they take no part in dispatch itself.
"""

from switchyard.plugins.hookspecs import hookimpl
from switchyard.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]
