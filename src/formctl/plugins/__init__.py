"""Extension layer: plugin system via pluggy.

INVARIANT: Plugin failures are warnings, never errors.
"""

from formctl.plugins.hookspecs import hookimpl
from formctl.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]
