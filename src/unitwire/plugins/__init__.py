"""Extension layer — plugin-provided units via pluggy.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints.
INVARIANT: Plugin failures while collecting units are warnings; a missing
unit still surfaces as a DiscoveryError when a manifest names it.
"""

from unitwire.plugins.hookspecs import hookimpl
from unitwire.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]
