"""Plugin discovery and unit collection.

Discovery: entry points in the ``unitwire.plugins`` group, loaded through
pluggy's setuptools entry-point support, plus plugins registered directly.
Collected units feed a lookup; they still activate only when a manifest
names them.
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING

import pluggy

from unitwire.plugins.hookspecs import UnitwireHookSpec
from unitwire.units.model import ConfigurationUnit

if TYPE_CHECKING:
    from unitwire.activation.report import ActivationReport
    from unitwire.units.lookup import UnitLookup

PROJECT_NAME = "unitwire"
ENTRY_POINT_GROUP = "unitwire.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, unit collection and hook dispatch."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(UnitwireHookSpec)
        self._loaded: bool = False

    def discover_and_load(self) -> list[str]:
        """Load entry-point plugins and return all registered plugin names."""
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._normalize_plugin_instances()
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------

    def collect_units(self) -> dict[str, ConfigurationUnit]:
        """Gather units from every plugin, keyed by unit name.

        A plugin whose hook raises or returns something other than units
        is logged and ignored; the first plugin to declare a name wins.
        """
        units: dict[str, ConfigurationUnit] = {}
        for impl in self._pm.hook.unitwire_units.get_hookimpls():
            try:
                declared = impl.function() or []
            except Exception:
                logger.warning("Failed to collect units from plugin %s", impl.plugin_name, exc_info=True)
                continue
            for unit in declared:
                if not isinstance(unit, ConfigurationUnit):
                    logger.warning(
                        "Plugin %s returned %r, not a ConfigurationUnit",
                        impl.plugin_name,
                        unit,
                    )
                    continue
                units.setdefault(unit.name, unit)
        return units

    def collect_manifests(self) -> list[str]:
        manifests: list[str] = []
        for impl in self._pm.hook.unitwire_manifests.get_hookimpls():
            try:
                manifests.extend(impl.function() or [])
            except Exception:
                logger.warning(
                    "Failed to collect manifests from plugin %s",
                    impl.plugin_name,
                    exc_info=True,
                )
        return manifests

    def lookup(self) -> UnitLookup:
        """A unit lookup over the units plugins currently declare."""
        from unitwire.units.lookup import mapping_lookup

        return mapping_lookup(self.collect_units())

    def notify_activation(self, report: ActivationReport) -> None:
        """Dispatch ``post_activation``; plugin failures are warnings."""
        try:
            self._pm.hook.post_activation(report=report)
        except Exception:
            logger.warning("post_activation hook failed", exc_info=True)

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a plugin class directly. Hook dispatch
        against class objects leaves ``self`` unbound and fails at runtime.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue
            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning("Failed to instantiate entry-point plugin %s", plugin_name, exc_info=True)
                continue
            self._pm.register(instance, name=plugin_name)
