"""BaseService — shared wiring for unitwire services.

Every service receives the engine settings at construction time, plus the
optional collaborators a host application may inject: its own unit lookup,
an environment mapping (tests pass a dict instead of ``os.environ``) and a
plugin manager.  Entry-point plugins are loaded lazily on first use.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from unitwire.config.settings import UnitwireSettings
    from unitwire.plugins.manager import PluginManager
    from unitwire.units.lookup import UnitLookup

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for service-layer classes."""

    def __init__(
        self,
        settings: UnitwireSettings,
        *,
        lookup: UnitLookup | None = None,
        environ: Mapping[str, str] | None = None,
        plugins: PluginManager | None = None,
    ) -> None:
        self._settings = settings
        self._lookup = lookup
        self._environ = environ
        self._plugins = plugins
        self._plugins_checked = plugins is not None

    @property
    def plugins(self) -> PluginManager | None:
        """The plugin manager, discovering entry points on first access."""
        if not self._plugins_checked:
            from unitwire.bootstrap import load_plugins

            self._plugins = load_plugins(self._settings)
            self._plugins_checked = True
        return self._plugins
