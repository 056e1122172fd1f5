"""Bootstrap — assemble manifests, properties and units, then activate.

This is the composition root an application calls once at startup::

    result = bootstrap(UnitwireSettings.from_cli(), lookup=units_lookup(core, delivery))
    service = result.registry.get(DeliveryService)

Manifest texts come from the configured files followed by plugin-provided
manifests.  Units resolve through the injected lookup first, then plugin
units, then ``"module:attribute"`` imports.  The property stack is frozen
before activation starts.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from unitwire.activation.executor import activate
from unitwire.errors import StartupFailure, UnitwireError
from unitwire.properties.loaders import build_standard_stack
from unitwire.units.lookup import UnitLookup, chain_lookup, import_lookup
from unitwire.units.manifest import read_manifests
from unitwire.units.registry import UnitRegistry

if TYPE_CHECKING:
    from unitwire.activation.report import ActivationResult
    from unitwire.config.settings import UnitwireSettings
    from unitwire.plugins.manager import PluginManager
    from unitwire.properties.layers import PropertySourceStack
    from unitwire.units.model import ConfigurationUnit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Prepared:
    """Everything activation needs, assembled but not yet run."""

    units: list[ConfigurationUnit]
    properties: PropertySourceStack


def load_plugins(settings: UnitwireSettings) -> PluginManager | None:
    """Discover entry-point plugins unless disabled in ``[manifests]``."""
    if not settings.manifests.plugins:
        return None
    from unitwire.plugins.manager import PluginManager

    pm = PluginManager()
    names = pm.discover_and_load()
    logger.debug("Loaded plugins: %s", ", ".join(names) or "<none>")
    return pm


def prepare(
    settings: UnitwireSettings,
    *,
    lookup: UnitLookup | None = None,
    manifests: Sequence[str] = (),
    environ: Mapping[str, str] | None = None,
    plugins: PluginManager | None = None,
) -> Prepared:
    """Discover units and build the frozen property stack.

    Args:
        settings: Engine settings.
        lookup: Application-supplied unit lookup, consulted first.
        manifests: Extra manifest texts, merged after the configured files.
        environ: Environment for the highest-precedence layer
            (``os.environ`` if None).
        plugins: Plugin manager supplying units and manifests.

    Raises:
        DiscoveryError: On unresolvable manifest entries or imports.
        PropertySourceError: On unparsable property files.
    """
    texts = read_manifests(settings.resolve_path(p) for p in settings.manifests.paths)
    texts.extend(manifests)

    lookups: list[UnitLookup] = [lookup] if lookup is not None else []
    if plugins is not None:
        texts.extend(plugins.collect_manifests())
        lookups.append(plugins.lookup())
    lookups.append(import_lookup)

    units = UnitRegistry(chain_lookup(*lookups)).discover(texts, key=settings.manifests.key)

    properties = build_standard_stack(
        units,
        directory=settings.resolve_path(settings.properties.directory),
        base_name=settings.properties.base_name,
        profile=settings.profile,
        environ=environ,
        env_prefix=settings.properties.env_prefix,
    )
    properties.freeze()
    return Prepared(units=units, properties=properties)


def bootstrap(
    settings: UnitwireSettings,
    *,
    lookup: UnitLookup | None = None,
    manifests: Sequence[str] = (),
    environ: Mapping[str, str] | None = None,
    plugins: PluginManager | None = None,
) -> ActivationResult:
    """Prepare and activate; returns the frozen registry and report.

    Discovery and property-loading errors are wrapped in the same
    aggregated failure as activation errors.

    Raises:
        StartupFailure: If any startup step fails.
    """
    try:
        prepared = prepare(
            settings,
            lookup=lookup,
            manifests=manifests,
            environ=environ,
            plugins=plugins,
        )
    except UnitwireError as exc:
        raise StartupFailure([exc]) from exc
    result = activate(
        prepared.units,
        prepared.properties,
        max_deferrals=settings.activation.max_deferrals,
    )
    if plugins is not None:
        plugins.notify_activation(result.report)
    return result
