"""Configuration unit discovery.

Reads manifest identifiers in declaration order, resolves each through the
injected lookup, then resolves imports.  Imports not named by any manifest
but known to the lookup are pulled in transitively, after the manifest
units.  Every unresolvable reference is collected into one DiscoveryError.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable

from unitwire.errors import DiscoveryError
from unitwire.units.lookup import UnitLookup
from unitwire.units.manifest import UNITS_KEY, merge_manifests
from unitwire.units.model import ConfigurationUnit

logger = logging.getLogger(__name__)


class UnitRegistry:
    """Discovered units, keyed by name, in discovery order."""

    def __init__(self, lookup: UnitLookup) -> None:
        self._lookup = lookup
        self._units: dict[str, ConfigurationUnit] = {}
        self._aliases: dict[str, str] = {}

    def discover(
        self,
        manifest_sources: Iterable[str],
        *,
        key: str = UNITS_KEY,
    ) -> list[ConfigurationUnit]:
        """Resolve the units named by *manifest_sources*.

        Raises:
            DiscoveryError: If any identifier or import cannot be resolved.
        """
        missing: list[str] = []
        for identifier in merge_manifests(manifest_sources, key=key):
            if self._resolve(identifier) is None:
                missing.append(f"manifest entry '{identifier}'")

        index = 0
        while index < len(self._units):
            unit = list(self._units.values())[index]
            for imported in unit.imports:
                if self._resolve(imported) is None:
                    missing.append(f"import '{imported}' of unit '{unit.name}'")
            index += 1

        if missing:
            msg = "Unresolvable unit reference(s): " + ", ".join(missing)
            raise DiscoveryError(msg, missing=missing)

        units = [
            dataclasses.replace(
                unit,
                imports=tuple(self._aliases[i] for i in unit.imports),
                factories=list(unit.factories),
            )
            for unit in self._units.values()
        ]
        self._units = {unit.name: unit for unit in units}
        logger.debug("Discovered %d unit(s): %s", len(units), ", ".join(self._units))
        return units

    def _resolve(self, identifier: str) -> ConfigurationUnit | None:
        if identifier in self._aliases:
            return self._units[self._aliases[identifier]]
        if identifier in self._units:
            return self._units[identifier]
        unit = self._lookup(identifier)
        if unit is None:
            return None
        existing = self._units.get(unit.name)
        if existing is not None:
            if existing.fingerprint() != unit.fingerprint():
                logger.warning(
                    "Unit '%s' re-declared by '%s' with a different body; keeping the first",
                    unit.name,
                    identifier,
                )
            self._aliases[identifier] = unit.name
            return existing
        self._units[unit.name] = unit
        self._aliases[identifier] = unit.name
        self._aliases.setdefault(unit.name, unit.name)
        return unit

    def get(self, name: str) -> ConfigurationUnit | None:
        return self._units.get(self._aliases.get(name, name))

    @property
    def units(self) -> list[ConfigurationUnit]:
        return list(self._units.values())


def discover(
    manifest_sources: Iterable[str],
    lookup: UnitLookup,
    *,
    key: str = UNITS_KEY,
) -> list[ConfigurationUnit]:
    """Convenience wrapper around :meth:`UnitRegistry.discover`."""
    return UnitRegistry(lookup).discover(manifest_sources, key=key)
