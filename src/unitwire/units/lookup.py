"""Unit-definition lookups.

A lookup maps a manifest identifier to its :class:`ConfigurationUnit`,
returning None when it does not know the identifier.  Discovery never
scans modules for units; it only asks the injected lookup.
"""

from __future__ import annotations

import importlib
from collections.abc import Callable, Mapping

from unitwire.errors import DiscoveryError
from unitwire.units.model import ConfigurationUnit

type UnitLookup = Callable[[str], ConfigurationUnit | None]


def mapping_lookup(units: Mapping[str, ConfigurationUnit]) -> UnitLookup:
    """Look identifiers up in a fixed mapping."""
    table = dict(units)
    return table.get


def units_lookup(*units: ConfigurationUnit) -> UnitLookup:
    """Look identifiers up by unit name."""
    return mapping_lookup({unit.name: unit for unit in units})


def import_lookup(identifier: str) -> ConfigurationUnit | None:
    """Resolve ``"package.module:attribute"`` (or dotted form) via importlib.

    Returns None if the module does not exist.

    Raises:
        DiscoveryError: If the attribute exists but is not a ConfigurationUnit.
    """
    if ":" in identifier:
        module_name, _, attr = identifier.partition(":")
    else:
        module_name, _, attr = identifier.rpartition(".")
    if not module_name or not attr:
        return None
    try:
        module = importlib.import_module(module_name)
    except ModuleNotFoundError as exc:
        if exc.name and module_name.startswith(exc.name):
            return None
        raise
    unit = getattr(module, attr, None)
    if unit is None:
        return None
    if not isinstance(unit, ConfigurationUnit):
        msg = f"'{identifier}' is a {type(unit).__name__}, not a ConfigurationUnit"
        raise DiscoveryError(msg, identifier=identifier)
    return unit


def chain_lookup(*lookups: UnitLookup) -> UnitLookup:
    """Try each lookup in order; the first hit wins."""

    def lookup(identifier: str) -> ConfigurationUnit | None:
        for candidate in lookups:
            unit = candidate(identifier)
            if unit is not None:
                return unit
        return None

    return lookup
