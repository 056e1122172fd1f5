"""Configuration unit registry — unit model, manifests, lookups and discovery."""

from unitwire.keys import OutputKey, Qualifier
from unitwire.units.lookup import (
    UnitLookup,
    chain_lookup,
    import_lookup,
    mapping_lookup,
    units_lookup,
)
from unitwire.units.manifest import UNITS_KEY, merge_manifests, parse_manifest
from unitwire.units.model import ConfigurationUnit, Dependency, Factory
from unitwire.units.registry import UnitRegistry, discover

__all__ = [
    "UNITS_KEY",
    "ConfigurationUnit",
    "Dependency",
    "Factory",
    "OutputKey",
    "Qualifier",
    "UnitLookup",
    "UnitRegistry",
    "chain_lookup",
    "discover",
    "import_lookup",
    "mapping_lookup",
    "merge_manifests",
    "parse_manifest",
    "units_lookup",
]
