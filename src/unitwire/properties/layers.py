"""PropertyLayer and PropertySourceStack — precedence-ordered raw properties.

A stack holds named layers of raw string key/value pairs.  Lookup walks
the layers from highest precedence to lowest and returns the first value
found.  Layers sharing a precedence rank are ordered by insertion, most
recently added first, so an explicit override layer can be appended at
the same rank as the layer it overrides.

Keys are compared through :func:`unitwire.properties.names.comparison_key`,
so ``cargo-name``, ``cargoName`` and ``CARGO_NAME`` address the same value.

Once :meth:`PropertySourceStack.freeze` is called, the stack is read-only
and safe to share between threads.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

from unitwire.errors import UnitwireError
from unitwire.properties.names import canonical, comparison_key, relative_to

logger = logging.getLogger(__name__)

_sequence = itertools.count()


@dataclass(frozen=True)
class PropertyLayer:
    """One named, precedence-ranked source of raw properties.

    ``entries`` maps comparison keys to ``(canonical key, value)`` so each
    logical key appears at most once per layer; when two spellings of the
    same key are supplied the later one wins.
    """

    name: str
    precedence: int
    entries: Mapping[str, tuple[str, str]]
    sequence: int = field(default_factory=lambda: next(_sequence))

    @classmethod
    def from_pairs(cls, name: str, precedence: int, pairs: Mapping[str, object]) -> PropertyLayer:
        entries: dict[str, tuple[str, str]] = {}
        for raw_key, raw_value in pairs.items():
            key = canonical(str(raw_key))
            if not key:
                continue
            entries[comparison_key(key)] = (key, "" if raw_value is None else str(raw_value))
        return cls(name=name, precedence=precedence, entries=entries)

    def get(self, key: str) -> str | None:
        entry = self.entries.get(comparison_key(key))
        return entry[1] if entry else None

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and comparison_key(key) in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def keys(self) -> list[str]:
        """Canonical keys defined by this layer."""
        return [canonical_key for canonical_key, _ in self.entries.values()]


class PropertySourceStack:
    """Ordered set of property layers, highest precedence first."""

    def __init__(self) -> None:
        self._layers: list[PropertyLayer] = []
        self._frozen = False

    def add_layer(
        self,
        name: str,
        precedence: int,
        pairs: Mapping[str, object],
    ) -> PropertyLayer:
        """Register a new layer and return it.

        Raises:
            UnitwireError: If the stack has been frozen.
        """
        if self._frozen:
            msg = f"Cannot add layer '{name}': property sources are frozen"
            raise UnitwireError(msg, layer=name)
        layer = PropertyLayer.from_pairs(name, precedence, pairs)
        self._layers.append(layer)
        self._layers.sort(key=lambda lyr: (lyr.precedence, lyr.sequence), reverse=True)
        logger.debug("Added property layer %s (rank %d, %d keys)", name, precedence, len(layer))
        return layer

    def freeze(self) -> None:
        """Make the stack read-only."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def layers(self) -> tuple[PropertyLayer, ...]:
        """Layers in lookup order (highest precedence first)."""
        return tuple(self._layers)

    def __iter__(self) -> Iterator[PropertyLayer]:
        return iter(tuple(self._layers))

    def resolve(self, key: str) -> str | None:
        """Return the winning value for *key*, or None if no layer defines it."""
        for layer in self._layers:
            value = layer.get(key)
            if value is not None:
                return value
        return None

    def origin(self, key: str) -> str | None:
        """Return the name of the layer that supplies *key*'s value."""
        for layer in self._layers:
            if key in layer:
                return layer.name
        return None

    def contains(self, key: str) -> bool:
        return any(key in layer for layer in self._layers)

    def all_keys_under(self, prefix: str) -> set[str]:
        """Union of keys below *prefix* across all layers, relative to it.

        When layers spell the same key differently, the spelling from the
        highest-precedence layer is kept.
        """
        seen: dict[str, str] = {}
        for layer in self._layers:
            for key in layer.keys():
                relative = relative_to(key, prefix)
                if relative:
                    seen.setdefault(comparison_key(relative), relative)
        return set(seen.values())

    def has_keys_under(self, prefix: str) -> bool:
        return any(
            relative_to(key, prefix) for layer in self._layers for key in layer.keys()
        )

    def as_dict(self) -> dict[str, str]:
        """Flattened view: every key with its winning value."""
        merged: dict[str, tuple[str, str]] = {}
        for layer in reversed(self._layers):
            merged.update(layer.entries)
        return dict(sorted(merged.values()))
