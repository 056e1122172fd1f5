"""OutputRegistry — produced singletons keyed by (type, qualifier).

Lifecycle: created empty by the executor, populated monotonically during
activation, then frozen and handed read-only to the application assembler.
It is an explicit context object; nothing looks it up globally.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from unitwire.errors import DuplicateOutputError, RegistryFrozenError
from unitwire.keys import OutputKey

logger = logging.getLogger(__name__)


class OutputRegistry:
    """Mapping from :class:`OutputKey` to the produced instance."""

    def __init__(self) -> None:
        self._outputs: dict[OutputKey, Any] = {}
        self._producers: dict[OutputKey, str] = {}
        self._frozen = False

    def register(self, key: OutputKey, instance: Any, *, producer: str = "") -> None:
        """Add *instance* under *key*.

        Raises:
            DuplicateOutputError: If *key* is already registered.
            RegistryFrozenError: If activation has completed.
        """
        if self._frozen:
            msg = f"Cannot register {key}: registry is frozen"
            raise RegistryFrozenError(msg, output=str(key))
        if key in self._outputs:
            existing = self._producers.get(key, "")
            msg = f"Output {key} already registered by unit '{existing}'"
            raise DuplicateOutputError(
                msg,
                output=str(key),
                existing_unit=existing,
                conflicting_unit=producer,
            )
        self._outputs[key] = instance
        self._producers[key] = producer
        logger.debug("Registered output %s from %s", key, producer or "<direct>")

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def contains(self, key: OutputKey) -> bool:
        """True if a registered key satisfies *key* (see :meth:`OutputKey.matches`)."""
        if key in self._outputs:
            return True
        return key.qualifier is None and any(key.matches(k) for k in self._outputs)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, OutputKey) and key in self._outputs

    def get[T](self, tp: type[T], qualifier: str | None = None, default: Any = KeyError) -> T:
        """Return the instance registered under exactly ``(tp, qualifier)``.

        Raises:
            KeyError: If absent and no *default* was given.
        """
        key = OutputKey(tp, qualifier)
        if key in self._outputs:
            return self._outputs[key]
        if default is KeyError:
            raise KeyError(str(key))
        return default

    def producer(self, key: OutputKey) -> str | None:
        """Name of the unit that registered *key*."""
        return self._producers.get(key)

    def keys(self) -> list[OutputKey]:
        return list(self._outputs)

    def __iter__(self) -> Iterator[OutputKey]:
        return iter(list(self._outputs))

    def __len__(self) -> int:
        return len(self._outputs)

    def as_mapping(self) -> Mapping[OutputKey, Any]:
        """Read-only live view of the registry contents."""
        return MappingProxyType(self._outputs)
