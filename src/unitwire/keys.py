"""Output identity — (type, qualifier) pairs shared by units, conditions and the registry."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Qualifier:
    """Marker for ``Annotated[T, Qualifier("name")]`` factory parameters."""

    name: str


@dataclass(frozen=True)
class OutputKey:
    """Identity of a produced object: its declared type plus optional qualifier."""

    type: type
    qualifier: str | None = None

    def matches(self, other: OutputKey) -> bool:
        """True if *other* satisfies this key.

        A key without qualifier matches any qualifier of the same type.
        """
        if self.type is not other.type:
            return False
        return self.qualifier is None or self.qualifier == other.qualifier

    def __str__(self) -> str:
        name = getattr(self.type, "__qualname__", str(self.type))
        return f"{name}[{self.qualifier}]" if self.qualifier else name
