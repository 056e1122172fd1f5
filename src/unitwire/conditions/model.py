"""Condition variants — tagged predicates interpreted by the evaluator.

Conditions are plain frozen values; nothing is evaluated at construction
or discovery time.  ``OutputPresent``/``OutputAbsent`` without a qualifier
match an output of that type registered under any qualifier.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from unitwire.keys import OutputKey


@dataclass(frozen=True)
class PropertyEquals:
    """Property *key* equals *expected* (case-insensitive, trimmed).

    With ``match_if_missing``, an undefined property also matches.
    """

    key: str
    expected: str
    match_if_missing: bool = False


@dataclass(frozen=True)
class PropertyPresent:
    """Property *key* is defined in some layer."""

    key: str


@dataclass(frozen=True)
class OutputPresent:
    type: type
    qualifier: str | None = None

    @property
    def output_key(self) -> OutputKey:
        return OutputKey(self.type, self.qualifier)


@dataclass(frozen=True)
class OutputAbsent:
    type: type
    qualifier: str | None = None

    @property
    def output_key(self) -> OutputKey:
        return OutputKey(self.type, self.qualifier)


@dataclass(frozen=True)
class UnitActivated:
    """Another unit, by name, reached the Activated state."""

    name: str


@dataclass(frozen=True, init=False)
class AllOf:
    conditions: tuple[Condition, ...]

    def __init__(self, *conditions: Condition) -> None:
        object.__setattr__(self, "conditions", tuple(conditions))


@dataclass(frozen=True, init=False)
class AnyOf:
    conditions: tuple[Condition, ...]

    def __init__(self, *conditions: Condition) -> None:
        object.__setattr__(self, "conditions", tuple(conditions))


@dataclass(frozen=True, init=False)
class NoneOf:
    conditions: tuple[Condition, ...]

    def __init__(self, *conditions: Condition) -> None:
        object.__setattr__(self, "conditions", tuple(conditions))


type Condition = (
    PropertyEquals
    | PropertyPresent
    | OutputPresent
    | OutputAbsent
    | UnitActivated
    | AllOf
    | AnyOf
    | NoneOf
)


def walk(condition: Condition) -> Iterator[Condition]:
    """Yield *condition* and every nested condition, depth first."""
    yield condition
    if isinstance(condition, (AllOf, AnyOf, NoneOf)):
        for child in condition.conditions:
            yield from walk(child)


def referenced_outputs(condition: Condition) -> list[OutputKey]:
    """Output keys inspected by *condition* (soft ordering edges)."""
    return [c.output_key for c in walk(condition) if isinstance(c, (OutputPresent, OutputAbsent))]


def referenced_units(condition: Condition) -> list[str]:
    return [c.name for c in walk(condition) if isinstance(c, UnitActivated)]
