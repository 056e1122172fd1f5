"""Condition interpreter.

Evaluation is deterministic and side-effect free, so the executor may call
it repeatedly while it re-orders deferred units.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from unitwire.conditions.model import (
    AllOf,
    AnyOf,
    Condition,
    NoneOf,
    OutputAbsent,
    OutputPresent,
    PropertyEquals,
    PropertyPresent,
    UnitActivated,
)

if TYPE_CHECKING:
    from unitwire.activation.outputs import OutputRegistry
    from unitwire.properties.layers import PropertySourceStack


@dataclass(frozen=True)
class ConditionOutcome:
    """Result of evaluating one condition, with a reason for reports."""

    matched: bool
    message: str


def explain(
    condition: Condition,
    properties: PropertySourceStack,
    registry: OutputRegistry,
    activated_units: Collection[str] = (),
) -> ConditionOutcome:
    """Evaluate *condition* and describe why it matched or not."""
    match condition:
        case PropertyEquals(key, expected, match_if_missing):
            raw = properties.resolve(key)
            if raw is None:
                return ConditionOutcome(match_if_missing, f"property {key} is not set")
            matched = raw.strip().lower() == expected.strip().lower()
            relation = "==" if matched else "!="
            return ConditionOutcome(matched, f"property {key}={raw!r} {relation} {expected!r}")
        case PropertyPresent(key):
            present = properties.contains(key)
            return ConditionOutcome(present, f"property {key} is {'set' if present else 'not set'}")
        case OutputPresent():
            found = registry.contains(condition.output_key)
            state = "present" if found else "absent"
            return ConditionOutcome(found, f"output {condition.output_key} is {state}")
        case OutputAbsent():
            found = registry.contains(condition.output_key)
            state = "present" if found else "absent"
            return ConditionOutcome(not found, f"output {condition.output_key} is {state}")
        case UnitActivated(name):
            active = name in activated_units
            return ConditionOutcome(active, f"unit {name} is {'activated' if active else 'not activated'}")
        case AllOf(children):
            outcomes = [explain(c, properties, registry, activated_units) for c in children]
            failed = [o for o in outcomes if not o.matched]
            if failed:
                return ConditionOutcome(False, failed[0].message)
            return ConditionOutcome(True, _joined(outcomes, " and "))
        case AnyOf(children):
            outcomes = [explain(c, properties, registry, activated_units) for c in children]
            passed = [o for o in outcomes if o.matched]
            if passed:
                return ConditionOutcome(True, passed[0].message)
            return ConditionOutcome(False, _joined(outcomes, " and ") or "no alternatives")
        case NoneOf(children):
            outcomes = [explain(c, properties, registry, activated_units) for c in children]
            passed = [o for o in outcomes if o.matched]
            if passed:
                return ConditionOutcome(False, passed[0].message)
            return ConditionOutcome(True, _joined(outcomes, " and "))
    msg = f"Unsupported condition: {condition!r}"
    raise TypeError(msg)


def _joined(outcomes: Iterable[ConditionOutcome], sep: str) -> str:
    return sep.join(o.message for o in outcomes)


def evaluate(
    condition: Condition,
    properties: PropertySourceStack,
    registry: OutputRegistry,
    activated_units: Collection[str] = (),
) -> bool:
    """Return whether *condition* holds."""
    return explain(condition, properties, registry, activated_units).matched


def evaluate_all(
    conditions: Iterable[Condition],
    properties: PropertySourceStack,
    registry: OutputRegistry,
    activated_units: Collection[str] = (),
) -> ConditionOutcome:
    """Evaluate a unit's condition list; the first failure decides."""
    messages: list[str] = []
    for condition in conditions:
        outcome = explain(condition, properties, registry, activated_units)
        if not outcome.matched:
            return outcome
        messages.append(outcome.message)
    return ConditionOutcome(True, "; ".join(messages) or "no conditions")
