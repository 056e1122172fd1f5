"""Condition evaluator — tagged predicates deciding unit activation."""

from unitwire.conditions.evaluator import ConditionOutcome, evaluate, evaluate_all, explain
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
    referenced_outputs,
    referenced_units,
)

__all__ = [
    "AllOf",
    "AnyOf",
    "Condition",
    "ConditionOutcome",
    "NoneOf",
    "OutputAbsent",
    "OutputPresent",
    "PropertyEquals",
    "PropertyPresent",
    "UnitActivated",
    "evaluate",
    "evaluate_all",
    "explain",
    "referenced_outputs",
    "referenced_units",
]
