"""Activation graph builder and executor."""

from unitwire.activation.executor import Activator, activate
from unitwire.activation.outputs import OutputRegistry
from unitwire.activation.report import (
    ActivationReport,
    ActivationResult,
    UnitReport,
    UnitState,
)

__all__ = [
    "ActivationReport",
    "ActivationResult",
    "Activator",
    "OutputRegistry",
    "UnitReport",
    "UnitState",
    "activate",
]
