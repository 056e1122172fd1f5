"""Activation report — final state and reason per unit."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from unitwire.activation.outputs import OutputRegistry


class UnitState(StrEnum):
    """Per-unit activation state machine.

    ``DISCOVERED -> ELIGIBLE -> ACTIVATING -> ACTIVATED``,
    ``ELIGIBLE -> SKIPPED`` when a condition is false, or ``FAILED``.
    """

    DISCOVERED = "discovered"
    ELIGIBLE = "eligible"
    ACTIVATING = "activating"
    ACTIVATED = "activated"
    SKIPPED = "skipped"
    FAILED = "failed"


SETTLED_STATES = frozenset({UnitState.ACTIVATED, UnitState.SKIPPED})


class UnitReport(BaseModel):
    """One unit's outcome."""

    model_config = {"frozen": True}

    name: str
    state: UnitState
    reason: str = ""
    outputs: list[str] = Field(default_factory=list)
    deferrals: int = 0


class ActivationReport(BaseModel):
    """Per-unit outcomes, in the order units settled.

    Units never attempted (because the run aborted first) follow at the end
    in discovery order, still in the ``discovered`` state.
    """

    model_config = {"frozen": True}

    ok: bool
    units: list[UnitReport] = Field(default_factory=list)

    def get(self, name: str) -> UnitReport | None:
        return next((u for u in self.units if u.name == name), None)

    def names_in(self, state: UnitState) -> list[str]:
        return [u.name for u in self.units if u.state == state]

    @property
    def activated(self) -> list[str]:
        return self.names_in(UnitState.ACTIVATED)

    @property
    def skipped(self) -> list[str]:
        return self.names_in(UnitState.SKIPPED)

    @property
    def failed(self) -> list[str]:
        return self.names_in(UnitState.FAILED)


@dataclass(frozen=True)
class ActivationResult:
    """What the application assembler receives after a successful run."""

    registry: OutputRegistry
    report: ActivationReport
