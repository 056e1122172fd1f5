"""Activation executor — ordered, conditional, run-once unit activation.

Ordering has two levels:

- **Hard edges** — imports.  Units are queued in topological import order
  and a cycle is fatal before anything runs.
- **Soft edges** — a unit whose conditions inspect an output (or another
  unit) waits until every still-pending unit that could produce it has
  been attempted; a unit whose factories need an output that a pending
  unit will produce waits the same way.  Waiting units move to the back
  of the queue.  Each unit may be deferred at most once per discovered
  unit; beyond that the remaining chain can never resolve and the run
  fails with a GraphError.

A deferred unit runs none of its factories, so a unit either activates
completely or not at all.  Any error aborts the whole run: a half-wired
object graph is never handed out.

INVARIANT: Activation is single-threaded and runs once per process.
"""

from __future__ import annotations

from collections import Counter, deque
from collections.abc import Sequence
from typing import Any

import structlog

from unitwire.activation.graph import activation_order, build_import_graph
from unitwire.activation.outputs import OutputRegistry
from unitwire.activation.report import (
    SETTLED_STATES,
    ActivationReport,
    ActivationResult,
    UnitReport,
    UnitState,
)
from unitwire.binding.binder import bind
from unitwire.conditions.evaluator import ConditionOutcome, evaluate_all
from unitwire.conditions.model import referenced_outputs, referenced_units
from unitwire.errors import FactoryError, GraphError, StartupFailure, UnitwireError
from unitwire.keys import OutputKey
from unitwire.properties.layers import PropertySourceStack
from unitwire.units.model import ConfigurationUnit, Dependency, Factory

log = structlog.get_logger("unitwire.activation")


class Activator:
    """Runs one activation over a fixed set of discovered units.

    Args:
        units: Discovered units, in discovery order.
        properties: The assembled property stack.  Binding only reads it.
        max_deferrals: Per-unit deferral bound; defaults to the unit count.
    """

    def __init__(
        self,
        units: Sequence[ConfigurationUnit],
        properties: PropertySourceStack,
        *,
        max_deferrals: int | None = None,
    ) -> None:
        self._units: dict[str, ConfigurationUnit] = {u.name: u for u in units}
        self._properties = properties
        self._limit = max_deferrals if max_deferrals is not None else len(self._units)
        self._registry = OutputRegistry()
        self._states: dict[str, UnitState] = dict.fromkeys(self._units, UnitState.DISCOVERED)
        self._reasons: dict[str, str] = {}
        self._outputs: dict[str, list[str]] = {}
        self._waiting: dict[str, list[str]] = {}
        self._deferrals: Counter[str] = Counter()
        self._settled: list[str] = []
        self._ran = False

    @property
    def registry(self) -> OutputRegistry:
        return self._registry

    def run(self) -> ActivationResult:
        """Activate every eligible unit.

        Raises:
            StartupFailure: Wrapping the fatal error and the partial report.
        """
        if self._ran:
            msg = "Activation already ran; start a new process run to activate again"
            raise UnitwireError(msg)
        self._ran = True

        current: str | None = None
        try:
            queue = deque(activation_order(build_import_graph(list(self._units.values()))))
            while queue:
                current = queue.popleft()
                self._attempt(self._units[current], queue)
            current = None
        except UnitwireError as exc:
            self._record_failure(exc, current)
            raise StartupFailure([exc], self._report(ok=False)) from exc

        self._registry.freeze()
        report = self._report(ok=True)
        log.info(
            "activation.complete",
            activated=len(report.activated),
            skipped=len(report.skipped),
            outputs=len(self._registry),
        )
        return ActivationResult(registry=self._registry, report=report)

    # ------------------------------------------------------------------
    # Per-unit steps
    # ------------------------------------------------------------------

    def _attempt(self, unit: ConfigurationUnit, queue: deque[str]) -> None:
        waiting = self._blocked_by(unit)
        if waiting:
            self._defer(unit.name, waiting, queue)
            return

        self._states[unit.name] = UnitState.ELIGIBLE
        outcome = evaluate_all(
            unit.conditions,
            self._properties,
            self._registry,
            self._names_in(UnitState.ACTIVATED),
        )
        if not outcome.matched:
            self._settle(unit.name, UnitState.SKIPPED, outcome.message)
            log.info("unit.skipped", unit=unit.name, reason=outcome.message)
            return

        waiting = self._missing_inputs(unit)
        if waiting:
            self._defer(unit.name, waiting, queue)
            return

        self._activate(unit, outcome)

    def _blocked_by(self, unit: ConfigurationUnit) -> list[str]:
        """Reasons *unit* cannot be attempted yet (imports and soft edges)."""
        reasons: list[str] = []
        for imported in unit.imports:
            if self._states[imported] not in SETTLED_STATES:
                reasons.append(f"import '{imported}'")
        for condition in unit.conditions:
            for key in referenced_outputs(condition):
                for producer in self._pending_producers(key, unit.name, exact=False):
                    reasons.append(f"unit '{producer}' (may produce {key})")
            for name in referenced_units(condition):
                if name != unit.name and self._states.get(name, UnitState.SKIPPED) not in SETTLED_STATES:
                    reasons.append(f"unit '{name}'")
        return list(dict.fromkeys(reasons))

    def _missing_inputs(self, unit: ConfigurationUnit) -> list[str]:
        """Inputs still to be produced by pending units.

        Raises:
            GraphError: If a required input can never be produced.
        """
        reasons: list[str] = []
        produced_here: set[OutputKey] = set()
        for factory in unit.factories:
            for dep in factory.inputs:
                if dep.is_config or dep.key in self._registry or dep.key in produced_here:
                    continue
                pending = self._pending_producers(dep.key, unit.name, exact=True)
                if pending:
                    reasons.append(f"{dep.key} from unit(s) {', '.join(pending)}")
                elif not dep.optional:
                    self._raise_unsatisfiable(unit, factory, dep)
            produced_here.add(factory.output)
        return reasons

    def _raise_unsatisfiable(self, unit: ConfigurationUnit, factory: Factory, dep: Dependency) -> None:
        skipped = [
            name
            for name, other in self._units.items()
            if self._states[name] is UnitState.SKIPPED and dep.key in other.outputs
        ]
        msg = (
            f"Unit '{unit.name}' factory '{factory.name}' requires {dep.key}, "
            "which no remaining unit produces"
        )
        if skipped:
            msg += f" (producer(s) skipped: {', '.join(skipped)})"
        raise GraphError(
            msg,
            unit=unit.name,
            factory=factory.name,
            requires=str(dep.key),
            skipped_producers=skipped,
        )

    def _activate(self, unit: ConfigurationUnit, outcome: ConditionOutcome) -> None:
        self._states[unit.name] = UnitState.ACTIVATING
        bound: dict[tuple[type, str], Any] = {}
        produced: list[str] = []
        self._outputs[unit.name] = produced
        for factory in unit.factories:
            kwargs = {dep.name: self._input_value(unit, dep, bound) for dep in factory.inputs}
            try:
                instance = factory(**kwargs)
            except UnitwireError:
                raise
            except Exception as exc:
                msg = f"Factory '{factory.name}' of unit '{unit.name}' failed: {exc}"
                raise FactoryError(
                    msg,
                    unit=unit.name,
                    factory=factory.name,
                    cause=type(exc).__name__,
                ) from exc
            if instance is None:
                msg = f"Factory '{factory.name}' of unit '{unit.name}' returned None"
                raise FactoryError(msg, unit=unit.name, factory=factory.name)
            self._registry.register(factory.output, instance, producer=unit.name)
            produced.append(str(factory.output))

        self._settle(unit.name, UnitState.ACTIVATED, outcome.message)
        log.info("unit.activated", unit=unit.name, outputs=produced)

    def _input_value(
        self,
        unit: ConfigurationUnit,
        dep: Dependency,
        bound: dict[tuple[type, str], Any],
    ) -> Any:
        if dep.is_config:
            schema: Any = dep.type
            prefix = schema.config_prefix if schema.config_prefix is not None else (unit.prefix or "")
            cache_key = (schema, prefix)
            if cache_key not in bound:
                bound[cache_key] = bind(prefix, self._properties, schema)
            return bound[cache_key]
        if dep.key in self._registry:
            return self._registry.get(dep.type, dep.qualifier)
        return dep.default

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------

    def _pending_producers(self, key: OutputKey, exclude: str, *, exact: bool) -> list[str]:
        return [
            name
            for name, unit in self._units.items()
            if name != exclude
            and self._states[name] not in SETTLED_STATES
            and any((out == key) if exact else key.matches(out) for out in unit.outputs)
        ]

    def _defer(self, name: str, waiting: list[str], queue: deque[str]) -> None:
        self._deferrals[name] += 1
        self._waiting[name] = waiting
        if self._deferrals[name] > self._limit:
            stuck = [name, *(n for n in queue if n != name)]
            chain = {n: self._waiting.get(n, []) for n in stuck}
            described = "; ".join(
                f"'{n}' waits for {', '.join(reasons) or 'nothing'}" for n, reasons in chain.items()
            )
            for n in stuck:
                self._settle(n, UnitState.FAILED, "unresolved: " + ", ".join(chain[n]))
            msg = f"Unresolved activation chain after {self._limit} deferral(s): {described}"
            raise GraphError(msg, chain=chain)
        queue.append(name)
        log.debug("unit.deferred", unit=name, waiting=waiting, attempt=self._deferrals[name])

    def _settle(self, name: str, state: UnitState, reason: str) -> None:
        self._states[name] = state
        self._reasons[name] = reason
        if name not in self._settled:
            self._settled.append(name)

    def _record_failure(self, exc: UnitwireError, current: str | None) -> None:
        if current is not None and self._states.get(current) not in (*SETTLED_STATES, UnitState.FAILED):
            self._settle(current, UnitState.FAILED, exc.message)
        for name in exc.detail.get("cycle", []):
            if name in self._states and self._states[name] is not UnitState.FAILED:
                self._settle(name, UnitState.FAILED, "import cycle")
        log.error("unit.failed", unit=current, code=exc.code, error=exc.message)

    def _names_in(self, state: UnitState) -> list[str]:
        return [name for name, s in self._states.items() if s is state]

    def _report(self, *, ok: bool) -> ActivationReport:
        order = self._settled + [n for n in self._units if n not in self._settled]
        return ActivationReport(
            ok=ok,
            units=[
                UnitReport(
                    name=name,
                    state=self._states[name],
                    reason=self._reasons.get(name, ""),
                    outputs=self._outputs.get(name, []) if self._states[name] is UnitState.ACTIVATED else [],
                    deferrals=self._deferrals[name],
                )
                for name in order
            ],
        )


def activate(
    units: Sequence[ConfigurationUnit],
    properties: PropertySourceStack,
    *,
    max_deferrals: int | None = None,
) -> ActivationResult:
    """Run a single activation; see :class:`Activator`."""
    return Activator(units, properties, max_deferrals=max_deferrals).run()
