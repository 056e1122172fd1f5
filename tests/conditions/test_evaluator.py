"""Tests for condition evaluation."""

from __future__ import annotations

import pytest

from unitwire.activation.outputs import OutputRegistry
from unitwire.conditions.evaluator import evaluate, evaluate_all, explain
from unitwire.conditions.model import (
    AllOf,
    AnyOf,
    NoneOf,
    OutputAbsent,
    OutputPresent,
    PropertyEquals,
    PropertyPresent,
    UnitActivated,
    referenced_outputs,
    referenced_units,
)
from unitwire.keys import OutputKey
from unitwire.properties.layers import PropertySourceStack


class Clock:
    pass


class Cache:
    pass


@pytest.fixture
def props() -> PropertySourceStack:
    stack = PropertySourceStack()
    stack.add_layer(
        "base",
        100,
        {"myshop.metrics.enabled": " TRUE ", "myshop.delivery.cargo-name": "DHL"},
    )
    stack.freeze()
    return stack


@pytest.fixture
def registry() -> OutputRegistry:
    reg = OutputRegistry()
    reg.register(OutputKey(Clock, "utc"), Clock(), producer="core")
    return reg


class TestPropertyConditions:
    def test_equals_trimmed_case_insensitive(self, props: PropertySourceStack, registry: OutputRegistry) -> None:
        assert evaluate(PropertyEquals("myshop.metrics.enabled", "true"), props, registry)
        assert evaluate(PropertyEquals("MYSHOP_METRICS_ENABLED", "True"), props, registry)
        assert not evaluate(PropertyEquals("myshop.metrics.enabled", "false"), props, registry)

    def test_equals_missing(self, props: PropertySourceStack, registry: OutputRegistry) -> None:
        outcome = explain(PropertyEquals("myshop.billing.enabled", "true"), props, registry)
        assert not outcome.matched
        assert outcome.message == "property myshop.billing.enabled is not set"

    def test_equals_match_if_missing(self, props: PropertySourceStack, registry: OutputRegistry) -> None:
        cond = PropertyEquals("myshop.billing.enabled", "true", match_if_missing=True)
        assert evaluate(cond, props, registry)

    def test_match_if_missing_ignored_when_set(self, props: PropertySourceStack, registry: OutputRegistry) -> None:
        cond = PropertyEquals("myshop.metrics.enabled", "false", match_if_missing=True)
        assert not evaluate(cond, props, registry)

    def test_present(self, props: PropertySourceStack, registry: OutputRegistry) -> None:
        assert evaluate(PropertyPresent("myshop.delivery.cargoName"), props, registry)
        assert not evaluate(PropertyPresent("myshop.delivery.timeout"), props, registry)


class TestOutputConditions:
    def test_present_any_qualifier(self, props: PropertySourceStack, registry: OutputRegistry) -> None:
        assert evaluate(OutputPresent(Clock), props, registry)
        assert evaluate(OutputPresent(Clock, "utc"), props, registry)
        assert not evaluate(OutputPresent(Clock, "local"), props, registry)
        assert not evaluate(OutputPresent(Cache), props, registry)

    def test_absent(self, props: PropertySourceStack, registry: OutputRegistry) -> None:
        assert evaluate(OutputAbsent(Cache), props, registry)
        assert not evaluate(OutputAbsent(Clock), props, registry)
        outcome = explain(OutputAbsent(Clock), props, registry)
        assert outcome.message == "output Clock is present"

    def test_unit_activated(self, props: PropertySourceStack, registry: OutputRegistry) -> None:
        assert evaluate(UnitActivated("core"), props, registry, ["core"])
        assert not evaluate(UnitActivated("core"), props, registry)


class TestComposites:
    def test_all_of(self, props: PropertySourceStack, registry: OutputRegistry) -> None:
        ok = AllOf(PropertyPresent("myshop.delivery.cargo-name"), OutputPresent(Clock))
        bad = AllOf(OutputPresent(Clock), OutputPresent(Cache))
        assert evaluate(ok, props, registry)
        outcome = explain(bad, props, registry)
        assert not outcome.matched
        assert outcome.message == "output Cache is absent"

    def test_any_of(self, props: PropertySourceStack, registry: OutputRegistry) -> None:
        assert evaluate(AnyOf(OutputPresent(Cache), OutputPresent(Clock)), props, registry)
        assert not evaluate(AnyOf(OutputPresent(Cache)), props, registry)
        assert not evaluate(AnyOf(), props, registry)

    def test_none_of(self, props: PropertySourceStack, registry: OutputRegistry) -> None:
        assert evaluate(NoneOf(OutputPresent(Cache)), props, registry)
        assert not evaluate(NoneOf(OutputPresent(Cache), OutputPresent(Clock)), props, registry)

    def test_empty_all_and_none(self, props: PropertySourceStack, registry: OutputRegistry) -> None:
        assert evaluate(AllOf(), props, registry)
        assert evaluate(NoneOf(), props, registry)

    def test_nested(self, props: PropertySourceStack, registry: OutputRegistry) -> None:
        cond = AllOf(
            AnyOf(PropertyEquals("myshop.metrics.enabled", "false"), OutputPresent(Clock)),
            NoneOf(UnitActivated("legacy")),
        )
        assert evaluate(cond, props, registry, ["core"])

    def test_unsupported(self, props: PropertySourceStack, registry: OutputRegistry) -> None:
        with pytest.raises(TypeError, match="Unsupported condition"):
            explain("not-a-condition", props, registry)  # type: ignore[arg-type]


class TestEvaluateAll:
    def test_first_failure_decides(self, props: PropertySourceStack, registry: OutputRegistry) -> None:
        outcome = evaluate_all(
            [OutputPresent(Clock), PropertyEquals("myshop.metrics.enabled", "false"), OutputPresent(Cache)],
            props,
            registry,
        )
        assert not outcome.matched
        assert outcome.message.startswith("property myshop.metrics.enabled=")

    def test_no_conditions(self, props: PropertySourceStack, registry: OutputRegistry) -> None:
        outcome = evaluate_all([], props, registry)
        assert outcome.matched
        assert outcome.message == "no conditions"

    def test_deterministic(self, props: PropertySourceStack, registry: OutputRegistry) -> None:
        conditions = [PropertyPresent("myshop.delivery.cargo-name"), OutputPresent(Clock)]
        assert evaluate_all(conditions, props, registry) == evaluate_all(conditions, props, registry)


class TestReferences:
    def test_referenced_outputs_and_units(self) -> None:
        cond = AllOf(OutputPresent(Clock), NoneOf(OutputAbsent(Cache, "x"), UnitActivated("core")))
        assert referenced_outputs(cond) == [OutputKey(Clock), OutputKey(Cache, "x")]
        assert referenced_units(cond) == ["core"]

    def test_conditions_are_values(self) -> None:
        assert AllOf(OutputPresent(Clock)) == AllOf(OutputPresent(Clock))
        assert hash(PropertyEquals("a", "b")) == hash(PropertyEquals("a", "b"))
