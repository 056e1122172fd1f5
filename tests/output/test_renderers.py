"""Tests for operation-specific Rich renderers."""

from __future__ import annotations

from unitwire.output.renderers import render_quiet, render_result
from unitwire.services.result import ServiceError, ServiceResult

# ── Helpers ───────────────────────────────────────────────────────────


def _ok(op: str, **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _err(op: str, code: str, message: str, **data: object) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        data=dict(data),
        error=ServiceError(code=code, message=message, detail={"unit": "delivery"}),
    )


_UNITS = [
    {"name": "core", "state": "activated", "reason": "no conditions", "outputs": ["Clock"], "deferrals": 0},
    {
        "name": "metrics",
        "state": "skipped",
        "reason": "property myshop.metrics.enabled is not set",
        "outputs": [],
        "deferrals": 2,
    },
]


class TestActivateRenderer:
    def test_table(self) -> None:
        output = render_result(_ok("activate", units=_UNITS, activated=1, skipped=1, outputs=["Clock"]))
        assert "OK" in output
        assert "activate" in output
        assert "core" in output
        assert "skipped" in output
        assert "myshop.metrics.enabled" in output
        assert "Deferrals" not in output

    def test_verbose_shows_deferrals(self) -> None:
        output = render_result(
            _ok("activate", units=_UNITS, activated=1, skipped=1, outputs=[]),
            verbose=True,
        )
        assert "Deferrals" in output


class TestErrorRenderer:
    def test_failure_with_units(self) -> None:
        failed = [{"name": "delivery", "state": "failed", "reason": "boom", "outputs": [], "deferrals": 0}]
        output = render_result(_err("activate", "STARTUP_FAILURE", "Activation failed", units=failed))
        assert "ERROR" in output
        assert "Activation failed" in output
        assert "delivery" in output
        assert "failed" in output

    def test_verbose_shows_detail(self) -> None:
        output = render_result(_err("units", "DISCOVERY_ERROR", "Unresolvable"), verbose=True)
        assert "detail" in output
        assert "unit: delivery" in output

    def test_no_error_object(self) -> None:
        output = render_result(ServiceResult(ok=False, op="units"))
        assert "Unknown error" in output


class TestOtherRenderers:
    def test_units(self) -> None:
        item = {
            "name": "delivery",
            "prefix": None,
            "imports": ["core"],
            "conditions": [],
            "factories": ["delivery_service"],
            "outputs": ["DeliveryService"],
        }
        output = render_result(_ok("units", count=1, items=[item]))
        assert "delivery" in output
        assert "DeliveryService" in output

    def test_resolve_found(self) -> None:
        data = {"key": "server.port", "found": True, "value": "8080", "origin": "environment"}
        output = render_result(_ok("resolve", **data))
        assert "8080" in output
        assert "environment" in output

    def test_resolve_missing(self) -> None:
        data = {"key": "server.port", "found": False, "value": None, "origin": None}
        assert "<not set>" in render_result(_ok("resolve", **data))

    def test_generic(self) -> None:
        output = render_result(_ok("custom", nested={"a": 1}, plain="x"))
        assert '{"a":1}' in output
        assert "plain: x" in output


class TestQuiet:
    def test_lists_unit_names(self) -> None:
        output = render_quiet(_ok("activate", units=_UNITS))
        assert output.splitlines() == ["core", "metrics"]

    def test_resolve_prints_value(self) -> None:
        assert render_quiet(_ok("resolve", key="k", found=True, value="v", origin="base")) == "v"

    def test_error(self) -> None:
        assert render_quiet(_err("units", "DISCOVERY_ERROR", "Unresolvable")).startswith("ERROR: units")

    def test_fallback(self) -> None:
        assert render_quiet(_ok("custom")) == "OK: custom"
