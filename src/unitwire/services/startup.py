"""StartupService — activation, unit listing and property inspection."""

from __future__ import annotations

from typing import Any

from unitwire.bootstrap import bootstrap, prepare
from unitwire.errors import StartupFailure, UnitwireError
from unitwire.properties.names import canonical
from unitwire.services.base import BaseService
from unitwire.services.result import ServiceResult
from unitwire.units.model import ConfigurationUnit


def _describe_unit(unit: ConfigurationUnit) -> dict[str, Any]:
    return {
        "name": unit.name,
        "prefix": unit.prefix,
        "imports": list(unit.imports),
        "conditions": [repr(c) for c in unit.conditions],
        "factories": [f.name for f in unit.factories],
        "outputs": [str(key) for key in unit.outputs],
    }


class StartupService(BaseService):
    """Operations the CLI exposes over discovery and activation."""

    def activate(self) -> ServiceResult:
        """Run a full startup and report every unit's final state."""
        op = "activate"
        try:
            result = bootstrap(
                self._settings,
                lookup=self._lookup,
                environ=self._environ,
                plugins=self.plugins,
            )
        except StartupFailure as exc:
            units = exc.report.model_dump(mode="json")["units"] if exc.report else []
            return ServiceResult.failure(op, exc, units=units, report=exc.render())

        report = result.report
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "units": report.model_dump(mode="json")["units"],
                "activated": len(report.activated),
                "skipped": len(report.skipped),
                "outputs": [str(key) for key in result.registry.keys()],
            },
        )

    def list_units(self) -> ServiceResult:
        """Discover units without activating them."""
        op = "units"
        try:
            prepared = prepare(
                self._settings,
                lookup=self._lookup,
                environ=self._environ,
                plugins=self.plugins,
            )
        except UnitwireError as exc:
            return ServiceResult.failure(op, exc)
        items = [_describe_unit(u) for u in prepared.units]
        return ServiceResult(ok=True, op=op, data={"count": len(items), "items": items})

    def resolve(self, key: str) -> ServiceResult:
        """Resolve one property key and name the layer that supplied it."""
        op = "resolve"
        try:
            prepared = prepare(
                self._settings,
                lookup=self._lookup,
                environ=self._environ,
                plugins=self.plugins,
            )
        except UnitwireError as exc:
            return ServiceResult.failure(op, exc)
        stack = prepared.properties
        value = stack.resolve(key)
        data: dict[str, Any] = {
            "key": canonical(key),
            "found": value is not None,
            "value": value,
            "origin": stack.origin(key),
        }
        warnings = [] if value is not None else [f"Property '{canonical(key)}' is not set"]
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)
