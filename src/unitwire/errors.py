"""Error taxonomy for discovery, binding, and activation.

INVARIANT: Every error raised during a run is fatal to that run.
The executor collects them into a single :class:`StartupFailure` so the
caller sees one aggregated report instead of a chain of low-level exceptions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from unitwire.activation.report import ActivationReport


class UnitwireError(Exception):
    """Base class for every engine error.

    Attributes:
        code: Stable machine-readable error code (used in JSON output).
        message: Human-readable description.
        detail: Structured context (unit names, keys, cycle paths).
    """

    code = "UNITWIRE_ERROR"

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = detail

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "detail": self.detail}


class PropertySourceError(UnitwireError):
    """A property file exists but cannot be parsed."""

    code = "PROPERTY_SOURCE_ERROR"


class DiscoveryError(UnitwireError):
    """A manifest entry or import cannot be resolved to a unit."""

    code = "DISCOVERY_ERROR"


class BindingError(UnitwireError):
    """Properties under a prefix cannot be bound to the target schema.

    ``problems`` lists every missing key and coercion failure found in a
    single bind call.
    """

    code = "BINDING_ERROR"

    def __init__(self, prefix: str, schema: str, problems: list[str]) -> None:
        lines = "; ".join(problems)
        super().__init__(
            f"Cannot bind '{prefix}' to {schema}: {lines}",
            prefix=prefix,
            schema=schema,
            problems=problems,
        )
        self.prefix = prefix
        self.problems = problems


class GraphError(UnitwireError):
    """Import cycle, or a dependency chain that can never be satisfied."""

    code = "GRAPH_ERROR"


class DuplicateOutputError(UnitwireError):
    """Two factories claim the same (type, qualifier) output."""

    code = "DUPLICATE_OUTPUT"


class FactoryError(UnitwireError):
    """A factory raised while constructing its output."""

    code = "FACTORY_ERROR"


class RegistryFrozenError(UnitwireError):
    """An output was registered after activation completed."""

    code = "REGISTRY_FROZEN"


class StartupFailure(UnitwireError):
    """Aggregated failure of an activation run.

    Carries every collected error plus the report as it stood when the
    run aborted, so the consumer can show which units had already settled.
    """

    code = "STARTUP_FAILURE"

    def __init__(
        self,
        errors: list[UnitwireError],
        report: ActivationReport | None = None,
    ) -> None:
        self.errors = errors
        self.report = report
        summary = "; ".join(f"[{e.code}] {e.message}" for e in errors)
        super().__init__(
            f"Activation failed with {len(errors)} error(s): {summary}",
            errors=[e.to_dict() for e in errors],
        )

    def render(self) -> str:
        """Multi-line startup failure report."""
        lines = ["APPLICATION FAILED TO START", ""]
        for err in self.errors:
            lines.append(f"  [{err.code}] {err.message}")
            for key, value in err.detail.items():
                lines.append(f"      {key}: {value}")
        if self.report is not None:
            lines.append("")
            lines.append("Unit states:")
            for entry in self.report.units:
                reason = f" ({entry.reason})" if entry.reason else ""
                lines.append(f"  {entry.name}: {entry.state}{reason}")
        return "\n".join(lines)
