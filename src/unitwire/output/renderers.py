"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from unitwire.output.console import create_console, get_output, style_for_state

if TYPE_CHECKING:
    from rich.console import Console

    from unitwire.services.result import ServiceResult


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"
    if result.op == "resolve":
        return str(result.data.get("value") or "")
    items = result.data.get("units") or result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(str(item.get("name", "")) for item in items)
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="uw.ok"), Text(f"  {result.op}", style="uw.op"))


def _field(console: Console, key: str, value: Any) -> None:
    console.print(Text(f"  {key}: ", style="uw.key"), Text(str(value)), sep="")


def _state_table(units: list[dict[str, Any]], *, verbose: bool = False) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Unit", style="uw.unit", no_wrap=True)
    table.add_column("State")
    table.add_column("Reason")
    table.add_column("Outputs")
    if verbose:
        table.add_column("Deferrals", justify="right")
    for unit in units:
        state = str(unit.get("state", ""))
        row = [
            Text(str(unit.get("name", ""))),
            Text(state, style=style_for_state(state)),
            Text(str(unit.get("reason", ""))),
            Text(", ".join(unit.get("outputs", []))),
        ]
        if verbose:
            row.append(Text(str(unit.get("deferrals", 0))))
        table.add_row(*row)
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(Text("ERROR", style="uw.error"), Text(f"  {result.op}", style="uw.op"), Text(" — "), Text(msg))
    units = result.data.get("units")
    if units:
        console.print(_state_table(units, verbose=verbose))
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Operation renderers ───────────────────────────────────────────────


def _render_activate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "activated", d.get("activated", 0))
    _field(console, "skipped", d.get("skipped", 0))
    console.print(_state_table(d.get("units", []), verbose=verbose))


def _render_units(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Unit", style="uw.unit", no_wrap=True)
    table.add_column("Imports")
    table.add_column("Outputs")
    if verbose:
        table.add_column("Conditions")
    for item in result.data.get("items", []):
        row = [Text(item["name"]), Text(", ".join(item["imports"])), Text(", ".join(item["outputs"]))]
        if verbose:
            row.append(Text("\n".join(item["conditions"])))
        table.add_row(*row)
    console.print(table)


def _render_resolve(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "key", d["key"])
    _field(console, "value", d["value"] if d["found"] else "<not set>")
    if d["found"]:
        _field(console, "origin", d["origin"])


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)


_OP_RENDERERS: dict[str, Any] = {
    "activate": _render_activate,
    "units": _render_units,
    "resolve": _render_resolve,
}
