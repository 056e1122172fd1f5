"""Command: list discovered units without activating them."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from unitwire.commands._base import UnitwireCommand

if TYPE_CHECKING:
    from unitwire.commands._context import AppContext


@click.command(
    cls=UnitwireCommand,
    examples="""\
  unitwire units
  unitwire -v units
  unitwire --json units""",
)
@click.pass_obj
def units(app: AppContext) -> None:
    """List units named by the manifests, imports included."""
    app.emit(app.service.list_units())
