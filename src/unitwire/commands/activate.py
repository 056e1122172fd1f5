"""Command: discover and activate every manifest-listed unit."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from unitwire.commands._base import UnitwireCommand

if TYPE_CHECKING:
    from unitwire.commands._context import AppContext


@click.command(
    cls=UnitwireCommand,
    examples="""\
  unitwire activate
  unitwire --profile prod activate
  unitwire --json activate
  unitwire -v activate""",
)
@click.pass_obj
def activate(app: AppContext) -> None:
    """Activate all units and print the activation report."""
    app.emit(app.service.activate())
