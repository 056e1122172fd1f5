"""Command: resolve a single property through the layered stack."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from unitwire.commands._base import UnitwireCommand

if TYPE_CHECKING:
    from unitwire.commands._context import AppContext


@click.command(
    cls=UnitwireCommand,
    examples="""\
  unitwire resolve myshop.delivery.cargo-name
  unitwire resolve MYSHOP_DELIVERY_CARGO_NAME
  unitwire --profile prod -q resolve server.port""",
)
@click.argument("key")
@click.pass_obj
def resolve(app: AppContext, key: str) -> None:
    """Show the effective value of KEY and which layer supplied it."""
    app.emit(app.service.resolve(key))
