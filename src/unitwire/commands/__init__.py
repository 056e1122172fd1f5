"""Subcommand modules for unitwire.

``register_commands()`` defers imports so ``unitwire --help`` stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands on the root group."""
    from unitwire.commands.activate import activate
    from unitwire.commands.resolve import resolve
    from unitwire.commands.units import units

    cli.add_command(activate)
    cli.add_command(units)
    cli.add_command(resolve)
