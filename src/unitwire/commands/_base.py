"""Click classes for unitwire commands.

Each command may carry an ``examples`` block (typical manifest and property
setups it is used with).  ``--examples`` prints that block and exits, so
``--help`` stays limited to options.
"""

from __future__ import annotations

from typing import Any

import click


def _examples_option(examples: str) -> click.Option:
    def show(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if value:
            click.echo(f"Examples for '{ctx.command_path}':\n")
            click.echo(examples)
            ctx.exit(0)

    return click.Option(
        ["--examples"],
        is_flag=True,
        expose_value=False,
        is_eager=True,
        callback=show,
        help="Show usage examples.",
    )


class _WithExamples:
    """Mixin adding the ``examples`` keyword to a click command class."""

    params: list[click.Parameter]

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(_examples_option(examples))


class UnitwireCommand(_WithExamples, click.Command):
    pass


class UnitwireGroup(_WithExamples, click.Group):
    """Group whose subcommands default to :class:`UnitwireCommand`."""

    command_class = UnitwireCommand
