"""Root CLI group for unitwire with global flags and command registration."""

from __future__ import annotations

import click

from unitwire import __version__
from unitwire.commands import register_commands
from unitwire.commands._base import UnitwireGroup
from unitwire.commands._context import AppContext
from unitwire.config.settings import UnitwireSettings


@click.group(
    cls=UnitwireGroup,
    invoke_without_command=True,
    examples="""\
  unitwire activate
  unitwire -c deploy/unitwire.toml --profile prod activate
  unitwire units
  unitwire resolve myshop.delivery.cargo-name""",
)
@click.version_option(version=__version__, prog_name="unitwire")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logging.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option("--profile", default=None, help="Active property profile.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    profile: str | None,
) -> None:
    """unitwire — configuration unit activation and property binding."""
    ctx.ensure_object(dict)
    settings = UnitwireSettings.from_cli(
        config_path=config_path,
        json_output=json_output or None,
        quiet=quiet or None,
        verbose=verbose or None,
        log_json=log_json or None,
        profile=profile,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
