"""AppContext — shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``.  Owns the settings, the lazily built
:class:`StartupService` and result emission (stdout/stderr routing and
exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from unitwire.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from unitwire.config.settings import UnitwireSettings
    from unitwire.services.result import ServiceResult
    from unitwire.services.startup import StartupService


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The service is created on first use so ``--help`` and ``--version``
    never load plugins or read manifests.
    """

    def __init__(self, settings: UnitwireSettings) -> None:
        self.settings = settings
        self._service: StartupService | None = None

        from unitwire.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def service(self) -> StartupService:
        if self._service is None:
            from unitwire.services.startup import StartupService

            self._service = StartupService(self.settings)
        return self._service

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult.

        * Success: stdout; warnings go to stderr unless in JSON mode.
        * Failure: stderr, then exit code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
