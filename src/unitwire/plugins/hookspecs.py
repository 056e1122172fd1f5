"""Pluggy hook specifications for unitwire.

Two discovery-time hooks let installed packages contribute configuration
units and manifest text; one notification hook fires after a successful
activation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from unitwire.activation.report import ActivationReport
    from unitwire.units.model import ConfigurationUnit

hookspec = pluggy.HookspecMarker("unitwire")
hookimpl = pluggy.HookimplMarker("unitwire")


class UnitwireHookSpec:
    """Hook specifications for the unitwire plugin system."""

    @hookspec
    def unitwire_units(self) -> list[ConfigurationUnit] | None:
        """Return configuration units this plugin defines.

        Units are only activated when a manifest names them.
        """

    @hookspec
    def unitwire_manifests(self) -> list[str] | None:
        """Return manifest texts to merge after the file manifests."""

    @hookspec
    def post_activation(self, report: ActivationReport) -> None:
        """Called after activation completed successfully."""
