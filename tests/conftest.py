"""Shared pytest fixtures for unitwire tests."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from unitwire.properties.layers import PropertySourceStack


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def stack() -> PropertySourceStack:
    """Empty, unfrozen property stack."""
    return PropertySourceStack()


@pytest.fixture
def project_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temporary project directory used as CWD, isolated from ``UNITWIRE_*`` env vars."""
    for name in list(os.environ):
        if name.startswith("UNITWIRE_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """CLI invocations reconfigure logging; put the root logger back afterwards."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    pkg_level = logging.getLogger("unitwire").level
    yield
    root.handlers = handlers
    root.setLevel(level)
    logging.getLogger("unitwire").setLevel(pkg_level)


SHOP_MODULE = "cli_shop_units"

SHOP_SOURCE = '''\
from unitwire.binding import ConfigProperties
from unitwire.conditions import PropertyEquals
from unitwire.units import ConfigurationUnit


class Clock:
    pass


class DeliveryProperties(ConfigProperties):
    config_prefix = "myshop.delivery"

    cargo_name: str


class DeliveryService:
    def __init__(self, cargo_name):
        self.cargo_name = cargo_name


core = ConfigurationUnit("core")


@core.factory
def clock() -> Clock:
    return Clock()


delivery = ConfigurationUnit("delivery", imports=("cli_shop_units:core",))


@delivery.factory
def delivery_service(props: DeliveryProperties, clock: Clock) -> DeliveryService:
    return DeliveryService(props.cargo_name)


metrics = ConfigurationUnit(
    "metrics",
    conditions=(PropertyEquals("myshop.metrics.enabled", "true"),),
)
'''


@pytest.fixture
def shop_project(project_root: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Project directory with an importable unit module and a manifest naming it.

    ``application.toml`` is left to each test.
    """
    (project_root / f"{SHOP_MODULE}.py").write_text(SHOP_SOURCE)
    (project_root / "unitwire.units").write_text(
        f"unitwire.units={SHOP_MODULE}:core,\\\n"
        f"  {SHOP_MODULE}:delivery,\\\n"
        f"  {SHOP_MODULE}:metrics\n"
    )
    monkeypatch.syspath_prepend(str(project_root))
    monkeypatch.delitem(sys.modules, SHOP_MODULE, raising=False)
    return project_root
