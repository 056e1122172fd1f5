"""Tests for StartupService — activate, list units and resolve properties."""

from __future__ import annotations

from pathlib import Path

import pytest

from unitwire.binding.schema import ConfigProperties
from unitwire.conditions.model import PropertyEquals
from unitwire.config.settings import UnitwireSettings
from unitwire.plugins.hookspecs import hookimpl
from unitwire.plugins.manager import PluginManager
from unitwire.services.startup import StartupService
from unitwire.units.lookup import units_lookup
from unitwire.units.model import ConfigurationUnit


class Clock:
    pass


class DeliveryProperties(ConfigProperties):
    config_prefix = "myshop.delivery"

    cargo_name: str


class DeliveryService:
    def __init__(self, cargo_name: str) -> None:
        self.cargo_name = cargo_name


core = ConfigurationUnit("core")


@core.factory
def clock() -> Clock:
    return Clock()


delivery = ConfigurationUnit("delivery", imports=("core",), defaults={"myshop.delivery.cargo-name": "PPL"})


@delivery.factory
def delivery_service(props: DeliveryProperties, clock: Clock) -> DeliveryService:
    return DeliveryService(props.cargo_name)


metrics = ConfigurationUnit("metrics", conditions=(PropertyEquals("myshop.metrics.enabled", "true"),))

strict = ConfigurationUnit("strict")


@strict.factory
def strict_service(props: DeliveryProperties) -> DeliveryService:
    return DeliveryService(props.cargo_name)


class _Observer:
    def __init__(self) -> None:
        self.seen: list[bool] = []

    @hookimpl
    def post_activation(self, report: object) -> None:
        self.seen.append(True)


def _service(
    root: Path,
    manifest: str,
    *,
    environ: dict[str, str] | None = None,
    plugins: PluginManager | None = None,
) -> StartupService:
    (root / "unitwire.units").write_text(manifest)
    settings = UnitwireSettings.from_cli(project_root=root)
    return StartupService(
        settings,
        lookup=units_lookup(core, delivery, metrics, strict),
        environ=environ or {},
        plugins=plugins or PluginManager(),
    )


@pytest.fixture(autouse=True)
def _project(project_root: Path) -> None:
    """Run inside an isolated project directory."""


class TestActivate:
    def test_success(self, tmp_path: Path) -> None:
        (tmp_path / "application.toml").write_text('[myshop.delivery]\ncargo-name = "DHL"\n')
        result = _service(tmp_path, "unitwire.units=delivery,metrics\n").activate()
        assert result.ok
        assert result.op == "activate"
        assert result.data["activated"] == 2
        assert result.data["skipped"] == 1
        names = [u["name"] for u in result.data["units"]]
        assert names == ["metrics", "core", "delivery"]
        states = {u["name"]: u["state"] for u in result.data["units"]}
        assert states == {"core": "activated", "delivery": "activated", "metrics": "skipped"}
        assert set(result.data["outputs"]) == {"Clock", "DeliveryService"}

    def test_failure_carries_report(self, tmp_path: Path) -> None:
        result = _service(tmp_path, "strict\n").activate()
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "STARTUP_FAILURE"
        assert "myshop.delivery.cargo-name" in result.error.message
        assert result.data["units"][0]["state"] == "failed"
        assert result.data["report"].startswith("APPLICATION FAILED TO START")

    def test_discovery_failure(self, tmp_path: Path) -> None:
        result = _service(tmp_path, "ghost\n").activate()
        assert not result.ok
        assert result.error is not None
        assert result.error.detail["errors"][0]["code"] == "DISCOVERY_ERROR"
        assert result.data["units"] == []

    def test_environment_layer(self, tmp_path: Path) -> None:
        result = _service(
            tmp_path,
            "metrics\n",
            environ={"MYSHOP_METRICS_ENABLED": "true"},
        ).activate()
        assert result.data["activated"] == 1

    def test_plugins_notified(self, tmp_path: Path) -> None:
        pm = PluginManager()
        observer = _Observer()
        pm.register_plugin(observer)
        _service(tmp_path, "core\n", plugins=pm).activate()
        assert observer.seen == [True]


class TestListUnits:
    def test_lists_with_imports(self, tmp_path: Path) -> None:
        result = _service(tmp_path, "delivery\nmetrics\n").list_units()
        assert result.ok
        assert result.data["count"] == 3
        items = {item["name"]: item for item in result.data["items"]}
        assert items["delivery"]["imports"] == ["core"]
        assert items["delivery"]["factories"] == ["delivery_service"]
        assert items["delivery"]["outputs"] == ["DeliveryService"]
        assert items["metrics"]["conditions"] == [repr(PropertyEquals("myshop.metrics.enabled", "true"))]

    def test_discovery_error(self, tmp_path: Path) -> None:
        result = _service(tmp_path, "ghost\n").list_units()
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "DISCOVERY_ERROR"


class TestResolve:
    def test_default_layer(self, tmp_path: Path) -> None:
        result = _service(tmp_path, "delivery\n").resolve("myshop.delivery.cargoName")
        assert result.ok
        assert result.data == {
            "key": "myshop.delivery.cargo-name",
            "found": True,
            "value": "PPL",
            "origin": "defaults",
        }
        assert result.warnings == []

    def test_file_overrides_default(self, tmp_path: Path) -> None:
        (tmp_path / "application.properties").write_text("myshop.delivery.cargo-name=DHL\n")
        result = _service(tmp_path, "delivery\n").resolve("MYSHOP_DELIVERY_CARGO_NAME")
        assert result.data["value"] == "DHL"
        assert result.data["origin"] == "application.properties"

    def test_missing_key_warns(self, tmp_path: Path) -> None:
        result = _service(tmp_path, "core\n").resolve("server.port")
        assert result.ok
        assert result.data["found"] is False
        assert result.warnings == ["Property 'server.port' is not set"]
