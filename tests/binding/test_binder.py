"""Tests for binding properties into typed structures."""

from __future__ import annotations

from datetime import timedelta
from enum import Enum

import pytest
from pydantic import Field, field_validator

from unitwire.binding.binder import bind
from unitwire.binding.schema import ConfigProperties, is_config_schema
from unitwire.errors import BindingError
from unitwire.properties.layers import PropertySourceStack


class Carrier(Enum):
    DHL = "dhl"
    PPL = "ppl"


class Retry(ConfigProperties):
    attempts: int = 3
    backoff: timedelta = timedelta(seconds=1)


class Server(ConfigProperties):
    host: str
    port: int = 80


class DeliveryProperties(ConfigProperties):
    config_prefix = "myshop.delivery"

    cargo_name: str
    timeout: timedelta = timedelta(seconds=30)
    enabled: bool = True
    carrier: Carrier | None = None
    retry: Retry = Field(default_factory=Retry)
    zones: list[str] = Field(default_factory=list)
    servers: list[Server] = Field(default_factory=list)
    weights: dict[str, int] = Field(default_factory=dict)


class Pool(ConfigProperties):
    size: int

    @field_validator("size")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive")
        return value


def _stack(pairs: dict[str, str]) -> PropertySourceStack:
    stack = PropertySourceStack()
    stack.add_layer("test", 0, pairs)
    return stack


class TestBindScalars:
    def test_required_and_defaults(self) -> None:
        props = bind("myshop.delivery", _stack({"myshop.delivery.cargo-name": "DHL"}), DeliveryProperties)
        assert props.cargo_name == "DHL"
        assert props.timeout == timedelta(seconds=30)
        assert props.enabled is True
        assert props.carrier is None

    def test_relaxed_key_spellings(self) -> None:
        stack = _stack(
            {
                "MYSHOP_DELIVERY_CARGO_NAME": "DHL",
                "myshop.delivery.timeout": "5s",
                "myshop.delivery.carrier": "ppl",
                "myshop.delivery.enabled": "off",
            }
        )
        props = bind("myshop.delivery", stack, DeliveryProperties)
        assert props.cargo_name == "DHL"
        assert props.timeout == timedelta(seconds=5)
        assert props.carrier is Carrier.PPL
        assert props.enabled is False

    def test_higher_layer_wins(self) -> None:
        stack = PropertySourceStack()
        stack.add_layer("defaults", 0, {"myshop.delivery.cargo-name": "PPL"})
        stack.add_layer("env", 300, {"myshop.delivery.cargoName": "DHL"})
        assert bind("myshop.delivery", stack, DeliveryProperties).cargo_name == "DHL"

    def test_unknown_keys_ignored(self) -> None:
        stack = _stack({"myshop.delivery.cargo-name": "DHL", "myshop.delivery.colour": "red"})
        assert bind("myshop.delivery", stack, DeliveryProperties).cargo_name == "DHL"

    def test_empty_prefix(self) -> None:
        props = bind("", _stack({"host": "localhost", "port": "8080"}), Server)
        assert props == Server(host="localhost", port=8080)

    def test_idempotent(self) -> None:
        stack = _stack({"myshop.delivery.cargo-name": "DHL", "myshop.delivery.zones": "eu,us"})
        assert bind("myshop.delivery", stack, DeliveryProperties) == bind(
            "myshop.delivery", stack, DeliveryProperties
        )


class TestBindStructures:
    def test_nested_model(self) -> None:
        stack = _stack(
            {
                "myshop.delivery.cargo-name": "DHL",
                "myshop.delivery.retry.attempts": "5",
                "myshop.delivery.retry.backoff": "250",
            }
        )
        props = bind("myshop.delivery", stack, DeliveryProperties)
        assert props.retry == Retry(attempts=5, backoff=timedelta(milliseconds=250))

    def test_nested_model_defaults_when_absent(self) -> None:
        props = bind("myshop.delivery", _stack({"myshop.delivery.cargo-name": "DHL"}), DeliveryProperties)
        assert props.retry == Retry()

    def test_comma_separated_list(self) -> None:
        stack = _stack({"myshop.delivery.cargo-name": "DHL", "myshop.delivery.zones": "eu, us ,,asia"})
        assert bind("myshop.delivery", stack, DeliveryProperties).zones == ["eu", "us", "asia"]

    def test_indexed_list(self) -> None:
        stack = _stack(
            {
                "myshop.delivery.cargo-name": "DHL",
                "myshop.delivery.zones[1]": "us",
                "myshop.delivery.zones[0]": "eu",
            }
        )
        assert bind("myshop.delivery", stack, DeliveryProperties).zones == ["eu", "us"]

    def test_list_of_models(self) -> None:
        stack = _stack(
            {
                "myshop.delivery.cargo-name": "DHL",
                "myshop.delivery.servers[0].host": "a",
                "myshop.delivery.servers[1].host": "b",
                "myshop.delivery.servers[1].port": "8080",
            }
        )
        servers = bind("myshop.delivery", stack, DeliveryProperties).servers
        assert servers == [Server(host="a"), Server(host="b", port=8080)]

    def test_mapping(self) -> None:
        stack = _stack(
            {
                "myshop.delivery.cargo-name": "DHL",
                "myshop.delivery.weights.small": "1",
                "myshop.delivery.weights.large": "10",
            }
        )
        assert bind("myshop.delivery", stack, DeliveryProperties).weights == {"small": 1, "large": 10}


class CargoOptions(ConfigProperties):
    id: str


class Shipment(ConfigProperties):
    cargo_name: str
    cargo: CargoOptions | None = None


class TaggedShipment(ConfigProperties):
    cargo_name: str
    cargo: dict[str, str] = Field(default_factory=dict)


class TestSiblingKeys:
    def test_sibling_key_does_not_bind_nested_model(self) -> None:
        props = bind("myshop.delivery", _stack({"myshop.delivery.cargo-name": "DHL"}), Shipment)
        assert props.cargo_name == "DHL"
        assert props.cargo is None

    def test_nested_model_binds_beside_sibling(self) -> None:
        stack = _stack({"myshop.delivery.cargo-name": "DHL", "myshop.delivery.cargo.id": "c1"})
        props = bind("myshop.delivery", stack, Shipment)
        assert props.cargo == CargoOptions(id="c1")

    def test_sibling_key_not_collected_into_mapping(self) -> None:
        stack = _stack({"myshop.delivery.cargoName": "DHL", "myshop.delivery.cargo.fragile": "yes"})
        props = bind("myshop.delivery", stack, TaggedShipment)
        assert props.cargo == {"fragile": "yes"}


class TestBindErrors:
    def test_missing_required_names_full_key(self) -> None:
        with pytest.raises(BindingError) as exc_info:
            bind("myshop.delivery", _stack({}), DeliveryProperties)
        err = exc_info.value
        assert "myshop.delivery.cargo-name" in err.message
        assert err.problems == ["myshop.delivery.cargo-name: required property is missing"]
        assert err.detail["prefix"] == "myshop.delivery"
        assert err.detail["schema"] == "DeliveryProperties"

    def test_all_problems_reported_together(self) -> None:
        stack = _stack(
            {
                "myshop.delivery.timeout": "soon",
                "myshop.delivery.retry.attempts": "many",
            }
        )
        with pytest.raises(BindingError) as exc_info:
            bind("myshop.delivery", stack, DeliveryProperties)
        problems = exc_info.value.problems
        assert len(problems) == 3
        assert any(p.startswith("myshop.delivery.cargo-name") for p in problems)
        assert "myshop.delivery.timeout: expected timedelta, got 'soon'" in problems
        assert "myshop.delivery.retry.attempts: expected int, got 'many'" in problems

    def test_missing_nested_required(self) -> None:
        stack = _stack({"myshop.delivery.cargo-name": "DHL", "myshop.delivery.servers[0].port": "1"})
        with pytest.raises(BindingError) as exc_info:
            bind("myshop.delivery", stack, DeliveryProperties)
        assert exc_info.value.problems == ["myshop.delivery.servers.0.host: required property is missing"]

    def test_validator_failure(self) -> None:
        with pytest.raises(BindingError) as exc_info:
            bind("db.pool", _stack({"db.pool.size": "0"}), Pool)
        assert exc_info.value.problems[0].startswith("db.pool.size:")


class TestSchema:
    def test_is_config_schema(self) -> None:
        assert is_config_schema(DeliveryProperties)
        assert not is_config_schema(str)
        assert not is_config_schema(DeliveryProperties(cargo_name="x"))

    def test_bound_structure_is_frozen(self) -> None:
        props = bind("", _stack({"host": "h"}), Server)
        with pytest.raises(Exception):
            props.host = "other"  # type: ignore[misc]
