"""Configuration units and their factories.

A unit bundles ordered factories with import and condition metadata.
Factory inputs are normally inferred from the callable's signature:

- a parameter typed with a :class:`~unitwire.binding.ConfigProperties`
  subclass receives a bound configuration structure;
- any other typed parameter receives the output registered under its
  type, or under ``Annotated[T, Qualifier("name")]``;
- a parameter with a default value is optional.

Usage::

    delivery = ConfigurationUnit("delivery", imports=("core",), prefix="myshop.delivery")

    @delivery.factory
    def delivery_service(props: DeliveryProperties, clock: Clock) -> DeliveryService:
        return DeliveryService(props.cargo_name, clock)
"""

from __future__ import annotations

import inspect
import types
import typing
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Annotated, Any, Union, get_args, get_origin

from unitwire.binding.schema import is_config_schema
from unitwire.keys import OutputKey, Qualifier

if typing.TYPE_CHECKING:
    from unitwire.conditions.model import Condition


@dataclass(frozen=True)
class Dependency:
    """One declared factory input."""

    name: str
    type: type
    qualifier: str | None = None
    optional: bool = False
    default: Any = None

    @property
    def key(self) -> OutputKey:
        return OutputKey(self.type, self.qualifier)

    @property
    def is_config(self) -> bool:
        return is_config_schema(self.type)


def _split_annotation(annotation: Any) -> tuple[Any, str | None, bool]:
    """Return ``(type, qualifier, nullable)`` for a parameter annotation."""
    qualifier: str | None = None
    if get_origin(annotation) is Annotated:
        annotation, *extras = get_args(annotation)
        for extra in extras:
            if isinstance(extra, Qualifier):
                qualifier = extra.name
    nullable = False
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1 and len(get_args(annotation)) == 2:
            annotation, nullable = args[0], True
            if get_origin(annotation) is Annotated:
                annotation, qual, _ = _split_annotation(annotation)
                qualifier = qualifier or qual
    return annotation, qualifier, nullable


@dataclass(frozen=True)
class Factory:
    """A named production rule yielding exactly one output."""

    name: str
    func: Callable[..., Any]
    output: OutputKey
    inputs: tuple[Dependency, ...] = ()

    @classmethod
    def from_callable(
        cls,
        func: Callable[..., Any],
        *,
        name: str | None = None,
        output_type: type | None = None,
        qualifier: str | None = None,
        inputs: Iterable[Dependency] | None = None,
    ) -> Factory:
        """Build a factory, inferring inputs and output from annotations.

        Raises:
            TypeError: If the output type or a parameter type cannot be determined.
        """
        factory_name = name or getattr(func, "__name__", repr(func))
        hints = typing.get_type_hints(func, include_extras=True)

        if output_type is None:
            returned = hints.get("return")
            if returned is None or returned is type(None):
                msg = f"Factory '{factory_name}' needs a return annotation or output_type"
                raise TypeError(msg)
            output_type, annotated_qualifier, _ = _split_annotation(returned)
            qualifier = qualifier or annotated_qualifier

        if inputs is None:
            inputs = cls._infer_inputs(func, hints, factory_name)

        return cls(
            name=factory_name,
            func=func,
            output=OutputKey(output_type, qualifier),
            inputs=tuple(inputs),
        )

    @staticmethod
    def _infer_inputs(
        func: Callable[..., Any],
        hints: Mapping[str, Any],
        factory_name: str,
    ) -> list[Dependency]:
        deps: list[Dependency] = []
        for param in inspect.signature(func).parameters.values():
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            if param.name not in hints:
                msg = f"Factory '{factory_name}' parameter '{param.name}' has no type annotation"
                raise TypeError(msg)
            tp, qualifier, nullable = _split_annotation(hints[param.name])
            has_default = param.default is not param.empty
            deps.append(
                Dependency(
                    name=param.name,
                    type=tp,
                    qualifier=qualifier,
                    optional=has_default or nullable,
                    default=param.default if has_default else None,
                )
            )
        return deps

    def __call__(self, **kwargs: Any) -> Any:
        return self.func(**kwargs)


@dataclass
class ConfigurationUnit:
    """A named, conditionally-activated bundle of factories.

    Attributes:
        name: Unique unit identity.
        prefix: Namespace used to bind config inputs whose schema has no
            ``config_prefix`` of its own, and the root of ``defaults`` keys.
        imports: Units that must settle (Activated or Skipped) first.
        conditions: All must hold for the unit to activate.
        factories: Executed in declared order.
        defaults: Bundled default properties (lowest precedence layer),
            relative to ``prefix`` when one is set.
    """

    name: str
    prefix: str | None = None
    imports: tuple[str, ...] = ()
    conditions: tuple[Condition, ...] = ()
    factories: list[Factory] = field(default_factory=list)
    defaults: Mapping[str, Any] = field(default_factory=dict)
    description: str = ""

    def __post_init__(self) -> None:
        self.imports = tuple(
            imp.name if isinstance(imp, ConfigurationUnit) else str(imp) for imp in self.imports
        )
        self.conditions = tuple(self.conditions)

    def factory(
        self,
        func: Callable[..., Any] | None = None,
        *,
        name: str | None = None,
        qualifier: str | None = None,
        output_type: type | None = None,
    ) -> Any:
        """Decorator registering *func* as a factory of this unit.

        Usable bare (``@unit.factory``) or with options
        (``@unit.factory(qualifier="primary")``).  Returns the function
        unchanged.
        """

        def decorate(fn: Callable[..., Any]) -> Callable[..., Any]:
            self.add_factory(
                Factory.from_callable(fn, name=name, qualifier=qualifier, output_type=output_type)
            )
            return fn

        if func is not None:
            return decorate(func)
        return decorate

    def add_factory(self, factory: Factory) -> None:
        if any(f.name == factory.name for f in self.factories):
            msg = f"Unit '{self.name}' already declares a factory named '{factory.name}'"
            raise ValueError(msg)
        self.factories.append(factory)

    @property
    def outputs(self) -> list[OutputKey]:
        return [f.output for f in self.factories]

    def fingerprint(self) -> tuple[Any, ...]:
        """Structural identity used to detect conflicting re-declarations."""
        return (
            self.prefix,
            self.imports,
            self.conditions,
            tuple((f.name, f.output) for f in self.factories),
        )
