"""Property binder — materialize a typed structure from a property stack.

For each field of the target schema the fully-qualified key is
``prefix + "." + field``, resolved through the stack's relaxed lookup and
coerced to the field's declared type.  Nested models recurse; sequences
are read from indexed keys (``servers[0]``) or a comma-separated value;
``dict[str, T]`` fields take every key below the field.

Unknown keys are ignored.  All problems found in one call are reported
together in a single :class:`~unitwire.errors.BindingError`.

Binding never mutates the stack, so binding the same prefix twice from an
unchanged stack yields equal results.
"""

from __future__ import annotations

import types
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel, ValidationError

from unitwire.binding.converters import ConversionError, convert, type_name
from unitwire.errors import BindingError
from unitwire.properties.layers import PropertySourceStack
from unitwire.properties.names import canonical, join

_SEQUENCES = (list, tuple, set, frozenset)


class _Missing:
    def __repr__(self) -> str:
        return "<missing>"


MISSING: Any = _Missing()


def bind[T: BaseModel](prefix: str, stack: PropertySourceStack, schema: type[T]) -> T:
    """Bind properties under *prefix* to a new *schema* instance.

    Raises:
        BindingError: On missing required keys or coercion failures.
    """
    problems: list[str] = []
    values = _bind_model(prefix, stack, schema, problems)
    if problems:
        raise BindingError(prefix, schema.__name__, problems)
    try:
        return schema.model_validate(values)
    except ValidationError as exc:
        for err in exc.errors():
            location = ".".join(str(part) for part in err["loc"])
            problems.append(f"{join(prefix, location)}: {err['msg']}")
        raise BindingError(prefix, schema.__name__, problems) from exc


def _unwrap_optional(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _is_model(tp: Any) -> bool:
    return isinstance(tp, type) and issubclass(tp, BaseModel)


def _bind_model(
    prefix: str,
    stack: PropertySourceStack,
    schema: type[BaseModel],
    problems: list[str],
) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for name, info in schema.model_fields.items():
        segment = info.alias or name
        key = join(prefix, canonical(segment))
        before = len(problems)
        value = _bind_value(key, info.annotation, stack, problems, required=info.is_required())
        if value is MISSING:
            if info.is_required() and len(problems) == before:
                problems.append(f"{key}: required property is missing")
            continue
        values[segment] = value
    return values


def _bind_value(
    key: str,
    annotation: Any,
    stack: PropertySourceStack,
    problems: list[str],
    *,
    required: bool,
) -> Any:
    tp = _unwrap_optional(annotation)
    origin = get_origin(tp)

    if _is_model(tp):
        if not stack.has_keys_under(key) and not required:
            return MISSING
        before = len(problems)
        nested = _bind_model(key, stack, tp, problems)
        return nested if len(problems) == before else MISSING

    if origin in _SEQUENCES or tp in _SEQUENCES:
        return _bind_sequence(key, tp, stack, problems)

    if origin is dict or tp is dict:
        return _bind_mapping(key, tp, stack, problems)

    raw = stack.resolve(key)
    if raw is None:
        return MISSING
    try:
        return convert(raw, tp)
    except ConversionError:
        problems.append(f"{key}: expected {type_name(tp)}, got {raw!r}")
        return MISSING


def _bind_sequence(key: str, tp: Any, stack: PropertySourceStack, problems: list[str]) -> Any:
    args = get_args(tp)
    item_type = args[0] if args else str
    indices = sorted(
        {int(rel.split(".", 1)[0]) for rel in stack.all_keys_under(key) if rel.split(".", 1)[0].isdigit()}
    )
    items: list[Any] = []
    if indices:
        for index in indices:
            item = _bind_value(f"{key}.{index}", item_type, stack, problems, required=True)
            if item is not MISSING:
                items.append(item)
        return items

    raw = stack.resolve(key)
    if raw is None:
        return MISSING
    for part in (p.strip() for p in raw.split(",")):
        if not part:
            continue
        try:
            items.append(convert(part, item_type))
        except ConversionError:
            problems.append(f"{key}: expected {type_name(item_type)}, got {part!r}")
    return items


def _bind_mapping(key: str, tp: Any, stack: PropertySourceStack, problems: list[str]) -> Any:
    args = get_args(tp)
    value_type = args[1] if len(args) == 2 else str
    relatives = sorted(stack.all_keys_under(key))
    if not relatives:
        return MISSING
    if _is_model(_unwrap_optional(value_type)):
        names = sorted({rel.split(".", 1)[0] for rel in relatives})
        return {
            name: value
            for name in names
            if (value := _bind_value(join(key, name), value_type, stack, problems, required=True))
            is not MISSING
        }
    mapping: dict[str, Any] = {}
    for rel in relatives:
        value = _bind_value(join(key, rel), value_type, stack, problems, required=True)
        if value is not MISSING:
            mapping[rel] = value
    return mapping
