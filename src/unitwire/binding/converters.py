"""String-to-type coercion for bound properties.

Duration strings accept a unit suffix (``ms``, ``s``, ``m``, ``h``, ``d``);
a bare number means milliseconds.  ISO-8601 durations (``PT10S``) fall
through to pydantic.  Everything else is delegated to a cached pydantic
``TypeAdapter`` in lax mode, which already understands ``"true"``/``"on"``
for booleans, numeric strings, paths and literals.
"""

from __future__ import annotations

import functools
import re
from datetime import timedelta
from enum import Enum
from typing import Any

from pydantic import TypeAdapter, ValidationError

_DURATION = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*(us|ms|s|m|h|d)?\s*$", re.IGNORECASE)

_DURATION_UNITS: dict[str, timedelta] = {
    "us": timedelta(microseconds=1),
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
}


class ConversionError(ValueError):
    """Raised when a raw string cannot be coerced to the target type."""


def parse_duration(raw: str) -> timedelta:
    match = _DURATION.match(raw)
    if match is None:
        return _adapter(timedelta).validate_python(raw.strip())
    amount, unit = match.groups()
    return float(amount) * _DURATION_UNITS[(unit or "ms").lower()]


def type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or str(tp).replace("typing.", "")


@functools.cache
def _adapter(tp: Any) -> TypeAdapter[Any]:
    return TypeAdapter(tp)


def _enum_member(raw: str, enum_cls: type[Enum]) -> Enum:
    wanted = raw.strip()
    for member in enum_cls:
        if str(member.value) == wanted or member.name.lower() == wanted.replace("-", "_").lower():
            return member
    raise ConversionError(raw)


def convert(raw: str, tp: Any) -> Any:
    """Coerce *raw* to *tp*.

    Raises:
        ConversionError: If the value does not fit the type.
    """
    try:
        if tp is timedelta:
            return parse_duration(raw)
        if isinstance(tp, type) and issubclass(tp, Enum):
            return _enum_member(raw, tp)
        if tp is str:
            return raw
        value = raw.strip()
        if tp is bool and not value:
            raise ConversionError(raw)
        return _adapter(tp).validate_python(value)
    except (ValidationError, TypeError, OverflowError) as exc:
        raise ConversionError(raw) from exc
