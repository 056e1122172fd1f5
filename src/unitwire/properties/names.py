"""Relaxed property-name normalization.

Three spellings of the same logical key are equivalent:

- kebab-case:   ``myshop.delivery.cargo-name``
- camelCase:    ``myshop.delivery.cargoName``
- upper snake:  ``MYSHOP_DELIVERY_CARGO_NAME`` (environment style)

:func:`canonical` folds a key into dotted kebab form for display.
:func:`comparison_key` folds further so that the environment spelling,
which cannot express dots or hyphens, compares equal to the others.
"""

from __future__ import annotations

import re

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_INDEX = re.compile(r"\[(\d+)\]")


def is_environment_style(key: str) -> bool:
    """True for keys like ``CARGO_NAME`` (no lowercase letters, no dots)."""
    return "." not in key and key == key.upper() and any(c.isalpha() for c in key)


def _segment(segment: str) -> str:
    segment = _CAMEL_BOUNDARY.sub("-", segment)
    return segment.replace("_", "-").lower().strip("-")


def canonical(key: str) -> str:
    """Return the dotted kebab-case form of *key*.

    ``servers[0].hostName`` becomes ``servers.0.host-name``;
    ``CARGO_NAME`` becomes ``cargo.name``.
    """
    key = key.strip()
    if not key:
        return ""
    if is_environment_style(key):
        return ".".join(p for p in key.lower().split("_") if p)
    key = _INDEX.sub(r".\1", key)
    return ".".join(s for s in (_segment(part) for part in key.split(".")) if s)


def comparison_key(key: str) -> str:
    """Return the form used for equality checks between keys."""
    return canonical(key).replace("-", ".")


def join(prefix: str, name: str) -> str:
    """Join a namespace prefix and a relative name."""
    if not prefix:
        return name
    if not name:
        return prefix
    return f"{prefix}.{name}"


def relative_to(key: str, prefix: str) -> str | None:
    """Return the part of canonical *key* below *prefix*, or None.

    Dotted keys match on whole segments, so ``cargo-name`` is not below
    ``cargo``.  Environment-style keys carry no segment boundaries beyond
    ``_``, so they are matched piece by piece: ``MYSHOP_DELIVERY_CARGO_NAME``
    is below ``myshop.delivery`` as ``cargo.name``.
    """
    if not canonical(prefix):
        return canonical(key)
    if is_environment_style(key) or is_environment_style(prefix):
        parts = comparison_key(key).split(".")
        want = comparison_key(prefix).split(".")
    else:
        parts = canonical(key).split(".")
        want = canonical(prefix).split(".")
    if len(parts) <= len(want) or parts[: len(want)] != want:
        return None
    return ".".join(parts[len(want) :])
