"""Manifest parsing — ordered unit identifiers from text resources.

Format::

    # comment
    unitwire.units=myshop.core,\\
      myshop.delivery
    myshop.metrics

Entries under the well-known key are split on commas and whitespace.
A line without ``=`` is a literal identifier.  A trailing backslash joins
the next line.  Other ``key=value`` entries are ignored.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

UNITS_KEY = "unitwire.units"
MANIFEST_FILENAME = "unitwire.units"

_SEPARATORS = re.compile(r"[,\s]+")


def _logical_lines(text: str) -> list[str]:
    lines: list[str] = []
    pending = ""
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if line.startswith("#") or (not line and not pending):
            continue
        if line.endswith("\\"):
            pending += line[:-1] + " "
            continue
        lines.append(pending + line)
        pending = ""
    if pending.strip():
        lines.append(pending)
    return lines


def parse_manifest(text: str, *, key: str = UNITS_KEY) -> list[str]:
    """Return the identifiers declared in one manifest, in order."""
    identifiers: list[str] = []
    for line in _logical_lines(text):
        name, sep, value = line.partition("=")
        if sep:
            if name.strip() != key:
                continue
        else:
            value = line
        identifiers.extend(part for part in _SEPARATORS.split(value) if part)
    return identifiers


def merge_manifests(texts: Iterable[str], *, key: str = UNITS_KEY) -> list[str]:
    """Concatenate identifiers from several manifests, dropping repeats."""
    seen: dict[str, None] = {}
    for text in texts:
        for identifier in parse_manifest(text, key=key):
            seen.setdefault(identifier, None)
    return list(seen)


def read_manifests(paths: Iterable[Path]) -> list[str]:
    """Read manifest files that exist, skipping missing paths."""
    return [p.read_text(encoding="utf-8") for p in paths if p.is_file()]
