"""Property file and environment loaders.

Builds the standard stack in fixed precedence (lowest to highest):

  1. Bundled defaults  — ``defaults`` declared on each configuration unit
  2. Base file         — ``application.{toml,yaml,yml,properties}``
  3. Profile file      — ``application-<profile>.{...}``
  4. Environment       — process environment variables

Structured documents are flattened into dotted keys: nested tables become
``a.b.c`` and sequences become ``a.b[0]``, ``a.b[1]``.
"""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from unitwire.errors import PropertySourceError
from unitwire.properties.layers import PropertySourceStack
from unitwire.properties.names import is_environment_style

if TYPE_CHECKING:
    from unitwire.units.model import ConfigurationUnit

logger = logging.getLogger(__name__)

DEFAULTS_PRECEDENCE = 0
BASE_FILE_PRECEDENCE = 100
PROFILE_FILE_PRECEDENCE = 200
ENVIRONMENT_PRECEDENCE = 300

SUPPORTED_SUFFIXES = (".toml", ".yaml", ".yml", ".properties")


def _scalar(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def flatten(data: Mapping[str, Any], prefix: str = "") -> dict[str, str]:
    """Flatten a nested mapping into dotted keys with string values."""
    flat: dict[str, str] = {}
    for key, value in data.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            flat.update(flatten(value, path))
        elif isinstance(value, (list, tuple)):
            for index, item in enumerate(value):
                item_path = f"{path}[{index}]"
                if isinstance(item, Mapping):
                    flat.update(flatten(item, item_path))
                else:
                    flat[item_path] = _scalar(item)
        else:
            flat[path] = _scalar(value)
    return flat


def parse_properties(text: str) -> dict[str, str]:
    """Parse Java-style ``.properties`` text.

    Supports ``key=value`` and ``key: value``, ``#``/``!`` comments and
    trailing-backslash line continuation.
    """
    pairs: dict[str, str] = {}
    pending = ""
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not pending and (not line or line[0] in "#!"):
            continue
        if line.endswith("\\"):
            pending += line[:-1]
            continue
        line = pending + line
        pending = ""
        key, sep, value = _split_pair(line)
        if sep:
            pairs[key] = value
    if pending:
        key, sep, value = _split_pair(pending)
        if sep:
            pairs[key] = value
    return pairs


def _split_pair(line: str) -> tuple[str, str, str]:
    positions = [i for i in (line.find("="), line.find(":")) if i >= 0]
    if not positions:
        return line.strip(), "", ""
    cut = min(positions)
    return line[:cut].strip(), line[cut], line[cut + 1 :].strip()


def load_properties_file(path: Path) -> dict[str, str]:
    """Load *path* into flat key/value pairs based on its suffix.

    Raises:
        PropertySourceError: If the file cannot be read or parsed.
    """
    suffix = path.suffix.lower()
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Cannot read property file {path}: {exc}"
        raise PropertySourceError(msg, path=str(path)) from exc
    try:
        if suffix == ".toml":
            return flatten(tomllib.loads(raw))
        if suffix in (".yaml", ".yml"):
            data = YAML(typ="safe").load(raw)
            if data is None:
                return {}
            if not isinstance(data, Mapping):
                msg = f"Top level of {path} must be a mapping"
                raise PropertySourceError(msg, path=str(path))
            return flatten(data)
        if suffix == ".properties":
            return parse_properties(raw)
    except (tomllib.TOMLDecodeError, YAMLError) as exc:
        msg = f"Invalid property file {path}: {exc}"
        raise PropertySourceError(msg, path=str(path)) from exc
    msg = f"Unsupported property file type: {path.name}"
    raise PropertySourceError(msg, path=str(path))


def find_property_file(directory: Path, stem: str) -> Path | None:
    """Return the first ``<stem><suffix>`` file in *directory*, if any."""
    for suffix in SUPPORTED_SUFFIXES:
        candidate = directory / f"{stem}{suffix}"
        if candidate.is_file():
            return candidate
    return None


def environment_pairs(
    environ: Mapping[str, str] | None = None,
    *,
    prefix: str | None = None,
) -> dict[str, str]:
    """Select environment variables usable as properties.

    Only upper-snake names are taken, since those are what the relaxed
    binding rule maps onto dotted keys.  With *prefix*, only variables
    starting with ``<PREFIX>_`` are kept (the prefix is not stripped).
    """
    source = os.environ if environ is None else environ
    wanted = f"{prefix.upper().rstrip('_')}_" if prefix else ""
    return {
        name: value
        for name, value in source.items()
        if is_environment_style(name) and name.startswith(wanted)
    }


def unit_defaults(units: Iterable[ConfigurationUnit]) -> dict[str, str]:
    """Merge the bundled defaults of *units*; earlier units win on conflict.

    Default keys are relative to the unit's ``prefix`` when it has one, so
    ``prefix="myshop.delivery"`` with ``{"cargo-name": "PPL"}`` supplies
    ``myshop.delivery.cargo-name``.
    """
    merged: dict[str, str] = {}
    for unit in reversed(list(units)):
        merged.update(flatten(dict(unit.defaults), unit.prefix or ""))
    return merged


def build_standard_stack(
    units: Iterable[ConfigurationUnit] = (),
    *,
    directory: Path | None = None,
    base_name: str = "application",
    profile: str | None = None,
    environ: Mapping[str, str] | None = None,
    env_prefix: str | None = None,
) -> PropertySourceStack:
    """Assemble the four standard layers into a new stack.

    Missing files are skipped.  The returned stack is not frozen so
    callers may append explicit override layers.
    """
    stack = PropertySourceStack()
    stack.add_layer("defaults", DEFAULTS_PRECEDENCE, unit_defaults(units))

    if directory is not None:
        base = find_property_file(directory, base_name)
        if base is not None:
            stack.add_layer(base.name, BASE_FILE_PRECEDENCE, load_properties_file(base))
        else:
            logger.debug("No %s file in %s", base_name, directory)
        if profile:
            profile_file = find_property_file(directory, f"{base_name}-{profile}")
            if profile_file is not None:
                stack.add_layer(
                    profile_file.name,
                    PROFILE_FILE_PRECEDENCE,
                    load_properties_file(profile_file),
                )
            else:
                logger.warning("Profile '%s' selected but no matching file in %s", profile, directory)

    stack.add_layer("environment", ENVIRONMENT_PRECEDENCE, environment_pairs(environ, prefix=env_prefix))
    return stack
