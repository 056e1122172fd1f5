"""Locate the engine's ``unitwire.toml``.

The directory holding the file becomes the project root: manifest paths and
the ``[properties]`` directory are resolved against it.  ``UNITWIRE_CONFIG``
pins an explicit file and disables the search.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "unitwire.toml"
CONFIG_ENV_VAR = "UNITWIRE_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the engine config file for an application started in *start*.

    ``UNITWIRE_CONFIG`` wins when set; a value naming no file yields None
    rather than falling back to the search.  Otherwise *start* (default:
    cwd) and each of its parents are checked for ``unitwire.toml``.
    """
    pinned = os.environ.get(CONFIG_ENV_VAR)
    if pinned:
        path = Path(pinned)
        return path if path.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
