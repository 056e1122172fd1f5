"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, ``unitwire.toml`` only contains
overrides.  A project with a ``unitwire.units`` manifest and an
``application.toml`` beside it needs no ``unitwire.toml`` at all.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- unitwire.toml sections ---


class ManifestsConfig(BaseModel):
    """[manifests] section."""

    model_config = {"frozen": True}

    paths: list[str] = Field(default_factory=lambda: ["unitwire.units"])
    key: str = "unitwire.units"
    plugins: bool = True


class PropertiesConfig(BaseModel):
    """[properties] section."""

    model_config = {"frozen": True}

    directory: str = "."
    base_name: str = "application"
    env_prefix: str | None = None


class ActivationConfig(BaseModel):
    """[activation] section."""

    model_config = {"frozen": True}

    max_deferrals: int | None = None
