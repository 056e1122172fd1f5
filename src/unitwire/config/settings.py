"""Engine settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``UNITWIRE_*`` prefix
  3. TOML file    — ``unitwire.toml`` discovered via walk-up
  4. Code defaults — baked into the section models

These settings steer the engine itself (where manifests and property
files live, which profile is active).  Application properties bound into
units go through :mod:`unitwire.properties` instead.
"""

from __future__ import annotations

import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from unitwire.config.discovery import find_config
from unitwire.config.models import ActivationConfig, ManifestsConfig, PropertiesConfig
from unitwire.errors import PropertySourceError


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``unitwire.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise PropertySourceError(msg, path=str(toml_path)) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# TOML file for the settings object currently being constructed.
_toml_path: ContextVar[Path | None] = ContextVar("unitwire_toml_path", default=None)


class UnitwireSettings(BaseSettings):
    """Unified settings for the unitwire engine and CLI.

    Attributes:
        project_root: Directory manifests and property files are resolved
            against (parent of ``unitwire.toml``, or CWD if none found).
        config_path: The discovered or explicit ``unitwire.toml``.
        profile: Active profile; selects ``application-<profile>.*``.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "UNITWIRE_",
        "env_nested_delimiter": "__",
    }

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None
    profile: str | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    manifests: ManifestsConfig = Field(default_factory=ManifestsConfig)
    properties: PropertiesConfig = Field(default_factory=PropertiesConfig)
    activation: ActivationConfig = Field(default_factory=ActivationConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, _toml_path.get()),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        **cli_flags: Any,
    ) -> UnitwireSettings:
        """Construct settings from a CLI invocation.

        Discovers ``unitwire.toml`` via walk-up (or explicit *config_path*),
        resolves *project_root* from the config file's parent directory,
        and merges CLI flags as highest-priority overrides.  Flags passed
        as None are dropped so they do not mask env or TOML values.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(project_root)

        resolved_root = project_root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        flags = {k: v for k, v in cli_flags.items() if v is not None}
        token = _toml_path.set(toml_path)
        try:
            return cls(
                project_root=resolved_root,
                config_path=toml_path,
                **flags,
            )
        finally:
            _toml_path.reset(token)

    def resolve_path(self, value: str) -> Path:
        """Resolve *value* against the project root."""
        path = Path(value)
        return path if path.is_absolute() else self.project_root / path
