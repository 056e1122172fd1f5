"""Property binder — typed configuration structures from layered properties."""

from unitwire.binding.binder import bind
from unitwire.binding.converters import parse_duration
from unitwire.binding.schema import ConfigProperties, is_config_schema

__all__ = ["ConfigProperties", "bind", "is_config_schema", "parse_duration"]
