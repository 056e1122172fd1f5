"""Base model for bound configuration structures."""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict


class ConfigProperties(BaseModel):
    """A typed structure populated from properties under a namespace.

    Subclasses set ``config_prefix`` to the namespace they bind from.
    When left as None, the prefix of the requesting unit is used.

    Usage::

        class DeliveryProperties(ConfigProperties):
            config_prefix = "myshop.delivery"

            cargo_name: str
            timeout: timedelta = timedelta(seconds=30)
    """

    model_config = ConfigDict(frozen=True)

    config_prefix: ClassVar[str | None] = None


def is_config_schema(tp: object) -> bool:
    """True if *tp* is a :class:`ConfigProperties` subclass."""
    return isinstance(tp, type) and issubclass(tp, ConfigProperties)
