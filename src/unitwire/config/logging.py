"""structlog configuration for unitwire.

Human mode renders colored console lines; ``--log-json`` renders one JSON
object per line.  Both go to stderr so stdout stays reserved for command
output.

Activation events (``unit.activated``, ``unit.skipped``, ``unit.failed``,
``unit.deferred``) get an ``outcome`` field so skipped units are never
confused with failed ones when logs are filtered.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog

_UNIT_OUTCOMES = {
    "unit.activated": "activated",
    "unit.skipped": "skipped",
    "unit.deferred": "deferred",
    "unit.failed": "failed",
}


def tag_unit_outcome(
    _logger: Any,
    _method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    """Add ``outcome`` to activation events."""
    outcome = _UNIT_OUTCOMES.get(str(event_dict.get("event", "")))
    if outcome is not None:
        event_dict.setdefault("outcome", outcome)
    return event_dict


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Route structlog and stdlib logging through one formatter.

    Args:
        verbose: DEBUG for ``unitwire.*`` loggers; otherwise WARNING.
        log_json: Use the JSON renderer instead of the console renderer.
        stream: Output stream, stderr by default.
    """
    out = stream or sys.stderr
    level = logging.DEBUG if verbose else logging.WARNING

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        tag_unit_outcome,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=out.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(out)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)
    logging.getLogger("unitwire").setLevel(level)
