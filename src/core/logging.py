"""Structured logging setup (structlog).

Modules log through `get_logger(__name__)`. Until an entry point calls
`setup_logging`, events are handed to stdlib `logging` (silent below WARNING
unless the host application adds handlers), so library use never writes to
stdout. Tokens never reach the renderer.
"""

from __future__ import annotations

import logging
import re
import sys
from typing import Any

import structlog

from core.config import AppSettings, load_settings

_SENSITIVE = re.compile(r"token|secret|authorization|password|api_key", re.IGNORECASE)


def redact_secrets(
    _logger: Any, _method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Replace values of sensitive keys with `[REDACTED]`."""

    def redact(data: Any) -> Any:
        if isinstance(data, dict):
            return {
                k: ("[REDACTED]" if _SENSITIVE.search(str(k)) else redact(v))
                for k, v in data.items()
            }
        if isinstance(data, list):
            return [redact(item) for item in data]
        return data

    return redact(event_dict)


def setup_logging(settings: AppSettings | None = None) -> None:
    settings = settings or load_settings()
    min_level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(min_level, int):
        min_level = logging.INFO

    renderer: Any
    if settings.log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            redact_secrets,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=False,
    )


def configure_library_default() -> None:
    """Route events through stdlib `logging` unless structlog is already configured."""

    if structlog.is_configured():
        return
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            redact_secrets,
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> Any:
    return structlog.get_logger(name)


configure_library_default()
