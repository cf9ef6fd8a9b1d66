"""Structured logging configuration using structlog.

Every line carries ``service`` and ``ts`` fields. Production output is JSON on
stderr; ``console`` output is meant for running the CLI by hand.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

_SERVICE = "encryption-provider"
_FORMATS = ("json", "console")


def _add_service(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("service", _SERVICE)
    return event_dict


def _stderr_logger(*_args: Any) -> structlog.PrintLogger:
    return structlog.PrintLogger(file=sys.stderr)


def setup_logging(level: str = "info", fmt: str = "json", cache: bool = True) -> None:
    """Configure structlog for the whole process.

    With ``cache=False`` loggers are rebuilt on every call and always write to
    the current ``sys.stderr``; the CLI uses this so redirected streams work.

    Raises:
        ValueError: if *fmt* is not ``json`` or ``console``.
    """
    if fmt not in _FORMATS:
        raise ValueError(f"Invalid log format: {fmt}. Must be one of {_FORMATS}")
    log_level = getattr(logging, level.upper(), logging.INFO)
    renderer: Any = structlog.processors.JSONRenderer() if fmt == "json" else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            _add_service,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr) if cache else _stderr_logger,
        cache_logger_on_first_use=cache,
    )


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a component name."""
    return structlog.get_logger(component=component)  # type: ignore[return-value]
