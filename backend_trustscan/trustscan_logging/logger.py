"""
TrustScan structured logging.

JSON lines on stdout by default; LOG_FORMAT=console switches to the
structlog console renderer. LOG_LEVEL sets the threshold (INFO).

A JSON line carries event_type, level, timestamp (ISO 8601, UTC), logger
and whatever context the caller passed, e.g.:

    {"event_type": "collector_unknown", "source": "blocklist",
     "url": "https://example.com/", "level": "warning", ...}

This module imports nothing from backend_trustscan, so every module can log.
"""

from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager
from typing import Any, Iterator

import structlog

FORMAT_JSON = "json"
FORMAT_CONSOLE = "console"
DEFAULT_LEVEL = "INFO"


def rename_event(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog's positional 'event' becomes event_type in JSON output."""
    if "event" in event_dict:
        event_dict.setdefault("event_type", event_dict.pop("event"))
    return event_dict


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure structlog; arguments override LOG_LEVEL and LOG_FORMAT."""
    level_name = (level or os.getenv("LOG_LEVEL") or DEFAULT_LEVEL).strip().upper()
    fmt = (fmt or os.getenv("LOG_FORMAT") or FORMAT_JSON).strip().lower()

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if fmt == FORMAT_CONSOLE:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    else:
        processors += [
            structlog.processors.format_exc_info,
            rename_event,
            structlog.processors.JSONRenderer(),
        ]
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level_name, logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_logging()


def get_logger(name: str) -> structlog.BoundLogger:
    """Module logger: get_logger(__name__), then logger.info("event_name", key=value)."""
    return structlog.get_logger(name).bind(logger=name)


@contextmanager
def bind_url(url: str) -> Iterator[None]:
    """
    Bind url into every log line emitted inside the block, including lines
    from collector tasks started within it.
    """
    with structlog.contextvars.bound_contextvars(url=url):
        yield
