"""Logging configuration for httpstime.

Log lines are rendered as ``<YYYY-MM-DD HH:MM:SS> <LEVEL> [<tag>] <message>``
followed by any bound key=value pairs, and written to stderr so stdout only
carries the result line.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, MutableMapping, Optional

import structlog

DEFAULT_TAG = "httpstime"


def render_line(_logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]) -> str:
    timestamp = event_dict.pop("timestamp", "")
    level = str(event_dict.pop("level", "info")).upper()
    tag = event_dict.pop("tag", DEFAULT_TAG)
    event = event_dict.pop("event", "")
    event_dict.pop("logger", None)

    line = f"{timestamp} {level:<5} [{tag}] {event}"
    extras = " ".join(f"{key}={value}" for key, value in sorted(event_dict.items()))
    if extras:
        line = f"{line} {extras}"
    return line


def setup_logging(
    level: str = "INFO",
    tag: str = DEFAULT_TAG,
    stream: Optional[Any] = None,
) -> structlog.BoundLogger:
    """Configure logging once at startup and return a bound logger."""

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(message)s",
        handlers=[logging.StreamHandler(stream or sys.stderr)],
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
            render_line,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger(tag).bind(tag=tag)

