#!/usr/bin/env python3
"""
Structured logging for the recipe formatter surfaces.
Configures stdlib logging and structlog for the CLI and the HTTP API; the
formatter components only ever log through ``logging.getLogger(__name__)``.
"""

import os
import sys
import logging
from typing import Optional

import structlog
from structlog.stdlib import LoggerFactory


class MonitoringConfig:
    """Logging settings read from the environment."""

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT = os.getenv("LOG_FORMAT", "text")  # json or text


config = MonitoringConfig()

_configured = None


def _resolve_level(level: Optional[str]) -> int:
    name = (level or config.LOG_LEVEL or "INFO").upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None):
    """
    Configure structured logging with structlog.

    Calling again with the same settings is a no-op; different settings
    reconfigure the root level and the renderer.

    Args:
        level: Log level name; defaults to LOG_LEVEL
        fmt: 'json' or 'text'; defaults to LOG_FORMAT
    """
    global _configured

    log_level = _resolve_level(level)
    log_format = (fmt or config.LOG_FORMAT or "text").lower()
    if _configured == (log_level, log_format):
        return

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
    )
    logging.getLogger().setLevel(log_level)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    _configured = (log_level, log_format)
