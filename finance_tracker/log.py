"""
Structured Logging

structlog on top of the standard library logger. Importing the package
leaves logging untouched; it is configured when a LedgerService is built
(ensure_logging) or explicitly through configure_logging(). An embedding
application that configures structlog itself keeps its configuration.

Ledger failures are raised to the caller; logging here is for tracing
what the ledger did, never a replacement for the exception.
"""

import logging
import sys
from typing import Optional

import structlog

from finance_tracker.config import LoggingSettings, get_settings


_configured = False


def configure_logging(settings: Optional[LoggingSettings] = None) -> None:
    """Configure structlog and the stdlib root logger."""
    global _configured

    settings = settings or get_settings().logging
    level = getattr(logging, settings.log_level)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )
    logging.getLogger().setLevel(level)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def ensure_logging() -> None:
    """Configure logging from settings unless it was configured already."""
    if not _configured and not structlog.is_configured():
        configure_logging()


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Get a lazy structlog logger. Does not configure anything."""
    return structlog.get_logger(name)
