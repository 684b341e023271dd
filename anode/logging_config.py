"""
Structured logging configuration using structlog.

The signing core (``anode.core.userop``) logs through plain
``logging.getLogger(__name__)`` so it can be embedded without structlog
configured. The API layer logs through structlog. Both end up on one stdout
handler, rendered as JSON lines in production and as console output when the
level is DEBUG, and both carry the request id bound by
``RequestLoggingMiddleware``.
"""

import logging
import sys
from typing import Optional

import structlog

from .config import settings

# Loggers that are noisy at INFO under uvicorn
QUIET_LOGGERS = ("uvicorn.access", "httpcore", "httpx")


def _build_renderer(is_dev: bool) -> structlog.types.Processor:
    if is_dev:
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def setup_logging(log_level: Optional[str] = None) -> None:
    """Configure structlog and render stdlib records with the same processors.

    Args:
        log_level: Override log level (default: from settings.log_level)
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    is_dev = level == logging.DEBUG

    # merge_contextvars must run for stdlib records too, or core log lines
    # lose the request_id bound by the middleware
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if not is_dev:
        shared_processors.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # foreign_pre_chain is applied only to records that did not come from
    # structlog, i.e. the hashing/sponsor/validator loggers
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _build_renderer(is_dev),
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
