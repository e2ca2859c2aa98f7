"""
Structured logging configuration using structlog.

JSON lines in production, colored console output everywhere else. The API
binds ``request_id`` per request; sync runs bind ``source_id`` through
``sync_context`` so crawler and client log lines can be traced back to the
source that produced them.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from structlog.types import Processor

from galaxy_sync.config.settings import get_settings

# Per-request logging from these is noise at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "uvicorn.access")


def _renderer(production: bool) -> list[Processor]:
    if production:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]


def setup_logging() -> None:
    """
    Configure structlog and the stdlib root logger from settings.

    Usage:
        setup_logging()
        logger = structlog.get_logger(__name__)
        logger.info("Sync started", source_id="development:github:github-com:ansible")
    """
    settings = get_settings()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        *_renderer(settings.is_production),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@contextmanager
def sync_context(source_id: str) -> Iterator[None]:
    """Bind ``source_id`` to every structlog line emitted inside the block."""
    with structlog.contextvars.bound_contextvars(source_id=source_id):
        yield
