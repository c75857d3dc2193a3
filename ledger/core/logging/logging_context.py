"""Logging context utilities for correlation IDs and structured logging."""

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional, Union

LOG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] %(message)s"
)

# Context variable for correlation ID (safe across asyncio tasks)
_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID."""
    return _correlation_id.get()


def set_correlation_id(cid: Optional[str] = None) -> str:
    """
    Set a correlation ID for the current context.

    Args:
        cid: Optional correlation ID. If None, generates a new UUID.

    Returns:
        The correlation ID (newly generated or provided)
    """
    if cid is None:
        cid = str(uuid.uuid4())
    _correlation_id.set(cid)
    return cid


def clear_correlation_id():
    """Clear the current correlation ID."""
    _correlation_id.set(None)


@contextmanager
def correlation_scope() -> Iterator[str]:
    """
    Run a block under a correlation ID.

    Keeps the caller's ID when one is set; otherwise a new one is generated
    for the block and removed again on exit.
    """
    current = get_correlation_id()
    if current is not None:
        yield current
        return

    token = _correlation_id.set(str(uuid.uuid4()))
    try:
        yield _correlation_id.get()
    finally:
        _correlation_id.reset(token)


class CorrelationIDFilter(logging.Filter):
    """Logging filter that adds correlation ID to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add correlation_id to log record if available."""
        record.correlation_id = get_correlation_id() or "none"
        return True


class LedgerLogHandler(logging.StreamHandler):
    """Root stream handler installed by configure_logging()."""

    def __init__(self):
        super().__init__()
        self.addFilter(CorrelationIDFilter())
        self.setFormatter(logging.Formatter(LOG_FORMAT))


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with correlation ID support.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, CorrelationIDFilter) for f in logger.filters):
        logger.addFilter(CorrelationIDFilter())
    return logger


def configure_logging(level: Optional[Union[int, str]] = None) -> logging.Handler:
    """
    Install a stream handler on the root logger using LOG_FORMAT.

    Calling it again replaces the handler installed by the previous call.

    Args:
        level: Log level name ("DEBUG", "INFO", ...) or number. Defaults to
            the LEDGER_LOG_LEVEL setting

    Returns:
        The installed handler
    """
    if level is None:
        from ledger.config import settings

        level = settings.log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if isinstance(handler, LedgerLogHandler):
            root_logger.removeHandler(handler)

    handler = LedgerLogHandler()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return handler
