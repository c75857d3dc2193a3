"""Logging context utilities for correlation IDs and structured logging."""

from ledger.core.logging.logging_context import (
    LOG_FORMAT,
    CorrelationIDFilter,
    LedgerLogHandler,
    clear_correlation_id,
    configure_logging,
    correlation_scope,
    get_correlation_id,
    get_logger,
    set_correlation_id,
)

__all__ = [
    "LOG_FORMAT",
    "CorrelationIDFilter",
    "LedgerLogHandler",
    "clear_correlation_id",
    "configure_logging",
    "correlation_scope",
    "get_correlation_id",
    "get_logger",
    "set_correlation_id",
]
