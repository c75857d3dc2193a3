"""Tests for logging context utilities.

These tests validate correlation ID functionality for structured logging.
"""

import logging

from ledger.core.logging import (
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


class TestCorrelationID:
    """Test correlation ID functions."""

    def test_get_correlation_id_returns_none_initially(self):
        """Test that get_correlation_id returns None after clearing."""
        clear_correlation_id()
        assert get_correlation_id() is None

    def test_set_correlation_id_generates_uuid_when_none(self):
        """Test that set_correlation_id generates a UUID when None provided."""
        clear_correlation_id()
        cid = set_correlation_id()
        assert isinstance(cid, str)
        assert len(cid) == 36
        clear_correlation_id()

    def test_set_correlation_id_uses_provided_value(self):
        """Test that set_correlation_id uses the provided value."""
        cid = set_correlation_id("request-1")
        assert cid == "request-1"
        assert get_correlation_id() == "request-1"
        clear_correlation_id()

    def test_correlation_scope_generates_and_restores(self):
        """Test that a scope without a caller ID gets its own and drops it on exit."""
        clear_correlation_id()
        with correlation_scope() as cid:
            assert len(cid) == 36
            assert get_correlation_id() == cid
        assert get_correlation_id() is None

    def test_correlation_scope_keeps_caller_id(self):
        """Test that an existing correlation ID is reused."""
        set_correlation_id("request-2")
        try:
            with correlation_scope() as cid:
                assert cid == "request-2"
            assert get_correlation_id() == "request-2"
        finally:
            clear_correlation_id()


class TestCorrelationIDFilter:
    """Test CorrelationIDFilter."""

    def _record(self):
        return logging.LogRecord("test", logging.INFO, __file__, 1, "msg", None, None)

    def test_filter_adds_correlation_id(self):
        """Test that the filter stamps the current correlation ID."""
        set_correlation_id("abc")
        record = self._record()

        assert CorrelationIDFilter().filter(record) is True
        assert record.correlation_id == "abc"
        clear_correlation_id()

    def test_filter_uses_none_placeholder(self):
        """Test that records without a correlation ID get 'none'."""
        clear_correlation_id()
        record = self._record()

        CorrelationIDFilter().filter(record)

        assert record.correlation_id == "none"


class TestGetLogger:
    """Test get_logger."""

    def test_get_logger_adds_filter_once(self):
        """Test that repeated calls do not stack filters."""
        logger = get_logger("ledger.tests.once")
        get_logger("ledger.tests.once")

        filters = [f for f in logger.filters if isinstance(f, CorrelationIDFilter)]
        assert len(filters) == 1


class TestConfigureLogging:
    """Test configure_logging."""

    def test_installs_single_handler(self):
        """Test that calling twice replaces the previous handler."""
        root = logging.getLogger()
        previous_level = root.level
        try:
            first = configure_logging("DEBUG")
            second = configure_logging("WARNING")

            assert first not in root.handlers
            assert second in root.handlers
            assert root.level == logging.WARNING
            assert second.formatter._fmt == LOG_FORMAT
        finally:
            root.removeHandler(second)
            root.setLevel(previous_level)

    def test_unknown_level_falls_back_to_info(self):
        """Test that a bad level name means INFO."""
        root = logging.getLogger()
        previous_level = root.level
        handler = configure_logging("LOUD")
        try:
            assert root.level == logging.INFO
        finally:
            root.removeHandler(handler)
            root.setLevel(previous_level)

    def test_level_defaults_to_settings(self, monkeypatch):
        """Test that the LEDGER_LOG_LEVEL setting is used when no level is given."""
        from ledger.config import settings

        monkeypatch.setattr(settings, "log_level", "ERROR")
        root = logging.getLogger()
        previous_level = root.level
        handler = configure_logging()
        try:
            assert root.level == logging.ERROR
        finally:
            root.removeHandler(handler)
            root.setLevel(previous_level)

    def test_leaves_other_handlers_alone(self):
        """Test that only handlers installed by configure_logging are replaced."""
        root = logging.getLogger()
        previous_level = root.level
        other = logging.NullHandler()
        root.addHandler(other)
        handler = configure_logging("INFO")
        try:
            assert isinstance(handler, LedgerLogHandler)
            assert other in root.handlers
        finally:
            root.removeHandler(handler)
            root.removeHandler(other)
            root.setLevel(previous_level)
