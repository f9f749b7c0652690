"""Tests for logging helpers."""

import io
import logging

import pytest
from loguru import logger

from tinyts import logging_utils
from tinyts.core.subst import instantiate
from tinyts.core.types import TypeForall, TypeNumber, TypeVar
from tinyts.logging_utils import InterceptHandler, configure_logging, parse_log_filter


@pytest.fixture
def log_stream(monkeypatch):
    """Configure tinyts logging into a buffer and undo it afterwards."""
    monkeypatch.setattr(logging_utils, "_configured_sink", None)
    stream = io.StringIO()
    yield stream
    if logging_utils._configured_sink is not None:
        logger.remove(logging_utils._configured_sink)
    logger.disable("tinyts")


class TestParseLogFilter:
    """Tests for TINYTS_LOG_FILTER parsing."""

    def test_global_level(self):
        """A bare level sets the global level."""
        assert parse_log_filter("debug") == ("debug", {})

    def test_module_levels(self):
        """module=level pairs become a loguru filter."""
        level, modules = parse_log_filter("debug, tinyts.core.equiv=info, tinyts.core.subst=false")
        assert level == "debug"
        assert modules == {"tinyts.core.equiv": "INFO", "tinyts.core.subst": False}

    def test_empty(self):
        """An empty filter falls back to info."""
        assert parse_log_filter("") == ("info", {})


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_enables_library_logs(self, log_stream):
        """After configuration tinyts debug messages reach the sink."""
        configure_logging(log_filter="debug", sink=log_stream)
        instantiate(TypeForall(("T",), TypeVar("T")), [TypeNumber()])
        assert "subst.instantiate" in log_stream.getvalue()

    def test_module_silenced(self, log_stream):
        """A module set to false logs nothing."""
        configure_logging(log_filter="debug,tinyts.core.subst=false", sink=log_stream)
        instantiate(TypeForall(("T",), TypeVar("T")), [TypeNumber()])
        assert "subst.instantiate" not in log_stream.getvalue()

    def test_reconfigure_replaces_sink(self, log_stream):
        """A second call replaces the first sink and adds one stdlib handler at most."""
        first = io.StringIO()
        configure_logging(log_filter="debug", sink=first)
        configure_logging(log_filter="debug", sink=log_stream)
        instantiate(TypeForall(("T",), TypeVar("T")), [TypeNumber()])
        assert first.getvalue() == ""
        assert "subst.instantiate" in log_stream.getvalue()
        handlers = [h for h in logging.getLogger().handlers if isinstance(h, InterceptHandler)]
        assert len(handlers) == 1

    def test_stdlib_records_forwarded(self, log_stream):
        """Records from stdlib loggers reach the loguru sink."""
        configure_logging(log_filter="info", sink=log_stream)
        logging.getLogger("tinyts.embedding").warning("from stdlib")
        assert "from stdlib" in log_stream.getvalue()
