#!/usr/bin/env python3
"""Tests for the Logger module."""

import logging
import threading

import pytest

from callermatch.infrastructure.logger import LogLevel, Logger, get_logger, set_global_logger


class CollectingHandler(logging.Handler):
    """Handler that keeps formatted messages and their context."""

    def __init__(self):
        super().__init__()
        self.messages = []
        self.contexts = []

    def emit(self, record):
        self.messages.append(record.getMessage())
        self.contexts.append(getattr(record, "context", None))


@pytest.fixture
def handler():
    return CollectingHandler()


@pytest.fixture
def logger(handler):
    return Logger(name="callermatch.test_logger", level=LogLevel.DEBUG, handlers=[handler])


class TestLogLevel:
    """Tests for LogLevel enum."""

    def test_log_levels(self):
        """Log level values match Python logging."""
        assert LogLevel.DEBUG == logging.DEBUG
        assert LogLevel.INFO == logging.INFO
        assert LogLevel.WARNING == logging.WARNING
        assert LogLevel.ERROR == logging.ERROR
        assert LogLevel.CRITICAL == logging.CRITICAL


class TestLogger:
    """Tests for Logger class."""

    def test_creation(self, logger, handler):
        """Logger owns its handlers and does not propagate."""
        assert logger.name == "callermatch.test_logger"
        assert logger.get_level() == LogLevel.DEBUG
        assert handler in logger.logger.handlers
        assert not any(type(h) is logging.StreamHandler for h in logger.logger.handlers)
        assert logger.logger.propagate is False

    def test_library_mode_keeps_host_handlers(self):
        """Without handlers the host's handlers, level and propagation are untouched."""
        stdlib_logger = logging.getLogger("callermatch.test_library")
        host_handler = logging.NullHandler()
        stdlib_logger.addHandler(host_handler)
        stdlib_logger.setLevel(logging.WARNING)
        stdlib_logger.propagate = True
        try:
            Logger(name="callermatch.test_library")

            assert stdlib_logger.handlers == [host_handler]
            assert stdlib_logger.level == logging.WARNING
            assert stdlib_logger.propagate is True
        finally:
            stdlib_logger.removeHandler(host_handler)
            stdlib_logger.setLevel(logging.NOTSET)

    def test_library_mode_adds_null_handler(self):
        """A logger with no handlers gets a NullHandler and still propagates."""
        stdlib_logger = logging.getLogger("callermatch.test_library_bare")
        stdlib_logger.handlers.clear()

        Logger(name="callermatch.test_library_bare")

        assert len(stdlib_logger.handlers) == 1
        assert isinstance(stdlib_logger.handlers[0], logging.NullHandler)
        assert stdlib_logger.propagate is True

    def test_console_handler(self):
        """create_console_handler() writes formatted lines to a stream."""
        console = Logger.create_console_handler()
        assert isinstance(console, logging.StreamHandler)
        assert "%(levelname)s" in console.formatter._fmt

    def test_string_level(self, logger):
        """Levels can be given by name."""
        logger.set_level("warning")
        assert logger.get_level() == LogLevel.WARNING

    def test_invalid_string_level(self, logger):
        """Unknown level names raise KeyError."""
        with pytest.raises(KeyError):
            logger.set_level("chatty")

    def test_context_suffix(self, logger, handler):
        """Keyword context is appended as key=value pairs."""
        logger.info("Built filter", name="F", frames="0..5")
        assert handler.messages == ["Built filter | name=F frames=0..5"]
        assert handler.contexts == [{"name": "F", "frames": "0..5"}]

    def test_no_context(self, logger, handler):
        """Messages without context are unchanged."""
        logger.warning("plain")
        assert handler.messages == ["plain"]

    def test_level_filtering(self, logger, handler):
        """Messages below the level are dropped."""
        logger.set_level(LogLevel.WARNING)
        logger.debug("d")
        logger.info("i")
        logger.warning("w")
        assert handler.messages == ["w"]

    def test_add_context(self, logger, handler):
        """Context managers push and pop context."""
        with logger.add_context(filter="F"):
            logger.debug("inside")
            with logger.add_context(step=2):
                logger.debug("nested")
        logger.debug("outside")

        assert handler.messages == ["inside | filter=F", "nested | filter=F step=2", "outside"]

    def test_context_is_thread_local(self, logger, handler):
        """Context pushed in one thread is not seen in another."""
        seen = []

        def worker():
            logger.info("worker")
            seen.append(handler.messages[-1])

        with logger.add_context(filter="F"):
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join()

        assert seen == ["worker"]

    def test_file_handler(self, logger, tmp_path):
        """File handlers write formatted lines."""
        log_file = tmp_path / "callermatch.log"
        file_handler = logger.create_file_handler(log_file)
        logger.add_handler(file_handler)
        logger.info("to file")
        file_handler.flush()
        logger.logger.removeHandler(file_handler)
        file_handler.close()

        assert "to file" in log_file.read_text()


class TestGlobalLogger:
    """Tests for the module-level logger singleton."""

    def test_get_logger_singleton(self):
        """get_logger returns the same instance for the same name."""
        assert get_logger() is get_logger()
        assert get_logger().name == "callermatch"

    def test_set_global_logger(self, logger):
        """set_global_logger replaces the instance."""
        set_global_logger(logger)
        assert get_logger("callermatch.test_logger") is logger
