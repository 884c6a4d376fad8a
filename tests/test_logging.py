"""
Tests for logging setup — the lnb logger, level precedence, file output.
"""

import logging

import pytest

from lnb.core.observability.logging_config import (
    LOGGER_NAME,
    _parse_level,
    resolve_level,
    setup_logging,
)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_default_level(self):
        """Default console level is WARNING with a single handler."""
        logger = setup_logging()
        assert logger.name == LOGGER_NAME
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1

    def test_root_logger_untouched(self):
        """Handlers go on the lnb logger, not the root logger."""
        root_handlers = logging.getLogger().handlers[:]
        setup_logging(level="DEBUG")
        assert logging.getLogger().handlers == root_handlers
        assert logging.getLogger(LOGGER_NAME).propagate is False

    def test_module_loggers_inherit(self):
        """A module logger under lnb is enabled at the configured level."""
        setup_logging(level="INFO")
        child = logging.getLogger("lnb.core.persistence.manifest_store")
        assert child.isEnabledFor(logging.INFO)
        assert not child.isEnabledFor(logging.DEBUG)

    def test_debug_format_has_line_numbers(self):
        """DEBUG console output carries file:line context."""
        logger = setup_logging(level="DEBUG")
        assert "%(lineno)d" in logger.handlers[0].formatter._fmt

    def test_warning_format_is_prefixed(self):
        """WARNING console output is a bare message tagged with the tool name."""
        logger = setup_logging(level="WARNING")
        assert logger.handlers[0].formatter._fmt == "lnb: %(message)s"

    def test_file_handler(self, tmp_path):
        """The file gets records below the console level."""
        log_file = tmp_path / "lnb.log"
        logger = setup_logging(level="WARNING", log_file=str(log_file), log_file_level="DEBUG")

        assert logger.level == logging.DEBUG
        logging.getLogger("lnb.test").debug("written to file only")
        for handler in logger.handlers:
            handler.flush()
        assert "written to file only" in log_file.read_text()

    def test_repeated_setup_replaces_handlers(self):
        """Calling setup twice does not stack handlers."""
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1


class TestResolveLevel:
    """Tests for console level precedence."""

    def test_flags_win_over_env(self, monkeypatch):
        """--debug beats --verbose beats --quiet beats LNB_LOG_LEVEL."""
        monkeypatch.setenv("LNB_LOG_LEVEL", "ERROR")
        assert resolve_level(debug=True, verbose=True) == "DEBUG"
        assert resolve_level(verbose=True, quiet=True) == "INFO"
        assert resolve_level(quiet=True) == "ERROR"

    def test_env_level(self, monkeypatch):
        """LNB_LOG_LEVEL applies when no flag is given."""
        monkeypatch.setenv("LNB_LOG_LEVEL", "INFO")
        assert resolve_level() == "INFO"

    def test_default(self):
        """Without flags or env the level is WARNING."""
        assert resolve_level() == "WARNING"


class TestParseLevel:
    """Tests for level-name parsing."""

    @pytest.mark.parametrize("value, expected", [
        ("debug", logging.DEBUG),
        ("INFO", logging.INFO),
        ("bogus", logging.WARNING),
        (None, logging.WARNING),
        ("", logging.WARNING),
    ])
    def test_parse(self, value, expected):
        """Names are case-insensitive; unknown or empty means WARNING."""
        assert _parse_level(value) == expected
