"""Tests for structured logging setup."""

import pytest
import structlog

from filequeue.utils.config import Config
from filequeue.utils.logging import (
    add_app_context,
    configure_logging_from_config,
    get_logger,
)


class TestLogging:
    """Test logging configuration."""
    
    @pytest.fixture(autouse=True)
    def reset_structlog(self):
        """Restore structlog defaults after each test."""
        yield
        structlog.reset_defaults()
    
    def test_app_context(self):
        """Test that entries are tagged with the application name."""
        event_dict = add_app_context(None, "info", {"event": "hello"})
        
        assert event_dict["app"] == "filequeue"
        assert event_dict["event"] == "hello"
    
    @pytest.mark.parametrize("log_format", ["json", "console"])
    def test_configure_from_config(self, log_format):
        """Test configuring logging from the logging section."""
        config = Config()
        config.set("logging.level", "DEBUG")
        config.set("logging.format", log_format)
        
        configure_logging_from_config(config)
        
        assert structlog.is_configured()
        get_logger(__name__).debug("configured", format=log_format)
