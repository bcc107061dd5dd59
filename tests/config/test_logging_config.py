"""Tests for logging configuration."""

import logging

import pytest

from neo_tenancy.config.logging_config import FORMAT_STRINGS, LoggingConfig, get_effective_log_level


class TestEffectiveLevel:

    @pytest.mark.parametrize("level,verbosity,expected", [
        ("DEBUG", "quiet", "ERROR"),
        ("ERROR", "verbose", "INFO"),
        ("INFO", "debug", "DEBUG"),
        ("warning", "normal", "WARNING"),
        ("loud", "normal", "INFO"),
        ("ERROR", "chatty", "ERROR"),
    ])
    def test_combination(self, level, verbosity, expected):
        assert get_effective_log_level(level, verbosity) == expected


class TestBuild:
    """Test the generated dictConfig mapping."""
    
    def test_root_and_handler_level(self):
        config = LoggingConfig.build("WARNING", "NORMAL", "detailed")
        
        assert config["root"]["level"] == "WARNING"
        assert config["handlers"]["console"]["level"] == "WARNING"
        assert config["formatters"]["default"]["format"] == FORMAT_STRINGS["detailed"]
        assert not config["disable_existing_loggers"]
    
    def test_unknown_format_falls_back_to_simple(self):
        config = LoggingConfig.build("INFO", "NORMAL", "fancy")
        
        assert config["formatters"]["default"]["format"] == FORMAT_STRINGS["simple"]
    
    def test_sql_logging(self):
        assert LoggingConfig.build("INFO", "NORMAL", "simple")["loggers"]["asyncpg"]["level"] == "WARNING"
        assert "asyncpg" not in LoggingConfig.build("INFO", "NORMAL", "simple", enable_sql_logging=True)["loggers"]
    
    def test_noisy_modules_log_errors_only(self):
        loggers = LoggingConfig.build("DEBUG", "NORMAL", "simple")["loggers"]
        
        assert loggers["asyncio"]["level"] == "ERROR"
    
    def test_set_module_level(self):
        LoggingConfig.set_module_level("neo_tenancy.test_target", "debug")
        
        assert logging.getLogger("neo_tenancy.test_target").level == logging.DEBUG
