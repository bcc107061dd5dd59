"""Centralized logging configuration for neo-tenancy.

Provides consistent, configurable logging with environment-based control
over verbosity, log level and format.
"""

import logging
import logging.config
import os
from typing import Any, Dict
from enum import Enum


class LogLevel(str, Enum):
    """Supported log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogVerbosity(str, Enum):
    """Log verbosity modes."""
    QUIET = "QUIET"      # Only errors and critical
    NORMAL = "NORMAL"    # Level taken from LOG_LEVEL
    VERBOSE = "VERBOSE"  # Info level logging
    DEBUG = "DEBUG"      # Full debug logging


class LogFormat(str, Enum):
    """Log format options."""
    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"


FORMAT_STRINGS: Dict[str, str] = {
    LogFormat.JSON.value: '{"time":"%(asctime)s","level":"%(levelname)s","module":"%(name)s","message":"%(message)s"}',
    LogFormat.DETAILED.value: "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
    LogFormat.SIMPLE.value: "%(asctime)s - %(levelname)s - %(message)s",
}


def get_effective_log_level(log_level: str, verbosity: str) -> str:
    """Combine LOG_LEVEL and LOG_VERBOSITY into one level name."""
    try:
        mode = LogVerbosity(verbosity.upper())
    except ValueError:
        mode = LogVerbosity.NORMAL
    
    if mode == LogVerbosity.QUIET:
        return LogLevel.ERROR.value
    if mode == LogVerbosity.VERBOSE:
        return LogLevel.INFO.value
    if mode == LogVerbosity.DEBUG:
        return LogLevel.DEBUG.value
    
    try:
        return LogLevel(log_level.upper()).value
    except ValueError:
        return LogLevel.INFO.value


class LoggingConfig:
    """Centralized logging configuration manager."""
    
    # Modules that should only log errors
    ERROR_ONLY_MODULES = [
        "asyncio",
        "httpx",
        "httpcore",
    ]
    
    @classmethod
    def build(cls, log_level: str, verbosity: str, log_format: str, enable_sql_logging: bool = False) -> Dict[str, Any]:
        """Build the dictConfig mapping for the given options."""
        effective_log_level = get_effective_log_level(log_level, verbosity)
        format_string = FORMAT_STRINGS.get(log_format.lower(), FORMAT_STRINGS[LogFormat.SIMPLE.value])
        
        logging_config: Dict[str, Any] = {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": format_string,
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": effective_log_level,
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                },
            },
            "root": {
                "level": effective_log_level,
                "handlers": ["console"],
            },
            "loggers": {},
        }
        
        for module in cls.ERROR_ONLY_MODULES:
            logging_config["loggers"][module] = {
                "level": "ERROR",
                "handlers": ["console"],
                "propagate": False,
            }
        
        if not enable_sql_logging:
            logging_config["loggers"]["asyncpg"] = {
                "level": "WARNING",
                "handlers": ["console"],
                "propagate": False,
            }
        
        return logging_config
    
    @classmethod
    def configure(cls) -> None:
        """Configure logging based on environment variables."""
        log_level = os.getenv("LOG_LEVEL", "INFO")
        log_verbosity = os.getenv("LOG_VERBOSITY", "NORMAL")
        log_format = os.getenv("LOG_FORMAT", "simple")
        enable_sql_logging = os.getenv("ENABLE_SQL_LOGGING", "false").lower() == "true"
        
        logging_config = cls.build(log_level, log_verbosity, log_format, enable_sql_logging)
        logging.config.dictConfig(logging_config)
        
        logger = logging.getLogger(__name__)
        logger.debug(f"Logging configured: level={logging_config['root']['level']}, format={log_format}")
    
    @classmethod
    def set_module_level(cls, module_name: str, level: str) -> None:
        """Set log level for a specific module."""
        logging.getLogger(module_name).setLevel(getattr(logging, level.upper()))


def setup_logging() -> None:
    """Setup logging configuration from environment variables.
    
    Call once at application startup; the library never configures
    logging on import.
    """
    LoggingConfig.configure()


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given module name."""
    return logging.getLogger(name)
