"""Configuration module for neo-tenancy."""

from .constants import (
    WILDCARD_PERMISSION,
    PERMISSION_SEPARATOR,
    SystemRoleId,
    InitializationStatus,
    SagaState,
    EnsureOutcome,
    DecisionReason,
    CacheKeys,
    CacheTTL,
    Headers,
)
from .logging_config import LoggingConfig, setup_logging, get_logger
from .manager import TenancySettings, get_env_config, validate_required_env_vars

__all__ = [
    "WILDCARD_PERMISSION",
    "PERMISSION_SEPARATOR",
    "SystemRoleId",
    "InitializationStatus",
    "SagaState",
    "EnsureOutcome",
    "DecisionReason",
    "CacheKeys",
    "CacheTTL",
    "Headers",
    "LoggingConfig",
    "setup_logging",
    "get_logger",
    "TenancySettings",
    "get_env_config",
    "validate_required_env_vars",
]
