"""Environment configuration for neo-tenancy."""

from typing import List, Optional
from functools import lru_cache
from pydantic import BaseModel, Field
import os
import logging

from ..core.exceptions import ConfigurationError


logger = logging.getLogger(__name__)


class TenancySettings(BaseModel):
    """Environment configuration model."""
    
    # Environment
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    
    # Database
    database_url: Optional[str] = Field(default=None, description="PostgreSQL URL for the asyncpg adapters")
    db_pool_min_size: int = Field(default=5, description="Min DB pool size")
    db_pool_max_size: int = Field(default=20, description="Max DB pool size")
    db_command_timeout: int = Field(default=60, description="DB command timeout")
    
    # Cache (Redis)
    redis_url: str = Field(default="redis://localhost:6379", description="Redis URL")
    permission_cache_ttl_seconds: int = Field(default=300, description="TTL of cached resolved permissions")
    feature_permission_cache: bool = Field(default=False, description="Cache resolved role permissions in Redis")
    
    # Provisioning
    saga_step_timeout_seconds: float = Field(default=10.0, ge=0, description="Per-step store timeout, 0 disables")
    mandatory_module: str = Field(default="companyAdmin", description="Module installed into every tenant")
    default_currency: str = Field(default="USD", description="Base currency when none is supplied")
    default_timezone: str = Field(default="UTC", description="Seeded tenant timezone")
    default_date_format: str = Field(default="MM/DD/YYYY", description="Seeded tenant date format")
    default_language: str = Field(default="en", description="Seeded tenant language")
    ui_mode: str = Field(default="windows", description="Seeded tenant UI mode")
    
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"
    
    @property
    def step_timeout(self) -> Optional[float]:
        """Timeout for asyncio.wait_for, None when disabled."""
        return self.saga_step_timeout_seconds or None


@lru_cache(maxsize=1)
def get_env_config() -> TenancySettings:
    """Get environment configuration from environment variables."""
    try:
        return TenancySettings(
            # Environment
            environment=os.getenv("ENVIRONMENT", "development"),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            
            # Database
            database_url=os.getenv("DATABASE_URL"),
            db_pool_min_size=int(os.getenv("DB_POOL_MIN_SIZE", "5")),
            db_pool_max_size=int(os.getenv("DB_POOL_MAX_SIZE", "20")),
            db_command_timeout=int(os.getenv("DB_COMMAND_TIMEOUT", "60")),
            
            # Cache
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379"),
            permission_cache_ttl_seconds=int(os.getenv("PERMISSION_CACHE_TTL_SECONDS", "300")),
            feature_permission_cache=os.getenv("FEATURE_PERMISSION_CACHE", "false").lower() == "true",
            
            # Provisioning
            saga_step_timeout_seconds=float(os.getenv("SAGA_STEP_TIMEOUT_SECONDS", "10")),
            mandatory_module=os.getenv("MANDATORY_MODULE", "companyAdmin"),
            default_currency=os.getenv("DEFAULT_CURRENCY", "USD"),
            default_timezone=os.getenv("DEFAULT_TIMEZONE", "UTC"),
            default_date_format=os.getenv("DEFAULT_DATE_FORMAT", "MM/DD/YYYY"),
            default_language=os.getenv("DEFAULT_LANGUAGE", "en"),
            ui_mode=os.getenv("UI_MODE", "windows"),
        )
    except Exception as e:
        raise ConfigurationError(f"Failed to load environment configuration: {e}")


def validate_required_env_vars(required_vars: Optional[List[str]] = None) -> None:
    """Validate that the variables needed by the PostgreSQL deployment are set."""
    required_vars = required_vars or ["DATABASE_URL"]
    
    missing_vars = [var for var in required_vars if not os.getenv(var)]
    if missing_vars:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing_vars)}",
            details={"missing": missing_vars},
        )
    logger.debug(f"Required environment variables present: {', '.join(required_vars)}")
