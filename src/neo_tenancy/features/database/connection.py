"""AsyncPG connection wrapper used by the PostgreSQL repositories."""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

import asyncpg

from ...config.manager import TenancySettings
from ...core.exceptions import ConfigurationError, DatabaseError


logger = logging.getLogger(__name__)


async def _init_connection(conn: asyncpg.Connection) -> None:
    """Decode JSON/JSONB columns into Python objects."""
    for type_name in ("json", "jsonb"):
        await conn.set_type_codec(
            type_name,
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog",
        )


class DatabaseConnection:
    """Thin query helper over an asyncpg pool.
    
    Rows come back as plain dicts. Inside ``transaction()`` every helper
    call made through the yielded ``DatabaseConnection`` shares the same
    connection, so a repository can group statements atomically.
    """
    
    def __init__(self, pool: Optional[asyncpg.Pool] = None, connection: Optional[asyncpg.Connection] = None):
        if pool is None and connection is None:
            raise ConfigurationError("DatabaseConnection needs a pool or a connection")
        self._pool = pool
        self._connection = connection
    
    @classmethod
    async def create(
        cls,
        dsn: str,
        min_size: int = 5,
        max_size: int = 20,
        command_timeout: int = 60,
    ) -> "DatabaseConnection":
        """Create a pool and wrap it."""
        try:
            pool = await asyncpg.create_pool(
                dsn,
                min_size=min_size,
                max_size=max_size,
                command_timeout=command_timeout,
                init=_init_connection,
            )
        except Exception as e:
            logger.error(f"Failed to create database pool: {e}")
            raise DatabaseError(f"Failed to create database pool: {e}")
        
        logger.info(f"Created database pool (min={min_size}, max={max_size})")
        return cls(pool=pool)
    
    @classmethod
    async def from_settings(cls, settings: TenancySettings) -> "DatabaseConnection":
        """Create a pool from environment settings."""
        if not settings.database_url:
            raise ConfigurationError("DATABASE_URL is required for the PostgreSQL adapters")
        return await cls.create(
            settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout,
        )
    
    @asynccontextmanager
    async def _acquire(self) -> AsyncIterator[asyncpg.Connection]:
        if self._connection is not None:
            yield self._connection
        else:
            async with self._pool.acquire() as conn:
                yield conn
    
    async def fetch_one(self, query: str, *args: Any) -> Optional[Dict[str, Any]]:
        """Execute a query and return the first row."""
        async with self._acquire() as conn:
            row = await conn.fetchrow(query, *args)
            return dict(row) if row else None
    
    async def fetch_all(self, query: str, *args: Any) -> List[Dict[str, Any]]:
        """Execute a query and return every row."""
        async with self._acquire() as conn:
            rows = await conn.fetch(query, *args)
            return [dict(row) for row in rows]
    
    async def fetch_value(self, query: str, *args: Any) -> Any:
        """Execute a query and return a single value."""
        async with self._acquire() as conn:
            return await conn.fetchval(query, *args)
    
    async def execute(self, command: str, *args: Any) -> str:
        """Execute a command and return the status tag, e.g. ``DELETE 1``."""
        async with self._acquire() as conn:
            return await conn.execute(command, *args)
    
    async def execute_many(self, command: str, args: List[tuple]) -> None:
        """Execute a command for each argument tuple."""
        async with self._acquire() as conn:
            await conn.executemany(command, args)
    
    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["DatabaseConnection"]:
        """Run the enclosed calls in one transaction."""
        async with self._acquire() as conn:
            async with conn.transaction():
                yield DatabaseConnection(connection=conn)
    
    async def close(self) -> None:
        """Close the pool."""
        if self._pool is not None:
            await self._pool.close()
            logger.info("Closed database pool")


def affected_rows(status: str) -> int:
    """Row count from an asyncpg status tag such as ``UPDATE 3``."""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (AttributeError, ValueError):
        return 0
