"""
PostgreSQL async connection management using SQLAlchemy 2.0.

The DatabaseManager is constructed explicitly (by the application lifespan
or a script) and handed to the repositories that need it. There is no
module-level connection object.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from dotenv import load_dotenv
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool

from paywall.constants import (
    DEFAULT_DB_MAX_OVERFLOW,
    DEFAULT_DB_POOL_RECYCLE,
    DEFAULT_DB_POOL_SIZE,
    DEFAULT_DB_POOL_TIMEOUT,
)
from paywall.utils.env_utils import parse_bool_env, parse_int_env, parse_str_env

load_dotenv()

logger = logging.getLogger(__name__)


class DatabaseConfig:
    """Database configuration from environment variables."""

    def __init__(self):
        # Database enabled flag - set to false to run on the in-memory backend
        self.enabled = parse_bool_env("DATABASE_ENABLED", True)

        self.db_name = parse_str_env("DATABASE_NAME", "strategy_paywall")
        self.db_user = parse_str_env("DATABASE_USER", "postgres")
        self.db_password = parse_str_env("DATABASE_PASSWORD", "")
        self.db_host = parse_str_env("DATABASE_HOST", "localhost")
        self.db_port = parse_int_env("DATABASE_PORT", 5432)

        # Connection pool settings
        self.pool_size = parse_int_env("DB_POOL_SIZE", DEFAULT_DB_POOL_SIZE)
        self.max_overflow = parse_int_env("DB_MAX_OVERFLOW", DEFAULT_DB_MAX_OVERFLOW)
        self.pool_timeout = parse_int_env("DB_POOL_TIMEOUT", DEFAULT_DB_POOL_TIMEOUT)
        self.pool_recycle = parse_int_env("DB_POOL_RECYCLE", DEFAULT_DB_POOL_RECYCLE)

        self.database_url = parse_str_env(
            "DATABASE_URL",
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}",
        )

        # Debug mode
        self.echo_sql = parse_bool_env("DB_ECHO", False)

    @property
    def safe_url(self) -> str:
        """Database URL with the password masked, for logging."""
        url = self.database_url
        if "@" not in url:
            return url
        credentials, host = url.rsplit("@", 1)
        parts = credentials.split(":")
        if len(parts) >= 3:
            return f"{parts[0]}:{parts[1]}:****@{host}"
        return url


class DatabaseManager:
    """
    Manages the async engine and session factory for one application.

    The engine is created lazily on first use so constructing a manager
    never touches the network.
    """

    def __init__(self, config: Optional[DatabaseConfig] = None):
        self.config = config or DatabaseConfig()
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker] = None

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def _create_engine(self) -> AsyncEngine:
        """Create engine with direct connection URL."""
        logger.info(f"Creating database connection: {self.config.safe_url}")
        return create_async_engine(
            self.config.database_url,
            poolclass=AsyncAdaptedQueuePool,
            pool_size=self.config.pool_size,
            max_overflow=self.config.max_overflow,
            pool_timeout=self.config.pool_timeout,
            pool_recycle=self.config.pool_recycle,
            echo=self.config.echo_sql,
        )

    def get_engine(self) -> Optional[AsyncEngine]:
        """Get the async engine, creating it on first use. None if disabled."""
        if not self.config.enabled:
            return None
        if self._engine is None:
            self._engine = self._create_engine()
            self._session_factory = async_sessionmaker(
                bind=self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
            logger.info(
                f"Database engine initialized: pool_size={self.config.pool_size}, "
                f"max_overflow={self.config.max_overflow}"
            )
        return self._engine

    async def test_connection(self, timeout: float = 15.0) -> bool:
        """
        Test database connectivity with timeout.

        Args:
            timeout: Maximum time to wait for connection test (seconds)

        Returns:
            True if connection successful, False otherwise
        """
        if not self.config.enabled:
            logger.info("Database disabled - skipping connection test")
            return True

        engine = self.get_engine()
        try:
            async with asyncio.timeout(timeout):
                async with engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
            logger.info("Database connection test successful")
            return True
        except asyncio.TimeoutError:
            logger.error(f"Database connection test timed out after {timeout}s")
            return False
        except Exception as e:
            logger.error(f"Database connection test failed: {e}")
            return False

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[Optional[AsyncSession], None]:
        """
        Get an async session with automatic commit/rollback.

        Returns None if database is disabled.

        Usage:
            async with manager.session() as session:
                if session:
                    result = await session.execute(...)

        The session will:
        - Commit on successful exit
        - Rollback on exception
        - Always close after use
        """
        if self.get_engine() is None:
            yield None
            return

        session = self._session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def create_tables(self) -> None:
        """Create all tables from the SQLAlchemy models."""
        from .models import Base

        engine = self.get_engine()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")

    async def drop_tables(self) -> None:
        """Drop all tables (for testing only)."""
        from .models import Base

        engine = self.get_engine()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("Database tables dropped")

    async def close(self) -> None:
        """Dispose the engine and its connection pool."""
        if self._engine is not None:
            try:
                await self._engine.dispose()
            except Exception as e:
                logger.debug(f"Error disposing engine: {e}")
            finally:
                self._engine = None
                self._session_factory = None
        logger.info("All database connections closed")
