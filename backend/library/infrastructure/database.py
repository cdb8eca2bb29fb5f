"""Data Source - async engine and connection pool, constructed explicitly and passed in.

Invariants:
    - One DataSource per process, built at startup and disposed once at shutdown
    - Sessions never autoflush behind the caller's back and never expire on commit
    - Isolation level applied on the engine when configured (READ COMMITTED by default)
    - Connection pool uses pool_pre_ping for stale connection detection

Design Decisions:
    - No module-level singleton: the application holds the instance and hands it
      to the TransactionManager
    - expire_on_commit=False: prevents lazy-load issues in async context
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class DataSource:
    """Owns the async engine/pool and hands out unbound sessions."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 10,
        max_overflow: int = 0,
        pool_timeout: float = 30,
        pool_recycle: int = 1800,
        isolation_level: str | None = "READ COMMITTED",
    ):
        engine_options: dict = {
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "pool_timeout": pool_timeout,
            "pool_recycle": pool_recycle,
            "pool_pre_ping": True,
        }
        if isolation_level:
            engine_options["isolation_level"] = isolation_level
        self.engine = create_async_engine(database_url, **engine_options)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info(
            f"Connection pool ready (size={pool_size}, overflow={max_overflow}, "
            f"isolation={isolation_level or 'driver default'})",
        )

    def new_session(self) -> AsyncSession:
        """Return a session; the pooled connection is checked out on first use."""
        return self._session_factory()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self._session_factory() as db:
                await db.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Connection pool closed")
