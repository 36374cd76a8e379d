from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional
import logging

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from .config import Settings, get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """Explicit handle on the record store.

    Built once at startup, opened with ``connect()`` and released with
    ``close()``. Request handlers receive sessions from it through ``get_db``.
    """

    def __init__(self, url: str, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.url = url

        if url.startswith("sqlite"):
            # One shared connection so an in-memory database survives across sessions
            engine_kwargs = {
                "connect_args": {"check_same_thread": False},
                "poolclass": StaticPool,
            }
        else:
            engine_kwargs = {
                "pool_size": settings.DB_POOL_SIZE,
                "max_overflow": settings.DB_MAX_OVERFLOW,
                "pool_timeout": settings.DB_POOL_TIMEOUT,
                "pool_pre_ping": True,  # Verify connections before use
                "pool_recycle": 3600,   # Recycle connections every hour
            }

        self.engine = create_async_engine(url, echo=settings.DEBUG, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

    async def connect(self):
        """Create tables that do not exist yet."""
        try:
            async with self.engine.begin() as conn:
                # Import all models to ensure they are registered
                from app.models import supplier, inventory, pricing  # noqa: F401

                await conn.run_sync(Base.metadata.create_all)
            logger.info("✅ Database tables created successfully")
        except Exception as e:
            logger.error(f"❌ Failed to initialize database: {e}")
            raise

    async def drop_all(self):
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def close(self):
        """Close database connections."""
        try:
            await self.engine.dispose()
            logger.info("✅ Database connections closed")
        except Exception as e:
            logger.error(f"❌ Error closing database connections: {e}")

    async def check_health(self) -> bool:
        """Check database connectivity and health."""
        try:
            async with self.session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                logger.error(f"Database session error: {e}")
                await session.rollback()
                raise
            except Exception:
                await session.rollback()
                raise


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
