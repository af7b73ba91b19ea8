"""Database connection and session management"""
import asyncio
import os
from typing import AsyncGenerator, Optional

import structlog
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.orm import sessionmaker

logger = structlog.get_logger()

# Lazy initialization - engine created on first use
_engine: Optional[AsyncEngine] = None
_async_session_maker: Optional[sessionmaker] = None


def _get_database_url() -> str:
    """Get and normalize DATABASE_URL"""
    url = os.getenv("DATABASE_URL", "")

    if not url:
        raise RuntimeError(
            "DATABASE_URL environment variable is not set. "
            "Please configure it in your .env file."
        )

    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgresql://") and "+asyncpg" not in url:
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)

    return url


def get_engine() -> AsyncEngine:
    """Get or create the async engine (lazy initialization)"""
    global _engine

    if _engine is None:
        url = _get_database_url()
        echo = os.getenv("DEBUG", "false").lower() == "true"

        if url.startswith("postgresql+asyncpg://"):
            # SSL is required for Supabase connections
            # statement_cache_size=0 is required for pgbouncer/Supabase pooler
            connect_args = {
                "ssl": "require",
                "statement_cache_size": 0,
                "server_settings": {
                    "application_name": "foi-portal-backend"
                }
            }
            _engine = create_async_engine(
                url,
                echo=echo,
                pool_pre_ping=True,
                pool_size=5,
                max_overflow=10,
                connect_args=connect_args,
            )
        else:
            _engine = create_async_engine(url, echo=echo)

    return _engine


def set_engine(engine: AsyncEngine) -> None:
    """Use an already built engine (local development, tests)"""
    global _engine, _async_session_maker

    _engine = engine
    _async_session_maker = None


def get_session_maker() -> sessionmaker:
    """Get or create the session maker (lazy initialization)"""
    global _async_session_maker

    if _async_session_maker is None:
        _async_session_maker = sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )

    return _async_session_maker


async def init_db(max_retries: int = 5, retry_delay: float = 2) -> None:
    """Create tables if they do not exist.

    The Supabase project already owns the schema in production; this is
    for local databases.
    """
    from domain.models import FoiRequest, Report, StaffMember, ActivityLog  # noqa: F401

    for attempt in range(1, max_retries + 1):
        try:
            logger.info("database_connect_attempt", attempt=attempt, max_retries=max_retries)
            async with get_engine().begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)
            logger.info("database_initialized")
            return
        except Exception as e:
            if attempt < max_retries:
                logger.warning("database_connect_failed", attempt=attempt, error=str(e))
                await asyncio.sleep(retry_delay)
                retry_delay *= 2  # Exponential backoff
            else:
                logger.error("database_unavailable", attempts=max_retries, error=str(e))
                raise


async def dispose_engine() -> None:
    global _engine, _async_session_maker

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _async_session_maker = None


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database session"""
    async with get_session_maker()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
