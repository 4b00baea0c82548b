"""Database Connection and Session Management"""

import re
import ssl

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from typing import AsyncGenerator

from classpass.config import settings


def build_async_url(url: str):
    """
    Convert a postgresql:// URL to the asyncpg driver and pull sslmode out of it.

    asyncpg takes ssl=SSLContext instead of the libpq sslmode query parameter.

    Returns:
        (url, connect_args) tuple
    """
    url = url.replace("postgresql://", "postgresql+asyncpg://")
    connect_args = {}
    if re.search(r"[?&]sslmode=(require|required|verify-full)", url, re.I):
        ssl_ctx = ssl.create_default_context()
        ssl_ctx.check_hostname = False
        ssl_ctx.verify_mode = ssl.CERT_NONE
        connect_args["ssl"] = ssl_ctx
    url = re.sub(r"[?&]sslmode=[^&]+", "", url, flags=re.I)
    url = url.replace("?&", "?").rstrip("?")
    return url, connect_args


database_url, connect_args = build_async_url(settings.DATABASE_URL)

# Tests run each case on its own event loop, so connections must not be pooled across them
if settings.is_test:
    pool_options = {"poolclass": NullPool}
else:
    # pool_pre_ping detects connections dropped by the server
    pool_options = {
        "pool_pre_ping": True,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
    }

engine = create_async_engine(
    database_url,
    connect_args=connect_args,
    **pool_options,
    echo=settings.DEBUG and settings.is_development,
    future=True,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for declarative models
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function to get database session.

    The session commits when the request handler returns and rolls back
    if it raises.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db() -> None:
    """Initialize database tables (for development only)"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections"""
    await engine.dispose()
