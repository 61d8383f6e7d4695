"""
Record store: async engine, session factory and the products table metadata.
SQLite (aiosqlite) for local runs, PostgreSQL (asyncpg) for hosted ones.
"""
import logging
from typing import Any, Dict

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from precast.config import Settings, get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

ASYNC_DRIVERS = {
    "postgresql://": "postgresql+asyncpg://",
    "postgres://": "postgresql+asyncpg://",  # Supabase / Heroku style
    "sqlite:///": "sqlite+aiosqlite:///",
}


def to_async_url(url: str) -> str:
    """Swap a plain database URL onto its async driver; explicit drivers are kept"""
    for prefix, async_prefix in ASYNC_DRIVERS.items():
        if url.startswith(prefix):
            return async_prefix + url[len(prefix):]
    return url


def engine_options(url: str, config: Settings) -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": config.DB_ECHO}
    # SQLite has no connection pool to size
    if not url.startswith("sqlite"):
        options["pool_size"] = config.DB_POOL_SIZE
        options["max_overflow"] = config.DB_MAX_OVERFLOW
        options["pool_pre_ping"] = True
    return options


database_url = to_async_url(settings.DATABASE_URL)
engine = create_async_engine(database_url, **engine_options(database_url, settings))

AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


async def init_models() -> None:
    """Create missing tables. Existing rows are never touched."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Record store ready ({engine.url.get_backend_name()})")


async def get_db() -> AsyncSession:
    """Request-scoped session; committed on success, rolled back on error"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
