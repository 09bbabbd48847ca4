import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from jobboard.core.config import get_settings

logger = logging.getLogger(__name__)

# Two privilege levels: the service role for writes and privileged reads,
# the anonymous role for public listings.
SERVICE = "service"
ANON = "anon"

_engines: Dict[str, AsyncEngine] = {}
_session_factories: Dict[str, async_sessionmaker] = {}


def get_engine(role: str = SERVICE) -> AsyncEngine:
    """Get or create the async engine for a privilege level (singleton per role)."""
    engine = _engines.get(role)
    if engine is None:
        settings = get_settings()
        url = settings.database_url if role == SERVICE else settings.anon_database_url
        # pool_size=5: maintain 5 connections ready
        # max_overflow=10: allow 10 extra connections under load
        engine = create_async_engine(
            url,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
            echo=settings.debug,  # Log SQL queries in debug mode
        )
        _engines[role] = engine
    return engine


def _get_session_factory(role: str) -> async_sessionmaker:
    factory = _session_factories.get(role)
    if factory is None:
        factory = async_sessionmaker(get_engine(role), expire_on_commit=False, autoflush=False)
        _session_factories[role] = factory
    return factory


@asynccontextmanager
async def get_db_session(role: str = SERVICE) -> AsyncIterator[AsyncSession]:
    """
    Context manager for database sessions.
    Usage:
        async with get_db_session() as db:
            await db.execute(text("SELECT * FROM users"))
    """
    session = _get_session_factory(role)()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def test_postgres_connection(role: str = SERVICE) -> bool:
    """
    Test if PostgreSQL is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        async with get_db_session(role) as db:
            result = await db.execute(text("SELECT 1 as test"))
            return result.scalar_one() == 1
    except Exception as e:
        logger.warning("PostgreSQL connection failed: %s", e)
        return False


async def execute_raw_sql(sql: str, params: Optional[dict] = None, role: str = SERVICE) -> list:
    """
    Execute raw SQL and return results as list of dicts.
    This is useful for complex queries and views.
    """
    async with get_db_session(role) as db:
        result = await db.execute(text(sql), params or {})
        if not result.returns_rows:
            return []
        return [dict(row) for row in result.mappings().all()]


async def dispose_engines() -> None:
    """Close every pool; called on application shutdown."""
    for engine in _engines.values():
        await engine.dispose()
    _engines.clear()
    _session_factories.clear()
