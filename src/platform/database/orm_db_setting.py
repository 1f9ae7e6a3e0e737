"""
SQLAlchemy async engine and session management

This module provides:
1. AsyncEngineManager: one engine per event loop, recreated when the loop changes
2. Database class used through dependency injection
3. create_db_and_tables() for the application lifespan

SQLite (aiosqlite) is the local default; any async SQLAlchemy URL works.
In-memory SQLite URLs get a StaticPool so every session sees the same database.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger


class Base(DeclarativeBase):
    pass


def _is_memory_sqlite(url: str) -> bool:
    return url.startswith('sqlite') and (url.endswith('://') or ':memory:' in url)


# =============================================================================
# Event-loop-aware Engine Manager
# =============================================================================


class AsyncEngineManager:
    """
    Manages a SQLAlchemy async engine with event loop awareness.

    Ensures the engine is always bound to the current event loop to prevent
    "Task got Future attached to a different loop" errors (TestClient runs
    its own loop per client).
    """

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self._url = url
        self._echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._session_maker: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def url(self) -> str:
        return self._url

    def get_engine(self) -> AsyncEngine:
        try:
            current_loop = asyncio.get_running_loop()
        except RuntimeError:
            if self._engine is None:
                self._engine = self._create_engine()
            return self._engine

        if self._loop is not current_loop:
            if self._engine is not None:
                Logger.base.warning('🔄 [DB] Event loop changed, dropping old engine...')
                self._session_maker = None
            Logger.base.info(f'🔗 [DB] Creating engine for event loop {id(current_loop)}')
            self._engine = self._create_engine()
            self._loop = current_loop

        return self._engine

    def get_session_maker(self) -> async_sessionmaker[AsyncSession]:
        engine = self.get_engine()
        if self._session_maker is None:
            self._session_maker = async_sessionmaker(
                engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
        return self._session_maker

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._session_maker = None
        self._loop = None

    def _create_engine(self) -> AsyncEngine:
        options: Dict[str, Any] = {'echo': self._echo}
        if _is_memory_sqlite(self._url):
            options |= {'poolclass': StaticPool, 'connect_args': {'check_same_thread': False}}
        return create_async_engine(self._url, **options)


# =============================================================================
# Database Class (DI)
# =============================================================================


class Database:
    """Session provider handed to repositories as `session_factory`."""

    def __init__(self, *, url: Optional[str] = None, echo: Optional[bool] = None) -> None:
        self._engine_manager = AsyncEngineManager(
            url or settings.DATABASE_URL_ASYNC,
            echo=settings.DB_ECHO if echo is None else echo,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Context manager for database sessions

        Note: the session rolls back automatically on exception
        """
        session_maker = self._engine_manager.get_session_maker()
        async with session_maker() as session:
            yield session

    async def create_tables(self) -> None:
        await create_db_and_tables(self._engine_manager.get_engine())

    async def dispose(self) -> None:
        await self._engine_manager.dispose()


async def create_db_and_tables(engine: AsyncEngine) -> None:
    """Create database tables if they don't exist"""
    # Register models on Base.metadata
    import src.service.seating.driven_adapter.model  # noqa: F401

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)
    except Exception as e:
        error_msg = str(e).lower()
        if any(keyword in error_msg for keyword in ['already exists', 'duplicate key']):
            Logger.base.info('Tables already exist, skipping creation')
        else:
            Logger.base.error(f'Error creating tables: {e}')
            raise
