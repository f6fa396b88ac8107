"""
SQLAlchemy async engine and session management with read-write separation.

- Write sessions always use the primary database
- Read sessions use the replica when POSTGRES_REPLICA_SERVER is set, otherwise the primary
- Engines are rebuilt when the running event loop changes (pytest-asyncio creates a loop per test)
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from src.platform.config.core_setting import Settings, settings as default_settings
from src.platform.exception.exceptions import BackendUnavailableError
from src.platform.logging.loguru_io import Logger


class AsyncEngineManager:
    """
    Owns the write engine (primary) and read engine (replica or primary),
    always bound to the current event loop.
    """

    def __init__(self, *, settings: Settings = default_settings) -> None:
        self._settings = settings
        self._write_engine: Optional[AsyncEngine] = None
        self._read_engine: Optional[AsyncEngine] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._write_session_maker: Optional[async_sessionmaker[AsyncSession]] = None
        self._read_session_maker: Optional[async_sessionmaker[AsyncSession]] = None

    def get_engine(self, *, read_only: bool = False) -> AsyncEngine:
        try:
            current_loop = asyncio.get_running_loop()
        except RuntimeError:
            current_loop = None

        if current_loop is not None and self._loop is not current_loop:
            if self._write_engine is not None or self._read_engine is not None:
                Logger.base.warning('🔄 [DB] Event loop changed, dropping old engines')
            self._reset()
            self._loop = current_loop

        if read_only:
            if self._read_engine is None:
                self._read_engine = self._create_engine(
                    url=self._settings.DATABASE_READ_URL_ASYNC,
                    pool_size=self._settings.DB_POOL_SIZE_READ,
                )
            return self._read_engine

        if self._write_engine is None:
            self._write_engine = self._create_engine(
                url=self._settings.DATABASE_URL_ASYNC,
                pool_size=self._settings.DB_POOL_SIZE_WRITE,
            )
        return self._write_engine

    def get_session_maker(self, *, read_only: bool = False) -> async_sessionmaker[AsyncSession]:
        engine = self.get_engine(read_only=read_only)
        if read_only:
            if self._read_session_maker is None:
                self._read_session_maker = async_sessionmaker(
                    engine, class_=AsyncSession, expire_on_commit=False
                )
            return self._read_session_maker

        if self._write_session_maker is None:
            self._write_session_maker = async_sessionmaker(
                engine, class_=AsyncSession, expire_on_commit=False
            )
        return self._write_session_maker

    async def dispose(self) -> None:
        for engine in {self._write_engine, self._read_engine} - {None}:
            await engine.dispose()  # type: ignore[union-attr]
        self._reset()

    def _reset(self) -> None:
        # Old engines are left to the GC; dispose() cannot be awaited from a sync path
        self._write_engine = None
        self._read_engine = None
        self._write_session_maker = None
        self._read_session_maker = None

    def _create_engine(self, *, url: str, pool_size: int) -> AsyncEngine:
        Logger.base.info(f'🔗 [DB] Creating engine (pool_size={pool_size})')
        return create_async_engine(
            url,
            echo=False,
            pool_size=pool_size,
            max_overflow=self._settings.DB_POOL_MAX_OVERFLOW,
            pool_timeout=self._settings.DB_POOL_TIMEOUT,
            pool_recycle=self._settings.DB_POOL_RECYCLE,
            pool_pre_ping=self._settings.DB_POOL_PRE_PING,
        )


class Base(DeclarativeBase):
    pass


class Database:
    """Session factory for repositories, provided by the DI container."""

    def __init__(self, *, engine_manager: AsyncEngineManager, read_only: bool = False) -> None:
        self._engine_manager = engine_manager
        self._read_only = read_only

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Yield a session; rolls back on exception.

        Connection-level failures surface as BackendUnavailableError so callers
        can pick a retry policy.
        """
        session_maker = self._engine_manager.get_session_maker(read_only=self._read_only)
        try:
            async with session_maker() as session:
                yield session
        except (OperationalError, ConnectionError, OSError) as e:
            raise BackendUnavailableError(f'Database unavailable: {e}') from e
        except DBAPIError as e:
            if e.connection_invalidated:
                raise BackendUnavailableError(f'Database connection lost: {e}') from e
            raise

