"""PostgreSQL store with async SQLAlchemy.

Handles:
- Lazy, single-flight engine initialization
- Database session management
- Connection pooling
"""

import asyncio
import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from wordapi.errors import StoreNotReady
from wordapi.settings import Settings

logger = logging.getLogger("uvicorn.error")

ConnectHook = Callable[[AsyncEngine], Awaitable[None]]

# Failures that mean "the database is not reachable", as opposed to a bad query.
CONNECTION_ERRORS = (OperationalError, InterfaceError, OSError)


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""

    pass


class Database:
    """Owned handle to an async engine and its session factory.

    The engine is created on first use. Concurrent first callers share one
    in-flight initialization; if it fails, every waiter sees the failure and
    the next caller starts a fresh attempt.
    """

    def __init__(
        self,
        url: str,
        *,
        echo: bool = False,
        connect_args: dict[str, object] | None = None,
        connect_timeout: float = 10.0,
    ):
        self.url = url
        self.echo = echo
        self.connect_args = connect_args or {}
        self.connect_timeout = connect_timeout
        # Run once per successful connection, before the handle is published.
        self.on_connect: list[ConnectHook] = []

        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._connecting: asyncio.Future[None] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.async_database_url,
            echo=settings.debug,
            connect_args=settings.asyncpg_connect_args,
            connect_timeout=settings.db_connect_timeout_seconds,
        )

    @property
    def is_connected(self) -> bool:
        return self._session_factory is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise StoreNotReady("Database not initialized")
        return self._engine

    async def connect(self) -> None:
        """Establish the connection pool, sharing any attempt already in flight."""
        if self._session_factory is not None:
            return

        if self._connecting is None:
            self._connecting = asyncio.ensure_future(self._open())
        pending = self._connecting

        try:
            # Shield so a cancelled caller does not cancel the shared attempt.
            await asyncio.shield(pending)
        except StoreNotReady:
            self._forget(pending)
            raise
        except Exception as e:
            self._forget(pending)
            raise StoreNotReady(detail={"reason": str(e)[:200]}) from e

    def _forget(self, pending: asyncio.Future[None]) -> None:
        if self._connecting is pending:
            self._connecting = None

    async def _open(self) -> None:
        engine = self._create_engine()
        try:
            await asyncio.wait_for(self._ping(engine), timeout=self.connect_timeout)
            for hook in self.on_connect:
                await hook(engine)
        except BaseException:
            await engine.dispose()
            raise

        self._engine = engine
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Postgres connected")

    def _create_engine(self) -> AsyncEngine:
        return create_async_engine(
            self.url,
            echo=self.echo,
            connect_args=self.connect_args,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
        )

    async def _ping(self, engine: AsyncEngine) -> None:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def close(self) -> None:
        """Close database connection pool."""
        engine = self._engine
        self._engine = None
        self._session_factory = None
        self._connecting = None
        if engine is not None:
            await engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get database session context manager.

        Usage:
            async with db.session() as session:
                result = await session.execute(query)
        """
        await self.connect()
        if self._session_factory is None:
            # close() ran while this caller was connecting
            raise StoreNotReady("Database not initialized")

        try:
            async with self._session_factory() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise
        except CONNECTION_ERRORS as e:
            logger.warning(f"Postgres connection error: {e}")
            raise StoreNotReady(detail={"reason": str(e)[:200]}) from e
