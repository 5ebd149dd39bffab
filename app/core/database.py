import ssl
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.config import Settings
from app.core.errors import STORE_CONNECTION_ERRORS, StoreUnavailableError
from app.core.logging import get_logger

logger = get_logger(__name__)

LOCAL_HOSTS = ("localhost", "127.0.0.1", "db")


def _prepare_url(url: str, command_timeout: int | None = None) -> tuple[str, dict[str, Any]]:
    """
    Normalize a database URL for the async driver.

    Hosted Postgres URLs carry params like sslmode, channel_binding that
    asyncpg doesn't accept. We strip them and handle SSL via connect_args.

    - For remote Postgres: Use SSL with default context
    - For local dev (localhost/127.0.0.1/db) and SQLite: No SSL
    """
    parsed = urlparse(url)

    if parsed.scheme.startswith("sqlite"):
        return url, {}

    params = parse_qs(parsed.query)

    # Remove unsupported asyncpg params
    for param in ["sslmode", "channel_binding", "options"]:
        params.pop(param, None)

    new_query = urlencode(params, doseq=True)
    clean_url = urlunparse(parsed._replace(query=new_query))

    connect_args: dict[str, Any] = {}
    if command_timeout:
        connect_args["command_timeout"] = command_timeout

    hostname = parsed.hostname or ""
    if hostname not in LOCAL_HOSTS:
        connect_args["ssl"] = ssl.create_default_context()

    return clean_url, connect_args


class Database:
    """
    Explicitly managed handle on the relational store.

    Owns the async engine and session factory. Call ``open()`` before use
    and ``close()`` on shutdown; sessions are handed out per unit of work
    through ``session()``.
    """

    def __init__(
        self,
        url: str,
        *,
        echo: bool = False,
        pool_timeout: int | None = None,
        command_timeout: int | None = None,
        engine_options: dict[str, Any] | None = None,
    ) -> None:
        self.url = url
        self.echo = echo
        self.pool_timeout = pool_timeout
        self.command_timeout = command_timeout
        self.engine_options = engine_options or {}
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """Build a handle from application settings."""
        return cls(
            settings.database_url,
            echo=settings.debug,
            pool_timeout=settings.database_pool_timeout,
            command_timeout=settings.database_command_timeout,
        )

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise StoreUnavailableError("Database handle is not open")
        return self._engine

    async def open(self) -> None:
        """Create the engine and session factory. Safe to call twice."""
        if self._engine is not None:
            return

        clean_url, connect_args = _prepare_url(self.url, self.command_timeout)
        options: dict[str, Any] = {"echo": self.echo, "connect_args": connect_args}
        if not clean_url.startswith("sqlite"):
            options.update(
                pool_pre_ping=True,
                pool_size=5,
                max_overflow=10,
                pool_recycle=280,
            )
            if self.pool_timeout:
                options["pool_timeout"] = self.pool_timeout
        options.update(self.engine_options)

        self._engine = create_async_engine(clean_url, **options)
        self._sessionmaker = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.bind(driver=self._engine.url.drivername).info("database_opened")

    async def close(self) -> None:
        """Dispose of pooled connections."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("database_closed")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Provide a transactional session; commits on success, rolls back on error."""
        if self._sessionmaker is None:
            raise StoreUnavailableError("Database handle is not open")

        async with self._sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except Exception as e:
                logger.bind(error=str(e)).error("database_transaction_rollback")
                await session.rollback()
                raise

    async def ping(self) -> bool:
        """Return True if a trivial query succeeds."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except STORE_CONNECTION_ERRORS as e:
            logger.bind(error=str(e)).warning("database_ping_failed")
            return False

    async def create_all(self) -> None:
        """Create all tables from model metadata (dev and tests)."""
        from app.models import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a session from the app's database handle."""
    database: Database | None = getattr(request.app.state, "database", None)
    if database is None:
        raise StoreUnavailableError()

    async with database.session() as session:
        yield session
