"""Pooled access to the relational store.

``DatabaseGateway`` owns the SQLAlchemy async engine and its connection pool.
``connect()`` builds the engine and pings the store with a fixed-delay retry so
the service survives the store starting after it; the caller decides what to do
when that fails. Statements run through ``exec``/``query``/``query_row``, each in
its own transaction that commits before returning. Driver failures propagate
unchanged.
"""

from __future__ import annotations

import asyncio
from typing import Any

from sqlalchemy import Executable, Row, text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from shared.config import Settings
from shared.exceptions import ConfigError, ConnectivityError, StoreError
from shared.infrastructure.logger import AppLogger, get_logger

REDACTED_DSN = "postgres://***:***@***/***"

# Failures a statement or ping may raise once the engine exists.
DRIVER_ERRORS = (SQLAlchemyError, OSError, TimeoutError)

_ASYNC_DRIVERS = {
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "postgresql+psycopg2": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}


class Base(DeclarativeBase):
    pass


def redact(dsn: str) -> str:
    """Return ``dsn`` with the password masked, safe to log.

    Username, host, port and database survive; the query string is dropped since
    drivers accept credentials there too. Anything unparsable collapses to
    ``REDACTED_DSN``.
    """
    try:
        # make_url splits the user info at the first "@"; a raw "@" in the
        # password would leak the rest of it into the host.
        if dsn.partition("://")[2].split("/", 1)[0].count("@") > 1:
            return REDACTED_DSN
        url = make_url(dsn)
    except (ArgumentError, ValueError, TypeError, AttributeError):
        return REDACTED_DSN

    return url.set(query={}).render_as_string(hide_password=True)


def async_url(dsn: str) -> URL:
    url = make_url(dsn)
    drivername = _ASYNC_DRIVERS.get(url.drivername, url.drivername)
    query = {k: v for k, v in url.query.items() if k != "sslmode"}
    return url.set(drivername=drivername, query=query)


class DatabaseGateway:
    def __init__(self, settings: Settings, log: AppLogger | None = None):
        self.settings = settings
        self.log = log or get_logger("database")
        self._engine: AsyncEngine | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database engine is not initialized. Call connect() on startup.")
        return self._engine

    @property
    def connected(self) -> bool:
        return self._engine is not None

    async def connect(self) -> None:
        """Create the pooled engine and wait for the store to answer a ping.

        Raises:
            ConfigError: ``DATABASE_URL`` is missing or cannot be parsed.
            ConnectivityError: every ping attempt failed.
        """
        if self._engine is not None:
            return

        dsn = (self.settings.DATABASE_URL or "").strip()
        if not dsn:
            raise ConfigError("DATABASE_URL is not set")

        self.log.info("Connecting to database", dsn=redact(dsn))
        try:
            url = async_url(dsn)
            self._engine = create_async_engine(url, **self._engine_options(url))
        except (ArgumentError, ValueError, TypeError) as exc:
            raise ConfigError(f"DATABASE_URL is not a valid connection string: {redact(dsn)}") from exc

        retries = self.settings.DB_CONNECT_RETRIES
        delay = self.settings.DB_CONNECT_RETRY_DELAY_SECONDS
        last_error: BaseException | None = None
        for attempt in range(1, retries + 1):
            try:
                await self.ping()
            except DRIVER_ERRORS as exc:
                last_error = exc
                self.log.warn(
                    "Database ping failed",
                    attempt=attempt,
                    max_retries=retries,
                    error=exc,
                )
                if attempt < retries:
                    await asyncio.sleep(delay)
                continue
            self.log.info("Database ping successful", attempt=attempt)
            return

        self.log.error("Failed to connect to database", attempts=retries, error=last_error)
        await self.close()
        raise ConnectivityError(
            f"Database unreachable after {retries} attempts: {last_error}"
        ) from last_error

    def _engine_options(self, url: URL) -> dict[str, Any]:
        s = self.settings
        options: dict[str, Any] = {
            "pool_size": s.DB_MAX_IDLE_CONNS,
            "max_overflow": max(s.DB_MAX_OPEN_CONNS - s.DB_MAX_IDLE_CONNS, 0),
            "pool_timeout": s.DB_POOL_TIMEOUT_SECONDS,
            "pool_recycle": s.DB_CONN_MAX_LIFETIME_SECONDS,
            "pool_pre_ping": True,
            "echo": False,
        }
        if url.get_backend_name() == "postgresql":
            options["connect_args"] = {"command_timeout": s.DB_COMMAND_TIMEOUT_SECONDS}
        elif url.get_backend_name() == "sqlite":
            options["connect_args"] = {"timeout": s.DB_COMMAND_TIMEOUT_SECONDS}
        return options

    async def bootstrap(self) -> None:
        """Create the schema if it does not exist yet. Safe to run on every start."""
        import users.infrastructure.orm_models  # noqa: F401

        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except DRIVER_ERRORS as exc:
            self.log.error("Failed to apply schema", error=exc)
            raise StoreError(f"Failed to apply schema: {exc}") from exc
        self.log.info("Schema applied", tables=",".join(sorted(Base.metadata.tables)))

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def exec(self, statement: Executable, params: dict[str, Any] | None = None) -> int:
        """Run a write statement and return the affected row count."""
        async with self.engine.begin() as conn:
            result = await conn.execute(statement, params)
            return result.rowcount

    async def query(self, statement: Executable, params: dict[str, Any] | None = None) -> list[Row]:
        """Run a statement and return every row, fully buffered."""
        async with self.engine.begin() as conn:
            result = await conn.execute(statement, params)
            return list(result.all())

    async def query_row(self, statement: Executable, params: dict[str, Any] | None = None) -> Row | None:
        """Run a statement and return its first row, or None."""
        async with self.engine.begin() as conn:
            result = await conn.execute(statement, params)
            return result.first()

    def pool_status(self) -> dict[str, int]:
        pool = self.engine.pool
        return {
            "size": pool.size(),
            "checked_in": pool.checkedin(),
            "checked_out": pool.checkedout(),
            "overflow": pool.overflow(),
        }

    async def close(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self.log.info("Database connection pool closed")
