"""Database bootstrap: async engine, session dependency, and schema creation.

The characters table lives in whatever database `DATABASE_URL` points at.
SQLite (via aiosqlite) is the default for local runs and tests; Postgres (via
asyncpg) works unchanged since all statements go through SQLAlchemy Core/ORM
with bound parameters.

Env:
    DATABASE_URL            Async SQLAlchemy URL (see settings.Settings).

    # Postgres pooling hints (applied only for postgresql URLs)
    DB_POOL_SIZE            e.g., "5"
    DB_MAX_OVERFLOW         e.g., "10"
    DB_POOL_RECYCLE         e.g., "1800"

    # Startup wait/retry controls used by wait_for_db()
    DB_WAIT_FOR_DB          "1"/"true" to poll until the DB answers (default "0")
    DB_WAIT_MAX_ATTEMPTS    max connection attempts (default 30)
    DB_WAIT_BACKOFF_START   initial backoff seconds (default 0.5)
    DB_WAIT_BACKOFF_MAX     backoff cap seconds (default 5.0)
"""

from __future__ import annotations

import os
import asyncio
import logging
from typing import AsyncIterator

from sqlalchemy import text, event
from sqlalchemy.engine.url import make_url, URL
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool, NullPool

from .settings import settings

log = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for ORM models."""

    pass


def _url_summary(url_str: str) -> str:
    """Render driver/host/port/db of a URL for logs, never the password."""
    try:
        u: URL = make_url(url_str)
    except Exception:
        return "driver=unknown"
    return "driver=%s host=%s port=%s db=%s" % (
        u.drivername or "",
        u.host or "",
        u.port or "",
        u.database or "",
    )


def _engine_kwargs(url: str) -> dict:
    """Pool settings per backend."""
    kwargs: dict = {"pool_pre_ping": True}

    if url.startswith("sqlite+aiosqlite:///:memory:"):
        # One shared connection, otherwise every session sees an empty DB
        kwargs["poolclass"] = StaticPool
    elif url.startswith("sqlite+aiosqlite://"):
        kwargs["poolclass"] = NullPool
    elif url.startswith("postgresql"):
        # Read at call time so tests can monkeypatch env
        for env_name, kwarg in (
            ("DB_POOL_SIZE", "pool_size"),
            ("DB_MAX_OVERFLOW", "max_overflow"),
            ("DB_POOL_RECYCLE", "pool_recycle"),
        ):
            value = os.getenv(env_name)
            if value is not None:
                kwargs[kwarg] = int(value)
    return kwargs


def _mk_engine(url: str):
    """Create the async engine and hook connect logging onto it."""
    kwargs = _engine_kwargs(url)
    eng = create_async_engine(url, **kwargs)

    sync_eng = getattr(eng, "sync_engine", None)
    if sync_eng is not None:
        summary = _url_summary(url)

        @event.listens_for(sync_eng, "connect")
        def _on_connect(dbapi_conn, conn_record):
            log.info("db.connect %s", summary)

    log.debug(
        "db.engine_created %s kwargs=%s",
        _url_summary(url),
        sorted(kwargs),
    )
    return eng


# Global engine/session factory (reconfigurable in tests)
engine = _mk_engine(settings.DATABASE_URL)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


def configure_engine(url: str) -> None:
    """Point the module-level engine and session factory at a new URL."""
    global engine, SessionLocal
    engine = _mk_engine(url)
    SessionLocal = async_sessionmaker(
        engine, expire_on_commit=False, class_=AsyncSession
    )
    log.info("db.engine_reconfigured %s", _url_summary(url))


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields an `AsyncSession` per request."""
    async with SessionLocal() as session:
        yield session


async def init_db() -> None:
    """Create the characters table if it does not exist yet."""
    from . import models  # noqa: F401 (import registers metadata)

    log.info("db.init begin %s", _url_summary(str(engine.url)))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def ping_db() -> bool:
    """Return True if `SELECT 1` succeeds against the current engine."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        log.debug("db.ping failed: %r", e)
        return False


def wait_enabled() -> bool:
    return os.getenv("DB_WAIT_FOR_DB", "0").lower() not in ("0", "false", "no")


async def wait_for_db(
    *,
    max_attempts: int | None = None,
    backoff_start: float | None = None,
    backoff_max: float | None = None,
) -> None:
    """Poll `ping_db()` with exponential backoff until it succeeds.

    Raises:
        RuntimeError: if the database is still unreachable after `max_attempts`.
    """
    if max_attempts is None:
        max_attempts = int(os.getenv("DB_WAIT_MAX_ATTEMPTS", "30"))
    if backoff_start is None:
        backoff_start = float(os.getenv("DB_WAIT_BACKOFF_START", "0.5"))
    if backoff_max is None:
        backoff_max = float(os.getenv("DB_WAIT_BACKOFF_MAX", "5.0"))

    log.info(
        "db.wait start attempts=%d backoff_start=%.3fs backoff_max=%.3fs %s",
        max_attempts,
        backoff_start,
        backoff_max,
        _url_summary(str(engine.url)),
    )

    delay = backoff_start
    for attempt in range(1, max_attempts + 1):
        if await ping_db():
            log.info("db.wait ready attempt=%d", attempt)
            return
        if attempt < max_attempts:
            await asyncio.sleep(delay)
            delay = min(delay * 2.0, backoff_max)
    raise RuntimeError(f"Database not ready after {max_attempts} attempts")
