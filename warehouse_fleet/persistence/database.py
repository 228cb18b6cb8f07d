"""Async engine and sessionmaker singletons for the SQL entity store."""

from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (  # type: ignore[attr-defined]
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from warehouse_fleet.enterprise.config.settings import AppSettings, DatabaseSettings, get_settings


class Base(DeclarativeBase):
    pass


metadata = Base.metadata

_engine: Optional[AsyncEngine] = None
_sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None


def engine_options(db: DatabaseSettings) -> Dict[str, Any]:
    """Keyword arguments for :func:`create_async_engine`.

    SQLite drivers do not pool connections, so the pool tuning only applies
    to server databases.
    """

    options: Dict[str, Any] = {"echo": db.echo}
    if make_url(str(db.url)).get_backend_name() != "sqlite":
        options.update(pool_size=db.pool_size, max_overflow=db.max_overflow, pool_pre_ping=True)
    return options


def init_engine(settings: Optional[AppSettings] = None) -> AsyncEngine:
    """Initialise (or return existing) async SQLAlchemy engine."""

    global _engine, _sessionmaker
    if _engine is not None:
        return _engine

    db = (settings or get_settings()).database
    if not db.enabled:
        raise RuntimeError("Database usage is disabled by configuration.")
    _engine = create_async_engine(str(db.url), **engine_options(db))
    _sessionmaker = async_sessionmaker(_engine, expire_on_commit=False)
    return _engine


def get_engine() -> AsyncEngine:
    return _engine if _engine is not None else init_engine()


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    if _sessionmaker is None:
        init_engine()
    assert _sessionmaker is not None
    return _sessionmaker


async def create_schema(engine: Optional[AsyncEngine] = None) -> None:
    """Create any missing tables."""

    # Registers the mapped tables on ``metadata``.
    from . import models  # noqa: F401

    async with (engine or get_engine()).begin() as conn:
        await conn.run_sync(metadata.create_all)


async def dispose_engine() -> None:
    global _engine, _sessionmaker
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _sessionmaker = None
