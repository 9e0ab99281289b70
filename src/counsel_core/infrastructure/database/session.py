# src/counsel_core/infrastructure/database/session.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Async SQLAlchemy engine and session factory.

Purpose:
    Own the process-global async engine and ``async_sessionmaker`` the unit
    of work draws sessions from.

Layer:
    infrastructure/database

Lifecycle:
    * ``init_engine_and_sessionmaker(settings)`` at startup (idempotent).
    * ``get_sessionmaker()`` wherever a UoW is built; it initializes lazily
      from ``get_settings()`` when startup did not run.
    * ``dispose_engine()`` at shutdown.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from counsel_core.config.settings import Settings, get_settings

__all__ = ["init_engine_and_sessionmaker", "dispose_engine", "get_sessionmaker"]

_engine: AsyncEngine | None = None
_sessionmaker: async_sessionmaker[AsyncSession] | None = None


def init_engine_and_sessionmaker(settings: Settings) -> None:
    """Initialize the global async engine and sessionmaker.

    Raises:
        ValueError: If ``database_url`` is empty.
    """
    global _engine, _sessionmaker

    if not settings.database_url:
        raise ValueError("database_url must be configured")
    if _engine is not None:
        return

    _engine = create_async_engine(
        url=settings.database_url,
        pool_pre_ping=True,
        echo=settings.db_echo,
    )
    _sessionmaker = async_sessionmaker(bind=_engine, expire_on_commit=False, class_=AsyncSession)


async def dispose_engine() -> None:
    """Dispose the global engine at shutdown."""
    global _engine, _sessionmaker
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _sessionmaker = None


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Return the global session factory, initializing it from settings if needed."""
    if _sessionmaker is None:
        init_engine_and_sessionmaker(get_settings())
    if _sessionmaker is None:
        raise RuntimeError("DB sessionmaker not initialized (call init_engine_and_sessionmaker)")
    return _sessionmaker
