# src/counsel_core/adapters/repositories/base_repository.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""
BaseRepository: shared foundation for SQLAlchemy repositories.

Purpose:
    Shared mechanics for all repositories:
      * Safe fetch helpers (optional, all).
      * Deterministic ordering helper (timestamp + PK tie-breaker).
      * Per-operation latency/error metrics.

Layer: adapters / repositories

Notes:
    * No business logic, no domain decisions.
    * Repositories never commit; use cases own transactions.
"""

from __future__ import annotations

import time
from collections.abc import Generator
from contextlib import contextmanager, suppress
from typing import Any, Generic, TypeVar

from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession

from counsel_core.infrastructure.observability.metrics import (
    get_db_errors_total,
    get_db_operation_duration_seconds,
)

TModel = TypeVar("TModel")


class BaseRepository(Generic[TModel]):  # noqa: UP046
    """Abstract base class for all repositories."""

    #: Model label used in metrics.
    _MODEL_NAME = "unknown"

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: Async SQLAlchemy session bound to the target database.
        """
        self._session: AsyncSession = session
        self._metrics_hist = get_db_operation_duration_seconds()
        self._metrics_err = get_db_errors_total()

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    @contextmanager
    def _observe(self, operation: str) -> Generator[None, None, None]:
        """Time ``operation`` and count its failures; exceptions propagate."""
        start = time.perf_counter()
        outcome = "success"
        try:
            yield
        except Exception as exc:
            outcome = "error"
            with suppress(Exception):
                self._metrics_err.labels(
                    operation=operation,
                    model=self._MODEL_NAME,
                    reason=type(exc).__name__,
                ).inc()
            raise
        finally:
            with suppress(Exception):
                self._metrics_hist.labels(
                    operation=operation,
                    model=self._MODEL_NAME,
                    outcome=outcome,
                ).observe(time.perf_counter() - start)

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------

    @staticmethod
    def order_by_created(stmt: Select[Any], created_col: Any, pk_col: Any) -> Select[Any]:
        """Oldest first: ``created_at ASC, pk ASC``."""
        return stmt.order_by(created_col.asc(), pk_col.asc())

    # ------------------------------------------------------------------
    # Fetch helpers
    # ------------------------------------------------------------------

    async def fetch_optional(self, stmt: Select[Any]) -> TModel | None:
        """Execute a statement and return zero or one row."""
        res = await self._session.execute(stmt)
        return res.scalars().first()

    async def fetch_all(self, stmt: Select[Any]) -> list[TModel]:
        """Execute a statement and return all rows as a list."""
        res = await self._session.execute(stmt)
        return list(res.scalars().all())
