# src/counsel_core/infrastructure/database/models/base.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Declarative Base and shared persistence mixins.

Purpose:
    * A project-wide SQLAlchemy Declarative Base with deterministic naming
      conventions so generated DDL stays stable.
    * A timestamp mixin for audit columns (UTC, timezone-aware).

Layer:
    infrastructure/database/models

Notes:
    Persistence only; no domain behaviour. Primary keys are the string ids
    generated by the domain (``new_id``), so no server-side id defaults.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import DateTime

__all__ = ["metadata", "Base", "TimestampMixin", "now_utc"]

#: Deterministic naming conventions for constraints and indexes.
NAMING_CONVENTIONS: dict[str, str] = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=NAMING_CONVENTIONS)


def now_utc() -> datetime:
    """Return the current UTC time with timezone info."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Declarative Base for all ORM models."""

    metadata = metadata


class TimestampMixin:
    """``created_at`` / ``updated_at`` columns, written from domain timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=now_utc,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=now_utc,
        onupdate=now_utc,
    )
