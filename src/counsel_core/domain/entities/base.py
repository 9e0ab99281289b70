# src/counsel_core/domain/entities/base.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Base Entity (Domain Layer).

Purpose:
    Mixin for immutable domain entities. Provides frozen dataclass semantics,
    an invariant hook and copy-on-write helpers shared by every lifecycle
    aggregate.

Layer:
    domain/entities
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Any, Self


def utc_now() -> datetime:
    """Return the current UTC time (timezone-aware)."""
    return datetime.now(UTC)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes and convert aware ones to UTC.

    Args:
        value: Datetime to normalize, or ``None``.

    Returns:
        The normalized datetime, or ``None`` when ``value`` is ``None``.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def new_id() -> str:
    """Return a new opaque entity identifier."""
    return str(uuid.uuid4())


def base36(value: int) -> str:
    """Encode a non-negative integer in upper-case base 36."""
    if value < 0:
        raise ValueError("base36 expects a non-negative integer")
    digits = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    out = ""
    while True:
        value, rem = divmod(value, 36)
        out = digits[rem] + out
        if value == 0:
            return out


@dataclass(frozen=True, slots=True)
class BaseEntity:
    """Base mixin for domain entities.

    ``BaseEntity`` declares no fields. Subclasses declare their own fields and
    override :meth:`__post_init__` for invariants. Transitions never mutate an
    instance; they call :meth:`_evolve`, which builds a validated copy.
    """

    def __post_init__(self) -> None:
        """Hook for subclasses to extend with invariant checks."""
        return

    def _evolve(self, **changes: Any) -> Self:
        """Return a copy of this entity with ``changes`` applied.

        ``__post_init__`` runs again on the copy, so invariants hold for every
        instance a transition produces.
        """
        return replace(self, **changes)

    def _normalize_datetimes(self, *names: str) -> None:
        """Normalize the named datetime fields to UTC in place (construction only)."""
        for name in names:
            object.__setattr__(self, name, ensure_utc(getattr(self, name)))
