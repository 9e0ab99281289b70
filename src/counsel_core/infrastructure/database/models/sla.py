# src/counsel_core/infrastructure/database/models/sla.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""SLA policy models.

Purpose:
    Persistence shape for SLA policies. Budgets are stored as whole minutes;
    a NULL ``priority`` marks the wildcard policy for a request type.

Layer:
    infrastructure/database/models
"""

from __future__ import annotations

from sqlalchemy import Boolean, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from counsel_core.infrastructure.database.models.base import Base, TimestampMixin

__all__ = ["SLAPolicyRow"]


class SLAPolicyRow(TimestampMixin, Base):
    """Row of ``sla_policies``."""

    __tablename__ = "sla_policies"
    __table_args__ = (Index("ix_sla_policies_type_priority", "request_type", "priority"),)

    id: Mapped[str] = mapped_column(String(length=36), primary_key=True)
    name: Mapped[str] = mapped_column(String(length=200), nullable=False, unique=True)
    request_type: Mapped[str] = mapped_column(String(length=32), nullable=False)
    priority: Mapped[str | None] = mapped_column(
        String(length=16),
        nullable=True,
        doc="NULL selects the wildcard policy for the request type.",
    )
    response_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    resolution_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    escalation_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
