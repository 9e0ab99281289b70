# src/counsel_core/infrastructure/database/models/specialization.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Specialization catalogue and provider specialization models.

Layer:
    infrastructure/database/models

Notes:
    ``certifications`` is a JSON list of certificate mappings; success rates
    are fixed-point percentages with two decimals.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from counsel_core.infrastructure.database.models.base import Base, TimestampMixin

__all__ = ["SpecializationRow", "ProviderSpecializationRow"]


class SpecializationRow(TimestampMixin, Base):
    """Row of ``specializations``."""

    __tablename__ = "specializations"

    id: Mapped[str] = mapped_column(String(length=36), primary_key=True)
    name: Mapped[str] = mapped_column(String(length=200), nullable=False, unique=True)
    name_ar: Mapped[str] = mapped_column(String(length=200), nullable=False)
    category: Mapped[str] = mapped_column(String(length=100), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    description_ar: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class ProviderSpecializationRow(TimestampMixin, Base):
    """Row of ``provider_specializations``; one per provider and specialization."""

    __tablename__ = "provider_specializations"
    __table_args__ = (UniqueConstraint("provider_id", "specialization_id"),)

    id: Mapped[str] = mapped_column(String(length=36), primary_key=True)
    provider_id: Mapped[str] = mapped_column(String(length=36), nullable=False, index=True)
    specialization_id: Mapped[str] = mapped_column(
        String(length=36),
        ForeignKey("specializations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    experience_years: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_certified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    certifications: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    case_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    success_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
