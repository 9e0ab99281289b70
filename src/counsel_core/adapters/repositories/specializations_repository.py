# src/counsel_core/adapters/repositories/specializations_repository.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""
Specialization repositories (SQLAlchemy).

Purpose:
    Concrete implementations of ``SpecializationRepository`` and
    ``ProviderSpecializationRepository``.

Layer:
    adapters

Notes:
    ``get_for_update`` issues ``SELECT ... FOR UPDATE``; the lock is held
    until the surrounding unit of work commits or rolls back. Dialects
    without row locks (SQLite) ignore the clause.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from counsel_core.adapters.repositories.base_repository import BaseRepository
from counsel_core.domain.entities.specialization import (
    CertificationDetail,
    ProviderSpecialization,
    Specialization,
)
from counsel_core.infrastructure.database.models.base import now_utc
from counsel_core.infrastructure.database.models.specialization import (
    ProviderSpecializationRow,
    SpecializationRow,
)

__all__ = [
    "SqlAlchemySpecializationRepository",
    "SqlAlchemyProviderSpecializationRepository",
]


class SqlAlchemySpecializationRepository(BaseRepository[SpecializationRow]):
    """SQLAlchemy-backed specialization catalogue."""

    _MODEL_NAME = "specializations"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session=session)

    async def find_by_id(self, specialization_id: str) -> Specialization | None:
        with self._observe("find_by_id"):
            row = await self._session.get(SpecializationRow, specialization_id)
            return self._to_entity(row) if row is not None else None

    async def find_by_name(self, name: str) -> Specialization | None:
        with self._observe("find_by_name"):
            stmt = (
                select(SpecializationRow)
                .where(func.lower(SpecializationRow.name) == name.strip().lower())
                .limit(1)
            )
            row = await self.fetch_optional(stmt)
            return self._to_entity(row) if row is not None else None

    async def find_by_category(
        self, category: str, *, active_only: bool = True
    ) -> Sequence[Specialization]:
        with self._observe("find_by_category"):
            stmt = select(SpecializationRow).where(
                SpecializationRow.category == category.strip().lower()
            )
            if active_only:
                stmt = stmt.where(SpecializationRow.is_active.is_(True))
            stmt = self.order_by_created(stmt, SpecializationRow.created_at, SpecializationRow.id)
            return [self._to_entity(r) for r in await self.fetch_all(stmt)]

    async def save(self, specialization: Specialization) -> None:
        with self._observe("save"):
            values = self._to_row_dict(specialization)
            row = await self._session.get(SpecializationRow, specialization.id)
            if row is None:
                self._session.add(SpecializationRow(**values))
            else:
                for key, value in values.items():
                    setattr(row, key, value)
            await self._session.flush()

    @staticmethod
    def _to_entity(row: SpecializationRow) -> Specialization:
        return Specialization.reconstitute(
            {
                "id": row.id,
                "name": row.name,
                "name_ar": row.name_ar,
                "category": row.category,
                "description": row.description,
                "description_ar": row.description_ar,
                "is_active": row.is_active,
                "created_at": row.created_at,
                "updated_at": row.updated_at,
            }
        )

    @staticmethod
    def _to_row_dict(spec: Specialization) -> dict[str, Any]:
        values = spec.to_dict()
        values["created_at"] = spec.created_at or now_utc()
        values["updated_at"] = spec.updated_at or now_utc()
        return values


class SqlAlchemyProviderSpecializationRepository(BaseRepository[ProviderSpecializationRow]):
    """SQLAlchemy-backed provider specialization records."""

    _MODEL_NAME = "provider_specializations"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session=session)

    async def find_by_specialization(
        self, specialization_id: str
    ) -> Sequence[ProviderSpecialization]:
        with self._observe("find_by_specialization"):
            stmt = self.order_by_created(
                select(ProviderSpecializationRow).where(
                    ProviderSpecializationRow.specialization_id == specialization_id
                ),
                ProviderSpecializationRow.created_at,
                ProviderSpecializationRow.id,
            )
            return [self._to_entity(r) for r in await self.fetch_all(stmt)]

    async def find_by_provider(self, provider_id: str) -> Sequence[ProviderSpecialization]:
        with self._observe("find_by_provider"):
            stmt = self.order_by_created(
                select(ProviderSpecializationRow).where(
                    ProviderSpecializationRow.provider_id == provider_id
                ),
                ProviderSpecializationRow.created_at,
                ProviderSpecializationRow.id,
            )
            return [self._to_entity(r) for r in await self.fetch_all(stmt)]

    async def find_by_provider_and_specialization(
        self, provider_id: str, specialization_id: str
    ) -> ProviderSpecialization | None:
        with self._observe("find_by_provider_and_specialization"):
            row = await self.fetch_optional(self._pair(provider_id, specialization_id))
            return self._to_entity(row) if row is not None else None

    async def get_for_update(
        self, provider_id: str, specialization_id: str
    ) -> ProviderSpecialization | None:
        with self._observe("get_for_update"):
            stmt = self._pair(provider_id, specialization_id).with_for_update()
            row = await self.fetch_optional(stmt)
            return self._to_entity(row) if row is not None else None

    async def save(self, record: ProviderSpecialization) -> None:
        with self._observe("save"):
            values = self._to_row_dict(record)
            row = await self._session.get(ProviderSpecializationRow, record.id)
            if row is None:
                self._session.add(ProviderSpecializationRow(**values))
            else:
                for key, value in values.items():
                    setattr(row, key, value)
            await self._session.flush()

    @staticmethod
    def _pair(provider_id: str, specialization_id: str) -> Any:
        return (
            select(ProviderSpecializationRow)
            .where(
                ProviderSpecializationRow.provider_id == provider_id,
                ProviderSpecializationRow.specialization_id == specialization_id,
            )
            .limit(1)
        )

    @staticmethod
    def _to_entity(row: ProviderSpecializationRow) -> ProviderSpecialization:
        return ProviderSpecialization(
            id=row.id,
            provider_id=row.provider_id,
            specialization_id=row.specialization_id,
            experience_years=row.experience_years,
            is_certified=row.is_certified,
            certifications=tuple(
                CertificationDetail.from_dict(c) for c in row.certifications or ()
            ),
            case_count=row.case_count,
            success_rate=row.success_rate,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @staticmethod
    def _to_row_dict(record: ProviderSpecialization) -> dict[str, Any]:
        return {
            "id": record.id,
            "provider_id": record.provider_id,
            "specialization_id": record.specialization_id,
            "experience_years": record.experience_years,
            "is_certified": record.is_certified,
            "certifications": [c.to_dict() for c in record.certifications],
            "case_count": record.case_count,
            "success_rate": (
                Decimal(record.success_rate) if record.success_rate is not None else None
            ),
            "created_at": record.created_at or now_utc(),
            "updated_at": record.updated_at or now_utc(),
        }
