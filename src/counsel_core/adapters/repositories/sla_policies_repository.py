# src/counsel_core/adapters/repositories/sla_policies_repository.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""
SLA policies repository (SQLAlchemy).

Purpose:
    Concrete implementation of ``SLAPolicyRepository`` over the
    ``sla_policies`` table.

Layer:
    adapters

Notes:
    Satisfies the domain Protocol via structural typing. ``find_best_match``
    prefers the exact ``(request_type, priority)`` policy and falls back to
    the wildcard (NULL priority) policy of the type.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import delete, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from counsel_core.adapters.repositories.base_repository import BaseRepository
from counsel_core.domain.entities.sla_policy import SLAPolicy
from counsel_core.domain.enums.sla import RequestType, SLAPriority
from counsel_core.infrastructure.database.models.base import now_utc
from counsel_core.infrastructure.database.models.sla import SLAPolicyRow

__all__ = ["SqlAlchemySLAPolicyRepository"]


def _priority_clause(priority: SLAPriority | None) -> Any:
    if priority is None:
        return SLAPolicyRow.priority.is_(None)
    return SLAPolicyRow.priority == SLAPriority(priority).value


class SqlAlchemySLAPolicyRepository(BaseRepository[SLAPolicyRow]):
    """SQLAlchemy-backed SLA policy store."""

    _MODEL_NAME = "sla_policies"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session=session)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def save(self, policy: SLAPolicy) -> None:
        with self._observe("save"):
            row = await self._session.get(SLAPolicyRow, policy.id)
            values = self._to_row_dict(policy)
            if row is None:
                self._session.add(SLAPolicyRow(**values))
            else:
                for key, value in values.items():
                    setattr(row, key, value)
            await self._session.flush()

    async def delete(self, policy_id: str) -> None:
        with self._observe("delete"):
            await self._session.execute(delete(SLAPolicyRow).where(SLAPolicyRow.id == policy_id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def find_by_id(self, policy_id: str) -> SLAPolicy | None:
        with self._observe("find_by_id"):
            row = await self._session.get(SLAPolicyRow, policy_id)
            return self._to_entity(row) if row is not None else None

    async def find_by_name(self, name: str) -> SLAPolicy | None:
        with self._observe("find_by_name"):
            row = await self.fetch_optional(
                select(SLAPolicyRow).where(SLAPolicyRow.name == name).limit(1)
            )
            return self._to_entity(row) if row is not None else None

    async def find_by_type_and_priority(
        self, request_type: RequestType, priority: SLAPriority | None
    ) -> SLAPolicy | None:
        with self._observe("find_by_type_and_priority"):
            stmt = (
                select(SLAPolicyRow)
                .where(
                    SLAPolicyRow.request_type == RequestType(request_type).value,
                    _priority_clause(priority),
                    SLAPolicyRow.is_active.is_(True),
                )
                .limit(1)
            )
            row = await self.fetch_optional(stmt)
            return self._to_entity(row) if row is not None else None

    async def find_best_match(
        self, request_type: RequestType, priority: SLAPriority
    ) -> SLAPolicy | None:
        exact = await self.find_by_type_and_priority(request_type, priority)
        if exact is not None:
            return exact
        return await self.find_by_type_and_priority(request_type, None)

    async def find_by_request_type(self, request_type: RequestType) -> Sequence[SLAPolicy]:
        with self._observe("find_by_request_type"):
            stmt = self.order_by_created(
                select(SLAPolicyRow).where(
                    SLAPolicyRow.request_type == RequestType(request_type).value
                ),
                SLAPolicyRow.created_at,
                SLAPolicyRow.id,
            )
            return [self._to_entity(r) for r in await self.fetch_all(stmt)]

    async def find_all_active(self) -> Sequence[SLAPolicy]:
        with self._observe("find_all_active"):
            stmt = self.order_by_created(
                select(SLAPolicyRow).where(SLAPolicyRow.is_active.is_(True)),
                SLAPolicyRow.created_at,
                SLAPolicyRow.id,
            )
            return [self._to_entity(r) for r in await self.fetch_all(stmt)]

    async def find_all(self) -> Sequence[SLAPolicy]:
        with self._observe("find_all"):
            stmt = self.order_by_created(
                select(SLAPolicyRow), SLAPolicyRow.created_at, SLAPolicyRow.id
            )
            return [self._to_entity(r) for r in await self.fetch_all(stmt)]

    async def exists_by_name(self, name: str) -> bool:
        with self._observe("exists_by_name"):
            stmt = select(exists().where(func.lower(SLAPolicyRow.name) == name.lower()))
            return bool((await self._session.execute(stmt)).scalar())

    async def exists_by_type_and_priority(
        self, request_type: RequestType, priority: SLAPriority | None
    ) -> bool:
        with self._observe("exists_by_type_and_priority"):
            stmt = select(
                exists().where(
                    SLAPolicyRow.request_type == RequestType(request_type).value,
                    _priority_clause(priority),
                )
            )
            return bool((await self._session.execute(stmt)).scalar())

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _to_entity(row: SLAPolicyRow) -> SLAPolicy:
        return SLAPolicy.reconstitute(
            {
                "id": row.id,
                "name": row.name,
                "request_type": row.request_type,
                "priority": row.priority,
                "response_minutes": row.response_minutes,
                "resolution_minutes": row.resolution_minutes,
                "escalation_minutes": row.escalation_minutes,
                "is_active": row.is_active,
                "created_at": row.created_at,
                "updated_at": row.updated_at,
            }
        )

    @staticmethod
    def _to_row_dict(policy: SLAPolicy) -> dict[str, Any]:
        return {
            "id": policy.id,
            "name": policy.name,
            "request_type": policy.request_type.value,
            "priority": policy.priority.value if policy.priority else None,
            "response_minutes": policy.times.response_minutes,
            "resolution_minutes": policy.times.resolution_minutes,
            "escalation_minutes": policy.times.escalation_minutes,
            "is_active": policy.is_active,
            "created_at": policy.created_at or now_utc(),
            "updated_at": policy.updated_at or now_utc(),
        }
