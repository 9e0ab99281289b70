# src/counsel_core/application/use_cases/sla/sla_policies.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Use cases: SLA policy administration.

Purpose:
    Create, update and seed SLA policies. Names are unique and at most one
    policy exists per ``(request_type, priority)`` pair (``None`` priority
    being the wildcard for the type).

Layer:
    application/use_cases/sla
"""

from __future__ import annotations

import logging
from datetime import datetime

from counsel_core.application.schemas.dto.sla import (
    CreateSLAPolicyRequest,
    SeedPoliciesResult,
    UpdateSLAPolicyRequest,
)
from counsel_core.application.services.lifecycle import resolve_repository
from counsel_core.application.uow import UnitOfWork
from counsel_core.domain.entities.base import utc_now
from counsel_core.domain.entities.sla_policy import SLAPolicy
from counsel_core.domain.enums.sla import RequestType, SLAPriority
from counsel_core.domain.exceptions.lifecycle import NotFoundError, PreconditionFailedError
from counsel_core.domain.interfaces.repositories.sla_policy_repository import (
    SLAPolicyRepository,
)
from counsel_core.infrastructure.observability.metrics import observe_transition

logger = logging.getLogger(__name__)

__all__ = [
    "CreateSLAPolicyUseCase",
    "UpdateSLAPolicyUseCase",
    "SeedDefaultSLAPoliciesUseCase",
]

_ENTITY = "sla_policy"
_REPO_ATTR = "sla_policies"


class CreateSLAPolicyUseCase:
    """Create a policy after checking name and pair uniqueness."""

    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(
        self, req: CreateSLAPolicyRequest, *, now: datetime | None = None
    ) -> SLAPolicy:
        policy = SLAPolicy.create(
            name=req.name,
            request_type=req.request_type,
            response_minutes=req.response_minutes,
            resolution_minutes=req.resolution_minutes,
            escalation_minutes=req.escalation_minutes,
            priority=req.priority,
            is_active=req.is_active,
            now=now,
        )

        with observe_transition(_ENTITY, "create"):
            async with self._uow as tx:
                repo = resolve_repository(tx, _REPO_ATTR, SLAPolicyRepository)
                if await repo.exists_by_name(policy.name):
                    raise PreconditionFailedError(
                        "SLA policy name already exists", details={"name": policy.name}
                    )
                if await repo.exists_by_type_and_priority(policy.request_type, policy.priority):
                    raise PreconditionFailedError(
                        "SLA policy already exists for request type and priority",
                        details={"key": policy.key},
                    )
                await repo.save(policy)
                await tx.commit()

        logger.info(
            "sla_policy.create.success",
            extra={"policy_id": policy.id, "key": policy.key, "policy_name": policy.name},
        )
        return policy


class UpdateSLAPolicyUseCase:
    """Rename, re-budget and (de)activate a policy in one step."""

    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(
        self, req: UpdateSLAPolicyRequest, *, now: datetime | None = None
    ) -> SLAPolicy:
        ts = now or utc_now()
        with observe_transition(_ENTITY, "update"):
            async with self._uow as tx:
                repo = resolve_repository(tx, _REPO_ATTR, SLAPolicyRepository)
                policy = await repo.find_by_id(req.policy_id)
                if policy is None:
                    raise NotFoundError(_ENTITY, req.policy_id)

                if req.name is not None and req.name != policy.name:
                    if await repo.exists_by_name(req.name):
                        raise PreconditionFailedError(
                            "SLA policy name already exists", details={"name": req.name}
                        )
                    policy = policy.rename(req.name, now=ts)

                if (
                    req.response_minutes is not None
                    or req.resolution_minutes is not None
                    or req.escalation_minutes is not None
                    or req.clear_escalation
                ):
                    policy = policy.update_times(
                        response_minutes=req.response_minutes,
                        resolution_minutes=req.resolution_minutes,
                        escalation_minutes=req.escalation_minutes,
                        clear_escalation=req.clear_escalation,
                        now=ts,
                    )

                if req.is_active is True:
                    policy = policy.activate(now=ts)
                elif req.is_active is False:
                    policy = policy.deactivate(now=ts)

                await repo.save(policy)
                await tx.commit()

        logger.info("sla_policy.update.success", extra={"policy_id": policy.id})
        return policy


class SeedDefaultSLAPoliciesUseCase:
    """Create the built-in policy for every request type and priority not yet configured."""

    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(self, *, now: datetime | None = None) -> SeedPoliciesResult:
        ts = now or utc_now()
        created: list[str] = []
        skipped: list[str] = []

        async with self._uow as tx:
            repo = resolve_repository(tx, _REPO_ATTR, SLAPolicyRepository)
            for request_type in RequestType:
                for priority in SLAPriority:
                    policy = SLAPolicy.create_default(request_type, priority, now=ts)
                    if await repo.exists_by_type_and_priority(
                        request_type, priority
                    ) or await repo.exists_by_name(policy.name):
                        skipped.append(policy.key)
                        continue
                    await repo.save(policy)
                    created.append(policy.key)
            await tx.commit()

        logger.info(
            "sla_policy.seed.success",
            extra={"created_count": len(created), "skipped_count": len(skipped)},
        )
        return SeedPoliciesResult(created=tuple(created), skipped=tuple(skipped))
