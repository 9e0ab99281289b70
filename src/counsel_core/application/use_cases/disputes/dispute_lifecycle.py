# src/counsel_core/application/use_cases/disputes/dispute_lifecycle.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Use cases: dispute lifecycle.

Purpose:
    Open disputes (guarding against a second active dispute on the same
    related entity), review, escalate, resolve and close them.

Layer:
    application/use_cases/disputes

Notes:
    The "one active dispute per user and related entity" rule is enforced
    here through ``DisputeRepository.has_active_dispute``, not inside the
    ``Dispute`` entity.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from counsel_core.application.schemas.dto.billing import CreateDisputeRequest
from counsel_core.application.services.lifecycle import (
    TransitionSpec,
    apply_transition,
    resolve_repository,
)
from counsel_core.application.uow import UnitOfWork
from counsel_core.domain.entities.dispute import Dispute
from counsel_core.domain.enums.billing import DisputePriority
from counsel_core.domain.exceptions.lifecycle import ActiveDisputeExistsError
from counsel_core.domain.interfaces.repositories.dispute_repository import DisputeRepository
from counsel_core.infrastructure.observability.metrics import observe_transition

logger = logging.getLogger(__name__)

_SPEC = TransitionSpec(entity="dispute", port=DisputeRepository, repo_attr="disputes")


class CreateDisputeUseCase:
    """Open a dispute unless one is already active for the same related entity.

    Raises:
        ValidationFailedError: Zero or several related entity ids, short texts.
        ActiveDisputeExistsError: The user already has an active dispute on it.
    """

    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(self, req: CreateDisputeRequest, *, now: datetime | None = None) -> Dispute:
        with observe_transition("dispute", "create"):
            dispute = Dispute.create(
                user_id=req.user_id,
                reason=req.reason,
                description=req.description,
                consultation_id=req.consultation_id,
                legal_opinion_id=req.legal_opinion_id,
                service_request_id=req.service_request_id,
                litigation_case_id=req.litigation_case_id,
                evidence=req.evidence,
                priority=req.priority,
                now=now,
            )
            related_type, related_id = dispute.related_entity

            async with self._uow as tx:
                repo = resolve_repository(tx, _SPEC.repo_attr, DisputeRepository)
                if await repo.has_active_dispute(req.user_id, related_type, related_id):
                    logger.info(
                        "dispute.create.already_active",
                        extra={
                            "user_id": req.user_id,
                            "related_type": related_type.value,
                            "related_id": related_id,
                        },
                    )
                    raise ActiveDisputeExistsError(
                        "You already have an active dispute for this entity",
                        details={"related_type": related_type.value, "related_id": related_id},
                    )
                await repo.create(dispute)
                await tx.commit()

        logger.info(
            "dispute.create.success",
            extra={"dispute_id": dispute.id, "related_type": related_type.value},
        )
        return dispute


class StartDisputeReviewUseCase:
    """open -> under_review."""

    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(self, *, dispute_id: str, now: datetime | None = None) -> Dispute:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=dispute_id,
            operation="start_review",
            transition=lambda d: d.start_review(now=now),
        )


class EscalateDisputeUseCase:
    """open | under_review -> escalated."""

    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(
        self,
        *,
        dispute_id: str,
        escalated_to: str,
        escalation_reason: str,
        new_priority: DisputePriority | None = None,
        now: datetime | None = None,
    ) -> Dispute:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=dispute_id,
            operation="escalate",
            transition=lambda d: d.escalate(
                escalated_to=escalated_to,
                escalation_reason=escalation_reason,
                new_priority=new_priority,
                now=now,
            ),
        )


class ResolveDisputeUseCase:
    """under_review | escalated -> resolved."""

    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(
        self,
        *,
        dispute_id: str,
        resolved_by: str,
        resolution: str,
        resolution_data: Mapping[str, Any] | None = None,
        now: datetime | None = None,
    ) -> Dispute:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=dispute_id,
            operation="resolve",
            transition=lambda d: d.resolve(
                resolved_by=resolved_by,
                resolution=resolution,
                resolution_data=resolution_data,
                now=now,
            ),
        )


class CloseDisputeUseCase:
    """resolved -> closed."""

    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(self, *, dispute_id: str, now: datetime | None = None) -> Dispute:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=dispute_id,
            operation="close",
            transition=lambda d: d.close(now=now),
        )


class UpdateDisputePriorityUseCase:
    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(
        self, *, dispute_id: str, priority: DisputePriority, now: datetime | None = None
    ) -> Dispute:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=dispute_id,
            operation="update_priority",
            transition=lambda d: d.update_priority(priority, now=now),
        )


class AddDisputeEvidenceUseCase:
    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(
        self, *, dispute_id: str, evidence: Mapping[str, Any], now: datetime | None = None
    ) -> Dispute:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=dispute_id,
            operation="add_evidence",
            transition=lambda d: d.add_evidence(evidence, now=now),
        )
