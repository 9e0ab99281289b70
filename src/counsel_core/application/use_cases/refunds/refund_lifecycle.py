# src/counsel_core/application/use_cases/refunds/refund_lifecycle.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Use cases: refund lifecycle.

Purpose:
    Open, review (approve/reject) and process refunds. Each operation runs
    inside one unit of work and persists the instance the transition returns.

Layer:
    application/use_cases/refunds
"""

from __future__ import annotations

import logging
from datetime import datetime

from counsel_core.application.schemas.dto.billing import CreateRefundRequest
from counsel_core.application.services.lifecycle import (
    TransitionSpec,
    apply_transition,
    resolve_repository,
)
from counsel_core.application.uow import UnitOfWork
from counsel_core.domain.entities.refund import Refund
from counsel_core.domain.interfaces.repositories.refund_repository import RefundRepository
from counsel_core.infrastructure.observability.metrics import observe_transition

logger = logging.getLogger(__name__)

_SPEC = TransitionSpec(entity="refund", port=RefundRepository, repo_attr="refunds")


class CreateRefundUseCase:
    """Open a pending refund."""

    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(self, req: CreateRefundRequest, *, now: datetime | None = None) -> Refund:
        with observe_transition("refund", "create"):
            refund = Refund.create(
                user_id=req.user_id,
                amount=req.amount,
                currency=req.currency,
                reason=req.reason,
                transaction_log_id=req.transaction_log_id,
                payment_id=req.payment_id,
                now=now,
            )
            async with self._uow as tx:
                repo = resolve_repository(tx, _SPEC.repo_attr, RefundRepository)
                await repo.create(refund)
                await tx.commit()

        logger.info(
            "refund.create.success",
            extra={"refund_id": refund.id, "user_id": refund.user_id, "amount": str(refund.amount)},
        )
        return refund


class ApproveRefundUseCase:
    """pending -> approved."""

    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(
        self,
        *,
        refund_id: str,
        reviewed_by: str,
        review_notes: str | None = None,
        now: datetime | None = None,
    ) -> Refund:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=refund_id,
            operation="approve",
            transition=lambda r: r.approve(
                reviewed_by=reviewed_by, review_notes=review_notes, now=now
            ),
        )


class RejectRefundUseCase:
    """pending -> rejected."""

    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(
        self,
        *,
        refund_id: str,
        reviewed_by: str,
        review_notes: str | None = None,
        now: datetime | None = None,
    ) -> Refund:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=refund_id,
            operation="reject",
            transition=lambda r: r.reject(
                reviewed_by=reviewed_by, review_notes=review_notes, now=now
            ),
        )


class ProcessRefundUseCase:
    """approved -> processed, recording the gateway reference."""

    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(
        self, *, refund_id: str, refund_reference: str, now: datetime | None = None
    ) -> Refund:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=refund_id,
            operation="process",
            transition=lambda r: r.process(refund_reference, now=now),
        )
