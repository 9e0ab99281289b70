# src/counsel_core/application/use_cases/invoices/invoice_lifecycle.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Use cases: membership invoice lifecycle.

Purpose:
    Issue invoices, record payment, cancel, and sweep unpaid past-due
    invoices into ``overdue``.

Layer:
    application/use_cases/invoices
"""

from __future__ import annotations

import logging
from datetime import datetime

from counsel_core.application.schemas.dto.billing import (
    CreateInvoiceRequest,
    OverdueSweepResult,
)
from counsel_core.application.services.lifecycle import (
    TransitionSpec,
    apply_transition,
    resolve_repository,
)
from counsel_core.application.uow import UnitOfWork
from counsel_core.domain.entities.base import utc_now
from counsel_core.domain.entities.membership_invoice import MembershipInvoice
from counsel_core.domain.enums.billing import InvoiceStatus
from counsel_core.domain.interfaces.repositories.membership_invoice_repository import (
    MembershipInvoiceRepository,
)
from counsel_core.domain.value_objects.money import Money
from counsel_core.infrastructure.observability.metrics import observe_transition, record_transition

logger = logging.getLogger(__name__)

_SPEC = TransitionSpec(
    entity="membership_invoice", port=MembershipInvoiceRepository, repo_attr="invoices"
)


class CreateInvoiceUseCase:
    """Issue an unpaid invoice."""

    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(
        self, req: CreateInvoiceRequest, *, now: datetime | None = None
    ) -> MembershipInvoice:
        with observe_transition(_SPEC.entity, "create"):
            invoice = MembershipInvoice.create(
                membership_id=req.membership_id,
                amount=Money.of(req.amount, req.currency),
                due_date=req.due_date,
                now=now,
            )
            async with self._uow as tx:
                repo = resolve_repository(tx, _SPEC.repo_attr, MembershipInvoiceRepository)
                await repo.create(invoice)
                await tx.commit()

        logger.info(
            "membership_invoice.create.success",
            extra={"invoice_id": invoice.id, "invoice_number": invoice.invoice_number},
        )
        return invoice


class MarkInvoicePaidUseCase:
    """unpaid | overdue -> paid."""

    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(
        self, *, invoice_id: str, paid_at: datetime | None = None
    ) -> MembershipInvoice:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=invoice_id,
            operation="mark_as_paid",
            transition=lambda i: i.mark_as_paid(paid_at=paid_at),
        )


class CancelInvoiceUseCase:
    """unpaid -> cancelled."""

    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(self, *, invoice_id: str, now: datetime | None = None) -> MembershipInvoice:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=invoice_id,
            operation="cancel",
            transition=lambda i: i.cancel(now=now),
        )


class MarkOverdueInvoicesUseCase:
    """Flag every unpaid invoice past its due date as overdue, in one unit of work."""

    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(self, *, now: datetime | None = None) -> OverdueSweepResult:
        ts = now or utc_now()
        flagged: list[str] = []
        logger.info("membership_invoice.mark_overdue.start", extra={"now": ts.isoformat()})

        async with self._uow as tx:
            repo = resolve_repository(tx, _SPEC.repo_attr, MembershipInvoiceRepository)
            for invoice in await repo.list_unpaid_past_due(ts):
                if invoice.status is not InvoiceStatus.UNPAID or not invoice.is_overdue(ts):
                    continue
                await repo.update(invoice.mark_as_overdue(now=ts))
                flagged.append(invoice.id)
            await tx.commit()

        for _ in flagged:
            record_transition(_SPEC.entity, "mark_as_overdue", "success")
        logger.info("membership_invoice.mark_overdue.success", extra={"count": len(flagged)})
        return OverdueSweepResult(checked_at=ts, invoice_ids=tuple(flagged))
