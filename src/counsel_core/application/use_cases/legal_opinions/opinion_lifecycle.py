# src/counsel_core/application/use_cases/legal_opinions/opinion_lifecycle.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Use cases: legal opinion request lifecycle.

Purpose:
    Drive a legal opinion request from draft to delivery. Status changes are
    appended to the request's status history inside the same unit of work;
    pricing, payment and draft edits leave the status unchanged.

Layer:
    application/use_cases/legal_opinions
"""

from __future__ import annotations

import logging
from datetime import datetime

from counsel_core.application.schemas.dto.workflows import (
    CreateLegalOpinionRequest,
    OpinionDraftChanges,
)
from counsel_core.application.services.lifecycle import (
    TransitionSpec,
    apply_transition,
    resolve_repository,
)
from counsel_core.application.uow import UnitOfWork
from counsel_core.domain.entities.legal_opinion_request import LegalOpinionRequest
from counsel_core.domain.entities.status_history import StatusHistoryEntry
from counsel_core.domain.exceptions.lifecycle import ValidationFailedError
from counsel_core.domain.interfaces.repositories.legal_opinion_repository import (
    LegalOpinionRepository,
)
from counsel_core.domain.value_objects.money import Money
from counsel_core.infrastructure.observability.metrics import observe_transition

logger = logging.getLogger(__name__)

_SPEC = TransitionSpec(
    entity="legal_opinion_request",
    port=LegalOpinionRepository,
    repo_attr="legal_opinions",
    records_history=True,
)


class CreateLegalOpinionRequestUseCase:
    """Open a draft opinion request."""

    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(
        self, req: CreateLegalOpinionRequest, *, now: datetime | None = None
    ) -> LegalOpinionRequest:
        with observe_transition(_SPEC.entity, "create"):
            opinion = LegalOpinionRequest.create(
                client_id=req.client_id,
                opinion_type=req.opinion_type,
                subject=req.subject,
                legal_question=req.legal_question,
                background_context=req.background_context,
                relevant_facts=req.relevant_facts,
                specific_issues=req.specific_issues,
                jurisdiction=req.jurisdiction,
                priority=req.priority,
                delivery_format=req.delivery_format,
                confidentiality_level=req.confidentiality_level,
                requested_delivery_date=req.requested_delivery_date,
                requires_collaboration=req.requires_collaboration,
                now=now,
            )
            async with self._uow as tx:
                repo = resolve_repository(tx, _SPEC.repo_attr, LegalOpinionRepository)
                await repo.create(opinion)
                await repo.add_status_history(
                    StatusHistoryEntry.record(
                        entity_id=opinion.id,
                        from_status=None,
                        to_status=opinion.status,
                        changed_by=req.client_id,
                        now=opinion.created_at,
                    )
                )
                await tx.commit()

        logger.info(
            "legal_opinion_request.create.success",
            extra={"opinion_id": opinion.id, "opinion_number": opinion.opinion_number.value},
        )
        return opinion


class _OpinionTransitionUseCase:
    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow


class SubmitLegalOpinionUseCase(_OpinionTransitionUseCase):
    """draft -> submitted."""

    async def execute(
        self, *, opinion_id: str, changed_by: str | None = None, now: datetime | None = None
    ) -> LegalOpinionRequest:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=opinion_id,
            operation="submit",
            transition=lambda o: o.submit(now=now),
            changed_by=changed_by,
            now=now,
        )


class StartIntakeReviewUseCase(_OpinionTransitionUseCase):
    """submitted -> under_review."""

    async def execute(
        self, *, opinion_id: str, reviewer_id: str, now: datetime | None = None
    ) -> LegalOpinionRequest:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=opinion_id,
            operation="start_intake_review",
            transition=lambda o: o.start_intake_review(reviewer_id, now=now),
            changed_by=reviewer_id,
            now=now,
        )


class AssignLawyerUseCase(_OpinionTransitionUseCase):
    """submitted | under_review -> assigned."""

    async def execute(
        self,
        *,
        opinion_id: str,
        lawyer_id: str,
        changed_by: str | None = None,
        now: datetime | None = None,
    ) -> LegalOpinionRequest:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=opinion_id,
            operation="assign_to_lawyer",
            transition=lambda o: o.assign_to_lawyer(lawyer_id, now=now),
            changed_by=changed_by,
            now=now,
        )


class StartResearchUseCase(_OpinionTransitionUseCase):
    async def execute(
        self, *, opinion_id: str, changed_by: str | None = None, now: datetime | None = None
    ) -> LegalOpinionRequest:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=opinion_id,
            operation="start_research",
            transition=lambda o: o.start_research(now=now),
            changed_by=changed_by,
            now=now,
        )


class StartDraftingUseCase(_OpinionTransitionUseCase):
    async def execute(
        self, *, opinion_id: str, changed_by: str | None = None, now: datetime | None = None
    ) -> LegalOpinionRequest:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=opinion_id,
            operation="start_drafting",
            transition=lambda o: o.start_drafting(now=now),
            changed_by=changed_by,
            now=now,
        )


class SubmitDraftForReviewUseCase(_OpinionTransitionUseCase):
    """drafting -> internal_review (new draft version)."""

    async def execute(
        self, *, opinion_id: str, changed_by: str | None = None, now: datetime | None = None
    ) -> LegalOpinionRequest:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=opinion_id,
            operation="submit_for_review",
            transition=lambda o: o.submit_for_review(now=now),
            changed_by=changed_by,
            now=now,
        )


class RequestRevisionUseCase(_OpinionTransitionUseCase):
    async def execute(
        self,
        *,
        opinion_id: str,
        reason: str,
        changed_by: str | None = None,
        now: datetime | None = None,
    ) -> LegalOpinionRequest:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=opinion_id,
            operation="request_revision",
            transition=lambda o: o.request_revision(reason, now=now),
            changed_by=changed_by,
            reason=reason,
            now=now,
        )


class StartRevisingUseCase(_OpinionTransitionUseCase):
    async def execute(
        self, *, opinion_id: str, changed_by: str | None = None, now: datetime | None = None
    ) -> LegalOpinionRequest:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=opinion_id,
            operation="start_revising",
            transition=lambda o: o.start_revising(now=now),
            changed_by=changed_by,
            now=now,
        )


class SetEstimatedCostUseCase(_OpinionTransitionUseCase):
    """Quote a cost; explicit amount or the type-scaled ``base_fee``."""

    async def execute(
        self,
        *,
        opinion_id: str,
        cost: Money | None = None,
        base_fee: Money | None = None,
        now: datetime | None = None,
    ) -> LegalOpinionRequest:
        def _quote(o: LegalOpinionRequest) -> LegalOpinionRequest:
            if cost is not None:
                return o.set_estimated_cost(cost, now=now)
            if base_fee is not None:
                return o.set_estimated_cost(o.estimate_cost(base_fee), now=now)
            raise ValidationFailedError("Either cost or base_fee is required")

        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=opinion_id,
            operation="set_estimated_cost",
            transition=_quote,
        )


class MarkOpinionPaidUseCase(_OpinionTransitionUseCase):
    async def execute(
        self,
        *,
        opinion_id: str,
        payment_reference: str,
        final_cost: Money | None = None,
        now: datetime | None = None,
    ) -> LegalOpinionRequest:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=opinion_id,
            operation="mark_as_paid",
            transition=lambda o: o.mark_as_paid(payment_reference, final_cost, now=now),
        )


class CompleteLegalOpinionUseCase(_OpinionTransitionUseCase):
    """internal_review | revising -> completed; the request must be paid."""

    async def execute(
        self, *, opinion_id: str, changed_by: str | None = None, now: datetime | None = None
    ) -> LegalOpinionRequest:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=opinion_id,
            operation="complete",
            transition=lambda o: o.complete(now=now),
            changed_by=changed_by,
            now=now,
        )


class CancelLegalOpinionUseCase(_OpinionTransitionUseCase):
    async def execute(
        self,
        *,
        opinion_id: str,
        reason: str,
        changed_by: str | None = None,
        now: datetime | None = None,
    ) -> LegalOpinionRequest:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=opinion_id,
            operation="cancel",
            transition=lambda o: o.cancel(reason, now=now),
            changed_by=changed_by,
            reason=reason,
            now=now,
        )


class RejectLegalOpinionUseCase(_OpinionTransitionUseCase):
    async def execute(
        self,
        *,
        opinion_id: str,
        reason: str,
        changed_by: str | None = None,
        now: datetime | None = None,
    ) -> LegalOpinionRequest:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=opinion_id,
            operation="reject",
            transition=lambda o: o.reject(reason, now=now),
            changed_by=changed_by,
            reason=reason,
            now=now,
        )


class UpdateOpinionDraftUseCase(_OpinionTransitionUseCase):
    """Apply a partial content update to a draft request."""

    async def execute(
        self, *, opinion_id: str, changes: OpinionDraftChanges, now: datetime | None = None
    ) -> LegalOpinionRequest:
        def _edit(o: LegalOpinionRequest) -> LegalOpinionRequest:
            if changes.subject is not None:
                o = o.update_subject(changes.subject, now=now)
            if changes.legal_question is not None:
                o = o.update_legal_question(changes.legal_question, now=now)
            if changes.background_context is not None:
                o = o.update_background_context(changes.background_context, now=now)
            if changes.relevant_facts is not None:
                o = o.update_relevant_facts(changes.relevant_facts, now=now)
            if changes.specific_issues is not None:
                o = o.update_specific_issues(changes.specific_issues, now=now)
            if changes.jurisdiction is not None:
                o = o.update_jurisdiction(changes.jurisdiction, now=now)
            if changes.priority is not None:
                o = o.change_priority(changes.priority, now=now)
            return o

        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=opinion_id,
            operation="update_draft",
            transition=_edit,
        )
