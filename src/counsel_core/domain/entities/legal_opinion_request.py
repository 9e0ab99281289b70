# src/counsel_core/domain/entities/legal_opinion_request.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Legal Opinion Request Entity.

Purpose:
    Immutable client request for a formal legal opinion, tracked through
    intake, assignment, research, drafting, internal review, revision and
    delivery.

Layer:
    domain/entities

Transitions:
    draft --submit--> submitted
    submitted | under_review --assign_to_lawyer--> assigned
    assigned --start_research--> research_phase --start_drafting--> drafting
    drafting --submit_for_review--> internal_review
    internal_review --request_revision--> revision_requested --start_revising--> revising
    internal_review | revising --complete--> completed   (requires is_paid)
    any non-terminal --cancel--> cancelled
    any non-terminal --reject--> rejected

Notes:
    Payment (``mark_as_paid``) and pricing (``set_estimated_cost``) never
    change the status. Content edits are only accepted while in ``draft``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from counsel_core.domain.entities.base import BaseEntity, ensure_utc, new_id, utc_now
from counsel_core.domain.enums.legal_opinion import (
    ConfidentialityLevel,
    DeliveryFormat,
    OpinionPriority,
    OpinionStatus,
    OpinionType,
)
from counsel_core.domain.exceptions.lifecycle import (
    InvalidTransitionError,
    PreconditionFailedError,
    ValidationFailedError,
)
from counsel_core.domain.value_objects.money import Money
from counsel_core.domain.value_objects.opinion import (
    BackgroundContext,
    Jurisdiction,
    LegalQuestion,
    OpinionNumber,
    OpinionSubject,
    RelevantFacts,
)

__all__ = ["LegalOpinionRequest"]

_ENTITY = "legal_opinion_request"

_S = OpinionStatus
_CAN_ASSIGN = (_S.SUBMITTED, _S.UNDER_REVIEW)
_CAN_COMPLETE = (_S.INTERNAL_REVIEW, _S.REVISING)
_REQUIRED_FOR_SUBMIT = (
    "subject",
    "legal_question",
    "background_context",
    "relevant_facts",
    "jurisdiction",
)


def _wrap(cls: type, value: Any) -> Any:
    if value is None or isinstance(value, cls):
        return value
    return cls(value)


def _money_or_none(value: Any) -> Money | None:
    if value is None or isinstance(value, Money):
        return value
    return Money.from_dict(value)


@dataclass(frozen=True, slots=True)
class LegalOpinionRequest(BaseEntity):
    """Legal opinion request.

    Attributes:
        id: Opaque identifier.
        opinion_number: Human-facing number (``OP-YYYYMMDD-NNNN``).
        client_id: Requesting client.
        opinion_type: Kind of opinion requested.
        status: Current lifecycle status.
        subject: Short subject line.
        legal_question: Question to be answered.
        background_context: Background of the matter.
        relevant_facts: Facts the opinion relies on.
        specific_issues: Optional sub-questions.
        jurisdiction: Governing jurisdiction.
        priority: Requested delivery speed.
        assigned_lawyer_id: Lawyer working the request.
        reviewed_by: Internal reviewer.
        requested_delivery_date: Client's requested delivery date.
        actual_delivery_date: Delivery instant once completed.
        expected_completion_date: Derived at submission from the priority.
        draft_version: Incremented on each submission for internal review.
        final_version: Draft version delivered on completion.
        delivery_format: Document format delivered.
        include_executive_summary: Deliverable flag.
        include_citations: Deliverable flag.
        include_recommendations: Deliverable flag.
        estimated_cost: Quoted cost.
        final_cost: Charged cost.
        is_paid: Payment received.
        payment_reference: Payment gateway reference.
        revision_reason: Last requested revision reason.
        cancellation_reason: Reason when cancelled.
        rejection_reason: Reason when rejected.
        confidentiality_level: Handling level.
        is_urgent: Client flagged urgent.
        requires_collaboration: More than one lawyer needed.
        submitted_at: Submission timestamp.
        assigned_at: Assignment timestamp.
        research_started_at: Research start.
        draft_completed_at: Last draft completion.
        review_started_at: Last internal review start.
        completed_at: Completion timestamp.
        created_at: Creation timestamp (UTC).
        updated_at: Last change timestamp (UTC).
        deleted_at: Soft-delete marker.
    """

    id: str
    opinion_number: OpinionNumber
    client_id: str
    opinion_type: OpinionType
    status: OpinionStatus = OpinionStatus.DRAFT
    subject: OpinionSubject | None = None
    legal_question: LegalQuestion | None = None
    background_context: BackgroundContext | None = None
    relevant_facts: RelevantFacts | None = None
    specific_issues: str | None = None
    jurisdiction: Jurisdiction | None = None
    priority: OpinionPriority = OpinionPriority.STANDARD
    assigned_lawyer_id: str | None = None
    reviewed_by: str | None = None
    requested_delivery_date: datetime | None = None
    actual_delivery_date: datetime | None = None
    expected_completion_date: datetime | None = None
    draft_version: int = 0
    final_version: int | None = None
    delivery_format: DeliveryFormat = DeliveryFormat.PDF
    include_executive_summary: bool = True
    include_citations: bool = True
    include_recommendations: bool = True
    estimated_cost: Money | None = None
    final_cost: Money | None = None
    is_paid: bool = False
    payment_reference: str | None = None
    revision_reason: str | None = None
    cancellation_reason: str | None = None
    rejection_reason: str | None = None
    confidentiality_level: ConfidentialityLevel = ConfidentialityLevel.STANDARD
    is_urgent: bool = False
    requires_collaboration: bool = False
    submitted_at: datetime | None = None
    assigned_at: datetime | None = None
    research_started_at: datetime | None = None
    draft_completed_at: datetime | None = None
    review_started_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    def __post_init__(self) -> None:
        """Coerce enums/value objects and check structural invariants."""
        if not self.client_id:
            raise ValidationFailedError("Opinion request requires a client id")
        if self.draft_version < 0:
            raise ValidationFailedError("draft_version must be >= 0")
        object.__setattr__(self, "opinion_number", _wrap(OpinionNumber, self.opinion_number))
        object.__setattr__(self, "opinion_type", OpinionType(self.opinion_type))
        object.__setattr__(self, "status", OpinionStatus(self.status))
        object.__setattr__(self, "priority", OpinionPriority(self.priority))
        object.__setattr__(self, "delivery_format", DeliveryFormat(self.delivery_format))
        object.__setattr__(
            self, "confidentiality_level", ConfidentialityLevel(self.confidentiality_level)
        )
        object.__setattr__(self, "subject", _wrap(OpinionSubject, self.subject))
        object.__setattr__(self, "legal_question", _wrap(LegalQuestion, self.legal_question))
        object.__setattr__(
            self, "background_context", _wrap(BackgroundContext, self.background_context)
        )
        object.__setattr__(self, "relevant_facts", _wrap(RelevantFacts, self.relevant_facts))
        if self.status is OpinionStatus.COMPLETED and not self.is_paid:
            raise ValidationFailedError("A completed opinion request must be paid")
        self._normalize_datetimes(
            "requested_delivery_date",
            "actual_delivery_date",
            "expected_completion_date",
            "submitted_at",
            "assigned_at",
            "research_started_at",
            "draft_completed_at",
            "review_started_at",
            "completed_at",
            "created_at",
            "updated_at",
            "deleted_at",
        )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        *,
        client_id: str,
        opinion_type: OpinionType,
        subject: str | OpinionSubject | None = None,
        legal_question: str | LegalQuestion | None = None,
        background_context: str | BackgroundContext | None = None,
        relevant_facts: str | RelevantFacts | None = None,
        jurisdiction: Jurisdiction | None = None,
        specific_issues: str | None = None,
        priority: OpinionPriority = OpinionPriority.STANDARD,
        delivery_format: DeliveryFormat = DeliveryFormat.PDF,
        confidentiality_level: ConfidentialityLevel = ConfidentialityLevel.STANDARD,
        requested_delivery_date: datetime | None = None,
        include_executive_summary: bool = True,
        include_citations: bool = True,
        include_recommendations: bool = True,
        requires_collaboration: bool = False,
        opinion_number: OpinionNumber | None = None,
        request_id: str | None = None,
        now: datetime | None = None,
    ) -> LegalOpinionRequest:
        """Open a draft request. Content may be completed before :meth:`submit`.

        Raises:
            ValidationFailedError: If a provided text field violates its bounds.
        """
        ts = now or utc_now()
        return cls(
            id=request_id or new_id(),
            opinion_number=opinion_number or OpinionNumber.generate(ts),
            client_id=client_id,
            opinion_type=opinion_type,
            subject=subject,
            legal_question=legal_question,
            background_context=background_context,
            relevant_facts=relevant_facts,
            specific_issues=specific_issues,
            jurisdiction=jurisdiction,
            priority=priority,
            delivery_format=delivery_format,
            confidentiality_level=confidentiality_level,
            requested_delivery_date=requested_delivery_date,
            include_executive_summary=include_executive_summary,
            include_citations=include_citations,
            include_recommendations=include_recommendations,
            requires_collaboration=requires_collaboration,
            is_urgent=priority is OpinionPriority.URGENT,
            created_at=ts,
            updated_at=ts,
        )

    @classmethod
    def reconstitute(cls, data: Mapping[str, Any]) -> LegalOpinionRequest:
        """Rebuild a request from :meth:`to_dict` output or a persistence row."""
        jurisdiction = data.get("jurisdiction")
        values = dict(data)
        if isinstance(jurisdiction, Mapping):
            values["jurisdiction"] = Jurisdiction.from_dict(jurisdiction)
        values["estimated_cost"] = _money_or_none(data.get("estimated_cost"))
        values["final_cost"] = _money_or_none(data.get("final_cost"))
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "opinion_number": self.opinion_number.value,
            "client_id": self.client_id,
            "opinion_type": self.opinion_type.value,
            "status": self.status.value,
            "subject": self.subject.value if self.subject else None,
            "legal_question": self.legal_question.value if self.legal_question else None,
            "background_context": (
                self.background_context.value if self.background_context else None
            ),
            "relevant_facts": self.relevant_facts.value if self.relevant_facts else None,
            "specific_issues": self.specific_issues,
            "jurisdiction": self.jurisdiction.to_dict() if self.jurisdiction else None,
            "priority": self.priority.value,
            "assigned_lawyer_id": self.assigned_lawyer_id,
            "reviewed_by": self.reviewed_by,
            "requested_delivery_date": self.requested_delivery_date,
            "actual_delivery_date": self.actual_delivery_date,
            "expected_completion_date": self.expected_completion_date,
            "draft_version": self.draft_version,
            "final_version": self.final_version,
            "delivery_format": self.delivery_format.value,
            "include_executive_summary": self.include_executive_summary,
            "include_citations": self.include_citations,
            "include_recommendations": self.include_recommendations,
            "estimated_cost": self.estimated_cost.to_dict() if self.estimated_cost else None,
            "final_cost": self.final_cost.to_dict() if self.final_cost else None,
            "is_paid": self.is_paid,
            "payment_reference": self.payment_reference,
            "revision_reason": self.revision_reason,
            "cancellation_reason": self.cancellation_reason,
            "rejection_reason": self.rejection_reason,
            "confidentiality_level": self.confidentiality_level.value,
            "is_urgent": self.is_urgent,
            "requires_collaboration": self.requires_collaboration,
            "submitted_at": self.submitted_at,
            "assigned_at": self.assigned_at,
            "research_started_at": self.research_started_at,
            "draft_completed_at": self.draft_completed_at,
            "review_started_at": self.review_started_at,
            "completed_at": self.completed_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "deleted_at": self.deleted_at,
        }

    # ------------------------------------------------------------------
    # Workflow transitions
    # ------------------------------------------------------------------

    def submit(self, *, now: datetime | None = None) -> LegalOpinionRequest:
        """draft -> submitted; stamps the expected completion date.

        Raises:
            InvalidTransitionError: If not in draft.
            PreconditionFailedError: If required content is missing.
        """
        self._require("submit", _S.DRAFT)
        missing = [name for name in _REQUIRED_FOR_SUBMIT if getattr(self, name) is None]
        if missing:
            raise PreconditionFailedError(
                "Opinion request is missing required information for submission",
                details={"missing": missing},
            )
        ts = now or utc_now()
        return self._evolve(
            status=_S.SUBMITTED,
            submitted_at=ts,
            expected_completion_date=ts + timedelta(days=self.priority.turnaround_days),
            updated_at=ts,
        )

    def start_intake_review(
        self, reviewer_id: str | None = None, *, now: datetime | None = None
    ) -> LegalOpinionRequest:
        """submitted -> under_review."""
        self._require("start_intake_review", _S.SUBMITTED)
        ts = now or utc_now()
        return self._evolve(
            status=_S.UNDER_REVIEW,
            reviewed_by=reviewer_id or self.reviewed_by,
            review_started_at=ts,
            updated_at=ts,
        )

    def assign_to_lawyer(
        self, lawyer_id: str, *, now: datetime | None = None
    ) -> LegalOpinionRequest:
        """submitted | under_review -> assigned."""
        self._require("assign_to_lawyer", *_CAN_ASSIGN)
        if not (lawyer_id or "").strip():
            raise ValidationFailedError("Lawyer id is required")
        ts = now or utc_now()
        return self._evolve(
            status=_S.ASSIGNED,
            assigned_lawyer_id=lawyer_id,
            assigned_at=ts,
            updated_at=ts,
        )

    def start_research(self, *, now: datetime | None = None) -> LegalOpinionRequest:
        """assigned -> research_phase."""
        self._require("start_research", _S.ASSIGNED)
        ts = now or utc_now()
        return self._evolve(status=_S.RESEARCH_PHASE, research_started_at=ts, updated_at=ts)

    def start_drafting(self, *, now: datetime | None = None) -> LegalOpinionRequest:
        """research_phase -> drafting."""
        self._require("start_drafting", _S.RESEARCH_PHASE)
        return self._evolve(status=_S.DRAFTING, updated_at=now or utc_now())

    def submit_for_review(self, *, now: datetime | None = None) -> LegalOpinionRequest:
        """drafting -> internal_review; bumps the draft version."""
        self._require("submit_for_review", _S.DRAFTING)
        ts = now or utc_now()
        return self._evolve(
            status=_S.INTERNAL_REVIEW,
            draft_version=self.draft_version + 1,
            draft_completed_at=ts,
            review_started_at=ts,
            updated_at=ts,
        )

    def request_revision(
        self, reason: str, *, now: datetime | None = None
    ) -> LegalOpinionRequest:
        """internal_review -> revision_requested."""
        self._require("request_revision", _S.INTERNAL_REVIEW)
        if not (reason or "").strip():
            raise ValidationFailedError("A revision reason is required")
        return self._evolve(
            status=_S.REVISION_REQUESTED,
            revision_reason=reason.strip(),
            updated_at=now or utc_now(),
        )

    def start_revising(self, *, now: datetime | None = None) -> LegalOpinionRequest:
        """revision_requested -> revising."""
        self._require("start_revising", _S.REVISION_REQUESTED)
        return self._evolve(status=_S.REVISING, updated_at=now or utc_now())

    def complete(self, *, now: datetime | None = None) -> LegalOpinionRequest:
        """internal_review | revising -> completed.

        Raises:
            PreconditionFailedError: If the request is not paid (checked first).
            InvalidTransitionError: If the status does not allow completion.
        """
        if not self.is_paid:
            raise PreconditionFailedError(
                "Cannot complete opinion request: not paid",
                details={"id": self.id, "current_status": self.status.value},
            )
        self._require("complete", *_CAN_COMPLETE)
        ts = now or utc_now()
        return self._evolve(
            status=_S.COMPLETED,
            completed_at=ts,
            actual_delivery_date=ts,
            final_version=self.draft_version,
            updated_at=ts,
        )

    def cancel(self, reason: str, *, now: datetime | None = None) -> LegalOpinionRequest:
        """Any non-terminal status -> cancelled."""
        self._require_open("cancel")
        return self._evolve(
            status=_S.CANCELLED,
            cancellation_reason=(reason or "").strip() or None,
            updated_at=now or utc_now(),
        )

    def reject(self, reason: str, *, now: datetime | None = None) -> LegalOpinionRequest:
        """Any non-terminal status -> rejected."""
        self._require_open("reject")
        return self._evolve(
            status=_S.REJECTED,
            rejection_reason=(reason or "").strip() or None,
            updated_at=now or utc_now(),
        )

    # ------------------------------------------------------------------
    # Pricing and payment
    # ------------------------------------------------------------------

    def set_estimated_cost(
        self, cost: Money, *, now: datetime | None = None
    ) -> LegalOpinionRequest:
        """Record the quoted cost; only before payment."""
        self._require_open("set_estimated_cost")
        if self.is_paid:
            raise PreconditionFailedError(
                "Cannot change the estimated cost of a paid opinion request",
                details={"id": self.id},
            )
        return self._evolve(estimated_cost=cost, updated_at=now or utc_now())

    def mark_as_paid(
        self,
        payment_reference: str,
        final_cost: Money | None = None,
        *,
        now: datetime | None = None,
    ) -> LegalOpinionRequest:
        """Record payment. The status is left unchanged."""
        self._require_open("mark_as_paid")
        if self.is_paid:
            raise PreconditionFailedError(
                "Opinion request is already marked as paid",
                details={"id": self.id, "payment_reference": self.payment_reference},
            )
        if not (payment_reference or "").strip():
            raise ValidationFailedError("Payment reference is required")
        return self._evolve(
            is_paid=True,
            payment_reference=payment_reference.strip(),
            final_cost=final_cost or self.final_cost,
            updated_at=now or utc_now(),
        )

    def estimate_cost(self, base_fee: Money) -> Money:
        """Return ``base_fee`` scaled by the opinion type's price multiplier."""
        return base_fee.multiply(self.opinion_type.price_multiplier)

    # ------------------------------------------------------------------
    # Draft edits
    # ------------------------------------------------------------------

    def update_subject(self, subject: str, *, now: datetime | None = None) -> LegalOpinionRequest:
        return self._edit("update_subject", now, subject=OpinionSubject(subject))

    def update_legal_question(
        self, question: str, *, now: datetime | None = None
    ) -> LegalOpinionRequest:
        return self._edit("update_legal_question", now, legal_question=LegalQuestion(question))

    def update_background_context(
        self, context: str, *, now: datetime | None = None
    ) -> LegalOpinionRequest:
        return self._edit(
            "update_background_context", now, background_context=BackgroundContext(context)
        )

    def update_relevant_facts(
        self, facts: str, *, now: datetime | None = None
    ) -> LegalOpinionRequest:
        return self._edit("update_relevant_facts", now, relevant_facts=RelevantFacts(facts))

    def update_specific_issues(
        self, issues: str | None, *, now: datetime | None = None
    ) -> LegalOpinionRequest:
        return self._edit("update_specific_issues", now, specific_issues=issues)

    def update_jurisdiction(
        self, jurisdiction: Jurisdiction, *, now: datetime | None = None
    ) -> LegalOpinionRequest:
        return self._edit("update_jurisdiction", now, jurisdiction=jurisdiction)

    def change_priority(
        self, priority: OpinionPriority, *, now: datetime | None = None
    ) -> LegalOpinionRequest:
        priority = OpinionPriority(priority)
        return self._edit(
            "change_priority",
            now,
            priority=priority,
            is_urgent=priority is OpinionPriority.URGENT,
        )

    # ------------------------------------------------------------------
    # Soft delete
    # ------------------------------------------------------------------

    def soft_delete(self, *, now: datetime | None = None) -> LegalOpinionRequest:
        ts = now or utc_now()
        return self._evolve(deleted_at=ts, updated_at=ts)

    def restore(self, *, now: datetime | None = None) -> LegalOpinionRequest:
        return self._evolve(deleted_at=None, updated_at=now or utc_now())

    # ------------------------------------------------------------------
    # Derived
    # ------------------------------------------------------------------

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def can_be_edited(self) -> bool:
        return self.status is _S.DRAFT

    @property
    def can_be_cancelled(self) -> bool:
        return not self.status.is_terminal

    def is_overdue(self, now: datetime | None = None) -> bool:
        """Past the expected completion date and still open."""
        if self.expected_completion_date is None or self.status.is_terminal:
            return False
        return (ensure_utc(now) or utc_now()) > self.expected_completion_date

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------

    def _edit(
        self, operation: str, now: datetime | None, **changes: Any
    ) -> LegalOpinionRequest:
        if not self.can_be_edited:
            raise InvalidTransitionError(
                entity=_ENTITY,
                operation=operation,
                current_status=self.status,
                message=f"Cannot {operation}: opinion request is no longer a draft",
            )
        return self._evolve(updated_at=now or utc_now(), **changes)

    def _require(self, operation: str, *allowed: OpinionStatus) -> None:
        if self.status not in allowed:
            raise InvalidTransitionError(
                entity=_ENTITY, operation=operation, current_status=self.status
            )

    def _require_open(self, operation: str) -> None:
        if self.status.is_terminal:
            raise InvalidTransitionError(
                entity=_ENTITY, operation=operation, current_status=self.status
            )
