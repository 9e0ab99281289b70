# tests/unit/domain/entities/test_legal_opinion_request.py
from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from counsel_core.domain.entities.legal_opinion_request import LegalOpinionRequest
from counsel_core.domain.enums.legal_opinion import (
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
from counsel_core.domain.value_objects.opinion import Jurisdiction

T0 = datetime(2025, 4, 1, 10, 0, tzinfo=UTC)

SUBJECT = "Enforceability of a non-compete clause"
QUESTION = "Is the non-compete clause in the signed employment agreement enforceable?"
BACKGROUND = "The client employed a senior engineer under a fixed-term contract. " * 3
FACTS = "The contract was signed in 2022 and includes a two year regional restriction. " * 2


def _draft(**overrides: object) -> LegalOpinionRequest:
    params: dict[str, object] = {
        "client_id": "client-1",
        "opinion_type": OpinionType.CONTRACT_REVIEW,
        "subject": SUBJECT,
        "legal_question": QUESTION,
        "background_context": BACKGROUND,
        "relevant_facts": FACTS,
        "jurisdiction": Jurisdiction(country="SA", legal_system="sharia_law"),
        "now": T0,
    }
    params.update(overrides)
    return LegalOpinionRequest.create(**params)  # type: ignore[arg-type]


def _in_review() -> LegalOpinionRequest:
    return (
        _draft()
        .submit(now=T0)
        .assign_to_lawyer("lawyer-1", now=T0)
        .start_research(now=T0)
        .start_drafting(now=T0)
        .submit_for_review(now=T0 + timedelta(days=2))
    )


def test_create_opens_a_draft() -> None:
    req = _draft(priority=OpinionPriority.URGENT)

    assert req.status is OpinionStatus.DRAFT
    assert req.opinion_number.date_part == "20250401"
    assert req.is_urgent
    assert req.can_be_edited


def test_submit_stamps_expected_completion_from_priority() -> None:
    submitted = _draft(priority=OpinionPriority.RUSH).submit(now=T0)

    assert submitted.status is OpinionStatus.SUBMITTED
    assert submitted.submitted_at == T0
    assert submitted.expected_completion_date == T0 + timedelta(days=2)


def test_submit_reports_missing_content() -> None:
    with pytest.raises(PreconditionFailedError, match="missing required information") as ei:
        _draft(relevant_facts=None, jurisdiction=None).submit()

    assert ei.value.details["missing"] == ["relevant_facts", "jurisdiction"]


def test_full_workflow_with_revision() -> None:
    review = _in_review()
    revised = (
        review.request_revision("Add the labour court precedents", now=T0)
        .start_revising(now=T0)
        .mark_as_paid("PAY-1", Money.of(1200), now=T0)
        .complete(now=T0 + timedelta(days=3))
    )

    assert review.draft_version == 1
    assert review.assigned_lawyer_id == "lawyer-1"
    assert revised.status is OpinionStatus.COMPLETED
    assert revised.final_version == 1
    assert revised.actual_delivery_date == T0 + timedelta(days=3)
    assert revised.final_cost == Money.of(1200)
    assert revised.revision_reason == "Add the labour court precedents"


def test_intake_review_then_assignment() -> None:
    reviewed = _draft().submit(now=T0).start_intake_review("reviewer-1", now=T0)
    assigned = reviewed.assign_to_lawyer("lawyer-2", now=T0)

    assert reviewed.status is OpinionStatus.UNDER_REVIEW
    assert reviewed.reviewed_by == "reviewer-1"
    assert assigned.status is OpinionStatus.ASSIGNED


def test_complete_requires_payment_before_status() -> None:
    with pytest.raises(PreconditionFailedError, match="not paid"):
        _in_review().complete()
    with pytest.raises(PreconditionFailedError, match="not paid"):
        _draft().complete()


def test_complete_requires_review_or_revising_once_paid() -> None:
    paid_draft = _draft().mark_as_paid("PAY-1")
    with pytest.raises(InvalidTransitionError, match="Cannot complete"):
        paid_draft.complete()


def test_payment_does_not_change_status_and_is_single_shot() -> None:
    paid = _draft().submit(now=T0).mark_as_paid("PAY-1", now=T0)

    assert paid.status is OpinionStatus.SUBMITTED
    assert paid.is_paid
    with pytest.raises(PreconditionFailedError, match="already marked as paid"):
        paid.mark_as_paid("PAY-2")
    with pytest.raises(PreconditionFailedError, match="paid opinion request"):
        paid.set_estimated_cost(Money.of(10))


def test_completed_request_must_be_paid() -> None:
    data = _draft().to_dict()
    data["status"] = "completed"
    with pytest.raises(ValidationFailedError, match="must be paid"):
        LegalOpinionRequest.reconstitute(data)


def test_edits_only_while_draft() -> None:
    edited = _draft().update_subject("Scope of the confidentiality undertaking")
    assert edited.subject is not None
    assert edited.subject.value == "Scope of the confidentiality undertaking"

    submitted = _draft().submit(now=T0)
    with pytest.raises(InvalidTransitionError, match="no longer a draft"):
        submitted.update_subject("Scope of the confidentiality undertaking")
    with pytest.raises(InvalidTransitionError):
        submitted.change_priority(OpinionPriority.URGENT)


def test_cancel_and_reject_from_open_states_only() -> None:
    cancelled = _draft().submit(now=T0).cancel("client withdrew")
    rejected = _draft().reject("outside practice area")

    assert cancelled.status is OpinionStatus.CANCELLED
    assert cancelled.cancellation_reason == "client withdrew"
    assert rejected.rejection_reason == "outside practice area"
    with pytest.raises(InvalidTransitionError):
        cancelled.reject("late")


def test_estimate_cost_uses_type_multiplier() -> None:
    cost = _draft(opinion_type=OpinionType.DUE_DILIGENCE).estimate_cost(Money.of(1000))
    assert cost.amount == Decimal("2000.0")


def test_is_overdue_after_expected_completion() -> None:
    submitted = _draft(priority=OpinionPriority.URGENT).submit(now=T0)

    assert not submitted.is_overdue(T0 + timedelta(hours=23))
    assert submitted.is_overdue(T0 + timedelta(days=1, minutes=1))
    assert not submitted.cancel("x").is_overdue(T0 + timedelta(days=5))


def test_soft_delete_and_restore() -> None:
    deleted = _draft().soft_delete(now=T0)
    assert deleted.is_deleted
    assert not deleted.restore(now=T0).is_deleted


def test_transitions_leave_original_untouched() -> None:
    req = _draft()
    req.submit(now=T0)

    assert req.status is OpinionStatus.DRAFT
    with pytest.raises(FrozenInstanceError):
        req.status = OpinionStatus.SUBMITTED  # type: ignore[misc]


def test_reconstitute_round_trip() -> None:
    req = _in_review().mark_as_paid("PAY-1", Money.of(900), now=T0)
    assert LegalOpinionRequest.reconstitute(req.to_dict()) == req
