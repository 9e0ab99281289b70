# tests/unit/application/use_cases/test_opinion_lifecycle.py
from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

import pytest

from counsel_core.application.schemas.dto.workflows import (
    CreateLegalOpinionRequest,
    OpinionDraftChanges,
)
from counsel_core.application.use_cases.legal_opinions.opinion_lifecycle import (
    AssignLawyerUseCase,
    CancelLegalOpinionUseCase,
    CompleteLegalOpinionUseCase,
    CreateLegalOpinionRequestUseCase,
    MarkOpinionPaidUseCase,
    RejectLegalOpinionUseCase,
    SetEstimatedCostUseCase,
    StartDraftingUseCase,
    StartIntakeReviewUseCase,
    StartResearchUseCase,
    SubmitDraftForReviewUseCase,
    SubmitLegalOpinionUseCase,
    UpdateOpinionDraftUseCase,
)
from counsel_core.domain.enums.legal_opinion import OpinionPriority, OpinionStatus, OpinionType
from counsel_core.domain.exceptions.lifecycle import (
    InvalidTransitionError,
    PreconditionFailedError,
    ValidationFailedError,
)
from counsel_core.domain.value_objects.money import Money
from counsel_core.domain.value_objects.opinion import Jurisdiction

T0 = datetime(2025, 10, 1, 9, 0, tzinfo=UTC)

QUESTION = "Can the supplier terminate the distribution agreement without prior notice?"
LONG_TEXT = "The distribution agreement was signed in 2021 and renewed annually since. " * 2


def _create_request(**overrides: Any) -> CreateLegalOpinionRequest:
    params: dict[str, Any] = {
        "client_id": "client-7",
        "opinion_type": OpinionType.LEGAL_ANALYSIS,
        "subject": "Termination of a distribution agreement",
        "legal_question": QUESTION,
        "background_context": LONG_TEXT,
        "relevant_facts": LONG_TEXT,
        "jurisdiction": Jurisdiction(country="SA"),
    }
    params.update(overrides)
    return CreateLegalOpinionRequest(**params)


async def _to_review(uow: Any, opinion_id: str) -> None:
    await SubmitLegalOpinionUseCase(uow=uow).execute(opinion_id=opinion_id, now=T0)
    await StartIntakeReviewUseCase(uow=uow).execute(opinion_id=opinion_id, reviewer_id="rev-1")
    await AssignLawyerUseCase(uow=uow).execute(opinion_id=opinion_id, lawyer_id="law-1")
    await StartResearchUseCase(uow=uow).execute(opinion_id=opinion_id)
    await StartDraftingUseCase(uow=uow).execute(opinion_id=opinion_id)
    await SubmitDraftForReviewUseCase(uow=uow).execute(opinion_id=opinion_id)


@pytest.mark.asyncio
async def test_full_opinion_workflow(make_repo: Any, make_uow: Any) -> None:
    repo = make_repo()
    uow = make_uow(legal_opinions=repo)
    opinion = await CreateLegalOpinionRequestUseCase(uow=uow).execute(_create_request(), now=T0)

    await _to_review(uow, opinion.id)
    await SetEstimatedCostUseCase(uow=uow).execute(
        opinion_id=opinion.id, base_fee=Money.of(1000)
    )
    await MarkOpinionPaidUseCase(uow=uow).execute(opinion_id=opinion.id, payment_reference="P-1")
    done = await CompleteLegalOpinionUseCase(uow=uow).execute(opinion_id=opinion.id)

    statuses = [h.to_status for h in await repo.list_status_history(opinion.id)]
    assert statuses == [
        "draft",
        "submitted",
        "under_review",
        "assigned",
        "research_phase",
        "drafting",
        "internal_review",
        "completed",
    ]
    assert done.status is OpinionStatus.COMPLETED
    assert done.estimated_cost == Money.of(1000)
    assert done.final_version == 1


@pytest.mark.asyncio
async def test_complete_unpaid_is_rejected_and_not_persisted(
    make_repo: Any, make_uow: Any
) -> None:
    repo = make_repo()
    uow = make_uow(legal_opinions=repo)
    opinion = await CreateLegalOpinionRequestUseCase(uow=uow).execute(_create_request())
    await _to_review(uow, opinion.id)
    stored = repo.items[opinion.id]

    with pytest.raises(PreconditionFailedError, match="not paid"):
        await CompleteLegalOpinionUseCase(uow=uow).execute(opinion_id=opinion.id)

    assert repo.items[opinion.id] is stored


@pytest.mark.asyncio
async def test_submit_with_missing_content(make_repo: Any, make_uow: Any) -> None:
    uow = make_uow(legal_opinions=make_repo())
    opinion = await CreateLegalOpinionRequestUseCase(uow=uow).execute(
        _create_request(legal_question=None)
    )

    with pytest.raises(PreconditionFailedError) as ei:
        await SubmitLegalOpinionUseCase(uow=uow).execute(opinion_id=opinion.id)
    assert ei.value.details["missing"] == ["legal_question"]


@pytest.mark.asyncio
async def test_update_draft_applies_only_given_fields(make_repo: Any, make_uow: Any) -> None:
    uow = make_uow(legal_opinions=make_repo())
    opinion = await CreateLegalOpinionRequestUseCase(uow=uow).execute(_create_request())

    updated = await UpdateOpinionDraftUseCase(uow=uow).execute(
        opinion_id=opinion.id,
        changes=OpinionDraftChanges(
            specific_issues="Notice period", priority=OpinionPriority.URGENT
        ),
    )

    assert updated.specific_issues == "Notice period"
    assert updated.is_urgent
    assert updated.subject == opinion.subject

    await SubmitLegalOpinionUseCase(uow=uow).execute(opinion_id=opinion.id)
    with pytest.raises(InvalidTransitionError):
        await UpdateOpinionDraftUseCase(uow=uow).execute(
            opinion_id=opinion.id, changes=OpinionDraftChanges(specific_issues="More")
        )


@pytest.mark.asyncio
async def test_estimated_cost_requires_an_amount(make_repo: Any, make_uow: Any) -> None:
    uow = make_uow(legal_opinions=make_repo())
    opinion = await CreateLegalOpinionRequestUseCase(uow=uow).execute(
        _create_request(opinion_type=OpinionType.COMPLIANCE_OPINION)
    )

    with pytest.raises(ValidationFailedError, match="cost or base_fee"):
        await SetEstimatedCostUseCase(uow=uow).execute(opinion_id=opinion.id)

    quoted = await SetEstimatedCostUseCase(uow=uow).execute(
        opinion_id=opinion.id, base_fee=Money.of(200)
    )
    assert quoted.estimated_cost is not None
    assert quoted.estimated_cost.amount == Decimal("300")


@pytest.mark.asyncio
async def test_cancel_and_reject_record_reason(make_repo: Any, make_uow: Any) -> None:
    repo = make_repo()
    uow = make_uow(legal_opinions=repo)
    a = await CreateLegalOpinionRequestUseCase(uow=uow).execute(_create_request())
    b = await CreateLegalOpinionRequestUseCase(uow=uow).execute(_create_request())

    await CancelLegalOpinionUseCase(uow=uow).execute(opinion_id=a.id, reason="withdrawn")
    rejected = await RejectLegalOpinionUseCase(uow=uow).execute(
        opinion_id=b.id, reason="conflict of interest", changed_by="admin"
    )

    assert rejected.status is OpinionStatus.REJECTED
    last = (await repo.list_status_history(b.id))[-1]
    assert (last.reason, last.changed_by) == ("conflict of interest", "admin")
    assert (await repo.list_status_history(a.id))[-1].to_status == "cancelled"
