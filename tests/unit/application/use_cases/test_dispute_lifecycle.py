# tests/unit/application/use_cases/test_dispute_lifecycle.py
from __future__ import annotations

from typing import Any

import pytest

from counsel_core.application.schemas.dto.billing import CreateDisputeRequest
from counsel_core.application.use_cases.disputes.dispute_lifecycle import (
    AddDisputeEvidenceUseCase,
    CloseDisputeUseCase,
    CreateDisputeUseCase,
    EscalateDisputeUseCase,
    ResolveDisputeUseCase,
    StartDisputeReviewUseCase,
    UpdateDisputePriorityUseCase,
)
from counsel_core.domain.enums.billing import DisputePriority, DisputeStatus
from counsel_core.domain.exceptions.lifecycle import (
    ActiveDisputeExistsError,
    InvalidTransitionError,
)

DESCRIPTION = "The lawyer never joined the scheduled consultation call."


def _request(**overrides: Any) -> CreateDisputeRequest:
    params: dict[str, Any] = {
        "user_id": "user-1",
        "reason": "No show",
        "description": DESCRIPTION,
        "consultation_id": "c-1",
    }
    params.update(overrides)
    return CreateDisputeRequest(**params)


@pytest.mark.asyncio
async def test_second_active_dispute_is_rejected(make_repo: Any, make_uow: Any) -> None:
    repo = make_repo()
    uow = make_uow(disputes=repo)
    create = CreateDisputeUseCase(uow=uow)

    first = await create.execute(_request())
    with pytest.raises(ActiveDisputeExistsError) as ei:
        await create.execute(_request(reason="Still no show"))

    assert ei.value.code == "DISPUTE_ALREADY_ACTIVE"
    assert ei.value.details == {"related_type": "consultation", "related_id": "c-1"}
    assert list(repo.items) == [first.id]


@pytest.mark.asyncio
async def test_other_entities_and_users_may_open_disputes(make_repo: Any, make_uow: Any) -> None:
    repo = make_repo()
    create = CreateDisputeUseCase(uow=make_uow(disputes=repo))

    await create.execute(_request())
    await create.execute(_request(consultation_id="c-2"))
    await create.execute(_request(user_id="user-2"))

    assert len(repo.items) == 3


@pytest.mark.asyncio
async def test_resolved_dispute_allows_a_new_one(make_repo: Any, make_uow: Any) -> None:
    repo = make_repo()
    uow = make_uow(disputes=repo)
    first = await CreateDisputeUseCase(uow=uow).execute(_request())
    await StartDisputeReviewUseCase(uow=uow).execute(dispute_id=first.id)
    await ResolveDisputeUseCase(uow=uow).execute(
        dispute_id=first.id, resolved_by="admin", resolution="Full refund issued to client"
    )

    second = await CreateDisputeUseCase(uow=uow).execute(_request())

    assert second.id != first.id


@pytest.mark.asyncio
async def test_dispute_workflow(make_repo: Any, make_uow: Any) -> None:
    repo = make_repo()
    uow = make_uow(disputes=repo)
    d = await CreateDisputeUseCase(uow=uow).execute(_request())

    await AddDisputeEvidenceUseCase(uow=uow).execute(
        dispute_id=d.id, evidence={"screenshot": "s.png"}
    )
    await UpdateDisputePriorityUseCase(uow=uow).execute(
        dispute_id=d.id, priority=DisputePriority.HIGH
    )
    escalated = await EscalateDisputeUseCase(uow=uow).execute(
        dispute_id=d.id, escalated_to="ops", escalation_reason="Client is a VIP"
    )
    await ResolveDisputeUseCase(uow=uow).execute(
        dispute_id=d.id, resolved_by="ops-1", resolution="Consultation re-booked for free"
    )
    closed = await CloseDisputeUseCase(uow=uow).execute(dispute_id=d.id)

    assert escalated.priority is DisputePriority.HIGH
    assert closed.status is DisputeStatus.CLOSED
    assert closed.evidence == {"screenshot": "s.png"}
    assert repo.items[d.id] is closed


@pytest.mark.asyncio
async def test_close_before_resolution_fails(make_repo: Any, make_uow: Any) -> None:
    uow = make_uow(disputes=make_repo())
    d = await CreateDisputeUseCase(uow=uow).execute(_request())

    with pytest.raises(InvalidTransitionError, match="Cannot close dispute in status 'open'"):
        await CloseDisputeUseCase(uow=uow).execute(dispute_id=d.id)
