# tests/unit/application/use_cases/test_refund_lifecycle.py
from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from prometheus_client import REGISTRY

from counsel_core.application.schemas.dto.billing import CreateRefundRequest
from counsel_core.application.use_cases.refunds.refund_lifecycle import (
    ApproveRefundUseCase,
    CreateRefundUseCase,
    ProcessRefundUseCase,
    RejectRefundUseCase,
)
from counsel_core.domain.enums.billing import RefundStatus
from counsel_core.domain.exceptions.lifecycle import (
    InvalidTransitionError,
    NotFoundError,
    ValidationFailedError,
)

T0 = datetime(2025, 1, 10, 9, 0, tzinfo=UTC)


def _transitions(operation: str, outcome: str) -> float:
    value = REGISTRY.get_sample_value(
        "lifecycle_transitions_total",
        {"entity": "refund", "operation": operation, "outcome": outcome},
    )
    return value or 0.0


@pytest.mark.asyncio
async def test_refund_create_approve_process(make_repo: Callable[..., Any], make_uow: Any) -> None:
    repo = make_repo()
    uow = make_uow(refunds=repo)

    refund = await CreateRefundUseCase(uow=uow).execute(
        CreateRefundRequest(user_id="u-1", amount="120.00", reason="Session was cancelled"),
        now=T0,
    )
    approved = await ApproveRefundUseCase(uow=uow).execute(
        refund_id=refund.id, reviewed_by="admin-1", now=T0 + timedelta(hours=1)
    )
    processed = await ProcessRefundUseCase(uow=uow).execute(
        refund_id=refund.id, refund_reference="RF-77", now=T0 + timedelta(hours=2)
    )

    assert approved.status is RefundStatus.APPROVED
    assert processed.status is RefundStatus.PROCESSED
    assert repo.items[refund.id] is processed
    assert uow.commits == 3


@pytest.mark.asyncio
async def test_invalid_transition_leaves_stored_refund_untouched(
    make_repo: Callable[..., Any], make_uow: Any
) -> None:
    repo = make_repo()
    uow = make_uow(refunds=repo)
    refund = await CreateRefundUseCase(uow=uow).execute(
        CreateRefundRequest(user_id="u-1", amount=50, reason="Duplicate charge on card"), now=T0
    )
    before = _transitions("process", "invalid_transition")

    with pytest.raises(InvalidTransitionError, match="Cannot process non-approved refund"):
        await ProcessRefundUseCase(uow=uow).execute(refund_id=refund.id, refund_reference="RF-1")

    assert repo.items[refund.id] is refund
    assert repo.updated == []
    assert uow.commits == 1
    assert _transitions("process", "invalid_transition") == before + 1


@pytest.mark.asyncio
async def test_reject_records_reviewer(make_repo: Callable[..., Any], make_uow: Any) -> None:
    repo = make_repo()
    uow = make_uow(refunds=repo)
    refund = await CreateRefundUseCase(uow=uow).execute(
        CreateRefundRequest(user_id="u-2", amount="10", reason="Charged for wrong plan")
    )

    rejected = await RejectRefundUseCase(uow=uow).execute(
        refund_id=refund.id, reviewed_by="admin-9", review_notes="not eligible"
    )

    assert rejected.status is RefundStatus.REJECTED
    assert rejected.reviewed_by == "admin-9"


@pytest.mark.asyncio
async def test_missing_refund_raises_not_found(
    make_repo: Callable[..., Any], make_uow: Any
) -> None:
    uow = make_uow(refunds=make_repo())
    with pytest.raises(NotFoundError, match="refund not found: nope"):
        await ApproveRefundUseCase(uow=uow).execute(refund_id="nope", reviewed_by="a")


@pytest.mark.asyncio
async def test_create_validation_error_is_not_persisted(
    make_repo: Callable[..., Any], make_uow: Any
) -> None:
    repo = make_repo()
    with pytest.raises(ValidationFailedError):
        await CreateRefundUseCase(uow=make_uow(refunds=repo)).execute(
            CreateRefundRequest(user_id="u-1", amount="0", reason="Nothing to refund here")
        )
    assert repo.items == {}
