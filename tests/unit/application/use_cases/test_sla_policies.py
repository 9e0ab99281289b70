# tests/unit/application/use_cases/test_sla_policies.py
from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest

from counsel_core.application.schemas.dto.sla import (
    CreateSLAPolicyRequest,
    UpdateSLAPolicyRequest,
)
from counsel_core.application.use_cases.sla.sla_policies import (
    CreateSLAPolicyUseCase,
    SeedDefaultSLAPoliciesUseCase,
    UpdateSLAPolicyUseCase,
)
from counsel_core.domain.entities.sla_policy import SLAPolicy
from counsel_core.domain.enums.sla import RequestType, SLAPriority
from counsel_core.domain.exceptions.lifecycle import (
    NotFoundError,
    PreconditionFailedError,
    ValidationFailedError,
)
from counsel_core.domain.value_objects.sla import SLATimes

T0 = datetime(2025, 5, 5, tzinfo=UTC)


class _FakePolicyRepo:
    def __init__(self, *policies: SLAPolicy) -> None:
        self.policies = {p.id: p for p in policies}

    async def save(self, policy: SLAPolicy) -> None:
        self.policies[policy.id] = policy

    async def find_by_id(self, policy_id: str) -> SLAPolicy | None:
        return self.policies.get(policy_id)

    async def exists_by_name(self, name: str) -> bool:
        return any(p.name.lower() == name.lower() for p in self.policies.values())

    async def exists_by_type_and_priority(
        self, request_type: RequestType, priority: SLAPriority | None
    ) -> bool:
        return any(
            p.request_type is request_type and p.priority == priority
            for p in self.policies.values()
        )


class _FakeUow:
    def __init__(self, repo: _FakePolicyRepo) -> None:
        self.sla_policies = repo
        self.commits = 0

    async def __aenter__(self) -> Any:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        return None

    async def commit(self) -> None:
        self.commits += 1


def _create(**overrides: Any) -> CreateSLAPolicyRequest:
    params: dict[str, Any] = {
        "name": "Litigation urgent",
        "request_type": RequestType.LITIGATION,
        "response_minutes": 60,
        "resolution_minutes": 2880,
        "escalation_minutes": 720,
        "priority": SLAPriority.URGENT,
    }
    params.update(overrides)
    return CreateSLAPolicyRequest(**params)


@pytest.mark.asyncio
async def test_create_policy_saves_and_commits() -> None:
    repo = _FakePolicyRepo()
    uow = _FakeUow(repo)

    policy = await CreateSLAPolicyUseCase(uow=uow).execute(_create(), now=T0)

    assert repo.policies[policy.id] == policy
    assert policy.times == SLATimes(60, 2880, 720)
    assert policy.key == "litigation:urgent"
    assert uow.commits == 1


@pytest.mark.asyncio
async def test_create_rejects_duplicate_name_case_insensitively() -> None:
    repo = _FakePolicyRepo()
    uc = CreateSLAPolicyUseCase(uow=_FakeUow(repo))
    await uc.execute(_create())

    with pytest.raises(PreconditionFailedError, match="name already exists"):
        await uc.execute(_create(name="LITIGATION URGENT", priority=SLAPriority.LOW))


@pytest.mark.asyncio
async def test_create_rejects_duplicate_pair() -> None:
    uc = CreateSLAPolicyUseCase(uow=_FakeUow(_FakePolicyRepo()))
    await uc.execute(_create())

    with pytest.raises(PreconditionFailedError, match="request type and priority") as ei:
        await uc.execute(_create(name="Another name"))
    assert ei.value.details == {"key": "litigation:urgent"}


@pytest.mark.asyncio
async def test_create_validates_times() -> None:
    with pytest.raises(ValidationFailedError, match="Escalation time"):
        await CreateSLAPolicyUseCase(uow=_FakeUow(_FakePolicyRepo())).execute(
            _create(escalation_minutes=5000)
        )


@pytest.mark.asyncio
async def test_update_policy() -> None:
    policy = SLAPolicy.create(
        name="Calls",
        request_type=RequestType.CALL,
        response_minutes=30,
        resolution_minutes=480,
        escalation_minutes=240,
    )
    repo = _FakePolicyRepo(policy)

    updated = await UpdateSLAPolicyUseCase(uow=_FakeUow(repo)).execute(
        UpdateSLAPolicyRequest(
            policy_id=policy.id,
            name="Calls (normal)",
            resolution_minutes=600,
            clear_escalation=True,
            is_active=False,
        ),
        now=T0,
    )

    assert updated.name == "Calls (normal)"
    assert updated.times == SLATimes(30, 600, None)
    assert not updated.is_active
    assert updated.updated_at == T0
    assert repo.policies[policy.id] == updated


@pytest.mark.asyncio
async def test_update_unknown_policy() -> None:
    with pytest.raises(NotFoundError, match="sla_policy not found: missing"):
        await UpdateSLAPolicyUseCase(uow=_FakeUow(_FakePolicyRepo())).execute(
            UpdateSLAPolicyRequest(policy_id="missing", name="x")
        )


@pytest.mark.asyncio
async def test_seed_creates_missing_defaults_only() -> None:
    existing = SLAPolicy.create_default(RequestType.CALL, SLAPriority.URGENT)
    repo = _FakePolicyRepo(existing)

    result = await SeedDefaultSLAPoliciesUseCase(uow=_FakeUow(repo)).execute(now=T0)
    again = await SeedDefaultSLAPoliciesUseCase(uow=_FakeUow(repo)).execute(now=T0)

    total = len(RequestType) * len(SLAPriority)
    assert result.skipped == ("call:urgent",)
    assert len(result.created) == total - 1
    assert len(repo.policies) == total
    assert again.created == ()
    assert len(again.skipped) == total
