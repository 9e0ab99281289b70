# tests/unit/conftest.py
from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

import pytest

from counsel_core.domain.entities.status_history import StatusHistoryEntry
from counsel_core.domain.enums.billing import DisputeStatus, InvoiceStatus


class InMemoryLifecycleRepo:
    """Dict-backed stand-in for the lifecycle aggregate repository ports."""

    def __init__(self, *items: Any) -> None:
        self.items: dict[str, Any] = {item.id: item for item in items}
        self.history: list[StatusHistoryEntry] = []
        self.created: list[str] = []
        self.updated: list[str] = []

    async def find_by_id(self, entity_id: str) -> Any | None:
        return self.items.get(entity_id)

    async def create(self, entity: Any) -> None:
        self.items[entity.id] = entity
        self.created.append(entity.id)

    async def update(self, entity: Any) -> None:
        self.items[entity.id] = entity
        self.updated.append(entity.id)

    async def add_status_history(self, entry: StatusHistoryEntry) -> None:
        self.history.append(entry)

    async def list_status_history(self, entity_id: str) -> list[StatusHistoryEntry]:
        return [e for e in self.history if e.entity_id == entity_id]

    async def has_active_dispute(self, user_id: str, related_type: Any, related_id: str) -> bool:
        return any(
            d.user_id == user_id
            and d.related_entity == (related_type, related_id)
            and d.status not in (DisputeStatus.RESOLVED, DisputeStatus.CLOSED)
            for d in self.items.values()
        )

    async def list_unpaid_past_due(self, now: datetime) -> list[Any]:
        return [
            i
            for i in self.items.values()
            if i.status is InvoiceStatus.UNPAID and i.due_date < now
        ]


class FakeUnitOfWork:
    """Exposes repositories as attributes and counts commits."""

    def __init__(self, **repos: Any) -> None:
        for name, repo in repos.items():
            setattr(self, name, repo)
        self.commits = 0
        self.rollbacks = 0

    async def __aenter__(self) -> FakeUnitOfWork:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        return None

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1

    def get_repository(self, repo_type: type[Any]) -> Any:
        raise KeyError(repo_type)


@pytest.fixture
def make_repo() -> Callable[..., InMemoryLifecycleRepo]:
    return InMemoryLifecycleRepo


@pytest.fixture
def make_uow() -> Callable[..., FakeUnitOfWork]:
    return FakeUnitOfWork
