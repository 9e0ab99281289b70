# tests/unit/adapters/uow/test_sqlalchemy_uow.py
from __future__ import annotations

from typing import Any

import pytest

from counsel_core.adapters.repositories.sla_policies_repository import (
    SqlAlchemySLAPolicyRepository,
)
from counsel_core.adapters.repositories.specializations_repository import (
    SqlAlchemyProviderSpecializationRepository,
)
from counsel_core.adapters.uow.sqlalchemy_uow import SqlAlchemyUnitOfWork
from counsel_core.domain.interfaces.repositories.refund_repository import RefundRepository
from counsel_core.domain.interfaces.repositories.sla_policy_repository import (
    SLAPolicyRepository,
)
from counsel_core.domain.interfaces.repositories.specialization_repository import (
    ProviderSpecializationRepository,
)


class _FakeAsyncSession:
    """Only the methods SqlAlchemyUnitOfWork calls on its session."""

    def __init__(self) -> None:
        self.committed = False
        self.rolled_back = False
        self.closed = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def close(self) -> None:
        self.closed = True


class _SessionFactory:
    def __init__(self) -> None:
        self.sessions: list[_FakeAsyncSession] = []

    def __call__(self) -> _FakeAsyncSession:
        session = _FakeAsyncSession()
        self.sessions.append(session)
        return session


def _uow(factory: _SessionFactory, **kwargs: Any) -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(session_factory=factory, **kwargs)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_default_repositories_are_wired_and_cached() -> None:
    async with _uow(_SessionFactory()) as tx:
        sla = tx.get_repository(SLAPolicyRepository)
        providers = tx.get_repository(ProviderSpecializationRepository)

        assert isinstance(sla, SqlAlchemySLAPolicyRepository)
        assert isinstance(providers, SqlAlchemyProviderSpecializationRepository)
        assert tx.get_repository(SLAPolicyRepository) is sla


@pytest.mark.asyncio
async def test_repo_factories_register_lifecycle_ports() -> None:
    seen: list[Any] = []

    def refunds(session: Any) -> object:
        seen.append(session)
        return object()

    factory = _SessionFactory()
    async with _uow(factory, repo_factories={RefundRepository: refunds}) as tx:
        tx.get_repository(RefundRepository)

    assert seen == factory.sessions


@pytest.mark.asyncio
async def test_unregistered_port_raises_key_error() -> None:
    class _UnknownPort:
        pass

    async with _uow(_SessionFactory()) as tx:
        with pytest.raises(KeyError):
            tx.get_repository(_UnknownPort)


@pytest.mark.asyncio
async def test_exit_without_commit_rolls_back_and_closes() -> None:
    factory = _SessionFactory()
    async with _uow(factory):
        pass

    (session,) = factory.sessions
    assert session.rolled_back
    assert not session.committed
    assert session.closed


@pytest.mark.asyncio
async def test_commit_suppresses_rollback_on_exit() -> None:
    factory = _SessionFactory()
    async with _uow(factory) as tx:
        await tx.commit()
        await tx.commit()

    (session,) = factory.sessions
    assert session.committed
    assert not session.rolled_back


@pytest.mark.asyncio
async def test_error_inside_block_rolls_back_and_propagates() -> None:
    factory = _SessionFactory()
    with pytest.raises(ValueError):
        async with _uow(factory):
            raise ValueError("boom")

    assert factory.sessions[0].rolled_back
    assert factory.sessions[0].closed


@pytest.mark.asyncio
async def test_usage_outside_scope_is_rejected() -> None:
    uow = _uow(_SessionFactory())

    with pytest.raises(RuntimeError):
        uow.get_repository(SLAPolicyRepository)
    with pytest.raises(RuntimeError):
        await uow.commit()

    async with uow:
        with pytest.raises(RuntimeError):
            await uow.__aenter__()
