# tests/unit/application/use_cases/test_provider_matching.py
from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

import pytest

from counsel_core.application.schemas.dto.specializations import FindProvidersRequest
from counsel_core.application.use_cases.specializations.provider_matching import (
    FindProvidersWithSpecializationsUseCase,
    GetProviderExpertiseUseCase,
    GetTopProvidersByCategoryUseCase,
    ProviderHasSpecializationsUseCase,
    RecordCaseResultUseCase,
)
from counsel_core.domain.entities.specialization import (
    CertificationDetail,
    ProviderSpecialization,
    Specialization,
)

T0 = datetime(2025, 2, 14, tzinfo=UTC)


class _FakeSpecRepo:
    def __init__(self, *specs: Specialization) -> None:
        self.specs = {s.id: s for s in specs}

    async def find_by_id(self, specialization_id: str) -> Specialization | None:
        return self.specs.get(specialization_id)

    async def find_by_name(self, name: str) -> Specialization | None:
        return next((s for s in self.specs.values() if s.name.lower() == name.lower()), None)

    async def find_by_category(
        self, category: str, *, active_only: bool = True
    ) -> list[Specialization]:
        return [
            s
            for s in self.specs.values()
            if s.category == category and (s.is_active or not active_only)
        ]


class _FakeProviderRepo:
    def __init__(self, *records: ProviderSpecialization) -> None:
        self.records = {r.id: r for r in records}
        self.locked: list[tuple[str, str]] = []

    async def find_by_specialization(self, specialization_id: str) -> list[ProviderSpecialization]:
        return [r for r in self.records.values() if r.specialization_id == specialization_id]

    async def find_by_provider(self, provider_id: str) -> list[ProviderSpecialization]:
        return [r for r in self.records.values() if r.provider_id == provider_id]

    async def get_for_update(
        self, provider_id: str, specialization_id: str
    ) -> ProviderSpecialization | None:
        self.locked.append((provider_id, specialization_id))
        return next(
            (
                r
                for r in self.records.values()
                if r.provider_id == provider_id and r.specialization_id == specialization_id
            ),
            None,
        )

    async def save(self, record: ProviderSpecialization) -> None:
        self.records[record.id] = record


class _FakeUow:
    def __init__(self, specs: _FakeSpecRepo, providers: _FakeProviderRepo) -> None:
        self.specializations = specs
        self.provider_specializations = providers
        self.commits = 0

    async def __aenter__(self) -> Any:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        return None

    async def commit(self) -> None:
        self.commits += 1


def _spec(name: str, category: str = "commercial", *, active: bool = True) -> Specialization:
    spec = Specialization.create(name=name, name_ar=name, category=category, now=T0)
    return spec if active else spec.deactivate()


def _record(
    provider_id: str,
    spec: Specialization,
    *,
    certified: bool = False,
    rate: str | None = None,
    cases: int = 0,
    years: int | None = None,
) -> ProviderSpecialization:
    record = ProviderSpecialization.create(
        provider_id=provider_id,
        specialization_id=spec.id,
        experience_years=years,
        certifications=[CertificationDetail("Accredited", "Bar")] if certified else [],
        now=T0,
    )
    return ProviderSpecialization.reconstitute(
        {**record.to_dict(), "success_rate": rate, "case_count": cases}
    )


CONTRACTS = _spec("Contracts")
MERGERS = _spec("Mergers")
RETIRED = _spec("Franchising", active=False)
LABOUR = _spec("Labour", "employment")


def _uow() -> _FakeUow:
    specs = _FakeSpecRepo(CONTRACTS, MERGERS, RETIRED, LABOUR)
    providers = _FakeProviderRepo(
        _record("P1", CONTRACTS, certified=True, rate="80", cases=4, years=5),
        _record("P2", CONTRACTS, rate="90", cases=10, years=12),
        _record("P3", RETIRED, certified=True, rate="100", cases=1),
        _record("P2", LABOUR, rate="50", cases=2, years=3),
        _record("P1", MERGERS, rate="75", cases=4, years=2),
    )
    return _FakeUow(specs, providers)


@pytest.mark.asyncio
async def test_find_providers_ranks_by_score() -> None:
    matches = await FindProvidersWithSpecializationsUseCase(uow=_uow()).execute(
        FindProvidersRequest(specialization_names=["contracts", "Franchising", "Unknown"])
    )

    assert [(m.provider_id, m.match_score) for m in matches] == [
        ("P1", Decimal("2.30")),
        ("P2", Decimal("1.90")),
    ]


@pytest.mark.asyncio
async def test_find_providers_with_filters_and_default_limit() -> None:
    uow = _uow()

    certified = await FindProvidersWithSpecializationsUseCase(uow=uow).execute(
        FindProvidersRequest(specialization_names=["Contracts"], require_certification=True)
    )
    limited = await FindProvidersWithSpecializationsUseCase(uow=uow, default_limit=1).execute(
        FindProvidersRequest(specialization_names=["Contracts", "Mergers"])
    )

    assert [m.provider_id for m in certified] == ["P1"]
    assert [m.provider_id for m in limited] == ["P1"]
    assert limited[0].matching_specializations == ["Contracts", "Mergers"]


@pytest.mark.asyncio
async def test_find_providers_without_known_names_is_empty() -> None:
    matches = await FindProvidersWithSpecializationsUseCase(uow=_uow()).execute(
        FindProvidersRequest(specialization_names=["Franchising", "Maritime"])
    )
    assert matches == []


@pytest.mark.asyncio
async def test_top_providers_by_category() -> None:
    matches = await GetTopProvidersByCategoryUseCase(uow=_uow()).execute(
        category=" Commercial ", limit=5
    )
    assert [m.provider_id for m in matches] == ["P1", "P2"]
    assert matches[0].match_score == Decimal("4.05")


@pytest.mark.asyncio
async def test_provider_has_specializations() -> None:
    uc = ProviderHasSpecializationsUseCase(uow=_uow())

    assert await uc.execute(provider_id="P9", specialization_names=[])
    assert await uc.execute(provider_id="P2", specialization_names=["labour"])
    assert not await uc.execute(provider_id="P3", specialization_names=["Franchising"])


@pytest.mark.asyncio
async def test_provider_expertise() -> None:
    expertise = await GetProviderExpertiseUseCase(uow=_uow()).execute(provider_id="P2")

    assert expertise.specializations == ("Contracts", "Labour")
    assert expertise.total_cases == 12
    assert expertise.max_experience_years == 12
    assert expertise.average_success_rate == Decimal("83.33")


@pytest.mark.asyncio
async def test_record_case_result_updates_each_record_in_category() -> None:
    uow = _uow()

    outcome = await RecordCaseResultUseCase(uow=uow).execute(
        provider_id="P1", category="Commercial", was_successful=True, now=T0
    )

    assert outcome.count == 2
    assert outcome.category == "commercial"
    rates = {r.specialization_id: (r.case_count, r.success_rate) for r in outcome.updated}
    assert rates == {
        CONTRACTS.id: (5, Decimal("84.00")),
        MERGERS.id: (5, Decimal("80.00")),
    }
    assert uow.commits == 1
    assert set(uow.provider_specializations.locked) == {("P1", CONTRACTS.id), ("P1", MERGERS.id)}


@pytest.mark.asyncio
async def test_record_case_for_unknown_provider_updates_nothing() -> None:
    outcome = await RecordCaseResultUseCase(uow=_uow()).execute(
        provider_id="nobody", category="commercial", was_successful=False
    )
    assert outcome.count == 0
