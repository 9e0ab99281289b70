# tests/unit/adapters/repositories/test_repository_mapping.py
"""Mapping tests for the SLA policy and specialization repositories.

Dummy row dataclasses stand in for ORM rows; persistence is not exercised.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from counsel_core.adapters.repositories.sla_policies_repository import (
    SqlAlchemySLAPolicyRepository,
)
from counsel_core.adapters.repositories.specializations_repository import (
    SqlAlchemyProviderSpecializationRepository,
    SqlAlchemySpecializationRepository,
)
from counsel_core.domain.entities.sla_policy import SLAPolicy
from counsel_core.domain.entities.specialization import (
    CertificationDetail,
    ProviderSpecialization,
    Specialization,
)
from counsel_core.domain.enums.sla import RequestType, SLAPriority
from counsel_core.domain.value_objects.sla import SLATimes

T0 = datetime(2025, 4, 1, 9, 30, tzinfo=UTC)


@dataclass(slots=True)
class _DummyPolicyRow:
    id: str
    name: str
    request_type: str
    priority: str | None
    response_minutes: int
    resolution_minutes: int
    escalation_minutes: int | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class _DummyProviderRow:
    id: str
    provider_id: str
    specialization_id: str
    experience_years: int | None
    is_certified: bool
    certifications: list[dict[str, Any]]
    case_count: int
    success_rate: Decimal | None
    created_at: datetime
    updated_at: datetime


def test_policy_row_to_entity_handles_wildcard_priority() -> None:
    row = _DummyPolicyRow(
        id="p-1",
        name="Litigation (any)",
        request_type="litigation",
        priority=None,
        response_minutes=60,
        resolution_minutes=4320,
        escalation_minutes=None,
        is_active=True,
        created_at=datetime(2025, 4, 1, 9, 30),
        updated_at=T0,
    )

    policy = SqlAlchemySLAPolicyRepository._to_entity(row)  # type: ignore[arg-type]

    assert policy.request_type is RequestType.LITIGATION
    assert policy.priority is None
    assert policy.is_wildcard
    assert policy.times == SLATimes(60, 4320, None)
    assert policy.created_at == T0


def test_policy_to_row_dict_stores_enum_values() -> None:
    policy = SLAPolicy.create(
        name="Urgent calls",
        request_type=RequestType.CALL,
        response_minutes=15,
        resolution_minutes=240,
        escalation_minutes=120,
        priority=SLAPriority.URGENT,
        now=T0,
    )

    values = SqlAlchemySLAPolicyRepository._to_row_dict(policy)

    assert values["request_type"] == "call"
    assert values["priority"] == "urgent"
    assert (values["response_minutes"], values["resolution_minutes"]) == (15, 240)
    assert values["escalation_minutes"] == 120
    assert values["created_at"] == values["updated_at"] == T0


def test_specialization_to_row_dict_matches_columns() -> None:
    spec = Specialization.create(
        name="Corporate Law", name_ar="Corporate Law", category=" Commercial ", now=T0
    )

    values = SqlAlchemySpecializationRepository._to_row_dict(spec)

    assert values["category"] == "commercial"
    assert set(values) == {
        "id",
        "name",
        "name_ar",
        "category",
        "description",
        "description_ar",
        "is_active",
        "created_at",
        "updated_at",
    }


def test_provider_row_round_trip_keeps_certifications_and_rate() -> None:
    cert = CertificationDetail(
        name="Arbitration",
        issuing_authority="Chamber",
        expiry_date=datetime(2027, 1, 1, tzinfo=UTC),
    )
    record = ProviderSpecialization.create(
        provider_id="prov-1",
        specialization_id="spec-1",
        experience_years=7,
        certifications=[cert],
        now=T0,
    ).update_success_rate(Decimal("66.67"), now=T0)

    values = SqlAlchemyProviderSpecializationRepository._to_row_dict(record)
    assert values["certifications"] == [cert.to_dict()]
    assert values["success_rate"] == Decimal("66.67")

    restored = SqlAlchemyProviderSpecializationRepository._to_entity(
        _DummyProviderRow(**values)  # type: ignore[arg-type]
    )
    assert restored.is_certified
    assert restored.certifications == (cert,)
    assert restored.success_rate == Decimal("66.67")
    assert restored.experience_years == 7
