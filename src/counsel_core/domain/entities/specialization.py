# src/counsel_core/domain/entities/specialization.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Specialization Entities.

Purpose:
    Catalogue of legal specializations and the per-provider records that
    carry experience, certification and case statistics for each one.

Layer:
    domain/entities

Notes:
    ``success_rate`` is a percentage (0..100) held as a ``Decimal`` with two
    places. It is only meaningful once ``case_count`` is positive. Recomputing
    it after a case goes through :func:`recompute_success_rate` so the
    rounding rule lives in one place.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from counsel_core.domain.entities.base import BaseEntity, ensure_utc, new_id, utc_now
from counsel_core.domain.exceptions.lifecycle import ValidationFailedError

__all__ = [
    "Specialization",
    "CertificationDetail",
    "ProviderSpecialization",
    "ProviderExpertise",
    "recompute_success_rate",
]

_TWO_PLACES = Decimal("0.01")
_HUNDRED = Decimal(100)


def _rate(value: Decimal | float | str | None) -> Decimal | None:
    if value is None:
        return None
    rate = Decimal(str(value))
    if not Decimal(0) <= rate <= _HUNDRED:
        raise ValidationFailedError(
            "Success rate must be between 0 and 100", details={"success_rate": str(rate)}
        )
    return rate.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def recompute_success_rate(
    case_count: int, success_rate: Decimal | None, was_successful: bool
) -> tuple[int, Decimal]:
    """Return ``(new_case_count, new_success_rate)`` after one more case.

    The prior successful count is reconstructed as ``rate / 100 * count``; the
    new rate is rounded half-up to two decimal places.
    """
    current = success_rate if success_rate is not None else Decimal(0)
    successful = current / _HUNDRED * case_count + (1 if was_successful else 0)
    new_count = case_count + 1
    new_rate = (successful / new_count * _HUNDRED).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    return new_count, new_rate


@dataclass(frozen=True, slots=True)
class Specialization(BaseEntity):
    """Legal specialization (e.g. "Commercial Contracts" in category "commercial")."""

    id: str
    name: str
    name_ar: str
    category: str
    description: str | None = None
    description_ar: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if not (self.name or "").strip():
            raise ValidationFailedError("Specialization name is required")
        if not (self.category or "").strip():
            raise ValidationFailedError("Specialization category is required")
        object.__setattr__(self, "name", self.name.strip())
        object.__setattr__(self, "category", self.category.strip().lower())
        self._normalize_datetimes("created_at", "updated_at")

    @classmethod
    def create(
        cls,
        *,
        name: str,
        name_ar: str,
        category: str,
        description: str | None = None,
        description_ar: str | None = None,
        specialization_id: str | None = None,
        now: datetime | None = None,
    ) -> Specialization:
        ts = now or utc_now()
        return cls(
            id=specialization_id or new_id(),
            name=name,
            name_ar=name_ar,
            category=category,
            description=description,
            description_ar=description_ar,
            created_at=ts,
            updated_at=ts,
        )

    @classmethod
    def reconstitute(cls, data: Mapping[str, Any]) -> Specialization:
        return cls(**dict(data))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "name_ar": self.name_ar,
            "category": self.category,
            "description": self.description,
            "description_ar": self.description_ar,
            "is_active": self.is_active,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def activate(self, *, now: datetime | None = None) -> Specialization:
        return self._evolve(is_active=True, updated_at=now or utc_now())

    def deactivate(self, *, now: datetime | None = None) -> Specialization:
        return self._evolve(is_active=False, updated_at=now or utc_now())


@dataclass(frozen=True, slots=True)
class CertificationDetail:
    """A certificate backing a provider specialization."""

    name: str
    issuing_authority: str
    issue_date: datetime | None = None
    expiry_date: datetime | None = None
    certificate_number: str | None = None

    def __post_init__(self) -> None:
        if not (self.name or "").strip():
            raise ValidationFailedError("Certification name is required")
        object.__setattr__(self, "issue_date", ensure_utc(self.issue_date))
        object.__setattr__(self, "expiry_date", ensure_utc(self.expiry_date))

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expiry_date is None:
            return False
        return (ensure_utc(now) or utc_now()) > self.expiry_date

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CertificationDetail:
        return cls(
            name=data["name"],
            issuing_authority=data.get("issuing_authority", ""),
            issue_date=_parse_dt(data.get("issue_date")),
            expiry_date=_parse_dt(data.get("expiry_date")),
            certificate_number=data.get("certificate_number"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "issuing_authority": self.issuing_authority,
            "issue_date": self.issue_date.isoformat() if self.issue_date else None,
            "expiry_date": self.expiry_date.isoformat() if self.expiry_date else None,
            "certificate_number": self.certificate_number,
        }


def _parse_dt(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


@dataclass(frozen=True, slots=True)
class ProviderSpecialization(BaseEntity):
    """A provider's standing in one specialization.

    Attributes:
        id: Opaque identifier.
        provider_id: Provider (law firm or lawyer).
        specialization_id: Specialization held.
        experience_years: Years of practice, when known.
        is_certified: At least one certification on record.
        certifications: Certificates backing the specialization.
        case_count: Cases completed in this specialization.
        success_rate: Percentage of successful cases (0..100), or ``None``.
        created_at: Creation timestamp (UTC).
        updated_at: Last change timestamp (UTC).
    """

    id: str
    provider_id: str
    specialization_id: str
    experience_years: int | None = None
    is_certified: bool = False
    certifications: tuple[CertificationDetail, ...] = field(default_factory=tuple)
    case_count: int = 0
    success_rate: Decimal | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.provider_id or not self.specialization_id:
            raise ValidationFailedError(
                "Provider specialization requires provider and specialization ids"
            )
        if self.experience_years is not None and self.experience_years < 0:
            raise ValidationFailedError("Experience years cannot be negative")
        if self.case_count < 0:
            raise ValidationFailedError("Case count cannot be negative")
        object.__setattr__(self, "certifications", tuple(self.certifications))
        object.__setattr__(self, "success_rate", _rate(self.success_rate))
        self._normalize_datetimes("created_at", "updated_at")

    @classmethod
    def create(
        cls,
        *,
        provider_id: str,
        specialization_id: str,
        experience_years: int | None = None,
        certifications: Iterable[CertificationDetail] = (),
        record_id: str | None = None,
        now: datetime | None = None,
    ) -> ProviderSpecialization:
        ts = now or utc_now()
        certs = tuple(certifications)
        return cls(
            id=record_id or new_id(),
            provider_id=provider_id,
            specialization_id=specialization_id,
            experience_years=experience_years,
            is_certified=bool(certs),
            certifications=certs,
            created_at=ts,
            updated_at=ts,
        )

    @classmethod
    def reconstitute(cls, data: Mapping[str, Any]) -> ProviderSpecialization:
        values = dict(data)
        values["certifications"] = tuple(
            c if isinstance(c, CertificationDetail) else CertificationDetail.from_dict(c)
            for c in data.get("certifications") or ()
        )
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "provider_id": self.provider_id,
            "specialization_id": self.specialization_id,
            "experience_years": self.experience_years,
            "is_certified": self.is_certified,
            "certifications": [c.to_dict() for c in self.certifications],
            "case_count": self.case_count,
            "success_rate": str(self.success_rate) if self.success_rate is not None else None,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def add_certification(
        self, certification: CertificationDetail, *, now: datetime | None = None
    ) -> ProviderSpecialization:
        return self._evolve(
            certifications=(*self.certifications, certification),
            is_certified=True,
            updated_at=now or utc_now(),
        )

    def remove_certification(
        self, name: str, *, now: datetime | None = None
    ) -> ProviderSpecialization:
        remaining = tuple(c for c in self.certifications if c.name != name)
        return self._evolve(
            certifications=remaining,
            is_certified=self.is_certified and bool(remaining),
            updated_at=now or utc_now(),
        )

    def update_experience(
        self, years: int, *, now: datetime | None = None
    ) -> ProviderSpecialization:
        return self._evolve(experience_years=years, updated_at=now or utc_now())

    def update_success_rate(
        self, rate: Decimal | float | str, *, now: datetime | None = None
    ) -> ProviderSpecialization:
        return self._evolve(success_rate=_rate(rate), updated_at=now or utc_now())

    def record_case(
        self, was_successful: bool, *, now: datetime | None = None
    ) -> ProviderSpecialization:
        """Count one more case and fold its outcome into the success rate."""
        count, rate = recompute_success_rate(self.case_count, self.success_rate, was_successful)
        return self._evolve(case_count=count, success_rate=rate, updated_at=now or utc_now())


@dataclass(frozen=True, slots=True)
class ProviderExpertise:
    """Aggregate view of a provider across its active specializations.

    Attributes:
        provider_id: Provider summarized.
        specializations: Names of the active specializations held.
        is_certified: Certified in at least one of them.
        max_experience_years: Highest experience across records.
        total_cases: Sum of case counts.
        average_success_rate: Case-count-weighted mean success rate, or ``None``.
    """

    provider_id: str
    specializations: tuple[str, ...]
    is_certified: bool
    max_experience_years: int
    total_cases: int
    average_success_rate: Decimal | None

    @classmethod
    def aggregate(
        cls,
        provider_id: str,
        records: Iterable[tuple[ProviderSpecialization, Specialization]],
    ) -> ProviderExpertise:
        names: list[str] = []
        certified = False
        max_years = 0
        total_cases = 0
        weighted = Decimal(0)
        weighted_cases = 0
        for record, spec in records:
            if not spec.is_active:
                continue
            names.append(spec.name)
            certified = certified or record.is_certified
            max_years = max(max_years, record.experience_years or 0)
            total_cases += record.case_count
            if record.success_rate is not None and record.case_count > 0:
                weighted += record.success_rate * record.case_count
                weighted_cases += record.case_count
        average = (
            (weighted / weighted_cases).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
            if weighted_cases
            else None
        )
        return cls(
            provider_id=provider_id,
            specializations=tuple(names),
            is_certified=certified,
            max_experience_years=max_years,
            total_cases=total_cases,
            average_success_rate=average,
        )
