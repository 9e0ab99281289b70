# src/counsel_core/application/use_cases/specializations/provider_matching.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Use cases: provider matching and case outcome tracking.

Purpose:
    * Rank providers for a set of specialization names or a category.
    * Answer "does this provider hold any of these specializations?".
    * Summarize a provider's expertise.
    * Fold a finished case into the provider's per-specialization statistics.

Layer:
    application/use_cases/specializations

Notes:
    ``RecordCaseResultUseCase`` loads each record through
    ``get_for_update`` so the read-modify-write of case count and success
    rate happens under a row lock for the whole unit of work.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from counsel_core.application.schemas.dto.specializations import (
    CaseResultOutcome,
    FindProvidersRequest,
)
from counsel_core.application.services.lifecycle import resolve_repository
from counsel_core.application.uow import UnitOfWork
from counsel_core.domain.entities.base import utc_now
from counsel_core.domain.entities.specialization import (
    ProviderExpertise,
    ProviderSpecialization,
    Specialization,
)
from counsel_core.domain.interfaces.repositories.specialization_repository import (
    ProviderSpecializationRepository,
    SpecializationRepository,
)
from counsel_core.domain.services.specialization_matcher import (
    MatchOptions,
    ProviderMatch,
    SpecializationMatcher,
    has_any_specialization,
)
from counsel_core.infrastructure.observability.metrics import observe_transition

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_MATCH_LIMIT",
    "FindProvidersWithSpecializationsUseCase",
    "GetTopProvidersByCategoryUseCase",
    "ProviderHasSpecializationsUseCase",
    "GetProviderExpertiseUseCase",
    "RecordCaseResultUseCase",
]

DEFAULT_MATCH_LIMIT = 10


def _repos(tx: object) -> tuple[SpecializationRepository, ProviderSpecializationRepository]:
    return (
        resolve_repository(tx, "specializations", SpecializationRepository),
        resolve_repository(tx, "provider_specializations", ProviderSpecializationRepository),
    )


async def _gather(
    providers: ProviderSpecializationRepository, specs: Sequence[Specialization]
) -> list[tuple[str, Sequence[ProviderSpecialization]]]:
    return [(spec.name, await providers.find_by_specialization(spec.id)) for spec in specs]


class FindProvidersWithSpecializationsUseCase:
    """Rank providers holding any of the named specializations.

    Unknown or inactive names are ignored; when none resolve the result is
    empty.
    """

    def __init__(
        self,
        *,
        uow: UnitOfWork,
        matcher: SpecializationMatcher | None = None,
        default_limit: int = DEFAULT_MATCH_LIMIT,
    ) -> None:
        self._uow = uow
        self._matcher = matcher or SpecializationMatcher()
        self._default_limit = default_limit

    async def execute(self, req: FindProvidersRequest) -> list[ProviderMatch]:
        options = MatchOptions(
            require_certification=req.require_certification,
            min_experience_years=req.min_experience_years,
            min_success_rate=req.min_success_rate,
            limit=req.limit if req.limit is not None else self._default_limit,
        )

        async with self._uow as tx:
            specs_repo, providers = _repos(tx)
            resolved: list[Specialization] = []
            for name in req.specialization_names:
                spec = await specs_repo.find_by_name(name)
                if spec is not None and spec.is_active:
                    resolved.append(spec)
            candidates = await _gather(providers, resolved)

        if not resolved:
            logger.info(
                "specializations.match.no_specializations",
                extra={"names": list(req.specialization_names)},
            )
            return []

        matches = self._matcher.match(candidates, options)
        logger.info(
            "specializations.match.success",
            extra={"specializations": [s.name for s in resolved], "matches": len(matches)},
        )
        return matches


class GetTopProvidersByCategoryUseCase:
    """Best providers across every active specialization in a category."""

    def __init__(
        self, *, uow: UnitOfWork, matcher: SpecializationMatcher | None = None
    ) -> None:
        self._uow = uow
        self._matcher = matcher or SpecializationMatcher()

    async def execute(
        self, *, category: str, limit: int = DEFAULT_MATCH_LIMIT
    ) -> list[ProviderMatch]:
        async with self._uow as tx:
            specs_repo, providers = _repos(tx)
            specs = await specs_repo.find_by_category(category.strip().lower())
            candidates = await _gather(providers, specs)
        return self._matcher.match(candidates, MatchOptions(limit=limit))


class ProviderHasSpecializationsUseCase:
    """True when the provider holds at least one of the (active) named specializations."""

    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(self, *, provider_id: str, specialization_names: Sequence[str]) -> bool:
        if not specialization_names:
            return True
        async with self._uow as tx:
            specs_repo, providers = _repos(tx)
            held: list[str] = []
            for record in await providers.find_by_provider(provider_id):
                spec = await specs_repo.find_by_id(record.specialization_id)
                if spec is not None and spec.is_active:
                    held.append(spec.name)
        return has_any_specialization(held, specialization_names)


class GetProviderExpertiseUseCase:
    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(self, *, provider_id: str) -> ProviderExpertise:
        async with self._uow as tx:
            specs_repo, providers = _repos(tx)
            pairs: list[tuple[ProviderSpecialization, Specialization]] = []
            for record in await providers.find_by_provider(provider_id):
                spec = await specs_repo.find_by_id(record.specialization_id)
                if spec is not None:
                    pairs.append((record, spec))
        return ProviderExpertise.aggregate(provider_id, pairs)


class RecordCaseResultUseCase:
    """Count a finished case against every specialization the provider holds in a category."""

    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(
        self,
        *,
        provider_id: str,
        category: str,
        was_successful: bool,
        now: datetime | None = None,
    ) -> CaseResultOutcome:
        ts = now or utc_now()
        category = category.strip().lower()
        log_extra = {
            "provider_id": provider_id,
            "category": category,
            "was_successful": was_successful,
        }
        logger.info("specializations.record_case.start", extra=log_extra)

        updated: list[ProviderSpecialization] = []
        with observe_transition("provider_specialization", "record_case"):
            async with self._uow as tx:
                specs_repo, providers = _repos(tx)
                for spec in await specs_repo.find_by_category(category):
                    record = await providers.get_for_update(provider_id, spec.id)
                    if record is None:
                        continue
                    record = record.record_case(was_successful, now=ts)
                    await providers.save(record)
                    updated.append(record)
                await tx.commit()

        logger.info(
            "specializations.record_case.success", extra={**log_extra, "updated": len(updated)}
        )
        return CaseResultOutcome(
            provider_id=provider_id,
            category=category,
            was_successful=was_successful,
            updated=tuple(updated),
        )
