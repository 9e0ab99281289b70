# src/counsel_core/domain/interfaces/repositories/specialization_repository.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Specialization repository interfaces.

Purpose:
    Resolve specializations by name/id/category and load or persist provider
    specialization records.

Layer:
    domain/interfaces/repositories

Notes:
    ``ProviderSpecializationRepository.get_for_update`` must lock the record
    for the rest of the unit of work (``SELECT ... FOR UPDATE`` on SQL
    backends) so concurrent case results for the same provider and
    specialization cannot lose updates.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from counsel_core.domain.entities.specialization import ProviderSpecialization, Specialization


class SpecializationRepository(Protocol):
    """Protocol for the specialization catalogue."""

    async def find_by_id(self, specialization_id: str) -> Specialization | None: ...

    async def find_by_name(self, name: str) -> Specialization | None:
        """Case-insensitive lookup by English name."""

    async def find_by_category(
        self, category: str, *, active_only: bool = True
    ) -> Sequence[Specialization]: ...

    async def save(self, specialization: Specialization) -> None: ...


class ProviderSpecializationRepository(Protocol):
    """Protocol for provider specialization records."""

    async def find_by_specialization(
        self, specialization_id: str
    ) -> Sequence[ProviderSpecialization]:
        """Records for a specialization ordered by creation time."""

    async def find_by_provider(self, provider_id: str) -> Sequence[ProviderSpecialization]: ...

    async def find_by_provider_and_specialization(
        self, provider_id: str, specialization_id: str
    ) -> ProviderSpecialization | None: ...

    async def get_for_update(
        self, provider_id: str, specialization_id: str
    ) -> ProviderSpecialization | None:
        """Like ``find_by_provider_and_specialization`` but row-locked."""

    async def save(self, record: ProviderSpecialization) -> None:
        """Insert or update ``record`` by id."""
