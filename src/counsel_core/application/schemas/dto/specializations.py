# src/counsel_core/application/schemas/dto/specializations.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Application DTOs for provider matching and case outcomes.

Layer:
    application/schemas/dto
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from counsel_core.domain.entities.specialization import ProviderSpecialization

__all__ = ["FindProvidersRequest", "CaseResultOutcome"]


@dataclass(frozen=True, slots=True)
class FindProvidersRequest:
    """Query for providers holding any of ``specialization_names``.

    ``limit=None`` applies the configured default limit.
    """

    specialization_names: Sequence[str]
    require_certification: bool = False
    min_experience_years: int | None = None
    min_success_rate: Decimal | None = None
    limit: int | None = None


@dataclass(frozen=True, slots=True)
class CaseResultOutcome:
    """Records updated by one case result."""

    provider_id: str
    category: str
    was_successful: bool
    updated: tuple[ProviderSpecialization, ...]

    @property
    def count(self) -> int:
        return len(self.updated)
