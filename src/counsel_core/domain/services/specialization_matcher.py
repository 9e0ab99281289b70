# src/counsel_core/domain/services/specialization_matcher.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Specialization matcher (domain kernel).

Purpose:
    Fold provider specialization records into per-provider match scores and
    rank providers for routing.

Layer:
    domain/services

Notes:
    - Pure domain logic: callers resolve specialization names and load the
      provider records; the matcher only aggregates, filters and ranks.
    - Per matched record a provider earns
      ``1 + (0.5 if certified) + success_rate / 100``.
    - Filters apply to the aggregated provider (certified in any matched
      specialization, best experience, best success rate).
    - Ranking is a stable descending sort, so equal scores keep the order in
      which providers were first encountered.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from counsel_core.domain.entities.specialization import ProviderSpecialization
from counsel_core.domain.exceptions.lifecycle import ValidationFailedError

__all__ = [
    "MatchOptions",
    "ProviderMatch",
    "SpecializationMatcher",
    "record_score",
    "has_any_specialization",
]

_BASE = Decimal(1)
_CERTIFIED_BONUS = Decimal("0.5")
_HUNDRED = Decimal(100)


@dataclass(frozen=True, slots=True)
class MatchOptions:
    """Filters and truncation for a match query.

    Attributes:
        require_certification: Keep only providers certified in a matched specialization.
        min_experience_years: Minimum best experience across matched records.
        min_success_rate: Minimum best success rate across matched records.
        limit: Maximum number of results; ``None`` or 0 keeps all.
    """

    require_certification: bool = False
    min_experience_years: int | None = None
    min_success_rate: Decimal | None = None
    limit: int | None = None

    def __post_init__(self) -> None:
        if self.limit is not None and self.limit < 0:
            raise ValidationFailedError("limit must be >= 0", details={"limit": self.limit})
        if self.min_success_rate is not None:
            object.__setattr__(self, "min_success_rate", Decimal(str(self.min_success_rate)))


@dataclass(slots=True)
class ProviderMatch:
    """A provider's aggregated fitness for a set of required specializations."""

    provider_id: str
    match_score: Decimal = Decimal(0)
    matching_specializations: list[str] = field(default_factory=list)
    is_certified: bool = False
    experience_years: int = 0
    success_rate: Decimal | None = None

    def absorb(self, name: str, record: ProviderSpecialization) -> None:
        self.matching_specializations.append(name)
        self.match_score += record_score(record)
        self.is_certified = self.is_certified or record.is_certified
        self.experience_years = max(self.experience_years, record.experience_years or 0)
        if record.success_rate is not None and (
            self.success_rate is None or record.success_rate > self.success_rate
        ):
            self.success_rate = record.success_rate


def record_score(record: ProviderSpecialization) -> Decimal:
    """Score contribution of one matched provider specialization record."""
    bonus = _CERTIFIED_BONUS if record.is_certified else Decimal(0)
    return _BASE + bonus + (record.success_rate or Decimal(0)) / _HUNDRED


def has_any_specialization(held: Iterable[str], required: Sequence[str]) -> bool:
    """Case-insensitive "at least one" check; an empty requirement always passes."""
    if not required:
        return True
    normalized = {name.casefold() for name in held}
    return any(name.casefold() in normalized for name in required)


class SpecializationMatcher:
    """Aggregate and rank provider specialization records."""

    def match(
        self,
        candidates: Iterable[tuple[str, Iterable[ProviderSpecialization]]],
        options: MatchOptions | None = None,
    ) -> list[ProviderMatch]:
        """Rank providers.

        Args:
            candidates:
                ``(specialization_name, records)`` pairs in the order the
                specializations were requested.
            options:
                Optional filters and limit.

        Returns:
            Matches sorted by descending score, truncated to ``options.limit``.
        """
        opts = options or MatchOptions()
        by_provider: dict[str, ProviderMatch] = {}
        for name, records in candidates:
            for record in records:
                match = by_provider.get(record.provider_id)
                if match is None:
                    match = by_provider[record.provider_id] = ProviderMatch(record.provider_id)
                match.absorb(name, record)

        kept = [m for m in by_provider.values() if self._passes(m, opts)]
        ranked = sorted(kept, key=lambda m: m.match_score, reverse=True)
        if opts.limit:
            return ranked[: opts.limit]
        return ranked

    @staticmethod
    def _passes(match: ProviderMatch, opts: MatchOptions) -> bool:
        if opts.require_certification and not match.is_certified:
            return False
        if (
            opts.min_experience_years is not None
            and match.experience_years < opts.min_experience_years
        ):
            return False
        if opts.min_success_rate is not None and (
            match.success_rate is None or match.success_rate < opts.min_success_rate
        ):
            return False
        return True
