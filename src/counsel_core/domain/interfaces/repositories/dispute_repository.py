# src/counsel_core/domain/interfaces/repositories/dispute_repository.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Dispute repository interface.

Purpose:
    Load and persist disputes and answer the "active dispute exists" query the
    creation use case relies on.

Layer:
    domain/interfaces/repositories
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from counsel_core.domain.entities.dispute import Dispute
from counsel_core.domain.enums.billing import DisputeStatus, RelatedEntityType


class DisputeRepository(Protocol):
    """Protocol for dispute persistence."""

    async def find_by_id(self, dispute_id: str) -> Dispute | None: ...

    async def create(self, dispute: Dispute) -> None: ...

    async def update(self, dispute: Dispute) -> None: ...

    async def has_active_dispute(
        self, user_id: str, related_type: RelatedEntityType, related_id: str
    ) -> bool:
        """True when the user has a non-resolved, non-closed dispute on the entity."""

    async def list_by_user(
        self, user_id: str, *, status: DisputeStatus | None = None
    ) -> Sequence[Dispute]: ...
