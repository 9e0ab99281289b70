# src/counsel_core/domain/interfaces/repositories/sla_policy_repository.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""SLA policy repository interface.

Purpose:
    Store SLA policies and resolve the policy governing a
    ``(request_type, priority)`` pair.

Layer:
    domain/interfaces/repositories

Notes:
    ``find_best_match`` returns the active policy for the exact pair, else the
    active wildcard policy (``priority IS NULL``) for the request type, else
    ``None``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from counsel_core.domain.entities.sla_policy import SLAPolicy
from counsel_core.domain.enums.sla import RequestType, SLAPriority


class SLAPolicyRepository(Protocol):
    """Protocol for SLA policy persistence."""

    async def save(self, policy: SLAPolicy) -> None:
        """Insert or update ``policy`` by id."""

    async def find_by_id(self, policy_id: str) -> SLAPolicy | None: ...

    async def find_by_name(self, name: str) -> SLAPolicy | None: ...

    async def find_by_type_and_priority(
        self, request_type: RequestType, priority: SLAPriority | None
    ) -> SLAPolicy | None:
        """Active policy for the exact pair (``None`` priority selects the wildcard)."""

    async def find_best_match(
        self, request_type: RequestType, priority: SLAPriority
    ) -> SLAPolicy | None: ...

    async def find_by_request_type(self, request_type: RequestType) -> Sequence[SLAPolicy]: ...

    async def find_all_active(self) -> Sequence[SLAPolicy]: ...

    async def find_all(self) -> Sequence[SLAPolicy]: ...

    async def delete(self, policy_id: str) -> None: ...

    async def exists_by_name(self, name: str) -> bool: ...

    async def exists_by_type_and_priority(
        self, request_type: RequestType, priority: SLAPriority | None
    ) -> bool: ...
