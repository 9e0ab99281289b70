# src/counsel_core/domain/interfaces/repositories/call_request_repository.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Call request repository interface.

Purpose:
    Load and persist call requests and their status history.

Layer:
    domain/interfaces/repositories
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from counsel_core.domain.entities.call_request import CallRequest
from counsel_core.domain.entities.status_history import StatusHistoryEntry


class CallRequestRepository(Protocol):
    """Protocol for call request persistence."""

    async def find_by_id(self, call_id: str) -> CallRequest | None: ...

    async def create(self, call: CallRequest) -> None: ...

    async def update(self, call: CallRequest) -> None: ...

    async def list_by_subscriber(self, subscriber_id: str) -> Sequence[CallRequest]: ...

    async def add_status_history(self, entry: StatusHistoryEntry) -> None: ...

    async def list_status_history(self, call_id: str) -> Sequence[StatusHistoryEntry]:
        """Status history ordered by ``changed_at`` ascending."""
