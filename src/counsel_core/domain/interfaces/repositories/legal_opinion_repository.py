# src/counsel_core/domain/interfaces/repositories/legal_opinion_repository.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Legal opinion request repository interface.

Purpose:
    Load and persist legal opinion requests and their status history.

Layer:
    domain/interfaces/repositories

Notes:
    Implementations live in the adapters layer and are resolved through the
    unit of work. ``update`` persists the instance returned by a transition;
    callers never mutate entities in place.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from counsel_core.domain.entities.legal_opinion_request import LegalOpinionRequest
from counsel_core.domain.entities.status_history import StatusHistoryEntry
from counsel_core.domain.enums.legal_opinion import OpinionStatus


class LegalOpinionRepository(Protocol):
    """Protocol for legal opinion request persistence."""

    async def find_by_id(self, request_id: str) -> LegalOpinionRequest | None:
        """Return the request or ``None`` (soft-deleted rows included)."""

    async def create(self, request: LegalOpinionRequest) -> None:
        """Insert a new request."""

    async def update(self, request: LegalOpinionRequest) -> None:
        """Persist a transitioned request."""

    async def list_by_client(
        self, client_id: str, *, status: OpinionStatus | None = None
    ) -> Sequence[LegalOpinionRequest]:
        """Requests of a client, newest first."""

    async def list_by_lawyer(self, lawyer_id: str) -> Sequence[LegalOpinionRequest]:
        """Requests assigned to a lawyer, newest first."""

    async def add_status_history(self, entry: StatusHistoryEntry) -> None:
        """Append a status history entry."""

    async def list_status_history(self, request_id: str) -> Sequence[StatusHistoryEntry]:
        """Status history ordered by ``changed_at`` ascending."""
