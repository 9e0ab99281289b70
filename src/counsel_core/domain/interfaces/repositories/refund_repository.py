# src/counsel_core/domain/interfaces/repositories/refund_repository.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Refund repository interface.

Purpose:
    Load and persist refunds.

Layer:
    domain/interfaces/repositories
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from counsel_core.domain.entities.refund import Refund
from counsel_core.domain.enums.billing import RefundStatus


class RefundRepository(Protocol):
    """Protocol for refund persistence."""

    async def find_by_id(self, refund_id: str) -> Refund | None: ...

    async def create(self, refund: Refund) -> None: ...

    async def update(self, refund: Refund) -> None: ...

    async def list_by_status(self, status: RefundStatus) -> Sequence[Refund]: ...
