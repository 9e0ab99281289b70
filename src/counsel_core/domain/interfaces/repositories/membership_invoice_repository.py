# src/counsel_core/domain/interfaces/repositories/membership_invoice_repository.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Membership invoice repository interface.

Purpose:
    Load and persist membership invoices, including the sweep query used to
    flag overdue invoices.

Layer:
    domain/interfaces/repositories
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from counsel_core.domain.entities.membership_invoice import MembershipInvoice


class MembershipInvoiceRepository(Protocol):
    """Protocol for membership invoice persistence."""

    async def find_by_id(self, invoice_id: str) -> MembershipInvoice | None: ...

    async def create(self, invoice: MembershipInvoice) -> None: ...

    async def update(self, invoice: MembershipInvoice) -> None: ...

    async def list_unpaid_past_due(self, now: datetime) -> Sequence[MembershipInvoice]:
        """Unpaid invoices whose ``due_date`` is before ``now``, oldest due first."""
