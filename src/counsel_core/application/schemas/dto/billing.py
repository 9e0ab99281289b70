# src/counsel_core/application/schemas/dto/billing.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Application DTOs for billing flows (refunds, disputes, invoices).

Purpose:
    Transport-agnostic command/result objects consumed and produced by the
    billing use cases.

Layer:
    application/schemas/dto
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from counsel_core.domain.enums.billing import DisputePriority


@dataclass(frozen=True, slots=True)
class CreateRefundRequest:
    """Command to open a refund request."""

    user_id: str
    amount: Decimal | int | str
    reason: str
    currency: str = "SAR"
    transaction_log_id: str | None = None
    payment_id: str | None = None


@dataclass(frozen=True, slots=True)
class CreateDisputeRequest:
    """Command to open a dispute; exactly one related id must be set."""

    user_id: str
    reason: str
    description: str
    consultation_id: str | None = None
    legal_opinion_id: str | None = None
    service_request_id: str | None = None
    litigation_case_id: str | None = None
    evidence: Mapping[str, Any] = field(default_factory=dict)
    priority: DisputePriority = DisputePriority.NORMAL


@dataclass(frozen=True, slots=True)
class CreateInvoiceRequest:
    """Command to issue a membership invoice."""

    membership_id: str
    amount: Decimal | int | str
    due_date: datetime
    currency: str = "SAR"


@dataclass(frozen=True, slots=True)
class OverdueSweepResult:
    """Outcome of flagging unpaid, past-due invoices."""

    checked_at: datetime
    invoice_ids: tuple[str, ...]

    @property
    def count(self) -> int:
        return len(self.invoice_ids)
