# src/counsel_core/domain/entities/membership_invoice.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Membership Invoice Entity.

Purpose:
    Immutable invoice issued for a membership period.

Layer:
    domain/entities

Transitions:
    unpaid --mark_as_paid--> paid
    unpaid --mark_as_overdue--> overdue --mark_as_paid--> paid
    unpaid --cancel--> cancelled
"""

from __future__ import annotations

import math
import secrets
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from counsel_core.domain.entities.base import BaseEntity, base36, ensure_utc, new_id, utc_now
from counsel_core.domain.enums.billing import InvoiceStatus
from counsel_core.domain.exceptions.lifecycle import (
    InvalidTransitionError,
    ValidationFailedError,
)
from counsel_core.domain.value_objects.money import DEFAULT_CURRENCY, Money

__all__ = ["MembershipInvoice", "generate_invoice_number"]

_SECONDS_PER_DAY = 86_400


def generate_invoice_number(prefix: str = "INV", now: datetime | None = None) -> str:
    """Return ``<prefix>-<base36 epoch millis>-<4 hex chars>``."""
    millis = int((now or utc_now()).timestamp() * 1000)
    return f"{prefix}-{base36(millis)}-{secrets.token_hex(2).upper()}"


@dataclass(frozen=True, slots=True)
class MembershipInvoice(BaseEntity):
    """Invoice for a membership.

    Attributes:
        id: Opaque identifier.
        membership_id: Billed membership.
        invoice_number: Human-facing number.
        amount: Amount due.
        due_date: Payment due instant (UTC).
        status: Current lifecycle status.
        paid_at: Payment timestamp.
        created_at: Creation timestamp (UTC).
        updated_at: Last change timestamp (UTC).
    """

    id: str
    membership_id: str
    invoice_number: str
    amount: Money
    due_date: datetime
    status: InvoiceStatus = InvoiceStatus.UNPAID
    paid_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.membership_id:
            raise ValidationFailedError("Invoice requires a membership id")
        if not self.invoice_number:
            raise ValidationFailedError("Invoice requires an invoice number")
        object.__setattr__(self, "status", InvoiceStatus(self.status))
        self._normalize_datetimes("due_date", "paid_at", "created_at", "updated_at")

    @classmethod
    def create(
        cls,
        *,
        membership_id: str,
        amount: Money,
        due_date: datetime,
        invoice_number: str | None = None,
        invoice_id: str | None = None,
        now: datetime | None = None,
    ) -> MembershipInvoice:
        """Issue an unpaid invoice, generating a number when none is given."""
        ts = now or utc_now()
        return cls(
            id=invoice_id or new_id(),
            membership_id=membership_id,
            invoice_number=invoice_number or generate_invoice_number(now=ts),
            amount=amount,
            due_date=due_date,
            created_at=ts,
            updated_at=ts,
        )

    @classmethod
    def reconstitute(cls, data: Mapping[str, Any]) -> MembershipInvoice:
        return cls(
            id=data["id"],
            membership_id=data["membership_id"],
            invoice_number=data["invoice_number"],
            amount=Money.of(data["amount"], data.get("currency", DEFAULT_CURRENCY)),
            due_date=data["due_date"],
            status=InvoiceStatus(data.get("status", InvoiceStatus.UNPAID)),
            paid_at=data.get("paid_at"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "membership_id": self.membership_id,
            "invoice_number": self.invoice_number,
            "amount": str(self.amount.amount),
            "currency": self.amount.currency,
            "due_date": self.due_date,
            "status": self.status.value,
            "paid_at": self.paid_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def mark_as_paid(self, *, paid_at: datetime | None = None) -> MembershipInvoice:
        """unpaid | overdue -> paid."""
        self._require("mark_as_paid", InvoiceStatus.UNPAID, InvoiceStatus.OVERDUE)
        ts = paid_at or utc_now()
        return self._evolve(status=InvoiceStatus.PAID, paid_at=ts, updated_at=ts)

    def mark_as_overdue(self, *, now: datetime | None = None) -> MembershipInvoice:
        """unpaid -> overdue."""
        self._require("mark_as_overdue", InvoiceStatus.UNPAID)
        return self._evolve(status=InvoiceStatus.OVERDUE, updated_at=now or utc_now())

    def cancel(self, *, now: datetime | None = None) -> MembershipInvoice:
        """unpaid -> cancelled."""
        self._require("cancel", InvoiceStatus.UNPAID)
        return self._evolve(status=InvoiceStatus.CANCELLED, updated_at=now or utc_now())

    # ------------------------------------------------------------------
    # Derived
    # ------------------------------------------------------------------

    def is_overdue(self, now: datetime | None = None) -> bool:
        """True when the invoice is still open (not paid or cancelled) and past due."""
        if self.status in (InvoiceStatus.PAID, InvoiceStatus.CANCELLED):
            return False
        return self.due_date < (ensure_utc(now) or utc_now())

    def days_until_due(self, now: datetime | None = None) -> int:
        """Days left until the due date, rounded up (negative once past due)."""
        delta = self.due_date - (ensure_utc(now) or utc_now())
        return math.ceil(delta.total_seconds() / _SECONDS_PER_DAY)

    def days_overdue(self, now: datetime | None = None) -> int:
        """Days past the due date, rounded up; 0 unless overdue."""
        current = ensure_utc(now) or utc_now()
        if not self.is_overdue(current):
            return 0
        delta = current - self.due_date
        return max(0, math.ceil(delta.total_seconds() / _SECONDS_PER_DAY))

    def _require(self, operation: str, *allowed: InvoiceStatus) -> None:
        if self.status not in allowed:
            raise InvalidTransitionError(
                entity="membership_invoice", operation=operation, current_status=self.status
            )
