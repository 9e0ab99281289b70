# src/counsel_core/domain/enums/billing.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Billing enums (disputes, refunds, membership invoices)."""

from __future__ import annotations

from enum import Enum


class DisputeStatus(str, Enum):
    """Lifecycle status of a dispute."""

    OPEN = "open"
    UNDER_REVIEW = "under_review"
    ESCALATED = "escalated"
    RESOLVED = "resolved"
    CLOSED = "closed"

    @property
    def is_active(self) -> bool:
        """Return True while the dispute still needs handling."""
        return self in (DisputeStatus.OPEN, DisputeStatus.UNDER_REVIEW, DisputeStatus.ESCALATED)

    @property
    def is_final(self) -> bool:
        """Return True once the dispute is resolved or closed."""
        return self in (DisputeStatus.RESOLVED, DisputeStatus.CLOSED)


class DisputePriority(str, Enum):
    """Handling priority of a dispute, ordered low to urgent."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        """Ordinal used for comparisons (1 = low, 4 = urgent)."""
        return _DISPUTE_PRIORITY_RANK[self]


_DISPUTE_PRIORITY_RANK: dict[DisputePriority, int] = {
    DisputePriority.LOW: 1,
    DisputePriority.NORMAL: 2,
    DisputePriority.HIGH: 3,
    DisputePriority.URGENT: 4,
}


class RefundStatus(str, Enum):
    """Lifecycle status of a refund request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PROCESSED = "processed"


class RelatedEntityType(str, Enum):
    """Kind of service a dispute is raised against."""

    CONSULTATION = "consultation"
    LEGAL_OPINION = "legal_opinion"
    SERVICE_REQUEST = "service_request"
    LITIGATION_CASE = "litigation_case"


class InvoiceStatus(str, Enum):
    """Lifecycle status of a membership invoice."""

    UNPAID = "unpaid"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


__all__ = [
    "DisputeStatus",
    "DisputePriority",
    "RefundStatus",
    "RelatedEntityType",
    "InvoiceStatus",
]
