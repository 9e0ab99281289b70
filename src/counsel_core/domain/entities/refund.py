# src/counsel_core/domain/entities/refund.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Refund Entity.

Purpose:
    Immutable refund request tied to a prior transaction or payment. A refund
    is reviewed once (approved or rejected) and an approved refund is
    processed once.

Layer:
    domain/entities

Transitions:
    pending --approve--> approved --process--> processed
    pending --reject--> rejected
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

from counsel_core.domain.entities.base import BaseEntity, new_id, utc_now
from counsel_core.domain.enums.billing import RefundStatus
from counsel_core.domain.exceptions.lifecycle import (
    InvalidTransitionError,
    ValidationFailedError,
)
from counsel_core.domain.value_objects.money import DEFAULT_CURRENCY, Money

__all__ = ["Refund", "REFUND_REASON_MIN_LENGTH"]

REFUND_REASON_MIN_LENGTH = 10


@dataclass(frozen=True, slots=True)
class Refund(BaseEntity):
    """Refund request.

    Attributes:
        id: Opaque identifier.
        user_id: Requesting user.
        amount: Positive refund amount (currency included).
        reason: Free-text reason (at least ten characters).
        status: Current lifecycle status.
        transaction_log_id: Optional originating transaction.
        payment_id: Optional originating payment.
        reviewed_by: Reviewer id once approved or rejected.
        reviewed_at: Review timestamp.
        review_notes: Optional reviewer notes.
        processed_at: Processing timestamp.
        refund_reference: Gateway reference recorded when processed.
        created_at: Creation timestamp (UTC).
        updated_at: Last transition timestamp (UTC).
    """

    id: str
    user_id: str
    amount: Money
    reason: str
    status: RefundStatus = RefundStatus.PENDING
    transaction_log_id: str | None = None
    payment_id: str | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    review_notes: str | None = None
    processed_at: datetime | None = None
    refund_reference: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        """Validate amount, reason and timestamps."""
        if not self.user_id:
            raise ValidationFailedError("Refund requires a user id")
        if not self.amount.is_positive():
            raise ValidationFailedError(
                "Refund amount must be positive",
                details={"amount": str(self.amount.amount)},
            )
        if len((self.reason or "").strip()) < REFUND_REASON_MIN_LENGTH:
            raise ValidationFailedError(
                f"Refund reason must be at least {REFUND_REASON_MIN_LENGTH} characters",
                details={"reason": self.reason},
            )
        object.__setattr__(self, "status", RefundStatus(self.status))
        self._normalize_datetimes("reviewed_at", "processed_at", "created_at", "updated_at")

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        *,
        user_id: str,
        amount: Money | Decimal | int | float | str,
        reason: str,
        currency: str = DEFAULT_CURRENCY,
        transaction_log_id: str | None = None,
        payment_id: str | None = None,
        refund_id: str | None = None,
        now: datetime | None = None,
    ) -> Refund:
        """Create a pending refund.

        ``amount`` may be a :class:`Money` or a plain number combined with
        ``currency``.

        Raises:
            ValidationFailedError: If the amount is not positive or the reason is too short.
        """
        ts = now or utc_now()
        money = amount if isinstance(amount, Money) else Money.of(amount, currency)
        return cls(
            id=refund_id or new_id(),
            user_id=user_id,
            amount=money,
            reason=(reason or "").strip(),
            transaction_log_id=transaction_log_id,
            payment_id=payment_id,
            created_at=ts,
            updated_at=ts,
        )

    @classmethod
    def reconstitute(cls, data: Mapping[str, Any]) -> Refund:
        """Rebuild a refund from :meth:`to_dict` output or a persistence row."""
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            amount=Money.of(data["amount"], data.get("currency", DEFAULT_CURRENCY)),
            reason=data["reason"],
            status=RefundStatus(data.get("status", RefundStatus.PENDING)),
            transaction_log_id=data.get("transaction_log_id"),
            payment_id=data.get("payment_id"),
            reviewed_by=data.get("reviewed_by"),
            reviewed_at=data.get("reviewed_at"),
            review_notes=data.get("review_notes"),
            processed_at=data.get("processed_at"),
            refund_reference=data.get("refund_reference"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "amount": str(self.amount.amount),
            "currency": self.amount.currency,
            "reason": self.reason,
            "status": self.status.value,
            "transaction_log_id": self.transaction_log_id,
            "payment_id": self.payment_id,
            "reviewed_by": self.reviewed_by,
            "reviewed_at": self.reviewed_at,
            "review_notes": self.review_notes,
            "processed_at": self.processed_at,
            "refund_reference": self.refund_reference,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def approve(
        self,
        *,
        reviewed_by: str,
        review_notes: str | None = None,
        now: datetime | None = None,
    ) -> Refund:
        """pending -> approved."""
        self._require(RefundStatus.PENDING, "approve")
        ts = now or utc_now()
        return self._evolve(
            status=RefundStatus.APPROVED,
            reviewed_by=reviewed_by,
            reviewed_at=ts,
            review_notes=review_notes,
            updated_at=ts,
        )

    def reject(
        self,
        *,
        reviewed_by: str,
        review_notes: str | None = None,
        now: datetime | None = None,
    ) -> Refund:
        """pending -> rejected (terminal)."""
        self._require(RefundStatus.PENDING, "reject")
        ts = now or utc_now()
        return self._evolve(
            status=RefundStatus.REJECTED,
            reviewed_by=reviewed_by,
            reviewed_at=ts,
            review_notes=review_notes,
            updated_at=ts,
        )

    def process(self, refund_reference: str, *, now: datetime | None = None) -> Refund:
        """approved -> processed (terminal)."""
        if self.status is not RefundStatus.APPROVED:
            raise InvalidTransitionError(
                entity="refund",
                operation="process",
                current_status=self.status,
                message=f"Cannot process non-approved refund (status '{self.status.value}')",
            )
        if not (refund_reference or "").strip():
            raise ValidationFailedError("Refund reference is required to process a refund")
        ts = now or utc_now()
        return self._evolve(
            status=RefundStatus.PROCESSED,
            refund_reference=refund_reference.strip(),
            processed_at=ts,
            updated_at=ts,
        )

    # ------------------------------------------------------------------
    # Derived
    # ------------------------------------------------------------------

    @property
    def currency(self) -> str:
        return self.amount.currency

    @property
    def can_be_reviewed(self) -> bool:
        return self.status is RefundStatus.PENDING

    @property
    def can_be_processed(self) -> bool:
        return self.status is RefundStatus.APPROVED

    @property
    def is_final(self) -> bool:
        return self.status in (RefundStatus.REJECTED, RefundStatus.PROCESSED)

    @property
    def has_been_reviewed(self) -> bool:
        return self.reviewed_at is not None

    @property
    def review_duration(self) -> timedelta | None:
        """Time from creation to review, once reviewed."""
        if self.reviewed_at is None or self.created_at is None:
            return None
        return self.reviewed_at - self.created_at

    @property
    def processing_duration(self) -> timedelta | None:
        """Time from creation to processing, once processed."""
        if self.processed_at is None or self.created_at is None:
            return None
        return self.processed_at - self.created_at

    def _require(self, expected: RefundStatus, operation: str) -> None:
        if self.status is not expected:
            raise InvalidTransitionError(
                entity="refund", operation=operation, current_status=self.status
            )
