# src/counsel_core/domain/entities/dispute.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Dispute Entity.

Purpose:
    Immutable formal complaint against exactly one delivered service
    (consultation, legal opinion, service request or litigation case).

Layer:
    domain/entities

Transitions:
    open --start_review--> under_review
    open | under_review --escalate--> escalated
    under_review | escalated --resolve--> resolved --close--> closed

Notes:
    "At most one active dispute per user and related entity" is enforced by
    the create use case through ``DisputesRepository.has_active_dispute``.
    The entity does not know about other disputes.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from counsel_core.domain.entities.base import BaseEntity, ensure_utc, new_id, utc_now
from counsel_core.domain.enums.billing import DisputePriority, DisputeStatus, RelatedEntityType
from counsel_core.domain.exceptions.lifecycle import (
    InvalidTransitionError,
    ValidationFailedError,
)

__all__ = [
    "Dispute",
    "DISPUTE_REASON_MIN_LENGTH",
    "DISPUTE_DESCRIPTION_MIN_LENGTH",
    "DISPUTE_RESOLUTION_MIN_LENGTH",
]

DISPUTE_REASON_MIN_LENGTH = 5
DISPUTE_DESCRIPTION_MIN_LENGTH = 20
DISPUTE_RESOLUTION_MIN_LENGTH = 10

_RELATED_FIELDS: dict[RelatedEntityType, str] = {
    RelatedEntityType.CONSULTATION: "consultation_id",
    RelatedEntityType.LEGAL_OPINION: "legal_opinion_id",
    RelatedEntityType.SERVICE_REQUEST: "service_request_id",
    RelatedEntityType.LITIGATION_CASE: "litigation_case_id",
}


@dataclass(frozen=True, slots=True)
class Dispute(BaseEntity):
    """Dispute raised by a user.

    Attributes:
        id: Opaque identifier.
        user_id: Complaining user.
        reason: Short reason (at least five characters).
        description: Detailed description (at least twenty characters).
        consultation_id: Related consultation, if that is the disputed service.
        legal_opinion_id: Related legal opinion request.
        service_request_id: Related service request.
        litigation_case_id: Related litigation case.
        evidence: Free-form evidence bag, merged by :meth:`add_evidence`.
        status: Current lifecycle status.
        priority: Handling priority.
        resolution: Resolution text once resolved.
        resolution_data: Optional structured resolution payload.
        resolved_by: Resolver id.
        resolved_at: Resolution timestamp.
        escalated_at: Escalation timestamp.
        escalated_to: Escalation target (user or team id).
        escalation_reason: Why the dispute was escalated.
        created_at: Creation timestamp (UTC).
        updated_at: Last change timestamp (UTC).
    """

    id: str
    user_id: str
    reason: str
    description: str
    consultation_id: str | None = None
    legal_opinion_id: str | None = None
    service_request_id: str | None = None
    litigation_case_id: str | None = None
    evidence: Mapping[str, Any] = field(default_factory=dict)
    status: DisputeStatus = DisputeStatus.OPEN
    priority: DisputePriority = DisputePriority.NORMAL
    resolution: str | None = None
    resolution_data: Mapping[str, Any] | None = None
    resolved_by: str | None = None
    resolved_at: datetime | None = None
    escalated_at: datetime | None = None
    escalated_to: str | None = None
    escalation_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        """Validate the related-entity reference and normalize values."""
        references = [name for name in _RELATED_FIELDS.values() if getattr(self, name)]
        if not references:
            raise ValidationFailedError("Dispute has no related entity provided")
        if len(references) > 1:
            raise ValidationFailedError(
                "Dispute must reference exactly one related entity",
                details={"related_fields": references},
            )
        if not self.user_id:
            raise ValidationFailedError("Dispute requires a user id")
        object.__setattr__(self, "status", DisputeStatus(self.status))
        object.__setattr__(self, "priority", DisputePriority(self.priority))
        object.__setattr__(self, "evidence", dict(self.evidence or {}))
        self._normalize_datetimes("resolved_at", "escalated_at", "created_at", "updated_at")

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        *,
        user_id: str,
        reason: str,
        description: str,
        consultation_id: str | None = None,
        legal_opinion_id: str | None = None,
        service_request_id: str | None = None,
        litigation_case_id: str | None = None,
        evidence: Mapping[str, Any] | None = None,
        priority: DisputePriority = DisputePriority.NORMAL,
        dispute_id: str | None = None,
        now: datetime | None = None,
    ) -> Dispute:
        """Open a new dispute.

        Raises:
            ValidationFailedError: If zero or several related entities are given,
                or reason/description are too short.
        """
        reason = (reason or "").strip()
        description = (description or "").strip()
        if len(reason) < DISPUTE_REASON_MIN_LENGTH:
            raise ValidationFailedError(
                f"Dispute reason must be at least {DISPUTE_REASON_MIN_LENGTH} characters"
            )
        if len(description) < DISPUTE_DESCRIPTION_MIN_LENGTH:
            raise ValidationFailedError(
                f"Dispute description must be at least {DISPUTE_DESCRIPTION_MIN_LENGTH} characters"
            )
        ts = now or utc_now()
        return cls(
            id=dispute_id or new_id(),
            user_id=user_id,
            reason=reason,
            description=description,
            consultation_id=consultation_id,
            legal_opinion_id=legal_opinion_id,
            service_request_id=service_request_id,
            litigation_case_id=litigation_case_id,
            evidence=evidence or {},
            priority=priority,
            created_at=ts,
            updated_at=ts,
        )

    @classmethod
    def reconstitute(cls, data: Mapping[str, Any]) -> Dispute:
        """Rebuild a dispute from :meth:`to_dict` output or a persistence row."""
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            reason=data["reason"],
            description=data["description"],
            consultation_id=data.get("consultation_id"),
            legal_opinion_id=data.get("legal_opinion_id"),
            service_request_id=data.get("service_request_id"),
            litigation_case_id=data.get("litigation_case_id"),
            evidence=data.get("evidence") or {},
            status=DisputeStatus(data.get("status", DisputeStatus.OPEN)),
            priority=DisputePriority(data.get("priority", DisputePriority.NORMAL)),
            resolution=data.get("resolution"),
            resolution_data=data.get("resolution_data"),
            resolved_by=data.get("resolved_by"),
            resolved_at=data.get("resolved_at"),
            escalated_at=data.get("escalated_at"),
            escalated_to=data.get("escalated_to"),
            escalation_reason=data.get("escalation_reason"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "reason": self.reason,
            "description": self.description,
            "consultation_id": self.consultation_id,
            "legal_opinion_id": self.legal_opinion_id,
            "service_request_id": self.service_request_id,
            "litigation_case_id": self.litigation_case_id,
            "evidence": dict(self.evidence),
            "status": self.status.value,
            "priority": self.priority.value,
            "resolution": self.resolution,
            "resolution_data": dict(self.resolution_data) if self.resolution_data else None,
            "resolved_by": self.resolved_by,
            "resolved_at": self.resolved_at,
            "escalated_at": self.escalated_at,
            "escalated_to": self.escalated_to,
            "escalation_reason": self.escalation_reason,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start_review(self, *, now: datetime | None = None) -> Dispute:
        """open -> under_review."""
        self._require("start_review", DisputeStatus.OPEN)
        ts = now or utc_now()
        return self._evolve(status=DisputeStatus.UNDER_REVIEW, updated_at=ts)

    def escalate(
        self,
        *,
        escalated_to: str,
        escalation_reason: str,
        new_priority: DisputePriority | None = None,
        now: datetime | None = None,
    ) -> Dispute:
        """open | under_review -> escalated, optionally bumping the priority."""
        self._require("escalate", DisputeStatus.OPEN, DisputeStatus.UNDER_REVIEW)
        if not (escalated_to or "").strip():
            raise ValidationFailedError("Escalation target is required")
        ts = now or utc_now()
        return self._evolve(
            status=DisputeStatus.ESCALATED,
            escalated_to=escalated_to,
            escalation_reason=escalation_reason,
            escalated_at=ts,
            priority=new_priority or self.priority,
            updated_at=ts,
        )

    def resolve(
        self,
        *,
        resolved_by: str,
        resolution: str,
        resolution_data: Mapping[str, Any] | None = None,
        now: datetime | None = None,
    ) -> Dispute:
        """under_review | escalated -> resolved."""
        self._require("resolve", DisputeStatus.UNDER_REVIEW, DisputeStatus.ESCALATED)
        resolution = (resolution or "").strip()
        if len(resolution) < DISPUTE_RESOLUTION_MIN_LENGTH:
            raise ValidationFailedError(
                f"Resolution must be at least {DISPUTE_RESOLUTION_MIN_LENGTH} characters"
            )
        ts = now or utc_now()
        return self._evolve(
            status=DisputeStatus.RESOLVED,
            resolved_by=resolved_by,
            resolution=resolution,
            resolution_data=dict(resolution_data) if resolution_data else None,
            resolved_at=ts,
            updated_at=ts,
        )

    def close(self, *, now: datetime | None = None) -> Dispute:
        """resolved -> closed (terminal)."""
        self._require("close", DisputeStatus.RESOLVED)
        return self._evolve(status=DisputeStatus.CLOSED, updated_at=now or utc_now())

    def update_priority(self, priority: DisputePriority, *, now: datetime | None = None) -> Dispute:
        """Change the priority of a non-final dispute."""
        self._require_not_final("update_priority")
        return self._evolve(priority=DisputePriority(priority), updated_at=now or utc_now())

    def add_evidence(
        self, evidence: Mapping[str, Any], *, now: datetime | None = None
    ) -> Dispute:
        """Merge ``evidence`` into the evidence bag (new keys win)."""
        self._require_not_final("add_evidence")
        merged = {**self.evidence, **evidence}
        return self._evolve(evidence=merged, updated_at=now or utc_now())

    # ------------------------------------------------------------------
    # Derived
    # ------------------------------------------------------------------

    @property
    def related_entity(self) -> tuple[RelatedEntityType, str]:
        """The single (type, id) reference this dispute is about."""
        for entity_type, name in _RELATED_FIELDS.items():
            value = getattr(self, name)
            if value:
                return entity_type, value
        raise ValidationFailedError("Dispute has no related entity provided")

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    @property
    def is_final(self) -> bool:
        return self.status.is_final

    @property
    def requires_immediate_attention(self) -> bool:
        """Active and prioritized high or urgent."""
        return self.is_active and self.priority.rank >= DisputePriority.HIGH.rank

    def age_in_days(self, now: datetime | None = None) -> int:
        """Whole days elapsed since creation."""
        if self.created_at is None:
            return 0
        elapsed = (ensure_utc(now) or utc_now()) - self.created_at
        return max(0, math.floor(elapsed.total_seconds() / 86_400))

    @property
    def resolution_duration(self) -> timedelta | None:
        if self.resolved_at is None or self.created_at is None:
            return None
        return self.resolved_at - self.created_at

    def _require(self, operation: str, *allowed: DisputeStatus) -> None:
        if self.status not in allowed:
            raise InvalidTransitionError(
                entity="dispute", operation=operation, current_status=self.status
            )

    def _require_not_final(self, operation: str) -> None:
        if self.status.is_final:
            raise InvalidTransitionError(
                entity="dispute",
                operation=operation,
                current_status=self.status,
                message=f"Cannot {operation} on a finalized dispute",
            )
