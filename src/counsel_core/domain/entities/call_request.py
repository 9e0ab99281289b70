# src/counsel_core/domain/entities/call_request.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Call Request Entity.

Purpose:
    Immutable subscriber request for a scheduled call with a provider,
    tracked from submission through scheduling, the call itself and its
    outcome.

Layer:
    domain/entities

Transitions:
    pending --schedule--> scheduled --start_call--> in_progress --end_call--> completed
    scheduled --reschedule--> scheduled
    scheduled --mark_no_show--> no_show
    any non-terminal --cancel--> cancelled
"""

from __future__ import annotations

import secrets
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from counsel_core.domain.entities.base import BaseEntity, base36, ensure_utc, new_id, utc_now
from counsel_core.domain.enums.call_request import CallPlatform, CallStatus
from counsel_core.domain.exceptions.lifecycle import (
    InvalidTransitionError,
    ValidationFailedError,
)
from counsel_core.domain.value_objects.duration import Duration

__all__ = [
    "CallRequest",
    "MAX_CALL_DURATION_MINUTES",
    "DEFAULT_BILLING_UNIT_MINUTES",
    "PURPOSE_MIN_LENGTH",
    "generate_request_number",
]

MAX_CALL_DURATION_MINUTES = 120
DEFAULT_BILLING_UNIT_MINUTES = 15
PURPOSE_MIN_LENGTH = 10

_RANDOM_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def generate_request_number(now: datetime | None = None) -> str:
    """Return ``CALL-<base36 epoch millis>-<4 random base36 chars>``."""
    millis = int((ensure_utc(now) or utc_now()).timestamp() * 1000)
    suffix = "".join(secrets.choice(_RANDOM_ALPHABET) for _ in range(4))
    return f"CALL-{base36(millis)}-{suffix}"


@dataclass(frozen=True, slots=True)
class CallRequest(BaseEntity):
    """Call request.

    Attributes:
        id: Opaque identifier.
        request_number: Human-facing number (``CALL-...``).
        subscriber_id: Requesting subscriber.
        purpose: Why the call is requested (at least ten characters).
        status: Current lifecycle status.
        assigned_provider_id: Provider handling the call.
        consultation_type: Optional consultation category.
        preferred_date: Subscriber's preferred date.
        preferred_time: Subscriber's preferred time slot (free text, e.g. ``"14:00"``).
        scheduled_at: Scheduled start (UTC).
        scheduled_duration: Scheduled length in minutes.
        actual_duration: Measured length in minutes once ended.
        call_started_at: Actual start.
        call_ended_at: Actual end.
        recording_url: Recording location, completed calls only.
        call_platform: Conferencing platform.
        call_link: Join link.
        cancellation_reason: Reason given on cancellation.
        submitted_at: Submission timestamp.
        completed_at: Completion timestamp.
        created_at: Creation timestamp (UTC).
        updated_at: Last change timestamp (UTC).
    """

    id: str
    request_number: str
    subscriber_id: str
    purpose: str
    status: CallStatus = CallStatus.PENDING
    assigned_provider_id: str | None = None
    consultation_type: str | None = None
    preferred_date: datetime | None = None
    preferred_time: str | None = None
    scheduled_at: datetime | None = None
    scheduled_duration: int | None = None
    actual_duration: int | None = None
    call_started_at: datetime | None = None
    call_ended_at: datetime | None = None
    recording_url: str | None = None
    call_platform: CallPlatform | None = None
    call_link: str | None = None
    cancellation_reason: str | None = None
    submitted_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.subscriber_id:
            raise ValidationFailedError("Call request requires a subscriber id")
        if len((self.purpose or "").strip()) < PURPOSE_MIN_LENGTH:
            raise ValidationFailedError(
                f"Call purpose must be at least {PURPOSE_MIN_LENGTH} characters",
                details={"purpose": self.purpose},
            )
        object.__setattr__(self, "status", CallStatus(self.status))
        if self.call_platform is not None:
            object.__setattr__(self, "call_platform", CallPlatform(self.call_platform))
        self._normalize_datetimes(
            "preferred_date",
            "scheduled_at",
            "call_started_at",
            "call_ended_at",
            "submitted_at",
            "completed_at",
            "created_at",
            "updated_at",
        )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        *,
        subscriber_id: str,
        purpose: str,
        consultation_type: str | None = None,
        preferred_date: datetime | None = None,
        preferred_time: str | None = None,
        request_id: str | None = None,
        request_number: str | None = None,
        now: datetime | None = None,
    ) -> CallRequest:
        """Submit a new pending call request.

        Raises:
            ValidationFailedError: If the purpose is shorter than ten characters.
        """
        ts = ensure_utc(now) or utc_now()
        return cls(
            id=request_id or new_id(),
            request_number=request_number or generate_request_number(ts),
            subscriber_id=subscriber_id,
            purpose=(purpose or "").strip(),
            consultation_type=consultation_type,
            preferred_date=preferred_date,
            preferred_time=preferred_time,
            submitted_at=ts,
            created_at=ts,
            updated_at=ts,
        )

    @classmethod
    def reconstitute(cls, data: Mapping[str, Any]) -> CallRequest:
        platform = data.get("call_platform")
        return cls(
            id=data["id"],
            request_number=data["request_number"],
            subscriber_id=data["subscriber_id"],
            purpose=data["purpose"],
            status=CallStatus(data.get("status", CallStatus.PENDING)),
            assigned_provider_id=data.get("assigned_provider_id"),
            consultation_type=data.get("consultation_type"),
            preferred_date=data.get("preferred_date"),
            preferred_time=data.get("preferred_time"),
            scheduled_at=data.get("scheduled_at"),
            scheduled_duration=data.get("scheduled_duration"),
            actual_duration=data.get("actual_duration"),
            call_started_at=data.get("call_started_at"),
            call_ended_at=data.get("call_ended_at"),
            recording_url=data.get("recording_url"),
            call_platform=CallPlatform(platform) if platform else None,
            call_link=data.get("call_link"),
            cancellation_reason=data.get("cancellation_reason"),
            submitted_at=data.get("submitted_at"),
            completed_at=data.get("completed_at"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "request_number": self.request_number,
            "subscriber_id": self.subscriber_id,
            "purpose": self.purpose,
            "status": self.status.value,
            "assigned_provider_id": self.assigned_provider_id,
            "consultation_type": self.consultation_type,
            "preferred_date": self.preferred_date,
            "preferred_time": self.preferred_time,
            "scheduled_at": self.scheduled_at,
            "scheduled_duration": self.scheduled_duration,
            "actual_duration": self.actual_duration,
            "call_started_at": self.call_started_at,
            "call_ended_at": self.call_ended_at,
            "recording_url": self.recording_url,
            "call_platform": self.call_platform.value if self.call_platform else None,
            "call_link": self.call_link,
            "cancellation_reason": self.cancellation_reason,
            "submitted_at": self.submitted_at,
            "completed_at": self.completed_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def assign_provider(self, provider_id: str, *, now: datetime | None = None) -> CallRequest:
        """Set the handling provider; allowed in any status."""
        if not (provider_id or "").strip():
            raise ValidationFailedError("Provider id is required")
        return self._evolve(assigned_provider_id=provider_id, updated_at=now or utc_now())

    def schedule(
        self,
        scheduled_at: datetime,
        duration_minutes: int,
        platform: CallPlatform | None = None,
        call_link: str | None = None,
        *,
        max_duration_minutes: int = MAX_CALL_DURATION_MINUTES,
        now: datetime | None = None,
    ) -> CallRequest:
        """pending -> scheduled.

        Raises:
            InvalidTransitionError: If the request is not pending.
            ValidationFailedError: If the time is in the past or the duration is out of range.
        """
        self._require("schedule", CallStatus.PENDING)
        ts = ensure_utc(now) or utc_now()
        when = self._validate_slot(scheduled_at, duration_minutes, max_duration_minutes, ts)
        return self._evolve(
            status=CallStatus.SCHEDULED,
            scheduled_at=when,
            scheduled_duration=duration_minutes,
            call_platform=platform or CallPlatform.INTERNAL,
            call_link=call_link,
            updated_at=ts,
        )

    def reschedule(
        self,
        new_time: datetime,
        duration_minutes: int | None = None,
        reason: str | None = None,
        *,
        max_duration_minutes: int = MAX_CALL_DURATION_MINUTES,
        now: datetime | None = None,
    ) -> CallRequest:
        """scheduled -> scheduled with a new start time and optional duration.

        ``reason`` is not stored on the entity; callers record it in the
        status history.
        """
        self._require("reschedule", CallStatus.SCHEDULED)
        ts = ensure_utc(now) or utc_now()
        duration = duration_minutes if duration_minutes is not None else self.scheduled_duration
        when = self._validate_slot(new_time, duration or 1, max_duration_minutes, ts)
        return self._evolve(
            scheduled_at=when,
            scheduled_duration=duration,
            updated_at=ts,
        )

    def start_call(self, *, now: datetime | None = None) -> CallRequest:
        """scheduled -> in_progress."""
        self._require("start_call", CallStatus.SCHEDULED)
        ts = ensure_utc(now) or utc_now()
        return self._evolve(status=CallStatus.IN_PROGRESS, call_started_at=ts, updated_at=ts)

    def end_call(
        self, recording_url: str | None = None, *, now: datetime | None = None
    ) -> CallRequest:
        """in_progress -> completed; measures the actual duration."""
        self._require("end_call", CallStatus.IN_PROGRESS)
        ts = ensure_utc(now) or utc_now()
        actual = (
            Duration.from_time_range(self.call_started_at, ts).minutes
            if self.call_started_at is not None
            else 0
        )
        return self._evolve(
            status=CallStatus.COMPLETED,
            call_ended_at=ts,
            completed_at=ts,
            actual_duration=actual,
            recording_url=recording_url or self.recording_url,
            updated_at=ts,
        )

    def cancel(self, reason: str | None = None, *, now: datetime | None = None) -> CallRequest:
        """Any non-terminal status -> cancelled."""
        if self.status.is_terminal:
            raise InvalidTransitionError(
                entity="call_request", operation="cancel", current_status=self.status
            )
        return self._evolve(
            status=CallStatus.CANCELLED,
            cancellation_reason=reason,
            updated_at=now or utc_now(),
        )

    def mark_no_show(self, *, now: datetime | None = None) -> CallRequest:
        """scheduled -> no_show."""
        self._require("mark_no_show", CallStatus.SCHEDULED)
        return self._evolve(status=CallStatus.NO_SHOW, updated_at=now or utc_now())

    def update_call_link(
        self,
        link: str,
        platform: CallPlatform | None = None,
        *,
        now: datetime | None = None,
    ) -> CallRequest:
        """Change the join link (and optionally the platform) before completion."""
        if self.status.is_terminal:
            raise InvalidTransitionError(
                entity="call_request", operation="update_call_link", current_status=self.status
            )
        if not (link or "").strip():
            raise ValidationFailedError("Call link is required")
        return self._evolve(
            call_link=link.strip(),
            call_platform=platform or self.call_platform,
            updated_at=now or utc_now(),
        )

    def set_recording_url(self, url: str, *, now: datetime | None = None) -> CallRequest:
        """Attach a recording to a completed call."""
        self._require("set_recording_url", CallStatus.COMPLETED)
        return self._evolve(recording_url=url, updated_at=now or utc_now())

    # ------------------------------------------------------------------
    # Derived
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return not self.status.is_terminal

    @property
    def has_provider(self) -> bool:
        return self.assigned_provider_id is not None

    @property
    def actual(self) -> Duration | None:
        return Duration(self.actual_duration) if self.actual_duration is not None else None

    def billable_minutes(self, billing_unit_minutes: int = DEFAULT_BILLING_UNIT_MINUTES) -> int:
        """Actual duration rounded up to whole billing units (0 before completion)."""
        if self.actual_duration is None:
            return 0
        return Duration(self.actual_duration).rounded_up_to(billing_unit_minutes)

    def is_overdue(self, now: datetime | None = None) -> bool:
        """Scheduled call whose start time has passed without starting."""
        if self.status is not CallStatus.SCHEDULED or self.scheduled_at is None:
            return False
        return (ensure_utc(now) or utc_now()) > self.scheduled_at

    def is_upcoming(self, within: timedelta, now: datetime | None = None) -> bool:
        """Scheduled call starting within ``within`` from ``now``."""
        if self.status is not CallStatus.SCHEDULED or self.scheduled_at is None:
            return False
        current = ensure_utc(now) or utc_now()
        return current <= self.scheduled_at <= current + within

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require(self, operation: str, *allowed: CallStatus) -> None:
        if self.status not in allowed:
            raise InvalidTransitionError(
                entity="call_request", operation=operation, current_status=self.status
            )

    @staticmethod
    def _validate_slot(
        scheduled_at: datetime, duration_minutes: int, max_minutes: int, now: datetime
    ) -> datetime:
        when = ensure_utc(scheduled_at)
        if when is None or when < now:
            raise ValidationFailedError(
                "Cannot schedule call in the past",
                details={"scheduled_at": scheduled_at.isoformat() if scheduled_at else None},
            )
        if not 1 <= duration_minutes <= max_minutes:
            raise ValidationFailedError(
                f"Call duration must be between 1 and {max_minutes} minutes",
                details={"duration_minutes": duration_minutes},
            )
        return when
