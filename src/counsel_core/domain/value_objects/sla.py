# src/counsel_core/domain/value_objects/sla.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""SLA value objects.

Purpose:
    ``SLATimes`` holds response/resolution/escalation budgets in minutes and
    ``SLADeadlines`` holds the absolute deadlines derived from them together
    with the per-deadline status arithmetic (breach, at-risk, remaining time,
    elapsed percentage).

Layer:
    domain/value_objects

Notes:
    The at-risk threshold is a fraction of the deadline window (created_at to
    deadline). An unmet deadline whose window is at least that fraction
    elapsed is at risk. Callers pass the threshold explicitly; the configured
    default lives in application settings.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from counsel_core.domain.entities.base import ensure_utc, utc_now
from counsel_core.domain.enums.sla import RequestType, SLAPriority, SLAStatus
from counsel_core.domain.exceptions.lifecycle import ValidationFailedError

__all__ = [
    "DEFAULT_AT_RISK_THRESHOLD",
    "DEFAULT_SLA_TIMES",
    "SLATimes",
    "SLADeadlines",
    "most_severe_status",
]

DEFAULT_AT_RISK_THRESHOLD = 0.75


@dataclass(frozen=True, slots=True)
class SLATimes:
    """Time budgets in minutes.

    Attributes:
        response_minutes: Time allowed until first response (> 0).
        resolution_minutes: Time allowed until resolution (>= response).
        escalation_minutes: Optional escalation trigger (0 < x < resolution).
    """

    response_minutes: int
    resolution_minutes: int
    escalation_minutes: int | None = None

    def __post_init__(self) -> None:
        if self.response_minutes <= 0:
            raise ValidationFailedError(
                "Response time must be positive",
                details={"response_minutes": self.response_minutes},
            )
        if self.resolution_minutes <= 0:
            raise ValidationFailedError(
                "Resolution time must be positive",
                details={"resolution_minutes": self.resolution_minutes},
            )
        if self.resolution_minutes < self.response_minutes:
            raise ValidationFailedError(
                "Resolution time must be greater than or equal to response time",
                details={
                    "response_minutes": self.response_minutes,
                    "resolution_minutes": self.resolution_minutes,
                },
            )
        if self.escalation_minutes is not None and not (
            0 < self.escalation_minutes < self.resolution_minutes
        ):
            raise ValidationFailedError(
                "Escalation time must be positive and less than resolution time",
                details={
                    "escalation_minutes": self.escalation_minutes,
                    "resolution_minutes": self.resolution_minutes,
                },
            )

    def adjust_for_priority(self, priority: SLAPriority) -> SLATimes:
        """Scale every budget by the priority multiplier (rounded half-up, min 1)."""
        factor = priority.time_multiplier

        def _scale(minutes: int) -> int:
            scaled = (Decimal(minutes) * factor).quantize(Decimal(1), rounding=ROUND_HALF_UP)
            return max(1, int(scaled))

        return SLATimes(
            response_minutes=_scale(self.response_minutes),
            resolution_minutes=_scale(self.resolution_minutes),
            escalation_minutes=(
                _scale(self.escalation_minutes) if self.escalation_minutes is not None else None
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "response_minutes": self.response_minutes,
            "resolution_minutes": self.resolution_minutes,
            "escalation_minutes": self.escalation_minutes,
        }


# Normal-priority defaults per request type: (response, resolution, escalation).
DEFAULT_SLA_TIMES: dict[RequestType, SLATimes] = {
    RequestType.CONSULTATION: SLATimes(60, 1440, 720),
    RequestType.LEGAL_OPINION: SLATimes(120, 4320, 2880),
    RequestType.SERVICE: SLATimes(60, 2880, 1440),
    RequestType.LITIGATION: SLATimes(240, 10080, 4320),
    RequestType.CALL: SLATimes(30, 480, 240),
}


def most_severe_status(*statuses: SLAStatus) -> SLAStatus:
    """Return the most severe status (breached > at_risk > on_track)."""
    return max(statuses, key=lambda s: s.severity, default=SLAStatus.ON_TRACK)


@dataclass(frozen=True, slots=True)
class SLADeadlines:
    """Absolute deadlines of a request.

    Attributes:
        response_deadline: First response is due by this instant.
        resolution_deadline: Resolution is due by this instant.
        created_at: Start of the SLA clock.
        escalation_deadline: Optional escalation instant.
    """

    response_deadline: datetime
    resolution_deadline: datetime
    created_at: datetime
    escalation_deadline: datetime | None = None

    def __post_init__(self) -> None:
        self._normalize(
            "response_deadline", "resolution_deadline", "created_at", "escalation_deadline"
        )
        if self.resolution_deadline < self.created_at or self.response_deadline < self.created_at:
            raise ValidationFailedError(
                "SLA deadlines cannot precede the request creation time",
                details={"created_at": self.created_at.isoformat()},
            )

    @classmethod
    def calculate(cls, times: SLATimes, start: datetime | None = None) -> SLADeadlines:
        """Offset each budget in ``times`` from ``start`` (default: now)."""
        origin = ensure_utc(start) or utc_now()
        return cls(
            response_deadline=origin + timedelta(minutes=times.response_minutes),
            resolution_deadline=origin + timedelta(minutes=times.resolution_minutes),
            created_at=origin,
            escalation_deadline=(
                origin + timedelta(minutes=times.escalation_minutes)
                if times.escalation_minutes is not None
                else None
            ),
        )

    # ------------------------------------------------------------------
    # Breach / escalation
    # ------------------------------------------------------------------

    def is_response_breached(self, now: datetime) -> bool:
        return now > self.response_deadline

    def is_resolution_breached(self, now: datetime) -> bool:
        return now > self.resolution_deadline

    def is_escalation_required(self, now: datetime, *, resolved: bool = False) -> bool:
        """True once an escalation deadline exists, has passed and the request is open."""
        if self.escalation_deadline is None or resolved:
            return False
        return now > self.escalation_deadline

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def response_status(
        self, *, responded: bool, now: datetime, threshold: float = DEFAULT_AT_RISK_THRESHOLD
    ) -> SLAStatus:
        return self._status(self.response_deadline, met=responded, now=now, threshold=threshold)

    def resolution_status(
        self, *, resolved: bool, now: datetime, threshold: float = DEFAULT_AT_RISK_THRESHOLD
    ) -> SLAStatus:
        return self._status(self.resolution_deadline, met=resolved, now=now, threshold=threshold)

    def overall_status(
        self,
        *,
        responded: bool,
        resolved: bool,
        now: datetime,
        threshold: float = DEFAULT_AT_RISK_THRESHOLD,
    ) -> SLAStatus:
        """Most severe of the response and resolution statuses."""
        # A resolved request has necessarily been responded to.
        responded = responded or resolved
        return most_severe_status(
            self.response_status(responded=responded, now=now, threshold=threshold),
            self.resolution_status(resolved=resolved, now=now, threshold=threshold),
        )

    def _status(
        self, deadline: datetime, *, met: bool, now: datetime, threshold: float
    ) -> SLAStatus:
        if met:
            return SLAStatus.ON_TRACK
        if now > deadline:
            return SLAStatus.BREACHED
        if self._elapsed_fraction(deadline, now) >= threshold:
            return SLAStatus.AT_RISK
        return SLAStatus.ON_TRACK

    # ------------------------------------------------------------------
    # Time arithmetic
    # ------------------------------------------------------------------

    def _elapsed_fraction(self, deadline: datetime, now: datetime) -> float:
        total = (deadline - self.created_at).total_seconds()
        if total <= 0:
            return 1.0
        elapsed = (now - self.created_at).total_seconds()
        return max(0.0, elapsed / total)

    def percent_elapsed(self, deadline: datetime, now: datetime) -> int:
        """Elapsed share of the window up to ``deadline``, rounded, within 0..100."""
        fraction = min(self._elapsed_fraction(deadline, now), 1.0)
        return int((Decimal(str(fraction)) * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))

    def time_remaining(self, deadline: datetime, now: datetime) -> timedelta:
        """Time left until ``deadline``; zero once it has passed."""
        return max(timedelta(0), deadline - now)

    def at_risk_time(
        self, deadline: datetime, threshold: float = DEFAULT_AT_RISK_THRESHOLD
    ) -> datetime:
        """Instant at which an unmet ``deadline`` turns at-risk."""
        return self.created_at + (deadline - self.created_at) * threshold

    def to_dict(self) -> dict[str, Any]:
        return {
            "response_deadline": self.response_deadline,
            "resolution_deadline": self.resolution_deadline,
            "escalation_deadline": self.escalation_deadline,
            "created_at": self.created_at,
        }

    def _normalize(self, *names: str) -> None:
        for name in names:
            object.__setattr__(self, name, ensure_utc(getattr(self, name)))
