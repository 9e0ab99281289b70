# src/counsel_core/domain/services/sla_calculator.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""SLA calculator (domain kernel).

Purpose:
    Derive deadlines from an SLA policy (or the built-in defaults), evaluate
    request SLA state, list breaches and compute the urgency score used to
    order work queues.

Layer:
    domain/services

Notes:
    - Pure domain logic:
        * No logging.
        * No persistence or gateways.
    - Every evaluation takes ``now`` explicitly so batch evaluation over many
      requests is a plain map with no shared state.
    - Urgency score:
        ``priority.weight * 10 + status.urgency_weight * 20 + percent_elapsed``
      where ``percent_elapsed`` is the largest elapsed share among the open
      deadlines. Resolved requests score 0.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from counsel_core.domain.entities.base import ensure_utc
from counsel_core.domain.entities.sla_policy import SLAPolicy
from counsel_core.domain.enums.sla import BreachType, RequestType, SLAPriority, SLAStatus
from counsel_core.domain.exceptions.lifecycle import ValidationFailedError
from counsel_core.domain.value_objects.sla import (
    DEFAULT_AT_RISK_THRESHOLD,
    DEFAULT_SLA_TIMES,
    SLADeadlines,
    SLATimes,
    most_severe_status,
)

__all__ = [
    "SLACalculatorConfig",
    "SLACalculator",
    "SLATrackedRequest",
    "RequestSLAInfo",
    "SLABreach",
    "SLAEvaluation",
    "format_duration",
]


@dataclass(frozen=True, slots=True)
class SLACalculatorConfig:
    """Configuration for the SLA calculator.

    Attributes:
        at_risk_threshold:
            Fraction (0 < x < 1) of a deadline window that must elapse before
            an unmet deadline is reported as at risk.
        fallback_times:
            Optional budgets used when neither a policy nor a per-type default
            exists. When omitted, the per-type defaults are used.
    """

    at_risk_threshold: float = DEFAULT_AT_RISK_THRESHOLD
    fallback_times: SLATimes | None = None

    def __post_init__(self) -> None:
        if not 0 < self.at_risk_threshold < 1:
            raise ValidationFailedError(
                "At-risk threshold must be between 0 and 1 (exclusive)",
                details={"at_risk_threshold": self.at_risk_threshold},
            )


@dataclass(frozen=True, slots=True)
class SLATrackedRequest:
    """SLA-relevant view of a request.

    Attributes:
        request_id: Identifier of the tracked request.
        request_type: Request type.
        priority: Request priority.
        deadlines: Deadlines computed when the request was created.
        responded_at: First response instant, if any.
        resolved_at: Resolution instant, if any.
    """

    request_id: str
    request_type: RequestType
    priority: SLAPriority
    deadlines: SLADeadlines
    responded_at: datetime | None = None
    resolved_at: datetime | None = None

    @property
    def responded(self) -> bool:
        return self.responded_at is not None or self.resolved_at is not None

    @property
    def resolved(self) -> bool:
        return self.resolved_at is not None


@dataclass(frozen=True, slots=True)
class RequestSLAInfo:
    """Full SLA snapshot of a request at ``evaluated_at``."""

    request_id: str
    request_type: RequestType
    priority: SLAPriority
    status: SLAStatus
    response_status: SLAStatus
    resolution_status: SLAStatus
    deadlines: SLADeadlines
    response_time_remaining: timedelta
    resolution_time_remaining: timedelta
    response_percent_elapsed: int
    resolution_percent_elapsed: int
    is_escalation_required: bool
    policy_id: str | None
    evaluated_at: datetime

    @property
    def is_breached(self) -> bool:
        return self.status is SLAStatus.BREACHED

    @property
    def is_at_risk(self) -> bool:
        return self.status is SLAStatus.AT_RISK


@dataclass(frozen=True, slots=True)
class SLABreach:
    """One exceeded deadline."""

    request_id: str
    request_type: RequestType
    breach_type: BreachType
    deadline: datetime
    breached_at: datetime
    overdue: timedelta


@dataclass(frozen=True, slots=True)
class SLAEvaluation:
    """Compact per-request result of a batch evaluation."""

    request_id: str
    status: SLAStatus
    is_breached: bool
    is_at_risk: bool
    urgency_score: int


def format_duration(duration: timedelta) -> str:
    """Render a duration as ``"2d 3h"``, ``"1h 5m"``, ``"12m"`` or ``"30s"``."""
    seconds = max(0, int(duration.total_seconds()))
    minutes, hours, days = seconds // 60, seconds // 3600, seconds // 86400
    if days > 0:
        return f"{days}d {hours % 24}h"
    if hours > 0:
        return f"{hours}h {minutes % 60}m"
    if minutes > 0:
        return f"{minutes}m"
    return f"{seconds}s"


class SLACalculator:
    """Pure SLA computations."""

    def __init__(self, config: SLACalculatorConfig | None = None) -> None:
        self._config = config or SLACalculatorConfig()

    @property
    def at_risk_threshold(self) -> float:
        return self._config.at_risk_threshold

    # ------------------------------------------------------------------ #
    # Deadlines                                                          #
    # ------------------------------------------------------------------ #

    def default_times(self, request_type: RequestType, priority: SLAPriority) -> SLATimes:
        """Built-in budgets for ``request_type`` scaled for ``priority``."""
        base = DEFAULT_SLA_TIMES.get(request_type) or self._config.fallback_times
        if base is None:
            raise ValidationFailedError(
                "No default SLA times for request type",
                details={"request_type": str(request_type)},
            )
        return base.adjust_for_priority(priority)

    def calculate_deadlines(
        self,
        policy: SLAPolicy | None,
        request_type: RequestType,
        priority: SLAPriority,
        start: datetime | None = None,
    ) -> SLADeadlines:
        """Deadlines from ``policy``; the defaults apply when it is ``None``."""
        if policy is not None:
            return policy.calculate_deadlines(start, priority)
        return SLADeadlines.calculate(self.default_times(request_type, priority), start)

    # ------------------------------------------------------------------ #
    # Status                                                             #
    # ------------------------------------------------------------------ #

    def overall_status(self, request: SLATrackedRequest, now: datetime) -> SLAStatus:
        return request.deadlines.overall_status(
            responded=request.responded,
            resolved=request.resolved,
            now=ensure_utc(now),
            threshold=self.at_risk_threshold,
        )

    def request_info(
        self,
        request: SLATrackedRequest,
        now: datetime,
        *,
        policy_id: str | None = None,
    ) -> RequestSLAInfo:
        now = ensure_utc(now)
        d = request.deadlines
        threshold = self.at_risk_threshold
        response_status = d.response_status(
            responded=request.responded, now=now, threshold=threshold
        )
        resolution_status = d.resolution_status(
            resolved=request.resolved, now=now, threshold=threshold
        )
        return RequestSLAInfo(
            request_id=request.request_id,
            request_type=request.request_type,
            priority=request.priority,
            status=most_severe_status(response_status, resolution_status),
            response_status=response_status,
            resolution_status=resolution_status,
            deadlines=d,
            response_time_remaining=d.time_remaining(d.response_deadline, now),
            resolution_time_remaining=d.time_remaining(d.resolution_deadline, now),
            response_percent_elapsed=d.percent_elapsed(d.response_deadline, now),
            resolution_percent_elapsed=d.percent_elapsed(d.resolution_deadline, now),
            is_escalation_required=d.is_escalation_required(now, resolved=request.resolved),
            policy_id=policy_id,
            evaluated_at=now,
        )

    def is_at_risk(self, request: SLATrackedRequest, now: datetime) -> tuple[bool, bool]:
        """Per-deadline at-risk flags ``(response, resolution)``."""
        now = ensure_utc(now)
        d = request.deadlines
        threshold = self.at_risk_threshold
        return (
            d.response_status(responded=request.responded, now=now, threshold=threshold)
            is SLAStatus.AT_RISK,
            d.resolution_status(resolved=request.resolved, now=now, threshold=threshold)
            is SLAStatus.AT_RISK,
        )

    def check_breaches(self, request: SLATrackedRequest, now: datetime) -> list[SLABreach]:
        """One record per exceeded, unmet deadline (response first)."""
        now = ensure_utc(now)
        d = request.deadlines
        breaches: list[SLABreach] = []
        if not request.responded and d.is_response_breached(now):
            breaches.append(self._breach(request, BreachType.RESPONSE, d.response_deadline, now))
        if not request.resolved and d.is_resolution_breached(now):
            breaches.append(
                self._breach(request, BreachType.RESOLUTION, d.resolution_deadline, now)
            )
        return breaches

    # ------------------------------------------------------------------ #
    # Urgency                                                            #
    # ------------------------------------------------------------------ #

    def urgency_score(self, request: SLATrackedRequest, now: datetime) -> int:
        if request.resolved:
            return 0
        now = ensure_utc(now)
        d = request.deadlines
        status = self.overall_status(request, now)
        elapsed = d.percent_elapsed(d.resolution_deadline, now)
        if not request.responded:
            elapsed = max(elapsed, d.percent_elapsed(d.response_deadline, now))
        return request.priority.weight * 10 + status.urgency_weight * 20 + elapsed

    def evaluate(self, request: SLATrackedRequest, now: datetime) -> SLAEvaluation:
        status = self.overall_status(request, now)
        return SLAEvaluation(
            request_id=request.request_id,
            status=status,
            is_breached=status is SLAStatus.BREACHED,
            is_at_risk=status is SLAStatus.AT_RISK,
            urgency_score=self.urgency_score(request, now),
        )

    def evaluate_many(
        self, requests: Iterable[SLATrackedRequest], now: datetime
    ) -> list[SLAEvaluation]:
        return [self.evaluate(r, now) for r in requests]

    def sort_by_urgency(
        self, requests: Sequence[SLATrackedRequest], now: datetime
    ) -> list[SLATrackedRequest]:
        """Most urgent first; ties keep input order."""
        scores = {id(r): self.urgency_score(r, now) for r in requests}
        return sorted(requests, key=lambda r: scores[id(r)], reverse=True)

    @staticmethod
    def _breach(
        request: SLATrackedRequest, breach_type: BreachType, deadline: datetime, now: datetime
    ) -> SLABreach:
        return SLABreach(
            request_id=request.request_id,
            request_type=request.request_type,
            breach_type=breach_type,
            deadline=deadline,
            breached_at=deadline,
            overdue=now - deadline,
        )
