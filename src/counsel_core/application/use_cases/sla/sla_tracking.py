# src/counsel_core/application/use_cases/sla/sla_tracking.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Use cases: SLA deadlines, status, breaches and urgency.

Purpose:
    * Resolve the governing policy for a new request and compute its deadlines.
    * Evaluate stored request snapshots: status, breaches, urgency, ranking.

Layer:
    application/use_cases/sla

Notes:
    Only deadline calculation touches storage (policy lookup); the other use
    cases are pure evaluations over snapshots and expose a synchronous
    ``execute``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from counsel_core.application.schemas.dto.sla import (
    DeadlinesResult,
    SLARequestSnapshot,
    SLAStatusResult,
)
from counsel_core.application.services.lifecycle import resolve_repository
from counsel_core.application.uow import UnitOfWork
from counsel_core.domain.entities.base import utc_now
from counsel_core.domain.enums.sla import RequestType, SLAPriority
from counsel_core.domain.interfaces.repositories.sla_policy_repository import (
    SLAPolicyRepository,
)
from counsel_core.domain.services.sla_calculator import (
    SLABreach,
    SLACalculator,
    SLAEvaluation,
    SLATrackedRequest,
    format_duration,
)
from counsel_core.domain.value_objects.sla import SLADeadlines
from counsel_core.infrastructure.observability.metrics import get_sla_breaches_total

logger = logging.getLogger(__name__)

__all__ = [
    "to_tracked_request",
    "CalculateSLADeadlinesUseCase",
    "CheckSLAStatusUseCase",
    "CheckSLABreachesUseCase",
    "GetUrgencyScoreUseCase",
    "BatchCheckSLAStatusUseCase",
    "SortByUrgencyUseCase",
]


def _request_type(raw: str) -> RequestType:
    try:
        return RequestType(raw)
    except ValueError:
        return RequestType.CONSULTATION


def _priority(raw: str | None) -> SLAPriority:
    try:
        return SLAPriority(raw) if raw else SLAPriority.NORMAL
    except ValueError:
        return SLAPriority.NORMAL


def to_tracked_request(snapshot: SLARequestSnapshot) -> SLATrackedRequest:
    """Build the calculator view of a stored snapshot (unknown enums fall back)."""
    return SLATrackedRequest(
        request_id=snapshot.request_id,
        request_type=_request_type(snapshot.request_type),
        priority=_priority(snapshot.priority),
        deadlines=SLADeadlines(
            response_deadline=snapshot.response_deadline,
            resolution_deadline=snapshot.resolution_deadline,
            created_at=snapshot.created_at,
            escalation_deadline=snapshot.escalation_deadline,
        ),
        responded_at=snapshot.responded_at,
        resolved_at=snapshot.resolved_at,
    )


class CalculateSLADeadlinesUseCase:
    """Deadlines for a new request from the best matching active policy.

    Falls back to the built-in defaults (``policy_id=None``) when no policy
    exists; request creation is never blocked on missing SLA configuration.
    """

    def __init__(self, *, uow: UnitOfWork, calculator: SLACalculator | None = None) -> None:
        self._uow = uow
        self._calculator = calculator or SLACalculator()

    async def execute(
        self,
        *,
        request_type: RequestType,
        priority: SLAPriority | None = None,
        start: datetime | None = None,
    ) -> DeadlinesResult:
        request_type = RequestType(request_type)
        priority = SLAPriority(priority) if priority else SLAPriority.NORMAL
        start = start or utc_now()

        async with self._uow as tx:
            repo = resolve_repository(tx, "sla_policies", SLAPolicyRepository)
            policy = await repo.find_best_match(request_type, priority)

        deadlines = self._calculator.calculate_deadlines(policy, request_type, priority, start)
        if policy is None:
            logger.info(
                "sla.deadlines.default_policy",
                extra={"request_type": request_type, "priority": priority},
            )
        return DeadlinesResult(
            request_type=request_type,
            priority=priority,
            deadlines=deadlines,
            policy_id=policy.id if policy else None,
        )


class CheckSLAStatusUseCase:
    """Full SLA snapshot of one request."""

    def __init__(self, *, calculator: SLACalculator | None = None) -> None:
        self._calculator = calculator or SLACalculator()

    def execute(
        self, snapshot: SLARequestSnapshot, *, now: datetime | None = None
    ) -> SLAStatusResult:
        info = self._calculator.request_info(
            to_tracked_request(snapshot), now or utc_now(), policy_id=snapshot.policy_id
        )
        return SLAStatusResult(
            info=info,
            response_time_remaining=format_duration(info.response_time_remaining),
            resolution_time_remaining=format_duration(info.resolution_time_remaining),
        )


class CheckSLABreachesUseCase:
    """Breach records for one request; each breach is counted and logged."""

    def __init__(self, *, calculator: SLACalculator | None = None) -> None:
        self._calculator = calculator or SLACalculator()

    def execute(
        self, snapshot: SLARequestSnapshot, *, now: datetime | None = None
    ) -> list[SLABreach]:
        breaches = self._calculator.check_breaches(to_tracked_request(snapshot), now or utc_now())
        for breach in breaches:
            get_sla_breaches_total().labels(
                request_type=breach.request_type.value,
                breach_type=breach.breach_type.value,
            ).inc()
            logger.warning(
                "sla.breach.detected",
                extra={
                    "request_id": breach.request_id,
                    "request_type": breach.request_type,
                    "breach_type": breach.breach_type,
                    "deadline": breach.deadline,
                    "overdue": format_duration(breach.overdue),
                },
            )
        return breaches


class GetUrgencyScoreUseCase:
    def __init__(self, *, calculator: SLACalculator | None = None) -> None:
        self._calculator = calculator or SLACalculator()

    def execute(self, snapshot: SLARequestSnapshot, *, now: datetime | None = None) -> int:
        return self._calculator.urgency_score(to_tracked_request(snapshot), now or utc_now())


class BatchCheckSLAStatusUseCase:
    """Status and urgency for many requests, evaluated at one instant."""

    def __init__(self, *, calculator: SLACalculator | None = None) -> None:
        self._calculator = calculator or SLACalculator()

    def execute(
        self, snapshots: Sequence[SLARequestSnapshot], *, now: datetime | None = None
    ) -> list[SLAEvaluation]:
        ts = now or utc_now()
        results = self._calculator.evaluate_many((to_tracked_request(s) for s in snapshots), ts)
        breached = sum(1 for r in results if r.is_breached)
        logger.info(
            "sla.batch_check.success",
            extra={"count": len(results), "breached": breached},
        )
        return results


class SortByUrgencyUseCase:
    """Snapshots ordered most urgent first (ties keep input order)."""

    def __init__(self, *, calculator: SLACalculator | None = None) -> None:
        self._calculator = calculator or SLACalculator()

    def execute(
        self, snapshots: Sequence[SLARequestSnapshot], *, now: datetime | None = None
    ) -> list[SLARequestSnapshot]:
        ts = now or utc_now()
        tracked = [to_tracked_request(s) for s in snapshots]
        by_id = {id(t): s for t, s in zip(tracked, snapshots, strict=True)}
        return [by_id[id(t)] for t in self._calculator.sort_by_urgency(tracked, ts)]
