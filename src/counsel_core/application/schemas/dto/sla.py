# src/counsel_core/application/schemas/dto/sla.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Application DTOs for SLA tracking and policy administration.

Purpose:
    Commands and results exchanged with the SLA use cases. Tracked requests
    arrive as loose snapshots (type and priority as raw strings) because they
    come from several aggregates and from stored rows.

Layer:
    application/schemas/dto
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from counsel_core.domain.enums.sla import RequestType, SLAPriority
from counsel_core.domain.services.sla_calculator import RequestSLAInfo
from counsel_core.domain.value_objects.sla import SLADeadlines

__all__ = [
    "SLARequestSnapshot",
    "DeadlinesResult",
    "SLAStatusResult",
    "CreateSLAPolicyRequest",
    "UpdateSLAPolicyRequest",
    "SeedPoliciesResult",
]


@dataclass(frozen=True, slots=True)
class SLARequestSnapshot:
    """SLA-relevant timestamps of a request, as stored.

    ``request_type`` and ``priority`` are raw values; unknown values are
    tolerated and resolved to ``consultation`` / ``normal``.
    """

    request_id: str
    request_type: str
    response_deadline: datetime
    resolution_deadline: datetime
    created_at: datetime
    priority: str | None = None
    escalation_deadline: datetime | None = None
    responded_at: datetime | None = None
    resolved_at: datetime | None = None
    policy_id: str | None = None


@dataclass(frozen=True, slots=True)
class DeadlinesResult:
    """Deadlines for a new request and the policy they came from."""

    request_type: RequestType
    priority: SLAPriority
    deadlines: SLADeadlines
    policy_id: str | None

    @property
    def used_defaults(self) -> bool:
        return self.policy_id is None


@dataclass(frozen=True, slots=True)
class SLAStatusResult:
    """SLA snapshot plus human-readable remaining times."""

    info: RequestSLAInfo
    response_time_remaining: str
    resolution_time_remaining: str

    @property
    def policy_id(self) -> str | None:
        return self.info.policy_id


@dataclass(frozen=True, slots=True)
class CreateSLAPolicyRequest:
    """Command to create a policy; ``priority=None`` creates a wildcard."""

    name: str
    request_type: RequestType
    response_minutes: int
    resolution_minutes: int
    escalation_minutes: int | None = None
    priority: SLAPriority | None = None
    is_active: bool = True


@dataclass(frozen=True, slots=True)
class UpdateSLAPolicyRequest:
    """Partial update; ``None`` leaves a field unchanged."""

    policy_id: str
    name: str | None = None
    response_minutes: int | None = None
    resolution_minutes: int | None = None
    escalation_minutes: int | None = None
    clear_escalation: bool = False
    is_active: bool | None = None


@dataclass(frozen=True, slots=True)
class SeedPoliciesResult:
    """Outcome of seeding the built-in default policies."""

    created: tuple[str, ...]
    skipped: tuple[str, ...]
