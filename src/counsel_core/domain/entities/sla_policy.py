# src/counsel_core/domain/entities/sla_policy.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""SLA Policy Entity.

Purpose:
    Configured response/resolution/escalation budgets for a request type and
    (optionally) a priority. A policy with ``priority=None`` is a wildcard
    that applies to every priority of its request type.

Layer:
    domain/entities
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from counsel_core.domain.entities.base import BaseEntity, new_id, utc_now
from counsel_core.domain.enums.sla import RequestType, SLAPriority
from counsel_core.domain.exceptions.lifecycle import ValidationFailedError
from counsel_core.domain.value_objects.sla import DEFAULT_SLA_TIMES, SLADeadlines, SLATimes

__all__ = ["SLAPolicy"]


@dataclass(frozen=True, slots=True)
class SLAPolicy(BaseEntity):
    """SLA policy.

    Attributes:
        id: Opaque identifier.
        name: Unique, human-readable name.
        request_type: Request type the policy applies to.
        times: Budgets in minutes.
        priority: Priority the budgets are tuned for; ``None`` matches any.
        is_active: Inactive policies are ignored by lookups.
        created_at: Creation timestamp (UTC).
        updated_at: Last change timestamp (UTC).
    """

    id: str
    name: str
    request_type: RequestType
    times: SLATimes
    priority: SLAPriority | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        name = (self.name or "").strip()
        if not name:
            raise ValidationFailedError("Policy name cannot be empty")
        object.__setattr__(self, "name", name)
        try:
            object.__setattr__(self, "request_type", RequestType(self.request_type))
            if self.priority is not None:
                object.__setattr__(self, "priority", SLAPriority(self.priority))
        except ValueError as exc:
            raise ValidationFailedError(str(exc)) from exc
        self._normalize_datetimes("created_at", "updated_at")

    @classmethod
    def create(
        cls,
        *,
        name: str,
        request_type: RequestType,
        response_minutes: int,
        resolution_minutes: int,
        escalation_minutes: int | None = None,
        priority: SLAPriority | None = SLAPriority.NORMAL,
        is_active: bool = True,
        policy_id: str | None = None,
        now: datetime | None = None,
    ) -> SLAPolicy:
        ts = now or utc_now()
        return cls(
            id=policy_id or new_id(),
            name=name,
            request_type=request_type,
            times=SLATimes(response_minutes, resolution_minutes, escalation_minutes),
            priority=priority,
            is_active=is_active,
            created_at=ts,
            updated_at=ts,
        )

    @classmethod
    def create_default(
        cls,
        request_type: RequestType,
        priority: SLAPriority = SLAPriority.NORMAL,
        *,
        now: datetime | None = None,
    ) -> SLAPolicy:
        """Policy built from the built-in defaults, scaled for ``priority``."""
        request_type = RequestType(request_type)
        times = DEFAULT_SLA_TIMES[request_type].adjust_for_priority(priority)
        return cls.create(
            name=f"Default {request_type.value} - {priority.value}",
            request_type=request_type,
            response_minutes=times.response_minutes,
            resolution_minutes=times.resolution_minutes,
            escalation_minutes=times.escalation_minutes,
            priority=priority,
            now=now,
        )

    @classmethod
    def reconstitute(cls, data: Mapping[str, Any]) -> SLAPolicy:
        return cls(
            id=data["id"],
            name=data["name"],
            request_type=data["request_type"],
            times=SLATimes(
                data["response_minutes"],
                data["resolution_minutes"],
                data.get("escalation_minutes"),
            ),
            priority=data.get("priority"),
            is_active=data.get("is_active", True),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "request_type": self.request_type.value,
            "priority": self.priority.value if self.priority else None,
            **self.times.to_dict(),
            "is_active": self.is_active,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    # ------------------------------------------------------------------
    # Behaviour
    # ------------------------------------------------------------------

    def calculate_deadlines(
        self,
        start: datetime | None = None,
        request_priority: SLAPriority | None = None,
    ) -> SLADeadlines:
        """Deadlines from ``start``; budgets are re-scaled for a different priority."""
        times = self.times
        if request_priority is not None and request_priority != self.priority:
            times = self.times.adjust_for_priority(request_priority)
        return SLADeadlines.calculate(times, start)

    def matches(self, request_type: RequestType, priority: SLAPriority | None = None) -> bool:
        """Active, same request type and (when given) same priority."""
        if self.request_type != request_type:
            return False
        if priority is not None and self.priority != priority:
            return False
        return self.is_active

    @property
    def is_wildcard(self) -> bool:
        return self.priority is None

    @property
    def key(self) -> str:
        return f"{self.request_type.value}:{self.priority.value if self.priority else '*'}"

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def rename(self, name: str, *, now: datetime | None = None) -> SLAPolicy:
        return self._evolve(name=name, updated_at=now or utc_now())

    def update_times(
        self,
        *,
        response_minutes: int | None = None,
        resolution_minutes: int | None = None,
        escalation_minutes: int | None = None,
        clear_escalation: bool = False,
        now: datetime | None = None,
    ) -> SLAPolicy:
        """Replace some budgets; the combined result is validated as a whole."""
        current = self.times
        times = SLATimes(
            response_minutes if response_minutes is not None else current.response_minutes,
            resolution_minutes if resolution_minutes is not None else current.resolution_minutes,
            None
            if clear_escalation
            else (
                escalation_minutes
                if escalation_minutes is not None
                else current.escalation_minutes
            ),
        )
        return self._evolve(times=times, updated_at=now or utc_now())

    def update_priority(
        self, priority: SLAPriority | None, *, now: datetime | None = None
    ) -> SLAPolicy:
        return self._evolve(priority=priority, updated_at=now or utc_now())

    def activate(self, *, now: datetime | None = None) -> SLAPolicy:
        return self._evolve(is_active=True, updated_at=now or utc_now())

    def deactivate(self, *, now: datetime | None = None) -> SLAPolicy:
        return self._evolve(is_active=False, updated_at=now or utc_now())
