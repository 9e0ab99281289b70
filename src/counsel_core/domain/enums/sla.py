# src/counsel_core/domain/enums/sla.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""SLA enums.

Purpose:
    Request types and priorities that select an SLA policy, and the status
    values produced by deadline evaluation.

Layer:
    domain/enums
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum


class RequestType(str, Enum):
    """Kind of request an SLA applies to."""

    CONSULTATION = "consultation"
    LEGAL_OPINION = "legal_opinion"
    SERVICE = "service"
    LITIGATION = "litigation"
    CALL = "call"


class SLAPriority(str, Enum):
    """Request priority as seen by the SLA engine."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def weight(self) -> int:
        """Urgency weight (1 = low, 4 = urgent)."""
        return _PRIORITY_WEIGHTS[self]

    @property
    def time_multiplier(self) -> Decimal:
        """Factor applied to normal-priority SLA times."""
        return _PRIORITY_TIME_MULTIPLIERS[self]


_PRIORITY_WEIGHTS: dict[SLAPriority, int] = {
    SLAPriority.LOW: 1,
    SLAPriority.NORMAL: 2,
    SLAPriority.HIGH: 3,
    SLAPriority.URGENT: 4,
}

_PRIORITY_TIME_MULTIPLIERS: dict[SLAPriority, Decimal] = {
    SLAPriority.LOW: Decimal("1.5"),
    SLAPriority.NORMAL: Decimal("1.0"),
    SLAPriority.HIGH: Decimal("0.75"),
    SLAPriority.URGENT: Decimal("0.5"),
}


class SLAStatus(str, Enum):
    """Evaluation outcome for a deadline, ordered by severity."""

    ON_TRACK = "on_track"
    AT_RISK = "at_risk"
    BREACHED = "breached"

    @property
    def severity(self) -> int:
        """Severity rank (on_track 0, at_risk 1, breached 2)."""
        return _STATUS_SEVERITY[self]

    @property
    def urgency_weight(self) -> int:
        """Weight contributed to the urgency score."""
        return _STATUS_URGENCY_WEIGHTS[self]


_STATUS_SEVERITY: dict[SLAStatus, int] = {
    SLAStatus.ON_TRACK: 0,
    SLAStatus.AT_RISK: 1,
    SLAStatus.BREACHED: 2,
}

_STATUS_URGENCY_WEIGHTS: dict[SLAStatus, int] = {
    SLAStatus.ON_TRACK: 1,
    SLAStatus.AT_RISK: 3,
    SLAStatus.BREACHED: 5,
}


class BreachType(str, Enum):
    """Which deadline was exceeded."""

    RESPONSE = "response"
    RESOLUTION = "resolution"


__all__ = ["RequestType", "SLAPriority", "SLAStatus", "BreachType"]
