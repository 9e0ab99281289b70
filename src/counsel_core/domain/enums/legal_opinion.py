# src/counsel_core/domain/enums/legal_opinion.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Legal opinion enums.

Purpose:
    Closed value sets for the legal opinion request lifecycle, including the
    pricing and turnaround metadata attached to opinion types and priorities.

Layer:
    domain/enums
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum


class OpinionStatus(str, Enum):
    """Lifecycle status of a legal opinion request."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    ASSIGNED = "assigned"
    RESEARCH_PHASE = "research_phase"
    DRAFTING = "drafting"
    INTERNAL_REVIEW = "internal_review"
    REVISION_REQUESTED = "revision_requested"
    REVISING = "revising"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        """Return True for completed, cancelled and rejected."""
        return self in _TERMINAL_OPINION_STATUSES


_TERMINAL_OPINION_STATUSES = frozenset(
    {OpinionStatus.COMPLETED, OpinionStatus.CANCELLED, OpinionStatus.REJECTED}
)


class OpinionType(str, Enum):
    """Kind of legal opinion requested."""

    LEGAL_ANALYSIS = "legal_analysis"
    CONTRACT_REVIEW = "contract_review"
    COMPLIANCE_OPINION = "compliance_opinion"
    DUE_DILIGENCE = "due_diligence"
    LITIGATION_RISK = "litigation_risk"
    REGULATORY_OPINION = "regulatory_opinion"
    CUSTOM = "custom"

    @property
    def price_multiplier(self) -> Decimal:
        """Multiplier applied to the base fee when estimating cost."""
        return _TYPE_PRICE_MULTIPLIERS[self]

    @property
    def typical_turnaround_days(self) -> int:
        """Typical working time for this opinion type, in days."""
        return _TYPE_TURNAROUND_DAYS[self]


_TYPE_PRICE_MULTIPLIERS: dict[OpinionType, Decimal] = {
    OpinionType.LEGAL_ANALYSIS: Decimal("1.0"),
    OpinionType.CONTRACT_REVIEW: Decimal("1.2"),
    OpinionType.COMPLIANCE_OPINION: Decimal("1.5"),
    OpinionType.DUE_DILIGENCE: Decimal("2.0"),
    OpinionType.LITIGATION_RISK: Decimal("1.8"),
    OpinionType.REGULATORY_OPINION: Decimal("1.7"),
    OpinionType.CUSTOM: Decimal("1.3"),
}

_TYPE_TURNAROUND_DAYS: dict[OpinionType, int] = {
    OpinionType.LEGAL_ANALYSIS: 7,
    OpinionType.CONTRACT_REVIEW: 5,
    OpinionType.COMPLIANCE_OPINION: 10,
    OpinionType.DUE_DILIGENCE: 14,
    OpinionType.LITIGATION_RISK: 7,
    OpinionType.REGULATORY_OPINION: 10,
    OpinionType.CUSTOM: 7,
}


class OpinionPriority(str, Enum):
    """Requested delivery speed."""

    STANDARD = "standard"
    EXPEDITED = "expedited"
    RUSH = "rush"
    URGENT = "urgent"

    @property
    def turnaround_days(self) -> int:
        """Days from submission to the expected completion date."""
        return _PRIORITY_TURNAROUND_DAYS[self]


_PRIORITY_TURNAROUND_DAYS: dict[OpinionPriority, int] = {
    OpinionPriority.STANDARD: 10,
    OpinionPriority.EXPEDITED: 5,
    OpinionPriority.RUSH: 2,
    OpinionPriority.URGENT: 1,
}


class DeliveryFormat(str, Enum):
    """Document format the client receives."""

    PDF = "pdf"
    WORD = "word"
    BOTH = "both"


class ConfidentialityLevel(str, Enum):
    """Handling level for the opinion and its attachments."""

    STANDARD = "standard"
    CONFIDENTIAL = "confidential"
    HIGHLY_CONFIDENTIAL = "highly_confidential"


class LegalSystem(str, Enum):
    """Legal tradition governing a jurisdiction."""

    CIVIL_LAW = "civil_law"
    COMMON_LAW = "common_law"
    SHARIA_LAW = "sharia_law"
    MIXED = "mixed"
    CUSTOMARY = "customary"


__all__ = [
    "OpinionStatus",
    "OpinionType",
    "OpinionPriority",
    "DeliveryFormat",
    "ConfidentialityLevel",
    "LegalSystem",
]
