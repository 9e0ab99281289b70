# src/counsel_core/application/schemas/dto/workflows.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Application DTOs for the call request and legal opinion workflows.

Layer:
    application/schemas/dto
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from counsel_core.domain.enums.legal_opinion import (
    ConfidentialityLevel,
    DeliveryFormat,
    OpinionPriority,
    OpinionType,
)
from counsel_core.domain.value_objects.opinion import Jurisdiction


@dataclass(frozen=True, slots=True)
class CreateCallRequest:
    """Command to open a call request."""

    subscriber_id: str
    purpose: str
    consultation_type: str | None = None
    preferred_date: datetime | None = None
    preferred_time: str | None = None


@dataclass(frozen=True, slots=True)
class CreateLegalOpinionRequest:
    """Command to open a draft legal opinion request.

    Text fields may be left empty and filled in while the request is a draft;
    they are all required by ``submit``.
    """

    client_id: str
    opinion_type: OpinionType
    subject: str | None = None
    legal_question: str | None = None
    background_context: str | None = None
    relevant_facts: str | None = None
    specific_issues: str | None = None
    jurisdiction: Jurisdiction | None = None
    priority: OpinionPriority = OpinionPriority.STANDARD
    delivery_format: DeliveryFormat = DeliveryFormat.PDF
    confidentiality_level: ConfidentialityLevel = ConfidentialityLevel.STANDARD
    requested_delivery_date: datetime | None = None
    requires_collaboration: bool = False


@dataclass(frozen=True, slots=True)
class OpinionDraftChanges:
    """Partial update of a draft opinion request; ``None`` leaves a field as is."""

    subject: str | None = None
    legal_question: str | None = None
    background_context: str | None = None
    relevant_facts: str | None = None
    specific_issues: str | None = None
    jurisdiction: Jurisdiction | None = None
    priority: OpinionPriority | None = None
