# src/counsel_core/domain/enums/call_request.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Call request enums."""

from __future__ import annotations

from enum import Enum


class CallStatus(str, Enum):
    """Lifecycle status of a call request."""

    PENDING = "pending"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

    @property
    def is_terminal(self) -> bool:
        """Return True for completed, cancelled and no-show calls."""
        return self in (CallStatus.COMPLETED, CallStatus.CANCELLED, CallStatus.NO_SHOW)


class CallPlatform(str, Enum):
    """Conferencing platform used for the call."""

    ZOOM = "zoom"
    GOOGLE_MEET = "google_meet"
    MICROSOFT_TEAMS = "microsoft_teams"
    INTERNAL = "internal"
    PHONE = "phone"


__all__ = ["CallStatus", "CallPlatform"]
