# src/counsel_core/domain/value_objects/duration.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Whole-minute duration value object used by call requests."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

from counsel_core.domain.exceptions.lifecycle import ValidationFailedError

__all__ = ["Duration"]


@dataclass(frozen=True, slots=True)
class Duration:
    """Non-negative duration in whole minutes."""

    minutes: int

    def __post_init__(self) -> None:
        if self.minutes < 0:
            raise ValidationFailedError(
                "Duration cannot be negative", details={"minutes": self.minutes}
            )

    @classmethod
    def from_minutes(cls, minutes: float) -> Duration:
        return cls(math.floor(minutes))

    @classmethod
    def from_hours(cls, hours: float) -> Duration:
        return cls(math.floor(hours * 60))

    @classmethod
    def from_time_range(cls, start: datetime, end: datetime) -> Duration:
        """Floor the elapsed minutes between ``start`` and ``end`` (never negative)."""
        elapsed = math.floor((end - start).total_seconds() / 60)
        return cls(max(0, elapsed))

    @classmethod
    def zero(cls) -> Duration:
        return cls(0)

    @property
    def hours(self) -> float:
        return self.minutes / 60

    @property
    def seconds(self) -> int:
        return self.minutes * 60

    def rounded_up_to(self, unit_minutes: int) -> int:
        """Round up to a whole number of ``unit_minutes`` blocks, in minutes."""
        if unit_minutes <= 0:
            raise ValidationFailedError(
                "Billing unit must be positive", details={"unit_minutes": unit_minutes}
            )
        return math.ceil(self.minutes / unit_minutes) * unit_minutes

    def format(self) -> str:
        """Render as ``"45m"``, ``"2h"`` or ``"1h 30m"``."""
        hours, mins = divmod(self.minutes, 60)
        if hours == 0:
            return f"{mins}m"
        if mins == 0:
            return f"{hours}h"
        return f"{hours}h {mins}m"
