# src/counsel_core/domain/entities/status_history.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Status History Entry.

Purpose:
    Append-only audit record of a single status change on a lifecycle
    aggregate (legal opinion requests and call requests).

Layer:
    domain/entities
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from counsel_core.domain.entities.base import BaseEntity, new_id, utc_now
from counsel_core.domain.exceptions.lifecycle import ValidationFailedError

__all__ = ["StatusHistoryEntry"]


@dataclass(frozen=True, slots=True)
class StatusHistoryEntry(BaseEntity):
    """One status transition.

    Attributes:
        id: Opaque identifier.
        entity_id: Aggregate whose status changed.
        from_status: Status before the change (``None`` for creation).
        to_status: Status after the change.
        changed_by: Actor id, when known.
        reason: Free-text reason supplied with the transition.
        changed_at: When the change happened (UTC).
    """

    id: str
    entity_id: str
    from_status: str | None
    to_status: str
    changed_by: str | None = None
    reason: str | None = None
    changed_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.entity_id or not self.to_status:
            raise ValidationFailedError("Status history entry requires entity id and target status")
        self._normalize_datetimes("changed_at")

    @classmethod
    def record(
        cls,
        *,
        entity_id: str,
        from_status: Any,
        to_status: Any,
        changed_by: str | None = None,
        reason: str | None = None,
        now: datetime | None = None,
    ) -> StatusHistoryEntry:
        """Build an entry; enum statuses are stored by value."""
        return cls(
            id=new_id(),
            entity_id=entity_id,
            from_status=getattr(from_status, "value", from_status),
            to_status=getattr(to_status, "value", to_status),
            changed_by=changed_by,
            reason=reason,
            changed_at=now or utc_now(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "entity_id": self.entity_id,
            "from_status": self.from_status,
            "to_status": self.to_status,
            "changed_by": self.changed_by,
            "reason": self.reason,
            "changed_at": self.changed_at,
        }
