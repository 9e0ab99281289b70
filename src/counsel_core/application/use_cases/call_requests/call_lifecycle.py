# src/counsel_core/application/use_cases/call_requests/call_lifecycle.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Use cases: call request lifecycle.

Purpose:
    Open, schedule, run and close call requests. Every status change is
    appended to the call's status history inside the same unit of work.

Layer:
    application/use_cases/call_requests
"""

from __future__ import annotations

import logging
from datetime import datetime

from counsel_core.application.schemas.dto.workflows import CreateCallRequest
from counsel_core.application.services.lifecycle import (
    TransitionSpec,
    apply_transition,
    resolve_repository,
)
from counsel_core.application.uow import UnitOfWork
from counsel_core.domain.entities.call_request import (
    DEFAULT_BILLING_UNIT_MINUTES,
    MAX_CALL_DURATION_MINUTES,
    CallRequest,
)
from counsel_core.domain.entities.status_history import StatusHistoryEntry
from counsel_core.domain.enums.call_request import CallPlatform
from counsel_core.domain.interfaces.repositories.call_request_repository import (
    CallRequestRepository,
)
from counsel_core.infrastructure.observability.metrics import observe_transition

logger = logging.getLogger(__name__)

_SPEC = TransitionSpec(
    entity="call_request",
    port=CallRequestRepository,
    repo_attr="call_requests",
    records_history=True,
)


class CreateCallRequestUseCase:
    """Open a pending call request and record its initial status."""

    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(
        self,
        req: CreateCallRequest,
        *,
        now: datetime | None = None,
    ) -> CallRequest:
        with observe_transition(_SPEC.entity, "create"):
            call = CallRequest.create(
                subscriber_id=req.subscriber_id,
                purpose=req.purpose,
                consultation_type=req.consultation_type,
                preferred_date=req.preferred_date,
                preferred_time=req.preferred_time,
                now=now,
            )
            async with self._uow as tx:
                repo = resolve_repository(tx, _SPEC.repo_attr, CallRequestRepository)
                await repo.create(call)
                await repo.add_status_history(
                    StatusHistoryEntry.record(
                        entity_id=call.id,
                        from_status=None,
                        to_status=call.status,
                        changed_by=req.subscriber_id,
                        now=call.created_at,
                    )
                )
                await tx.commit()

        logger.info(
            "call_request.create.success",
            extra={"call_request_id": call.id, "request_number": call.request_number},
        )
        return call


class AssignCallProviderUseCase:
    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(
        self, *, call_id: str, provider_id: str, now: datetime | None = None
    ) -> CallRequest:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=call_id,
            operation="assign_provider",
            transition=lambda c: c.assign_provider(provider_id, now=now),
        )


class ScheduleCallUseCase:
    """pending -> scheduled."""

    def __init__(
        self, *, uow: UnitOfWork, max_duration_minutes: int = MAX_CALL_DURATION_MINUTES
    ) -> None:
        self._uow = uow
        self._max_duration = max_duration_minutes

    async def execute(
        self,
        *,
        call_id: str,
        scheduled_at: datetime,
        duration_minutes: int,
        platform: CallPlatform | None = None,
        call_link: str | None = None,
        changed_by: str | None = None,
        now: datetime | None = None,
    ) -> CallRequest:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=call_id,
            operation="schedule",
            transition=lambda c: c.schedule(
                scheduled_at,
                duration_minutes,
                platform,
                call_link,
                max_duration_minutes=self._max_duration,
                now=now,
            ),
            changed_by=changed_by,
            now=now,
        )


class RescheduleCallUseCase:
    """scheduled -> scheduled at a new time; the reason is kept in the history."""

    def __init__(
        self, *, uow: UnitOfWork, max_duration_minutes: int = MAX_CALL_DURATION_MINUTES
    ) -> None:
        self._uow = uow
        self._max_duration = max_duration_minutes

    async def execute(
        self,
        *,
        call_id: str,
        new_time: datetime,
        duration_minutes: int | None = None,
        reason: str | None = None,
        changed_by: str | None = None,
        now: datetime | None = None,
    ) -> CallRequest:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=call_id,
            operation="reschedule",
            transition=lambda c: c.reschedule(
                new_time,
                duration_minutes,
                reason,
                max_duration_minutes=self._max_duration,
                now=now,
            ),
            changed_by=changed_by,
            reason=reason or "rescheduled",
            now=now,
            force_history=True,
        )


class StartCallUseCase:
    """scheduled -> in_progress."""

    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(
        self, *, call_id: str, changed_by: str | None = None, now: datetime | None = None
    ) -> CallRequest:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=call_id,
            operation="start_call",
            transition=lambda c: c.start_call(now=now),
            changed_by=changed_by,
            now=now,
        )


class EndCallUseCase:
    """in_progress -> completed; logs the billable minutes."""

    def __init__(
        self, *, uow: UnitOfWork, billing_unit_minutes: int = DEFAULT_BILLING_UNIT_MINUTES
    ) -> None:
        self._uow = uow
        self._billing_unit = billing_unit_minutes

    async def execute(
        self,
        *,
        call_id: str,
        recording_url: str | None = None,
        changed_by: str | None = None,
        now: datetime | None = None,
    ) -> CallRequest:
        call = await apply_transition(
            self._uow,
            _SPEC,
            entity_id=call_id,
            operation="end_call",
            transition=lambda c: c.end_call(recording_url, now=now),
            changed_by=changed_by,
            now=now,
        )
        logger.info(
            "call_request.end_call.billing",
            extra={
                "call_request_id": call.id,
                "actual_duration": call.actual_duration,
                "billable_minutes": call.billable_minutes(self._billing_unit),
            },
        )
        return call


class CancelCallUseCase:
    """Any non-terminal status -> cancelled."""

    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(
        self,
        *,
        call_id: str,
        reason: str | None = None,
        changed_by: str | None = None,
        now: datetime | None = None,
    ) -> CallRequest:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=call_id,
            operation="cancel",
            transition=lambda c: c.cancel(reason, now=now),
            changed_by=changed_by,
            reason=reason,
            now=now,
        )


class MarkCallNoShowUseCase:
    """scheduled -> no_show."""

    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(
        self, *, call_id: str, changed_by: str | None = None, now: datetime | None = None
    ) -> CallRequest:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=call_id,
            operation="mark_no_show",
            transition=lambda c: c.mark_no_show(now=now),
            changed_by=changed_by,
            now=now,
        )


class UpdateCallLinkUseCase:
    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(
        self,
        *,
        call_id: str,
        link: str,
        platform: CallPlatform | None = None,
        now: datetime | None = None,
    ) -> CallRequest:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=call_id,
            operation="update_call_link",
            transition=lambda c: c.update_call_link(link, platform, now=now),
        )


class SetCallRecordingUseCase:
    def __init__(self, *, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(
        self, *, call_id: str, recording_url: str, now: datetime | None = None
    ) -> CallRequest:
        return await apply_transition(
            self._uow,
            _SPEC,
            entity_id=call_id,
            operation="set_recording_url",
            transition=lambda c: c.set_recording_url(recording_url, now=now),
        )
