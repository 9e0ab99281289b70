# tests/unit/domain/entities/test_call_request.py
from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta

import pytest

from counsel_core.domain.entities.call_request import CallRequest, generate_request_number
from counsel_core.domain.enums.call_request import CallPlatform, CallStatus
from counsel_core.domain.exceptions.lifecycle import (
    InvalidTransitionError,
    ValidationFailedError,
)

T0 = datetime(2025, 5, 1, 9, 0, tzinfo=UTC)
PURPOSE = "Discuss the lease termination notice"


def _pending() -> CallRequest:
    return CallRequest.create(subscriber_id="sub-1", purpose=PURPOSE, now=T0)


def _scheduled() -> CallRequest:
    return _pending().schedule(T0 + timedelta(days=1), 30, now=T0)


def test_request_number_format() -> None:
    number = generate_request_number(T0)
    assert re.fullmatch(r"CALL-[0-9A-Z]+-[0-9A-Z]{4}", number)


def test_create_validates_purpose_length() -> None:
    with pytest.raises(ValidationFailedError, match="at least 10 characters"):
        CallRequest.create(subscriber_id="sub-1", purpose="short")


def test_create_starts_pending() -> None:
    call = _pending()
    assert call.status is CallStatus.PENDING
    assert call.submitted_at == T0
    assert call.request_number.startswith("CALL-")


def test_schedule_defaults_platform_to_internal() -> None:
    call = _scheduled()

    assert call.status is CallStatus.SCHEDULED
    assert call.scheduled_at == T0 + timedelta(days=1)
    assert call.scheduled_duration == 30
    assert call.call_platform is CallPlatform.INTERNAL


def test_schedule_rejects_past_time_and_bad_duration() -> None:
    with pytest.raises(ValidationFailedError, match="in the past"):
        _pending().schedule(T0 - timedelta(minutes=1), 30, now=T0)
    with pytest.raises(ValidationFailedError, match="between 1 and 120"):
        _pending().schedule(T0 + timedelta(hours=1), 121, now=T0)
    with pytest.raises(ValidationFailedError, match="between 1 and 60"):
        _pending().schedule(T0 + timedelta(hours=1), 90, max_duration_minutes=60, now=T0)


def test_start_call_requires_scheduled() -> None:
    with pytest.raises(InvalidTransitionError, match="Cannot start_call call_request"):
        _pending().start_call()


def test_end_call_measures_duration_and_billing() -> None:
    started = _scheduled().start_call(now=T0 + timedelta(days=1))
    ended = started.end_call(
        "https://rec.example/1", now=T0 + timedelta(days=1, minutes=31, seconds=40)
    )

    assert ended.status is CallStatus.COMPLETED
    assert ended.actual_duration == 31
    assert ended.completed_at == ended.call_ended_at
    assert ended.recording_url == "https://rec.example/1"
    assert ended.billable_minutes() == 45
    assert ended.billable_minutes(30) == 60


def test_end_call_requires_in_progress() -> None:
    with pytest.raises(InvalidTransitionError):
        _scheduled().end_call()


def test_cancel_from_any_non_terminal_state() -> None:
    for call in (_pending(), _scheduled(), _scheduled().start_call(now=T0)):
        cancelled = call.cancel("client unavailable")
        assert cancelled.status is CallStatus.CANCELLED
        assert cancelled.cancellation_reason == "client unavailable"


def test_cancel_rejected_once_terminal() -> None:
    with pytest.raises(InvalidTransitionError):
        _pending().cancel().cancel()


def test_mark_no_show_only_when_scheduled() -> None:
    assert _scheduled().mark_no_show().status is CallStatus.NO_SHOW
    with pytest.raises(InvalidTransitionError):
        _pending().mark_no_show()


def test_reschedule_keeps_status_and_duration() -> None:
    call = _scheduled()
    moved = call.reschedule(T0 + timedelta(days=2), now=T0)

    assert moved.status is CallStatus.SCHEDULED
    assert moved.scheduled_at == T0 + timedelta(days=2)
    assert moved.scheduled_duration == 30
    with pytest.raises(InvalidTransitionError):
        _pending().reschedule(T0 + timedelta(days=2), now=T0)


def test_update_call_link_and_recording() -> None:
    call = _scheduled().update_call_link(" https://zoom.us/j/1 ", CallPlatform.ZOOM)
    assert call.call_link == "https://zoom.us/j/1"
    assert call.call_platform is CallPlatform.ZOOM

    with pytest.raises(InvalidTransitionError):
        call.set_recording_url("https://rec.example/2")


def test_assign_provider_is_status_independent() -> None:
    assert _pending().assign_provider("prov-1").assigned_provider_id == "prov-1"
    assert _scheduled().assign_provider("prov-2").has_provider


def test_overdue_and_upcoming() -> None:
    call = _scheduled()
    assert call.is_upcoming(timedelta(days=2), now=T0)
    assert not call.is_upcoming(timedelta(hours=1), now=T0)
    assert call.is_overdue(T0 + timedelta(days=1, minutes=1))
    assert not call.is_overdue(T0)


def test_reconstitute_round_trip() -> None:
    call = _scheduled()
    assert CallRequest.reconstitute(call.to_dict()) == call


def test_naive_timestamps_are_treated_as_utc() -> None:
    naive = T0.replace(tzinfo=None)

    call = CallRequest.create(subscriber_id="sub-1", purpose=PURPOSE, now=naive)
    scheduled = call.schedule(naive + timedelta(days=1), 30, now=naive)
    moved = scheduled.reschedule(naive + timedelta(days=2), now=naive + timedelta(hours=1))
    started = moved.start_call(now=T0 + timedelta(days=2))
    ended = started.end_call(now=naive + timedelta(days=2, minutes=20))

    assert scheduled.scheduled_at == T0 + timedelta(days=1)
    assert moved.scheduled_at == T0 + timedelta(days=2)
    assert ended.actual_duration == 20
    assert ended.call_ended_at == T0 + timedelta(days=2, minutes=20)


def test_naive_now_still_rejects_past_slot() -> None:
    naive = T0.replace(tzinfo=None)
    with pytest.raises(ValidationFailedError, match="in the past"):
        _pending().schedule(T0 - timedelta(minutes=1), 30, now=naive)
