# tests/unit/domain/services/test_sla_calculator.py
from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from counsel_core.domain.entities.sla_policy import SLAPolicy
from counsel_core.domain.enums.sla import BreachType, RequestType, SLAPriority, SLAStatus
from counsel_core.domain.exceptions.lifecycle import ValidationFailedError
from counsel_core.domain.services.sla_calculator import (
    SLACalculator,
    SLACalculatorConfig,
    SLATrackedRequest,
    format_duration,
)
from counsel_core.domain.value_objects.sla import SLADeadlines, SLATimes

T0 = datetime(2025, 7, 1, 9, 0, tzinfo=UTC)


def _tracked(
    request_id: str = "r-1",
    *,
    priority: SLAPriority = SLAPriority.NORMAL,
    responded_at: datetime | None = None,
    resolved_at: datetime | None = None,
) -> SLATrackedRequest:
    return SLATrackedRequest(
        request_id=request_id,
        request_type=RequestType.CONSULTATION,
        priority=priority,
        deadlines=SLADeadlines.calculate(SLATimes(60, 600), T0),
        responded_at=responded_at,
        resolved_at=resolved_at,
    )


def test_config_rejects_out_of_range_threshold() -> None:
    with pytest.raises(ValidationFailedError, match="between 0 and 1"):
        SLACalculatorConfig(at_risk_threshold=1.0)


def test_default_deadlines_scale_with_priority() -> None:
    calc = SLACalculator()
    d = calc.calculate_deadlines(None, RequestType.CONSULTATION, SLAPriority.URGENT, T0)

    assert d.response_deadline == T0 + timedelta(minutes=30)
    assert d.resolution_deadline == T0 + timedelta(minutes=720)
    assert d.escalation_deadline == T0 + timedelta(minutes=360)


def test_policy_deadlines_rescale_for_other_priority() -> None:
    policy = SLAPolicy.create(
        name="Calls",
        request_type=RequestType.CALL,
        response_minutes=40,
        resolution_minutes=400,
        priority=SLAPriority.NORMAL,
    )
    calc = SLACalculator()

    same = calc.calculate_deadlines(policy, RequestType.CALL, SLAPriority.NORMAL, T0)
    low = calc.calculate_deadlines(policy, RequestType.CALL, SLAPriority.LOW, T0)

    assert same.response_deadline == T0 + timedelta(minutes=40)
    assert low.response_deadline == T0 + timedelta(minutes=60)


def test_request_info_reports_per_deadline_state() -> None:
    info = SLACalculator().request_info(_tracked(), T0 + timedelta(minutes=50), policy_id="p-1")

    assert info.response_status is SLAStatus.AT_RISK
    assert info.resolution_status is SLAStatus.ON_TRACK
    assert info.status is SLAStatus.AT_RISK
    assert info.is_at_risk
    assert info.response_time_remaining == timedelta(minutes=10)
    assert info.response_percent_elapsed == 83
    assert info.policy_id == "p-1"


def test_custom_threshold_changes_at_risk_point() -> None:
    calc = SLACalculator(SLACalculatorConfig(at_risk_threshold=0.9))
    assert calc.overall_status(_tracked(), T0 + timedelta(minutes=50)) is SLAStatus.ON_TRACK
    assert calc.is_at_risk(_tracked(), T0 + timedelta(minutes=55)) == (True, False)


def test_check_breaches_lists_unmet_deadlines_in_order() -> None:
    calc = SLACalculator()
    late = T0 + timedelta(hours=11)

    breaches = calc.check_breaches(_tracked(), late)

    assert [b.breach_type for b in breaches] == [BreachType.RESPONSE, BreachType.RESOLUTION]
    assert breaches[0].overdue == timedelta(hours=10)
    assert calc.check_breaches(_tracked(responded_at=T0), late)[0].breach_type is (
        BreachType.RESOLUTION
    )
    assert calc.check_breaches(_tracked(resolved_at=T0), late) == []


def test_urgency_score_formula() -> None:
    calc = SLACalculator()
    # 30 of 60 response minutes elapsed: 2*10 + 1*20 + 50
    assert calc.urgency_score(_tracked(), T0 + timedelta(minutes=30)) == 90
    # responded, resolution 300/600 elapsed
    responded = _tracked(responded_at=T0)
    assert calc.urgency_score(responded, T0 + timedelta(minutes=300)) == 90
    assert calc.urgency_score(_tracked(resolved_at=T0), T0 + timedelta(days=3)) == 0


def test_urgency_grows_with_priority_and_time() -> None:
    calc = SLACalculator()
    now = T0 + timedelta(minutes=20)

    scores = [calc.urgency_score(_tracked(priority=p), now) for p in SLAPriority]
    assert scores == sorted(scores)
    assert calc.urgency_score(_tracked(), now) < calc.urgency_score(
        _tracked(), now + timedelta(minutes=30)
    )


def test_sort_by_urgency_is_stable() -> None:
    calc = SLACalculator()
    a = _tracked("a")
    b = _tracked("b", priority=SLAPriority.URGENT)
    c = _tracked("c")

    ordered = calc.sort_by_urgency([a, b, c], T0 + timedelta(minutes=10))

    assert [r.request_id for r in ordered] == ["b", "a", "c"]


def test_evaluate_many() -> None:
    results = SLACalculator().evaluate_many(
        [_tracked("x"), _tracked("y", responded_at=T0)], T0 + timedelta(minutes=70)
    )

    assert [r.status for r in results] == [SLAStatus.BREACHED, SLAStatus.ON_TRACK]
    assert results[0].is_breached
    assert results[0].urgency_score > results[1].urgency_score


@pytest.mark.parametrize(
    ("delta", "expected"),
    [
        (timedelta(days=2, hours=3, minutes=5), "2d 3h"),
        (timedelta(hours=1, minutes=5), "1h 5m"),
        (timedelta(minutes=12, seconds=9), "12m"),
        (timedelta(seconds=30), "30s"),
        (timedelta(seconds=-5), "0s"),
    ],
)
def test_format_duration(delta: timedelta, expected: str) -> None:
    assert format_duration(delta) == expected
