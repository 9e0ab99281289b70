# tests/unit/domain/value_objects/test_identity_and_duration.py
from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from counsel_core.domain.exceptions.lifecycle import ValidationFailedError
from counsel_core.domain.value_objects.duration import Duration
from counsel_core.domain.value_objects.identity import Email, Username


@pytest.mark.parametrize("raw", ["a@b.co", "first.last@firm.com.sa", "x_y@sub.domain.org"])
def test_email_accepts_well_formed_addresses(raw: str) -> None:
    email = Email.create(raw)
    assert str(email) == raw
    assert email.domain == raw.split("@")[1]


@pytest.mark.parametrize("raw", ["", "no-at-sign", "@firm.com", "a@b", "a@b.c", "a b@c.com", None])
def test_email_rejects_malformed_addresses(raw: str | None) -> None:
    with pytest.raises(ValidationFailedError, match="Invalid email format"):
        Email.create(raw)


def test_username_rules() -> None:
    assert Username.create("abc").value == "abc"
    assert Username.create("lawyer_01-x").value == "lawyer_01-x"

    with pytest.raises(ValidationFailedError, match="at least 3 characters"):
        Username.create("ab")
    with pytest.raises(ValidationFailedError, match="letters, digits"):
        Username.create("bad name")


def test_duration_from_time_range_floors_and_clamps() -> None:
    start = datetime(2025, 1, 1, 10, 0, tzinfo=UTC)

    assert Duration.from_time_range(start, start + timedelta(minutes=90, seconds=59)).minutes == 90
    assert Duration.from_time_range(start, start - timedelta(minutes=5)).minutes == 0


def test_duration_format_and_hours() -> None:
    assert Duration(45).format() == "45m"
    assert Duration(120).format() == "2h"
    assert Duration(90).format() == "1h 30m"
    assert Duration(90).hours == 1.5


def test_duration_rounding_to_billing_unit() -> None:
    assert Duration(31).rounded_up_to(15) == 45
    assert Duration(30).rounded_up_to(15) == 30
    assert Duration(0).rounded_up_to(15) == 0
    with pytest.raises(ValidationFailedError, match="Billing unit"):
        Duration(10).rounded_up_to(0)


def test_duration_rejects_negative_minutes() -> None:
    with pytest.raises(ValidationFailedError, match="cannot be negative"):
        Duration(-1)
