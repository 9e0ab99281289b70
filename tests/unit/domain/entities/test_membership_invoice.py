# tests/unit/domain/entities/test_membership_invoice.py
from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta

import pytest

from counsel_core.domain.entities.membership_invoice import (
    MembershipInvoice,
    generate_invoice_number,
)
from counsel_core.domain.enums.billing import InvoiceStatus
from counsel_core.domain.exceptions.lifecycle import InvalidTransitionError
from counsel_core.domain.value_objects.money import Money

T0 = datetime(2025, 6, 1, tzinfo=UTC)
DUE = T0 + timedelta(days=10)


def _invoice() -> MembershipInvoice:
    return MembershipInvoice.create(
        membership_id="mem-1", amount=Money.of(500), due_date=DUE, now=T0
    )


def test_invoice_number_format() -> None:
    assert re.fullmatch(r"INV-[0-9A-Z]+-[0-9A-F]{4}", generate_invoice_number(now=T0))


def test_is_overdue_only_for_unpaid_past_due() -> None:
    inv = _invoice()

    assert not inv.is_overdue(DUE - timedelta(seconds=1))
    assert inv.is_overdue(DUE + timedelta(seconds=1))
    assert not inv.mark_as_paid(paid_at=T0).is_overdue(DUE + timedelta(days=5))
    assert not inv.cancel(now=T0).is_overdue(DUE + timedelta(days=5))


def test_overdue_status_alone_does_not_make_invoice_overdue() -> None:
    flagged = _invoice().mark_as_overdue(now=T0)

    assert flagged.status is InvoiceStatus.OVERDUE
    assert not flagged.is_overdue(T0)
    assert flagged.is_overdue(DUE + timedelta(minutes=1))


def test_days_until_due_and_overdue() -> None:
    inv = _invoice()

    assert inv.days_until_due(T0) == 10
    assert inv.days_until_due(T0 + timedelta(days=9, hours=1)) == 1
    assert inv.days_overdue(T0) == 0
    assert inv.days_overdue(DUE + timedelta(days=2, hours=3)) == 3


def test_paid_from_unpaid_or_overdue() -> None:
    overdue = _invoice().mark_as_overdue(now=DUE + timedelta(days=1))
    paid = overdue.mark_as_paid(paid_at=DUE + timedelta(days=2))

    assert overdue.status is InvoiceStatus.OVERDUE
    assert overdue.is_overdue(DUE + timedelta(days=1))
    assert paid.status is InvoiceStatus.PAID
    assert paid.paid_at == DUE + timedelta(days=2)


@pytest.mark.parametrize("operation", ["mark_as_overdue", "cancel"])
def test_only_unpaid_invoices_can_go_overdue_or_be_cancelled(operation: str) -> None:
    paid = _invoice().mark_as_paid(paid_at=T0)
    with pytest.raises(InvalidTransitionError):
        getattr(paid, operation)(now=T0)


def test_cannot_pay_twice() -> None:
    paid = _invoice().mark_as_paid(paid_at=T0)
    with pytest.raises(InvalidTransitionError, match="Cannot mark_as_paid membership_invoice"):
        paid.mark_as_paid()


def test_reconstitute_round_trip() -> None:
    inv = _invoice()
    assert MembershipInvoice.reconstitute(inv.to_dict()) == inv
