# src/counsel_core/domain/value_objects/money.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Money value object.

Purpose:
    Immutable amount + currency pair used for opinion costs, refunds and
    invoices. Amounts are ``Decimal`` and never negative; currency codes are
    three ASCII letters normalized to upper case.

Layer:
    domain/value_objects
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from counsel_core.domain.exceptions.lifecycle import ValidationFailedError

__all__ = ["Money", "DEFAULT_CURRENCY"]

DEFAULT_CURRENCY = "SAR"
_CENT = Decimal("0.01")


def _to_decimal(value: Decimal | int | float | str, *, field: str) -> Decimal:
    if isinstance(value, bool):
        raise ValidationFailedError(f"{field} must be numeric", details={field: value})
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationFailedError(f"{field} must be numeric", details={field: value}) from exc
    if not result.is_finite():
        raise ValidationFailedError(f"{field} must be finite", details={field: str(value)})
    return result


@dataclass(frozen=True, slots=True)
class Money:
    """Non-negative monetary amount in a single currency.

    Attributes:
        amount: Decimal amount (``>= 0``).
        currency: ISO 4217 style code, e.g. ``"SAR"``.
    """

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        """Validate and normalize amount and currency."""
        amount = _to_decimal(self.amount, field="amount")
        if amount < 0:
            raise ValidationFailedError(
                "Amount cannot be negative", details={"amount": str(amount)}
            )
        currency = (self.currency or "").strip().upper()
        if len(currency) != 3 or not currency.isascii() or not currency.isalpha():
            raise ValidationFailedError(
                f"Invalid currency: {self.currency}",
                details={"currency": self.currency},
            )
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "currency", currency)

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def of(cls, amount: Decimal | int | float | str, currency: str = DEFAULT_CURRENCY) -> Money:
        """Build a Money value from any numeric input."""
        return cls(_to_decimal(amount, field="amount"), currency)

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> Money:
        """Return a zero amount in ``currency``."""
        return cls(Decimal("0"), currency)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Money:
        """Rebuild a Money value from :meth:`to_dict` output."""
        return cls.of(data["amount"], data.get("currency", DEFAULT_CURRENCY))

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def add(self, other: Money) -> Money:
        self._ensure_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def subtract(self, other: Money) -> Money:
        """Subtract ``other``; the result may not go below zero."""
        self._ensure_same_currency(other)
        result = self.amount - other.amount
        if result < 0:
            raise ValidationFailedError(
                "Subtraction would result in negative amount",
                details={"left": str(self.amount), "right": str(other.amount)},
            )
        return Money(result, self.currency)

    def multiply(self, factor: Decimal | int | float | str) -> Money:
        value = _to_decimal(factor, field="factor")
        if value < 0:
            raise ValidationFailedError("Factor cannot be negative", details={"factor": str(value)})
        return Money(self.amount * value, self.currency)

    def percentage(self, percent: Decimal | int | float | str) -> Money:
        value = _to_decimal(percent, field="percent")
        if value < 0 or value > 100:
            raise ValidationFailedError(
                "Percentage must be between 0 and 100",
                details={"percent": str(value)},
            )
        return Money(self.amount * value / Decimal(100), self.currency)

    # ------------------------------------------------------------------
    # Comparisons (same currency only)
    # ------------------------------------------------------------------

    def is_greater_than(self, other: Money) -> bool:
        self._ensure_same_currency(other)
        return self.amount > other.amount

    def is_less_than(self, other: Money) -> bool:
        self._ensure_same_currency(other)
        return self.amount < other.amount

    def is_greater_than_or_equal(self, other: Money) -> bool:
        self._ensure_same_currency(other)
        return self.amount >= other.amount

    def is_less_than_or_equal(self, other: Money) -> bool:
        self._ensure_same_currency(other)
        return self.amount <= other.amount

    def is_zero(self) -> bool:
        return self.amount == 0

    def is_positive(self) -> bool:
        return self.amount > 0

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    def rounded(self) -> Decimal:
        """Return the amount rounded half-up to two decimals."""
        return self.amount.quantize(_CENT, rounding=ROUND_HALF_UP)

    def format(self) -> str:
        """Return ``"<amount:.2f> <currency>"``, e.g. ``"100.00 SAR"``."""
        return f"{self.rounded()} {self.currency}"

    def to_dict(self) -> dict[str, Any]:
        return {"amount": str(self.amount), "currency": self.currency}

    def __str__(self) -> str:
        return self.format()

    def _ensure_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationFailedError(
                f"Cannot operate on different currencies: {self.currency} vs {other.currency}",
                details={"left": self.currency, "right": other.currency},
            )
