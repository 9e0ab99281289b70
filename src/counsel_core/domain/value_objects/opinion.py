# src/counsel_core/domain/value_objects/opinion.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Legal opinion value objects.

Purpose:
    Validated text fragments and identifiers that make up a legal opinion
    request: opinion numbers, subject, question, background, facts and the
    governing jurisdiction.

Layer:
    domain/value_objects

Notes:
    Length bounds are applied to the stripped text. Each text value object
    exposes ``value`` and renders as that value.
"""

from __future__ import annotations

import re
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar

from counsel_core.domain.entities.base import utc_now
from counsel_core.domain.enums.legal_opinion import LegalSystem
from counsel_core.domain.exceptions.lifecycle import ValidationFailedError

__all__ = [
    "OpinionNumber",
    "OpinionSubject",
    "LegalQuestion",
    "BackgroundContext",
    "RelevantFacts",
    "Jurisdiction",
]

_OPINION_NUMBER_RE = re.compile(r"^OP-(\d{8})-(\d{4})$")


@dataclass(frozen=True, slots=True)
class OpinionNumber:
    """Human-facing opinion reference in the form ``OP-YYYYMMDD-NNNN``."""

    value: str

    def __post_init__(self) -> None:
        if not _OPINION_NUMBER_RE.match(self.value or ""):
            raise ValidationFailedError(
                "Opinion number must match OP-YYYYMMDD-NNNN",
                details={"opinion_number": self.value},
            )

    @classmethod
    def generate(cls, now: datetime | None = None, sequence: int | None = None) -> OpinionNumber:
        """Build a number for ``now`` with the given (or a random) 4-digit sequence."""
        stamp = (now or utc_now()).strftime("%Y%m%d")
        seq = sequence if sequence is not None else secrets.randbelow(10_000)
        if not 0 <= seq <= 9999:
            raise ValidationFailedError(
                "Opinion number sequence must be within 0..9999",
                details={"sequence": seq},
            )
        return cls(f"OP-{stamp}-{seq:04d}")

    @property
    def date_part(self) -> str:
        return self.value[3:11]

    @property
    def sequence(self) -> int:
        return int(self.value[-4:])

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class _BoundedText:
    """Stripped text whose length must fall within ``[MIN_LENGTH, MAX_LENGTH]``."""

    value: str

    LABEL: ClassVar[str] = "Text"
    MIN_LENGTH: ClassVar[int] = 1
    MAX_LENGTH: ClassVar[int] = 5000

    def __post_init__(self) -> None:
        text = (self.value or "").strip()
        if not self.MIN_LENGTH <= len(text) <= self.MAX_LENGTH:
            raise ValidationFailedError(
                f"{self.LABEL} must be between {self.MIN_LENGTH} and {self.MAX_LENGTH} characters",
                details={"field": self.LABEL, "length": len(text)},
            )
        object.__setattr__(self, "value", text)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class OpinionSubject(_BoundedText):
    LABEL: ClassVar[str] = "Subject"
    MIN_LENGTH: ClassVar[int] = 10
    MAX_LENGTH: ClassVar[int] = 200


@dataclass(frozen=True, slots=True)
class LegalQuestion(_BoundedText):
    """The question the opinion must answer; has to contain a question mark."""

    LABEL: ClassVar[str] = "Legal question"
    MIN_LENGTH: ClassVar[int] = 50
    MAX_LENGTH: ClassVar[int] = 2000

    def __post_init__(self) -> None:
        _BoundedText.__post_init__(self)
        if "?" not in self.value:
            raise ValidationFailedError(
                "Legal question must contain a question mark",
                details={"field": self.LABEL},
            )


@dataclass(frozen=True, slots=True)
class BackgroundContext(_BoundedText):
    LABEL: ClassVar[str] = "Background context"
    MIN_LENGTH: ClassVar[int] = 100
    MAX_LENGTH: ClassVar[int] = 5000


@dataclass(frozen=True, slots=True)
class RelevantFacts(_BoundedText):
    LABEL: ClassVar[str] = "Relevant facts"
    MIN_LENGTH: ClassVar[int] = 100
    MAX_LENGTH: ClassVar[int] = 5000


@dataclass(frozen=True, slots=True)
class Jurisdiction:
    """Where the opinion applies.

    Attributes:
        country: ISO country code or name (required).
        legal_system: Legal tradition governing the matter.
        region: Optional province/state.
        city: Optional city.
    """

    country: str
    legal_system: LegalSystem = LegalSystem.CIVIL_LAW
    region: str | None = None
    city: str | None = None

    def __post_init__(self) -> None:
        country = (self.country or "").strip()
        if not country:
            raise ValidationFailedError("Jurisdiction country is required")
        object.__setattr__(self, "country", country)
        object.__setattr__(self, "legal_system", LegalSystem(self.legal_system))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Jurisdiction:
        return cls(
            country=data["country"],
            legal_system=LegalSystem(data.get("legal_system", LegalSystem.CIVIL_LAW)),
            region=data.get("region"),
            city=data.get("city"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "country": self.country,
            "legal_system": self.legal_system.value,
            "region": self.region,
            "city": self.city,
        }

    def __str__(self) -> str:
        parts = [p for p in (self.city, self.region, self.country) if p]
        return ", ".join(parts)
