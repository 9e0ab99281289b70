# src/counsel_core/domain/value_objects/identity.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Identity value objects (Email, Username).

Purpose:
    Validated user-facing identifiers shared by the back office. Validation
    runs through Pydantic v2 frozen models; :meth:`create` converts Pydantic
    failures into :class:`ValidationFailedError` so callers see one error
    taxonomy.

Layer:
    domain/value_objects
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from counsel_core.domain.exceptions.lifecycle import ValidationFailedError

__all__ = ["Email", "Username"]

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@.]{2,}$")
_USERNAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_USERNAME_MIN_LENGTH = 3


class Email(BaseModel):
    """E-mail address value object."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    value: str

    @field_validator("value", mode="before")
    @classmethod
    def _validate(cls, raw: object) -> str:
        if not isinstance(raw, str) or not _EMAIL_RE.match(raw):
            raise ValueError("Invalid email format")
        return raw

    @classmethod
    def create(cls, raw: str | None) -> Email:
        """Validate ``raw`` and return an Email.

        Raises:
            ValidationFailedError: If ``raw`` is not a well-formed address.
        """
        try:
            return cls(value=raw)
        except ValidationError as exc:
            raise ValidationFailedError("Invalid email format", details={"email": raw}) from exc

    @property
    def domain(self) -> str:
        """Part after the ``@``."""
        return self.value.rsplit("@", 1)[1]

    def __str__(self) -> str:
        return self.value


class Username(BaseModel):
    """Login handle: at least three letters, digits, ``_`` or ``-``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    value: str

    @field_validator("value", mode="before")
    @classmethod
    def _validate(cls, raw: object) -> str:
        if not isinstance(raw, str) or len(raw) < _USERNAME_MIN_LENGTH:
            raise ValueError(f"Username must be at least {_USERNAME_MIN_LENGTH} characters")
        if not _USERNAME_RE.match(raw):
            raise ValueError("Username may only contain letters, digits, '_' and '-'")
        return raw

    @classmethod
    def create(cls, raw: str | None) -> Username:
        """Validate ``raw`` and return a Username.

        Raises:
            ValidationFailedError: If ``raw`` is too short or has invalid characters.
        """
        try:
            return cls(value=raw)
        except ValidationError as exc:
            message = exc.errors()[0]["msg"].removeprefix("Value error, ")
            raise ValidationFailedError(message, details={"username": raw}) from exc

    def __str__(self) -> str:
        return self.value
