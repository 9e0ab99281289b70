# src/counsel_core/domain/exceptions/lifecycle.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Lifecycle and validation exceptions.

Purpose:
    Error kinds raised by lifecycle entities, value objects and use cases.
    Adapters map them to responses (validation and transition errors to 400,
    missing entities to 404, failed preconditions to 409/422).

Layer:
    domain/exceptions
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from counsel_core.domain.exceptions.base import DomainError

__all__ = [
    "NotFoundError",
    "ValidationFailedError",
    "InvalidTransitionError",
    "PreconditionFailedError",
    "ActiveDisputeExistsError",
]


class NotFoundError(DomainError):
    """Referenced entity does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: str) -> None:
        """Initialize the error.

        Args:
            entity: Logical entity name (e.g. ``"refund"``).
            entity_id: Identifier that could not be resolved.
        """
        super().__init__(
            f"{entity} not found: {entity_id}",
            details={"entity": entity, "id": entity_id},
        )


class ValidationFailedError(DomainError):
    """Malformed input to a factory, value object or transition."""

    code = "VALIDATION_FAILED"


class InvalidTransitionError(DomainError):
    """Operation attempted from a state that does not permit it."""

    code = "INVALID_TRANSITION"

    def __init__(
        self,
        *,
        entity: str,
        operation: str,
        current_status: Enum | str,
        message: str | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            entity: Logical entity name.
            operation: Attempted transition name.
            current_status: Status the entity was in when the call was made.
            message: Optional override for the default message.
        """
        status = current_status.value if isinstance(current_status, Enum) else current_status
        details: dict[str, Any] = {
            "entity": entity,
            "operation": operation,
            "current_status": status,
        }
        super().__init__(
            message or f"Cannot {operation} {entity} in status '{status}'",
            details=details,
        )
        self.entity = entity
        self.operation = operation
        self.current_status = status


class PreconditionFailedError(DomainError):
    """A business precondition for the operation is not met."""

    code = "PRECONDITION_FAILED"


class ActiveDisputeExistsError(PreconditionFailedError):
    """The user already has an active dispute for the same related entity."""

    code = "DISPUTE_ALREADY_ACTIVE"
