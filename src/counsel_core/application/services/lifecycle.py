# src/counsel_core/application/services/lifecycle.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Lifecycle transition runner.

Purpose:
    Shared plumbing for use cases that load one aggregate, apply a single
    transition and persist the result inside a unit of work:
        * resolve the repository port from the UoW,
        * raise ``NotFoundError`` when the aggregate is missing,
        * persist the returned instance (and optionally a status history entry),
        * commit, log and count the attempt.

Layer:
    application/services
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, TypeVar, cast

from counsel_core.application.uow import UnitOfWork
from counsel_core.domain.entities.status_history import StatusHistoryEntry
from counsel_core.domain.exceptions.lifecycle import NotFoundError
from counsel_core.infrastructure.observability.metrics import observe_transition

logger = logging.getLogger(__name__)

TEntity = TypeVar("TEntity")
TPort = TypeVar("TPort")


def resolve_repository(tx: Any, attr: str, port: type[TPort]) -> TPort:  # noqa: UP047
    """Return ``tx.<attr>`` when the UoW exposes it, else ``tx.get_repository(port)``."""
    if hasattr(tx, attr):
        return cast(TPort, getattr(tx, attr))
    return cast(TPort, tx.get_repository(port))


@dataclass(frozen=True, slots=True)
class TransitionSpec:
    """Static description of where an aggregate lives.

    Attributes:
        entity: Logical entity name used in errors, logs and metrics.
        port: Repository port type.
        repo_attr: Optional attribute name a UoW may expose directly.
        records_history: Append a ``StatusHistoryEntry`` on status changes.
    """

    entity: str
    port: type[Any]
    repo_attr: str
    records_history: bool = False


async def apply_transition(  # noqa: UP047
    uow: UnitOfWork,
    spec: TransitionSpec,
    *,
    entity_id: str,
    operation: str,
    transition: Callable[[TEntity], TEntity],
    changed_by: str | None = None,
    reason: str | None = None,
    now: datetime | None = None,
    force_history: bool = False,
) -> TEntity:
    """Load, transition, persist and commit one aggregate.

    Raises:
        NotFoundError: If the aggregate does not exist.
        DomainError: Whatever the transition raises; nothing is persisted.

    Notes:
        History is written only when the status changes, unless
        ``force_history`` is set (e.g. a reschedule keeps the status).
    """
    log_extra = {"entity": spec.entity, "entity_id": entity_id, "operation": operation}
    logger.info(f"{spec.entity}.{operation}.start", extra=log_extra)

    with observe_transition(spec.entity, operation):
        async with uow as tx:
            repo = resolve_repository(tx, spec.repo_attr, spec.port)
            current = await repo.find_by_id(entity_id)
            if current is None:
                logger.info(f"{spec.entity}.{operation}.not_found", extra=log_extra)
                raise NotFoundError(spec.entity, entity_id)

            updated = transition(current)
            await repo.update(updated)

            before = getattr(current, "status", None)
            after = getattr(updated, "status", None)
            if spec.records_history and (before != after or force_history):
                await repo.add_status_history(
                    StatusHistoryEntry.record(
                        entity_id=entity_id,
                        from_status=before,
                        to_status=after,
                        changed_by=changed_by,
                        reason=reason,
                        now=now or getattr(updated, "updated_at", None),
                    )
                )
            await tx.commit()

    logger.info(
        f"{spec.entity}.{operation}.success",
        extra={**log_extra, "from_status": before, "to_status": after},
    )
    return updated
