# src/counsel_core/adapters/dependencies/wiring.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Composition helpers.

Purpose:
    Build the SQLAlchemy unit of work and the settings-dependent use cases
    (SLA engine, call scheduling/billing, provider matching) for a host
    application.

Layer:
    adapters/dependencies
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from counsel_core.adapters.uow.sqlalchemy_uow import SqlAlchemyUnitOfWork
from counsel_core.application.uow import UnitOfWork
from counsel_core.application.use_cases.call_requests.call_lifecycle import (
    EndCallUseCase,
    RescheduleCallUseCase,
    ScheduleCallUseCase,
)
from counsel_core.application.use_cases.sla.sla_tracking import CalculateSLADeadlinesUseCase
from counsel_core.application.use_cases.specializations.provider_matching import (
    FindProvidersWithSpecializationsUseCase,
)
from counsel_core.config.settings import Settings, get_settings
from counsel_core.domain.services.sla_calculator import SLACalculator
from counsel_core.infrastructure.database.session import get_sessionmaker

__all__ = [
    "get_uow",
    "get_sla_calculator",
    "build_calculate_sla_deadlines",
    "build_schedule_call",
    "build_reschedule_call",
    "build_end_call",
    "build_find_providers",
]


def get_uow(
    repo_factories: Mapping[type[Any], Callable[[AsyncSession], Any]] | None = None,
) -> SqlAlchemyUnitOfWork:
    """Return a SQLAlchemy-backed UnitOfWork bound to the global session factory."""
    session_factory: async_sessionmaker[AsyncSession] = get_sessionmaker()
    return SqlAlchemyUnitOfWork(session_factory=session_factory, repo_factories=repo_factories)


def get_sla_calculator(settings: Settings | None = None) -> SLACalculator:
    return SLACalculator((settings or get_settings()).sla_calculator_config())


def build_calculate_sla_deadlines(
    uow: UnitOfWork, settings: Settings | None = None
) -> CalculateSLADeadlinesUseCase:
    return CalculateSLADeadlinesUseCase(uow=uow, calculator=get_sla_calculator(settings))


def build_schedule_call(uow: UnitOfWork, settings: Settings | None = None) -> ScheduleCallUseCase:
    cfg = settings or get_settings()
    return ScheduleCallUseCase(uow=uow, max_duration_minutes=cfg.call_max_duration_minutes)


def build_reschedule_call(
    uow: UnitOfWork, settings: Settings | None = None
) -> RescheduleCallUseCase:
    cfg = settings or get_settings()
    return RescheduleCallUseCase(uow=uow, max_duration_minutes=cfg.call_max_duration_minutes)


def build_end_call(uow: UnitOfWork, settings: Settings | None = None) -> EndCallUseCase:
    cfg = settings or get_settings()
    return EndCallUseCase(uow=uow, billing_unit_minutes=cfg.call_billing_unit_minutes)


def build_find_providers(
    uow: UnitOfWork, settings: Settings | None = None
) -> FindProvidersWithSpecializationsUseCase:
    cfg = settings or get_settings()
    return FindProvidersWithSpecializationsUseCase(
        uow=uow, default_limit=cfg.matcher_default_limit
    )
