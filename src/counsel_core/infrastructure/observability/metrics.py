# src/counsel_core/infrastructure/observability/metrics.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Prometheus metrics utilities (registry-aware, hot-reload safe).

Collectors are returned by accessor functions bound to the **current**
``prometheus_client.REGISTRY``:
    - No duplicate-registration errors on reload or in tests.
    - The cache resets automatically when the active registry changes.

Metrics:
    db_operation_duration_seconds{operation,model,outcome}
    db_errors_total{operation,model,reason}
    lifecycle_transitions_total{entity,operation,outcome}
    sla_breaches_total{request_type,breach_type}

Example:
    get_lifecycle_transitions_total().labels(
        entity="refund", operation="approve", outcome="success"
    ).inc()
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Generator
from contextlib import contextmanager, suppress
from typing import Final

import prometheus_client as prom
from prometheus_client import Counter, Histogram

__all__ = [
    "get_db_operation_duration_seconds",
    "get_db_errors_total",
    "get_lifecycle_transitions_total",
    "get_sla_breaches_total",
    "record_transition",
    "observe_transition",
]

_log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Common histogram buckets (seconds)
_BUCKETS: Final[tuple[float, ...]] = (
    0.001,
    0.005,
    0.010,
    0.025,
    0.050,
    0.100,
    0.250,
    0.500,
    1.000,
    2.500,
    5.000,
)

_registry_id: int | None = None
_hist_cache: dict[str, Histogram] = {}
_counter_cache: dict[str, Counter] = {}
_lock = threading.RLock()


# ---------------------------------------------------------------------------
# Registry-handling primitives


def _ensure_registry() -> None:
    """Reset caches if the active registry changed."""
    global _registry_id
    with _lock:
        rid = id(prom.REGISTRY)
        if _registry_id != rid:
            _hist_cache.clear()
            _counter_cache.clear()
            _registry_id = rid


def _lookup_existing(name: str) -> object | None:
    """Return a collector already registered under ``name`` on the active registry."""
    with _lock, suppress(Exception):
        mapping = getattr(prom.REGISTRY, "_names_to_collectors", None)
        if isinstance(mapping, dict):
            return mapping.get(name)
    return None


# ---------------------------------------------------------------------------
# Get-or-create helpers


def _get_or_create_hist(
    name: str,
    help_text: str,
    *,
    buckets: tuple[float, ...] = _BUCKETS,
    labelnames: tuple[str, ...] = (),
) -> Histogram:
    """Get or create a registry-bound ``Histogram`` with stable identity."""
    _ensure_registry()
    with _lock:
        cached = _hist_cache.get(name)
        if cached is not None:
            return cached

        existing = _lookup_existing(name)
        if isinstance(existing, Histogram):
            _hist_cache[name] = existing
            return existing

        try:
            h = Histogram(name, help_text, labelnames, buckets=buckets, registry=prom.REGISTRY)
        except ValueError as exc:
            again = _lookup_existing(name)
            if "Duplicated timeseries" in str(exc) and isinstance(again, Histogram):
                _hist_cache[name] = again
                return again
            _log.exception("Failed to register Prometheus histogram %s", name)
            raise
        _hist_cache[name] = h
        return h


def _get_or_create_counter(
    name: str,
    help_text: str,
    *,
    labelnames: tuple[str, ...] = (),
) -> Counter:
    """Get or create a registry-bound ``Counter`` with stable identity.

    ``prometheus_client`` registers counters under their base name without the
    ``_total`` suffix, so both spellings are checked.
    """
    _ensure_registry()
    with _lock:
        cached = _counter_cache.get(name)
        if cached is not None:
            return cached

        base = name.removesuffix("_total")
        for key in (name, base):
            existing = _lookup_existing(key)
            if isinstance(existing, Counter):
                _counter_cache[name] = existing
                return existing

        try:
            c = Counter(name, help_text, labelnames, registry=prom.REGISTRY)
        except ValueError as exc:
            again = _lookup_existing(base)
            if "Duplicated timeseries" in str(exc) and isinstance(again, Counter):
                _counter_cache[name] = again
                return again
            _log.exception("Failed to register Prometheus counter %s", name)
            raise
        _counter_cache[name] = c
        return c


# ---------------------------------------------------------------------------
# Persistence metrics


def get_db_operation_duration_seconds() -> Histogram:
    """Histogram of repository operation latency.

    Labels:
        operation: Repository method (e.g. ``find_best_match``).
        model: Persisted model name.
        outcome: ``success`` or ``error``.
    """
    return _get_or_create_hist(
        name="db_operation_duration_seconds",
        help_text="Latency (seconds) of repository operations",
        labelnames=("operation", "model", "outcome"),
    )


def get_db_errors_total() -> Counter:
    """Counter of repository failures.

    Labels:
        operation: Repository method.
        model: Persisted model name.
        reason: Exception class name.
    """
    return _get_or_create_counter(
        name="db_errors_total",
        help_text="Repository operation failures",
        labelnames=("operation", "model", "reason"),
    )


# ---------------------------------------------------------------------------
# Domain metrics


def get_lifecycle_transitions_total() -> Counter:
    """Counter of attempted lifecycle transitions.

    Labels:
        entity: Aggregate name (``refund``, ``dispute``...).
        operation: Transition name.
        outcome: ``success``, ``not_found``, ``invalid_transition``,
            ``validation_failed``, ``precondition_failed`` or ``error``.
    """
    return _get_or_create_counter(
        name="lifecycle_transitions_total",
        help_text="Lifecycle transitions attempted, by outcome",
        labelnames=("entity", "operation", "outcome"),
    )


def get_sla_breaches_total() -> Counter:
    """Counter of detected SLA breaches.

    Labels:
        request_type: SLA request type.
        breach_type: ``response`` or ``resolution``.
    """
    return _get_or_create_counter(
        name="sla_breaches_total",
        help_text="SLA breaches detected",
        labelnames=("request_type", "breach_type"),
    )


def record_transition(entity: str, operation: str, outcome: str) -> None:
    """Increment ``lifecycle_transitions_total`` for one attempt."""
    get_lifecycle_transitions_total().labels(
        entity=entity, operation=operation, outcome=outcome
    ).inc()


@contextmanager
def observe_transition(entity: str, operation: str) -> Generator[None, None, None]:
    """Count one transition attempt; the outcome comes from the raised error code.

    Domain errors carry a ``code`` (``INVALID_TRANSITION``, ``NOT_FOUND``...)
    which becomes the lower-cased ``outcome`` label; other exceptions count
    as ``error``. The exception always propagates.
    """
    outcome = "success"
    try:
        yield
    except Exception as exc:
        code = getattr(exc, "code", None)
        outcome = code.lower() if isinstance(code, str) else "error"
        raise
    finally:
        with suppress(Exception):
            record_transition(entity, operation, outcome)
