# src/counsel_core/__init__.py
# Copyright (c) Counsel Core.
# SPDX-License-Identifier: MIT
"""Counsel Core.

Lifecycle, SLA and specialization-matching core for a legal-services back
office. Layers follow the usual clean-architecture split: ``domain`` holds
pure entities and services, ``application`` holds use cases and the unit of
work contract, ``adapters`` and ``infrastructure`` hold SQLAlchemy, logging
and metrics wiring.
"""

__version__ = "0.1.0"
