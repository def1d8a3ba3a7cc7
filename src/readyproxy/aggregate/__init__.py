# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Aggregator exports."""

from .engine import DEFAULT_MAX_IN_FLIGHT, HealthAggregator, ProbeFn, aggregate_health

__all__ = ["DEFAULT_MAX_IN_FLIGHT", "HealthAggregator", "ProbeFn", "aggregate_health"]
