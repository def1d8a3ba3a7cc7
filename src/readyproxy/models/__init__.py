# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclass exports for readyproxy."""

from .outcome import AggregateResult, ProbeOutcome, ProbeStatus
from .target import Target, parse_targets

__all__ = [
    "AggregateResult",
    "ProbeOutcome",
    "ProbeStatus",
    "Target",
    "parse_targets",
]
