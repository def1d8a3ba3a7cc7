# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe outcome and aggregate result models."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any, overload


class ProbeStatus(str, Enum):
    UP = "UP"
    DOWN = "DOWN"
    UNREACHABLE = "UNREACHABLE"
    TIMEOUT = "TIMEOUT"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ProbeOutcome:
    """Result of probing exactly one target."""

    url: str
    status: ProbeStatus
    latency_ms: int = 0
    http_status_code: int | None = None
    detail: str | None = None

    def __post_init__(self) -> None:
        if self.latency_ms < 0:
            object.__setattr__(self, "latency_ms", 0)

    @property
    def is_up(self) -> bool:
        return self.status == ProbeStatus.UP

    def to_dict(self) -> dict[str, Any]:
        """Wire representation; optional fields are omitted when absent."""
        data: dict[str, Any] = {"url": self.url, "status": self.status.value}
        if self.http_status_code is not None:
            data["httpStatusCode"] = self.http_status_code
        if self.detail is not None:
            data["detail"] = self.detail
        data["latencyMs"] = self.latency_ms
        return data


class AggregateResult:
    """
    Ordered, immutable sequence of ProbeOutcome.

    Index ``i`` always holds the outcome for input target ``i``.
    """

    __slots__ = ("_outcomes",)

    def __init__(self, outcomes: Iterable[ProbeOutcome] = ()):
        self._outcomes: tuple[ProbeOutcome, ...] = tuple(outcomes)

    def __len__(self) -> int:
        return len(self._outcomes)

    def __iter__(self) -> Iterator[ProbeOutcome]:
        return iter(self._outcomes)

    @overload
    def __getitem__(self, index: int) -> ProbeOutcome: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[ProbeOutcome, ...]: ...

    def __getitem__(self, index):
        return self._outcomes[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, AggregateResult):
            return self._outcomes == other._outcomes
        return NotImplemented

    def __repr__(self) -> str:
        return f"AggregateResult({list(self._outcomes)!r})"

    @property
    def outcomes(self) -> tuple[ProbeOutcome, ...]:
        return self._outcomes

    @property
    def all_up(self) -> bool:
        return all(outcome.is_up for outcome in self._outcomes)

    def counts(self) -> dict[str, int]:
        counter = Counter(outcome.status.value for outcome in self._outcomes)
        return {status.value: counter.get(status.value, 0) for status in ProbeStatus}

    def to_list(self) -> list[dict[str, Any]]:
        return [outcome.to_dict() for outcome in self._outcomes]


__all__ = ["AggregateResult", "ProbeOutcome", "ProbeStatus"]
