# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Concurrent fan-out of health probes.

Every target gets its own task and its own pre-allocated result slot. Tasks never
share state beyond their slot, so completion order does not matter: the result
is read back by input index once all tasks finish or the overall budget runs out.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import replace

from ..errors import ConfigurationError
from ..models.outcome import AggregateResult, ProbeOutcome, ProbeStatus
from ..models.target import Target, parse_targets
from ..probe.client import elapsed_ms

logger = logging.getLogger(__name__)

ProbeFn = Callable[[Target, float | None], ProbeOutcome]

DEFAULT_MAX_IN_FLIGHT = 100


def abandoned_detail(overall_timeout: float | None) -> str:
    if overall_timeout is None:
        return "Probe did not complete"
    return f"Abandoned after overall timeout of {overall_timeout:g}s"


class HealthAggregator:
    """Probes many targets concurrently and returns an index-aligned AggregateResult."""

    def __init__(self, probe: ProbeFn, *, max_in_flight: int = DEFAULT_MAX_IN_FLIGHT):
        if max_in_flight <= 0:
            raise ConfigurationError(f"max_in_flight must be positive, got {max_in_flight}")
        self.probe = probe
        self.max_in_flight = max_in_flight

    def aggregate_health(
        self,
        targets: Sequence[Target | str],
        per_probe_timeout: float | None,
        overall_timeout: float | None = None,
    ) -> AggregateResult:
        # A malformed URL fails the whole call before any probe is sent.
        validated = parse_targets(targets)
        if not validated:
            return AggregateResult()

        slots: list[ProbeOutcome | None] = [None] * len(validated)
        work: queue.SimpleQueue[tuple[int, Target]] = queue.SimpleQueue()
        for item in enumerate(validated):
            work.put(item)
        remaining = len(validated)
        finished = threading.Condition()
        stop = threading.Event()
        started = time.monotonic()

        def worker() -> None:
            nonlocal remaining
            while not stop.is_set():
                try:
                    index, target = work.get_nowait()
                except queue.Empty:
                    return
                outcome = self._probe_isolated(target, per_probe_timeout)
                with finished:
                    slots[index] = outcome
                    remaining -= 1
                    if remaining == 0:
                        finished.notify_all()

        # Daemon workers: an abandoned probe must not hold up interpreter exit.
        for number in range(min(len(validated), self.max_in_flight)):
            threading.Thread(target=worker, name=f"readyproxy-probe-{number}", daemon=True).start()

        with finished:
            finished.wait_for(lambda: remaining == 0, timeout=overall_timeout)
            # Running probes are abandoned, queued ones never start.
            stop.set()
            snapshot = list(slots)
        abandoned_latency = elapsed_ms(started)
        outcomes: list[ProbeOutcome] = []
        abandoned = 0
        for target, outcome in zip(validated, snapshot):
            if outcome is None:
                abandoned += 1
                outcome = ProbeOutcome(
                    url=target.url,
                    status=ProbeStatus.TIMEOUT,
                    detail=abandoned_detail(overall_timeout),
                    latency_ms=abandoned_latency,
                )
            outcomes.append(outcome)

        result = AggregateResult(outcomes)
        if abandoned:
            logger.warning(
                "Overall timeout of %ss reached; %d of %d probes abandoned",
                overall_timeout,
                abandoned,
                len(validated),
            )
        logger.info(
            "Aggregated %d targets in %dms: %s",
            len(result),
            elapsed_ms(started),
            ", ".join(f"{status}={count}" for status, count in result.counts().items() if count),
        )
        return result

    def _probe_isolated(self, target: Target, timeout: float | None) -> ProbeOutcome:
        started = time.monotonic()
        try:
            outcome = self.probe(target, timeout)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Probe for %s raised unexpectedly", target.url)
            return ProbeOutcome(
                url=target.url,
                status=ProbeStatus.UNREACHABLE,
                detail=f"Probe failed: {exc}" if str(exc) else f"Probe failed: {type(exc).__name__}",
                latency_ms=elapsed_ms(started),
            )
        if outcome.url != target.url:
            # Keep output zippable with input even if a custom probe rewrites the URL.
            outcome = replace(outcome, url=target.url)
        return outcome


def aggregate_health(
    targets: Sequence[Target | str],
    per_probe_timeout: float | None,
    overall_timeout: float | None,
    *,
    probe: ProbeFn,
    max_in_flight: int = DEFAULT_MAX_IN_FLIGHT,
) -> AggregateResult:
    """Functional entry point around HealthAggregator."""
    return HealthAggregator(probe, max_in_flight=max_in_flight).aggregate_health(
        targets,
        per_probe_timeout,
        overall_timeout,
    )


__all__ = ["DEFAULT_MAX_IN_FLIGHT", "HealthAggregator", "ProbeFn", "abandoned_detail", "aggregate_health"]
