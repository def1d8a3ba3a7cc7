# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Single-target health probe.

``ProbeClient.probe`` never raises: every transport failure is folded into the
returned ProbeOutcome's status.
"""

from __future__ import annotations

import logging
import time

from ..errors import ErrorCategory, categorize_exception, error_category_to_reason
from ..http.client import HttpClient
from ..http.models import HttpRequest, HttpResponse
from ..models.outcome import ProbeOutcome, ProbeStatus
from ..models.target import Target
from ..utils.text import truncate_text_bytes

logger = logging.getLogger(__name__)

DEFAULT_DETAIL_MAX_BYTES = 512


def is_success_status(status_code: int) -> bool:
    return 200 <= status_code < 300


def elapsed_ms(started: float) -> int:
    return max(0, int(round((time.monotonic() - started) * 1000)))


def timeout_detail(timeout: float | None) -> str:
    if timeout is None:
        return "No response received"
    return f"No response within {timeout:g}s"


class ProbeClient:
    """Issues one outbound health check per call and classifies the outcome."""

    def __init__(
        self,
        http_client: HttpClient,
        *,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        detail_max_bytes: int = DEFAULT_DETAIL_MAX_BYTES,
    ):
        self.http_client = http_client
        self.method = (method or "GET").upper()
        self.headers = dict(headers or {})
        self.detail_max_bytes = detail_max_bytes if detail_max_bytes > 0 else DEFAULT_DETAIL_MAX_BYTES

    def probe(self, target: Target, timeout: float | None) -> ProbeOutcome:
        request = HttpRequest(
            url=target.url,
            method=self.method,
            headers=dict(self.headers) or None,
            timeout=timeout,
        )
        started = time.monotonic()
        try:
            response = self.http_client.request(request)
        except Exception as exc:  # noqa: BLE001
            response = HttpResponse(
                ok=False,
                url=target.url,
                error_message=str(exc) or type(exc).__name__,
                error_type=type(exc).__name__,
                error_category=categorize_exception(exc),
            )
        outcome = self._classify(target, response, timeout, elapsed_ms(started))
        logger.debug("Probed %s: %s in %dms", target.url, outcome.status.value, outcome.latency_ms)
        return outcome

    __call__ = probe

    def _classify(self, target: Target, response: HttpResponse, timeout: float | None, latency_ms: int) -> ProbeOutcome:
        if response.ok and response.status_code is not None:
            status = ProbeStatus.UP if is_success_status(response.status_code) else ProbeStatus.DOWN
            return ProbeOutcome(
                url=target.url,
                status=status,
                http_status_code=response.status_code,
                detail=self._body_detail(response),
                latency_ms=latency_ms,
            )

        category = response.error_category or ErrorCategory.UNKNOWN_ERROR
        if category == ErrorCategory.TIMEOUT:
            return ProbeOutcome(
                url=target.url,
                status=ProbeStatus.TIMEOUT,
                detail=timeout_detail(timeout),
                latency_ms=latency_ms,
            )

        reason = error_category_to_reason(category)
        message = response.error_message or response.error_type or "no response"
        return ProbeOutcome(
            url=target.url,
            status=ProbeStatus.UNREACHABLE,
            detail=f"{reason}: {message}" if reason else message,
            latency_ms=latency_ms,
        )

    def _body_detail(self, response: HttpResponse) -> str | None:
        text = response.text
        if not text and response.content:
            text = response.content.decode("utf-8", errors="replace")
        text = text.strip()
        if not text:
            return None
        return truncate_text_bytes(text, self.detail_max_bytes)


__all__ = ["DEFAULT_DETAIL_MAX_BYTES", "ProbeClient", "elapsed_ms", "is_success_status", "timeout_detail"]
