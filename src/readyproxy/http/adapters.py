# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-process HttpClient implementations."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from ..errors import ErrorCategory
from .client import HttpClient
from .models import HttpRequest, HttpResponse

StubResponder = Callable[[HttpRequest], HttpResponse]


class StubHttpClient(HttpClient):
    """
    Deterministic, programmable HttpClient for tests and dry runs.

    Responses are registered per URL, either as a fixed ``HttpResponse`` or a
    callable receiving the request. An optional ``delay`` (seconds) simulates
    network latency for that URL. Safe to call from several probe threads.
    """

    def __init__(self, responses: dict[str, HttpResponse | StubResponder] | None = None):
        self._responses: dict[str, HttpResponse | StubResponder] = dict(responses or {})
        self._delays: dict[str, float] = {}
        self._lock = threading.Lock()
        self.requests: list[HttpRequest] = []
        self.closed = False

    def add(self, url: str, response: HttpResponse | StubResponder, *, delay: float = 0.0) -> None:
        self._responses[url] = response
        if delay > 0:
            self._delays[url] = delay

    def request(self, request: HttpRequest) -> HttpResponse:
        with self._lock:
            self.requests.append(request)
        delay = self._delays.get(request.url, 0.0)
        if delay:
            time.sleep(delay)
        responder = self._responses.get(request.url)
        if responder is None:
            return HttpResponse(
                ok=False,
                url=request.url,
                error_message="No stubbed response configured",
                error_type="ConnectError",
                error_category=ErrorCategory.CONNECTION_ERROR,
            )
        if callable(responder):
            return responder(request)
        return responder

    def close(self) -> None:
        self.closed = True
