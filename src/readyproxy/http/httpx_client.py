# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed HttpClient implementation."""

from __future__ import annotations

import logging
import time

import httpx

from ..config import HttpSettings, load_http_settings
from ..errors import categorize_exception
from .client import HttpClient
from .models import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)


class HttpxClient(HttpClient):
    """
    Synchronous httpx client wrapper.

    A single ``httpx.Client`` (and its connection pool) is shared by every probe
    thread; httpx clients are safe to use concurrently.

    httpx applies ``timeout`` to each phase (connect, read, write) separately, so
    the whole exchange is additionally held to a wall-clock deadline of ``timeout``
    seconds from dispatch. A response whose body is still arriving past the
    deadline is abandoned and reported as a timeout.
    """

    def __init__(self, settings: HttpSettings | None = None, client: httpx.Client | None = None):
        self.settings = settings or load_http_settings()
        self._client = client or httpx.Client(
            follow_redirects=self.settings.allow_redirects,
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
        )

    def request(self, request: HttpRequest) -> HttpResponse:
        headers = dict(request.headers or {})
        headers.setdefault("User-Agent", self.settings.user_agent)

        try:
            max_body_bytes = self.settings.max_body_bytes
            if max_body_bytes <= 0:
                max_body_bytes = 64 * 1024

            timeout = request.timeout if request.timeout is not None else self.settings.timeout
            follow_redirects = request.allow_redirects if request.allow_redirects is not None else self.settings.allow_redirects
            deadline = time.monotonic() + timeout if timeout is not None else None

            with self._client.stream(
                request.method,
                request.url,
                headers=headers,
                timeout=timeout,
                follow_redirects=follow_redirects,
            ) as resp:
                _check_deadline(deadline, timeout, resp.request)
                content = bytearray()
                for chunk in resp.iter_bytes():
                    _check_deadline(deadline, timeout, resp.request)
                    if not chunk:
                        continue
                    remaining = max_body_bytes - len(content)
                    if len(chunk) >= remaining:
                        content.extend(chunk[:remaining])
                        logger.debug("Body of %s capped at %d bytes", request.url, max_body_bytes)
                        break
                    content.extend(chunk)

                encoding = resp.encoding or "utf-8"
                try:
                    text = bytes(content).decode(encoding, errors="replace")
                except LookupError:
                    text = bytes(content).decode("utf-8", errors="replace")

            return HttpResponse(
                ok=True,
                status_code=resp.status_code,
                text=text,
                content=bytes(content),
                url=str(resp.url),
            )
        except Exception as exc:  # noqa: BLE001
            category = categorize_exception(exc)
            logger.debug("Request to %s failed (%s): %s", request.url, category.value, exc)
            return HttpResponse(
                ok=False,
                url=request.url,
                error_message=str(exc) or type(exc).__name__,
                error_type=type(exc).__name__,
                error_category=category,
            )

    def close(self) -> None:
        self._client.close()


def _check_deadline(deadline: float | None, timeout: float | None, request: httpx.Request) -> None:
    if deadline is not None and time.monotonic() > deadline:
        raise httpx.ReadTimeout(f"Response not complete within {timeout:g}s", request=request)
