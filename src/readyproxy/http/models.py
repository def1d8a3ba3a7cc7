# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models used by the probe client."""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import ErrorCategory

Headers = dict[str, str]


@dataclass
class HttpRequest:
    """One outbound health check as seen by an HttpClient."""

    url: str
    method: str = "GET"
    headers: Headers | None = None
    timeout: float | None = None
    allow_redirects: bool | None = None


@dataclass
class HttpResponse:
    """
    Normalized HTTP response.

    ``ok`` means a response was received at all; the status code decides health.
    Transport failures carry ``ok=False``, no status code, and the error fields.
    ``content`` holds at most ``HttpSettings.max_body_bytes`` of the body.
    """

    ok: bool
    status_code: int | None = None
    text: str = ""
    content: bytes = b""
    url: str | None = None
    error_message: str | None = None
    error_type: str | None = None
    error_category: ErrorCategory | None = None
