# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""The seam between probing and the network."""

from __future__ import annotations

from typing import Protocol

from ..config import HttpSettings, load_http_settings
from .models import HttpRequest, HttpResponse


class HttpClient(Protocol):
    """
    Anything that can carry out a health check request.

    ``request`` should fold transport failures into ``HttpResponse(ok=False)``;
    the probe client still guards against implementations that raise.
    ``close`` releases pooled connections when the proxy shuts down.
    """

    def request(self, request: HttpRequest) -> HttpResponse: ...

    def close(self) -> None: ...


def create_default_http_client(settings: HttpSettings | None = None) -> HttpClient:
    """Build the shared httpx-backed client used for every outbound probe."""
    from .httpx_client import HttpxClient

    return HttpxClient(settings if settings is not None else load_http_settings())
