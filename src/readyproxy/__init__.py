# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
readyproxy package entrypoint.

readyproxy probes a configured list of downstream health endpoints concurrently
and returns one ordered, normalized result per target. HTTP behavior is
abstracted behind an injectable client interface, and domain objects are
modeled with typed dataclasses.
"""

from .aggregate import HealthAggregator, aggregate_health
from .config import HttpSettings, ProxySettings, load_http_settings, load_proxy_settings
from .errors import ConfigurationError, ReadyProxyError
from .http import (
    HttpClient,
    HttpRequest,
    HttpResponse,
    HttpxClient,
    StubHttpClient,
    create_default_http_client,
)
from .log import setup_logging
from .models import AggregateResult, ProbeOutcome, ProbeStatus, Target
from .probe import ProbeClient
from .runtime import ReadyProxy
from .version import __version__

__all__ = [
    "AggregateResult",
    "ConfigurationError",
    "HealthAggregator",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpSettings",
    "HttpxClient",
    "ProbeClient",
    "ProbeOutcome",
    "ProbeStatus",
    "ProxySettings",
    "ReadyProxy",
    "ReadyProxyError",
    "StubHttpClient",
    "Target",
    "aggregate_health",
    "create_default_http_client",
    "load_http_settings",
    "load_proxy_settings",
    "setup_logging",
    "__version__",
]
