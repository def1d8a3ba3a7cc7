# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for readyproxy."""

import os
import re
from dataclasses import dataclass, field

from .errors import ConfigurationError
from .models.target import Target
from .version import __version__

DEFAULT_USER_AGENT = f"readyproxy/{__version__}"

_URL_LIST_SPLIT_RE = re.compile(r"[\s,]+")


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _optional_float_env(name: str, default: float | None) -> float | None:
    try:
        value = os.getenv(name)
        if value is None:
            return default
        parsed = float(value)
        return parsed if parsed > 0 else None
    except ValueError:
        return default


def split_url_list(raw: str | None) -> list[str]:
    """Split a comma/whitespace separated URL list, dropping empty entries."""
    if not raw:
        return []
    return [item for item in _URL_LIST_SPLIT_RE.split(raw.strip()) if item]


@dataclass
class HttpSettings:
    """HTTP client defaults."""

    timeout: float = 5.0
    user_agent: str = DEFAULT_USER_AGENT
    allow_redirects: bool = True
    verify_ssl: bool = True
    max_body_bytes: int = 64 * 1024

    @classmethod
    def from_env(cls) -> "HttpSettings":
        """Create settings from environment variables (evaluated at call time)."""
        max_body_bytes = _int_env("READYPROXY_HTTP_MAX_BODY_BYTES", cls.max_body_bytes)
        if max_body_bytes <= 0:
            max_body_bytes = cls.max_body_bytes
        timeout = _float_env("READYPROXY_HTTP_TIMEOUT", cls.timeout)
        if timeout <= 0:
            timeout = cls.timeout
        return cls(
            timeout=timeout,
            user_agent=os.getenv("READYPROXY_USER_AGENT", cls.user_agent),
            allow_redirects=_bool_env("READYPROXY_HTTP_REDIRECTS", cls.allow_redirects),
            verify_ssl=_bool_env("READYPROXY_HTTP_VERIFY_SSL", cls.verify_ssl),
            max_body_bytes=max_body_bytes,
        )


@dataclass
class ProxySettings:
    """Aggregation and endpoint defaults."""

    bulk_urls: list[str] = field(default_factory=list)
    readiness_url: str | None = None
    probe_method: str = "GET"
    overall_timeout: float | None = 15.0
    max_in_flight: int = 100
    detail_max_bytes: int = 512
    service_name: str = "readyproxy"
    host: str = "127.0.0.1"
    port: int = 9012

    @classmethod
    def from_env(cls) -> "ProxySettings":
        """Create settings from environment variables (evaluated at call time)."""
        max_in_flight = _int_env("READYPROXY_MAX_IN_FLIGHT", cls.max_in_flight)
        if max_in_flight <= 0:
            max_in_flight = cls.max_in_flight
        detail_max_bytes = _int_env("READYPROXY_DETAIL_MAX_BYTES", cls.detail_max_bytes)
        if detail_max_bytes <= 0:
            detail_max_bytes = cls.detail_max_bytes
        return cls(
            bulk_urls=split_url_list(os.getenv("READYPROXY_BULK_URLS")),
            readiness_url=(os.getenv("READYPROXY_READINESS_URL") or "").strip() or None,
            probe_method=(os.getenv("READYPROXY_PROBE_METHOD") or cls.probe_method).strip().upper(),
            overall_timeout=_optional_float_env("READYPROXY_OVERALL_TIMEOUT", cls.overall_timeout),
            max_in_flight=max_in_flight,
            detail_max_bytes=detail_max_bytes,
            service_name=os.getenv("READYPROXY_SERVICE_NAME", cls.service_name),
            host=os.getenv("READYPROXY_HOST", cls.host),
            port=_int_env("READYPROXY_PORT", cls.port),
        )

    def targets(self) -> list[Target]:
        """Validate the configured bulk URL list, failing once on the first malformed entry."""
        return [Target.parse(url) for url in self.bulk_urls]

    def readiness_target(self) -> Target:
        if not self.readiness_url:
            raise ConfigurationError("No readiness URL configured (set READYPROXY_READINESS_URL)")
        return Target.parse(self.readiness_url)


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()


def load_proxy_settings() -> ProxySettings:
    """Load aggregation/endpoint settings from environment with sensible defaults."""
    return ProxySettings.from_env()
