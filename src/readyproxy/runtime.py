# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level readyproxy facade shared by the HTTP service and the CLI."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from contextlib import suppress

from .aggregate.engine import HealthAggregator
from .config import HttpSettings, ProxySettings, load_http_settings, load_proxy_settings
from .http.client import HttpClient, create_default_http_client
from .models import AggregateResult, ProbeOutcome, ProbeStatus, Target
from .probe.client import ProbeClient

logger = logging.getLogger(__name__)

# Stands in for the URL of a readiness outcome when none is configured.
READINESS_URL_SETTING = "READYPROXY_READINESS_URL"


class ReadyProxy:
    """
    Convenience wrapper that wires one shared HTTP client into the probe client and aggregator.

    Bulk checks and single-target readiness checks go through the same ProbeClient, so
    there is exactly one place where transport failures are classified.
    """

    def __init__(
        self,
        http_client: HttpClient | None = None,
        *,
        http_settings: HttpSettings | None = None,
        settings: ProxySettings | None = None,
    ):
        self.http_settings = http_settings or load_http_settings()
        self.settings = settings or load_proxy_settings()
        self.http_client = http_client or create_default_http_client(self.http_settings)
        self.probe_client = ProbeClient(
            self.http_client,
            method=self.settings.probe_method,
            detail_max_bytes=self.settings.detail_max_bytes,
        )
        self.aggregator = HealthAggregator(self.probe_client.probe, max_in_flight=self.settings.max_in_flight)

    @property
    def per_probe_timeout(self) -> float:
        return self.http_settings.timeout

    def check_bulk(self, urls: Sequence[str | Target] | None = None) -> AggregateResult:
        """Aggregate the given URLs, or the configured bulk list when none are given."""
        targets = list(urls) if urls is not None else self.settings.targets()
        return self.aggregator.aggregate_health(
            targets,
            self.per_probe_timeout,
            self.settings.overall_timeout,
        )

    def verify_readiness(self, url: str | Target | None = None) -> ProbeOutcome:
        """Probe one target (the configured readiness URL by default)."""
        if url is None and not self.settings.readiness_url:
            logger.warning("Readiness check requested but no readiness URL is configured")
            return ProbeOutcome(
                url=READINESS_URL_SETTING,
                status=ProbeStatus.UNREACHABLE,
                detail="No readiness URL configured",
            )
        target = Target.parse(url) if url is not None else self.settings.readiness_target()
        return self.aggregator.aggregate_health(
            [target],
            self.per_probe_timeout,
            self.settings.overall_timeout,
        )[0]

    def self_check(self) -> dict[str, str]:
        """Static liveness payload; makes no outbound calls."""
        return {"status": ProbeStatus.UP.value, "service": self.settings.service_name}

    def close(self) -> None:
        with suppress(Exception):
            if hasattr(self.http_client, "close"):
                self.http_client.close()

    def __enter__(self) -> ReadyProxy:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()


__all__ = ["READINESS_URL_SETTING", "ReadyProxy"]
