# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe target model."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from ..errors import ConfigurationError

_ALLOWED_SCHEMES = frozenset({"http", "https"})


@dataclass(frozen=True)
class Target:
    """A single endpoint to probe."""

    url: str

    @classmethod
    def parse(cls, url: object) -> Target:
        """Validate ``url`` as an absolute http(s) URL and wrap it."""
        if isinstance(url, Target):
            return url
        if not isinstance(url, str):
            raise ConfigurationError(f"Target URL must be a string, got {type(url).__name__}")
        if not url.strip():
            raise ConfigurationError("Target URL must not be empty")
        if url != url.strip():
            raise ConfigurationError(f"Malformed target URL {url!r}: surrounding whitespace")
        try:
            parts = urlsplit(url)
            # Accessing .port validates it.
            parts.port  # noqa: B018
        except ValueError as exc:
            raise ConfigurationError(f"Malformed target URL {url!r}: {exc}") from exc
        if parts.scheme.lower() not in _ALLOWED_SCHEMES:
            raise ConfigurationError(f"Malformed target URL {url!r}: scheme must be http or https")
        if not parts.hostname:
            raise ConfigurationError(f"Malformed target URL {url!r}: missing host")
        return cls(url=url)

    def __str__(self) -> str:
        return self.url


def parse_targets(urls: object) -> list[Target]:
    """Validate an ordered sequence of URLs/Targets; the first malformed entry raises."""
    if isinstance(urls, (str, bytes)):
        raise ConfigurationError("Targets must be a sequence of URLs, not a single string")
    return [Target.parse(url) for url in urls]  # type: ignore[union-attr]


__all__ = ["Target", "parse_targets"]
