# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Text helpers shared by the probe client and the CLI."""

from __future__ import annotations

from typing import Any

TRUNCATION_SUFFIX = "...[truncated]"


def truncate_text_bytes(text: str, max_bytes: int) -> str:
    """Trim ``text`` to at most ``max_bytes`` UTF-8 bytes, marking the cut with a suffix."""
    raw = text.encode("utf-8")
    if len(raw) <= max_bytes:
        return text
    suffix_bytes = TRUNCATION_SUFFIX.encode("utf-8")
    keep = max_bytes - len(suffix_bytes)
    if keep <= 0:
        return suffix_bytes[:max_bytes].decode("utf-8", errors="ignore")
    prefix = raw[:keep].decode("utf-8", errors="ignore")
    return prefix + TRUNCATION_SUFFIX


def truncate_strings(value: Any, *, max_bytes: int) -> Any:
    """Recursively truncate strings inside JSON-like dicts/lists."""
    if isinstance(value, str):
        return truncate_text_bytes(value, max_bytes)
    if isinstance(value, dict):
        return {k: truncate_strings(v, max_bytes=max_bytes) for k, v in value.items()}
    if isinstance(value, list):
        return [truncate_strings(v, max_bytes=max_bytes) for v in value]
    return value


__all__ = ["TRUNCATION_SUFFIX", "truncate_strings", "truncate_text_bytes"]
