# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Utility exports."""

from .text import truncate_strings, truncate_text_bytes

__all__ = ["truncate_strings", "truncate_text_bytes"]
