# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe client exports."""

from .client import ProbeClient, is_success_status

__all__ = ["ProbeClient", "is_success_status"]
