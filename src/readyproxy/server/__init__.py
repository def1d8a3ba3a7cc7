# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP service exports."""

from .app import create_app, create_router

__all__ = ["create_app", "create_router"]
