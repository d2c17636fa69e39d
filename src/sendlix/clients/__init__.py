# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Service clients: email sending and group management."""

from sendlix.clients.base import Client
from sendlix.clients.email import EmailClient
from sendlix.clients.group import GroupClient

__all__ = ["Client", "EmailClient", "GroupClient"]
