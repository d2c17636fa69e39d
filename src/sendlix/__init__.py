# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Python SDK for the Sendlix email delivery service.

Features:
    - Bearer token exchange with an in-process cache and single-flight refresh
    - Transactional email (HTML or text, attachments, scheduling)
    - Raw EML sending from bytes or files
    - Group email and group membership management
    - Two request schemas (v1 and v2) selectable per client

Example::

    from sendlix import EmailClient, MailOptions

    async with EmailClient("my-secret.42") as client:
        result = await client.send_email(MailOptions(
            sender="sender@example.com",
            to=["recipient@example.com"],
            subject="Hello",
            text="Hello World!",
        ))
"""

from sendlix.addresses import EmailAddress
from sendlix.auth import ApiKey, Auth, AuthProvider
from sendlix.clients import EmailClient, GroupClient
from sendlix.config import ClientConfig, WireVersion, load_client_config
from sendlix.errors import (
    AuthExchangeFailed,
    InvalidAddressFormat,
    InvalidContent,
    InvalidFormat,
    MissingRequiredField,
    OperationRejected,
    RemoteCallFailed,
    SendlixError,
)
from sendlix.models import FailureHandling
from sendlix.options import (
    AdditionalEmailOptions,
    Attachment,
    GroupMailOptions,
    GroupRecipient,
    InlineImage,
    MailOptions,
    SendEmailResponse,
)

__version__ = "1.0.0"

__all__ = [
    "AdditionalEmailOptions",
    "ApiKey",
    "Attachment",
    "Auth",
    "AuthExchangeFailed",
    "AuthProvider",
    "ClientConfig",
    "EmailAddress",
    "EmailClient",
    "FailureHandling",
    "GroupClient",
    "GroupMailOptions",
    "GroupRecipient",
    "InlineImage",
    "InvalidAddressFormat",
    "InvalidContent",
    "InvalidFormat",
    "MailOptions",
    "MissingRequiredField",
    "OperationRejected",
    "RemoteCallFailed",
    "SendEmailResponse",
    "SendlixError",
    "WireVersion",
    "load_client_config",
]
