# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Client for the Sendlix email service.

``send_email`` and ``send_group_email`` validate their input and build the
wire request as soon as they are called: validation errors are raised
right there, before any network I/O. They return an awaitable that performs
the remote call, so remote errors only surface when it is awaited.

Example:
    Sending an HTML email::

        async with EmailClient("my-secret.42") as client:
            result = await client.send_email(MailOptions(
                sender=EmailAddress("sender@example.com", "Sender Name"),
                to=["recipient@example.com"],
                subject="Test Email",
                html="<h1>Hello World!</h1>",
            ))
            print(result.message_list)
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from os import PathLike
from pathlib import Path
from typing import Union

from sendlix.addresses import to_email_data, to_email_data_list
from sendlix.clients.base import Client
from sendlix.config import WireVersion
from sendlix.errors import InvalidContent, MissingRequiredField
from sendlix.logger import get_logger
from sendlix.models import (
    EmlMail,
    GroupMailData,
    GroupMailDataV2,
    InlineImageData,
    MailContent,
    MailContentType,
    MailData,
    MailDataV2,
    SendEmailResponseData,
    WireModel,
)
from sendlix.options import (
    AdditionalEmailOptions,
    GroupMailOptions,
    MailOptions,
    SendEmailResponse,
)

EmlSource = Union[bytes, bytearray, memoryview, str, PathLike]

logger = get_logger("sendlix.clients.email")


def _check_content(html: str | None, text: str | None, tracking: bool, version: WireVersion) -> None:
    if not html and not text:
        raise MissingRequiredField("content", "Missing required fields: html or text content is required.")
    if tracking and not html:
        raise InvalidContent("Tracking is only available for HTML content.")
    if version is WireVersion.V1 and html and text:
        raise InvalidContent("Wire version v1 accepts a single content body: pass either html or text.")


def _v1_content(html: str | None, text: str | None, tracking: bool) -> MailContent:
    if html:
        return MailContent.build(value=html, type=MailContentType.HTML, tracking=tracking)
    return MailContent.build(value=text, type=MailContentType.TEXT, tracking=False)


def build_mail_data(
    options: MailOptions,
    additional: AdditionalEmailOptions | None = None,
    version: WireVersion = WireVersion.V1,
) -> WireModel:
    """Validate ``options`` and build the SendEmail request for ``version``.

    Checks run in order and stop at the first failure: sender, recipients,
    subject, content, then each address field.

    Raises:
        MissingRequiredField: If sender, recipients, subject or content is missing.
        InvalidContent: If tracking is requested without HTML, or the options
            use a feature the wire version lacks, or a value
            has the wrong type.
        InvalidAddressFormat: If any address is malformed.
    """
    if not options.sender:
        raise MissingRequiredField("from")
    if not options.to:
        raise MissingRequiredField("to")
    if not options.subject:
        raise MissingRequiredField("subject")
    _check_content(options.html, options.text, options.tracking, version)
    if version is WireVersion.V1 and options.images:
        raise InvalidContent("Inline images require wire version v2.")

    fields = dict(
        sender=to_email_data(options.sender, "from"),
        to=to_email_data_list(options.to, "to", required=True),
        cc=to_email_data_list(options.cc, "cc"),
        bcc=to_email_data_list(options.bcc, "bcc"),
        reply_to=to_email_data(options.reply_to, "reply_to") if options.reply_to else None,
        subject=options.subject,
        substitutions=dict(options.substitutions) if options.substitutions else None,
        additional_infos=additional.to_wire() if additional else None,
    )
    if version is WireVersion.V1:
        return MailData.build(content=_v1_content(options.html, options.text, options.tracking), **fields)

    images = [
        InlineImageData.build(cid=image.content_id, content_type=image.content_type, data=bytes(image.data))
        for image in options.images or []
    ]
    return MailDataV2.build(
        html=options.html or None,
        text=options.text or None,
        tracking=options.tracking,
        images=images or None,
        **fields,
    )


def build_group_mail_data(options: GroupMailOptions, version: WireVersion = WireVersion.V1) -> WireModel:
    """Validate ``options`` and build the SendGroupEmail request for ``version``."""
    if not options.sender:
        raise MissingRequiredField("from")
    if not options.group_id:
        raise MissingRequiredField("group_id")
    if not options.subject:
        raise MissingRequiredField("subject")
    _check_content(options.html, options.text, options.tracking, version)

    sender = to_email_data(options.sender, "from")
    if version is WireVersion.V1:
        return GroupMailData.build(
            sender=sender,
            group_id=options.group_id,
            subject=options.subject,
            content=_v1_content(options.html, options.text, options.tracking),
            category=options.category,
        )
    return GroupMailDataV2.build(
        sender=sender,
        group_id=options.group_id,
        subject=options.subject,
        html=options.html or None,
        text=options.text or None,
        tracking=options.tracking,
        category=options.category,
    )


async def read_eml(eml: EmlSource) -> bytes:
    """Return raw message bytes, reading the file when ``eml`` is a path."""
    if isinstance(eml, (bytes, bytearray, memoryview)):
        return bytes(eml)
    return await asyncio.to_thread(Path(eml).read_bytes)


class EmailClient(Client):
    """Client for sending emails through the Sendlix email service."""

    SERVICE = "sendlix.api.v1.EmailService"

    def send_email(
        self,
        options: MailOptions,
        additional: AdditionalEmailOptions | None = None,
    ) -> Awaitable[SendEmailResponse]:
        """Send one email.

        Args:
            options: Sender, recipients, subject and content.
            additional: Attachments, category and scheduling.

        Returns:
            Awaitable resolving to the accepted message ids (and, with wire
            version v1, the remaining email credits).

        Raises:
            MissingRequiredField: Raised immediately when a required field is missing.
            InvalidAddressFormat: Raised immediately for a malformed address.
            InvalidContent: Raised immediately for unsupported content options.
        """
        request = build_mail_data(options, additional, self.wire_version)
        return self._send("SendEmail", request)

    async def send_eml_email(
        self,
        eml: EmlSource,
        additional: AdditionalEmailOptions | None = None,
    ) -> SendEmailResponse:
        """Send a pre-formatted message in raw EML format.

        Args:
            eml: Raw message bytes, or a path to an ``.eml`` file.
            additional: Attachments, category and scheduling.

        Raises:
            OSError: If the file cannot be read.
        """
        data = await read_eml(eml)
        request = EmlMail.build(mail=data, additional_infos=additional.to_wire() if additional else None)
        return await self._send("SendEmlEmail", request)

    def send_group_email(self, options: GroupMailOptions) -> Awaitable[SendEmailResponse]:
        """Send an email to every member of a recipient group.

        Validation errors are raised immediately, as for ``send_email``.
        """
        request = build_group_mail_data(options, self.wire_version)
        return self._send("SendGroupEmail", request)

    async def _send(self, name: str, request: WireModel) -> SendEmailResponse:
        data = await self._call(name, request)
        response = self._parse(SendEmailResponseData, data, name)
        logger.info("%s accepted %d message(s)", name, len(response.message or []))
        return SendEmailResponse(
            message_list=list(response.message or []),
            emails_left=response.emails_left if self.wire_version is WireVersion.V1 else None,
        )
