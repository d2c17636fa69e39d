# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Caller-facing option and result types for the clients.

These dataclasses are what applications build; the clients validate them
and translate them into the wire records of ``sendlix.models``.
"""

from __future__ import annotations

import mimetypes
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from os import PathLike
from pathlib import Path

from sendlix.addresses import AddressLike
from sendlix.models import AdditionalInfos, AttachmentData, Timestamp


@dataclass
class Attachment:
    """Attachment fetched by the service from a URL.

    Attributes:
        content_url: URL the service downloads the content from.
        filename: Name shown to recipients.
        content_type: Optional MIME type.
    """

    content_url: str
    filename: str
    content_type: str | None = None


@dataclass
class AdditionalEmailOptions:
    """Extra settings accepted by the send operations.

    Attributes:
        attachments: Attachments fetched by URL.
        category: Category used for reporting on the service side.
        send_at: Scheduled send time. Naive datetimes are taken as local time.
    """

    attachments: list[Attachment] = field(default_factory=list)
    category: str | None = None
    send_at: datetime | None = None

    def to_wire(self) -> AdditionalInfos:
        attachments = [
            AttachmentData.build(content_url=a.content_url, filename=a.filename, type=a.content_type)
            for a in self.attachments
        ]
        send_at = None
        if self.send_at is not None:
            send_at = Timestamp.build(seconds=int(self.send_at.timestamp()))
        return AdditionalInfos.build(
            attachments=attachments or None,
            category=self.category,
            send_at=send_at,
        )


@dataclass
class InlineImage:
    """Image embedded in an HTML body and referenced as ``cid:<content_id>``.

    Attributes:
        content_id: Identifier used in ``<img src="cid:...">``.
        data: Raw image bytes.
        content_type: MIME type of the image.
    """

    content_id: str
    data: bytes
    content_type: str = "application/octet-stream"

    @classmethod
    def from_file(
        cls,
        path: str | PathLike[str],
        content_id: str | None = None,
        content_type: str | None = None,
    ) -> InlineImage:
        """Load an image from disk; the content id defaults to the file name."""
        file_path = Path(path)
        guessed, _ = mimetypes.guess_type(file_path.name)
        return cls(
            content_id=content_id or file_path.name,
            data=file_path.read_bytes(),
            content_type=content_type or guessed or "application/octet-stream",
        )


@dataclass
class MailOptions:
    """A single email for ``EmailClient.send_email``.

    At least one of ``html`` and ``text`` is required. With wire version v1
    only one of them may be set and ``images`` is not available.

    Attributes:
        sender: From address.
        to: Recipients (at least one).
        subject: Subject line.
        html: HTML body.
        text: Plain text body.
        cc: Carbon copy recipients.
        bcc: Blind carbon copy recipients.
        reply_to: Reply-To address.
        tracking: Enable link tracking (HTML only).
        substitutions: Template placeholders replaced by the service.
        images: Inline images (v2 only).
    """

    sender: AddressLike | None = None
    to: Sequence[AddressLike] | AddressLike = field(default_factory=list)
    subject: str = ""
    html: str | None = None
    text: str | None = None
    cc: Sequence[AddressLike] | None = None
    bcc: Sequence[AddressLike] | None = None
    reply_to: AddressLike | None = None
    tracking: bool = False
    substitutions: Mapping[str, str] | None = None
    images: list[InlineImage] | None = None


@dataclass
class GroupMailOptions:
    """An email for every member of a group, see ``EmailClient.send_group_email``.

    Attributes:
        sender: From address.
        group_id: Recipient group.
        subject: Subject line.
        html: HTML body.
        text: Plain text body.
        tracking: Enable link tracking (HTML only).
        category: Category used for reporting on the service side.
    """

    sender: AddressLike | None = None
    group_id: str = ""
    subject: str = ""
    html: str | None = None
    text: str | None = None
    tracking: bool = False
    category: str | None = None


@dataclass
class GroupRecipient:
    """A group member to insert, with its own placeholder values.

    Attributes:
        address: The member address.
        substitutions: Placeholder values for this member.
    """

    address: AddressLike
    substitutions: Mapping[str, str] | None = None


@dataclass
class SendEmailResponse:
    """Result of a send operation.

    Attributes:
        message_list: Identifiers of the messages accepted by the service.
        emails_left: Remaining email credits (wire version v1 only).
    """

    message_list: list[str] = field(default_factory=list)
    emails_left: int | None = None
