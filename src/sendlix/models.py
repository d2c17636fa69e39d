# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Pydantic models for the Sendlix wire records.

Requests are built from these models and serialized with ``to_wire()`` into
JSON-ready dictionaries using the service's camelCase field names. Responses
are parsed with ``model_validate()`` and ignore unknown fields, so additions
on the server side never break the client.

Two request schemas coexist:

- v1 (``MailData``, ``GroupMailData``, ``InsertEmailToGroupRequest``): one
  content body typed by ``MailContentType``.
- v2 (``MailDataV2``, ``GroupMailDataV2``, ``InsertEmailToGroupRequestV2``):
  separate html/text bodies, inline images and per-recipient substitutions.
"""

from __future__ import annotations

import base64
from enum import Enum
from typing import Annotated, Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer

from sendlix.errors import InvalidContent

WireModelT = TypeVar("WireModelT", bound="WireModel")


def _b64(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


class WireModel(BaseModel):
    """Base class for request records."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    @classmethod
    def build(cls: type[WireModelT], **fields: Any) -> WireModelT:
        """Create a record from caller-supplied values.

        Raises:
            InvalidContent: If a value has the wrong type for its field.
        """
        try:
            return cls(**fields)
        except ValidationError as exc:
            error = exc.errors()[0]
            where = ".".join(str(part) for part in error["loc"]) or cls.__name__
            raise InvalidContent(f"Invalid value for '{where}': {error['msg']}") from exc

    def to_wire(self) -> dict[str, Any]:
        """Serialize to a JSON-ready dict with wire field names, omitting unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ResponseModel(BaseModel):
    """Base class for response records."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# --- Auth ---


class ApiKeyData(WireModel):
    secret: str
    key_id: Annotated[int, Field(alias="keyID")]


class AuthRequest(WireModel):
    api_key: Annotated[ApiKeyData, Field(alias="apiKey")]


class Timestamp(WireModel):
    """Seconds value; used both as an absolute timestamp and as a duration."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    seconds: int = 0


class AuthResponse(ResponseModel):
    token: str
    expires: Timestamp


# --- Shared email records ---


class EmailData(WireModel):
    email: str
    name: str | None = None


class AttachmentData(WireModel):
    content_url: Annotated[str, Field(alias="contentUrl")]
    filename: str
    type: str | None = None


class AdditionalInfos(WireModel):
    attachments: list[AttachmentData] | None = None
    category: str | None = None
    send_at: Annotated[Timestamp | None, Field(default=None, alias="sendAt")]


class MailContentType(str, Enum):
    """Content body type of a v1 message."""

    HTML = "HTML"
    TEXT = "TEXT"


class MailContent(WireModel):
    value: str
    type: MailContentType
    tracking: bool = False


# --- v1 requests ---


class MailData(WireModel):
    sender: Annotated[EmailData, Field(alias="from")]
    to: list[EmailData]
    cc: list[EmailData] | None = None
    bcc: list[EmailData] | None = None
    reply_to: Annotated[EmailData | None, Field(default=None, alias="replyTo")]
    subject: str
    content: MailContent
    substitutions: dict[str, str] | None = None
    additional_infos: Annotated[AdditionalInfos | None, Field(default=None, alias="additionalInfos")]


class GroupMailData(WireModel):
    sender: Annotated[EmailData, Field(alias="from")]
    group_id: Annotated[str, Field(alias="groupId")]
    subject: str
    content: MailContent
    category: str | None = None


class InsertEmailToGroupRequest(WireModel):
    group_id: Annotated[str, Field(alias="groupId")]
    emails: list[EmailData]
    substitutions: dict[str, str] | None = None


# --- v2 requests ---


class InlineImageData(WireModel):
    cid: str
    content_type: Annotated[str, Field(alias="contentType")]
    data: bytes

    @field_serializer("data")
    def _serialize_data(self, value: bytes) -> str:
        return _b64(value)


class MailDataV2(WireModel):
    sender: Annotated[EmailData, Field(alias="from")]
    to: list[EmailData]
    cc: list[EmailData] | None = None
    bcc: list[EmailData] | None = None
    reply_to: Annotated[EmailData | None, Field(default=None, alias="replyTo")]
    subject: str
    html: str | None = None
    text: str | None = None
    tracking: bool = False
    images: list[InlineImageData] | None = None
    substitutions: dict[str, str] | None = None
    additional_infos: Annotated[AdditionalInfos | None, Field(default=None, alias="additionalInfos")]


class GroupMailDataV2(WireModel):
    sender: Annotated[EmailData, Field(alias="from")]
    group_id: Annotated[str, Field(alias="groupId")]
    subject: str
    html: str | None = None
    text: str | None = None
    tracking: bool = False
    category: str | None = None


class FailureHandling(str, Enum):
    """What the server does when one entry of a group insert is invalid.

    Attributes:
        ABORT: Reject the whole batch.
        SKIP: Insert the valid entries and skip the invalid ones.
    """

    ABORT = "ABORT"
    SKIP = "SKIP"


class GroupEntryData(WireModel):
    email: EmailData
    substitutions: dict[str, str] | None = None


class InsertEmailToGroupRequestV2(WireModel):
    group_id: Annotated[str, Field(alias="groupId")]
    entries: list[GroupEntryData]
    on_failure: Annotated[FailureHandling | None, Field(default=None, alias="onFailure")]


# --- Version-independent requests ---


class EmlMail(WireModel):
    mail: bytes
    additional_infos: Annotated[AdditionalInfos | None, Field(default=None, alias="additionalInfos")]

    @field_serializer("mail")
    def _serialize_mail(self, value: bytes) -> str:
        return _b64(value)


class RemoveEmailFromGroupRequest(WireModel):
    group_id: Annotated[str, Field(alias="groupId")]
    email: str


class CheckEmailInGroupRequest(WireModel):
    group_id: Annotated[str, Field(alias="groupId")]
    email: str


# --- Responses ---


class SendEmailResponseData(ResponseModel):
    message: list[str] | None = None
    emails_left: Annotated[int | None, Field(default=None, alias="emailsLeft")]


class GroupResponseData(ResponseModel):
    success: bool = False
    message: str | None = None


class CheckEmailInGroupResponseData(ResponseModel):
    exists: bool | None = None
