# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Client for managing recipient groups.

Group members are addressed by email. Insertions are batched: one call
can add many members, each optionally carrying its own placeholder values
(wire version v2).

Example:
    Adding and checking a member::

        async with GroupClient("my-secret.42") as groups:
            await groups.insert_email_into_group("newsletter", "info@example.com", {"name": "John"})
            assert await groups.contains_email_in_group("newsletter", "info@example.com")
"""

from __future__ import annotations

from collections.abc import Awaitable, Mapping, Sequence
from typing import Union

from sendlix.addresses import AddressLike, EmailAddress, split_address
from sendlix.clients.base import Client
from sendlix.config import WireVersion
from sendlix.errors import InvalidContent, MissingRequiredField, OperationRejected
from sendlix.logger import get_logger
from sendlix.models import (
    CheckEmailInGroupRequest,
    CheckEmailInGroupResponseData,
    EmailData,
    FailureHandling,
    GroupEntryData,
    GroupResponseData,
    InsertEmailToGroupRequest,
    InsertEmailToGroupRequestV2,
    RemoveEmailFromGroupRequest,
    WireModel,
)
from sendlix.options import GroupRecipient

GroupMember = Union[AddressLike, GroupRecipient]

logger = get_logger("sendlix.clients.group")


def _normalize_members(emails: GroupMember | Sequence[GroupMember]) -> list[GroupRecipient]:
    if isinstance(emails, (str, EmailAddress, Mapping, GroupRecipient)):
        items = [emails]
    else:
        items = list(emails)
    return [item if isinstance(item, GroupRecipient) else GroupRecipient(item) for item in items]


def _email_data(address: AddressLike) -> EmailData:
    email, name = split_address(address, "emails")
    return EmailData.build(email=email, name=name)


def _require_member_args(group_id: str, email: str) -> None:
    if not group_id:
        raise MissingRequiredField("group_id")
    if not email:
        raise MissingRequiredField("email")


def build_insert_request(
    group_id: str,
    emails: GroupMember | Sequence[GroupMember],
    substitutions: Mapping[str, str] | None = None,
    failure_handling: FailureHandling | str | None = None,
    version: WireVersion = WireVersion.V1,
) -> WireModel:
    """Build the InsertEmailToGroup request for ``version``.

    Only the shape of the members is checked; addresses are not validated.

    Raises:
        MissingRequiredField: If the group id or the member list is empty.
        InvalidAddressFormat: If a member is not an address-like value.
        InvalidContent: If per-member substitutions or a failure policy are
            used with wire version v1, or a value has the wrong type.
    """
    if not group_id:
        raise MissingRequiredField("group_id")
    members = _normalize_members(emails)
    if not members:
        raise MissingRequiredField("emails")
    shared = dict(substitutions) if substitutions else {}

    if version is WireVersion.V1:
        if failure_handling is not None:
            raise InvalidContent("Failure handling requires wire version v2.")
        if any(member.substitutions for member in members):
            raise InvalidContent("Per-recipient substitutions require wire version v2.")
        return InsertEmailToGroupRequest.build(
            group_id=group_id,
            emails=[_email_data(member.address) for member in members],
            substitutions=shared or None,
        )

    entries = []
    for member in members:
        values = {**shared, **dict(member.substitutions or {})}
        entries.append(GroupEntryData.build(email=_email_data(member.address), substitutions=values or None))
    return InsertEmailToGroupRequestV2.build(
        group_id=group_id,
        entries=entries,
        on_failure=FailureHandling(failure_handling) if failure_handling is not None else None,
    )


class GroupClient(Client):
    """Client for inserting, removing and checking group members."""

    SERVICE = "sendlix.api.v1.GroupService"

    def insert_email_into_group(
        self,
        group_id: str,
        emails: GroupMember | Sequence[GroupMember],
        substitutions: Mapping[str, str] | None = None,
        failure_handling: FailureHandling | str | None = None,
    ) -> Awaitable[bool]:
        """Insert one or more members into a group.

        Args:
            group_id: The group identifier.
            emails: One member or a sequence of members. A member is an address
                (string, ``EmailAddress`` or mapping) or a ``GroupRecipient``.
            substitutions: Placeholder values shared by every inserted member.
            failure_handling: What the server does with invalid entries (v2 only).

        Returns:
            Awaitable resolving to True. It raises ``OperationRejected`` with the
            server message when the server reports ``success=false``.
        """
        request = build_insert_request(group_id, emails, substitutions, failure_handling, self.wire_version)
        return self._expect_success("InsertEmailToGroup", request)

    async def delete_email_from_group(self, group_id: str, email: str) -> bool:
        """Remove a member from a group.

        The service only removes members that were added at least 30 minutes ago.

        Raises:
            OperationRejected: When the server reports ``success=false``.
        """
        _require_member_args(group_id, email)
        request = RemoveEmailFromGroupRequest.build(group_id=group_id, email=email)
        return await self._expect_success("RemoveEmailFromGroup", request)

    async def contains_email_in_group(self, group_id: str, email: str) -> bool:
        """Return True if ``email`` is a member of the group.

        Anything but an explicit ``exists: true`` counts as not a member.
        """
        _require_member_args(group_id, email)
        request = CheckEmailInGroupRequest.build(group_id=group_id, email=email)
        data = await self._call("CheckEmailInGroup", request)
        response = self._parse(CheckEmailInGroupResponseData, data, "CheckEmailInGroup")
        return response.exists is True

    async def _expect_success(self, name: str, request: WireModel) -> bool:
        data = await self._call(name, request)
        response = self._parse(GroupResponseData, data, name)
        if not response.success:
            logger.warning("%s rejected: %s", name, response.message)
            raise OperationRejected(response.message or f"{name} was rejected by the server")
        return True
