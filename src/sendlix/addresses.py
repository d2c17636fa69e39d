# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Email address normalization.

Callers may pass an address as a bare string, as an ``EmailAddress`` or as
a mapping with ``email`` and optional ``name`` keys. Every form is turned
into an ``EmailData`` wire record; the address text must look like
``local@domain.tld``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Union

from sendlix.errors import InvalidAddressFormat, MissingRequiredField
from sendlix.models import EmailData

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class EmailAddress:
    """Email address with optional display name.

    Attributes:
        email: The address, e.g. ``info@example.com``.
        name: Display name shown by mail clients.
    """

    email: str
    name: str | None = None

    def __str__(self) -> str:
        if self.name:
            return f"{self.name} <{self.email}>"
        return self.email


AddressLike = Union[str, EmailAddress, Mapping[str, str]]


def is_valid_email(value: str) -> bool:
    """Return True when ``value`` matches the ``local@domain.tld`` shape."""
    return isinstance(value, str) and EMAIL_PATTERN.match(value) is not None


def split_address(address: AddressLike, field: str | None = None) -> tuple[str, str | None]:
    """Return ``(email, name)`` for any accepted address form, without validation.

    Raises:
        InvalidAddressFormat: If ``address`` is none of the accepted forms.
    """
    if isinstance(address, str):
        return address, None
    if isinstance(address, EmailAddress):
        return address.email, address.name
    if isinstance(address, Mapping):
        email = address.get("email")
        if not isinstance(email, str):
            raise InvalidAddressFormat(repr(address), field)
        return email, address.get("name") or None
    raise InvalidAddressFormat(repr(address), field)


def to_email_data(address: AddressLike, field: str | None = None) -> EmailData:
    """Validate one address and convert it to its wire record.

    Args:
        address: String, ``EmailAddress`` or ``{"email": ..., "name": ...}`` mapping.
        field: Field name used in the error message.

    Raises:
        InvalidAddressFormat: If the address text is malformed.
    """
    email, name = split_address(address, field)
    if not is_valid_email(email):
        raise InvalidAddressFormat(email, field)
    return EmailData.build(email=email, name=name)


def to_email_data_list(
    addresses: AddressLike | Iterable[AddressLike] | None,
    field: str,
    required: bool = False,
) -> list[EmailData] | None:
    """Validate a recipient list, failing on the first bad entry.

    A single address is accepted in place of a list.

    Raises:
        MissingRequiredField: If ``required`` and the list is empty.
        InvalidAddressFormat: If any address is malformed.
    """
    if addresses is None:
        items: list[AddressLike] = []
    elif isinstance(addresses, (str, EmailAddress, Mapping)):
        items = [addresses]
    else:
        items = list(addresses)
    if not items:
        if required:
            raise MissingRequiredField(field)
        return None
    return [to_email_data(item, field) for item in items]
