# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Exception hierarchy for the Sendlix SDK.

Validation errors (``InvalidFormat``, ``InvalidAddressFormat``,
``MissingRequiredField``, ``InvalidContent``) are raised synchronously before
any network I/O and also subclass ``ValueError``. Remote errors
(``AuthExchangeFailed``, ``RemoteCallFailed``, ``OperationRejected``) are
raised when the awaitable returned by a client operation is awaited.
"""

from __future__ import annotations


class SendlixError(Exception):
    """Base class for every error raised by the SDK."""


class InvalidFormat(SendlixError, ValueError):
    """The API key string is not of the form ``secret.keyId``."""


class InvalidAddressFormat(SendlixError, ValueError):
    """An email address failed the ``local@domain.tld`` check.

    Attributes:
        field: Name of the address-bearing field (``from``, ``to``, ...).
        value: The rejected address text.
    """

    def __init__(self, value: str, field: str | None = None):
        self.value = value
        self.field = field
        where = f" in '{field}'" if field else ""
        super().__init__(f"Invalid email address format{where}: {value!r}")


class MissingRequiredField(SendlixError, ValueError):
    """A required request field is absent or empty.

    Attributes:
        field: Name of the missing field.
    """

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        super().__init__(message or f"Missing required field: {field}")


class InvalidContent(SendlixError, ValueError):
    """Content options the selected wire version cannot express."""


class AuthExchangeFailed(SendlixError):
    """Exchanging the API key for a bearer token failed.

    The underlying transport error, if any, is available as ``__cause__``.
    """


class RemoteCallFailed(SendlixError):
    """A remote call failed at the transport level.

    Attributes:
        method: Fully qualified remote method name.
        status: HTTP status code, or None for connection-level errors.
    """

    def __init__(self, message: str, method: str | None = None, status: int | None = None):
        self.method = method
        self.status = status
        super().__init__(message)


class OperationRejected(SendlixError):
    """The server answered but reported ``success=false``.

    The server-supplied message is the error text.
    """
