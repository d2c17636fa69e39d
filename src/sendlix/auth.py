# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""API key handling and bearer token cache.

An API key (``secret.keyId``) is exchanged for a short-lived bearer token
through the Auth service. ``Auth`` caches the token until it expires and
hands out the ``Authorization`` header that every other client attaches to
its calls.

Refreshes are single-flight: when several tasks find the cache empty or
expired at the same time, one exchange is performed and all of them await
its result. A failed exchange leaves the cache as it was and the next call
tries again. There is no retry inside the SDK.

Example:
    Getting a header::

        auth = Auth("my-secret.42")
        name, value = await auth.get_auth_header()
        # ("Authorization", "Bearer eyJ...")
        await auth.close()
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable

from pydantic import ValidationError

from sendlix.config import ClientConfig
from sendlix.errors import AuthExchangeFailed, InvalidFormat, RemoteCallFailed
from sendlix.logger import get_logger
from sendlix.models import ApiKeyData, AuthRequest, AuthResponse
from sendlix.transport import HttpTransport, Transport

AUTH_METHOD = "sendlix.api.v1.Auth/GetJwtToken"

logger = get_logger("sendlix.auth")


@runtime_checkable
class AuthProvider(Protocol):
    """Anything that can produce an authorization header on demand."""

    async def get_auth_header(self) -> tuple[str, str]:
        ...


@dataclass(frozen=True)
class ApiKey:
    """Long-lived credential used only to obtain bearer tokens.

    Attributes:
        secret: Opaque secret part.
        key_id: Numeric key identifier.
    """

    secret: str
    key_id: int

    @classmethod
    def parse(cls, value: str) -> ApiKey:
        """Parse a ``secret.keyId`` string.

        Raises:
            InvalidFormat: Unless the string has exactly two non-empty
                dot-separated segments and the second is made of digits only.
        """
        if not isinstance(value, str):
            raise InvalidFormat("API key must be a string of the form 'secret.keyId'")
        parts = value.split(".")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise InvalidFormat("Invalid API key format. Expected format: 'secret.keyId'.")
        if not (parts[1].isascii() and parts[1].isdigit()):
            raise InvalidFormat("Invalid API key format. The key id must be an integer.")
        return cls(secret=parts[0], key_id=int(parts[1]))

    def __repr__(self) -> str:
        return f"ApiKey(key_id={self.key_id}, secret='***')"


@dataclass
class CachedToken:
    """Bearer token and its absolute expiry in epoch milliseconds."""

    token: str
    expires_at: int

    def is_valid(self, now_ms: int) -> bool:
        return self.expires_at > now_ms

    @property
    def header(self) -> tuple[str, str]:
        return ("Authorization", f"Bearer {self.token}")


class Auth:
    """Credential manager: exchanges an API key for cached bearer tokens.

    Attributes:
        api_key: The parsed API key.
    """

    def __init__(
        self,
        api_key: str | ApiKey,
        transport: Transport | None = None,
        config: ClientConfig | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the manager.

        Args:
            api_key: ``secret.keyId`` string or an already parsed ``ApiKey``.
            transport: Transport for the token exchange. A ``HttpTransport``
                without authorization is created when omitted.
            config: Connection settings for the default transport.
            clock: Returns the current time in seconds since the epoch.

        Raises:
            InvalidFormat: If the key string is malformed.
        """
        self.api_key = api_key if isinstance(api_key, ApiKey) else ApiKey.parse(api_key)
        self._owns_transport = transport is None
        if transport is None:
            config = config or ClientConfig()
            transport = HttpTransport(
                base_url=config.base_url,
                user_agent=config.user_agent,
                timeout=config.timeout,
            )
        self._transport = transport
        self._clock = clock
        self._token: CachedToken | None = None
        self._refresh_task: asyncio.Task[CachedToken] | None = None

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    @property
    def cached_token(self) -> CachedToken | None:
        """The current cache entry, valid or not."""
        return self._token

    async def get_auth_header(self) -> tuple[str, str]:
        """Return ``("Authorization", "Bearer <token>")`` with a valid token.

        Served from the cache without I/O while the token has not expired.

        Raises:
            AuthExchangeFailed: If the exchange fails or returns no body.
        """
        token = self._token
        if token is not None and token.is_valid(self._now_ms()):
            logger.debug("Using cached token for key %d", self.api_key.key_id)
            return token.header

        task = self._refresh_task
        if task is None:
            task = asyncio.ensure_future(self._exchange())
            task.add_done_callback(self._clear_refresh)
            self._refresh_task = task
        token = await asyncio.shield(task)
        return token.header

    def _clear_refresh(self, task: asyncio.Task[CachedToken]) -> None:
        if self._refresh_task is task:
            self._refresh_task = None
        if not task.cancelled():
            # Marks the exception retrieved when every waiter was cancelled.
            task.exception()

    async def _exchange(self) -> CachedToken:
        request = AuthRequest(
            api_key=ApiKeyData(secret=self.api_key.secret, key_id=self.api_key.key_id)
        )
        logger.info("Requesting bearer token for key %d", self.api_key.key_id)
        try:
            data = await self._transport.invoke(AUTH_METHOD, request.to_wire())
        except RemoteCallFailed as exc:
            raise AuthExchangeFailed(f"Token exchange failed: {exc}") from exc
        except Exception as exc:
            # Custom transports may raise their own error types.
            raise AuthExchangeFailed(f"Token exchange failed: {exc!r}") from exc
        if not data:
            raise AuthExchangeFailed("No response from server")
        try:
            response = AuthResponse.model_validate(data)
        except ValidationError as exc:
            raise AuthExchangeFailed("Malformed token response") from exc

        token = CachedToken(
            token=response.token,
            expires_at=self._now_ms() + response.expires.seconds * 1000,
        )
        self._token = token
        return token

    def invalidate(self) -> None:
        """Drop the cached token so the next call performs an exchange."""
        self._token = None

    async def close(self) -> None:
        """Close the exchange transport if this manager created it."""
        if self._owns_transport:
            await self._transport.close()

    def __repr__(self) -> str:
        return f"<Auth key_id={self.api_key.key_id}>"
