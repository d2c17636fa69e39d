# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Shared plumbing for the service clients."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from sendlix.auth import Auth, AuthProvider
from sendlix.config import ClientConfig, WireVersion
from sendlix.errors import MissingRequiredField, RemoteCallFailed
from sendlix.logger import get_logger
from sendlix.models import WireModel
from sendlix.transport import HttpTransport, JsonDict, Transport

logger = get_logger("sendlix.clients")

ResponseT = TypeVar("ResponseT", bound=BaseModel)


class Client:
    """Base class for clients of one Sendlix RPC service.

    Attributes:
        auth: Source of the authorization header attached to every call.
        config: Connection settings.
        wire_version: Request schema used by the translators.
    """

    SERVICE = ""

    def __init__(
        self,
        auth: AuthProvider | str,
        transport: Transport | None = None,
        config: ClientConfig | None = None,
        wire_version: WireVersion | str | None = None,
    ):
        """Initialize the client.

        Args:
            auth: An ``AuthProvider`` (for instance ``Auth``) or an API key string.
                A key string gets an ``Auth`` that exchanges tokens over ``transport``.
            transport: Transport to use. A ``HttpTransport`` is created when omitted.
            config: Connection settings, defaults to ``ClientConfig()``.
            wire_version: Overrides ``config.wire_version``.

        Raises:
            InvalidFormat: If ``auth`` is a malformed API key string.
            MissingRequiredField: If ``auth`` is missing.
        """
        self.config = config or ClientConfig()
        if not auth:
            raise MissingRequiredField("auth", "Auth is required to create a client.")
        self._transport = transport or HttpTransport(
            base_url=self.config.base_url,
            user_agent=self.config.user_agent,
            timeout=self.config.timeout,
        )
        self._owns_auth = isinstance(auth, str)
        if isinstance(auth, str):
            # The token exchange shares the client's transport.
            auth = Auth(auth, transport=self._transport, config=self.config)
        if not isinstance(auth, AuthProvider):
            raise TypeError(f"auth must provide get_auth_header(), got {type(auth).__name__}")
        self.auth = auth
        self.wire_version = WireVersion(wire_version) if wire_version else self.config.wire_version

    def _method(self, name: str) -> str:
        return f"{self.SERVICE}/{name}"

    async def _call(self, name: str, request: WireModel) -> JsonDict:
        """Invoke ``name`` on this client's service with the current auth header."""
        method = self._method(name)
        data = await self._transport.invoke(
            method, request.to_wire(), header_provider=self.auth.get_auth_header
        )
        logger.debug("%s completed", method)
        return data or {}

    def _parse(self, model: type[ResponseT], data: JsonDict, name: str) -> ResponseT:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            method = self._method(name)
            raise RemoteCallFailed(f"{method}: malformed response", method=method) from exc

    async def close(self) -> None:
        """Release the transport connection.

        Should be called once the client is no longer needed. Calling it again
        repeats the teardown, which is harmless.
        """
        await self._transport.close()
        if self._owns_auth:
            await self.auth.close()

    async def __aenter__(self) -> Any:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.config.base_url} ({self.wire_version.value})>"
