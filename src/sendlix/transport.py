# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Transport layer for remote calls to the Sendlix API.

Clients never talk to the network directly: they hand a JSON-ready request
record to a ``Transport`` and get the decoded response record back. The
default ``HttpTransport`` posts each call as JSON to
``{base_url}/{service}/{method}`` using a long-lived ``aiohttp`` session.

Authorization is attached through a header provider: an async callable
awaited once per call, which may itself perform a remote token exchange.

Example:
    Calling a method with a custom header provider::

        async def headers():
            return ("Authorization", "Bearer secret")

        transport = HttpTransport(header_provider=headers)
        data = await transport.invoke(
            "sendlix.api.v1.GroupService/CheckEmailInGroup",
            {"groupId": "g1", "email": "a@b.com"},
        )
        await transport.close()
"""

from __future__ import annotations

import asyncio
import json
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable

import aiohttp

from sendlix.config import DEFAULT_BASE_URL, DEFAULT_USER_AGENT
from sendlix.errors import RemoteCallFailed
from sendlix.logger import get_logger

JsonDict = dict[str, Any]
HeaderProvider = Callable[[], Awaitable[tuple[str, str]]]

logger = get_logger("sendlix.transport")


class Transport(ABC):
    """Unary remote-call primitive consumed by the clients."""

    @abstractmethod
    async def invoke(
        self,
        method: str,
        request: JsonDict,
        header_provider: HeaderProvider | None = None,
    ) -> JsonDict | None:
        """Perform one remote call.

        Args:
            method: Fully qualified method, e.g. ``sendlix.api.v1.EmailService/SendEmail``.
            request: JSON-ready request record.
            header_provider: Awaited once for this call; its header is attached to the request.

        Returns:
            The decoded response record, or None when the server sent no body.

        Raises:
            RemoteCallFailed: On any transport-level failure.
        """

    async def close(self) -> None:
        """Release the underlying connection."""
        return None


class HttpTransport(Transport):
    """JSON over HTTP transport backed by ``aiohttp``.

    Attributes:
        base_url: Root URL of the RPC endpoint.
        user_agent: Value sent in the User-Agent header.
        timeout: Total timeout per call in seconds (None disables it).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float | None = None,
        header_provider: HeaderProvider | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout
        self._header_provider = header_provider
        self._session: aiohttp.ClientSession | None = None

    def _endpoint(self, method: str) -> str:
        return f"{self.base_url}/{method.lstrip('/')}"

    async def _headers(self, header_provider: HeaderProvider | None = None) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }
        provider = header_provider or self._header_provider
        if provider is not None:
            name, value = await provider()
            headers[name] = value
        return headers

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    async def invoke(
        self,
        method: str,
        request: JsonDict,
        header_provider: HeaderProvider | None = None,
    ) -> JsonDict | None:
        headers = await self._headers(header_provider)
        session = self._get_session()
        url = self._endpoint(method)
        logger.debug("Calling %s", method)
        try:
            async with session.post(url, json=request, headers=headers) as resp:
                body = await resp.text(errors="replace")
                if resp.status >= 400:
                    message = _error_message(body) or resp.reason or "remote call failed"
                    logger.warning("Remote call %s failed with HTTP %d", method, resp.status)
                    raise RemoteCallFailed(
                        f"{method}: {message}", method=method, status=resp.status
                    )
                return _decode_body(body, method)
        except aiohttp.ClientError as exc:
            logger.warning("Remote call %s failed: %s", method, exc)
            raise RemoteCallFailed(f"{method}: {exc}", method=method) from exc
        except asyncio.TimeoutError as exc:
            logger.warning("Remote call %s timed out after %ss", method, self.timeout)
            raise RemoteCallFailed(f"{method}: timed out", method=method) from exc

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()


def _decode_body(body: str, method: str) -> JsonDict | None:
    if not body.strip():
        return None
    try:
        data = json.loads(body)
    except json.JSONDecodeError as exc:
        raise RemoteCallFailed(f"{method}: invalid JSON response", method=method) from exc
    if not isinstance(data, dict):
        raise RemoteCallFailed(f"{method}: unexpected response shape", method=method)
    return data


def _error_message(body: str) -> str | None:
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        return body.strip()[:200] or None
    if isinstance(data, dict):
        message = data.get("message") or data.get("error")
        return str(message) if message else None
    return None
