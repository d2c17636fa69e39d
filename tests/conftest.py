"""Shared fixtures: in-memory transports and auth providers."""

from __future__ import annotations

import pytest

from sendlix.transport import Transport


class FakeTransport(Transport):
    """Transport that records calls and replays canned responses.

    Each queued response is returned once, in order. An exception instance
    is raised instead of returned. When the queue is empty ``{}`` is returned.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: list[tuple[str, dict, tuple[str, str] | None]] = []
        self.close_count = 0

    async def invoke(self, method, request, header_provider=None):
        header = await header_provider() if header_provider is not None else None
        self.calls.append((method, request, header))
        if not self.responses:
            return {}
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response

    async def close(self):
        self.close_count += 1

    @property
    def methods(self) -> list[str]:
        return [method for method, _, _ in self.calls]

    @property
    def last_request(self) -> dict:
        return self.calls[-1][1]


class StaticAuth:
    """Auth provider returning a fixed header and counting calls."""

    def __init__(self, token: str = "dummy-token"):
        self.token = token
        self.calls = 0

    async def get_auth_header(self):
        self.calls += 1
        return ("Authorization", f"Bearer {self.token}")


@pytest.fixture
def fake_transport_cls():
    return FakeTransport


@pytest.fixture
def dummy_auth():
    return StaticAuth()
