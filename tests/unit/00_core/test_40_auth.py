"""Tests for API key parsing and the bearer token cache."""

import asyncio

import pytest

from sendlix.auth import AUTH_METHOD, ApiKey, Auth, AuthProvider, CachedToken
from sendlix.errors import AuthExchangeFailed, InvalidFormat, RemoteCallFailed
from sendlix.transport import HttpTransport, Transport


def token_response(token: str, seconds: int) -> dict:
    return {"token": token, "expires": {"seconds": seconds}}


class Clock:
    """Controllable replacement for time.time."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class GatedTransport(Transport):
    """Transport whose calls block until ``release`` is set."""

    def __init__(self, response):
        self.response = response
        self.release = asyncio.Event()
        self.calls = 0

    async def invoke(self, method, request, header_provider=None):
        self.calls += 1
        await self.release.wait()
        if isinstance(self.response, BaseException):
            raise self.response
        return self.response


# --- ApiKey ---


class TestApiKey:
    """Tests for API key parsing."""

    def test_parse_valid_key(self):
        key = ApiKey.parse("secret.123")
        assert key.secret == "secret"
        assert key.key_id == 123

    @pytest.mark.parametrize("value", ["invalidkey", "secret.123.extra", "", "a.b.c.4"])
    def test_wrong_segment_count_is_rejected(self, value):
        with pytest.raises(InvalidFormat):
            ApiKey.parse(value)

    @pytest.mark.parametrize("value", [".123", "secret.", "."])
    def test_empty_segment_is_rejected(self, value):
        with pytest.raises(InvalidFormat):
            ApiKey.parse(value)

    @pytest.mark.parametrize("key_id", ["abc", " 42", "42 ", "+42", "-1", "4_2", "\u0664\u0662"])
    def test_non_integer_key_id_is_rejected(self, key_id):
        with pytest.raises(InvalidFormat, match="integer"):
            ApiKey.parse(f"secret.{key_id}")

    def test_leading_zeros_are_plain_digits(self):
        assert ApiKey.parse("secret.007").key_id == 7

    def test_invalid_format_is_a_value_error(self):
        with pytest.raises(ValueError):
            ApiKey.parse("nodot")

    def test_repr_hides_secret(self):
        assert "supersecret" not in repr(ApiKey.parse("supersecret.7"))


# --- Auth construction ---


def test_auth_rejects_malformed_key():
    with pytest.raises(InvalidFormat):
        Auth("invalidkey")


def test_auth_accepts_parsed_key(fake_transport_cls):
    key = ApiKey("s", 9)
    auth = Auth(key, transport=fake_transport_cls())
    assert auth.api_key is key


def test_auth_is_an_auth_provider(fake_transport_cls):
    assert isinstance(Auth("abc.1", transport=fake_transport_cls()), AuthProvider)


def test_auth_builds_http_transport_by_default():
    auth = Auth("abc.1")
    assert isinstance(auth._transport, HttpTransport)


# --- Token exchange and cache ---


@pytest.mark.asyncio
async def test_exchange_returns_bearer_header(fake_transport_cls):
    transport = fake_transport_cls(token_response("tok1", 3600))
    auth = Auth("abc.1", transport=transport)

    header = await auth.get_auth_header()

    assert header == ("Authorization", "Bearer tok1")
    method, request, sent_header = transport.calls[0]
    assert method == AUTH_METHOD
    assert request == {"apiKey": {"secret": "abc", "keyID": 1}}
    assert sent_header is None


@pytest.mark.asyncio
async def test_cached_token_is_reused(fake_transport_cls):
    transport = fake_transport_cls(token_response("test-token", 3600))
    auth = Auth("secret.123", transport=transport)

    header1 = await auth.get_auth_header()
    header2 = await auth.get_auth_header()

    assert len(transport.calls) == 1
    assert header1 == header2 == ("Authorization", "Bearer test-token")


@pytest.mark.asyncio
async def test_expiry_is_computed_in_milliseconds(fake_transport_cls):
    clock = Clock(1000.0)
    auth = Auth("abc.1", transport=fake_transport_cls(token_response("t", 60)), clock=clock)

    await auth.get_auth_header()

    assert auth.cached_token == CachedToken(token="t", expires_at=1_000_000 + 60_000)


@pytest.mark.asyncio
async def test_token_is_refreshed_after_expiry(fake_transport_cls):
    clock = Clock()
    transport = fake_transport_cls(token_response("token-1", 10), token_response("token-2", 3600))
    auth = Auth("secret.123", transport=transport, clock=clock)

    assert await auth.get_auth_header() == ("Authorization", "Bearer token-1")

    clock.now += 11
    assert await auth.get_auth_header() == ("Authorization", "Bearer token-2")
    assert len(transport.calls) == 2


@pytest.mark.asyncio
async def test_token_expiring_now_is_not_valid(fake_transport_cls):
    clock = Clock()
    transport = fake_transport_cls(token_response("token-1", 10), token_response("token-2", 10))
    auth = Auth("secret.123", transport=transport, clock=clock)

    await auth.get_auth_header()
    clock.now += 10

    assert await auth.get_auth_header() == ("Authorization", "Bearer token-2")


@pytest.mark.asyncio
async def test_exchange_error_is_wrapped_and_cache_untouched(fake_transport_cls):
    error = RemoteCallFailed("connection refused")
    transport = fake_transport_cls(error, token_response("recovered", 3600))
    auth = Auth("secret.123", transport=transport)

    with pytest.raises(AuthExchangeFailed) as excinfo:
        await auth.get_auth_header()

    assert excinfo.value.__cause__ is error
    assert auth.cached_token is None
    assert await auth.get_auth_header() == ("Authorization", "Bearer recovered")


@pytest.mark.asyncio
async def test_foreign_transport_errors_are_wrapped(fake_transport_cls):
    error = RuntimeError("channel broken")
    auth = Auth("secret.123", transport=fake_transport_cls(error))

    with pytest.raises(AuthExchangeFailed) as excinfo:
        await auth.get_auth_header()

    assert excinfo.value.__cause__ is error


@pytest.mark.asyncio
async def test_failed_refresh_keeps_previous_token(fake_transport_cls):
    clock = Clock()
    transport = fake_transport_cls(token_response("old", 10), RemoteCallFailed("down"))
    auth = Auth("secret.123", transport=transport, clock=clock)
    await auth.get_auth_header()
    previous = auth.cached_token

    clock.now += 20
    with pytest.raises(AuthExchangeFailed):
        await auth.get_auth_header()

    assert auth.cached_token is previous


@pytest.mark.asyncio
async def test_empty_response_is_rejected(fake_transport_cls):
    transport = fake_transport_cls(None)
    auth = Auth("secret.123", transport=transport)

    with pytest.raises(AuthExchangeFailed, match="No response"):
        await auth.get_auth_header()
    assert auth.cached_token is None


@pytest.mark.asyncio
async def test_malformed_response_is_rejected(fake_transport_cls):
    auth = Auth("secret.123", transport=fake_transport_cls({"token": "missing-expiry"}))

    with pytest.raises(AuthExchangeFailed, match="Malformed"):
        await auth.get_auth_header()


@pytest.mark.asyncio
async def test_invalidate_forces_new_exchange(fake_transport_cls):
    transport = fake_transport_cls(token_response("a", 3600), token_response("b", 3600))
    auth = Auth("secret.123", transport=transport)

    await auth.get_auth_header()
    auth.invalidate()

    assert await auth.get_auth_header() == ("Authorization", "Bearer b")
    assert len(transport.calls) == 2


# --- Single-flight refresh ---


@pytest.mark.asyncio
async def test_concurrent_misses_share_one_exchange():
    transport = GatedTransport(token_response("shared", 3600))
    auth = Auth("secret.123", transport=transport)

    tasks = [asyncio.create_task(auth.get_auth_header()) for _ in range(5)]
    await asyncio.sleep(0)
    transport.release.set()
    headers = await asyncio.gather(*tasks)

    assert transport.calls == 1
    assert set(headers) == {("Authorization", "Bearer shared")}


@pytest.mark.asyncio
async def test_concurrent_failure_reaches_every_waiter_then_retries():
    transport = GatedTransport(RemoteCallFailed("down"))
    auth = Auth("secret.123", transport=transport)

    tasks = [asyncio.create_task(auth.get_auth_header()) for _ in range(3)]
    await asyncio.sleep(0)
    transport.release.set()
    results = await asyncio.gather(*tasks, return_exceptions=True)

    assert transport.calls == 1
    assert all(isinstance(r, AuthExchangeFailed) for r in results)

    transport.response = token_response("second-try", 3600)
    assert await auth.get_auth_header() == ("Authorization", "Bearer second-try")
    assert transport.calls == 2


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_cancel_shared_refresh():
    transport = GatedTransport(token_response("survivor", 3600))
    auth = Auth("secret.123", transport=transport)

    first = asyncio.create_task(auth.get_auth_header())
    second = asyncio.create_task(auth.get_auth_header())
    await asyncio.sleep(0)
    first.cancel()
    transport.release.set()

    assert await second == ("Authorization", "Bearer survivor")
    with pytest.raises(asyncio.CancelledError):
        await first
    assert transport.calls == 1


# --- close ---


@pytest.mark.asyncio
async def test_close_leaves_injected_transport_open(fake_transport_cls):
    transport = fake_transport_cls()
    auth = Auth("secret.123", transport=transport)

    await auth.close()

    assert transport.close_count == 0


@pytest.mark.asyncio
async def test_close_without_session_is_harmless():
    auth = Auth("secret.123")
    await auth.close()
    await auth.close()
