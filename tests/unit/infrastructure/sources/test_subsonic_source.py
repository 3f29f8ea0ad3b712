"""Tests for the Subsonic source adapter."""

import hashlib
import logging
from collections.abc import Callable

import httpx
import pytest

from scrobblehub.domain.entities import AuthOutcome
from scrobblehub.domain.exceptions import ConstructionError
from scrobblehub.infrastructure.sources.subsonic_source import (
    API_VERSION,
    SubsonicApiError,
    SubsonicSource,
)

OK_ENVELOPE = {"subsonic-response": {"status": "ok", "version": "1.16.1"}}


def failed_envelope(code: int, message: str) -> dict:
    return {
        "subsonic-response": {
            "status": "failed",
            "version": "1.16.1",
            "error": {"code": code, "message": message},
        }
    }


def make_source(
    handler: Callable[[httpx.Request], httpx.Response],
    requests: list[httpx.Request] | None = None,
    **data: str,
) -> SubsonicSource:
    def recording(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return handler(request)

    config = {"user": "alice", "password": "s3cret", "url": "http://music.local/", **data}
    client = httpx.AsyncClient(transport=httpx.MockTransport(recording))
    return SubsonicSource("home", config, http_client=client)


class TestSubsonicConstruction:
    """Test config validation at construction time."""

    def test_missing_password(self) -> None:
        with pytest.raises(ConstructionError) as exc_info:
            SubsonicSource("home", {"user": "alice", "url": "http://music.local"})

        assert exc_info.value.message == "Cannot setup Subsonic source, 'password' is not defined"

    def test_missing_user_and_password(self) -> None:
        with pytest.raises(ConstructionError) as exc_info:
            SubsonicSource("home", {"url": "http://music.local"})

        assert "'user', 'password' are not defined" in exc_info.value.message

    def test_flags_after_construction(self) -> None:
        source = SubsonicSource("home", {"user": "a", "password": "b"})

        assert source.type == "subsonic"
        assert source.requires_auth is True
        assert source.authed is False
        assert source.initialized is False

    def test_base_url_strips_trailing_slash(self) -> None:
        source = SubsonicSource("home", {"user": "a", "password": "b", "url": "http://x/"})

        assert source.base_url == "http://x"


class TestSubsonicAuthParams:
    """Test the per-request challenge-response params."""

    async def test_query_params_present_and_token_matches_salt(self) -> None:
        requests: list[httpx.Request] = []
        source = make_source(lambda r: httpx.Response(200, json=OK_ENVELOPE), requests)

        await source.ping()

        params = requests[0].url.params
        assert requests[0].url.path == "/rest/ping"
        assert params["u"] == "alice"
        assert params["v"] == API_VERSION
        assert params["c"] == "scrobblehub - home"
        assert params["f"] == "json"
        expected = hashlib.md5(f"s3cret{params['s']}".encode()).hexdigest()
        assert params["t"] == expected

    async def test_salt_and_token_differ_between_calls(self) -> None:
        requests: list[httpx.Request] = []
        source = make_source(lambda r: httpx.Response(200, json=OK_ENVELOPE), requests)

        await source.ping()
        await source.ping()

        first, second = (r.url.params for r in requests)
        assert first["s"] != second["s"]
        assert first["t"] != second["t"]

    async def test_caller_params_kept(self) -> None:
        requests: list[httpx.Request] = []
        source = make_source(lambda r: httpx.Response(200, json=OK_ENVELOPE), requests)

        await source.call_api("GET", "http://music.local/rest/getNowPlaying", {"id": "42"})

        assert requests[0].url.params["id"] == "42"
        assert "t" in requests[0].url.params


class TestSubsonicCallApi:
    """Test envelope handling and failure logging."""

    async def test_returns_envelope(self) -> None:
        source = make_source(lambda r: httpx.Response(200, json=OK_ENVELOPE))

        envelope = await source.ping()

        assert envelope["status"] == "ok"

    async def test_failed_status_logs_server_message(self, caplog: pytest.LogCaptureFixture) -> None:
        source = make_source(
            lambda r: httpx.Response(200, json=failed_envelope(40, "Wrong username or password"))
        )

        with caplog.at_level(logging.ERROR), pytest.raises(SubsonicApiError) as exc_info:
            await source.ping()

        assert exc_info.value.code == 40
        assert exc_info.value.server_message == "Wrong username or password"
        assert "API Call failed: Server Response => Wrong username or password" in caplog.text

    async def test_failed_status_with_string_error(self, caplog: pytest.LogCaptureFixture) -> None:
        envelope = {"subsonic-response": {"status": "failed", "error": "boom"}}
        source = make_source(lambda r: httpx.Response(200, json=envelope))

        with caplog.at_level(logging.ERROR), pytest.raises(SubsonicApiError) as exc_info:
            await source.ping()

        assert exc_info.value.code is None
        assert exc_info.value.server_message is None
        assert "API Call failed: Subsonic API returned an error" in caplog.text

    async def test_http_error_with_envelope_prefers_server_message(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        source = make_source(
            lambda r: httpx.Response(401, json=failed_envelope(40, "Wrong username or password"))
        )

        with caplog.at_level(logging.ERROR), pytest.raises(httpx.HTTPStatusError):
            await source.ping()

        assert "Server Response => Wrong username or password" in caplog.text
        assert "401 Unauthorized" not in caplog.text

    async def test_failure_record_carries_status_and_body(self, caplog: pytest.LogCaptureFixture) -> None:
        source = make_source(lambda r: httpx.Response(500, text="upstream exploded"))

        with caplog.at_level(logging.ERROR), pytest.raises(httpx.HTTPStatusError):
            await source.ping()

        record = next(r for r in caplog.records if "API Call failed" in r.getMessage())
        assert record.http_status == 500
        assert record.response_body == "upstream exploded"

    async def test_transport_error_uses_transport_message(self, caplog: pytest.LogCaptureFixture) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        source = make_source(refuse)

        with caplog.at_level(logging.ERROR), pytest.raises(httpx.ConnectError):
            await source.ping()

        assert "API Call failed: Connection refused" in caplog.text
        assert "Server Response" not in caplog.text

    async def test_body_without_envelope(self) -> None:
        source = make_source(lambda r: httpx.Response(200, json={"hello": "world"}))

        with pytest.raises(SubsonicApiError, match="without a subsonic envelope"):
            await source.ping()

    async def test_ping_without_url(self) -> None:
        source = SubsonicSource("home", {"user": "a", "password": "b"})

        with pytest.raises(SubsonicApiError, match="'url' is not defined"):
            await source.ping()


class TestSubsonicChecks:
    """Test test_connection and test_auth."""

    async def test_connection_ok(self, caplog: pytest.LogCaptureFixture) -> None:
        source = make_source(lambda r: httpx.Response(200, json=OK_ENVELOPE))

        with caplog.at_level(logging.INFO):
            assert await source.test_connection() is True

        assert "Subsonic API Status: ok" in caplog.text

    async def test_connection_failure_does_not_raise(self, caplog: pytest.LogCaptureFixture) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        source = make_source(refuse)

        with caplog.at_level(logging.ERROR):
            assert await source.test_connection() is False

        assert "Subsonic Connection Failed" in caplog.text
        assert "http://music.local" in caplog.text

    async def test_connection_failure_with_string_error(self, caplog: pytest.LogCaptureFixture) -> None:
        envelope = {"subsonic-response": {"status": "failed", "error": "boom"}}
        source = make_source(lambda r: httpx.Response(200, json=envelope))

        with caplog.at_level(logging.ERROR):
            assert await source.test_connection() is False

        assert "Subsonic Connection Failed" in caplog.text

    async def test_auth_success(self) -> None:
        source = make_source(lambda r: httpx.Response(200, json=OK_ENVELOPE))

        result = await source.test_auth()

        assert result.outcome is AuthOutcome.AUTHENTICATED
        assert source.authed is True

    async def test_auth_failure_reports_server_message(self) -> None:
        source = make_source(
            lambda r: httpx.Response(200, json=failed_envelope(40, "Wrong username or password"))
        )

        result = await source.test_auth()

        assert result.outcome is AuthOutcome.FAILED
        assert result.reason == "Wrong username or password"
        assert source.authed is False

    async def test_auth_transport_failure(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        source = make_source(refuse)

        result = await source.test_auth()

        assert result.ok is False
        assert result.reason == "Connection refused"
