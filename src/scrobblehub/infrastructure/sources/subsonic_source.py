"""Subsonic-compatible media server source (Subsonic, Navidrome, Airsonic, ...).

Hey future me - Subsonic auth is CHALLENGE-RESPONSE per request! There is no
session or token to cache: every call generates a fresh random salt, hashes
md5(password + salt) and sends u/t/s/v/c/f as query params. Two calls with the
same credentials therefore never share a salt or token.

Responses wrap everything in a "subsonic-response" envelope whose own "status"
field can say "failed" while the HTTP status is a happy 200. call_api turns
that into a SubsonicApiError so callers only have one failure path.
"""

from __future__ import annotations

import hashlib
import secrets
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict

from scrobblehub.config import HttpSettings
from scrobblehub.domain.entities import AuthResult, SourceType
from scrobblehub.domain.exceptions import ExternalServiceError
from scrobblehub.infrastructure.observability.log_messages import LogMessages
from scrobblehub.infrastructure.sources.base import AbstractSource

API_VERSION = "1.15.0"
ENVELOPE_KEY = "subsonic-response"
CLIENT_ID = "scrobblehub"
# secrets.token_hex(n) yields 2n hex chars
SALT_BYTES = 10


class SubsonicData(BaseModel):
    """Settings block of a subsonic config entry."""

    model_config = ConfigDict(extra="allow")

    user: str
    password: str
    url: str | None = None


class SubsonicApiError(ExternalServiceError):
    """Subsonic call failed, either at the transport or the envelope level."""

    def __init__(
        self,
        message: str,
        response: httpx.Response | None = None,
        code: int | None = None,
        server_message: str | None = None,
    ) -> None:
        super().__init__(message)
        self.response = response
        self.code = code
        self.server_message = server_message


def _extract_envelope(response: httpx.Response | None) -> dict[str, Any] | None:
    """Return the subsonic envelope of a response body, if it has one."""
    if response is None:
        return None
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    envelope = body.get(ENVELOPE_KEY)
    return envelope if isinstance(envelope, dict) else None


def _envelope_error(envelope: dict[str, Any]) -> dict[str, Any]:
    # Some servers put a bare string under "error"
    error = envelope.get("error")
    return error if isinstance(error, dict) else {}


class SubsonicSource(AbstractSource):
    """Activity source polling a Subsonic API server."""

    display_name = "Subsonic"

    def __init__(
        self,
        name: str,
        config: Mapping[str, Any] | None = None,
        clients: list[str] | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        http_settings: HttpSettings | None = None,
    ) -> None:
        super().__init__(
            SourceType.SUBSONIC.value,
            name,
            config,
            clients,
            http_client=http_client,
            http_settings=http_settings,
        )
        # Fails fast, before any network access
        self.settings = self._parse_config(SubsonicData)
        self.requires_auth = True

    @property
    def base_url(self) -> str | None:
        return self.settings.url.rstrip("/") if self.settings.url else None

    def _auth_params(self) -> dict[str, str]:
        """Fresh challenge-response credentials for ONE request."""
        salt = secrets.token_hex(SALT_BYTES)
        # MD5 is what the Subsonic protocol mandates, not our choice
        token = hashlib.md5(  # nosec B324
            f"{self.settings.password}{salt}".encode(), usedforsecurity=False
        ).hexdigest()
        return {
            "u": self.settings.user,
            "t": token,
            "s": salt,
            "v": API_VERSION,
            "c": f"{CLIENT_ID} - {self.name}",
            "f": "json",
        }

    async def call_api(
        self,
        method: str,
        url: str,
        params: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """
        Make an authenticated request and unwrap the subsonic envelope.

        Args:
            method: HTTP method
            url: Absolute endpoint URL (e.g. "<server>/rest/ping")
            params: Endpoint-specific query params
            **kwargs: Passed through to httpx

        Returns:
            The "subsonic-response" envelope

        Raises:
            SubsonicApiError: Envelope reported status "failed" or body was unusable
            httpx.HTTPError: Transport failure or non-2xx status
        """
        client = await self._get_client()
        query = {**dict(params or {}), **self._auth_params()}

        try:
            response = await client.request(method, url, params=query, **kwargs)
            response.raise_for_status()
            envelope = _extract_envelope(response)
            if envelope is None:
                raise SubsonicApiError(
                    "Subsonic API returned a response without a subsonic envelope",
                    response=response,
                )
            if envelope.get("status") == "failed":
                error = _envelope_error(envelope)
                raise SubsonicApiError(
                    "Subsonic API returned an error",
                    response=response,
                    code=error.get("code"),
                    server_message=error.get("message"),
                )
            return envelope
        except (httpx.HTTPError, SubsonicApiError) as e:
            self._log_call_failure(e)
            raise

    def _log_call_failure(self, error: Exception) -> None:
        # Hey future me - prefer the server's own words ("Wrong username or password")
        # over httpx's generic "Client error '401 Unauthorized'" whenever the failure
        # response carries an envelope.
        response: httpx.Response | None = getattr(error, "response", None)
        envelope = _extract_envelope(response)
        server_message = None
        if envelope is not None:
            server_message = _envelope_error(envelope).get("message")

        if response is not None and server_message:
            message = f"API Call failed: Server Response => {server_message}"
        else:
            message = f"API Call failed: {error}"

        body: Any = envelope
        if body is None and response is not None:
            body = response.text

        self.logger.error(
            message,
            extra={
                "http_status": response.status_code if response is not None else None,
                "response_body": body,
            },
        )

    async def ping(self) -> dict[str, Any]:
        """Call /rest/ping."""
        if self.base_url is None:
            raise SubsonicApiError("Cannot call Subsonic API, 'url' is not defined")
        return await self.call_api("GET", f"{self.base_url}/rest/ping")

    async def test_connection(self) -> bool:
        """Ping the server; logs the outcome and never raises."""
        try:
            await self.ping()
        except (httpx.HTTPError, SubsonicApiError) as e:
            self.logger.error(
                LogMessages.connection_failed(
                    service=self.display_name,
                    target=self.base_url or "<no url>",
                    error=str(e),
                )
            )
            return False
        self.logger.info("Subsonic API Status: ok")
        return True

    async def _check_auth(self) -> AuthResult:
        try:
            await self.ping()
        except SubsonicApiError as e:
            return AuthResult.failed(e.server_message or e.message)
        except httpx.HTTPError as e:
            return AuthResult.failed(str(e))
        return AuthResult.authenticated()
