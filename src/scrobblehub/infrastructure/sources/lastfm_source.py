"""Last.fm source (reads a user's recent tracks as activity).

Last.fm is usually a scrobble TARGET, which is why lastfm.json entries default
to configureAs "client" and never come from env vars. When someone does want it
as a source it needs an authorized session key - either in the config data or in
currentAuth-<name>.json written after the web auth flow.
"""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from scrobblehub.config import HttpSettings
from scrobblehub.domain.entities import AuthResult, SourceType
from scrobblehub.infrastructure.sources.base import AbstractSource

LASTFM_API_URL = "https://ws.audioscrobbler.com/2.0/"


class LastfmData(BaseModel):
    """Settings block of a lastfm config entry."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    api_key: str = Field(alias="apiKey")
    secret: str
    session: str | None = None
    redirect_uri: str | None = Field(default=None, alias="redirectUri")


class LastfmSource(AbstractSource):
    """Activity source reading Last.fm recent tracks."""

    display_name = "Last.fm"

    def __init__(
        self,
        name: str,
        config: Mapping[str, Any] | None = None,
        clients: list[str] | None = None,
        *,
        config_dir: Path | str,
        http_client: httpx.AsyncClient | None = None,
        http_settings: HttpSettings | None = None,
    ) -> None:
        super().__init__(
            SourceType.LASTFM.value,
            name,
            config,
            clients,
            http_client=http_client,
            http_settings=http_settings,
        )
        self.settings = self._parse_config(LastfmData)
        self.session_path = Path(config_dir) / f"currentAuth-{name}.json"
        self.session_key = self.settings.session
        self.requires_auth = True

    def _sign_request(self, params: dict[str, str]) -> str:
        """
        Create API signature for authenticated requests.

        Args:
            params: Request parameters (without format/callback)

        Returns:
            MD5 signature string
        """
        sorted_params = sorted(params.items())
        sig_string = "".join(f"{k}{v}" for k, v in sorted_params)
        sig_string += self.settings.secret

        # MD5 is used for Last.fm API signature, not for security purposes
        return hashlib.md5(  # nosec B324
            sig_string.encode("utf-8"), usedforsecurity=False
        ).hexdigest()

    async def initialize(self) -> bool:
        cached = await self._load_credentials(self.session_path)
        self.session_key = cached.get("sessionKey", self.session_key)
        self.initialized = True
        return True

    async def _check_auth(self) -> AuthResult:
        if not self.session_key:
            return AuthResult.failed("No session key, user must authorize with Last.fm first")

        params = {
            "method": "user.getInfo",
            "api_key": self.settings.api_key,
            "sk": self.session_key,
        }
        params["api_sig"] = self._sign_request(params)
        try:
            body = await self.call_api("GET", LASTFM_API_URL, {**params, "format": "json"})
        except httpx.HTTPStatusError as e:
            try:
                body = e.response.json()
            except ValueError:
                return AuthResult.failed(str(e))
        except httpx.HTTPError as e:
            return AuthResult.failed(str(e))

        if isinstance(body, dict) and "error" in body:
            return AuthResult.failed(body.get("message", f"Last.fm error {body['error']}"))
        return AuthResult.authenticated()
