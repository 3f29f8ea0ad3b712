"""Spotify recently-played source.

Hey future me - Spotify is OAuth (authorization code flow)! The user visits
<local_url>/callback once, the tokens land in currentCreds-<name>.json inside
the config dir, and every restart picks them up again in initialize(). Tokens
from config/env (accessToken/refreshToken) are used when no cached file exists.

Auth check: GET /v1/me with the access token. A 401 with a refresh token on
hand triggers ONE refresh attempt before we give up.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from scrobblehub.config import HttpSettings
from scrobblehub.domain.entities import AuthResult, SourceType
from scrobblehub.infrastructure.json_files import write_json
from scrobblehub.infrastructure.sources.base import AbstractSource

SPOTIFY_API_URL = "https://api.spotify.com/v1"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"  # nosec B105


class SpotifyData(BaseModel):
    """Settings block of a spotify config entry."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    client_id: str = Field(alias="clientId")
    client_secret: str = Field(alias="clientSecret")
    redirect_uri: str | None = Field(default=None, alias="redirectUri")
    access_token: str | None = Field(default=None, alias="accessToken")
    refresh_token: str | None = Field(default=None, alias="refreshToken")
    interval: int = Field(default=30, ge=1)


class SpotifySource(AbstractSource):
    """Activity source polling Spotify's recently-played endpoint."""

    display_name = "Spotify"

    def __init__(
        self,
        name: str,
        config: Mapping[str, Any] | None = None,
        clients: list[str] | None = None,
        *,
        local_url: str,
        config_dir: Path | str,
        http_client: httpx.AsyncClient | None = None,
        http_settings: HttpSettings | None = None,
    ) -> None:
        super().__init__(
            SourceType.SPOTIFY.value,
            name,
            config,
            clients,
            http_client=http_client,
            http_settings=http_settings,
        )
        self.settings = self._parse_config(SpotifyData)
        self.redirect_uri = self.settings.redirect_uri or f"{local_url.rstrip('/')}/callback"
        self.credentials_path = Path(config_dir) / f"currentCreds-{name}.json"
        self.access_token = self.settings.access_token
        self.refresh_token = self.settings.refresh_token
        self.requires_auth = True

    async def initialize(self) -> bool:
        cached = await self._load_credentials(self.credentials_path)
        self.access_token = cached.get("token", self.access_token)
        self.refresh_token = cached.get("refreshToken", self.refresh_token)
        if self.access_token is None and self.refresh_token is None:
            self.logger.warning(
                "No access or refresh token found; user must authorize at %s", self.redirect_uri
            )
        self.initialized = True
        return True

    async def _refresh(self) -> bool:
        if not self.refresh_token:
            return False
        client = await self._get_client()
        response = await client.post(
            SPOTIFY_TOKEN_URL,
            data={"grant_type": "refresh_token", "refresh_token": self.refresh_token},
            auth=(self.settings.client_id, self.settings.client_secret),
        )
        if response.status_code != 200:
            self.logger.warning("Token refresh rejected (HTTP %d)", response.status_code)
            return False
        body = response.json()
        self.access_token = body["access_token"]
        self.refresh_token = body.get("refresh_token", self.refresh_token)
        await write_json(
            self.credentials_path,
            {"token": self.access_token, "refreshToken": self.refresh_token},
        )
        self.logger.info("Refreshed access token")
        return True

    async def _fetch_profile(self) -> httpx.Response:
        client = await self._get_client()
        return await client.get(
            f"{SPOTIFY_API_URL}/me",
            headers={"Authorization": f"Bearer {self.access_token}"},
        )

    async def _check_auth(self) -> AuthResult:
        if self.access_token is None:
            if not await self._refresh():
                return AuthResult.failed(
                    f"No access token, user must authorize at {self.redirect_uri}"
                )

        response = await self._fetch_profile()
        if response.status_code == 401 and await self._refresh():
            response = await self._fetch_profile()

        if response.status_code != 200:
            return AuthResult.failed(f"Spotify rejected the access token (HTTP {response.status_code})")
        return AuthResult.authenticated()

    async def test_connection(self) -> bool:
        try:
            client = await self._get_client()
            await client.get(SPOTIFY_API_URL)
        except httpx.HTTPError as e:
            self.logger.error("Could not reach Spotify API: %s", e)
            return False
        return True
