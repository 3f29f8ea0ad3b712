"""Deezer listening-history source.

Hey future me - Deezer OAuth tokens DON'T refresh! They are issued with
offline_access and live until the user revokes them. The callback lands on
<local_url>/deezer/callback and the token is cached in
currentCreds-deezer-<name>.json.

Deezer also answers HTTP 200 with {"error": {...}} for bad tokens - check the
body, not just the status!
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from scrobblehub.config import HttpSettings
from scrobblehub.domain.entities import AuthResult, SourceType
from scrobblehub.infrastructure.sources.base import AbstractSource

DEEZER_API_URL = "https://api.deezer.com"


class DeezerData(BaseModel):
    """Settings block of a deezer config entry."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    client_id: str = Field(alias="clientId")
    client_secret: str = Field(alias="clientSecret")
    redirect_uri: str | None = Field(default=None, alias="redirectUri")
    access_token: str | None = Field(default=None, alias="accessToken")
    interval: int = Field(default=60, ge=1)


class DeezerSource(AbstractSource):
    """Activity source polling Deezer's listening history."""

    display_name = "Deezer"

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
            SourceType.DEEZER.value,
            name,
            config,
            clients,
            http_client=http_client,
            http_settings=http_settings,
        )
        self.settings = self._parse_config(DeezerData)
        self.redirect_uri = (
            self.settings.redirect_uri or f"{local_url.rstrip('/')}/deezer/callback"
        )
        self.credentials_path = Path(config_dir) / f"currentCreds-deezer-{name}.json"
        self.access_token = self.settings.access_token
        self.requires_auth = True

    async def initialize(self) -> bool:
        cached = await self._load_credentials(self.credentials_path)
        self.access_token = cached.get("accessToken", self.access_token)
        self.initialized = True
        return True

    async def _check_auth(self) -> AuthResult:
        if not self.access_token:
            return AuthResult.failed(
                f"No access token, user must authorize at {self.redirect_uri}"
            )
        try:
            body = await self.call_api(
                "GET", f"{DEEZER_API_URL}/user/me", {"access_token": self.access_token}
            )
        except httpx.HTTPError as e:
            return AuthResult.failed(str(e))
        if isinstance(body, dict) and "error" in body:
            error = body["error"] or {}
            return AuthResult.failed(error.get("message", "Deezer rejected the access token"))
        return AuthResult.authenticated()
