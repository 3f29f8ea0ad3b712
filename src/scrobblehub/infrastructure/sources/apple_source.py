"""Apple Music source.

Hey future me - Apple needs TWO tokens: a developer token we sign ourselves from
key/keyId/teamId, and a Music User Token the user grants through MusicKit JS on
`endpoint`. The user token is cached in currentCreds-apple-<name>.json. `key` may
be the .p8 contents OR a path to the .p8 file (relative paths resolve against
the config dir) - a path that doesn't exist fails initialization.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from scrobblehub.domain.entities import AuthResult, SourceType
from scrobblehub.infrastructure.sources.base import AbstractSource

PEM_MARKER = "-----BEGIN"


class AppleData(BaseModel):
    """Settings block of an apple config entry."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    key: str
    key_id: str = Field(alias="keyId")
    team_id: str = Field(alias="teamId")
    endpoint: str | None = None
    endpoint_auth: str | None = Field(default=None, alias="endpointAuth")


class AppleSource(AbstractSource):
    """Activity source reading Apple Music recently played."""

    display_name = "Apple Music"

    def __init__(
        self,
        name: str,
        config: Mapping[str, Any] | None = None,
        clients: list[str] | None = None,
        *,
        config_dir: Path | str,
        **kwargs: Any,
    ) -> None:
        super().__init__(SourceType.APPLE.value, name, config, clients, **kwargs)
        self.settings = self._parse_config(AppleData)
        self.config_dir = Path(config_dir)
        self.credentials_path = self.config_dir / f"currentCreds-apple-{name}.json"
        self.private_key: str | None = None
        self.user_token: str | None = None
        self.requires_auth = True

    async def _resolve_key(self) -> str | None:
        key = self.settings.key
        if PEM_MARKER in key:
            return key
        path = Path(key)
        if not path.is_absolute():
            path = self.config_dir / path
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except OSError as e:
            self.logger.error("Could not read Apple private key at %s: %s", path, e)
            return None

    async def initialize(self) -> bool:
        self.private_key = await self._resolve_key()
        if self.private_key is None:
            return False
        cached = await self._load_credentials(self.credentials_path)
        self.user_token = cached.get("userToken")
        self.initialized = True
        return True

    async def _check_auth(self) -> AuthResult:
        if not self.user_token:
            where = self.settings.endpoint or "the configured MusicKit endpoint"
            return AuthResult.failed(f"No Music User Token, user must authorize at {where}")
        return AuthResult.authenticated()
