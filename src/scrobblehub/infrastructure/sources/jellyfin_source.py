"""Jellyfin webhook source (events pushed by the Jellyfin webhook plugin)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from scrobblehub.domain.entities import SourceType
from scrobblehub.infrastructure.sources.base import AbstractSource, ensure_list


class JellyfinData(BaseModel):
    """Filters applied to incoming Jellyfin webhook payloads."""

    model_config = ConfigDict(extra="allow")

    user: list[str] = []
    server: list[str] = []

    @field_validator("user", "server", mode="before")
    @classmethod
    def _as_list(cls, value: Any) -> list[str]:
        return ensure_list(value)


class JellyfinSource(AbstractSource):
    """Activity source fed by Jellyfin webhooks."""

    display_name = "Jellyfin"

    def __init__(
        self,
        name: str,
        config: Mapping[str, Any] | None = None,
        clients: list[str] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(SourceType.JELLYFIN.value, name, config, clients, **kwargs)
        self.settings = self._parse_config(JellyfinData)
        self.users = [u.lower() for u in self.settings.user]
        self.servers = [s.lower() for s in self.settings.server]
        self.initialized = True

        if not self.users:
            self.logger.warning("Initializing, will scrobble all users")

    def accepts(self, user: str | None, server: str | None = None) -> bool:
        """Check a webhook event against the configured filters."""
        if self.users and (user is None or user.lower() not in self.users):
            return False
        if self.servers and (server is None or server.lower() not in self.servers):
            return False
        return True
