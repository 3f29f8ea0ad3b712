"""Plex and Tautulli webhook sources.

Plex (and Tautulli, which forwards Plex events) PUSH activity to us via webhooks,
so there is nothing to poll and nothing to authenticate. These sources are
ready as soon as they are constructed; the only work is normalising the
user/library/server filters that decide which webhook payloads are accepted.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from scrobblehub.domain.entities import SourceType
from scrobblehub.infrastructure.sources.base import AbstractSource, ensure_list


class PlexData(BaseModel):
    """Filters applied to incoming Plex webhook payloads."""

    model_config = ConfigDict(extra="allow")

    user: list[str] = []
    libraries: list[str] = []
    servers: list[str] = []

    @field_validator("user", "libraries", "servers", mode="before")
    @classmethod
    def _as_list(cls, value: Any) -> list[str]:
        return ensure_list(value)


class PlexSource(AbstractSource):
    """Activity source fed by Plex webhooks."""

    display_name = "Plex"
    source_type = SourceType.PLEX

    def __init__(
        self,
        name: str,
        config: Mapping[str, Any] | None = None,
        clients: list[str] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(self.source_type.value, name, config, clients, **kwargs)
        self.settings = self._parse_config(PlexData)
        self.users = [u.lower() for u in self.settings.user]
        self.libraries = [lib.lower() for lib in self.settings.libraries]
        self.servers = [s.lower() for s in self.settings.servers]
        # Webhook ingress needs no setup step
        self.initialized = True

        if not self.users:
            self.logger.warning("Initializing, will scrobble all users")
        else:
            self.logger.info("Initializing, will scrobble for users: %s", ", ".join(self.users))

    def accepts(self, user: str | None, library: str | None = None, server: str | None = None) -> bool:
        """Check a webhook event against the configured filters."""
        if self.users and (user is None or user.lower() not in self.users):
            return False
        if self.libraries and (library is None or library.lower() not in self.libraries):
            return False
        if self.servers and (server is None or server.lower() not in self.servers):
            return False
        return True


class TautulliSource(PlexSource):
    """Activity source fed by Tautulli notification webhooks."""

    display_name = "Tautulli"
    source_type = SourceType.TAUTULLI
