"""
Source Factory: maps a source type tag to the construction of its adapter.

Hey future me – neuer Source-Typ = EIN Eintrag in DEFAULT_CONSTRUCTORS (plus
SourceType Enum-Wert). Keine if/elif-Ketten irgendwo anders in der Pipeline!

Jeder Constructor bekommt name, effective data, clients und den SourceContext,
nimmt sich daraus aber nur was er braucht:

    spotify / deezer  -> local_url (OAuth callback), config_dir (token cache)
    lastfm / apple    -> config_dir (session / key files)
    subsonic / ...    -> nur HTTP
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx

from scrobblehub.config import HttpSettings
from scrobblehub.domain.entities import SourceType
from scrobblehub.domain.exceptions import UnknownSourceTypeError
from scrobblehub.domain.ports.source import ISource
from scrobblehub.infrastructure.sources.apple_source import AppleSource
from scrobblehub.infrastructure.sources.deezer_source import DeezerSource
from scrobblehub.infrastructure.sources.jellyfin_source import JellyfinSource
from scrobblehub.infrastructure.sources.lastfm_source import LastfmSource
from scrobblehub.infrastructure.sources.plex_source import PlexSource, TautulliSource
from scrobblehub.infrastructure.sources.spotify_source import SpotifySource
from scrobblehub.infrastructure.sources.subsonic_source import SubsonicSource


@dataclass(frozen=True)
class SourceContext:
    """Shared process context handed to source constructors."""

    local_url: str
    config_dir: Path
    http_client: httpx.AsyncClient | None = None
    http_settings: HttpSettings | None = None

    @property
    def http(self) -> dict[str, Any]:
        return {"http_client": self.http_client, "http_settings": self.http_settings}


SourceConstructor = Callable[[str, dict[str, Any], list[str], SourceContext], ISource]


def _spotify(name: str, data: dict[str, Any], clients: list[str], ctx: SourceContext) -> ISource:
    return SpotifySource(
        name, data, clients, local_url=ctx.local_url, config_dir=ctx.config_dir, **ctx.http
    )


def _deezer(name: str, data: dict[str, Any], clients: list[str], ctx: SourceContext) -> ISource:
    return DeezerSource(
        name, data, clients, local_url=ctx.local_url, config_dir=ctx.config_dir, **ctx.http
    )


def _lastfm(name: str, data: dict[str, Any], clients: list[str], ctx: SourceContext) -> ISource:
    return LastfmSource(name, data, clients, config_dir=ctx.config_dir, **ctx.http)


def _apple(name: str, data: dict[str, Any], clients: list[str], ctx: SourceContext) -> ISource:
    return AppleSource(name, data, clients, config_dir=ctx.config_dir, **ctx.http)


def _subsonic(name: str, data: dict[str, Any], clients: list[str], ctx: SourceContext) -> ISource:
    return SubsonicSource(name, data, clients, **ctx.http)


def _plex(name: str, data: dict[str, Any], clients: list[str], ctx: SourceContext) -> ISource:
    return PlexSource(name, data, clients)


def _tautulli(name: str, data: dict[str, Any], clients: list[str], ctx: SourceContext) -> ISource:
    return TautulliSource(name, data, clients)


def _jellyfin(name: str, data: dict[str, Any], clients: list[str], ctx: SourceContext) -> ISource:
    return JellyfinSource(name, data, clients)


DEFAULT_CONSTRUCTORS: dict[SourceType, SourceConstructor] = {
    SourceType.SPOTIFY: _spotify,
    SourceType.PLEX: _plex,
    SourceType.TAUTULLI: _tautulli,
    SourceType.SUBSONIC: _subsonic,
    SourceType.JELLYFIN: _jellyfin,
    SourceType.LASTFM: _lastfm,
    SourceType.DEEZER: _deezer,
    SourceType.APPLE: _apple,
}


class SourceFactory:
    """Builds source adapters from resolved config."""

    def __init__(
        self,
        context: SourceContext,
        constructors: Mapping[SourceType, SourceConstructor] | None = None,
    ) -> None:
        self.context = context
        self._constructors: dict[SourceType, SourceConstructor] = dict(
            DEFAULT_CONSTRUCTORS if constructors is None else constructors
        )

    def register(self, source_type: SourceType, constructor: SourceConstructor) -> None:
        """Add or replace the constructor for a source type."""
        self._constructors[source_type] = constructor

    def supports(self, source_type: Any) -> bool:
        parsed = SourceType.parse(source_type)
        return parsed is not None and parsed in self._constructors

    def create(
        self,
        source_type: Any,
        name: str,
        data: dict[str, Any],
        clients: list[str] | None = None,
    ) -> ISource:
        """
        Construct the adapter for ``source_type``.

        Raises:
            UnknownSourceTypeError: No constructor for this tag
            ConstructionError: The adapter rejected its config
        """
        parsed = SourceType.parse(source_type)
        constructor = self._constructors.get(parsed) if parsed is not None else None
        if constructor is None:
            raise UnknownSourceTypeError(source_type)
        return constructor(name, data, list(clients or []), self.context)
