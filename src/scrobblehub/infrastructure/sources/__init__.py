"""
scrobblehub Source Adapters.

Architektur:
    ScrobbleSources (resolution pass)
           ↓
    SourceFactory.create("subsonic", ...)
           ↓
    SubsonicSource (implements ISource via AbstractSource)
           ↓
    httpx (HttpClientPool oder injizierter Client)
"""

from scrobblehub.infrastructure.sources.apple_source import AppleSource
from scrobblehub.infrastructure.sources.base import AbstractSource
from scrobblehub.infrastructure.sources.deezer_source import DeezerSource
from scrobblehub.infrastructure.sources.factory import (
    DEFAULT_CONSTRUCTORS,
    SourceContext,
    SourceFactory,
)
from scrobblehub.infrastructure.sources.jellyfin_source import JellyfinSource
from scrobblehub.infrastructure.sources.lastfm_source import LastfmSource
from scrobblehub.infrastructure.sources.plex_source import PlexSource, TautulliSource
from scrobblehub.infrastructure.sources.registry import SourceRegistry
from scrobblehub.infrastructure.sources.spotify_source import SpotifySource
from scrobblehub.infrastructure.sources.subsonic_source import (
    SubsonicApiError,
    SubsonicSource,
)

__all__ = [
    # Base
    "AbstractSource",
    # Adapters
    "AppleSource",
    "DeezerSource",
    "JellyfinSource",
    "LastfmSource",
    "PlexSource",
    "SpotifySource",
    "SubsonicApiError",
    "SubsonicSource",
    "TautulliSource",
    # Construction / registry
    "DEFAULT_CONSTRUCTORS",
    "SourceContext",
    "SourceFactory",
    "SourceRegistry",
]
