"""Synthesizes single-user source entries from environment variables.

Hey future me - the environment is passed in as a plain mapping (a snapshot),
NOT read from os.environ in here. That keeps a resolution pass a pure function
of (files, env snapshot) and lets tests hand in a dict instead of monkeypatching
the process environment.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from scrobblehub.domain.entities import (
    DEFAULT_SOURCE_NAME,
    ENV_ORIGIN,
    ConfigMode,
    ConfigureAs,
    SourceConfigEntry,
    SourceType,
)

logger = logging.getLogger(__name__)

# data key -> env variables, first non-empty one wins (later ones are fallbacks)
ENV_VARIABLES: dict[SourceType, dict[str, tuple[str, ...]]] = {
    SourceType.SPOTIFY: {
        "accessToken": ("SPOTIFY_ACCESS_TOKEN",),
        "clientId": ("SPOTIFY_CLIENT_ID",),
        "clientSecret": ("SPOTIFY_CLIENT_SECRET",),
        "redirectUri": ("SPOTIFY_REDIRECT_URI",),
        "refreshToken": ("SPOTIFY_REFRESH_TOKEN",),
    },
    SourceType.TAUTULLI: {
        "user": ("TAUTULLI_USER", "PLEX_USER"),
    },
    SourceType.PLEX: {
        "user": ("PLEX_USER",),
    },
    SourceType.SUBSONIC: {
        "user": ("SUBSONIC_USER",),
        "password": ("SUBSONIC_PASSWORD",),
        "url": ("SUBSONIC_URL",),
    },
    SourceType.JELLYFIN: {
        "user": ("JELLYFIN_USER",),
        "server": ("JELLYFIN_SERVER",),
    },
    SourceType.DEEZER: {
        "clientId": ("DEEZER_APP_ID",),
        "clientSecret": ("DEEZER_SECRET_KEY",),
        "redirectUri": ("DEEZER_REDIRECT_URI",),
        "accessToken": ("DEEZER_ACCESS_TOKEN",),
    },
    SourceType.APPLE: {
        "key": ("APPLE_KEY",),
        "keyId": ("APPLE_KEY_ID",),
        "teamId": ("APPLE_TEAM_ID",),
        "endpoint": ("APPLE_ENDPOINT",),
        "endpointAuth": ("APPLE_ENDPOINT_AUTH",),
    },
}

# Sane default for lastfm is that users scrobble TO it, not FROM it
DEFAULT_CONFIGURE_AS: dict[SourceType, ConfigureAs] = {
    SourceType.LASTFM: ConfigureAs.CLIENT,
}


def default_configure_as(source_type: SourceType | str | None) -> str:
    """Role assumed for entries of ``source_type`` that don't set configureAs."""
    parsed = SourceType.parse(source_type)
    if parsed is None:
        return ConfigureAs.SOURCE.value
    return DEFAULT_CONFIGURE_AS.get(parsed, ConfigureAs.SOURCE).value


def _lookup(env: Mapping[str, str], names: tuple[str, ...]) -> str | None:
    if len(names) == 1:
        # Set-but-empty still counts as set
        return env.get(names[0])
    # Fallback chain (A || B): empty values count as unset
    return next((env[name] for name in names if env.get(name)), None)


class EnvConfigBuilder:
    """Builds single-user entries from an environment snapshot."""

    def __init__(self, env: Mapping[str, str]) -> None:
        self.env = dict(env)

    def build(self, source_type: SourceType) -> SourceConfigEntry | None:
        """
        Synthesize the env entry for one type.

        Returns:
            Entry with source "ENV", or None if the type has no env support or
            none of its variables are set
        """
        variables = ENV_VARIABLES.get(source_type)
        if variables is None:
            return None

        data = {
            key: value
            for key, names in variables.items()
            if (value := _lookup(self.env, names)) is not None
        }
        if not data:
            return None

        logger.debug("Building %s source config from environment variables", source_type.value)
        return SourceConfigEntry(
            type=source_type.value,
            name=DEFAULT_SOURCE_NAME,
            source=ENV_ORIGIN,
            mode=ConfigMode.SINGLE.value,
            configure_as=ConfigureAs.SOURCE.value,
            data=data,
        )

    def build_all(self, source_types: Iterable[SourceType]) -> dict[SourceType, SourceConfigEntry]:
        """Env entries keyed by type, for every type that produced one."""
        entries: dict[SourceType, SourceConfigEntry] = {}
        for source_type in source_types:
            entry = self.build(source_type)
            if entry is not None:
                entries[source_type] = entry
        return entries
