"""Domain entities for source configuration and lifecycle state."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from scrobblehub.domain.exceptions import StructuralValidationError

DEFAULT_SOURCE_NAME = "unnamed"
ENV_ORIGIN = "ENV"


class SourceType(str, Enum):
    """
    Supported activity source types.

    Hey future me – jeder neue Source-Typ braucht einen Enum-Wert hier UND
    einen Eintrag in der SourceFactory! Die Reihenfolge hier ist auch die
    Reihenfolge in der die per-type JSON files gelesen werden.
    """

    SPOTIFY = "spotify"
    PLEX = "plex"
    TAUTULLI = "tautulli"
    SUBSONIC = "subsonic"
    JELLYFIN = "jellyfin"
    LASTFM = "lastfm"
    DEEZER = "deezer"
    APPLE = "apple"

    @classmethod
    def parse(cls, value: Any) -> SourceType | None:
        """Return the matching member or None for unknown tags."""
        try:
            return cls(value)
        except ValueError:
            return None


class ConfigureAs(str, Enum):
    """Role a config entry plays: activity source or downstream scrobble client."""

    SOURCE = "source"
    CLIENT = "client"


class ConfigMode(str, Enum):
    """Single-user (implicit, usually env based) vs multi-user (named) config."""

    SINGLE = "single"
    MULTI = "multi"


# Hey future me – SourceConfigEntry ist IMMUTABLE (frozen)! Renaming und
# default-merging erzeugen NEUE Instanzen via with_name()/with_origin(). So
# bleiben merge/validate/resolve Schritte unabhängig testbar und niemand
# verändert ein Entry unter den Füßen eines anderen Schritts.
@dataclass(frozen=True)
class SourceConfigEntry:
    """One unit of configuration describing a single source instance.

    ``type``/``name``/``data`` stay loosely typed on purpose: entries are built
    from arbitrary JSON and environment input, and validation decides whether
    they are usable.
    """

    type: str | None
    name: str = DEFAULT_SOURCE_NAME
    source: str = "unknown"
    mode: str | None = None
    configure_as: str = ConfigureAs.SOURCE.value
    data: Mapping[str, Any] | None = None
    clients: tuple[str, ...] = ()
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(
        cls,
        raw: Mapping[str, Any],
        *,
        source: str | None = None,
        type_: str | None = None,
        configure_as: str | None = None,
    ) -> SourceConfigEntry:
        """Build an entry from a raw JSON/env mapping.

        Keyword overrides win over values found in ``raw``.

        Args:
            raw: Parsed config object
            source: Origin label (file path or "ENV")
            type_: Source type to inject (per-type files)
            configure_as: Role to force (combined config file)

        Returns:
            New SourceConfigEntry

        Raises:
            StructuralValidationError: If ``clients`` is neither a string nor an array
        """
        known = {"type", "name", "source", "mode", "configureAs", "data", "clients"}
        raw_clients = raw.get("clients") or []
        if isinstance(raw_clients, str):
            raw_clients = [raw_clients]
        elif not isinstance(raw_clients, (list, tuple)):
            raise StructuralValidationError(
                "'clients' must be a string or an array of strings",
                ["'clients' must be a string or an array of strings"],
            )
        name = raw.get("name")
        return cls(
            type=type_ if type_ is not None else raw.get("type"),
            name=DEFAULT_SOURCE_NAME if name is None else name,
            source=source if source is not None else raw.get("source", "unknown"),
            mode=raw.get("mode"),
            configure_as=(
                configure_as
                if configure_as is not None
                else raw.get("configureAs", ConfigureAs.SOURCE.value)
            ),
            data=raw.get("data"),
            clients=tuple(str(c) for c in raw_clients),
            extra={k: v for k, v in raw.items() if k not in known},
        )

    def with_name(self, name: str) -> SourceConfigEntry:
        """Return a copy carrying a different name."""
        return replace(self, name=name)

    def effective_data(self, defaults: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Merge type-wide defaults under this entry's data (entry keys win)."""
        return {**(defaults or {}), **(self.data or {})}

    @property
    def label(self) -> str:
        """Short human description used in log lines."""
        return (
            f"Config object from {self.source} with name "
            f"[{self.name or DEFAULT_SOURCE_NAME}] of type [{self.type or 'unknown'}]"
        )


class AuthOutcome(str, Enum):
    """Result categories of an adapter credential check."""

    AUTHENTICATED = "authenticated"
    FAILED = "failed"
    NOT_APPLICABLE = "not_applicable"


# Hey future me – ein fehlgeschlagener Auth-Check ist ROUTINE (abgelaufenes
# Token, falsches Passwort), keine Ausnahme! Adapter geben daher ein AuthResult
# zurück statt zu werfen. Der Lifecycle fängt trotzdem Exceptions ab und macht
# daraus AuthResult.failed().
@dataclass(frozen=True)
class AuthResult:
    """Outcome of ``test_auth`` on an adapter."""

    outcome: AuthOutcome
    reason: str | None = None

    @classmethod
    def authenticated(cls) -> AuthResult:
        return cls(AuthOutcome.AUTHENTICATED)

    @classmethod
    def failed(cls, reason: str | None = None) -> AuthResult:
        return cls(AuthOutcome.FAILED, reason)

    @classmethod
    def not_applicable(cls) -> AuthResult:
        return cls(AuthOutcome.NOT_APPLICABLE)

    @property
    def ok(self) -> bool:
        """True unless the check actually failed."""
        return self.outcome is not AuthOutcome.FAILED


class BuildStatus(str, Enum):
    """What happened to one resolved entry during the lifecycle."""

    REGISTERED = "registered"
    AUTH_FAILED = "auth_failed"  # registered, but un-authed
    INVALID = "invalid"
    UNKNOWN_TYPE = "unknown_type"
    CONSTRUCTION_FAILED = "construction_failed"
    INIT_FAILED = "init_failed"

    @property
    def is_registered(self) -> bool:
        return self in (BuildStatus.REGISTERED, BuildStatus.AUTH_FAILED)


@dataclass(frozen=True)
class SourceBuildResult:
    """Per-entry outcome of a resolution pass."""

    type: str | None
    name: str
    source: str
    status: BuildStatus
    error: str | None = None


__all__ = [
    "DEFAULT_SOURCE_NAME",
    "ENV_ORIGIN",
    "AuthOutcome",
    "AuthResult",
    "BuildStatus",
    "ConfigMode",
    "ConfigureAs",
    "SourceBuildResult",
    "SourceConfigEntry",
    "SourceType",
]
