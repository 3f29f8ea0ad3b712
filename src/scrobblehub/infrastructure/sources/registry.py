"""
Source Registry for live activity sources.

Hey future me – im Gegensatz zur alten PluginRegistry (ein Plugin pro Typ) kann
es hier BELIEBIG viele Sources pro Typ geben (zwei Subsonic-Server, drei
Spotify-User...). Die Registry ist append-only: was einmal drin ist, bleibt für
die Prozess-Lebenszeit drin. Eine Source die nicht initialisiert werden konnte
kommt gar nicht erst rein.

Verwendung:
    registry = SourceRegistry()
    registry.add(subsonic_source)

    registry.get_by_name("home")
    registry.get_by_type("subsonic")
    registry.get_by_name_and_type("home", "subsonic")
"""

from collections.abc import Iterator

from scrobblehub.domain.ports.source import ISource


class SourceRegistry:
    """Ordered, append-only collection of live sources."""

    def __init__(self) -> None:
        """Initialize empty registry."""
        self._sources: list[ISource] = []

    def add(self, source: ISource) -> None:
        """
        Append a source.

        Args:
            source: Initialized source instance
        """
        self._sources.append(source)

    def get_by_name(self, name: str) -> ISource | None:
        """
        First source with this name (any type).

        Args:
            name: Source name

        Returns:
            Source or None if nothing matches
        """
        return next((s for s in self._sources if s.name == name), None)

    def get_by_type(self, source_type: str) -> list[ISource]:
        """All sources of one type, in registration order."""
        return [s for s in self._sources if s.type == source_type]

    def get_by_name_and_type(self, name: str, source_type: str) -> ISource | None:
        """The source identified by (name, type)."""
        return next(
            (s for s in self._sources if s.name == name and s.type == source_type),
            None,
        )

    def all(self) -> list[ISource]:
        """Snapshot of all sources in registration order."""
        return list(self._sources)

    def __iter__(self) -> Iterator[ISource]:
        return iter(list(self._sources))

    def __len__(self) -> int:
        return len(self._sources)
