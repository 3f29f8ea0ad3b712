"""
Activity Source Interface for scrobblehub.

Hey future me – das ist der Vertrag, den JEDE Source (Spotify, Subsonic, Plex,
...) erfüllt! Die Resolution-Pipeline kennt nur dieses Interface, nie die
konkreten Klassen.

Lifecycle, in dieser Reihenfolge:
1. __init__       – nur Config validieren, KEINE Netzwerk-Calls!
2. initialize()   – nur wenn initialized == False; False => Source fliegt raus
3. test_auth()    – nur wenn requires_auth und nicht authed; Fehlschlag => Source
                    bleibt registriert, aber un-authed
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from scrobblehub.domain.entities import AuthResult


class ISource(ABC):
    """Abstract base class for all activity sources."""

    type: str
    name: str
    config: Mapping[str, Any]
    clients: list[str]
    initialized: bool
    requires_auth: bool
    authed: bool

    @abstractmethod
    async def initialize(self) -> bool:
        """
        Prepare the source for activity capture.

        Returns:
            True if the source is ready, False otherwise
        """
        ...

    @abstractmethod
    async def test_auth(self) -> AuthResult:
        """
        Verify the source's credentials against its service.

        Returns:
            AuthResult describing the outcome
        """
        ...

    @abstractmethod
    async def test_connection(self) -> bool:
        """
        Lightweight reachability check. Must not raise.

        Returns:
            True if the service answered
        """
        ...

    @abstractmethod
    async def call_api(
        self,
        method: str,
        url: str,
        params: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> Any:
        """
        Perform one remote call against the source's service.

        Args:
            method: HTTP method
            url: Absolute URL
            params: Extra query parameters
            **kwargs: Passed through to the HTTP client

        Returns:
            Decoded response payload

        Raises:
            ExternalServiceError: If the service reports a failure
        """
        ...
