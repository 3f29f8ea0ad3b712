"""Base class shared by all activity source adapters."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from scrobblehub.config import HttpSettings
from scrobblehub.domain.entities import AuthOutcome, AuthResult
from scrobblehub.domain.exceptions import ConstructionError
from scrobblehub.domain.ports.source import ISource
from scrobblehub.infrastructure.integrations.http_pool import HttpClientPool
from scrobblehub.infrastructure.json_files import read_json
from scrobblehub.infrastructure.observability.logging import get_source_logger

M = TypeVar("M", bound=BaseModel)


class AbstractSource(ISource):
    """
    Common plumbing for activity sources.

    Hey future me – Subklassen überschreiben nur was sie brauchen:
    - __init__: self.settings = self._parse_config(XyzData) und Flags setzen
    - initialize(): Credentials-Files laden etc.
    - _check_auth(): Credentials prüfen, AuthResult zurückgeben
    test_auth() ist ein Template: es ruft _check_auth() und pflegt self.authed.
    """

    display_name: str = "Source"

    def __init__(
        self,
        source_type: str,
        name: str,
        config: Mapping[str, Any] | None = None,
        clients: list[str] | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        http_settings: HttpSettings | None = None,
    ) -> None:
        self.type = source_type
        self.name = name
        self.config = dict(config or {})
        self.clients = list(clients or [])
        self.initialized = False
        self.requires_auth = False
        self.authed = False
        self.logger = get_source_logger(type(self).__module__, source_type, name)
        self._http_client = http_client
        self._http_settings = http_settings

    def __repr__(self) -> str:
        return f"<{type(self).__name__} type={self.type!r} name={self.name!r}>"

    def _parse_config(self, model: type[M]) -> M:
        """Validate ``self.config`` against a pydantic model.

        Raises:
            ConstructionError: Naming every missing or invalid field
        """
        try:
            return model.model_validate(self.config)
        except ValidationError as e:
            missing = [
                ".".join(str(part) for part in err["loc"])
                for err in e.errors()
                if err["type"] == "missing"
            ]
            if missing:
                fields = ", ".join(f"'{field}'" for field in missing)
                verb = "is" if len(missing) == 1 else "are"
                message = f"Cannot setup {self.display_name} source, {fields} {verb} not defined"
            else:
                problems = "; ".join(
                    f"'{'.'.join(str(p) for p in err['loc'])}' {err['msg']}" for err in e.errors()
                )
                message = f"Cannot setup {self.display_name} source, invalid config: {problems}"
            raise ConstructionError(self.type, message) from e

    async def _get_client(self) -> httpx.AsyncClient:
        """Injected client if any, otherwise the shared pool client."""
        if self._http_client is not None:
            return self._http_client
        return await HttpClientPool.get_client(self._http_settings)

    async def _load_credentials(self, path: Path) -> dict[str, Any]:
        """Read a cached credentials file; missing or broken files yield {}."""
        try:
            data = await read_json(path)
        except FileNotFoundError:
            self.logger.debug("No cached credentials at %s", path)
            return {}
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            self.logger.warning("Cached credentials at %s could not be read: %s", path, e)
            return {}
        if not isinstance(data, dict):
            self.logger.warning("Cached credentials at %s are not an object, ignoring", path)
            return {}
        return data

    async def initialize(self) -> bool:
        self.initialized = True
        return True

    async def test_auth(self) -> AuthResult:
        result = await self._check_auth()
        if result.outcome is AuthOutcome.AUTHENTICATED:
            self.authed = True
        elif result.outcome is AuthOutcome.FAILED:
            self.authed = False
        return result

    async def _check_auth(self) -> AuthResult:
        return AuthResult.not_applicable()

    async def test_connection(self) -> bool:
        return True

    async def call_api(
        self,
        method: str,
        url: str,
        params: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> Any:
        client = await self._get_client()
        response = await client.request(method, url, params=dict(params or {}), **kwargs)
        response.raise_for_status()
        return response.json()


def ensure_list(value: Any) -> list[str]:
    """Normalise a str-or-list filter value to a list of strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, (list, tuple)):
        # ValueError so pydantic reports it as a field error
        raise ValueError("must be a string or a list of strings")
    return [str(v) for v in value]

