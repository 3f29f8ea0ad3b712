"""Resolution pass: config files + env → validated, uniquely named, live sources.

Hey future me - this is the ONE entry point for building sources at startup:

    sources = ScrobbleSources(local_url, config_dir, env=dict(os.environ))
    await sources.build_sources_from_config()
    sources.get_by_type("subsonic")

Pipeline:
    ConfigLoader + EnvConfigBuilder
        → ConfigMerger (origin/role tagging, pass-1 object check)
        → ConfigValidator.filter_minimal (type + data present)
        → NameResolver (unique names per type)
        → SourceLifecycle.process per entry (pass-2 validation, factory, init, auth)
        → SourceRegistry

Entries are processed strictly one after another so log order follows config
order. Only an unparsable config.json aborts the pass (ConfigParseError).
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

import httpx

from scrobblehub.application.config.env_builder import EnvConfigBuilder
from scrobblehub.application.config.loader import ConfigLoader
from scrobblehub.application.config.merger import ConfigMerger
from scrobblehub.application.config.name_resolver import NameResolver
from scrobblehub.application.config.validator import ConfigValidator
from scrobblehub.application.services.source_lifecycle import SourceLifecycle
from scrobblehub.config import HttpSettings
from scrobblehub.domain.entities import SourceBuildResult, SourceConfigEntry, SourceType
from scrobblehub.domain.ports.source import ISource
from scrobblehub.infrastructure.observability.log_messages import LogMessages
from scrobblehub.infrastructure.sources.factory import SourceContext, SourceFactory
from scrobblehub.infrastructure.sources.registry import SourceRegistry

logger = logging.getLogger(__name__)


class ScrobbleSources:
    """Builds and holds the activity sources of this process."""

    def __init__(
        self,
        local_url: str,
        config_dir: Path | str | None = None,
        env: Mapping[str, str] | None = None,
        *,
        registry: SourceRegistry | None = None,
        factory: SourceFactory | None = None,
        http_client: httpx.AsyncClient | None = None,
        http_settings: HttpSettings | None = None,
        source_types: Iterable[SourceType] = tuple(SourceType),
    ) -> None:
        self.local_url = local_url
        self.config_dir = Path(config_dir) if config_dir is not None else Path.cwd()
        self.source_types = tuple(source_types)
        self.registry = registry or SourceRegistry()
        self.factory = factory or SourceFactory(
            SourceContext(
                local_url=local_url,
                config_dir=self.config_dir,
                http_client=http_client,
                http_settings=http_settings,
            )
        )
        self.loader = ConfigLoader(self.config_dir)
        self.env_builder = EnvConfigBuilder(dict(os.environ) if env is None else env)
        self.merger = ConfigMerger()
        self.validator = ConfigValidator()
        self.resolver = NameResolver()
        self.lifecycle = SourceLifecycle(self.factory, self.registry)

    @property
    def sources(self) -> list[ISource]:
        return self.registry.all()

    def get_by_name(self, name: str) -> ISource | None:
        return self.registry.get_by_name(name)

    def get_by_type(self, source_type: str) -> list[ISource]:
        return self.registry.get_by_type(source_type)

    def get_by_name_and_type(self, name: str, source_type: str) -> ISource | None:
        return self.registry.get_by_name_and_type(name, source_type)

    async def resolve_configs(
        self, additional_configs: Sequence[Mapping[str, Any] | SourceConfigEntry] = ()
    ) -> tuple[list[SourceConfigEntry], dict[str, Any]]:
        """
        Discover, merge, validate and de-duplicate config entries.

        Args:
            additional_configs: Entries supplied by the caller

        Returns:
            (resolved entries, sourceDefaults)

        Raises:
            ConfigParseError: If config.json is unparsable
        """
        combined = await self.loader.load_combined()
        type_files = await self.loader.load_type_files(self.source_types)
        env_entries = self.env_builder.build_all(self.source_types)

        merged = self.merger.merge(
            external=additional_configs,
            combined=combined,
            type_files=type_files,
            env_entries=env_entries,
            source_types=self.source_types,
        )
        valid = self.validator.filter_minimal(merged)
        resolved = self.resolver.resolve(valid)
        defaults = dict(combined.source_defaults) if combined is not None else {}
        return resolved, defaults

    async def build_sources_from_config(
        self, additional_configs: Sequence[Mapping[str, Any] | SourceConfigEntry] = ()
    ) -> list[SourceBuildResult]:
        """
        Run one full resolution pass and register every usable source.

        Args:
            additional_configs: Entries supplied by the caller

        Returns:
            One SourceBuildResult per resolved entry, in processing order

        Raises:
            ConfigParseError: If config.json is unparsable
        """
        resolved, defaults = await self.resolve_configs(additional_configs)

        results: list[SourceBuildResult] = []
        for entry in resolved:
            results.append(await self.lifecycle.process(entry, defaults))

        registered = sum(1 for r in results if r.status.is_registered)
        logger.info(LogMessages.sources_built(registered, len(results)))
        return results

    async def add_source(
        self,
        config: Mapping[str, Any] | SourceConfigEntry,
        defaults: Mapping[str, Any] | None = None,
    ) -> SourceBuildResult:
        """
        Build and register a single source outside of a resolution pass.

        Raises:
            StructuralValidationError, UnknownSourceTypeError, ConstructionError
        """
        entry = (
            config
            if isinstance(config, SourceConfigEntry)
            else SourceConfigEntry.from_mapping(config)
        )
        return await self.lifecycle.add_source(entry, defaults)
