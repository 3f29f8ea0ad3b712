"""Reads combined and per-type JSON config documents from the config dir.

Hey future me - the two kinds of file fail DIFFERENTLY on purpose:
- config.json broken  -> ConfigParseError, the whole resolution pass stops
- <type>.json broken  -> FileReadError logged, only that type is skipped
A missing file is never an error.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from scrobblehub.domain.entities import DEFAULT_SOURCE_NAME, ConfigMode, SourceType
from scrobblehub.domain.exceptions import ConfigParseError, FileReadError
from scrobblehub.infrastructure.json_files import read_json
from scrobblehub.infrastructure.observability.log_messages import LogMessages

logger = logging.getLogger(__name__)

COMBINED_CONFIG_FILE = "config.json"


@dataclass(frozen=True)
class CombinedConfig:
    """Parsed config.json."""

    path: str
    sources: list[Any] = field(default_factory=list)
    source_defaults: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TypeConfigFile:
    """Parsed, shape-normalised <type>.json."""

    source_type: SourceType
    path: str
    entries: list[Any] = field(default_factory=list)


def normalize_type_document(document: Any, path: str) -> list[Any]:
    """
    Turn any accepted per-type document shape into a list of raw entries.

    Accepted shapes:
    - array of entries (current format)
    - object with a ``data`` field (legacy single entry)
    - any other object (legacy bare settings, wrapped as ``data``)

    Raises:
        FileReadError: For null or non-object/non-array documents
    """
    if isinstance(document, list):
        return document
    if document is None:
        raise FileReadError(path, "contained no data")
    if isinstance(document, Mapping):
        # backwards compatibility, assuming single-user mode
        logger.warning(LogMessages.config_deprecated_shape(path))
        if "data" in document:
            return [{"mode": ConfigMode.SINGLE.value, **document}]
        return [{"data": dict(document), "mode": ConfigMode.SINGLE.value, "name": DEFAULT_SOURCE_NAME}]
    raise FileReadError(
        path, "must contain an array of objects at the top level, will not parse configs from file"
    )


class ConfigLoader:
    """Locates and parses config documents in one directory."""

    def __init__(self, config_dir: Path | str) -> None:
        self.config_dir = Path(config_dir)

    def type_file_path(self, source_type: SourceType) -> Path:
        return self.config_dir / f"{source_type.value}.json"

    async def load_combined(self) -> CombinedConfig | None:
        """
        Read config.json.

        Returns:
            CombinedConfig, or None if the file does not exist

        Raises:
            ConfigParseError: If the document is not valid JSON or has the wrong shape
        """
        path = self.config_dir / COMBINED_CONFIG_FILE
        label = COMBINED_CONFIG_FILE
        try:
            document = await read_json(path)
        except FileNotFoundError:
            logger.debug("No %s found in %s", label, self.config_dir)
            return None
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            raise ConfigParseError(label, str(e)) from e

        if document is None:
            return CombinedConfig(path=label)
        if not isinstance(document, Mapping):
            raise ConfigParseError(label, "top level must be an object")

        sources = document.get("sources") or []
        source_defaults = document.get("sourceDefaults") or {}
        if not isinstance(sources, list):
            raise ConfigParseError(label, "'sources' must be an array")
        if not isinstance(source_defaults, Mapping):
            raise ConfigParseError(label, "'sourceDefaults' must be an object")

        return CombinedConfig(path=label, sources=sources, source_defaults=dict(source_defaults))

    async def load_type_file(self, source_type: SourceType) -> TypeConfigFile | None:
        """
        Read and normalise <type>.json.

        Returns:
            TypeConfigFile, or None if the file does not exist

        Raises:
            FileReadError: If the file is unparsable or has an unusable shape
        """
        path = self.type_file_path(source_type)
        label = path.name
        try:
            document = await read_json(path)
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            raise FileReadError(label, f"config file could not be parsed: {e}") from e

        return TypeConfigFile(
            source_type=source_type,
            path=label,
            entries=normalize_type_document(document, label),
        )

    async def load_type_files(
        self, source_types: Iterable[SourceType]
    ) -> dict[SourceType, TypeConfigFile]:
        """
        Read every per-type file, isolating failures per file.

        Returns:
            Parsed files keyed by type (types without a usable file are absent)
        """
        files: dict[SourceType, TypeConfigFile] = {}
        for source_type in source_types:
            try:
                type_file = await self.load_type_file(source_type)
            except FileReadError as e:
                if isinstance(e.__cause__, (json.JSONDecodeError, UnicodeDecodeError, OSError)):
                    logger.error(LogMessages.config_file_unparsable(e.path, str(e.__cause__)))
                else:
                    logger.error(e.message)
                continue
            if type_file is not None:
                files[source_type] = type_file
        return files
