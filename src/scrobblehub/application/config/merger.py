"""Concatenates config entries from every origin into one ordered list.

Order of the merged list (it decides the suffix order when names collide):
1. externally supplied entries
2. config.json "sources" (configureAs forced to "source")
3. per type, in SourceType order: the env entry, then <type>.json entries

Per-type and external entries whose configureAs (after the type default, see
DEFAULT_CONFIGURE_AS) is not "source" belong to the client side and are left out.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from scrobblehub.application.config.env_builder import default_configure_as
from scrobblehub.application.config.loader import CombinedConfig, TypeConfigFile
from scrobblehub.application.config.validator import check_entry_object
from scrobblehub.domain.entities import ConfigureAs, SourceConfigEntry, SourceType
from scrobblehub.domain.exceptions import StructuralValidationError
from scrobblehub.infrastructure.observability.log_messages import LogMessages

logger = logging.getLogger(__name__)

EXTERNAL_ORIGIN = "additional config"


class ConfigMerger:
    """Tags entries with origin/role and concatenates them."""

    def merge(
        self,
        *,
        external: Sequence[Mapping[str, Any] | SourceConfigEntry | Any] = (),
        combined: CombinedConfig | None = None,
        type_files: Mapping[SourceType, TypeConfigFile] | None = None,
        env_entries: Mapping[SourceType, SourceConfigEntry] | None = None,
        source_types: Iterable[SourceType] = tuple(SourceType),
    ) -> list[SourceConfigEntry]:
        """
        Build the merged entry list.

        Null or non-object raw items are rejected per index and logged (pass 1).

        Args:
            external: Entries handed in by the caller
            combined: Parsed config.json (None if absent)
            type_files: Parsed <type>.json files
            env_entries: Env-synthesized entries
            source_types: Types to walk, in order

        Returns:
            Merged entries, ordered as described in the module docstring
        """
        type_files = type_files or {}
        env_entries = env_entries or {}
        merged: list[SourceConfigEntry] = []

        for i, raw in enumerate(external):
            if isinstance(raw, SourceConfigEntry):
                entry = raw
            else:
                source, role = EXTERNAL_ORIGIN, None
                if isinstance(raw, Mapping):
                    source = raw.get("source", EXTERNAL_ORIGIN)
                    role = raw.get("configureAs", default_configure_as(raw.get("type")))
                parsed = self._entry_from_raw(
                    raw, i, EXTERNAL_ORIGIN, source=source, configure_as=role
                )
                if parsed is None:
                    continue
                entry = parsed
            if self._is_source(entry):
                merged.append(entry)

        if combined is not None:
            for i, raw in enumerate(combined.sources):
                entry = self._entry_from_raw(
                    raw,
                    i,
                    combined.path,
                    source=combined.path,
                    # override user value
                    configure_as=ConfigureAs.SOURCE.value,
                )
                if entry is not None:
                    merged.append(entry)

        for source_type in source_types:
            env_entry = env_entries.get(source_type)
            if env_entry is not None:
                merged.append(env_entry)

            type_file = type_files.get(source_type)
            if type_file is None:
                continue
            for i, raw in enumerate(type_file.entries):
                role = (
                    raw.get("configureAs", default_configure_as(source_type))
                    if isinstance(raw, Mapping)
                    else None
                )
                entry = self._entry_from_raw(
                    raw,
                    i,
                    type_file.path,
                    source=type_file.path,
                    type_=source_type.value,
                    configure_as=role,
                )
                if entry is None:
                    continue
                if self._is_source(entry):
                    merged.append(entry)
                else:
                    logger.debug(
                        "Skipping %s entry [%s] configured as %s",
                        type_file.path,
                        entry.name,
                        entry.configure_as,
                    )

        return merged

    @staticmethod
    def _entry_from_raw(
        raw: Any, index: int, origin: str, **overrides: Any
    ) -> SourceConfigEntry | None:
        """Pass-1 check plus conversion of one raw item; problems are logged, not raised."""
        error = check_entry_object(raw, index, origin)
        if error:
            logger.error(error)
            return None
        try:
            return SourceConfigEntry.from_mapping(raw, **overrides)
        except StructuralValidationError as e:
            label = f"Config object at index {index} in {origin}"
            logger.error(LogMessages.config_entry_invalid(label, e.errors))
            return None

    @staticmethod
    def _is_source(entry: SourceConfigEntry) -> bool:
        return entry.configure_as == ConfigureAs.SOURCE.value
