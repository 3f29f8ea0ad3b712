"""Makes source names unique within each source type.

Entries are grouped by type, then by name (first-appearance order). A group with
more than one member is a conflict: every origin is logged and each member is
renamed "{name}{position}" (1-based). Single-member groups keep their name, so
running the resolver on already-unique input changes nothing. No entry is ever
dropped because of its name.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Sequence
from typing import Any

from scrobblehub.domain.entities import DEFAULT_SOURCE_NAME, SourceConfigEntry
from scrobblehub.infrastructure.observability.log_messages import LogMessages

logger = logging.getLogger(__name__)


def _group_key(value: Any) -> Hashable:
    # JSON can hand us lists/objects as names or types; group those by repr
    return value if isinstance(value, Hashable) else repr(value)


def group_entries(
    entries: Sequence[SourceConfigEntry],
) -> dict[Hashable, dict[Hashable, list[SourceConfigEntry]]]:
    """Group entries by type, then by name, preserving first-appearance order."""
    grouped: dict[Hashable, dict[Hashable, list[SourceConfigEntry]]] = {}
    for entry in entries:
        by_name = grouped.setdefault(_group_key(entry.type), {})
        by_name.setdefault(_group_key(entry.name), []).append(entry)
    return grouped


class NameResolver:
    """Disambiguates duplicate (type, name) pairs by suffixing an index."""

    def resolve(self, entries: Sequence[SourceConfigEntry]) -> list[SourceConfigEntry]:
        """
        Return entries with unique names per type.

        Hey future me - renaming can itself collide ("home","home","home1" ->
        "home1","home2","home1"). We simply run another round until nothing
        collides, so the two "home1" get suffixed again and the final names are
        "home11","home12","home2". In the normal case that's exactly one round.

        Args:
            entries: Pass-1 valid entries

        Returns:
            New entry list, grouped by type then name
        """
        resolved = self._resolve_round(entries)
        while self._has_conflicts(resolved):
            resolved = self._resolve_round(resolved)
        return resolved

    @staticmethod
    def _has_conflicts(entries: Sequence[SourceConfigEntry]) -> bool:
        return any(
            len(named) > 1
            for by_name in group_entries(entries).values()
            for named in by_name.values()
        )

    def _resolve_round(self, entries: Sequence[SourceConfigEntry]) -> list[SourceConfigEntry]:
        resolved: list[SourceConfigEntry] = []
        for by_name in group_entries(entries).values():
            for named in by_name.values():
                if len(named) == 1:
                    resolved.extend(named)
                    continue

                name = named[0].name
                logger.warning(
                    LogMessages.naming_conflict(
                        str(name),
                        [f"Config object from {c.source} of type [{c.type}]" for c in named],
                    )
                )
                if name == DEFAULT_SOURCE_NAME:
                    logger.info(LogMessages.unnamed_hint())

                resolved.extend(
                    entry.with_name(f"{name}{i}") for i, entry in enumerate(named, start=1)
                )
        return resolved
