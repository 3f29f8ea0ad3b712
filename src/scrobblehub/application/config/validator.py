"""Structural validation of source config entries.

Two passes:
- pass 1 (minimal shape) runs on everything the merger produced, before names
  are resolved: the raw value must be an object carrying ``type`` and ``data``.
- pass 2 (full shape) runs right before construction, after sourceDefaults were
  merged into ``data``: ``name``/``type`` must be non-empty strings and the
  effective ``data`` a non-empty object.

Failures only ever drop the one entry they belong to.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from scrobblehub.domain.entities import SourceConfigEntry
from scrobblehub.infrastructure.observability.log_messages import LogMessages

logger = logging.getLogger(__name__)

MINIMAL_FIELDS = ("type", "data")
FULL_FIELDS = ("name", "type", "data")


def check_entry_object(value: Any, index: int, origin: str) -> str | None:
    """Pass-1 check of one raw list item.

    Args:
        value: Raw JSON value at ``index``
        index: Position in its source list
        origin: File label for the diagnostic

    Returns:
        Error message, or None if the value is an object
    """
    if value is None:
        return f"The source config entry at index {index} in {origin} is null but should be an object, will not parse"
    if not isinstance(value, Mapping):
        return f"The source config entry at index {index} in {origin} should be an object, will not parse"
    return None


def validate_structure(entry: SourceConfigEntry, required: Iterable[str]) -> list[str]:
    """Report which required fields of ``entry`` are absent.

    Returns:
        One message per missing field (empty list when valid)
    """
    return [f"'{field}' must be defined" for field in required if getattr(entry, field) is None]


def validate_full(
    entry: SourceConfigEntry, defaults: Mapping[str, Any] | None = None
) -> list[str]:
    """Pass-2 check, with ``defaults`` already layered under ``data``."""
    errors = validate_structure(entry, FULL_FIELDS)
    if entry.name is not None and (not isinstance(entry.name, str) or not entry.name.strip()):
        errors.append("'name' must be a non-empty string")
    if entry.type is not None and (not isinstance(entry.type, str) or not entry.type.strip()):
        errors.append("'type' must be a non-empty string")
    if entry.data is not None:
        if not isinstance(entry.data, Mapping):
            errors.append("'data' must be an object")
        elif not entry.effective_data(defaults):
            errors.append("'data' must not be empty")
    return errors


class ConfigValidator:
    """Runs pass-1 validation over a merged entry list."""

    def filter_minimal(self, entries: Sequence[SourceConfigEntry]) -> list[SourceConfigEntry]:
        """
        Drop entries missing ``type`` or ``data``.

        Args:
            entries: Merged entries

        Returns:
            Entries that passed, in original order
        """
        valid: list[SourceConfigEntry] = []
        for entry in entries:
            errors = validate_structure(entry, MINIMAL_FIELDS)
            if errors:
                logger.error(LogMessages.config_entry_invalid(entry.label, errors))
                continue
            valid.append(entry)
        return valid
