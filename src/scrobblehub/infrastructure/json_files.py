"""Async JSON file helpers.

Hey future me - file reads go through asyncio.to_thread so a slow network mount
holding config.json never blocks the event loop. Errors are NOT swallowed here:
FileNotFoundError / JSONDecodeError / OSError propagate and the caller decides
whether a missing or broken file is fatal.
"""

import asyncio
import json
from pathlib import Path
from typing import Any


def _read_json_sync(path: Path) -> Any:
    with path.open(encoding="utf-8") as fh:
        return json.load(fh)


async def read_json(path: Path | str) -> Any:
    """Read and decode one JSON document.

    Args:
        path: File to read

    Returns:
        Decoded JSON value (may be None for a literal ``null`` document)

    Raises:
        FileNotFoundError: If the file does not exist
        json.JSONDecodeError: If the content is not valid JSON
        OSError: For any other read failure
    """
    return await asyncio.to_thread(_read_json_sync, Path(path))


def _write_json_sync(path: Path, value: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(value, indent=2), encoding="utf-8")


async def write_json(path: Path | str, value: Any) -> None:
    """Write a JSON document, creating parent directories as needed."""
    await asyncio.to_thread(_write_json_sync, Path(path), value)
