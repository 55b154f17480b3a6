"""
Async filesystem primitives used by the translation driver.

Every operation runs the blocking call in a worker thread so the event loop
keeps scheduling other references and languages, and turns OS level failures
into FileOperationError carrying the offending path.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

from .errors import FileOperationError


async def create_dir(path: Path) -> None:
    """Recursively create `path` (parents included)."""
    try:
        await asyncio.to_thread(Path(path).mkdir, parents=True, exist_ok=True)
    except OSError as exc:
        raise FileOperationError(f"Failed to create directory {path}", path) from exc


async def list_dir(path: Path) -> list[Path]:
    """Return the entries of `path`, sorted by name."""
    try:
        entries = await asyncio.to_thread(lambda: list(Path(path).iterdir()))
    except OSError as exc:
        raise FileOperationError(f"Failed to acquire file listing in {path}", path) from exc
    return sorted(entries, key=lambda p: p.name)


async def write_file(path: Path, content: str) -> None:
    try:
        await asyncio.to_thread(Path(path).write_text, content, encoding="utf-8")
    except OSError as exc:
        raise FileOperationError(f"Failed to save {path}", path) from exc


async def read_json(path: Path) -> Any:
    def load() -> Any:
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    try:
        return await asyncio.to_thread(load)
    except OSError as exc:
        raise FileOperationError(f"Failed to read {path}", path) from exc
    except json.JSONDecodeError as exc:
        raise FileOperationError(f"Invalid JSON in {path}: {exc}", path) from exc
    except UnicodeDecodeError as exc:
        raise FileOperationError(f"{path} is not valid UTF-8: {exc}", path) from exc


def dump_json(data: Any) -> str:
    """Serialize a resource tree the way it is written back to disk."""
    return json.dumps(data, ensure_ascii=False, indent=2) + "\n"
