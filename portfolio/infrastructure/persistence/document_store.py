"""JSON document stores: in-memory and local filesystem with atomic writes."""

from __future__ import annotations

import copy
import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Protocol

import aiofiles
import aiofiles.os

from portfolio.infrastructure.exceptions import (
    StoragePermissionError,
    StorageReadError,
    StorageWriteError,
)
from portfolio.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class IDocumentStore(Protocol):
    """Key/value store of JSON-compatible documents."""

    async def load(self, key: str) -> Any | None:
        """Return the document stored under ``key``, or None if absent."""

    async def save(self, key: str, value: Any) -> None:
        """Replace the document stored under ``key``."""


class InMemoryDocumentStore:
    """Process-local store. Values are deep-copied in and out."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._documents: dict[str, Any] = copy.deepcopy(initial or {})

    async def load(self, key: str) -> Any | None:
        if key not in self._documents:
            return None
        return copy.deepcopy(self._documents[key])

    async def save(self, key: str, value: Any) -> None:
        self._documents[key] = copy.deepcopy(value)


class LocalFileDocumentStore:
    """One ``<key>.json`` file per document under storage_root.

    Writes go to a temp file in the same directory and are renamed into
    place, so readers never see a partial document.
    """

    def __init__(self, storage_root: str) -> None:
        self.storage_root = Path(storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True, mode=0o750)

    def _path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise StoragePermissionError(key)
        path = (self.storage_root / f"{key}.json").resolve()
        try:
            path.relative_to(self.storage_root)
        except ValueError as e:
            raise StoragePermissionError(key) from e
        return path

    async def load(self, key: str) -> Any | None:
        path = self._path_for(key)
        if not await aiofiles.os.path.exists(path):
            return None
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                content = await f.read()
            return json.loads(content)
        except (OSError, ValueError) as e:
            raise StorageReadError(key, str(e)) from e

    async def save(self, key: str, value: Any) -> None:
        path = self._path_for(key)
        try:
            payload = json.dumps(value, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StorageWriteError(key, str(e)) from e

        temp_path: str | None = None
        try:
            temp_fd, temp_path = tempfile.mkstemp(
                dir=self.storage_root, prefix=".tmp_", suffix=".json"
            )
            os.close(temp_fd)
            async with aiofiles.open(temp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
            os.chmod(temp_path, 0o640)
            await aiofiles.os.replace(temp_path, path)
        except OSError as e:
            raise StorageWriteError(key, str(e)) from e
        finally:
            if temp_path is not None and Path(temp_path).exists():
                os.unlink(temp_path)
        logger.debug("Saved document %s (%d bytes)", key, len(payload))
