"""Directory-backed key-value store with one JSON document per key."""

import asyncio
import json
import logging
import os
import re
import tempfile
from typing import Any, Dict, Mapping, Sequence

from ecoscore.core.interfaces.storage.key_value import IKeyValueStore

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileKeyValueStore(IKeyValueStore):
    """Stores each key as ``<directory>/<key>.json``.

    Writes go to a temporary file that is then renamed over the target, so a
    reader never sees a partially written snapshot. Writes are applied one at
    a time in call order, so the last snapshot handed to ``set`` is the one
    left on disk.
    """

    def __init__(self, directory: str) -> None:
        self.directory = directory
        self._write_lock = asyncio.Lock()

    def _path_for(self, key: str) -> str:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Unsupported storage key: {key!r}")
        return os.path.join(self.directory, f"{key}.json")

    def _read(self, keys: Sequence[str]) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        for key in keys:
            file_path = self._path_for(key)
            if not os.path.isfile(file_path):
                continue
            with open(file_path, "r", encoding="utf-8") as handle:
                values[key] = json.load(handle)
        return values

    def _write(self, items: Mapping[str, Any]) -> None:
        os.makedirs(self.directory, exist_ok=True)
        for key, value in items.items():
            file_path = self._path_for(key)
            descriptor, temp_path = tempfile.mkstemp(
                dir=self.directory, prefix=f".{key}.", suffix=".tmp"
            )
            try:
                with os.fdopen(descriptor, "w", encoding="utf-8") as handle:
                    json.dump(value, handle)
                os.replace(temp_path, file_path)
            except BaseException:
                if os.path.exists(temp_path):
                    os.unlink(temp_path)
                raise
        logger.debug("Persisted keys %s to %s", sorted(items), self.directory)

    async def get(self, keys: Sequence[str]) -> Dict[str, Any]:
        return await asyncio.to_thread(self._read, list(keys))

    async def set(self, items: Mapping[str, Any]) -> None:
        items = dict(items)
        async with self._write_lock:
            await asyncio.to_thread(self._write, items)
