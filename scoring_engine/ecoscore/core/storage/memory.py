"""In-process key-value store."""

import copy
from typing import Any, Dict, Mapping, Optional, Sequence

from ecoscore.core.interfaces.storage.key_value import IKeyValueStore


class InMemoryKeyValueStore(IKeyValueStore):
    """Dictionary-backed store; values are deep-copied in and out."""

    def __init__(self, initial: Optional[Mapping[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = copy.deepcopy(dict(initial or {}))
        self.write_count = 0

    async def get(self, keys: Sequence[str]) -> Dict[str, Any]:
        return {key: copy.deepcopy(self._data[key]) for key in keys if key in self._data}

    async def set(self, items: Mapping[str, Any]) -> None:
        for key, value in items.items():
            self._data[key] = copy.deepcopy(value)
        self.write_count += 1
