"""Durable key-value storage interface."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Sequence


class IKeyValueStore(ABC):
    """Whole-object snapshot storage addressed by fixed string keys."""

    @abstractmethod
    async def get(self, keys: Sequence[str]) -> Dict[str, Any]:
        """Return the stored values for the keys that exist."""
        raise NotImplementedError

    @abstractmethod
    async def set(self, items: Mapping[str, Any]) -> None:
        """Replace the value stored under each key."""
        raise NotImplementedError
