"""Bounded in-memory map whose entries expire by creation time."""

from typing import Dict, Generic, Optional, TypeVar

from pydantic import BaseModel

EntryT = TypeVar("EntryT", bound=BaseModel)


class ExpiringCache(Generic[EntryT]):
    """Map of key -> entry where every entry carries an epoch-ms ``timestamp``.

    Expiry is lazy: ``get`` hides stale entries and ``sweep`` deletes them.
    When full, the entry with the smallest timestamp is evicted, regardless
    of how recently it was read.
    """

    def __init__(self, ttl_ms: int, max_entries: int) -> None:
        self.ttl_ms = ttl_ms
        self.max_entries = max_entries
        self._entries: Dict[str, EntryT] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def is_expired(self, entry: EntryT, now: int) -> bool:
        return now - entry.timestamp > self.ttl_ms

    def get(self, key: str, now: int) -> Optional[EntryT]:
        entry = self._entries.get(key)
        if entry is None or self.is_expired(entry, now):
            return None
        return entry

    def put(self, key: str, entry: EntryT) -> bool:
        """Insert or overwrite ``key``.

        Returns False, leaving the cache untouched, when the stored entry is
        newer than ``entry``.
        """
        existing = self._entries.get(key)
        if existing is not None:
            if existing.timestamp > entry.timestamp:
                return False
        else:
            while len(self._entries) >= self.max_entries:
                self._evict_oldest()
        self._entries[key] = entry
        return True

    def _evict_oldest(self) -> None:
        oldest_key = min(self._entries, key=lambda k: self._entries[k].timestamp)
        del self._entries[oldest_key]

    def sweep(self, now: int) -> int:
        stale = [key for key, entry in self._entries.items() if self.is_expired(entry, now)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def dump(self) -> Dict[str, dict]:
        return {key: entry.model_dump(mode="json") for key, entry in self._entries.items()}

    def restore(self, entries: Dict[str, EntryT]) -> int:
        """Replace contents from a persisted snapshot; returns entries kept."""
        self._entries = dict(entries)
        while len(self._entries) > self.max_entries:
            self._evict_oldest()
        return len(self._entries)
