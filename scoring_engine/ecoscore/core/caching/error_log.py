"""Bounded, newest-first record of pipeline failures."""

from typing import Any, Dict, Iterable, List, Mapping, Optional

from ecoscore.core.models import ErrorLogEntry


class ErrorLog:
    """Ring of at most ``max_entries`` errors, newest first."""

    def __init__(self, max_entries: int, ttl_ms: int) -> None:
        self.max_entries = max_entries
        self.ttl_ms = ttl_ms
        self._entries: List[ErrorLogEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def record(
        self,
        error: BaseException,
        now: int,
        context: Optional[Mapping[str, Any]] = None,
    ) -> ErrorLogEntry:
        entry = ErrorLogEntry(
            message=str(error) or type(error).__name__,
            context=dict(context or {}),
            timestamp=now,
        )
        self._entries.insert(0, entry)
        del self._entries[self.max_entries :]
        return entry

    def entries(self) -> List[ErrorLogEntry]:
        return list(self._entries)

    def purge_expired(self, now: int) -> int:
        before = len(self._entries)
        self._entries = [e for e in self._entries if now - e.timestamp <= self.ttl_ms]
        return before - len(self._entries)

    def dump(self) -> List[Dict[str, Any]]:
        return [entry.model_dump(mode="json") for entry in self._entries]

    def restore(self, entries: Iterable[ErrorLogEntry]) -> None:
        self._entries = list(entries)[: self.max_entries]
