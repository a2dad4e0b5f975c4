from __future__ import annotations

import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Tuple


class UserInfoCache:
    """In-memory LRU cache for public user summaries ({id, name, email}).

    Event lists show creator and participant names, so clients look the same
    users up over and over. Entries expire after ttl_seconds and the least
    recently used entry is evicted once max_entries is exceeded. One instance
    lives on app.state and is injected through a dependency.
    """

    def __init__(
        self,
        max_entries: int = 256,
        ttl_seconds: int = 300,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_entries = max_entries
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: "OrderedDict[int, Tuple[float, Dict[str, Any]]]" = OrderedDict()

    def _purge_expired(self) -> None:
        now = self._clock()
        keys_to_delete = [key for key, (ts, _) in self._entries.items() if now - ts > self._ttl_seconds]
        for key in keys_to_delete:
            self._entries.pop(key, None)

    def get(self, user_id: int) -> Dict[str, Any] | None:
        self._purge_expired()
        if user_id not in self._entries:
            return None
        ts, value = self._entries.pop(user_id)
        self._entries[user_id] = (ts, value)
        return value

    def set(self, user_id: int, value: Dict[str, Any]) -> None:
        self._purge_expired()
        if user_id in self._entries:
            self._entries.pop(user_id, None)
        self._entries[user_id] = (self._clock(), value)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def invalidate(self, user_id: int) -> None:
        self._entries.pop(user_id, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
