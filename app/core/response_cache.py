"""외부 API 응답용 프로세스 내 TTL 캐시."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

CACHE_TTL_MEDIUM = 30 * 60


@dataclass(slots=True)
class CacheEntry:
    payload: Any
    timestamp: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.timestamp > self.ttl


class ResponseCache:
    """문자열 키 기반 TTL 캐시.

    만료된 항목은 조회 시점에 지연 삭제되고, `sweep()`으로 주기적으로 정리됩니다.
    크기 제한이나 LRU 정책은 없습니다.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._clock = clock

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Any | None:
        """만료되지 않은 캐시 값을 반환하고, 없으면 None을 반환합니다."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        if entry.is_expired(self._clock()):
            del self._entries[key]
            return None
        return entry.payload

    def set(self, key: str, payload: Any, ttl: float = CACHE_TTL_MEDIUM) -> None:
        self._entries[key] = CacheEntry(payload=payload, timestamp=self._clock(), ttl=ttl)

    def sweep(self) -> int:
        """만료된 항목을 모두 삭제하고 삭제 건수를 반환합니다."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()
