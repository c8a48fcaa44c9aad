"""식별자별 고정 윈도우 요청 제한기."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(slots=True)
class RateLimitEntry:
    count: int
    reset_at: float


@dataclass(frozen=True, slots=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: float


class FixedWindowRateLimiter:
    """고정 윈도우 방식 요청 제한기.

    윈도우 경계에서 순간적으로 허용량을 넘는 버스트가 발생할 수 있습니다.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: dict[str, RateLimitEntry] = {}
        self._clock = clock

    def check(self, identifier: str, max_requests: int = 100, window_seconds: float = 60) -> RateLimitResult:
        """요청 한 건을 집계하고 허용 여부와 남은 요청 수를 반환합니다."""
        now = self._clock()
        entry = self._entries.get(identifier)

        if entry is None or now > entry.reset_at:
            entry = RateLimitEntry(count=1, reset_at=now + window_seconds)
            self._entries[identifier] = entry
            return RateLimitResult(allowed=True, remaining=max_requests - 1, reset_at=entry.reset_at)

        if entry.count >= max_requests:
            return RateLimitResult(allowed=False, remaining=0, reset_at=entry.reset_at)

        entry.count += 1
        return RateLimitResult(allowed=True, remaining=max_requests - entry.count, reset_at=entry.reset_at)

    def reset(self, identifier: str | None = None) -> None:
        if identifier is None:
            self._entries.clear()
        else:
            self._entries.pop(identifier, None)

    def sweep(self) -> int:
        """윈도우가 끝난 식별자를 모두 삭제하고 삭제 건수를 반환합니다."""
        now = self._clock()
        expired = [identifier for identifier, entry in self._entries.items() if now > entry.reset_at]
        for identifier in expired:
            del self._entries[identifier]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)
