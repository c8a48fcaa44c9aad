"""외부 협력자(DB, 장소 검색 API, 사진 저장소) 호출 타임아웃."""

from __future__ import annotations

from dataclasses import dataclass

from app.core.config import Settings, get_settings

_FLOOR_SECONDS = 1
_CONNECT_SHARE = 0.3
_CONNECT_CAP_SECONDS = 5.0


def _clamp(seconds: int, ceiling: int | None = None) -> int:
    seconds = max(_FLOOR_SECONDS, int(seconds))
    return seconds if ceiling is None else min(seconds, ceiling)


@dataclass(frozen=True, slots=True)
class TimeoutPolicy:
    """요청 전체 제한 시간 아래로 정렬된 협력자별 타임아웃.

    외부 호출 타임아웃은 요청 타임아웃을, 장소 검색/저장소 타임아웃은
    외부 호출 타임아웃을 넘지 않습니다.
    """

    request_timeout_seconds: int
    external_api_timeout_seconds: int
    google_places_timeout_seconds: int
    storage_timeout_seconds: int


def build_timeout_policy(settings: Settings) -> TimeoutPolicy:
    request = _clamp(settings.REQUEST_TIMEOUT_SECONDS)
    external = _clamp(settings.EXTERNAL_API_TIMEOUT_SECONDS, ceiling=request)
    return TimeoutPolicy(
        request_timeout_seconds=request,
        external_api_timeout_seconds=external,
        google_places_timeout_seconds=_clamp(settings.GOOGLE_PLACES_TIMEOUT_SECONDS, ceiling=external),
        storage_timeout_seconds=_clamp(settings.STORAGE_TIMEOUT_SECONDS, ceiling=external),
    )


def get_timeout_policy(settings: Settings | None = None) -> TimeoutPolicy:
    return build_timeout_policy(settings or get_settings())


def to_requests_timeout(total_timeout_seconds: int) -> tuple[float, float]:
    """전체 제한 시간을 `requests`의 (connect, read) 튜플로 나눕니다.

    연결에 30%(1~5초)를 쓰고 나머지를 읽기에 배정합니다.
    """
    total = float(_clamp(total_timeout_seconds))
    connect = min(_CONNECT_CAP_SECONDS, max(1.0, total * _CONNECT_SHARE))
    read = total - connect if total > connect else total * 0.5
    return connect, max(read, 0.5)
