"""`/ready` 엔드포인트용 의존성 점검.

DB와 장소 검색 API는 필수, 사진 저장소는 선택 항목입니다. 저장소가 내려가도
리뷰는 플레이스홀더 사진으로 저장되므로 준비 상태를 막지 않습니다.
"""

from __future__ import annotations

import asyncio
import socket
from urllib.parse import urlparse

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import Settings, get_settings
from app.core.timeout_policy import TimeoutPolicy, get_timeout_policy

ReadinessCheck = dict[str, str | bool]

GOOGLE_PLACES_HOST = "maps.googleapis.com"


def _result(status: str, detail: str, *, required: bool) -> ReadinessCheck:
    return {"status": status, "ok": status != "fail", "required": required, "detail": detail}


async def _check_tcp_connectivity(host: str, port: int, timeout_seconds: int, label: str) -> ReadinessCheck:
    def _connect() -> None:
        socket.create_connection((host, port), timeout=timeout_seconds).close()

    try:
        await asyncio.to_thread(_connect)
    except OSError as exc:
        return _result("fail", f"{label} 연결 실패 ({host}:{port}): {exc}", required=True)
    return _result("ok", f"{label} 연결 가능 ({host}:{port})", required=True)


def _select_one(database_url: str) -> None:
    engine = create_engine(database_url)
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    finally:
        engine.dispose()


async def _check_database(settings: Settings, policy: TimeoutPolicy) -> ReadinessCheck:
    database_url = (settings.DATABASE_URL or "").strip()
    if not database_url:
        return _result("fail", "DATABASE_URL이 설정되지 않았습니다.", required=True)

    try:
        await asyncio.wait_for(
            asyncio.to_thread(_select_one, database_url),
            timeout=policy.external_api_timeout_seconds,
        )
    except TimeoutError:
        return _result("fail", "DB 응답 시간 초과", required=True)
    except (SQLAlchemyError, ImportError, OSError) as exc:
        return _result("fail", f"DB 연결 실패: {exc}", required=True)
    return _result("ok", "DB 연결 확인 완료", required=True)


async def _check_google_places(settings: Settings, policy: TimeoutPolicy) -> ReadinessCheck:
    if not settings.google_maps_api_key:
        return _result("fail", "GOOGLE_MAPS_API_KEY가 설정되지 않았습니다.", required=True)

    return await _check_tcp_connectivity(
        host=GOOGLE_PLACES_HOST,
        port=443,
        timeout_seconds=policy.google_places_timeout_seconds,
        label="Google Places API",
    )


async def _check_storage(settings: Settings, policy: TimeoutPolicy) -> ReadinessCheck:
    if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_KEY:
        return _result("skip", "저장소 설정이 없어 사진 업로드 체크를 건너뜁니다.", required=False)

    parsed = urlparse(settings.SUPABASE_URL)
    if not parsed.hostname:
        return _result("fail", "SUPABASE_URL에서 호스트를 파싱할 수 없습니다.", required=False)

    check = await _check_tcp_connectivity(
        host=parsed.hostname,
        port=parsed.port or (443 if parsed.scheme == "https" else 80),
        timeout_seconds=policy.storage_timeout_seconds,
        label="Storage",
    )
    return {**check, "required": False}


async def collect_readiness_status() -> dict[str, object]:
    """세 의존성을 동시에 점검하고 필수 항목이 모두 통과하면 `ready`를 반환합니다."""
    settings = get_settings()
    policy = get_timeout_policy(settings)

    db, google_places, storage = await asyncio.gather(
        _check_database(settings, policy),
        _check_google_places(settings, policy),
        _check_storage(settings, policy),
    )
    checks: dict[str, ReadinessCheck] = {"db": db, "google_places": google_places, "storage": storage}
    ready = all(check["ok"] for check in checks.values() if check["required"])
    return {"status": "ready" if ready else "not_ready", "checks": checks}
