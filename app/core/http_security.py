"""브라우저 클라이언트 앞단의 HTTP 하드닝: 프록시 헤더, 호스트 허용 목록, CORS, 보안 헤더."""

from __future__ import annotations

from fastapi import FastAPI, Request
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from app.core.config import Settings
from app.core.logger import get_logger

logger = get_logger(__name__)

DOCS_MODES = ("disabled", "secret", "public")

# 장소 검색 결과와 리뷰는 사용자별 응답이 섞이므로 중간 캐시를 막는다
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
    "Cache-Control": "no-store",
}


def split_csv(value: str) -> list[str]:
    return [item.strip() for item in (value or "").split(",") if item.strip()]


def resolve_docs_mode(mode: str) -> str:
    normalized = (mode or "").strip().lower()
    if normalized not in DOCS_MODES:
        logger.warning("Invalid DOCS_MODE=%r, falling back to disabled", mode)
        return "disabled"
    return normalized


def _cors_options(settings: Settings) -> dict | None:
    origins = split_csv(settings.CORS_ALLOW_ORIGINS)
    if not origins:
        return None

    allow_credentials = settings.CORS_ALLOW_CREDENTIALS
    if allow_credentials and "*" in origins:
        logger.warning("CORS wildcard origin cannot carry credentials; allow_credentials forced to false")
        allow_credentials = False

    return {
        "allow_origins": origins,
        "allow_credentials": allow_credentials,
        "allow_methods": split_csv(settings.CORS_ALLOW_METHODS) or ["GET"],
        "allow_headers": split_csv(settings.CORS_ALLOW_HEADERS) or ["Authorization", "Content-Type"],
    }


def install_http_security(app: FastAPI, settings: Settings) -> None:
    """설정에 따라 미들웨어를 등록합니다. 나중에 등록한 미들웨어가 바깥쪽에서 실행됩니다."""

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        if settings.SECURITY_HEADERS_ENABLED:
            for name, value in SECURITY_HEADERS.items():
                response.headers.setdefault(name, value)
            if settings.ENABLE_HSTS and request.url.scheme == "https":
                response.headers.setdefault("Strict-Transport-Security", f"max-age={settings.HSTS_MAX_AGE_SECONDS}")
        return response

    cors = _cors_options(settings)
    if cors is not None:
        app.add_middleware(CORSMiddleware, **cors)

    allowed_hosts = split_csv(settings.TRUSTED_HOSTS)
    if allowed_hosts:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)

    if settings.PROXY_HEADERS_ENABLED:
        proxies = split_csv(settings.PROXY_TRUSTED_HOSTS) or ["127.0.0.1"]
        app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=proxies)
