"""FastAPI 애플리케이션 진입점."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager, suppress

from fastapi import Depends, FastAPI, Request
from fastapi.openapi.docs import get_redoc_html, get_swagger_ui_html
from fastapi.responses import HTMLResponse, JSONResponse

from app.api import places, reviews, users
from app.api.dependencies import require_service_secret
from app.core.config import Settings, get_settings
from app.core.errors import AppError
from app.core.http_security import install_http_security, resolve_docs_mode
from app.core.logger import get_logger
from app.core.logging_config import configure_logging
from app.core.rate_limiter import FixedWindowRateLimiter
from app.core.readiness import collect_readiness_status
from app.core.response_cache import ResponseCache

configure_logging()
logger = get_logger(__name__)
settings = get_settings()


async def _sweep_periodically(
    cache: ResponseCache,
    rate_limiter: FixedWindowRateLimiter,
    interval_seconds: int,
) -> None:
    """만료된 캐시 항목과 윈도우가 끝난 요청 제한 항목을 주기적으로 정리합니다."""
    while True:
        await asyncio.sleep(interval_seconds)
        removed = cache.sweep()
        released = rate_limiter.sweep()
        if removed or released:
            logger.info(
                "Periodic sweep: cache_removed=%d cache_size=%d limiter_released=%d limiter_size=%d",
                removed,
                len(cache),
                released,
                len(rate_limiter),
            )


@asynccontextmanager
async def lifespan(app_: FastAPI):
    interval = max(1, settings.CACHE_SWEEP_INTERVAL_SECONDS)
    sweep_task = asyncio.create_task(
        _sweep_periodically(app_.state.response_cache, app_.state.rate_limiter, interval)
    )
    logger.info("Sweeper started: interval_seconds=%d", interval)
    try:
        yield
    finally:
        sweep_task.cancel()
        with suppress(asyncio.CancelledError):
            await sweep_task


def _mount_secret_docs(app_: FastAPI) -> None:
    """서비스 시크릿 헤더가 있어야 열리는 문서 라우트를 등록합니다."""
    guarded = [Depends(require_service_secret)]

    @app_.get("/openapi.json", include_in_schema=False, dependencies=guarded)
    def openapi_json() -> JSONResponse:
        return JSONResponse(app_.openapi())

    @app_.get("/docs", include_in_schema=False, dependencies=guarded)
    def swagger_ui() -> HTMLResponse:
        return get_swagger_ui_html(openapi_url="/openapi.json", title=f"{app_.title} - Swagger UI")

    @app_.get("/redoc", include_in_schema=False, dependencies=guarded)
    def redoc_ui() -> HTMLResponse:
        return get_redoc_html(openapi_url="/openapi.json", title=f"{app_.title} - ReDoc")


def _register_error_handlers(app_: FastAPI, settings_: Settings) -> None:
    @app_.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.info
        log("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app_.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
        message = str(exc) if settings_.EXPOSE_INTERNAL_ERRORS else "Internal server error"
        return JSONResponse(status_code=500, content={"detail": message, "code": "INTERNAL_ERROR"})


def create_app(settings_: Settings) -> FastAPI:
    """라우터, 미들웨어, 예외 처리기, 응답 캐시와 요청 제한기를 갖춘 앱을 만듭니다."""
    docs_mode = resolve_docs_mode(settings_.DOCS_MODE)
    public_docs = docs_mode == "public"

    app_ = FastAPI(
        title="Comidita API",
        lifespan=lifespan,
        docs_url="/docs" if public_docs else None,
        redoc_url="/redoc" if public_docs else None,
        openapi_url="/openapi.json" if public_docs else None,
    )
    # 프로세스당 하나씩 만들어 의존성으로 주입한다
    app_.state.response_cache = ResponseCache()
    app_.state.rate_limiter = FixedWindowRateLimiter()

    install_http_security(app_, settings_)
    _register_error_handlers(app_, settings_)

    app_.include_router(places.router)
    app_.include_router(reviews.router)
    app_.include_router(users.router)
    if docs_mode == "secret":
        _mount_secret_docs(app_)
    return app_


app = create_app(settings)


@app.get("/")
def health_check() -> dict:
    """헬스 체크 엔드포인트."""
    return {"status": "ok", "message": "Comidita API is running"}


@app.get("/ready")
async def readiness_check() -> JSONResponse:
    """DB, 장소 검색 API, 사진 저장소 준비 상태. 필수 항목 실패 시 503."""
    result = await collect_readiness_status()
    return JSONResponse(status_code=200 if result["status"] == "ready" else 503, content=result)
