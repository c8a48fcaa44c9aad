"""API 의존성 모음."""

import hmac

from fastapi import Depends, Header, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import get_settings
from app.core.errors import RateLimitExceededError
from app.core.rate_limiter import FixedWindowRateLimiter
from app.core.response_cache import ResponseCache
from app.schemas.jwt import UserTokenPayload
from app.services.google_places_service import GooglePlacesService, get_google_places_service
from app.services.jwt_service import JwtService
from app.services.photo_storage import PhotoStorage, get_photo_storage

bearer_scheme = HTTPBearer(auto_error=False)


def get_jwt_service() -> JwtService:
    """`JWT` 서비스 인스턴스를 제공합니다."""
    return JwtService()


def get_response_cache(request: Request) -> ResponseCache:
    """애플리케이션 시작 시 생성된 응답 캐시를 제공합니다."""
    return request.app.state.response_cache


def get_rate_limiter(request: Request) -> FixedWindowRateLimiter:
    """애플리케이션 시작 시 생성된 요청 제한기를 제공합니다."""
    return request.app.state.rate_limiter


def get_places_service() -> GooglePlacesService:
    return get_google_places_service()


def get_storage() -> PhotoStorage:
    return get_photo_storage()


def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    jwt_service: JwtService = Depends(get_jwt_service),
) -> UserTokenPayload | None:
    """`Bearer` 토큰이 있으면 검증하고, 없으면 None을 반환합니다."""
    if credentials is None:
        return None

    try:
        return jwt_service.verify_user_token(credentials.credentials)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def require_user(user: UserTokenPayload | None = Depends(get_optional_user)) -> UserTokenPayload:
    """유효한 사용자용 `Bearer` 토큰을 요구합니다."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Debes iniciar sesión para continuar",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def enforce_rate_limit(
    request: Request,
    response: Response,
    limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
) -> None:
    """클라이언트 IP 단위로 요청 수를 제한합니다."""
    settings = get_settings()
    identifier = request.client.host if request.client else "unknown"
    result = limiter.check(
        identifier or "unknown",
        max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    )
    if not result.allowed:
        raise RateLimitExceededError()
    response.headers["X-RateLimit-Remaining"] = str(result.remaining)


def require_service_secret(
    x_service_secret: str | None = Header(default=None, alias="x-service-secret"),
) -> None:
    """운영 도구가 비공개 문서에 접근할 때 쓰는 `x-service-secret` 헤더를 검증한다."""
    expected = get_settings().SERVICE_SECRET
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="SERVICE_SECRET is not configured",
        )

    if not x_service_secret or not hmac.compare_digest(x_service_secret, expected):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid service secret")
