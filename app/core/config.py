"""애플리케이션 전역 설정을 관리하는 모듈."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """환경 변수 기반 설정 모델."""

    AUTH_JWT_SECRET: str
    AUTH_JWT_AUDIENCE: str = "authenticated"
    SERVICE_SECRET: str = ""
    DATABASE_URL: str = ""
    REQUEST_TIMEOUT_SECONDS: int = 60
    EXTERNAL_API_TIMEOUT_SECONDS: int = 15
    GOOGLE_MAPS_API_KEY: str | None = None
    PUBLIC_GOOGLE_MAPS_API_KEY: str | None = None
    GOOGLE_PLACES_TIMEOUT_SECONDS: int = 10
    SEARCH_LOCATION: str = "-32.9442426,-60.6505388"
    SEARCH_RADIUS_METERS: int = 50000
    SEARCH_PLACE_TYPE: str = "restaurant"
    SEARCH_ADDRESS_FILTERS: str = "rosario,santa fe"
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_KEY: str = ""
    STORAGE_BUCKET: str = "review-photos"
    STORAGE_TIMEOUT_SECONDS: int = 15
    PHOTO_MAX_UPLOAD_MB: int = 10
    PHOTO_MAX_WIDTH: int = 800
    PHOTO_MAX_HEIGHT: int = 600
    PHOTO_INITIAL_QUALITY: int = 85
    PHOTO_TARGET_SIZE_KB: int = 400
    PHOTO_MAX_PIXELS: int = 40_000_000
    CACHE_TTL_SECONDS: int = 30 * 60
    CACHE_SWEEP_INTERVAL_SECONDS: int = 5 * 60
    RATE_LIMIT_MAX_REQUESTS: int = 100
    RATE_LIMIT_WINDOW_SECONDS: int = 60
    REVIEW_POINTS: int = 100
    FIRST_REVIEW_BONUS: int = 50
    DOCS_MODE: str = "disabled"
    EXPOSE_INTERNAL_ERRORS: bool = False
    CORS_ALLOW_ORIGINS: str = ""
    CORS_ALLOW_METHODS: str = "GET,POST,OPTIONS"
    CORS_ALLOW_HEADERS: str = "Authorization,Content-Type,x-service-secret"
    CORS_ALLOW_CREDENTIALS: bool = False
    SECURITY_HEADERS_ENABLED: bool = True
    ENABLE_HSTS: bool = False
    HSTS_MAX_AGE_SECONDS: int = 31536000
    PROXY_HEADERS_ENABLED: bool = True
    PROXY_TRUSTED_HOSTS: str = "127.0.0.1"
    TRUSTED_HOSTS: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("PHOTO_INITIAL_QUALITY", mode="before")
    @classmethod
    def _clamp_photo_initial_quality(cls, value: object) -> int:
        try:
            numeric = int(value) if value is not None else 85
        except (TypeError, ValueError):
            numeric = 85
        return min(95, max(10, numeric))

    @field_validator("RATE_LIMIT_MAX_REQUESTS", "RATE_LIMIT_WINDOW_SECONDS", mode="before")
    @classmethod
    def _clamp_rate_limit(cls, value: object) -> int:
        try:
            numeric = int(value) if value is not None else 1
        except (TypeError, ValueError):
            numeric = 1
        return max(1, numeric)

    @property
    def google_maps_api_key(self) -> str | None:
        """서버 전용 키를 우선하고, 없으면 클라이언트 노출용 키를 사용합니다."""
        return self.GOOGLE_MAPS_API_KEY or self.PUBLIC_GOOGLE_MAPS_API_KEY or None

    @property
    def search_address_filters(self) -> list[str]:
        return [item.strip().lower() for item in self.SEARCH_ADDRESS_FILTERS.split(",") if item.strip()]


@lru_cache
def get_settings() -> Settings:
    """Settings 인스턴스를 반환한다. 최초 호출 시에만 생성되고 이후 캐싱된다."""
    return Settings()
