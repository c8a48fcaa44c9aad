"""애플리케이션 공통 예외 정의."""

from __future__ import annotations


class AppError(Exception):
    """클라이언트에 그대로 노출해도 되는 운영 예외의 기반 클래스."""

    code: str = "APP_ERROR"
    status_code: int = 500

    def __init__(self, message: str, code: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict[str, str]:
        return {"detail": self.message, "code": self.code}


class ValidationError(AppError):
    """필수 입력 누락 또는 잘못된 입력."""

    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class UnauthorizedError(AppError):
    """로그인한 사용자가 필요한 작업에 인증 정보가 없는 경우."""

    code = "UNAUTHORIZED"
    status_code = 401

    def __init__(self, message: str = "Debes iniciar sesión para continuar") -> None:
        super().__init__(message)


class NotFoundError(AppError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str) -> None:
        super().__init__(f"{resource} no encontrado")


class DuplicateReviewError(AppError):
    """같은 사용자가 같은 장소에 이미 리뷰를 남긴 경우."""

    code = "DUPLICATE_REVIEW"
    status_code = 409

    def __init__(
        self,
        message: str = "Ya tienes una reseña para este lugar. Solo puedes tener una reseña por lugar.",
    ) -> None:
        super().__init__(message)


class RateLimitExceededError(AppError):
    code = "RATE_LIMIT_EXCEEDED"
    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded") -> None:
        super().__init__(message)


class UpstreamError(AppError):
    """외부 API 또는 저장소 호출 실패.

    상위 서비스의 4xx/5xx 구분은 전달하지 않고 항상 500으로 응답합니다.
    """

    code = "UPSTREAM_ERROR"
    status_code = 500
