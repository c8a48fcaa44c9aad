"""인증 제공자가 발급한 JWT를 검증하는 서비스 모듈."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from app.core.config import get_settings
from app.schemas.jwt import UserTokenPayload


class JwtService:
    """HS256 사용자 액세스 토큰 검증/발급 유틸리티."""

    def __init__(self, secret: Optional[str] = None, audience: Optional[str] = None):
        """환경 설정을 불러와 서명 시크릿과 audience를 초기화한다."""
        settings = get_settings()
        self.secret = secret if secret is not None else settings.AUTH_JWT_SECRET
        self.audience = audience if audience is not None else settings.AUTH_JWT_AUDIENCE
        self.algorithm = "HS256"

        if not self.secret:
            raise ValueError("JWT secret is not set.")

    def sign_user_token(
        self,
        user_id: str,
        email: Optional[str] = None,
        expires_in: timedelta = timedelta(hours=1),
        extra: Optional[Dict[str, Any]] = None,
    ) -> str:
        """사용자 액세스 토큰을 생성한다. 로컬 개발과 테스트에서 사용한다."""
        now = datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            "sub": user_id,
            "email": email,
            "aud": self.audience,
            "role": "authenticated",
            "iat": int(now.timestamp()),
            "exp": int((now + expires_in).timestamp()),
        }
        if extra:
            payload.update(extra)
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify_user_token(self, token: str) -> UserTokenPayload:
        """사용자 토큰을 검증하고 페이로드를 반환한다.

        Raises:
            ValueError: 서명/만료/audience 오류 또는 필수 필드 누락 시.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience or None,
                options={"verify_aud": bool(self.audience)},
            )
        except jwt.PyJWTError:
            raise ValueError("Invalid token") from None

        if not payload.get("sub"):
            raise ValueError("Invalid user token payload.")

        return UserTokenPayload.model_validate(payload)
