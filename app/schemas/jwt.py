"""`JWT` 토큰 페이로드 스키마 정의."""

from pydantic import BaseModel, ConfigDict, Field


class UserTokenPayload(BaseModel):
    """인증 제공자가 발급한 사용자 액세스 토큰 페이로드."""

    model_config = ConfigDict(extra="ignore")

    sub: str = Field(..., description="토큰 subject (사용자 ID)")
    email: str | None = Field(default=None, description="사용자 이메일")
    role: str | None = Field(default=None, description="인증 제공자 역할")
    iat: int | None = Field(None, description="발급 시각(Unix timestamp, seconds)")
    exp: int | None = Field(None, description="만료 시각(Unix timestamp, seconds)")

    @property
    def user_id(self) -> str:
        return self.sub
