"""사용자 포인트/레벨 스키마."""

from pydantic import BaseModel, Field


class UserLevel(BaseModel):
    """포인트 구간별 사용자 레벨."""

    level_name: str = Field(..., description="레벨 이름")
    level_color: str = Field(..., description="배지 색상 (HEX)")
    level_icon: str = Field(..., description="배지 아이콘")
    min_points: int = Field(..., description="레벨 최소 포인트")
    max_points: int | None = Field(default=None, description="레벨 최대 포인트 (최고 레벨은 null)")


class UserProfileStats(BaseModel):
    """프로필 화면 통계."""

    user_id: str = Field(..., description="사용자 ID")
    total_reviews: int = Field(..., description="작성한 상세 리뷰 수")
    total_points: int = Field(..., description="누적 포인트")
    places_reviewed: int = Field(..., description="리뷰한 서로 다른 장소 수")
    average_rating: float = Field(..., description="리뷰별 평균 점수의 평균")
    level: UserLevel = Field(..., description="현재 레벨")
