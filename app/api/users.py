"""사용자 프로필/레벨 API."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.dependencies import require_user
from app.database import get_db
from app.schemas.jwt import UserTokenPayload
from app.schemas.user import UserLevel, UserProfileStats
from app.services.user_service import get_profile_stats, get_user_level

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/me/profile", response_model=UserProfileStats)
def my_profile(
    user: UserTokenPayload = Depends(require_user),
    db: Session = Depends(get_db),  # noqa: B008
) -> UserProfileStats:
    """로그인한 사용자의 리뷰/포인트 통계를 반환합니다."""
    return get_profile_stats(db, user.user_id)


@router.get("/levels/current", response_model=UserLevel)
def level_for_points(points: int = Query(0, description="누적 포인트")) -> UserLevel:
    """포인트에 해당하는 레벨을 반환합니다."""
    return get_user_level(points)
