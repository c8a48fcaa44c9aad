"""사용자 포인트, 레벨, 프로필 통계."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.logger import get_logger
from app.models.detailed_review import DetailedReview
from app.models.user import User
from app.schemas.user import UserLevel, UserProfileStats

logger = get_logger(__name__)

USER_LEVELS: tuple[UserLevel, ...] = (
    UserLevel(level_name="Nuevo", level_color="#6B7280", level_icon="🥚", min_points=0, max_points=999),
    UserLevel(level_name="Comensal", level_color="#F59E0B", level_icon="🍳", min_points=1000, max_points=2499),
    UserLevel(level_name="Foodie", level_color="#10B981", level_icon="🍝", min_points=2500, max_points=4999),
    UserLevel(level_name="Crítico", level_color="#7C3AED", level_icon="🍷", min_points=5000, max_points=None),
)


def get_user_level(points: int | None) -> UserLevel:
    """포인트에 해당하는 레벨을 반환합니다. 알 수 없는 값은 첫 레벨로 처리합니다."""
    if points is None or points < 0:
        return USER_LEVELS[0]

    for level in reversed(USER_LEVELS):
        if points >= level.min_points:
            return level
    return USER_LEVELS[0]


def award_points(db: Session, user_id: str, points: int, email: str | None = None) -> User:
    """사용자에게 포인트를 적립합니다. `users` 행이 없으면 생성합니다.

    커밋은 호출자가 담당합니다.
    """
    user = db.get(User, user_id)
    if user is None:
        user = User(id=user_id, email=email, points=0)
        db.add(user)

    user.points = (user.points or 0) + points
    logger.info("Points awarded: user_id=%s points=%d total=%d", user_id, points, user.points)
    return user


def get_profile_stats(db: Session, user_id: str) -> UserProfileStats:
    """프로필 화면에 표시할 리뷰/포인트 통계를 계산합니다."""
    reviews = db.scalars(select(DetailedReview).where(DetailedReview.user_id == user_id)).all()
    user = db.get(User, user_id)
    total_points = (user.points or 0) if user is not None else 0

    total_reviews = len(reviews)
    places_reviewed = len({review.place_id for review in reviews})
    average_rating = (
        sum(review.overall_rating for review in reviews) / total_reviews if total_reviews else 0.0
    )

    return UserProfileStats(
        user_id=user_id,
        total_reviews=total_reviews,
        total_points=total_points,
        places_reviewed=places_reviewed,
        average_rating=round(average_rating, 2),
        level=get_user_level(total_points),
    )
