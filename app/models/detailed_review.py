# app/models/detailed_review.py
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.place import Place

RATING_FIELDS: tuple[str, ...] = (
    "food_taste",
    "presentation",
    "portion_size",
    "drinks_variety",
    "veggie_options",
    "gluten_free_options",
    "vegan_options",
    "music_acoustics",
    "ambiance",
    "furniture_comfort",
    "cleanliness",
    "service",
)


class DetailedReview(Base):
    """12개 항목(1~10점)으로 구성된 상세 리뷰.

    (user_id, place_id) 조합당 하나만 존재해야 합니다. 유니크 제약은 DB가
    지원하는 경우의 안전장치이고, 서비스 계층의 사전 조회가 1차 검사입니다.
    """

    __tablename__ = "detailed_reviews"
    __table_args__ = (UniqueConstraint("user_id", "place_id", name="uq_detailed_reviews_user_place"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    place_id: Mapped[int] = mapped_column(ForeignKey("places.id"), index=True, nullable=False)

    food_taste: Mapped[int] = mapped_column(Integer, nullable=False)
    presentation: Mapped[int] = mapped_column(Integer, nullable=False)
    portion_size: Mapped[int] = mapped_column(Integer, nullable=False)
    drinks_variety: Mapped[int] = mapped_column(Integer, nullable=False)
    veggie_options: Mapped[int] = mapped_column(Integer, nullable=False)
    gluten_free_options: Mapped[int] = mapped_column(Integer, nullable=False)
    vegan_options: Mapped[int] = mapped_column(Integer, nullable=False)
    music_acoustics: Mapped[int] = mapped_column(Integer, nullable=False)
    ambiance: Mapped[int] = mapped_column(Integer, nullable=False)
    furniture_comfort: Mapped[int] = mapped_column(Integer, nullable=False)
    cleanliness: Mapped[int] = mapped_column(Integer, nullable=False)
    service: Mapped[int] = mapped_column(Integer, nullable=False)

    dish_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    photo_1_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    photo_2_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    price_range: Mapped[str] = mapped_column(String(50), nullable=False)
    restaurant_category: Mapped[str] = mapped_column(String(50), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    place: Mapped[Place] = relationship(Place, lazy="joined")

    @property
    def ratings(self) -> dict[str, int]:
        return {field: getattr(self, field) for field in RATING_FIELDS}

    @property
    def overall_rating(self) -> float:
        """12개 항목 점수의 평균."""
        values = list(self.ratings.values())
        return sum(values) / len(values)

    def __repr__(self):
        return f"<DetailedReview(user_id={self.user_id}, place_id={self.place_id})>"
