# app/models/place.py
from datetime import datetime

from sqlalchemy import DateTime, Float, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


# Place 테이블 정의
class Place(Base):
    __tablename__ = "places"

    # 내부 ID (최초 insert 시 DB가 발급)
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Google Places 고유 ID (중복 불가)
    google_place_id: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    category: Mapped[str | None] = mapped_column(String(50), index=True, nullable=True)  # 예: PARRILLAS
    price_range: Mapped[str | None] = mapped_column(String(50), nullable=True)  # 예: 15000_20000
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    website: Mapped[str | None] = mapped_column(Text, nullable=True)

    # 상세 리뷰 기반 집계값
    rating: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    total_reviews: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # 관리용 타임스탬프
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), onupdate=func.now(), server_default=func.now()
    )

    def __repr__(self):
        return f"<Place(name={self.name}, google_place_id={self.google_place_id})>"
