"""상세 리뷰 작성/조회 스키마."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.place import PlaceDescriptor, PlaceResponse

PriceRange = Literal[
    "under_10000",
    "10000_15000",
    "15000_20000",
    "20000_30000",
    "30000_50000",
    "50000_80000",
    "over_80000",
]
RestaurantCategory = Literal[
    "PARRILLAS",
    "CAFE_Y_DELI",
    "BODEGONES",
    "RESTAURANTES",
    "HAMBURGUESERIAS",
    "PIZZERIAS",
    "PASTAS",
    "CARRITOS",
    "BARES",
]

MAX_PHOTOS_PER_REVIEW = 2


class DetailedRatings(BaseModel):
    """12개 세부 항목 점수. 모든 값은 1~10 정수입니다."""

    food_taste: int = Field(..., ge=1, le=10, description="Sabor de la comida")
    presentation: int = Field(..., ge=1, le=10, description="Presentación del plato")
    portion_size: int = Field(..., ge=1, le=10, description="Tamaño de la porción")
    drinks_variety: int = Field(..., ge=1, le=10, description="Carta de bebidas")
    veggie_options: int = Field(..., ge=1, le=10, description="Variedad platos veggies")
    gluten_free_options: int = Field(..., ge=1, le=10, description="Variedad platos sin TACC")
    vegan_options: int = Field(..., ge=1, le=10, description="Variedad platos veganos")
    music_acoustics: int = Field(..., ge=1, le=10, description="Música y acústica")
    ambiance: int = Field(..., ge=1, le=10, description="Ambientación")
    furniture_comfort: int = Field(..., ge=1, le=10, description="Confort del mobiliario")
    cleanliness: int = Field(..., ge=1, le=10, description="Limpieza")
    service: int = Field(..., ge=1, le=10, description="Servicio de mesa")


class DetailedReviewDraft(DetailedRatings):
    """사용자가 작성한 상세 리뷰 초안.

    사진은 업로드 파일로 별도 전달되며, 이미 호스팅된 사진은 `photo_urls`로 전달합니다.
    """

    place: PlaceDescriptor = Field(..., description="리뷰 대상 장소")
    price_range: PriceRange = Field(..., description="가격대")
    restaurant_category: RestaurantCategory = Field(..., description="식당 카테고리")
    dish_name: str | None = Field(default=None, max_length=255, description="추천 메뉴")
    comment: str | None = Field(default=None, description="자유 코멘트")
    photo_urls: list[str] = Field(
        default_factory=list, max_length=MAX_PHOTOS_PER_REVIEW, description="이미 호스팅된 사진 URL"
    )


class ReviewSubmissionResult(BaseModel):
    """리뷰 작성 성공 응답."""

    success: bool = Field(default=True, description="작성 성공 여부")
    review_id: int = Field(..., description="생성된 리뷰 ID")
    place_id: int = Field(..., description="리뷰가 연결된 장소 ID")
    points_earned: int = Field(..., description="이번 리뷰로 획득한 포인트")
    is_first_review: bool = Field(..., description="해당 장소의 첫 리뷰 여부")


class DetailedReviewResponse(DetailedRatings):
    """저장된 상세 리뷰."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="리뷰 ID")
    user_id: str = Field(..., description="작성자 ID")
    place_id: int = Field(..., description="장소 ID")
    dish_name: str | None = Field(default=None, description="추천 메뉴")
    comment: str | None = Field(default=None, description="자유 코멘트")
    photo_1_url: str | None = Field(default=None, description="첫 번째 사진 URL")
    photo_2_url: str | None = Field(default=None, description="두 번째 사진 URL")
    price_range: str = Field(..., description="가격대")
    restaurant_category: str = Field(..., description="식당 카테고리")
    overall_rating: float = Field(..., description="12개 항목 평균")
    created_at: datetime | None = Field(default=None, description="작성 시각")
    place: PlaceResponse | None = Field(default=None, description="리뷰 대상 장소")


class PlaceReviewsResponse(BaseModel):
    place: PlaceResponse = Field(..., description="장소 정보")
    reviews: list[DetailedReviewResponse] = Field(default_factory=list, description="최신순 상세 리뷰")
