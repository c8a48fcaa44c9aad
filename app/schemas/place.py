"""장소 관련 요청/응답 스키마."""

from pydantic import BaseModel, ConfigDict, Field


class PlaceDescriptor(BaseModel):
    """리뷰 작성 폼에 포함되는 장소 정보.

    `id`가 없으면 아직 DB에 저장되지 않은 장소이며, `google_place_id`로
    기존 장소를 조회하거나 새로 생성합니다.
    """

    id: int | None = Field(default=None, description="내부 장소 ID (미저장 장소는 null)")
    google_place_id: str | None = Field(default=None, description="Google Places 고유 ID")
    name: str | None = Field(default=None, description="장소 이름")
    address: str | None = Field(default=None, description="장소 주소")
    latitude: float | None = Field(default=None, description="위도")
    longitude: float | None = Field(default=None, description="경도")
    phone: str | None = Field(default=None, description="전화번호")
    website: str | None = Field(default=None, description="웹사이트")


class PlaceResponse(BaseModel):
    """DB에 저장된 장소와 집계 평점."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="내부 장소 ID")
    google_place_id: str = Field(..., description="Google Places 고유 ID")
    name: str = Field(..., description="장소 이름")
    address: str | None = Field(default=None, description="장소 주소")
    latitude: float | None = Field(default=None, description="위도")
    longitude: float | None = Field(default=None, description="경도")
    category: str | None = Field(default=None, description="카테고리")
    price_range: str | None = Field(default=None, description="가격대")
    rating: float = Field(default=0.0, description="상세 리뷰 평균 점수")
    total_reviews: int = Field(default=0, description="상세 리뷰 수")


class PlaceSearchResponse(BaseModel):
    """장소 검색 프록시 응답. 결과는 Google 응답 원본 형태를 유지합니다."""

    results: list[dict] = Field(default_factory=list, description="필터링된 Google Places 검색 결과")
