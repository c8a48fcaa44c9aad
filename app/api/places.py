"""Google Places 프록시 및 장소 리뷰 조회 API."""

from __future__ import annotations

import re

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app.api.dependencies import enforce_rate_limit, get_places_service, get_response_cache
from app.core.config import get_settings
from app.core.errors import ValidationError
from app.core.logger import get_logger
from app.core.response_cache import ResponseCache
from app.database import get_db
from app.schemas.place import PlaceResponse, PlaceSearchResponse
from app.schemas.review import DetailedReviewResponse, PlaceReviewsResponse
from app.services.google_places_service import GooglePlacesService
from app.services.review_service import list_place_reviews

router = APIRouter(prefix="/api/places", tags=["places"])
logger = get_logger(__name__)

_DISALLOWED_QUERY_CHARS = re.compile(r"[^\w\s\-áéíóúñü]", re.IGNORECASE)
_MAX_QUERY_LENGTH = 100


def sanitize_search_query(query: str) -> str:
    """검색어 앞뒤 공백과 허용되지 않는 문자를 제거하고 100자로 자릅니다."""
    return _DISALLOWED_QUERY_CHARS.sub("", query.strip())[:_MAX_QUERY_LENGTH]


@router.get("/search", response_model=PlaceSearchResponse, dependencies=[Depends(enforce_rate_limit)])
async def search_places(
    response: Response,
    q: str | None = Query(default=None, description="검색어"),
    cache: ResponseCache = Depends(get_response_cache),
    places_service: GooglePlacesService = Depends(get_places_service),
) -> PlaceSearchResponse:
    """식당을 검색하고 설정된 도시/지역 주소의 결과만 반환합니다."""
    query = sanitize_search_query(q or "")
    if not query:
        raise ValidationError("Query parameter is required", field="q")

    cache_key = f"places:search:{query.lower()}"
    cached = cache.get(cache_key)
    if cached is not None:
        response.headers["X-Cache"] = "HIT"
        return PlaceSearchResponse(results=cached)

    results = await places_service.search(query)
    cache.set(cache_key, results, ttl=get_settings().CACHE_TTL_SECONDS)
    response.headers["X-Cache"] = "MISS"
    logger.info("Place search served: query=%s results=%d", query, len(results))
    return PlaceSearchResponse(results=results)


@router.get("/details", dependencies=[Depends(enforce_rate_limit)])
async def place_details(
    response: Response,
    place_id: str | None = Query(default=None, description="Google Places ID"),
    cache: ResponseCache = Depends(get_response_cache),
    places_service: GooglePlacesService = Depends(get_places_service),
) -> dict:
    """Google 상세 조회 응답 원본을 반환합니다. 찾지 못한 장소도 200으로 전달합니다."""
    if not place_id:
        raise ValidationError("Place ID is required", field="place_id")

    cache_key = f"places:details:{place_id}"
    cached = cache.get(cache_key)
    if cached is not None:
        response.headers["X-Cache"] = "HIT"
        return cached

    data = await places_service.details(place_id)
    # 찾지 못한 장소는 캐시하지 않는다
    if data.get("status") == "OK":
        cache.set(cache_key, data, ttl=get_settings().CACHE_TTL_SECONDS)
    response.headers["X-Cache"] = "MISS"
    return data


@router.get("/{place_id}/reviews", response_model=PlaceReviewsResponse)
def place_reviews(place_id: int, db: Session = Depends(get_db)) -> PlaceReviewsResponse:  # noqa: B008
    """장소 정보와 상세 리뷰를 최신순으로 반환합니다."""
    place, reviews = list_place_reviews(db, place_id)
    return PlaceReviewsResponse(
        place=PlaceResponse.model_validate(place),
        reviews=[DetailedReviewResponse.model_validate(review) for review in reviews],
    )
