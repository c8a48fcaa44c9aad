"""Google Places API 서비스 구현."""

from __future__ import annotations

import asyncio
from functools import lru_cache
from typing import Any

import requests

from app.core.config import get_settings
from app.core.errors import UpstreamError
from app.core.logger import get_logger
from app.core.timeout_policy import get_timeout_policy, to_requests_timeout
from app.services.places_service import PlacesServiceProtocol, filter_by_address

logger = get_logger(__name__)


class GooglePlacesError(UpstreamError):
    """Google Places 호출 실패 또는 설정 누락 시 발생하는 예외."""

    code = "GOOGLE_API_ERROR"


class GooglePlacesService(PlacesServiceProtocol):
    """Google Places (Text Search / Details) API 기반 Places 서비스."""

    _BASE_URL = "https://maps.googleapis.com/maps/api/place"
    _OK_STATUSES = frozenset({"OK", "ZERO_RESULTS"})
    # 조회 결과를 뜻하는 상태. 키/쿼터 오류는 계속 실패로 처리한다
    _DETAILS_PASSTHROUGH_STATUSES = _OK_STATUSES | {"NOT_FOUND", "INVALID_REQUEST"}
    _DETAILS_FIELDS = "name,formatted_address,geometry,formatted_phone_number,website,rating,user_ratings_total"
    _USER_AGENT = "Comidita App/1.0"

    def __init__(
        self,
        api_key: str | None,
        timeout_seconds: int = 10,
        location: str = "-32.9442426,-60.6505388",
        radius_meters: int = 50000,
        place_type: str = "restaurant",
        address_filters: list[str] | None = None,
    ) -> None:
        self._api_key = api_key or ""
        self._timeout_seconds = timeout_seconds
        self._location = location
        self._radius_meters = radius_meters
        self._place_type = place_type
        self._address_filters = address_filters if address_filters is not None else ["rosario", "santa fe"]

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    @classmethod
    def from_settings(cls) -> GooglePlacesService:
        """애플리케이션 설정으로 서비스 인스턴스를 생성합니다."""
        settings = get_settings()
        timeout_policy = get_timeout_policy(settings)
        api_key = settings.google_maps_api_key
        if not api_key:
            logger.error("GOOGLE_MAPS_API_KEY is not configured.")
        return cls(
            api_key=api_key,
            timeout_seconds=timeout_policy.google_places_timeout_seconds,
            location=settings.SEARCH_LOCATION,
            radius_meters=settings.SEARCH_RADIUS_METERS,
            place_type=settings.SEARCH_PLACE_TYPE,
            address_filters=settings.search_address_filters,
        )

    async def search(self, query: str) -> list[dict[str, Any]]:
        """텍스트 쿼리로 식당을 검색하고 설정된 도시/지역 주소만 남깁니다."""
        if not query.strip():
            return []

        params = {
            "query": query,
            "location": self._location,
            "radius": str(self._radius_meters),
            "type": self._place_type,
        }
        data = await self._request("textsearch", params)

        results = data.get("results") or []
        filtered = filter_by_address(results, self._address_filters)
        logger.info(
            "Google Places search completed: candidate_count=%d filtered_count=%d",
            len(results),
            len(filtered),
        )
        return filtered

    async def details(self, place_id: str) -> dict[str, Any]:
        """장소 상세 정보를 조회하고 응답 원본을 반환합니다.

        `NOT_FOUND`, `INVALID_REQUEST` 응답도 원본 그대로 반환합니다.
        """
        if not place_id:
            raise GooglePlacesError("Place ID is required", status_code=400)

        data = await self._request(
            "details",
            {"place_id": place_id, "fields": self._DETAILS_FIELDS},
            accepted_statuses=self._DETAILS_PASSTHROUGH_STATUSES,
        )
        if data.get("status") != "OK":
            logger.warning("Google Places details not found: place_id=%s status=%s", place_id, data.get("status"))
        return data

    async def _request(
        self,
        endpoint: str,
        params: dict[str, str],
        accepted_statuses: frozenset[str] = _OK_STATUSES,
    ) -> dict[str, Any]:
        if not self._api_key:
            raise GooglePlacesError("Google Maps API key not configured")

        url = f"{self._BASE_URL}/{endpoint}/json"
        request_params = {**params, "key": self._api_key}
        request_timeout = to_requests_timeout(self._timeout_seconds)

        def _send() -> requests.Response:
            with requests.Session() as session:
                return session.get(
                    url,
                    params=request_params,
                    headers={"User-Agent": self._USER_AGENT},
                    timeout=request_timeout,
                )

        try:
            response = await asyncio.to_thread(_send)
            response.raise_for_status()
            data = response.json()
        except requests.HTTPError as exc:
            response = exc.response
            status_code = response.status_code if response is not None else None
            body = (response.text or "")[:200] if response is not None else ""
            logger.error("Google Places API error: endpoint=%s status=%s body=%s", endpoint, status_code, body)
            raise GooglePlacesError(f"Google Places API error: {status_code}") from exc
        except requests.RequestException as exc:
            logger.error("Google Places API request failed: endpoint=%s error=%s", endpoint, exc)
            raise GooglePlacesError("Google Places API request failed") from exc
        except ValueError as exc:
            logger.error("Google Places API response parse failed: endpoint=%s error=%s", endpoint, exc)
            raise GooglePlacesError("Google Places API returned an invalid response") from exc

        api_status = (data or {}).get("status")
        if api_status not in accepted_statuses:
            logger.error("Google Places API status error: endpoint=%s status=%s", endpoint, api_status)
            raise GooglePlacesError(f"Google Places API error: {api_status}")
        return data


@lru_cache(maxsize=1)
def get_google_places_service() -> GooglePlacesService:
    """설정 재사용을 위한 프로세스 단위 싱글톤을 반환합니다."""
    return GooglePlacesService.from_settings()
