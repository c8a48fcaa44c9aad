"""Places 서비스 추상 프로토콜 정의."""

from abc import ABC, abstractmethod
from typing import Any


class PlacesServiceProtocol(ABC):
    """Places API 호출을 위한 인터페이스를 정의합니다."""

    @abstractmethod
    async def search(self, query: str) -> list[dict[str, Any]]:
        """검색 쿼리로 장소를 검색합니다.

        Args:
            query: 검색 쿼리

        Returns:
            설정된 도시/지역 주소로 필터링된 Google 검색 결과 목록
        """
        raise NotImplementedError

    @abstractmethod
    async def details(self, place_id: str) -> dict[str, Any]:
        """장소 상세 정보를 조회합니다.

        Args:
            place_id: Google Places ID

        Returns:
            Google 상세 조회 응답 원본
        """
        raise NotImplementedError


def filter_by_address(places: list[dict[str, Any]], needles: list[str]) -> list[dict[str, Any]]:
    """`formatted_address`에 지정된 도시/지역 문자열이 포함된 결과만 남깁니다(대소문자 무시)."""
    lowered = [needle.lower() for needle in needles if needle]
    filtered = []
    for place in places:
        address = (place.get("formatted_address") or "").lower()
        if any(needle in address for needle in lowered):
            filtered.append(place)
    return filtered
