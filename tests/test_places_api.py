"""장소 검색/상세 프록시 API 테스트."""

from __future__ import annotations

import importlib

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_places_service
from app.core.config import get_settings
from app.database import get_db
from app.models.detailed_review import RATING_FIELDS, DetailedReview
from app.models.place import Place
from app.services.google_places_service import GooglePlacesService
from tests.mocks.mock_places_service import MockGooglePlacesService


def _set_required_env(monkeypatch, **overrides: str) -> None:
    monkeypatch.setenv("AUTH_JWT_SECRET", "test-secret")
    monkeypatch.setenv("DOCS_MODE", "disabled")
    for key, value in overrides.items():
        monkeypatch.setenv(key, value)
    get_settings.cache_clear()


def _load_main_module():
    import app.main as main_module

    return importlib.reload(main_module)


@pytest.fixture()
def places_service() -> MockGooglePlacesService:
    return MockGooglePlacesService()


@pytest.fixture()
def client(monkeypatch, places_service) -> TestClient:
    _set_required_env(monkeypatch)
    main_module = _load_main_module()
    main_module.app.dependency_overrides[get_places_service] = lambda: places_service
    return TestClient(main_module.app)


def test_search_without_query_is_bad_request(client, places_service) -> None:
    response = client.get("/api/places/search")

    assert response.status_code == 400
    assert response.json() == {"detail": "Query parameter is required", "code": "VALIDATION_ERROR"}
    assert places_service.search_calls == []


def test_search_with_only_disallowed_characters_is_bad_request(client) -> None:
    response = client.get("/api/places/search", params={"q": "  <>;  "})

    assert response.status_code == 400


def test_search_returns_only_configured_region(client, places_service) -> None:
    response = client.get("/api/places/search", params={"q": "asado"})

    assert response.status_code == 200
    assert response.headers["x-cache"] == "MISS"
    place_ids = [place["place_id"] for place in response.json()["results"]]
    assert place_ids == ["ChIJ-asado-rosario-centro", "ChIJ-asado-funes"]
    assert places_service.search_calls == ["asado"]


def test_search_query_is_sanitized_before_lookup(client, places_service) -> None:
    client.get("/api/places/search", params={"q": "  <b>asado</b>!  "})

    assert places_service.search_calls == ["basadob"]


def test_repeated_search_is_served_from_cache(client, places_service) -> None:
    first = client.get("/api/places/search", params={"q": "asado"})
    second = client.get("/api/places/search", params={"q": "ASADO"})

    assert first.headers["x-cache"] == "MISS"
    assert second.headers["x-cache"] == "HIT"
    assert second.json() == first.json()
    assert places_service.search_calls == ["asado"]


def test_search_upstream_failure_is_server_error(monkeypatch) -> None:
    _set_required_env(monkeypatch)
    main_module = _load_main_module()
    main_module.app.dependency_overrides[get_places_service] = lambda: MockGooglePlacesService(fail=True)
    client = TestClient(main_module.app)

    response = client.get("/api/places/search", params={"q": "asado"})

    assert response.status_code == 500
    assert response.json()["code"] == "GOOGLE_API_ERROR"


def test_details_requires_place_id(client) -> None:
    response = client.get("/api/places/details")

    assert response.status_code == 400
    assert response.json() == {"detail": "Place ID is required", "code": "VALIDATION_ERROR"}


def test_details_returns_raw_payload_and_caches(client, places_service) -> None:
    first = client.get("/api/places/details", params={"place_id": "ChIJ-asado-funes"})
    second = client.get("/api/places/details", params={"place_id": "ChIJ-asado-funes"})

    assert first.status_code == 200
    assert first.json()["result"]["name"] == "Parrilla Funes"
    assert second.headers["x-cache"] == "HIT"
    assert places_service.details_calls == ["ChIJ-asado-funes"]


def test_details_for_unknown_place_is_passed_through_without_caching(client, places_service) -> None:
    first = client.get("/api/places/details", params={"place_id": "ChIJ-inexistente"})
    second = client.get("/api/places/details", params={"place_id": "ChIJ-inexistente"})

    assert first.status_code == 200
    assert first.json() == {"status": "NOT_FOUND"}
    assert second.headers["x-cache"] == "MISS"
    assert places_service.details_calls == ["ChIJ-inexistente", "ChIJ-inexistente"]


def test_details_without_api_key_is_server_error(monkeypatch) -> None:
    _set_required_env(monkeypatch)
    main_module = _load_main_module()
    main_module.app.dependency_overrides[get_places_service] = lambda: GooglePlacesService(api_key=None)
    client = TestClient(main_module.app)

    response = client.get("/api/places/details", params={"place_id": "ChIJ-1"})

    assert response.status_code == 500
    assert response.json() == {"detail": "Google Maps API key not configured", "code": "GOOGLE_API_ERROR"}


def test_rate_limit_returns_429_after_max_requests(monkeypatch, places_service) -> None:
    _set_required_env(monkeypatch, RATE_LIMIT_MAX_REQUESTS="2")
    main_module = _load_main_module()
    main_module.app.dependency_overrides[get_places_service] = lambda: places_service
    client = TestClient(main_module.app)

    statuses = [client.get("/api/places/search", params={"q": "asado"}).status_code for _ in range(3)]
    blocked = client.get("/api/places/details", params={"place_id": "ChIJ-asado-funes"})

    assert statuses == [200, 200, 429]
    assert blocked.status_code == 429
    assert blocked.json() == {"detail": "Rate limit exceeded", "code": "RATE_LIMIT_EXCEEDED"}


def test_rate_limit_remaining_header(client) -> None:
    response = client.get("/api/places/search", params={"q": "asado"})

    assert response.headers["x-ratelimit-remaining"] == "99"


def test_place_reviews_lists_saved_reviews(monkeypatch, session_factory) -> None:
    _set_required_env(monkeypatch)
    main_module = _load_main_module()

    def _override_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    main_module.app.dependency_overrides[get_db] = _override_db
    with session_factory() as session:
        place = Place(google_place_id="ChIJ-1", name="El Establo", rating=7.0, total_reviews=1)
        session.add(place)
        session.flush()
        session.add(
            DetailedReview(
                user_id="user-1",
                place_id=place.id,
                price_range="15000_20000",
                restaurant_category="PARRILLAS",
                **{field: 7 for field in RATING_FIELDS},
            )
        )
        session.commit()
        place_id = place.id

    client = TestClient(main_module.app)
    response = client.get(f"/api/places/{place_id}/reviews")
    missing = client.get("/api/places/999/reviews")

    assert response.status_code == 200
    body = response.json()
    assert body["place"]["name"] == "El Establo"
    assert [review["overall_rating"] for review in body["reviews"]] == [7.0]
    assert missing.status_code == 404
    assert missing.json() == {"detail": "Lugar no encontrado", "code": "NOT_FOUND"}
