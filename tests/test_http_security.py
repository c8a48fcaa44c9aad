"""HTTP 하드닝 설정 테스트."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.http_security import install_http_security, resolve_docs_mode, split_csv


def _settings(**overrides) -> Settings:
    return Settings(AUTH_JWT_SECRET="test-secret", **overrides)


def _app(settings: Settings) -> FastAPI:
    app = FastAPI()
    install_http_security(app, settings)

    @app.get("/ping")
    def ping() -> dict:
        return {"ok": True}

    return app


@pytest.mark.parametrize(
    ("mode", "expected"),
    [("public", "public"), (" SECRET ", "secret"), ("disabled", "disabled"), ("open", "disabled"), ("", "disabled")],
)
def test_resolve_docs_mode(mode: str, expected: str) -> None:
    assert resolve_docs_mode(mode) == expected


def test_split_csv_drops_blank_items() -> None:
    assert split_csv(" a, ,b ,") == ["a", "b"]
    assert split_csv("") == []


def test_security_headers_can_be_disabled() -> None:
    client = TestClient(_app(_settings(SECURITY_HEADERS_ENABLED=False)))

    response = client.get("/ping")

    assert "x-frame-options" not in response.headers


def test_hsts_only_over_https() -> None:
    settings = _settings(ENABLE_HSTS=True, HSTS_MAX_AGE_SECONDS=600)

    http = TestClient(_app(settings)).get("/ping")
    https = TestClient(_app(settings), base_url="https://testserver").get("/ping")

    assert "strict-transport-security" not in http.headers
    assert https.headers["strict-transport-security"] == "max-age=600"


def test_wildcard_cors_never_allows_credentials() -> None:
    client = TestClient(_app(_settings(CORS_ALLOW_ORIGINS="*", CORS_ALLOW_CREDENTIALS=True)))

    response = client.get("/ping", headers={"Origin": "https://anywhere.example.com"})

    assert response.headers["access-control-allow-origin"] == "*"
    assert "access-control-allow-credentials" not in response.headers


def test_untrusted_host_is_rejected() -> None:
    client = TestClient(_app(_settings(TRUSTED_HOSTS="api.comidita.example.com")))

    assert client.get("/ping").status_code == 400
