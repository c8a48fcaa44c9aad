"""리뷰 사진 객체 저장소 클라이언트."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from functools import lru_cache

import requests

from app.core.config import get_settings
from app.core.errors import UpstreamError
from app.core.logger import get_logger
from app.core.timeout_policy import get_timeout_policy, to_requests_timeout

logger = get_logger(__name__)


class StorageError(UpstreamError):
    """객체 저장소 호출 실패."""

    code = "STORAGE_ERROR"


class PhotoStorage(ABC):
    """사진 업로드/공개 URL/삭제 인터페이스."""

    @abstractmethod
    async def upload(self, name: str, data: bytes, content_type: str = "image/jpeg") -> None:
        raise NotImplementedError

    @abstractmethod
    def public_url(self, name: str) -> str:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, name: str) -> None:
        raise NotImplementedError


class SupabasePhotoStorage(PhotoStorage):
    """호스팅 저장소의 버킷 REST API를 사용하는 구현."""

    def __init__(self, base_url: str, service_key: str, bucket: str, timeout_seconds: int = 15) -> None:
        self._base_url = (base_url or "").rstrip("/")
        self._service_key = service_key
        self._bucket = bucket
        self._timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls) -> SupabasePhotoStorage:
        settings = get_settings()
        timeout_policy = get_timeout_policy(settings)
        return cls(
            base_url=settings.SUPABASE_URL,
            service_key=settings.SUPABASE_SERVICE_KEY,
            bucket=settings.STORAGE_BUCKET,
            timeout_seconds=timeout_policy.storage_timeout_seconds,
        )

    def _headers(self, **extra: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._service_key}",
            "apikey": self._service_key,
            **extra,
        }

    async def upload(self, name: str, data: bytes, content_type: str = "image/jpeg") -> None:
        url = f"{self._base_url}/storage/v1/object/{self._bucket}/{name}"
        headers = self._headers(**{"Content-Type": content_type, "cache-control": "3600", "x-upsert": "true"})
        await self._send("POST", url, headers=headers, data=data)
        logger.info("Photo uploaded: bucket=%s name=%s bytes=%d", self._bucket, name, len(data))

    def public_url(self, name: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{self._bucket}/{name}"

    async def delete(self, name: str) -> None:
        url = f"{self._base_url}/storage/v1/object/{self._bucket}"
        await self._send("DELETE", url, headers=self._headers(), json={"prefixes": [name]})

    async def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        if not self._base_url or not self._service_key:
            raise StorageError("Storage credentials are not configured.")

        request_timeout = to_requests_timeout(self._timeout_seconds)

        def _call() -> requests.Response:
            return requests.request(method, url, timeout=request_timeout, **kwargs)

        try:
            response = await asyncio.to_thread(_call)
            response.raise_for_status()
            return response
        except requests.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            raise StorageError(f"Storage API error: {status_code}") from exc
        except requests.RequestException as exc:
            raise StorageError(f"Storage request failed: {exc}") from exc


@lru_cache(maxsize=1)
def get_photo_storage() -> PhotoStorage:
    """설정 재사용을 위한 프로세스 단위 싱글톤을 반환합니다."""
    return SupabasePhotoStorage.from_settings()
