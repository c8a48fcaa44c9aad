"""메모리 기반 사진 저장소 Mock."""

from app.services.photo_storage import PhotoStorage, StorageError


class InMemoryPhotoStorage(PhotoStorage):
    """업로드된 객체를 dict에 보관한다. `fail_uploads=True`면 업로드가 항상 실패한다."""

    BASE_URL = "https://storage.test/review-photos"

    def __init__(self, fail_uploads: bool = False) -> None:
        self.objects: dict[str, bytes] = {}
        self.fail_uploads = fail_uploads

    async def upload(self, name: str, data: bytes, content_type: str = "image/jpeg") -> None:
        if self.fail_uploads:
            raise StorageError("Storage API error: 503")
        self.objects[name] = data

    def public_url(self, name: str) -> str:
        return f"{self.BASE_URL}/{name}"

    async def delete(self, name: str) -> None:
        if name not in self.objects:
            raise StorageError("Storage API error: 404")
        del self.objects[name]
