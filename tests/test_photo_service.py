"""사진 검증/압축/업로드 테스트."""

from __future__ import annotations

import asyncio
import struct
import threading
import zlib
from io import BytesIO

import pytest
from PIL import Image

from app.core.config import get_settings
from app.core.errors import ValidationError
from app.services.photo_service import (
    PhotoUpload,
    compress_image,
    delete_review_photo,
    fit_within,
    prepare_review_photo,
    upload_review_photo,
    validate_image_file,
)
from tests.mocks.mock_photo_storage import InMemoryPhotoStorage

MB = 1024 * 1024


def _set_required_env(monkeypatch, **overrides: str) -> None:
    monkeypatch.setenv("AUTH_JWT_SECRET", "test-secret")
    for key, value in overrides.items():
        monkeypatch.setenv(key, value)
    get_settings.cache_clear()


def _image_bytes(size: tuple[int, int], fmt: str = "JPEG", mode: str = "RGB") -> bytes:
    image = Image.new(mode, size, color=(200, 120, 40) if mode == "RGB" else None)
    buffer = BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def _noise_bytes(size: tuple[int, int]) -> bytes:
    image = Image.effect_noise(size, 120).convert("RGB")
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def _png_header_only(width: int, height: int) -> bytes:
    """크기만 선언하고 실제 픽셀 데이터는 없는 PNG. 헤더만 읽는 경로를 검사할 때 쓴다."""

    def _chunk(kind: bytes, body: bytes) -> bytes:
        return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", zlib.crc32(kind + body))

    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + _chunk(b"IHDR", header)
        + _chunk(b"IDAT", zlib.compress(b"\x00"))
        + _chunk(b"IEND", b"")
    )


def test_validate_accepts_nine_megabyte_jpeg() -> None:
    validate_image_file("asado.jpg", "image/jpeg", 9 * MB)


def test_validate_rejects_file_over_ten_megabytes() -> None:
    with pytest.raises(ValidationError, match="Máximo 10MB"):
        validate_image_file("asado.jpg", "image/jpeg", 11 * MB)


def test_validate_rejects_non_image_content_type() -> None:
    with pytest.raises(ValidationError, match="debe ser una imagen"):
        validate_image_file("notas.jpg", "text/plain", 1024)


def test_validate_rejects_unsupported_extension() -> None:
    with pytest.raises(ValidationError, match="Formato de imagen no soportado"):
        validate_image_file("notas.txt", "image/jpeg", 1024)


def test_validate_rejects_unsupported_image_type() -> None:
    with pytest.raises(ValidationError, match="Formato de imagen no soportado"):
        validate_image_file("foto.bmp", "image/bmp", 1024)


@pytest.mark.parametrize(
    ("size", "expected"),
    [
        ((3000, 2000), (800, 533)),
        ((2000, 3000), (400, 600)),
        ((640, 480), (640, 480)),
        ((1600, 600), (800, 300)),
    ],
)
def test_fit_within_preserves_aspect_ratio(size, expected) -> None:
    assert fit_within(*size, max_width=800, max_height=600) == expected


def test_compress_image_resizes_into_bounding_box() -> None:
    result = compress_image(_image_bytes((3000, 2000)), max_width=800, max_height=600)

    assert (result.width, result.height) == (800, 533)
    with Image.open(BytesIO(result.data)) as output:
        assert output.format == "JPEG"
        assert output.size == (800, 533)


def test_compress_image_converts_transparent_png_to_jpeg() -> None:
    result = compress_image(_image_bytes((300, 300), fmt="PNG", mode="RGBA"))

    with Image.open(BytesIO(result.data)) as output:
        assert output.format == "JPEG"
        assert output.mode == "RGB"


def test_compress_image_stops_at_quality_floor() -> None:
    result = compress_image(_noise_bytes((800, 600)), target_size_kb=1)

    assert result.quality == 10


def test_compress_image_keeps_initial_quality_when_small_enough() -> None:
    result = compress_image(_image_bytes((200, 100)), initial_quality=85, target_size_kb=400)

    assert result.quality == 85
    assert len(result.data) <= 400 * 1024


def test_compress_image_rejects_unreadable_data() -> None:
    with pytest.raises(ValidationError):
        compress_image(b"definitely not an image")


def test_compress_image_rejects_declared_resolution_over_limit() -> None:
    with pytest.raises(ValidationError, match="Máximo 40 megapíxeles"):
        compress_image(_png_header_only(8000, 6000))


def test_compress_image_rejects_decompression_bomb() -> None:
    with pytest.raises(ValidationError, match="demasiada resolución"):
        compress_image(_png_header_only(20000, 10000))


def test_prepare_review_photo_uses_settings_off_the_event_loop(monkeypatch) -> None:
    _set_required_env(monkeypatch, PHOTO_MAX_WIDTH="400", PHOTO_MAX_HEIGHT="300")
    threads: list[threading.Thread] = []
    real_compress = compress_image

    def _recording_compress(*args, **kwargs):
        threads.append(threading.current_thread())
        return real_compress(*args, **kwargs)

    monkeypatch.setattr("app.services.photo_service.compress_image", _recording_compress)
    photo = PhotoUpload(filename="plato.jpg", content_type="image/jpeg", data=_image_bytes((1600, 1200)))

    result = asyncio.run(prepare_review_photo(photo))

    assert (result.width, result.height) == (400, 300)
    assert threads and threads[0] is not threading.main_thread()


def test_prepare_review_photo_applies_pixel_limit_from_settings(monkeypatch) -> None:
    _set_required_env(monkeypatch, PHOTO_MAX_PIXELS="1000000")
    photo = PhotoUpload(filename="plato.jpg", content_type="image/jpeg", data=_image_bytes((1200, 900)))

    with pytest.raises(ValidationError, match="Máximo 1 megapíxeles"):
        asyncio.run(prepare_review_photo(photo))


def test_upload_review_photo_returns_public_url() -> None:
    storage = InMemoryPhotoStorage()
    image = compress_image(_image_bytes((1200, 900), fmt="PNG"))

    url = asyncio.run(upload_review_photo(storage, image, "user-1", "review_abc", 1))

    [name] = storage.objects
    assert name.startswith("user-1_review_abc_1_")
    assert name.endswith(".jpg")
    assert storage.objects[name] == image.data
    assert url == f"{InMemoryPhotoStorage.BASE_URL}/{name}"


def test_upload_review_photo_falls_back_to_placeholder() -> None:
    storage = InMemoryPhotoStorage(fail_uploads=True)
    image = compress_image(_image_bytes((100, 100)))

    url = asyncio.run(upload_review_photo(storage, image, "user-1", "review_abc", 2))

    assert url == "/placeholder.svg?height=300&width=300&text=Foto+2"
    assert storage.objects == {}


def test_delete_review_photo_uses_last_path_segment() -> None:
    storage = InMemoryPhotoStorage()
    storage.objects["user-1_review_abc_1_1.jpg"] = b"data"

    deleted = asyncio.run(delete_review_photo(storage, f"{InMemoryPhotoStorage.BASE_URL}/user-1_review_abc_1_1.jpg"))
    missing = asyncio.run(delete_review_photo(storage, f"{InMemoryPhotoStorage.BASE_URL}/other.jpg"))

    assert deleted is True
    assert missing is False
    assert storage.objects == {}
