"""리뷰 사진 검증, 압축, 업로드."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

from app.core.config import get_settings
from app.core.errors import ValidationError
from app.core.logger import get_logger
from app.services.photo_storage import PhotoStorage, StorageError

logger = get_logger(__name__)

ALLOWED_CONTENT_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/webp", "image/gif"})
ALLOWED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp", ".gif")
MAX_UPLOAD_BYTES = 10 * 1024 * 1024
MAX_IMAGE_PIXELS = 40_000_000

QUALITY_STEP = 10
QUALITY_FLOOR = 10


@dataclass(frozen=True, slots=True)
class PhotoUpload:
    """업로드된 원본 이미지."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True, slots=True)
class CompressedImage:
    data: bytes
    width: int
    height: int
    quality: int


def validate_image_file(filename: str, content_type: str | None, size: int, max_bytes: int = MAX_UPLOAD_BYTES) -> None:
    """MIME 타입, 확장자, 크기를 검사합니다.

    Raises:
        ValidationError: 허용되지 않는 파일인 경우.
    """
    normalized_type = (content_type or "").lower()
    if not normalized_type.startswith("image/"):
        raise ValidationError("El archivo debe ser una imagen", field="photos")

    if normalized_type not in ALLOWED_CONTENT_TYPES or not (filename or "").lower().endswith(ALLOWED_EXTENSIONS):
        raise ValidationError("Formato de imagen no soportado. Usa JPG, PNG, WebP o GIF", field="photos")

    if size > max_bytes:
        raise ValidationError(f"La imagen es muy grande. Máximo {max_bytes // (1024 * 1024)}MB", field="photos")


def fit_within(width: int, height: int, max_width: int, max_height: int) -> tuple[int, int]:
    """종횡비를 유지하면서 (max_width, max_height) 상자 안에 들어가는 크기를 계산합니다."""
    if width <= 0 or height <= 0:
        raise ValueError("Image dimensions must be positive")

    aspect_ratio = width / height
    new_width, new_height = float(width), float(height)

    if new_width > max_width:
        new_width = max_width
        new_height = new_width / aspect_ratio

    if new_height > max_height:
        new_height = max_height
        new_width = new_height * aspect_ratio

    return max(1, round(new_width)), max(1, round(new_height))


def _encode_jpeg(image: Image.Image, quality: int) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="JPEG", quality=quality, optimize=True)
    return buffer.getvalue()


def _too_many_pixels(max_pixels: int) -> ValidationError:
    return ValidationError(
        f"La imagen tiene demasiada resolución. Máximo {max_pixels // 1_000_000} megapíxeles",
        field="photos",
    )


def compress_image(
    data: bytes,
    max_width: int = 800,
    max_height: int = 600,
    initial_quality: int = 85,
    target_size_kb: int = 400,
    max_pixels: int = MAX_IMAGE_PIXELS,
) -> CompressedImage:
    """이미지를 상자 크기에 맞게 줄이고 목표 용량 이하가 될 때까지 JPEG 품질을 낮춥니다.

    픽셀 수는 헤더만 읽은 상태에서 `max_pixels`와 비교하므로 큰 이미지는 디코딩 전에 거부됩니다.
    품질은 `initial_quality`에서 10씩 낮아지며, 목표 용량 이하가 되거나
    품질 하한(10)에 도달하면 종료합니다.

    Raises:
        ValidationError: 읽을 수 없는 데이터이거나 픽셀 수가 너무 많은 경우.
    """
    try:
        with Image.open(BytesIO(data)) as source:
            if source.width * source.height > max_pixels:
                raise _too_many_pixels(max_pixels)
            image = ImageOps.exif_transpose(source)
            if image is source:
                image = source.copy()
    except Image.DecompressionBombError as exc:
        raise _too_many_pixels(max_pixels) from exc
    except (UnidentifiedImageError, OSError) as exc:
        raise ValidationError("No se pudo leer la imagen", field="photos") from exc

    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")

    width, height = fit_within(image.width, image.height, max_width, max_height)
    if (width, height) != image.size:
        image = image.resize((width, height), Image.Resampling.LANCZOS)

    target_bytes = target_size_kb * 1024
    quality = max(QUALITY_FLOOR, initial_quality)
    encoded = _encode_jpeg(image, quality)
    while len(encoded) > target_bytes and quality > QUALITY_FLOOR:
        quality = max(QUALITY_FLOOR, quality - QUALITY_STEP)
        encoded = _encode_jpeg(image, quality)

    logger.info(
        "Image compressed: original_kb=%.1f final_kb=%.1f size=%dx%d quality=%d",
        len(data) / 1024,
        len(encoded) / 1024,
        width,
        height,
        quality,
    )
    return CompressedImage(data=encoded, width=width, height=height, quality=quality)


def build_photo_filename(user_id: str, review_key: str, photo_index: int, timestamp_ms: int | None = None) -> str:
    stamp = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    return f"{user_id}_{review_key}_{photo_index}_{stamp}.jpg"


def placeholder_photo_url(photo_index: int) -> str:
    return f"/placeholder.svg?height=300&width=300&text=Foto+{photo_index}"


async def prepare_review_photo(photo: PhotoUpload) -> CompressedImage:
    """설정값으로 사진을 압축합니다. Pillow 작업은 워커 스레드에서 실행합니다."""
    settings = get_settings()
    return await asyncio.to_thread(
        compress_image,
        photo.data,
        max_width=settings.PHOTO_MAX_WIDTH,
        max_height=settings.PHOTO_MAX_HEIGHT,
        initial_quality=settings.PHOTO_INITIAL_QUALITY,
        target_size_kb=settings.PHOTO_TARGET_SIZE_KB,
        max_pixels=settings.PHOTO_MAX_PIXELS,
    )


async def upload_review_photo(
    storage: PhotoStorage,
    image: CompressedImage,
    user_id: str,
    review_key: str,
    photo_index: int,
) -> str:
    """압축된 사진을 업로드하고 공개 URL을 반환합니다.

    저장소 업로드 실패 시 제출 전체를 중단하지 않고 플레이스홀더 URL을 반환합니다.
    """
    filename = build_photo_filename(user_id, review_key, photo_index)

    try:
        await storage.upload(filename, image.data, content_type="image/jpeg")
    except StorageError as exc:
        logger.error("Review photo upload failed: filename=%s error=%s", filename, exc)
        return placeholder_photo_url(photo_index)

    return storage.public_url(filename)


async def delete_review_photo(storage: PhotoStorage, photo_url: str) -> bool:
    """URL의 마지막 경로 조각을 객체 이름으로 보고 삭제합니다."""
    filename = photo_url.rstrip("/").split("/")[-1]
    if not filename:
        return False

    try:
        await storage.delete(filename)
    except StorageError as exc:
        logger.error("Review photo delete failed: filename=%s error=%s", filename, exc)
        return False
    return True
