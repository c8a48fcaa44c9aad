"""상세 리뷰 작성 워크플로우.

사진 검증/압축, 장소 조회/생성, 중복 리뷰 검사, 사진 업로드, 리뷰 저장과 포인트 적립을
순서대로 수행합니다. 각 단계는 이전 단계가 만든 ID를 사용하므로 순서를 바꿀 수 없습니다.
조회 후 생성 방식이라 동시 요청 간 경합이 있을 수 있으며, 리뷰 행의 유니크 제약 위반만
중복으로 처리합니다. 앞 단계의 부수 효과(새 장소, 업로드된 사진)는 롤백하지 않습니다.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.errors import DuplicateReviewError, NotFoundError, UnauthorizedError, UpstreamError, ValidationError
from app.core.logger import get_logger
from app.models.detailed_review import RATING_FIELDS, DetailedReview
from app.models.place import Place
from app.schemas.jwt import UserTokenPayload
from app.schemas.place import PlaceDescriptor
from app.schemas.review import MAX_PHOTOS_PER_REVIEW, DetailedReviewDraft, ReviewSubmissionResult
from app.services.photo_service import (
    CompressedImage,
    PhotoUpload,
    prepare_review_photo,
    upload_review_photo,
    validate_image_file,
)
from app.services.photo_storage import PhotoStorage
from app.services.user_service import award_points

logger = get_logger(__name__)

PhotoSource = PhotoUpload | str
PreparedPhoto = CompressedImage | str


def _db_failure(action: str, exc: SQLAlchemyError) -> UpstreamError:
    logger.error("Database call failed: action=%s error=%s", action, exc)
    return UpstreamError("Error de conexión. Intenta nuevamente.")


def _find_place_by_google_id(db: Session, google_place_id: str) -> Place | None:
    return db.scalars(select(Place).where(Place.google_place_id == google_place_id)).first()


def resolve_place(db: Session, descriptor: PlaceDescriptor) -> Place:
    """리뷰 대상 장소를 찾거나 새로 생성합니다.

    내부 ID가 있으면 해당 장소를 사용하고, 없으면 Google Place ID로 조회한 뒤
    없을 때만 새 장소를 저장합니다.
    """
    if not descriptor.google_place_id:
        raise ValidationError("Datos del lugar incompletos", field="place")

    try:
        if descriptor.id is not None:
            place = db.get(Place, descriptor.id)
            if place is None:
                raise NotFoundError("Lugar")
            return place

        existing = _find_place_by_google_id(db, descriptor.google_place_id)
        if existing is not None:
            return existing

        place = Place(
            google_place_id=descriptor.google_place_id,
            name=descriptor.name or descriptor.google_place_id,
            address=descriptor.address,
            latitude=descriptor.latitude,
            longitude=descriptor.longitude,
            phone=descriptor.phone,
            website=descriptor.website,
        )
        db.add(place)
        try:
            db.commit()
        except IntegrityError:
            # 동시 요청이 같은 장소를 먼저 만든 경우
            db.rollback()
            existing = _find_place_by_google_id(db, descriptor.google_place_id)
            if existing is None:
                raise
            return existing

        db.refresh(place)
        logger.info("Place created: id=%s google_place_id=%s", place.id, place.google_place_id)
        return place
    except SQLAlchemyError as exc:
        db.rollback()
        raise _db_failure("resolve_place", exc) from exc


def has_existing_review(db: Session, user_id: str, place_id: int) -> bool:
    try:
        review_id = db.scalars(
            select(DetailedReview.id).where(DetailedReview.user_id == user_id, DetailedReview.place_id == place_id)
        ).first()
    except SQLAlchemyError as exc:
        raise _db_failure("check_existing_review", exc) from exc
    return review_id is not None


def refresh_place_aggregate(db: Session, place: Place) -> None:
    """장소의 평균 점수와 리뷰 수를 상세 리뷰 기준으로 다시 계산합니다."""
    reviews = db.scalars(select(DetailedReview).where(DetailedReview.place_id == place.id)).all()
    place.total_reviews = len(reviews)
    place.rating = round(sum(r.overall_rating for r in reviews) / len(reviews), 1) if reviews else 0.0


async def prepare_photos(photos: Sequence[PhotoSource]) -> list[PreparedPhoto]:
    """원본 이미지는 미리 압축하고, 이미 호스팅된 URL은 그대로 둡니다.

    읽을 수 없거나 해상도가 너무 큰 이미지는 여기서 `ValidationError`로 거부됩니다.
    """
    prepared: list[PreparedPhoto] = []
    for photo in photos:
        if isinstance(photo, str):
            prepared.append(photo)
        else:
            prepared.append(await prepare_review_photo(photo))
    return prepared


async def materialize_photos(
    storage: PhotoStorage,
    photos: Sequence[PreparedPhoto],
    user_id: str,
    review_key: str,
) -> list[str]:
    """압축된 이미지는 업로드하고, 이미 호스팅된 URL은 그대로 사용합니다."""
    urls: list[str] = []
    for index, photo in enumerate(photos, start=1):
        if isinstance(photo, str):
            urls.append(photo)
        else:
            urls.append(await upload_review_photo(storage, photo, user_id, review_key, index))
    return urls


def _validate_photos(photos: Sequence[PhotoSource]) -> None:
    if len(photos) > MAX_PHOTOS_PER_REVIEW:
        raise ValidationError(f"Puedes subir hasta {MAX_PHOTOS_PER_REVIEW} fotos", field="photos")

    max_bytes = get_settings().PHOTO_MAX_UPLOAD_MB * 1024 * 1024
    for photo in photos:
        if isinstance(photo, PhotoUpload):
            validate_image_file(photo.filename, photo.content_type, photo.size, max_bytes=max_bytes)


def save_review(
    db: Session,
    draft: DetailedReviewDraft,
    user: UserTokenPayload,
    place: Place,
    photo_urls: Sequence[str],
) -> ReviewSubmissionResult:
    """리뷰 행 저장, 포인트 적립, 장소 집계 갱신을 한 트랜잭션으로 커밋합니다."""
    settings = get_settings()
    slots: list[str | None] = [*photo_urls, *[None] * (MAX_PHOTOS_PER_REVIEW - len(photo_urls))]

    try:
        existing_count = db.scalar(
            select(func.count()).select_from(DetailedReview).where(DetailedReview.place_id == place.id)
        )
        is_first_review = not existing_count

        review = DetailedReview(
            user_id=user.user_id,
            place_id=place.id,
            dish_name=draft.dish_name or None,
            comment=draft.comment or None,
            photo_1_url=slots[0],
            photo_2_url=slots[1],
            price_range=draft.price_range,
            restaurant_category=draft.restaurant_category,
            **{field: getattr(draft, field) for field in RATING_FIELDS},
        )
        db.add(review)
        try:
            db.flush()
        except IntegrityError as exc:
            db.rollback()
            logger.info("Duplicate review rejected by constraint: user_id=%s place_id=%s", user.user_id, place.id)
            raise DuplicateReviewError() from exc

        points = settings.REVIEW_POINTS + (settings.FIRST_REVIEW_BONUS if is_first_review else 0)
        award_points(db, user.user_id, points, email=user.email)

        if place.category is None:
            place.category = draft.restaurant_category
        if place.price_range is None:
            place.price_range = draft.price_range
        refresh_place_aggregate(db, place)

        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise _db_failure("insert_review", exc) from exc

    logger.info(
        "Detailed review created: review_id=%s user_id=%s place_id=%s photos=%d points=%d",
        review.id,
        user.user_id,
        place.id,
        len(photo_urls),
        points,
    )
    return ReviewSubmissionResult(
        review_id=review.id,
        place_id=place.id,
        points_earned=points,
        is_first_review=is_first_review,
    )


async def submit_detailed_review(
    db: Session,
    storage: PhotoStorage,
    draft: DetailedReviewDraft,
    user: UserTokenPayload | None,
    photos: Sequence[PhotoUpload] = (),
) -> ReviewSubmissionResult:
    """상세 리뷰를 저장하고 포인트를 적립합니다.

    사진 검증과 압축은 DB에 쓰기 전에 끝냅니다. 동기 DB 호출과 Pillow 작업은
    워커 스레드에서 실행해 이벤트 루프를 막지 않습니다.

    Raises:
        UnauthorizedError: 로그인한 사용자가 없는 경우.
        ValidationError: 장소 정보 누락, 사진 개수/형식 오류, 읽을 수 없는 사진.
        DuplicateReviewError: 같은 장소에 이미 리뷰가 있는 경우.
        UpstreamError: DB 호출 실패.
    """
    if user is None:
        raise UnauthorizedError("Usuario requerido para crear reseña")
    if not draft.place.google_place_id:
        raise ValidationError("Datos del lugar incompletos", field="place")

    sources: list[PhotoSource] = [*draft.photo_urls, *photos]
    _validate_photos(sources)
    prepared = await prepare_photos(sources)

    place = await asyncio.to_thread(resolve_place, db, draft.place)

    if await asyncio.to_thread(has_existing_review, db, user.user_id, place.id):
        logger.info("Duplicate review rejected: user_id=%s place_id=%s", user.user_id, place.id)
        raise DuplicateReviewError()

    review_key = f"review_{uuid.uuid4().hex[:12]}"
    photo_urls = await materialize_photos(storage, prepared, user.user_id, review_key)
    return await asyncio.to_thread(save_review, db, draft, user, place, photo_urls)


def get_review(db: Session, review_id: int) -> DetailedReview:
    review = db.get(DetailedReview, review_id)
    if review is None:
        raise NotFoundError("Reseña")
    return review


def list_place_reviews(db: Session, place_id: int) -> tuple[Place, list[DetailedReview]]:
    """장소와 해당 장소의 상세 리뷰를 최신순으로 반환합니다."""
    place = db.get(Place, place_id)
    if place is None:
        raise NotFoundError("Lugar")

    reviews = db.scalars(
        select(DetailedReview)
        .where(DetailedReview.place_id == place_id)
        .order_by(DetailedReview.created_at.desc(), DetailedReview.id.desc())
    ).all()
    return place, list(reviews)
