"""상세 리뷰 작성/조회 API."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from app.api.dependencies import get_optional_user, get_storage
from app.core.errors import ValidationError
from app.core.logger import get_logger
from app.database import get_db
from app.schemas.jwt import UserTokenPayload
from app.schemas.review import DetailedReviewDraft, DetailedReviewResponse, ReviewSubmissionResult
from app.services.photo_service import PhotoUpload
from app.services.photo_storage import PhotoStorage
from app.services.review_service import get_review, submit_detailed_review

router = APIRouter(prefix="/api/reviews", tags=["reviews"])
logger = get_logger(__name__)


def _parse_draft(payload: str) -> DetailedReviewDraft:
    try:
        return DetailedReviewDraft.model_validate_json(payload)
    except PydanticValidationError as exc:
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        message = f"Datos de la reseña inválidos: {field}" if field else "Datos de la reseña inválidos"
        raise ValidationError(message, field=field) from exc


@router.post("/detailed", response_model=ReviewSubmissionResult, status_code=status.HTTP_201_CREATED)
async def create_detailed_review(
    payload: str = Form(..., description="DetailedReviewDraft JSON"),
    photos: list[UploadFile] = File(default=[], description="리뷰 사진 (최대 2장)"),
    db: Session = Depends(get_db),  # noqa: B008
    storage: PhotoStorage = Depends(get_storage),
    user: UserTokenPayload | None = Depends(get_optional_user),
) -> ReviewSubmissionResult:
    """상세 리뷰를 작성합니다. 사진은 압축 후 저장소에 업로드됩니다."""
    draft = _parse_draft(payload)
    uploads = [
        PhotoUpload(
            filename=photo.filename or "",
            content_type=photo.content_type or "",
            data=await photo.read(),
        )
        for photo in photos
    ]
    return await submit_detailed_review(db, storage, draft, user, uploads)


@router.get("/{review_id}", response_model=DetailedReviewResponse)
def read_review(review_id: int, db: Session = Depends(get_db)) -> DetailedReviewResponse:  # noqa: B008
    """상세 리뷰 한 건을 조회합니다."""
    return DetailedReviewResponse.model_validate(get_review(db, review_id))
