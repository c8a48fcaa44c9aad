"""리뷰/장소/사용자 테이블에 접근하는 SQLAlchemy 엔진과 세션."""

from collections.abc import Iterator
from functools import lru_cache

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import get_settings


def _engine_options(database_url: str) -> dict:
    # SQLite 파일 DB는 요청 스레드와 to_thread 워커가 같은 연결을 공유한다
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


@lru_cache
def get_engine() -> Engine:
    """설정된 `DATABASE_URL`로 엔진을 한 번만 만든다."""
    database_url = get_settings().DATABASE_URL
    if not database_url:
        raise RuntimeError("DATABASE_URL is not configured.")
    return create_engine(database_url, **_engine_options(database_url))


@lru_cache
def get_session_factory() -> sessionmaker[Session]:
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def get_db() -> Iterator[Session]:
    """요청마다 세션을 열고, 응답 후 닫는 `FastAPI` 의존성.

    커밋은 리뷰 작성 워크플로우가 단계별로 직접 수행합니다.
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
