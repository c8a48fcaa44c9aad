# app/models/base.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """모든 SQLAlchemy 모델의 기반이 되는 선언적 기본 클래스.

    `places`, `detailed_reviews`, `users` 테이블은 외부 호스팅 DB가 소유하며,
    이 프로젝트의 모델은 해당 테이블의 컬럼 계약을 그대로 반영합니다.
    """

    pass
