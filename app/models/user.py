from sqlalchemy import Column, Integer, String, Text

from app.models.base import Base


class User(Base):
    """인증 제공자의 사용자에 대응하는 프로필/포인트 정보.

    Attributes:
        id (str): 인증 제공자가 발급한 사용자 ID (토큰의 `sub`).
        email (str): 사용자 이메일.
        full_name (str): 표시 이름.
        avatar_url (str): 프로필 이미지 URL.
        points (int): 리뷰 작성으로 누적된 포인트.
    """

    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    email = Column(String(255), nullable=True)
    full_name = Column(String(255), nullable=True)
    avatar_url = Column(Text, nullable=True)
    points = Column(Integer, nullable=False, default=0)
