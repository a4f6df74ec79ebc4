from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base
from .post import Post # 관계 대상 모델 임포트
from .like import Like
from .comment import Comment
from .follow import Follow

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    identity_id = Column(String(255), unique=True, nullable=False, index=True)  # 외부 인증 서비스의 사용자 식별자
    name = Column(String(255), nullable=False)
    profile_image_url = Column(String(1024), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # 관계 설정
    posts = relationship("Post", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    comments = relationship("Comment", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    likes = relationship("Like", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)

    # 내가 팔로우하는 관계 / 나를 팔로우하는 관계
    following = relationship(
        "Follow",
        foreign_keys="Follow.follower_id",
        back_populates="follower",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    followers = relationship(
        "Follow",
        foreign_keys="Follow.following_id",
        back_populates="following_user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
