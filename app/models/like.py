from sqlalchemy import Column, Integer, DateTime, ForeignKey, PrimaryKeyConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base

class Like(Base):
    __tablename__ = "likes"

    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    post_id = Column(Integer, ForeignKey('posts.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # 복합 기본 키 설정 (같은 게시물 중복 좋아요 방지)
    __table_args__ = (PrimaryKeyConstraint('user_id', 'post_id'),)

    user = relationship("User", back_populates="likes")
    post = relationship("Post", back_populates="likes")
