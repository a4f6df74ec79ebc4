from sqlalchemy import Column, Integer, DateTime, ForeignKey, PrimaryKeyConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base

class Follow(Base):
    __tablename__ = "follows"

    follower_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    following_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        PrimaryKeyConstraint('follower_id', 'following_id'),
        CheckConstraint('follower_id <> following_id', name='ck_follows_no_self_follow'),
    )

    follower = relationship("User", foreign_keys=[follower_id], back_populates="following")
    following_user = relationship("User", foreign_keys=[following_id], back_populates="followers")
