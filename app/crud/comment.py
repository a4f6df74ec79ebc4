from typing import Optional

from sqlalchemy.orm import Session, joinedload
from app.models.comment import Comment

def create_comment(db: Session, post_id: int, content: str, user_id: int) -> Comment:
    db_comment = Comment(post_id=post_id, content=content, user_id=user_id)
    db.add(db_comment)
    db.commit()
    db.refresh(db_comment)
    return db_comment

def get_comment(db: Session, comment_id: int) -> Optional[Comment]:
    return (
        db.query(Comment)
        .options(joinedload(Comment.user))  # 사용자 정보 함께 로드
        .filter(Comment.id == comment_id)
        .first()
    )

def delete_comment(db: Session, db_comment: Comment) -> None:
    db.delete(db_comment)
    db.commit()
