from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session
import logging

from app.db.base import MAX_DB_ID, get_db
from app.core.errors import forbidden, internal_error, not_found
from app.crud import comment as comment_crud
from app.crud.post import get_post
from app.models.user import User
from app.schemas.action import ActionResponse
from app.schemas.comment import CommentCreate, CommentResponse
from app.schemas.user import UserForPost
from app.services.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=CommentResponse, status_code=201, summary="댓글 작성")
def create_comment(
    comment: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    게시물에 댓글을 작성합니다.

    - 내용은 앞뒤 공백을 제거한 뒤 1~2200자여야 합니다.
    - 게시물이 존재하지 않으면 404 오류를 반환합니다.
    """
    # 게시물 존재 여부 확인
    if not get_post(db, comment.post_id):
        raise not_found("The specified post does not exist", error="Post not found")

    try:
        db_comment = comment_crud.create_comment(
            db,
            post_id=comment.post_id,
            content=comment.content,
            user_id=current_user.id,
        )
    except Exception as e:
        db.rollback()
        logger.error(f"댓글 작성 중 오류 발생: {str(e)}")
        raise internal_error(f"댓글 작성 중 오류가 발생했습니다: {str(e)}")

    logger.info(f"댓글 작성 완료: 게시물 ID {comment.post_id}, 댓글 ID {db_comment.id}")

    return CommentResponse(
        id=db_comment.id,
        post_id=db_comment.post_id,
        user_id=db_comment.user_id,
        content=db_comment.content,
        created_at=db_comment.created_at,
        updated_at=db_comment.updated_at,
        user=UserForPost.model_validate(current_user),
    )


@router.delete("/{comment_id}", response_model=ActionResponse, summary="댓글 삭제")
def delete_comment(
    comment_id: int = Path(..., le=MAX_DB_ID),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    댓글을 삭제합니다.

    - 작성자만 자신의 댓글을 삭제할 수 있습니다.
    """
    db_comment = comment_crud.get_comment(db, comment_id)

    # 댓글이 존재하지 않는 경우
    if not db_comment:
        raise not_found("Comment not found")

    # 작성자 권한 확인
    if db_comment.user_id != current_user.id:
        raise forbidden("You can only delete your own comments")

    try:
        comment_crud.delete_comment(db, db_comment)
    except Exception as e:
        db.rollback()
        logger.error(f"댓글 삭제 중 오류 발생: {str(e)}")
        raise internal_error(f"댓글 삭제 중 오류가 발생했습니다: {str(e)}")

    return ActionResponse(message="Comment deleted successfully")
