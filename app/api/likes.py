from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import logging

from app.db.base import get_db
from app.core.errors import conflict, internal_error, not_found
from app.crud.post import count_likes, get_post
from app.models.like import Like
from app.models.user import User
from app.schemas.action import LikeRequest, LikeResponse
from app.services.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=LikeResponse, summary="게시물 좋아요 추가")
def like_post(
    request: LikeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    게시물에 좋아요를 추가합니다.

    - 게시물이 존재하지 않으면 404 오류를 반환합니다.
    - 이미 좋아요를 누른 게시물이면 409 오류를 반환합니다.
    - 응답의 like_count로 클라이언트의 낙관적 업데이트 값을 보정할 수 있습니다.
    """
    try:
        # 1. 게시물 존재 확인
        if not get_post(db, request.post_id):
            raise not_found("The specified post does not exist", error="Post not found")

        # 2. 이미 좋아요를 눌렀는지 확인
        existing_like = db.query(Like).filter(
            Like.user_id == current_user.id,
            Like.post_id == request.post_id
        ).first()
        if existing_like:
            raise conflict("Already liked this post")

        # 3. 좋아요 저장 (동시 요청은 기본 키 제약으로 거부됨)
        db.add(Like(user_id=current_user.id, post_id=request.post_id))
        db.commit()

        return LikeResponse(
            message="Like added successfully",
            post_id=request.post_id,
            like_count=count_likes(db, request.post_id),
        )
    except HTTPException as e:
        raise e
    except IntegrityError:
        db.rollback()
        raise conflict("Already liked this post")
    except Exception as e:
        db.rollback()
        logger.error(f"좋아요 추가 중 오류 발생: {str(e)}")
        raise internal_error(f"좋아요 추가 중 오류 발생: {str(e)}")


@router.delete("", response_model=LikeResponse, summary="게시물 좋아요 취소")
def unlike_post(
    request: LikeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    게시물 좋아요를 취소합니다.

    - 좋아요 기록이 없으면 404 오류를 반환합니다.
    """
    try:
        like_to_delete = db.query(Like).filter(
            Like.user_id == current_user.id,
            Like.post_id == request.post_id
        ).first()
        if not like_to_delete:
            raise not_found("Like not found")

        db.delete(like_to_delete)
        db.commit()

        return LikeResponse(
            message="Like removed successfully",
            post_id=request.post_id,
            like_count=count_likes(db, request.post_id),
        )
    except HTTPException as e:
        raise e
    except Exception as e:
        db.rollback()
        logger.error(f"좋아요 취소 중 오류 발생: {str(e)}")
        raise internal_error(f"좋아요 취소 중 오류 발생: {str(e)}")
