from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import logging

from app.db.base import get_db
from app.core.errors import bad_request, conflict, internal_error, not_found
from app.crud.post import count_followers
from app.models.follow import Follow
from app.models.user import User
from app.schemas.action import FollowRequest, FollowResponse
from app.services.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=FollowResponse, summary="팔로우")
def follow_user(
    request: FollowRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    다른 사용자를 팔로우합니다.

    - 대상 사용자가 없으면 404, 자기 자신이면 400, 이미 팔로우 중이면 409 오류를 반환합니다.
    """
    try:
        # 1. 팔로우 대상 사용자 확인
        target = db.query(User).filter(User.id == request.following_id).first()
        if not target:
            raise not_found("The specified user does not exist", error="User not found")

        # 2. 자기 자신 팔로우 방지
        if target.id == current_user.id:
            raise bad_request("Cannot follow yourself")

        # 3. 중복 팔로우 확인
        existing_follow = db.query(Follow).filter(
            Follow.follower_id == current_user.id,
            Follow.following_id == target.id
        ).first()
        if existing_follow:
            raise conflict("Already following this user")

        db.add(Follow(follower_id=current_user.id, following_id=target.id))
        db.commit()
        logger.info(f"팔로우 완료: {current_user.id} → {target.id}")

        return FollowResponse(
            message="Follow added successfully",
            following_id=target.id,
            followers_count=count_followers(db, target.id),
        )
    except HTTPException as e:
        raise e
    except IntegrityError:
        db.rollback()
        raise conflict("Already following this user")
    except Exception as e:
        db.rollback()
        logger.error(f"팔로우 중 오류 발생: {str(e)}")
        raise internal_error(f"팔로우 중 오류 발생: {str(e)}")


@router.delete("", response_model=FollowResponse, summary="언팔로우")
def unfollow_user(
    request: FollowRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    팔로우를 취소합니다.

    - 팔로우 관계가 없으면 404 오류를 반환합니다.
    """
    try:
        existing_follow = db.query(Follow).filter(
            Follow.follower_id == current_user.id,
            Follow.following_id == request.following_id
        ).first()
        if not existing_follow:
            raise not_found("Follow relationship not found")

        db.delete(existing_follow)
        db.commit()
        logger.info(f"언팔로우 완료: {current_user.id} → {request.following_id}")

        return FollowResponse(
            message="Follow removed successfully",
            following_id=request.following_id,
            followers_count=count_followers(db, request.following_id),
        )
    except HTTPException as e:
        raise e
    except Exception as e:
        db.rollback()
        logger.error(f"언팔로우 중 오류 발생: {str(e)}")
        raise internal_error(f"언팔로우 중 오류 발생: {str(e)}")
